"""
Wallet capability for submitting revocations.

BaseWallet is the interface the revoker depends on: submit an approve call,
wait for it to confirm, and estimate what it will cost. JsonRpcWallet
implements it against a node that manages the signing account
(eth_sendTransaction), e.g. a local dev node or a signer proxy.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from .abi import bytes_to_hex, checksum, encode_call
from .http_client import APIError
from .models import GasEstimate
from .rpc_client import JsonRpcClient

logger = logging.getLogger(__name__)

# Used when the node cannot estimate the revoke transaction
FALLBACK_GAS_LIMIT = 50_000
FALLBACK_GAS_PRICE = 1_000_000  # 0.001 gwei in wei
GAS_BUFFER_PERCENT = 20

DEFAULT_POLL_INTERVAL = 2.0  # seconds
DEFAULT_CONFIRMATION_TIMEOUT = 120.0  # seconds


class WalletError(Exception):
    """Raised when a transaction cannot be submitted or confirmed."""

    pass


def build_approve_tx(sender: str, token_address: str, spender_address: str, amount: int = 0) -> Dict[str, str]:
    """Transaction object for token.approve(spender, amount)."""
    data = encode_call("approve", (spender_address, amount))
    return {
        "from": checksum(sender),
        "to": checksum(token_address),
        "data": bytes_to_hex(data),
    }


def parse_receipt_status(receipt: Dict[str, Any]) -> int:
    """
    Read the status field of a transaction receipt.

    Raises:
        WalletError: If the status is missing or not a hex quantity
    """
    status = receipt.get("status")
    if not isinstance(status, str):
        raise WalletError(f"Receipt has no usable status: {status!r}")
    try:
        return int(status, 16)
    except ValueError as e:
        raise WalletError(f"Receipt has no usable status: {status!r}") from e


class BaseWallet(ABC):
    """Abstract state-change capability."""

    @abstractmethod
    def submit_approve(self, token_address: str, spender_address: str, amount: int = 0) -> str:
        """
        Submit approve(spender, amount) on the token contract.

        Returns:
            Transaction hash

        Raises:
            WalletError: If signing or submission failed
        """
        pass

    @abstractmethod
    def await_confirmation(self, tx_hash: str) -> bool:
        """
        Wait until the transaction is included.

        Returns:
            True if it succeeded, False if it reverted

        Raises:
            WalletError: If the wait failed or exceeded its bound
        """
        pass

    def estimate_revoke_gas(self, token_address: str, spender_address: str) -> GasEstimate:
        return GasEstimate(FALLBACK_GAS_LIMIT, FALLBACK_GAS_PRICE, is_fallback=True)


class JsonRpcWallet(BaseWallet):
    """Wallet backed by a node-managed account."""

    def __init__(
        self,
        client: JsonRpcClient,
        account: Optional[str] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self._account = account
        self.poll_interval = poll_interval
        self.confirmation_timeout = confirmation_timeout
        self.sleep = sleep
        self.clock = clock

    @property
    def account(self) -> str:
        """Sending account, defaulting to the node's first account."""
        if self._account is None:
            try:
                accounts = self.client.accounts()
            except APIError as e:
                raise WalletError(f"Cannot list node accounts: {e}") from e
            if not accounts:
                raise WalletError("Node manages no accounts; pass an explicit account")
            self._account = accounts[0]
        return self._account

    def submit_approve(self, token_address: str, spender_address: str, amount: int = 0) -> str:
        tx = build_approve_tx(self.account, token_address, spender_address, amount)
        try:
            tx_hash = self.client.send_transaction(tx)
        except APIError as e:
            raise WalletError(f"Transaction rejected: {e}") from e
        if not tx_hash or not isinstance(tx_hash, str):
            raise WalletError(f"Node returned no transaction hash: {tx_hash!r}")
        logger.info("Submitted approve(%s, %d) on %s: %s", spender_address, amount, token_address, tx_hash)
        return tx_hash

    def await_confirmation(self, tx_hash: str) -> bool:
        deadline = self.clock() + self.confirmation_timeout
        while True:
            try:
                receipt = self.client.get_transaction_receipt(tx_hash)
            except APIError as e:
                raise WalletError(f"Receipt lookup failed: {e}") from e
            if receipt is not None:
                status = parse_receipt_status(receipt)
                logger.info("Transaction %s included with status %d", tx_hash, status)
                return status == 1
            if self.clock() >= deadline:
                raise WalletError(f"Transaction {tx_hash} not confirmed after {self.confirmation_timeout}s")
            self.sleep(self.poll_interval)

    def estimate_revoke_gas(self, token_address: str, spender_address: str) -> GasEstimate:
        """
        Estimate gas for approve(spender, 0), plus a 20% buffer.

        Falls back to fixed constants when the node cannot estimate.
        """
        try:
            tx = build_approve_tx(self.account, token_address, spender_address, 0)
            gas = self.client.estimate_gas(tx)
            gas_price = self.client.gas_price()
        except (APIError, WalletError, ValueError) as e:
            logger.warning("Gas estimation failed, using fallback: %s", e)
            return super().estimate_revoke_gas(token_address, spender_address)
        return GasEstimate(gas * (100 + GAS_BUFFER_PERCENT) // 100, gas_price)
