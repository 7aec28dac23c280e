"""
Pytest configuration and shared fixtures for approval scanner tests.

The engine is exercised against in-memory fakes of the batched reader,
the explorer and the wallet.
"""

from decimal import Decimal
from typing import Dict, List, Optional, Set, Tuple

import pytest

from approval_guard.lib.batch_reader import BaseBatchReader, BatchCall, CallResult
from approval_guard.lib.catalog import ReferenceCatalog
from approval_guard.lib.explorer_client import TokenHolding, TokenTransfer
from approval_guard.lib.models import (
    Approval,
    DiscoveryMethod,
    OwnedToken,
    RiskLevel,
    SpenderCategory,
    SpenderDescriptor,
    TokenCategory,
    TokenDescriptor,
    make_approval_id,
)
from approval_guard.lib.wallet import BaseWallet, WalletError

OWNER = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"

USDC = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
WETH = "0x4200000000000000000000000000000000000006"
USDBC = "0xd9aAEc86B65D86f6A7B5B1b0c42FFA531710b6CA"

ROUTER = "0x2626664c2603336E57B271c5C0b26F421741e481"
LENDING_POOL = "0xA238Dd80C259a72e81d7e4664a9801593F98d1c5"
BRIDGE = "0x3154Cf16ccdb4C6d922629664174b904d80F2C35"


class FakeBatchReader(BaseBatchReader):
    """
    In-memory batched reader.

    balances are keyed by lower-cased token address, allowances by
    (token, spender) lower-cased pairs. Anything not set reads as zero.
    """

    def __init__(self):
        self.balances: Dict[str, int] = {}
        self.allowances: Dict[Tuple[str, str], int] = {}
        self.failing_calls: Set[Tuple[str, ...]] = set()
        # Per-function queue of batch-level errors; None lets a read through
        self.errors: Dict[str, List[Optional[Exception]]] = {}
        self.requests: List[List[BatchCall]] = []
        self.timeouts: List[Optional[float]] = []

    def set_balance(self, token: str, balance: int) -> None:
        self.balances[token.lower()] = balance

    def set_allowance(self, token: str, spender: str, amount: int) -> None:
        self.allowances[(token.lower(), spender.lower())] = amount

    def fail_call(self, function: str, *addresses: str) -> None:
        self.failing_calls.add((function,) + tuple(a.lower() for a in addresses))

    def read(self, calls, timeout=None):
        calls = list(calls)
        self.requests.append(calls)
        self.timeouts.append(timeout)
        if calls:
            queue = self.errors.get(calls[0].function)
            if queue:
                error = queue.pop(0)
                if error is not None:
                    raise error
        return [self._result(call) for call in calls]

    def _result(self, call: BatchCall) -> CallResult:
        token = call.contract_address.lower()
        if call.function == "balanceOf":
            if ("balanceOf", token) in self.failing_calls:
                return CallResult.failed("call reverted")
            return CallResult.ok(self.balances.get(token, 0))
        if call.function == "allowance":
            spender = call.args[1].lower()
            if ("allowance", token, spender) in self.failing_calls:
                return CallResult.failed("call reverted")
            return CallResult.ok(self.allowances.get((token, spender), 0))
        return CallResult.failed(f"unsupported function {call.function}")

    def calls_for(self, function: str) -> List[BatchCall]:
        return [c for batch in self.requests for c in batch if c.function == function]


class FakeExplorer:
    """Explorer stand-in returning canned records or raising."""

    def __init__(self, transfers=None, holdings=None, transfer_error=None, holdings_error=None):
        self.transfers: List[TokenTransfer] = transfers or []
        self.holdings: List[TokenHolding] = holdings or []
        self.transfer_error = transfer_error
        self.holdings_error = holdings_error
        self.queried: List[str] = []

    def get_token_transfers(self, address):
        self.queried.append(address)
        if self.transfer_error is not None:
            raise self.transfer_error
        return self.transfers

    def get_address_token_balances(self, address, page_size=100):
        if self.holdings_error is not None:
            raise self.holdings_error
        return self.holdings


class FakeWallet(BaseWallet):
    """
    Wallet stand-in.

    When a reader is attached, a confirmed transaction clears the matching
    allowance in it, as the chain would.
    """

    def __init__(self, reader: Optional[FakeBatchReader] = None):
        self.reader = reader
        self.submitted: List[Tuple[str, str, int]] = []
        self.submit_error: Optional[Exception] = None
        self.confirm_error: Optional[Exception] = None
        self.confirm_result = True
        self.clears_allowance = True
        self.on_submit = None
        self.tx_hash = "0x" + "ab" * 32

    def submit_approve(self, token_address, spender_address, amount=0):
        self.submitted.append((token_address, spender_address, amount))
        if self.on_submit is not None:
            self.on_submit()
        if self.submit_error is not None:
            raise self.submit_error
        return self.tx_hash

    def await_confirmation(self, tx_hash):
        if self.confirm_error is not None:
            raise self.confirm_error
        if self.confirm_result and self.clears_allowance and self.reader is not None:
            token, spender, amount = self.submitted[-1]
            self.reader.set_allowance(token, spender, amount)
        return self.confirm_result


def make_token(address, symbol="TKN", decimals=18, category=TokenCategory.OTHER, is_native=False):
    return TokenDescriptor(
        address=address,
        symbol=symbol,
        name=f"{symbol} Token",
        decimals=decimals,
        category=category,
        is_native=is_native,
    )


def make_spender(address, name, risk, category=SpenderCategory.DEX, protocol=None, is_native=False):
    return SpenderDescriptor(
        address=address,
        name=name,
        protocol=protocol or name,
        category=category,
        risk=risk,
        is_native=is_native,
    )


def make_owned(token: TokenDescriptor, balance=1, method=DiscoveryMethod.KNOWN) -> OwnedToken:
    owned = OwnedToken(token, method)
    owned.settle_balance(balance, str(balance))
    return owned


def make_approval(owned: OwnedToken, spender: SpenderDescriptor, allowance=100, value="100", unlimited=False):
    return Approval(
        id=make_approval_id(owned.address, spender.address),
        token=owned,
        spender=spender,
        allowance=allowance,
        allowance_formatted="Unlimited" if unlimited else str(allowance),
        is_unlimited=unlimited,
        risk_level=spender.risk,
        estimated_value=Decimal(value),
    )


@pytest.fixture
def owner():
    """Sample wallet address for testing."""
    return OWNER


@pytest.fixture
def usdc():
    return make_token(USDC, "USDC", 6, TokenCategory.STABLECOIN, is_native=True)


@pytest.fixture
def weth():
    return make_token(WETH, "WETH", 18, TokenCategory.NATIVE, is_native=True)


@pytest.fixture
def usdbc():
    return make_token(USDBC, "USDbC", 6, TokenCategory.BRIDGED)


@pytest.fixture
def router():
    return make_spender(ROUTER, "Uniswap V3 Router", RiskLevel.LOW, SpenderCategory.DEX, "Uniswap")


@pytest.fixture
def lending_pool():
    return make_spender(
        LENDING_POOL, "Aave Pool", RiskLevel.MEDIUM, SpenderCategory.LENDING, "Aave", is_native=True
    )


@pytest.fixture
def bridge():
    return make_spender(BRIDGE, "Token Bridge", RiskLevel.HIGH, SpenderCategory.BRIDGE, "Bridge")


@pytest.fixture
def catalog(usdc, weth, usdbc, router, lending_pool, bridge):
    """Three tokens, three spenders (one per risk level)."""
    return ReferenceCatalog(tokens=[usdc, weth, usdbc], spenders=[router, lending_pool, bridge])


@pytest.fixture
def fake_reader():
    return FakeBatchReader()


@pytest.fixture
def fake_wallet(fake_reader):
    return FakeWallet(fake_reader)
