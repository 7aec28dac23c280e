"""
JSON-RPC client for a single EVM chain.

Wraps the handful of node methods the scanner and revoker need: read-only
calls, gas estimation, transaction submission and receipt lookup.
"""

from typing import Any, Dict, List, Optional

from .http_client import APIError, RetryingHttpClient

DEFAULT_RPC_URL = "https://mainnet.base.org"
BASE_CHAIN_ID = 8453


class RPCError(APIError):
    """Exception raised for JSON-RPC error responses."""

    pass


class JsonRpcClient(RetryingHttpClient):
    """
    JSON-RPC client with automatic retry handling.

    All node interactions go through this class, which handles request
    serialization, retries and error translation.
    """

    def __init__(self, url: str = DEFAULT_RPC_URL, chain_id: int = BASE_CHAIN_ID, **kwargs):
        """
        Initialize the client.

        Args:
            url: JSON-RPC endpoint URL
            chain_id: Expected chain id of the endpoint
            **kwargs: Retry settings forwarded to RetryingHttpClient
        """
        super().__init__(**kwargs)
        self.url = url
        self.chain_id = chain_id
        self._request_id = 0

    def request(self, method: str, params: List[Any], timeout: Optional[float] = None) -> Any:
        """
        Make a JSON-RPC request with automatic retry and exponential backoff.

        Args:
            method: JSON-RPC method name
            params: Method parameters
            timeout: Wall-clock bound in seconds covering retries

        Returns:
            The 'result' field from the JSON-RPC response

        Raises:
            RPCError: For JSON-RPC error responses
            APIError: For transport errors
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": self._request_id,
        }
        response = self._execute_with_retry(
            lambda attempt_timeout: self.session.post(self.url, json=payload, timeout=attempt_timeout),
            budget=timeout,
        )
        try:
            data = response.json()
        except ValueError as e:
            raise APIError(f"Invalid JSON-RPC response: {e}") from e
        if not isinstance(data, dict):
            raise APIError(f"Invalid JSON-RPC response: expected an object, got {type(data).__name__}")

        error = data.get("error")
        if error:
            if isinstance(error, dict):
                raise RPCError(f"RPC error: {error.get('message', error)}", status_code=error.get("code"))
            raise RPCError(f"RPC error: {error}")

        return data.get("result")

    def _quantity(self, method: str, value: Any) -> int:
        """Parse a hex quantity returned by method."""
        if not isinstance(value, str):
            raise APIError(f"{method} returned {value!r}, expected a hex quantity")
        try:
            return int(value, 16)
        except ValueError as e:
            raise APIError(f"{method} returned {value!r}, expected a hex quantity") from e

    def get_chain_id(self) -> int:
        return self._quantity("eth_chainId", self.request("eth_chainId", []))

    def eth_call(self, to: str, data: str, timeout: Optional[float] = None) -> str:
        """
        Perform a call without creating a transaction.

        Args:
            to: Contract address
            data: Hex-encoded call data (0x-prefixed)
            timeout: Wall-clock bound in seconds covering retries

        Returns:
            Raw hex return data
        """
        result = self.request("eth_call", [{"to": to, "data": data}, "latest"], timeout=timeout)
        if result is not None and not isinstance(result, str):
            raise APIError(f"eth_call returned {type(result).__name__}, expected hex data")
        return result

    def gas_price(self) -> int:
        return self._quantity("eth_gasPrice", self.request("eth_gasPrice", []))

    def estimate_gas(self, tx: Dict[str, str]) -> int:
        return self._quantity("eth_estimateGas", self.request("eth_estimateGas", [tx]))

    def accounts(self) -> List[str]:
        accounts = self.request("eth_accounts", []) or []
        if not isinstance(accounts, list):
            raise APIError(f"eth_accounts returned {accounts!r}, expected a list")
        return accounts

    def send_transaction(self, tx: Dict[str, str]) -> str:
        """Submit a transaction for signing by the node-managed account."""
        return self.request("eth_sendTransaction", [tx])

    def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        """Return the receipt, or None while the transaction is pending."""
        receipt = self.request("eth_getTransactionReceipt", [tx_hash])
        if receipt is not None and not isinstance(receipt, dict):
            raise APIError(f"eth_getTransactionReceipt returned {receipt!r}, expected an object")
        return receipt
