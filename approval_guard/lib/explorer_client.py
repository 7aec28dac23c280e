"""
Block explorer client for transaction-history based token discovery.

Speaks the Etherscan-compatible account API (BaseScan by default) and
returns the token contracts an address has interacted with or holds.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .http_client import APIError, RateLimitError, RetryingHttpClient

logger = logging.getLogger(__name__)

DEFAULT_EXPLORER_URL = "https://api.basescan.org/api"

# Explorer replies with status "0" and one of these messages for empty results
EMPTY_RESULT_MESSAGES = ("no transactions found", "no records found", "no token found")


@dataclass
class TokenTransfer:
    """One historical ERC-20 transfer record."""

    contract_address: str
    symbol: str
    name: str
    decimals: str  # As reported by the explorer, may be empty


@dataclass
class TokenHolding:
    """One current ERC-20 holding reported by the explorer."""

    contract_address: str
    symbol: str
    name: str
    quantity: int
    decimals: str


class ExplorerAPIError(APIError):
    """Exception raised for explorer API errors."""

    pass


class ExplorerRateLimitError(ExplorerAPIError):
    """Exception raised when the explorer's rate limit is exhausted."""

    pass


class ExplorerClient(RetryingHttpClient):
    """Client for the explorer's account module."""

    def __init__(self, api_key: str = "", base_url: str = DEFAULT_EXPLORER_URL, **kwargs):
        """
        Initialize the explorer client.

        Args:
            api_key: Explorer API key (redacted from error messages)
            base_url: Explorer API endpoint
            **kwargs: Retry settings forwarded to RetryingHttpClient
        """
        super().__init__(secret=api_key or None, **kwargs)
        self.api_key = api_key
        self.base_url = base_url

    def _get(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Make a GET request against the account module.

        Returns:
            The 'result' list, empty when the explorer reports no records

        Raises:
            ExplorerRateLimitError: When the explorer reports its rate limit
            ExplorerAPIError: For other explorer errors
        """
        query = dict(params)
        if self.api_key:
            query["apikey"] = self.api_key

        try:
            response = self._execute_with_retry(
                lambda attempt_timeout: self.session.get(self.base_url, params=query, timeout=attempt_timeout)
            )
            data = response.json()
        except RateLimitError as e:
            raise ExplorerRateLimitError(str(e), status_code=429) from e
        except APIError as e:
            raise ExplorerAPIError(str(e), status_code=e.status_code) from e
        except ValueError as e:
            raise ExplorerAPIError(f"Invalid explorer response: {e}") from e
        if not isinstance(data, dict):
            raise ExplorerAPIError(f"Invalid explorer response: expected an object, got {type(data).__name__}")

        result = data.get("result")
        if str(data.get("status")) == "1" and isinstance(result, list):
            skipped = sum(1 for row in result if not isinstance(row, dict))
            if skipped:
                logger.debug("Skipped %d malformed explorer rows", skipped)
            return [row for row in result if isinstance(row, dict)]

        message = str(data.get("message", ""))
        detail = result if isinstance(result, str) else message
        if message.lower() in EMPTY_RESULT_MESSAGES or (isinstance(result, list) and not result):
            return []
        if "rate limit" in detail.lower():
            raise ExplorerRateLimitError(f"Explorer rate limit: {detail}", status_code=429)
        raise ExplorerAPIError(self._sanitize_error_message(f"Explorer error: {detail or message}"))

    def get_token_transfers(self, address: str) -> List[TokenTransfer]:
        """
        Get the ERC-20 transfer history of an address, newest first.

        Args:
            address: Account address

        Returns:
            List of TokenTransfer records (possibly empty)
        """
        rows = self._get(
            {
                "module": "account",
                "action": "tokentx",
                "address": address,
                "startblock": 0,
                "endblock": 99999999,
                "sort": "desc",
            }
        )
        return [
            TokenTransfer(
                contract_address=str(row["contractAddress"]),
                symbol=str(row.get("tokenSymbol") or "UNKNOWN"),
                name=str(row.get("tokenName") or "Unknown Token"),
                decimals=str(row.get("tokenDecimal") or ""),
            )
            for row in rows
            if row.get("contractAddress")
        ]

    def get_address_token_balances(self, address: str, page_size: int = 100) -> List[TokenHolding]:
        """
        Get current ERC-20 holdings of an address (first page only).

        Args:
            address: Account address
            page_size: Maximum holdings to return

        Returns:
            List of TokenHolding records (possibly empty)
        """
        rows = self._get(
            {
                "module": "account",
                "action": "addresstokenbalance",
                "address": address,
                "page": 1,
                "offset": page_size,
            }
        )
        holdings: List[TokenHolding] = []
        for row in rows:
            if not row.get("TokenAddress"):
                continue
            holdings.append(
                TokenHolding(
                    contract_address=str(row["TokenAddress"]),
                    symbol=str(row.get("TokenSymbol") or "UNKNOWN"),
                    name=str(row.get("TokenName") or "Unknown Token"),
                    quantity=_parse_int(row.get("TokenQuantity")),
                    decimals=str(row.get("TokenDivisor") or ""),
                )
            )
        return holdings


def _parse_int(value: Optional[str]) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0
