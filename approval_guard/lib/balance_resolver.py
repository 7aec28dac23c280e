"""
Balance resolution for candidate tokens.

Candidates are the catalog tokens plus any tokens the explorer reports for
the owner (transfer history and current holdings). Balances for all
candidates are read in one batched read; the owned subset is every
candidate with a non-zero balance.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from eth_utils import is_hex_address

from .batch_reader import BaseBatchReader, BatchCall
from .catalog import ReferenceCatalog
from .explorer_client import ExplorerClient
from .http_client import APIError
from .models import DiscoveryMethod, OwnedToken, TokenCategory, TokenDescriptor, normalize_address
from .units import format_quantity

logger = logging.getLogger(__name__)

DEFAULT_DECIMALS = 18

# Symbol patterns for tokens missing from the catalog
SYMBOL_CATEGORIES = {
    TokenCategory.STABLECOIN: {"USDC", "USDT", "DAI", "DOLA", "EURC", "USDBC"},
    TokenCategory.NATIVE: {"WETH", "ETH", "CBETH", "CBBTC"},
    TokenCategory.MEME: {"DEGEN", "BRETT", "TOSHI", "HIGHER"},
    TokenCategory.DEFI: {"AERO", "WELL", "BSWAP", "SEAM"},
}


def parse_decimals(value: Optional[str]) -> int:
    """Parse an explorer decimals string, defaulting to 18."""
    try:
        decimals = int(value)
    except (TypeError, ValueError):
        return DEFAULT_DECIMALS
    return decimals if decimals >= 0 else DEFAULT_DECIMALS


def categorize_token(catalog: ReferenceCatalog, address: str, symbol: str) -> TokenCategory:
    """
    Categorize a token, preferring its catalog entry.

    Args:
        catalog: Reference catalog
        address: Token contract address
        symbol: Token symbol as reported by the explorer

    Returns:
        The catalog category, else a category inferred from the symbol
    """
    known = catalog.token_by_address(address)
    if known is not None:
        return known.category

    upper = (symbol or "").upper()
    for category, symbols in SYMBOL_CATEGORIES.items():
        if upper in symbols:
            return category
    return TokenCategory.OTHER


@dataclass
class BalanceReport:
    """Candidate tokens with settled balances."""

    candidates: List[OwnedToken] = field(default_factory=list)
    discovery_errors: List[str] = field(default_factory=list)

    @property
    def owned(self) -> List[OwnedToken]:
        return [t for t in self.candidates if t.has_balance]


class BalanceResolver:
    """Determines which candidate tokens the owner currently holds."""

    def __init__(
        self,
        reader: BaseBatchReader,
        catalog: ReferenceCatalog,
        explorer: Optional[ExplorerClient] = None,
    ):
        self.reader = reader
        self.catalog = catalog
        self.explorer = explorer

    def discover_candidates(self, owner: str) -> BalanceReport:
        """
        Merge catalog tokens with explorer-discovered tokens.

        Tokens are deduplicated by lower-cased address; the catalog entry
        wins, then the first transfer record, then holdings. Explorer
        failures are logged and recorded but never raised.

        Args:
            owner: Account address

        Returns:
            BalanceReport with unsettled candidates
        """
        report = BalanceReport()
        candidates: Dict[str, OwnedToken] = {}

        for token in self.catalog.tokens:
            candidates.setdefault(token.key, OwnedToken(token, DiscoveryMethod.KNOWN))

        if self.explorer is None:
            report.candidates = list(candidates.values())
            return report

        try:
            transfers = self.explorer.get_token_transfers(owner)
        except APIError as e:
            logger.warning("Transfer history unavailable, using catalog only: %s", e)
            report.discovery_errors.append(f"transfer history: {e}")
            transfers = []

        added = 0
        for transfer in transfers:
            if self._add_discovered(
                candidates,
                transfer.contract_address,
                transfer.symbol,
                transfer.name,
                transfer.decimals,
                DiscoveryMethod.TRANSACTION,
            ):
                added += 1
        logger.info("Discovered %d tokens from transfer history", added)

        try:
            holdings = self.explorer.get_address_token_balances(owner)
        except APIError as e:
            logger.warning("Holdings lookup unavailable: %s", e)
            report.discovery_errors.append(f"holdings: {e}")
            holdings = []

        for holding in holdings:
            self._add_discovered(
                candidates,
                holding.contract_address,
                holding.symbol,
                holding.name,
                holding.decimals,
                DiscoveryMethod.BALANCE,
            )

        report.candidates = list(candidates.values())
        return report

    def _add_discovered(
        self,
        candidates: Dict[str, OwnedToken],
        address: str,
        symbol: str,
        name: str,
        decimals: str,
        method: DiscoveryMethod,
    ) -> bool:
        if not is_hex_address(address):
            logger.debug("Ignoring invalid token address %r", address)
            return False
        key = normalize_address(address)
        if key in candidates:
            return False
        known = self.catalog.token_by_address(address)
        descriptor = TokenDescriptor(
            address=address,
            symbol=symbol,
            name=name,
            decimals=parse_decimals(decimals),
            category=categorize_token(self.catalog, address, symbol),
            is_native=known.is_native if known else False,
        )
        candidates[key] = OwnedToken(descriptor, method)
        return True

    def read_balances(self, owner: str, candidates: List[OwnedToken]) -> None:
        """
        Settle the balance of every candidate with one batched read.

        A failed per-token call counts as a zero balance.

        Raises:
            BatchReadError: If the batched read failed as a whole
        """
        if not candidates:
            return
        calls = [BatchCall(t.address, "balanceOf", (owner,)) for t in candidates]
        results = self.reader.read(calls)
        if len(results) != len(calls):
            raise ValueError(f"Expected {len(calls)} balance results, got {len(results)}")

        for token, result in zip(candidates, results):
            if result.success and isinstance(result.value, int):
                balance = result.value
            else:
                logger.debug("Balance read failed for %s: %s", token.address, result.error)
                balance = 0
            token.settle_balance(balance, format_quantity(balance, token.decimals))

    def resolve(self, owner: str) -> BalanceReport:
        """
        Discover candidates and settle their balances.

        Args:
            owner: Account address

        Returns:
            BalanceReport whose owned property lists held tokens
        """
        report = self.discover_candidates(owner)
        self.read_balances(owner, report.candidates)
        logger.info(
            "Balance check complete: %d/%d tokens have balance",
            len(report.owned),
            len(report.candidates),
        )
        return report
