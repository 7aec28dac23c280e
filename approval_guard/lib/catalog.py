"""
Reference catalog of known tokens and spender contracts.

The catalog is built once at startup and passed by reference into the scan
engine. It is never mutated after construction.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from eth_utils import is_hex_address

from .base_catalog import BASE_SPENDERS, BASE_TOKENS
from .models import (
    RiskLevel,
    SpenderCategory,
    SpenderDescriptor,
    TokenCategory,
    TokenDescriptor,
    normalize_address,
)

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when catalog data is malformed."""

    pass


@dataclass(frozen=True)
class CatalogSummary:
    """Counts describing the catalog's coverage."""

    total_tokens: int
    total_spenders: int
    total_combinations: int
    risk_distribution: Dict[RiskLevel, int]
    category_distribution: Dict[SpenderCategory, int]


class ReferenceCatalog:
    """
    Read-only lists of known tokens and spenders.

    Lookups by address are case-insensitive. Duplicate addresses keep the
    first entry.
    """

    def __init__(self, tokens: Iterable[TokenDescriptor], spenders: Iterable[SpenderDescriptor]):
        self._tokens: Dict[str, TokenDescriptor] = {}
        for token in tokens:
            self._tokens.setdefault(token.key, token)
        self._spenders: Dict[str, SpenderDescriptor] = {}
        for spender in spenders:
            self._spenders.setdefault(spender.key, spender)

    @property
    def tokens(self) -> List[TokenDescriptor]:
        return list(self._tokens.values())

    @property
    def spenders(self) -> List[SpenderDescriptor]:
        return list(self._spenders.values())

    def token_by_address(self, address: str) -> Optional[TokenDescriptor]:
        return self._tokens.get(normalize_address(address))

    def spender_by_address(self, address: str) -> Optional[SpenderDescriptor]:
        return self._spenders.get(normalize_address(address))

    def tokens_by_category(self, category: TokenCategory) -> List[TokenDescriptor]:
        return [t for t in self._tokens.values() if t.category is category]

    def spenders_by_risk(self, risk: RiskLevel) -> List[SpenderDescriptor]:
        return [s for s in self._spenders.values() if s.risk is risk]

    def spenders_by_category(self, category: SpenderCategory) -> List[SpenderDescriptor]:
        return [s for s in self._spenders.values() if s.category is category]

    def summary(self) -> CatalogSummary:
        """Summarize catalog coverage."""
        return CatalogSummary(
            total_tokens=len(self._tokens),
            total_spenders=len(self._spenders),
            total_combinations=len(self._tokens) * len(self._spenders),
            risk_distribution={level: len(self.spenders_by_risk(level)) for level in RiskLevel},
            category_distribution={
                category: len(self.spenders_by_category(category)) for category in SpenderCategory
            },
        )


def _require(entry: Dict[str, Any], key: str, kind: str) -> Any:
    if key not in entry or entry[key] in (None, ""):
        raise CatalogError(f"{kind} entry missing '{key}': {entry!r}")
    return entry[key]


def _parse_address(entry: Dict[str, Any], kind: str) -> str:
    if not isinstance(entry, dict):
        raise CatalogError(f"{kind} entry must be an object: {entry!r}")
    address = str(_require(entry, "address", kind))
    if not is_hex_address(address):
        raise CatalogError(f"{kind} has invalid address: {address}")
    return address


def parse_token(entry: Dict[str, Any]) -> TokenDescriptor:
    """
    Build a TokenDescriptor from a catalog dict.

    Raises:
        CatalogError: If a field is missing or invalid
    """
    address = _parse_address(entry, "token")
    try:
        decimals = int(_require(entry, "decimals", "token"))
        category = TokenCategory(entry.get("category", TokenCategory.OTHER.value))
        return TokenDescriptor(
            address=address,
            symbol=str(_require(entry, "symbol", "token")),
            name=str(entry.get("name") or entry["symbol"]),
            decimals=decimals,
            category=category,
            is_native=bool(entry.get("is_native", False)),
        )
    except (TypeError, ValueError) as e:
        raise CatalogError(f"Invalid token entry {address}: {e}") from e


def parse_spender(entry: Dict[str, Any]) -> SpenderDescriptor:
    """
    Build a SpenderDescriptor from a catalog dict.

    Raises:
        CatalogError: If a field is missing or invalid
    """
    address = _parse_address(entry, "spender")
    try:
        return SpenderDescriptor(
            address=address,
            name=str(_require(entry, "name", "spender")),
            protocol=str(entry.get("protocol") or entry["name"]),
            category=SpenderCategory(entry.get("category", SpenderCategory.OTHER.value)),
            risk=RiskLevel(_require(entry, "risk", "spender")),
            is_native=bool(entry.get("is_native", False)),
            website=entry.get("website"),
            tvl=entry.get("tvl"),
        )
    except (TypeError, ValueError) as e:
        raise CatalogError(f"Invalid spender entry {address}: {e}") from e


def build_catalog(data: Dict[str, Any]) -> ReferenceCatalog:
    """
    Build a catalog from a dict with "tokens" and "spenders" lists.

    Raises:
        CatalogError: If the structure or any entry is invalid
    """
    tokens = data.get("tokens")
    spenders = data.get("spenders")
    if not isinstance(tokens, list) or not isinstance(spenders, list):
        raise CatalogError("Catalog must contain 'tokens' and 'spenders' lists")
    return ReferenceCatalog(
        tokens=[parse_token(t) for t in tokens],
        spenders=[parse_spender(s) for s in spenders],
    )


def load_catalog(path: str) -> ReferenceCatalog:
    """
    Load a catalog from a JSON file.

    Args:
        path: Path to a JSON file with "tokens" and "spenders" arrays

    Returns:
        ReferenceCatalog built from the file
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"Cannot read catalog {path}: {e}") from e
    if not isinstance(data, dict):
        raise CatalogError(f"Catalog {path} must be a JSON object")
    return build_catalog(data)


def default_catalog() -> ReferenceCatalog:
    """Return the bundled Base network catalog."""
    return build_catalog({"tokens": BASE_TOKENS, "spenders": BASE_SPENDERS})


def log_catalog_summary(catalog: ReferenceCatalog) -> CatalogSummary:
    """Log the catalog summary once at startup."""
    summary = catalog.summary()
    logger.info(
        "Catalog loaded: %d tokens, %d spenders, %d combinations "
        "(risk low=%d medium=%d high=%d)",
        summary.total_tokens,
        summary.total_spenders,
        summary.total_combinations,
        summary.risk_distribution[RiskLevel.LOW],
        summary.risk_distribution[RiskLevel.MEDIUM],
        summary.risk_distribution[RiskLevel.HIGH],
    )
    return summary
