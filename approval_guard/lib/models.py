"""
Data models for wallet approval scanning.

This module defines the closed enumerations and the records that flow
through a scan: catalog descriptors, owned tokens, approvals, statistics
and the results handed back to callers.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional


# CSV column order for approval reports
APPROVAL_CSV_COLUMNS = [
    "approval_id",
    "token_symbol",
    "token_address",
    "spender_name",
    "protocol",
    "spender_address",
    "category",
    "allowance",
    "allowance_formatted",
    "is_unlimited",
    "risk_level",
    "estimated_value",
]

# CSV column order for owned token reports
TOKEN_CSV_COLUMNS = [
    "token_address",
    "symbol",
    "name",
    "decimals",
    "category",
    "is_native",
    "balance",
    "discovery_method",
]


class TokenCategory(str, Enum):
    NATIVE = "native"
    STABLECOIN = "stablecoin"
    BRIDGED = "bridged"
    DEFI = "defi"
    MEME = "meme"
    SOCIAL = "social"
    OTHER = "other"


class SpenderCategory(str, Enum):
    DEX = "dex"
    LENDING = "lending"
    BRIDGE = "bridge"
    AGGREGATOR = "aggregator"
    FARMING = "farming"
    STAKING = "staking"
    OTHER = "other"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def severity(self) -> int:
        """Sort weight, higher is riskier."""
        if self is RiskLevel.HIGH:
            return 3
        if self is RiskLevel.MEDIUM:
            return 2
        if self is RiskLevel.LOW:
            return 1
        raise ValueError(f"Unhandled risk level: {self!r}")


class DiscoveryMethod(str, Enum):
    KNOWN = "known"  # Catalog entry
    TRANSACTION = "transaction"  # Inferred from transfer history
    BALANCE = "balance"  # Inferred from an explorer holdings query


class ScanPhase(str, Enum):
    IDLE = "idle"
    DISCOVERING = "discovering"
    BALANCES = "balances"
    APPROVALS = "approvals"
    COMPLETE = "complete"


class ScanStatus(str, Enum):
    COMPLETE = "complete"
    TIMED_OUT = "timed_out"  # Completed with a partial approval set
    FAILED = "failed"


class RevokeState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    CONFIRMING = "confirming"
    CONFIRMED = "confirmed"
    FAILED = "failed"


def normalize_address(address: str) -> str:
    """Lower-case an address for case-insensitive comparison."""
    return address.strip().lower()


def make_approval_id(token_address: str, spender_address: str) -> str:
    """Composite key identifying one (token, spender) pair."""
    return f"{normalize_address(token_address)}-{normalize_address(spender_address)}"


@dataclass(frozen=True)
class TokenDescriptor:
    """Identity of a fungible token."""

    address: str
    symbol: str
    name: str
    decimals: int
    category: TokenCategory = TokenCategory.OTHER
    is_native: bool = False  # Issued natively on the chain (not bridged)

    def __post_init__(self):
        if self.decimals < 0:
            raise ValueError(f"decimals must be non-negative, got {self.decimals}")

    @property
    def key(self) -> str:
        return normalize_address(self.address)


@dataclass(frozen=True)
class SpenderDescriptor:
    """A contract that may hold an allowance over the owner's tokens."""

    address: str
    name: str
    protocol: str
    category: SpenderCategory
    risk: RiskLevel
    is_native: bool = False
    website: Optional[str] = None
    tvl: Optional[str] = None

    @property
    def key(self) -> str:
        return normalize_address(self.address)


@dataclass
class OwnedToken:
    """
    A candidate token together with the owner's balance.

    Balance fields start unset and are settled exactly once, when the
    batched balance read returns.
    """

    token: TokenDescriptor
    discovery_method: DiscoveryMethod
    balance: int = 0
    balance_formatted: str = "0"
    settled: bool = False

    @property
    def address(self) -> str:
        return self.token.address

    @property
    def key(self) -> str:
        return self.token.key

    @property
    def symbol(self) -> str:
        return self.token.symbol

    @property
    def decimals(self) -> int:
        return self.token.decimals

    @property
    def has_balance(self) -> bool:
        return self.balance > 0

    def settle_balance(self, balance: int, balance_formatted: str) -> None:
        """
        Record the balance read for this token.

        Raises:
            RuntimeError: If the balance has already been settled
        """
        if self.settled:
            raise RuntimeError(f"Balance for {self.token.address} already settled")
        if balance < 0:
            raise ValueError("balance must be non-negative")
        self.balance = balance
        self.balance_formatted = balance_formatted
        self.settled = True

    def to_csv_row(self) -> List[str]:
        """Convert owned token to a CSV row (list of strings)."""
        return [
            self.token.address,
            self.token.symbol,
            self.token.name,
            str(self.token.decimals),
            self.token.category.value,
            "true" if self.token.is_native else "false",
            self.balance_formatted,
            self.discovery_method.value,
        ]


@dataclass(frozen=True)
class Approval:
    """A live non-zero allowance granted by the owner to a spender."""

    id: str
    token: OwnedToken
    spender: SpenderDescriptor
    allowance: int  # Raw uint256
    allowance_formatted: str  # Decimal amount, or "Unlimited"
    is_unlimited: bool
    risk_level: RiskLevel
    estimated_value: Decimal

    @property
    def token_address(self) -> str:
        return self.token.address

    @property
    def spender_address(self) -> str:
        return self.spender.address

    @property
    def category(self) -> SpenderCategory:
        return self.spender.category

    @property
    def is_native_token(self) -> bool:
        return self.token.token.is_native

    @property
    def is_native_protocol(self) -> bool:
        return self.spender.is_native

    def to_csv_row(self) -> List[str]:
        """Convert approval to a CSV row (list of strings)."""
        return [
            self.id,
            self.token.symbol,
            self.token.address,
            self.spender.name,
            self.spender.protocol,
            self.spender.address,
            self.spender.category.value,
            str(self.allowance),
            self.allowance_formatted,
            "true" if self.is_unlimited else "false",
            self.risk_level.value,
            format(self.estimated_value, "f"),
        ]


def _risk_counter() -> Dict[RiskLevel, int]:
    return {level: 0 for level in RiskLevel}


def _category_counter() -> Dict[SpenderCategory, int]:
    return {category: 0 for category in SpenderCategory}


def _discovery_counter() -> Dict[DiscoveryMethod, int]:
    return {method: 0 for method in DiscoveryMethod}


@dataclass
class ScanStatistics:
    """Aggregate view over the live approval set of one scan."""

    total_tokens_checked: int = 0
    tokens_with_balance: int = 0
    native_tokens: int = 0
    bridged_tokens: int = 0
    total_combinations: int = 0  # Candidate tokens x spenders
    combinations_checked: int = 0  # Allowance reads that actually returned
    approvals_found: int = 0
    native_protocol_approvals: int = 0
    unlimited_approvals: int = 0
    unique_tokens: int = 0
    unique_protocols: int = 0
    total_value_at_risk: Decimal = Decimal(0)
    risk_distribution: Dict[RiskLevel, int] = field(default_factory=_risk_counter)
    category_distribution: Dict[SpenderCategory, int] = field(default_factory=_category_counter)
    discovery_methods: Dict[DiscoveryMethod, int] = field(default_factory=_discovery_counter)

    @property
    def high_risk_count(self) -> int:
        return self.risk_distribution[RiskLevel.HIGH]

    @property
    def medium_risk_count(self) -> int:
        return self.risk_distribution[RiskLevel.MEDIUM]

    @property
    def low_risk_count(self) -> int:
        return self.risk_distribution[RiskLevel.LOW]


@dataclass
class ScanProgress:
    """Observable progress of a running scan."""

    phase: ScanPhase = ScanPhase.IDLE
    step: str = ""
    current: int = 0
    total: int = 4


@dataclass
class ScanResult:
    """
    Outcome of one scan attempt.

    A complete scan with no approvals is a success ("secure"), distinct
    from a failed scan which carries an error message.
    """

    owner: str
    status: ScanStatus
    approvals: List[Approval] = field(default_factory=list)
    statistics: ScanStatistics = field(default_factory=ScanStatistics)
    tokens: List[OwnedToken] = field(default_factory=list)
    error: Optional[str] = None
    discovery_errors: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status is not ScanStatus.FAILED

    @property
    def timed_out(self) -> bool:
        return self.status is ScanStatus.TIMED_OUT

    @property
    def is_secure(self) -> bool:
        """True for a finished scan that found no approvals."""
        return self.succeeded and not self.approvals

    @property
    def owned_tokens(self) -> List[OwnedToken]:
        return [t for t in self.tokens if t.has_balance]


@dataclass
class GasEstimate:
    """Estimated cost of a revocation transaction (all values in wei)."""

    gas_limit: int
    gas_price: int
    is_fallback: bool = False

    @property
    def total_cost(self) -> int:
        return self.gas_limit * self.gas_price


@dataclass
class RevocationResult:
    """Outcome of one revocation attempt."""

    approval_id: str
    state: RevokeState
    tx_hash: Optional[str] = None
    error: Optional[str] = None
    cancelled: bool = False  # Owner declined at the confirmation prompt
    history: List[RevokeState] = field(default_factory=list)

    @property
    def confirmed(self) -> bool:
        return self.state is RevokeState.CONFIRMED
