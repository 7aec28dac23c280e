"""
Approval classification.

Pairs each batched allowance result with the matrix entry at the same index
and turns every non-zero allowance into an Approval record.
"""

import logging
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from .allowance_matrix import MatrixEntry
from .batch_reader import CallResult
from .models import Approval, OwnedToken, make_approval_id
from .units import format_quantity, multiply_amount, to_decimal_amount

logger = logging.getLogger(__name__)

# Allowances at or above half the uint256 range count as unlimited
UNLIMITED_THRESHOLD = 2**255

# Estimated value assigned to unlimited approvals instead of pricing infinity
UNLIMITED_VALUE_SENTINEL = Decimal(1_000_000)

UNLIMITED_LABEL = "Unlimited"

PriceLookup = Callable[[OwnedToken], Optional[Decimal]]


def is_unlimited(allowance: int) -> bool:
    return allowance >= UNLIMITED_THRESHOLD


def format_allowance(allowance: int, decimals: int) -> str:
    """Human-readable allowance, or "Unlimited" above the threshold."""
    if is_unlimited(allowance):
        return UNLIMITED_LABEL
    return format_quantity(allowance, decimals)


def estimate_value(allowance: int, decimals: int, price: Optional[Decimal] = None) -> Decimal:
    """
    Heuristic value at risk for one allowance.

    Args:
        allowance: Raw allowance
        decimals: Token decimals
        price: Unit price, 1 when unknown

    Returns:
        amount * price, or the unlimited sentinel
    """
    if is_unlimited(allowance):
        return UNLIMITED_VALUE_SENTINEL
    amount = to_decimal_amount(allowance, decimals)
    if price is None:
        return amount
    return multiply_amount(amount, price)


def classify_approvals(
    entries: List[MatrixEntry],
    results: List[CallResult],
    price_lookup: Optional[PriceLookup] = None,
) -> List[Approval]:
    """
    Classify aligned allowance results into approvals.

    Result i belongs to entry i and to nothing else. Failed calls and zero
    allowances produce no approval.

    Args:
        entries: Matrix entries in request order
        results: Batched read results in the same order
        price_lookup: Optional unit price source

    Returns:
        Approvals in matrix order

    Raises:
        ValueError: If the two lists differ in length
    """
    if len(entries) != len(results):
        raise ValueError(
            f"Result count {len(results)} does not match request count {len(entries)}"
        )

    approvals: Dict[str, Approval] = {}
    for index, (entry, result) in enumerate(zip(entries, results)):
        if not result.success:
            logger.debug(
                "Allowance read %d failed for %s/%s: %s",
                index,
                entry.token.symbol,
                entry.spender.name,
                result.error,
            )
            continue

        allowance = result.value
        if not isinstance(allowance, int) or allowance < 0:
            logger.debug("Allowance read %d returned unusable value %r", index, allowance)
            continue
        if allowance == 0:
            continue

        approval_id = make_approval_id(entry.token.address, entry.spender.address)
        if approval_id in approvals:
            # Matrix entries are unique; a repeat means the caller broke that
            raise ValueError(f"Duplicate approval {approval_id}")

        unlimited = is_unlimited(allowance)
        price = price_lookup(entry.token) if price_lookup is not None else None
        approvals[approval_id] = Approval(
            id=approval_id,
            token=entry.token,
            spender=entry.spender,
            allowance=allowance,
            allowance_formatted=format_allowance(allowance, entry.token.decimals),
            is_unlimited=unlimited,
            risk_level=entry.spender.risk,
            estimated_value=estimate_value(allowance, entry.token.decimals, price),
        )

    return list(approvals.values())


def sort_approvals(approvals: List[Approval]) -> List[Approval]:
    """Highest risk first, then largest estimated value."""
    return sorted(
        approvals,
        key=lambda a: (-a.risk_level.severity, -a.estimated_value),
    )
