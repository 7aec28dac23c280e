"""
Statistics over the live approval set.

compute_statistics does a single pass over a fresh approval list;
apply_revocation adjusts existing statistics after one approval is removed
so that the result equals what compute_statistics would give for the
remaining set.
"""

import logging
from typing import List

from .models import Approval, OwnedToken, ScanStatistics
from .units import subtract_amount, sum_amounts

logger = logging.getLogger(__name__)


def _distinct_counts(approvals: List[Approval]):
    tokens = {a.token.key for a in approvals}
    protocols = {a.spender.protocol for a in approvals}
    return len(tokens), len(protocols)


def compute_statistics(
    approvals: List[Approval],
    candidates: List[OwnedToken],
    spender_count: int,
    combinations_checked: int,
) -> ScanStatistics:
    """
    Fold approvals and candidate tokens into ScanStatistics.

    Args:
        approvals: Classified approvals
        candidates: Every token whose balance was checked
        spender_count: Number of spenders in the catalog
        combinations_checked: Allowance reads that returned before any timeout

    Returns:
        Fresh ScanStatistics
    """
    stats = ScanStatistics(
        total_tokens_checked=len(candidates),
        total_combinations=len(candidates) * spender_count,
        combinations_checked=combinations_checked,
    )

    for token in candidates:
        stats.discovery_methods[token.discovery_method] += 1
        if not token.has_balance:
            continue
        stats.tokens_with_balance += 1
        if token.token.is_native:
            stats.native_tokens += 1
        else:
            stats.bridged_tokens += 1

    for approval in approvals:
        stats.approvals_found += 1
        stats.risk_distribution[approval.risk_level] += 1
        stats.category_distribution[approval.category] += 1
        if approval.is_unlimited:
            stats.unlimited_approvals += 1
        if approval.is_native_protocol:
            stats.native_protocol_approvals += 1

    stats.total_value_at_risk = sum_amounts(a.estimated_value for a in approvals)
    stats.unique_tokens, stats.unique_protocols = _distinct_counts(approvals)
    return stats


def apply_revocation(
    stats: ScanStatistics, revoked: Approval, remaining: List[Approval]
) -> ScanStatistics:
    """
    Decrement the tallies the revoked approval contributed to.

    Distinct token and protocol counts are recomputed from the remaining
    approvals, since another approval may share the token or protocol.

    Args:
        stats: Statistics to update in place
        revoked: The approval that was removed
        remaining: Live approvals after removal

    Returns:
        The updated statistics
    """
    if stats.approvals_found <= 0 or stats.risk_distribution[revoked.risk_level] <= 0:
        raise ValueError(f"Statistics do not include approval {revoked.id}")

    stats.approvals_found -= 1
    stats.risk_distribution[revoked.risk_level] -= 1
    stats.category_distribution[revoked.category] -= 1
    if revoked.is_unlimited:
        stats.unlimited_approvals -= 1
    if revoked.is_native_protocol:
        stats.native_protocol_approvals -= 1
    stats.total_value_at_risk = subtract_amount(stats.total_value_at_risk, revoked.estimated_value)
    stats.unique_tokens, stats.unique_protocols = _distinct_counts(remaining)

    if stats.approvals_found != len(remaining):
        logger.warning(
            "Approval count %d drifted from live set size %d",
            stats.approvals_found,
            len(remaining),
        )
    return stats
