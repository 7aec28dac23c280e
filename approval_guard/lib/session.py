"""
In-memory scan state.

A ScanSession owns the live approval set and its statistics. A successful
scan replaces both wholesale; revocation removes one approval at a time.
All writes go through this object.
"""

import logging
from collections import OrderedDict
from typing import Dict, List, Optional

from .aggregator import apply_revocation
from .models import (
    Approval,
    OwnedToken,
    RiskLevel,
    ScanProgress,
    ScanResult,
    ScanStatistics,
    SpenderCategory,
)
from .scanner import ApprovalScanner

logger = logging.getLogger(__name__)


class ScanSession:
    """Live approvals and statistics for the account being inspected."""

    def __init__(self):
        self._approvals: Dict[str, Approval] = OrderedDict()
        self.statistics = ScanStatistics()
        self.owner: Optional[str] = None
        self.last_result: Optional[ScanResult] = None
        self.tokens: List[OwnedToken] = []
        self._scanner: Optional[ApprovalScanner] = None

    @property
    def approvals(self) -> List[Approval]:
        return list(self._approvals.values())

    @property
    def progress(self) -> ScanProgress:
        if self._scanner is None:
            return ScanProgress()
        return self._scanner.progress

    def get(self, approval_id: str) -> Optional[Approval]:
        return self._approvals.get(approval_id)

    def __contains__(self, approval_id: str) -> bool:
        return approval_id in self._approvals

    def __len__(self) -> int:
        return len(self._approvals)

    def run_scan(self, scanner: ApprovalScanner, owner: str) -> ScanResult:
        """
        Run a scan and adopt its results.

        A failed scan leaves the previous approval set and statistics in
        place; any other outcome replaces them.
        """
        self._scanner = scanner
        result = scanner.scan(owner)
        self.last_result = result
        if not result.succeeded:
            logger.error("Scan of %s failed: %s", owner, result.error)
            return result

        self.owner = owner
        self._approvals = OrderedDict((a.id, a) for a in result.approvals)
        self.statistics = result.statistics
        self.tokens = result.tokens
        return result

    def remove_approval(self, approval_id: str) -> Approval:
        """
        Remove a revoked approval and adjust statistics.

        The set is left untouched when the statistics cannot be adjusted.

        Raises:
            KeyError: If no live approval has this id
            ValueError: If the statistics do not count this approval
        """
        approval = self._approvals[approval_id]
        remaining = [a for key, a in self._approvals.items() if key != approval_id]
        apply_revocation(self.statistics, approval, remaining)
        del self._approvals[approval_id]
        logger.info("Removed approval %s (%s)", approval_id, approval.risk_level.value)
        return approval

    def by_risk(self, risk: RiskLevel) -> List[Approval]:
        return [a for a in self._approvals.values() if a.risk_level is risk]

    def by_category(self, category: SpenderCategory) -> List[Approval]:
        return [a for a in self._approvals.values() if a.category is category]

    def native_protocol_approvals(self) -> List[Approval]:
        return [a for a in self._approvals.values() if a.is_native_protocol]

    def owned_tokens(self) -> List[OwnedToken]:
        return [t for t in self.tokens if t.has_balance]

    def native_tokens(self) -> List[OwnedToken]:
        return [t for t in self.owned_tokens() if t.token.is_native]

    def bridged_tokens(self) -> List[OwnedToken]:
        return [t for t in self.owned_tokens() if not t.token.is_native]
