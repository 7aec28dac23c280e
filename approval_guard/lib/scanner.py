"""
Approval scan pipeline.

One call to ApprovalScanner.scan runs every phase against a fresh snapshot:
candidate discovery, batched balance reads, the allowance matrix read and
classification, and finally statistics. Errors are translated into the
returned ScanResult; nothing raised by the I/O layers escapes scan().
"""

import logging
import time
from typing import Callable, List, Optional

from .aggregator import compute_statistics
from .allowance_matrix import build_allowance_matrix
from .balance_resolver import BalanceReport, BalanceResolver
from .batch_reader import BaseBatchReader, BatchReadError, BatchReadTimeout
from .catalog import ReferenceCatalog
from .classifier import PriceLookup, classify_approvals, sort_approvals
from .explorer_client import ExplorerClient
from .models import Approval, ScanPhase, ScanProgress, ScanResult, ScanStatus

logger = logging.getLogger(__name__)

DEFAULT_ALLOWANCE_TIMEOUT = 30.0
DEFAULT_CHUNK_SIZE = 100

PHASE_STEPS = {
    ScanPhase.IDLE: 0,
    ScanPhase.DISCOVERING: 1,
    ScanPhase.BALANCES: 2,
    ScanPhase.APPROVALS: 3,
    ScanPhase.COMPLETE: 4,
}


class ApprovalScanner:
    """
    Runs the discovery -> balances -> approvals pipeline for one owner.

    The allowance matrix is read in chunks under a single wall-clock bound.
    When the bound expires the scan completes with the approvals classified
    so far and status TIMED_OUT.
    """

    def __init__(
        self,
        catalog: ReferenceCatalog,
        reader: BaseBatchReader,
        explorer: Optional[ExplorerClient] = None,
        price_lookup: Optional[PriceLookup] = None,
        allowance_timeout: float = DEFAULT_ALLOWANCE_TIMEOUT,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress_callback: Optional[Callable[[ScanProgress], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.catalog = catalog
        self.reader = reader
        self.resolver = BalanceResolver(reader, catalog, explorer)
        self.price_lookup = price_lookup
        self.allowance_timeout = allowance_timeout
        self.chunk_size = chunk_size
        self.progress_callback = progress_callback
        self.clock = clock
        self.progress = ScanProgress()

    def _set_phase(self, phase: ScanPhase, step: str) -> None:
        self.progress = ScanProgress(
            phase=phase,
            step=step,
            current=PHASE_STEPS[phase],
            total=PHASE_STEPS[ScanPhase.COMPLETE],
        )
        logger.info("[%s] %s", phase.value, step)
        if self.progress_callback is not None:
            self.progress_callback(self.progress)

    def _failed(self, owner: str, message: str, report: Optional[BalanceReport] = None) -> ScanResult:
        self._set_phase(ScanPhase.COMPLETE, "Scan failed")
        return ScanResult(
            owner=owner,
            status=ScanStatus.FAILED,
            tokens=report.candidates if report else [],
            error=message,
            discovery_errors=report.discovery_errors if report else [],
        )

    def scan(self, owner: str) -> ScanResult:
        """
        Scan an owner's approvals across the catalog spenders.

        Args:
            owner: Account address

        Returns:
            ScanResult with status COMPLETE, TIMED_OUT or FAILED
        """
        self._set_phase(ScanPhase.DISCOVERING, "Discovering tokens")
        report = self.resolver.discover_candidates(owner)

        self._set_phase(
            ScanPhase.BALANCES, f"Checking balances of {len(report.candidates)} tokens"
        )
        try:
            self.resolver.read_balances(owner, report.candidates)
        except (BatchReadError, ValueError) as e:
            logger.error("Balance read failed: %s", e)
            return self._failed(owner, f"Balance check failed: {e}", report)

        owned = report.owned
        spenders = self.catalog.spenders
        matrix = build_allowance_matrix(owner, owned, spenders)
        self._set_phase(
            ScanPhase.APPROVALS,
            f"Checking {len(matrix)} approvals ({len(owned)} tokens x {len(spenders)} spenders)",
        )

        approvals: List[Approval] = []
        checked = 0
        status = ScanStatus.COMPLETE
        deadline = self.clock() + self.allowance_timeout

        for chunk in matrix.chunks(self.chunk_size):
            remaining = deadline - self.clock()
            if remaining <= 0:
                status = ScanStatus.TIMED_OUT
                break
            try:
                results = self.reader.read([entry.call for entry in chunk], timeout=remaining)
                approvals.extend(classify_approvals(chunk, results, self.price_lookup))
            except BatchReadTimeout as e:
                logger.warning("Allowance read timed out: %s", e)
                status = ScanStatus.TIMED_OUT
                break
            except (BatchReadError, ValueError) as e:
                logger.error("Allowance read failed: %s", e)
                return self._failed(owner, f"Approval check failed: {e}", report)
            checked += len(chunk)

        if status is ScanStatus.TIMED_OUT:
            logger.warning(
                "Allowance scan stopped after %d of %d combinations", checked, len(matrix)
            )

        approvals = sort_approvals(approvals)
        statistics = compute_statistics(approvals, report.candidates, len(spenders), checked)
        self._set_phase(ScanPhase.COMPLETE, f"Found {len(approvals)} approvals")

        return ScanResult(
            owner=owner,
            status=status,
            approvals=approvals,
            statistics=statistics,
            tokens=report.candidates,
            discovery_errors=report.discovery_errors,
        )
