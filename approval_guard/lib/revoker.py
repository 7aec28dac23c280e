"""
Revocation of a single approval.

State machine per attempt: idle -> pending -> confirming -> confirmed | failed.
Only one revocation may be in flight at a time; a request made while another
is in flight is rejected and stays idle. The approval leaves the session
only after the transaction confirms and the allowance reads back as zero.
"""

import logging
from typing import Callable, Optional

from .batch_reader import BaseBatchReader, BatchCall, BatchReadError
from .models import Approval, GasEstimate, RevocationResult, RevokeState
from .session import ScanSession
from .wallet import BaseWallet, WalletError

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[Approval, GasEstimate], bool]


class RevocationOrchestrator:
    """Drives one approve(spender, 0) transaction through its states."""

    def __init__(
        self,
        session: ScanSession,
        wallet: BaseWallet,
        confirm: ConfirmCallback,
        reader: Optional[BaseBatchReader] = None,
        on_state_change: Optional[Callable[[str, RevokeState], None]] = None,
    ):
        """
        Args:
            session: Holder of the live approval set
            wallet: State-change capability
            confirm: Asked before anything is submitted; False cancels
            reader: When given, used to check the allowance is zero afterwards
            on_state_change: Called with (approval id, new state)
        """
        self.session = session
        self.wallet = wallet
        self.confirm = confirm
        self.reader = reader
        self.on_state_change = on_state_change
        self.revoking_id: Optional[str] = None

    def _transition(self, result: RevocationResult, state: RevokeState) -> None:
        result.state = state
        result.history.append(state)
        logger.debug("Revocation %s -> %s", result.approval_id, state.value)
        if self.on_state_change is not None:
            self.on_state_change(result.approval_id, state)

    def _fail(self, result: RevocationResult, message: str) -> RevocationResult:
        logger.error("Revocation of %s failed: %s", result.approval_id, message)
        result.error = message
        self._transition(result, RevokeState.FAILED)
        return result

    def revoke(self, approval_id: str) -> RevocationResult:
        """
        Revoke one live approval.

        Args:
            approval_id: Id of an approval in the session

        Returns:
            RevocationResult; idle with an error when rejected, idle and
            cancelled when the owner declined, else confirmed or failed
        """
        result = RevocationResult(approval_id=approval_id, state=RevokeState.IDLE)

        if self.revoking_id is not None:
            result.error = f"Revocation of {self.revoking_id} already in progress"
            logger.warning("Rejected revocation of %s: %s", approval_id, result.error)
            return result

        approval = self.session.get(approval_id)
        if approval is None:
            result.error = f"Unknown approval {approval_id}"
            return result

        self.revoking_id = approval_id
        try:
            estimate = self.wallet.estimate_revoke_gas(approval.token_address, approval.spender_address)
            if not self.confirm(approval, estimate):
                logger.info("Revocation of %s cancelled", approval_id)
                result.cancelled = True
                return result
            return self._execute(approval, result)
        finally:
            self.revoking_id = None

    def _execute(self, approval: Approval, result: RevocationResult) -> RevocationResult:
        self._transition(result, RevokeState.PENDING)
        try:
            result.tx_hash = self.wallet.submit_approve(approval.token_address, approval.spender_address, 0)
            self._transition(result, RevokeState.CONFIRMING)
            included = self.wallet.await_confirmation(result.tx_hash)
        except WalletError as e:
            return self._fail(result, str(e))

        if not included:
            return self._fail(result, f"Transaction {result.tx_hash} reverted")

        error = self._verify_allowance_cleared(approval)
        if error is not None:
            return self._fail(result, error)

        try:
            self.session.remove_approval(approval.id)
        except (KeyError, ValueError) as e:
            return self._fail(result, f"Revoked in {result.tx_hash} but the session was not updated: {e}")
        self._transition(result, RevokeState.CONFIRMED)
        logger.info("Revoked %s for %s", approval.token.symbol, approval.spender.name)
        return result

    def _verify_allowance_cleared(self, approval: Approval) -> Optional[str]:
        if self.reader is None or self.session.owner is None:
            return None
        call = BatchCall(approval.token_address, "allowance", (self.session.owner, approval.spender_address))
        try:
            (check,) = self.reader.read([call])
        except (BatchReadError, ValueError) as e:
            return f"Could not verify allowance: {e}"
        if not check.success:
            return f"Could not verify allowance: {check.error}"
        if check.value != 0:
            return f"Allowance is still {check.value} after revocation"
        return None
