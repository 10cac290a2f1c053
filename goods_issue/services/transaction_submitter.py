"""Validation and commit sequence shared by every goods issue form."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..models import format_receipt_number
from ..utils.error_messages import ErrorMessages as EM
from ..utils.error_messages import SuccessMessages as SM
from ..utils.timezone_utils import TimezoneUtils
from .feedback import DEFAULT_FEEDBACK_TIMEOUT_MS, Feedback, FeedbackSlot
from .issue_errors import (
    GoodsIssueError,
    MissingAsset,
    MissingRequestNumber,
    MissingResponsible,
    NoValidItems,
    PersistenceFailure,
    StockExceeded,
)
from .issue_store import IssueStore
from .transaction_state import LineItem, TransactionHeader, TransactionState

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_DELAY_MS = 1500

# Called after the header insert and before the line insert.
ExtraCommitStep = Callable[..., None]


class SubmissionPhase(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    COMMITTED = "committed"
    FAILED = "failed"
    REJECTED = "rejected"


TERMINAL_PHASES = (SubmissionPhase.COMMITTED, SubmissionPhase.FAILED, SubmissionPhase.REJECTED)


@dataclass(frozen=True)
class SubmitterConfig:
    """Per-form submission settings."""
    request_type_code: Optional[str] = None
    default_description: str = "Goods issue"
    on_success_route: Optional[str] = None
    extra_commit_step: Optional[ExtraCommitStep] = None
    requires_request_number: bool = False
    requires_asset: bool = False
    finalize_on_submit: bool = True
    feedback_timeout_ms: int = DEFAULT_FEEDBACK_TIMEOUT_MS
    revalidate_stock: bool = True
    redirect_delay_ms: int = DEFAULT_REDIRECT_DELAY_MS
    default_request_type_id: int = 1
    placeholder_request_number: Optional[int] = None


@dataclass
class SubmissionResult:
    success: bool
    feedback: Feedback
    phase: SubmissionPhase
    issue_id: Optional[int] = None
    request_number: Optional[int] = None
    redirect_to: Optional[str] = None
    redirect_delay_ms: int = 0
    error: Optional[GoodsIssueError] = None

    @property
    def receipt_number(self) -> str:
        return format_receipt_number(self.issue_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'phase': self.phase.value,
            'feedback': self.feedback.to_dict(),
            'issue_id': self.issue_id,
            'receipt_number': self.receipt_number,
            'request_number': self.request_number,
            'redirect_to': self.redirect_to,
            'redirect_delay_ms': self.redirect_delay_ms,
        }


class TransactionSubmitter:
    """Validates a TransactionState and runs the commit sequence against a store.

    Commit order: optional request record, issue header, extra commit step,
    line items. Each step commits on its own and nothing is compensated when a
    later step fails, so a failed line insert leaves the header without lines.
    """

    def __init__(
        self,
        store: IssueStore,
        config: Optional[SubmitterConfig] = None,
        *,
        feedback_slot: Optional[FeedbackSlot] = None,
        now: Callable[[], datetime] = TimezoneUtils.utc_now,
    ):
        self.store = store
        self.config = config or SubmitterConfig()
        self.feedback_slot = feedback_slot or FeedbackSlot()
        self.loading = False
        self._now = now
        self._phase = SubmissionPhase.IDLE

    @property
    def phase(self) -> SubmissionPhase:
        # Terminal phases fall back to IDLE once their feedback has been dismissed.
        if self._phase in TERMINAL_PHASES and self.feedback_slot.current is None:
            self._phase = SubmissionPhase.IDLE
        return self._phase

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------
    def submit(self, state: TransactionState, header: Optional[TransactionHeader] = None) -> SubmissionResult:
        header = header or state.header
        if self.loading:
            return SubmissionResult(
                success=False,
                feedback=Feedback.warning(EM.SUBMISSION_IN_PROGRESS, self.config.feedback_timeout_ms),
                phase=SubmissionPhase.SUBMITTING,
            )

        self._phase = SubmissionPhase.VALIDATING
        try:
            valid_items = self.validate(state, header)
            if self.config.revalidate_stock:
                self._revalidate_stock(valid_items)
        except PersistenceFailure as exc:
            logger.error("Stock re-validation failed: %s", exc.message)
            return self._finish(SubmissionPhase.FAILED, exc)
        except GoodsIssueError as exc:
            logger.info("Issue submission rejected: %s", exc.message)
            return self._finish(SubmissionPhase.REJECTED, exc)

        self._phase = SubmissionPhase.SUBMITTING
        self.loading = True
        try:
            request_number, issue_id = self._commit(header, valid_items)
        except GoodsIssueError as exc:
            logger.error("Issue submission failed: %s", exc.message)
            return self._finish(SubmissionPhase.FAILED, exc)
        except Exception as exc:
            logger.exception("Unexpected error while committing issue")
            return self._finish(SubmissionPhase.FAILED, PersistenceFailure(str(exc) or None))
        finally:
            self.loading = False

        feedback = Feedback.success(
            SM.ISSUE_RECORDED.format(receipt=format_receipt_number(issue_id)),
            self.config.feedback_timeout_ms,
        )
        result = SubmissionResult(
            success=True,
            feedback=feedback,
            phase=SubmissionPhase.COMMITTED,
            issue_id=issue_id,
            request_number=request_number,
        )
        if self.config.on_success_route:
            result.redirect_to = self.config.on_success_route
            result.redirect_delay_ms = self.config.redirect_delay_ms
        else:
            state.reset()
        self._phase = SubmissionPhase.COMMITTED
        self.feedback_slot.show(feedback)
        logger.info("Issue %s committed with %s line(s)", issue_id, len(valid_items))
        return result

    def validate(self, state: TransactionState, header: TransactionHeader) -> List[LineItem]:
        """Local checks only; returns the rows that will be persisted."""
        if not header.approver_id or not header.requester_id:
            raise MissingResponsible()
        if self.config.requires_request_number and not header.request_number:
            raise MissingRequestNumber()
        if self.config.requires_asset and not header.asset_id:
            raise MissingAsset()

        valid_items = state.valid_items()
        if not valid_items:
            raise NoValidItems()
        for item in valid_items:
            if item.quantity > item.available_quantity:
                raise StockExceeded(item.item_code, item.item_name, item.available_quantity)
        return valid_items

    def finalize(self, issue_id: int) -> SubmissionResult:
        """Flip the finalized flag on an issue written with ``finalize_on_submit=False``."""
        timeout_ms = self.config.feedback_timeout_ms
        try:
            found = self.store.finalize_issue(issue_id)
        except GoodsIssueError as exc:
            logger.error("Finalize failed for issue %s: %s", issue_id, exc.message)
            return self._finish(SubmissionPhase.FAILED, exc, issue_id=issue_id)

        if not found:
            feedback = Feedback.error(EM.ISSUE_NOT_FOUND.format(issue_id=issue_id), timeout_ms)
            self._phase = SubmissionPhase.FAILED
            self.feedback_slot.show(feedback)
            return SubmissionResult(False, feedback, SubmissionPhase.FAILED, issue_id=issue_id)

        feedback = Feedback.success(SM.ISSUE_FINALIZED, timeout_ms)
        self._phase = SubmissionPhase.COMMITTED
        self.feedback_slot.show(feedback)
        return SubmissionResult(
            success=True,
            feedback=feedback,
            phase=SubmissionPhase.COMMITTED,
            issue_id=issue_id,
            redirect_to=self.config.on_success_route,
            redirect_delay_ms=self.config.redirect_delay_ms if self.config.on_success_route else 0,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _revalidate_stock(self, valid_items: List[LineItem]) -> None:
        live = self.store.available_quantities(item.item_code for item in valid_items)
        for item in valid_items:
            available = live.get(item.item_code, 0.0)
            if item.quantity > available:
                item.available_quantity = available
                raise StockExceeded(item.item_code, item.item_name, available)

    def _commit(self, header: TransactionHeader, valid_items: List[LineItem]):
        config = self.config
        request_number = header.request_number
        if config.request_type_code:
            request_type_id = self.store.resolve_request_type(
                config.request_type_code, config.default_request_type_id
            )
            request_number = self.store.create_request(
                request_type_id=request_type_id,
                description=config.default_description,
                requested_at=header.requested_at or self._now(),
                responsible_id=header.approver_id,
                requester_id=header.requester_id,
                destination=header.destination,
            )
        elif request_number is None:
            request_number = config.placeholder_request_number

        issue_id = self.store.create_issue(
            issued_at=self._now(),
            approver_id=header.approver_id,
            requester_id=header.requester_id,
            request_number=request_number,
            comments=header.comments,
            finalized=config.finalize_on_submit,
        )

        if config.extra_commit_step is not None:
            config.extra_commit_step(issue_id, valid_items, store=self.store, header=header)

        self.store.insert_lines(issue_id, valid_items)
        return request_number, issue_id

    def _finish(self, phase: SubmissionPhase, error: GoodsIssueError, **extra) -> SubmissionResult:
        feedback = error.to_feedback(self.config.feedback_timeout_ms)
        self._phase = phase
        self.feedback_slot.show(feedback)
        return SubmissionResult(success=False, feedback=feedback, phase=phase, error=error, **extra)
