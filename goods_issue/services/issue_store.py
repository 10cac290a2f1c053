"""Persistence store for goods issues.

Each write commits on its own. A failure in a later step leaves earlier rows
in place; the submitter does not compensate.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Issue, IssueAsset, IssueLine, IssueRequest, RequestType
from ..utils.error_messages import ErrorMessages as EM
from ..utils.timezone_utils import TimezoneUtils
from .issue_errors import PersistenceFailure
from .stock_levels import available_quantities
from .transaction_state import LineItem

logger = logging.getLogger(__name__)


class IssueStore(Protocol):
    def resolve_request_type(self, code: str, default_id: int) -> int: ...

    def create_request(
        self,
        *,
        request_type_id: int,
        description: str,
        requested_at: datetime,
        responsible_id: str,
        requester_id: str,
        destination: Optional[str] = None,
    ) -> int: ...

    def create_issue(
        self,
        *,
        issued_at: datetime,
        approver_id: str,
        requester_id: str,
        request_number: Optional[int],
        comments: Optional[str],
        finalized: bool,
    ) -> int: ...

    def insert_lines(self, issue_id: int, items: Sequence[LineItem]) -> int: ...

    def available_quantities(self, codes: Iterable[str]) -> Dict[str, float]: ...

    def finalize_issue(self, issue_id: int) -> bool: ...

    def record_issue_asset(self, issue_id: int, asset_id: int) -> None: ...


class SqlAlchemyIssueStore:
    """IssueStore backed by the Flask-SQLAlchemy session."""

    def resolve_request_type(self, code: str, default_id: int) -> int:
        """Best-effort case-insensitive substring match; falls back to ``default_id``."""
        normalized = (code or "").strip()
        if not normalized:
            return default_id
        try:
            match = (
                RequestType.query.filter(RequestType.description.ilike(f"%{normalized}%"))
                .order_by(RequestType.id.asc())
                .first()
            )
        except SQLAlchemyError as exc:
            # Lookup is best effort; the default type still lets the request through.
            logger.warning("Request type lookup failed for %r: %s", normalized, exc)
            db.session.rollback()
            return default_id
        if match is None:
            logger.info("No request type matches %r; using default %s", normalized, default_id)
            return default_id
        return match.id

    def create_request(
        self,
        *,
        request_type_id: int,
        description: str,
        requested_at: datetime,
        responsible_id: str,
        requester_id: str,
        destination: Optional[str] = None,
    ) -> int:
        request = IssueRequest(
            request_type_id=request_type_id,
            description=description,
            requested_at=requested_at or TimezoneUtils.utc_now(),
            responsible_id=responsible_id,
            requester_id=requester_id,
            destination=destination,
        )
        self._commit(request, step="request")
        logger.info("Created issue request %s (type %s)", request.number, request_type_id)
        return request.number

    def create_issue(
        self,
        *,
        issued_at: datetime,
        approver_id: str,
        requester_id: str,
        request_number: Optional[int],
        comments: Optional[str],
        finalized: bool,
    ) -> int:
        issue = Issue(
            issued_at=issued_at or TimezoneUtils.utc_now(),
            approver_id=approver_id,
            requester_id=requester_id,
            request_number=request_number,
            comments=comments or None,
            finalized=finalized,
        )
        self._commit(issue, step="header")
        logger.info("Created issue %s for request %s", issue.id, request_number)
        return issue.id

    def insert_lines(self, issue_id: int, items: Sequence[LineItem]) -> int:
        lines: List[IssueLine] = [
            IssueLine(
                issue_id=issue_id,
                article_code=item.item_code,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in items
        ]
        try:
            db.session.add_all(lines)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error("Line insert failed for issue %s: %s", issue_id, exc)
            raise PersistenceFailure(str(exc), step="lines") from exc
        return len(lines)

    def available_quantities(self, codes: Iterable[str]) -> Dict[str, float]:
        try:
            return available_quantities(codes)
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error("Live stock lookup failed: %s", exc)
            raise PersistenceFailure(str(exc), step="stock") from exc

    def finalize_issue(self, issue_id: int) -> bool:
        """Mark an issue finalized; returns False when the issue does not exist."""
        try:
            issue = db.session.get(Issue, issue_id)
            if issue is None:
                return False
            issue.finalized = True
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error("Finalize failed for issue %s: %s", issue_id, exc)
            raise PersistenceFailure(EM.FINALIZE_FAILED, step="finalize") from exc
        return True

    def record_issue_asset(self, issue_id: int, asset_id: int) -> None:
        self._commit(IssueAsset(issue_id=issue_id, asset_id=asset_id), step="asset")

    def _commit(self, instance, *, step: str) -> None:
        try:
            db.session.add(instance)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.error("Issue store step %s failed: %s", step, exc)
            raise PersistenceFailure(str(exc), step=step) from exc
