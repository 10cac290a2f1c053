"""Failure taxonomy for goods issue forms.

Every failure is recoverable from the user's point of view and is turned into
a transient Feedback at the operation boundary; none escape to the page.
"""
from __future__ import annotations

from typing import Optional

from ..utils.error_messages import ErrorMessages as EM
from ..utils.error_messages import WarningMessages as WM
from .feedback import DEFAULT_FEEDBACK_TIMEOUT_MS, Feedback, Severity


class GoodsIssueError(Exception):
    """Base class; subclasses pick the Feedback severity."""

    severity = Severity.ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_feedback(self, timeout_ms: int = DEFAULT_FEEDBACK_TIMEOUT_MS) -> Feedback:
        return Feedback(self.message, self.severity, timeout_ms)


class MissingResponsible(GoodsIssueError):
    def __init__(self):
        super().__init__(EM.MISSING_RESPONSIBLE)


class MissingRequestNumber(GoodsIssueError):
    def __init__(self):
        super().__init__(EM.MISSING_REQUEST_NUMBER)


class MissingAsset(GoodsIssueError):
    def __init__(self):
        super().__init__(EM.MISSING_ASSET)


class NoValidItems(GoodsIssueError):
    def __init__(self):
        super().__init__(EM.NO_VALID_ITEMS)


class StockExceeded(GoodsIssueError):
    def __init__(self, item_code: str, item_name: str, available: float):
        self.item_code = item_code
        self.item_name = item_name
        self.available = available
        label = f"{item_name} ({item_code})" if item_name else item_code
        super().__init__(EM.STOCK_EXCEEDED.format(item=label, available=format_quantity(available)))


class DuplicateItem(GoodsIssueError):
    severity = Severity.WARNING

    def __init__(self, item_code: str):
        self.item_code = item_code
        super().__init__(WM.DUPLICATE_ITEM)


class OutOfStock(GoodsIssueError):
    severity = Severity.WARNING

    def __init__(self, item_code: str):
        self.item_code = item_code
        super().__init__(WM.NO_STOCK)


class RowNotFound(GoodsIssueError):
    def __init__(self, index: int):
        self.index = index
        super().__init__(EM.ROW_NOT_FOUND.format(index=index))


class UnknownForm(GoodsIssueError):
    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(EM.UNKNOWN_FORM.format(slug=slug))


class PersistenceFailure(GoodsIssueError):
    """Raised by a store when a read or write against the backend fails."""

    def __init__(self, message: Optional[str] = None, *, step: Optional[str] = None):
        self.step = step
        super().__init__(message or EM.SUBMISSION_FAILED)


def format_quantity(value: float) -> str:
    number = float(value or 0)
    return str(int(number)) if number.is_integer() else f"{number:g}"
