"""Goods issue core: in-progress withdrawal state and its submission."""
from .feedback import Feedback, FeedbackSlot, Severity
from .issue_errors import (
    DuplicateItem,
    GoodsIssueError,
    MissingAsset,
    MissingRequestNumber,
    MissingResponsible,
    NoValidItems,
    OutOfStock,
    PersistenceFailure,
    RowNotFound,
    StockExceeded,
    UnknownForm,
)
from .issue_store import IssueStore, SqlAlchemyIssueStore
from .transaction_state import CatalogItem, LineItem, TransactionHeader, TransactionState
from .transaction_submitter import (
    SubmissionPhase,
    SubmissionResult,
    SubmitterConfig,
    TransactionSubmitter,
)

__all__ = [
    "Feedback",
    "FeedbackSlot",
    "Severity",
    "GoodsIssueError",
    "MissingResponsible",
    "MissingRequestNumber",
    "MissingAsset",
    "NoValidItems",
    "StockExceeded",
    "DuplicateItem",
    "OutOfStock",
    "RowNotFound",
    "UnknownForm",
    "PersistenceFailure",
    "IssueStore",
    "SqlAlchemyIssueStore",
    "CatalogItem",
    "LineItem",
    "TransactionHeader",
    "TransactionState",
    "SubmissionPhase",
    "SubmissionResult",
    "SubmitterConfig",
    "TransactionSubmitter",
]
