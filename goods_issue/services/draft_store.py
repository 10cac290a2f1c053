"""Keeps each form's in-progress TransactionState in the server-side session."""
from __future__ import annotations

from flask import session

from .issue_forms import IssueForm
from .transaction_state import TransactionState

SESSION_PREFIX = 'issue_draft:'


def _key(form: IssueForm) -> str:
    return f'{SESSION_PREFIX}{form.slug}'


def load_draft(form: IssueForm, *, approver_id: str = '', feedback_timeout_ms: int) -> TransactionState:
    """Return the saved draft for ``form`` or a fresh one seeded with ``approver_id``."""
    data = session.get(_key(form))
    if data:
        return TransactionState.from_dict(data)
    return TransactionState(
        approver_id=approver_id,
        keep_placeholder=form.keep_placeholder,
        feedback_timeout_ms=feedback_timeout_ms,
    )


def save_draft(form: IssueForm, state: TransactionState) -> None:
    session[_key(form)] = state.to_dict()
    session.modified = True


def discard_draft(form: IssueForm) -> None:
    session.pop(_key(form), None)
