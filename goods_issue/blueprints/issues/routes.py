"""JSON endpoints driving the goods issue forms.

Each form keeps its draft TransactionState in the server-side session; every
mutation loads the draft, applies one operation and saves it back.
"""
from __future__ import annotations

import logging

from flask import current_app, request
from flask_login import current_user, login_required
from sqlalchemy.exc import SQLAlchemyError

from ...extensions import cache, limiter
from ...services.catalog_search import CatalogSearchService
from ...services.collaborator_directory import CollaboratorDirectory
from ...services.draft_store import discard_draft, load_draft, save_draft
from ...services.feedback import Feedback
from ...services.issue_errors import GoodsIssueError, UnknownForm
from ...services.issue_forms import get_form, list_forms, submitter_config_for
from ...services.issue_store import SqlAlchemyIssueStore
from ...services.transaction_state import TransactionHeader
from ...services.transaction_submitter import SubmissionPhase, TransactionSubmitter
from ...utils.api_responses import APIResponse
from ...utils.error_messages import ErrorMessages as EM
from ...utils.timezone_utils import TimezoneUtils
from . import issues_bp

logger = logging.getLogger(__name__)

HEADER_FIELDS = (
    'approver_id',
    'requester_id',
    'comments',
    'request_number',
    'destination',
    'requested_at',
    'asset_id',
)


def _feedback_timeout() -> int:
    return int(current_app.config.get('ISSUE_FEEDBACK_TIMEOUT_MS', 3000))


def _load(slug: str):
    form = get_form(slug)
    config = submitter_config_for(form)
    approver_id = CollaboratorDirectory.resolve_approver_id(getattr(current_user, 'email', None))
    state = load_draft(form, approver_id=approver_id, feedback_timeout_ms=config.feedback_timeout_ms)
    return form, config, state


def _state_response(state, *, feedback=None, message="Success", status_code=200):
    return APIResponse.success(state.to_dict(), message=message, status_code=status_code, feedback=feedback)


@issues_bp.errorhandler(GoodsIssueError)
def _handle_issue_error(exc: GoodsIssueError):
    status_code = 404 if isinstance(exc, UnknownForm) else 422
    return APIResponse.error(exc.message, status_code=status_code, feedback=exc.to_feedback(_feedback_timeout()))


@issues_bp.route('/', methods=['GET'])
@login_required
def forms_index():
    return APIResponse.success([form.to_dict() for form in list_forms()])


@issues_bp.route('/<slug>', methods=['GET'])
@login_required
def form_detail(slug):
    form, _, state = _load(slug)
    save_draft(form, state)
    tz_name = current_app.config.get('DISPLAY_TIMEZONE', 'UTC')
    return APIResponse.success({
        'form': form.to_dict(),
        'state': state.to_dict(),
        'today': TimezoneUtils.format_for_display(TimezoneUtils.utc_now(), tz_name),
        'search_debounce_ms': current_app.config.get('CATALOG_SEARCH_DEBOUNCE_MS', 300),
        'search_limit': current_app.config.get('CATALOG_SEARCH_LIMIT', 50),
    })


@issues_bp.route('/<slug>/catalog', methods=['GET'])
@login_required
def catalog_search(slug):
    get_form(slug)
    try:
        items = CatalogSearchService.search_catalog(
            request.args.get('q'),
            limit=request.args.get('limit', type=int),
        )
    except SQLAlchemyError as exc:
        logger.error("Catalog search failed: %s", exc)
        return APIResponse.error(EM.CATALOG_UNAVAILABLE, status_code=503)
    return APIResponse.success([item.to_dict() for item in items])


@issues_bp.route('/<slug>/catalog/all', methods=['GET'])
@login_required
def catalog_bulk(slug):
    get_form(slug)
    try:
        page = CatalogSearchService.load_catalog_page(
            request.args.get('page', 1, type=int),
            per_page=request.args.get('per_page', type=int),
        )
    except SQLAlchemyError as exc:
        logger.error("Catalog bulk load failed: %s", exc)
        return APIResponse.error(EM.CATALOG_UNAVAILABLE, status_code=503)
    page['items'] = [item.to_dict() for item in page['items']]
    return APIResponse.success(page)


@issues_bp.route('/<slug>/collaborators', methods=['GET'])
@login_required
def collaborators(slug):
    get_form(slug)
    try:
        snapshot = CollaboratorDirectory.partition()
        approver_id = CollaboratorDirectory.resolve_approver_id(current_user.email)
    except SQLAlchemyError as exc:
        logger.error("Collaborator directory lookup failed: %s", exc)
        return APIResponse.error(EM.DIRECTORY_UNAVAILABLE, status_code=503)
    data = snapshot.to_dict()
    data['current_approver_id'] = approver_id or None
    return APIResponse.success(data)


@issues_bp.route('/<slug>/rows', methods=['POST'])
@login_required
def add_row(slug):
    form, _, state = _load(slug)
    state.add_empty_row()
    save_draft(form, state)
    return _state_response(state, status_code=201)


@issues_bp.route('/<slug>/rows/<int:row_index>/item', methods=['PUT'])
@login_required
def select_item(slug, row_index):
    form, _, state = _load(slug)
    code = (APIResponse.handle_request_content().get('code') or '').strip()
    item = CatalogSearchService.get_item(code)
    if item is None:
        return APIResponse.not_found(f"Item {code}")
    state.update_row_with_catalog_item(row_index, item)
    save_draft(form, state)
    return _state_response(state)


@issues_bp.route('/<slug>/rows/<int:row_index>', methods=['PATCH'])
@login_required
def update_row(slug, row_index):
    form, _, state = _load(slug)
    data = APIResponse.handle_request_content()
    try:
        warning = state.update_field(row_index, data.get('field') or '', data.get('value'))
    except ValueError as exc:
        return APIResponse.validation_error(str(exc))
    save_draft(form, state)
    return _state_response(state, feedback=warning)


@issues_bp.route('/<slug>/rows/<int:row_index>', methods=['DELETE'])
@login_required
def remove_row(slug, row_index):
    form, _, state = _load(slug)
    state.remove_row(row_index)
    save_draft(form, state)
    return _state_response(state)


@issues_bp.route('/<slug>/header', methods=['PATCH'])
@login_required
def update_header(slug):
    form, _, state = _load(slug)
    data = APIResponse.handle_request_content()
    merged = state.header.to_dict()
    accepted = HEADER_FIELDS
    if form.submitter.request_type_code:
        # Request numbers for typed forms are generated on submit.
        accepted = tuple(field for field in HEADER_FIELDS if field != 'request_number')
    merged.update({key: value for key, value in data.items() if key in accepted})
    state.header = TransactionHeader.from_dict(merged)
    save_draft(form, state)
    return _state_response(state)


@issues_bp.route('/<slug>/draft', methods=['DELETE'])
@login_required
def reset_draft(slug):
    form = get_form(slug)
    discard_draft(form)
    _, _, state = _load(slug)
    save_draft(form, state)
    return _state_response(state)


@issues_bp.route('/<slug>/submit', methods=['POST'])
@login_required
@limiter.limit("30/minute")
def submit(slug):
    form, config, state = _load(slug)
    guard_key = f"issue-submit:{current_user.get_id()}:{form.slug}"
    guard_timeout = int(current_app.config.get('ISSUE_SUBMIT_GUARD_SECONDS', 60))
    if not cache.add(guard_key, True, timeout=guard_timeout):
        logger.info("Rejected concurrent submit for form %s", form.slug)
        return APIResponse.conflict(
            EM.SUBMISSION_IN_PROGRESS,
            feedback=Feedback.warning(EM.SUBMISSION_IN_PROGRESS, config.feedback_timeout_ms),
        )

    try:
        submitter = TransactionSubmitter(SqlAlchemyIssueStore(), config)
        result = submitter.submit(state)
    finally:
        cache.delete(guard_key)

    if result.success and result.redirect_to:
        discard_draft(form)
    else:
        save_draft(form, state)

    payload = result.to_dict()
    payload['state'] = state.to_dict()
    if result.success:
        return APIResponse.success(payload, message=result.feedback.message, status_code=201, feedback=result.feedback)
    status_code = 422 if result.phase is SubmissionPhase.REJECTED else 500
    return APIResponse.error(result.feedback.message, status_code=status_code, feedback=result.feedback, data=payload)


@issues_bp.route('/<slug>/issues/<int:issue_id>/finalize', methods=['POST'])
@login_required
def finalize(slug, issue_id):
    form = get_form(slug)
    submitter = TransactionSubmitter(SqlAlchemyIssueStore(), submitter_config_for(form))
    result = submitter.finalize(issue_id)
    if result.success:
        return APIResponse.success(result.to_dict(), message=result.feedback.message, feedback=result.feedback)
    status_code = 404 if result.error is None else 500
    return APIResponse.error(result.feedback.message, status_code=status_code, feedback=result.feedback,
                             data=result.to_dict())
