"""Registry of goods issue form variants.

Forms differ only in request type, theme and a handful of field rules; they
all share one TransactionSubmitter.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence

from flask import current_app

from .feedback import DEFAULT_FEEDBACK_TIMEOUT_MS
from .issue_errors import MissingAsset, UnknownForm
from .transaction_state import LineItem, TransactionHeader
from .transaction_submitter import SubmitterConfig

EXTERNAL_CLIENT_FEEDBACK_TIMEOUT_MS = 5000


def record_equipment_asset(issue_id: int, valid_items: Sequence[LineItem], *, store, header: TransactionHeader) -> None:
    """Links the new issue to the asset it was booked against."""
    if not header.asset_id:
        raise MissingAsset()
    store.record_issue_asset(issue_id, header.asset_id)


@dataclass(frozen=True)
class IssueForm:
    slug: str
    title: str
    theme: str
    submitter: SubmitterConfig
    keep_placeholder: bool = True

    def to_dict(self) -> Dict[str, Any]:
        config = self.submitter
        return {
            'slug': self.slug,
            'title': self.title,
            'theme': self.theme,
            'request_type_code': config.request_type_code,
            'requires_request_number': config.requires_request_number,
            'requires_asset': config.requires_asset,
            'finalize_on_submit': config.finalize_on_submit,
            'feedback_timeout_ms': config.feedback_timeout_ms,
            'redirect_delay_ms': config.redirect_delay_ms,
            'on_success_route': config.on_success_route,
            'keep_placeholder': self.keep_placeholder,
        }


FORMS: Dict[str, IssueForm] = {
    form.slug: form
    for form in (
        IssueForm(
            slug='office-supplies',
            title='Office supplies',
            theme='pink',
            submitter=SubmitterConfig(
                request_type_code='articulos_oficina',
                default_description='Office supplies withdrawal',
            ),
        ),
        IssueForm(
            slug='tools',
            title='Tools',
            theme='orange',
            submitter=SubmitterConfig(
                request_type_code='herramienta',
                default_description='Tool withdrawal',
            ),
        ),
        IssueForm(
            slug='cleaning',
            title='Cleaning supplies',
            theme='teal',
            submitter=SubmitterConfig(
                request_type_code='limpieza',
                default_description='Cleaning supplies withdrawal',
            ),
        ),
        IssueForm(
            slug='uniforms',
            title='Uniforms',
            theme='indigo',
            submitter=SubmitterConfig(
                request_type_code='vestimenta',
                default_description='Uniform withdrawal',
            ),
        ),
        IssueForm(
            slug='equipment',
            title='Equipment',
            theme='blue',
            submitter=SubmitterConfig(
                request_type_code='equipo',
                default_description='Equipment withdrawal',
                requires_asset=True,
                extra_commit_step=record_equipment_asset,
            ),
        ),
        IssueForm(
            slug='unassigned',
            title='Unassigned',
            theme='gray',
            submitter=SubmitterConfig(
                request_type_code='sin_asignacion',
                default_description='Unassigned withdrawal',
            ),
            keep_placeholder=False,
        ),
        IssueForm(
            slug='loans',
            title='Loans',
            theme='purple',
            submitter=SubmitterConfig(
                request_type_code='prestamo',
                default_description='Loan withdrawal',
            ),
        ),
        IssueForm(
            slug='external-client',
            title='External client output',
            theme='teal',
            submitter=SubmitterConfig(
                requires_request_number=True,
                finalize_on_submit=False,
                feedback_timeout_ms=EXTERNAL_CLIENT_FEEDBACK_TIMEOUT_MS,
                on_success_route='/issues/external-client',
            ),
        ),
    )
}


def list_forms() -> List[IssueForm]:
    return list(FORMS.values())


def get_form(slug: str) -> IssueForm:
    form = FORMS.get(slug)
    if form is None:
        raise UnknownForm(slug)
    return form


def submitter_config_for(form: IssueForm, app_config: Optional[dict] = None) -> SubmitterConfig:
    """Form settings with application-wide defaults layered in."""
    config = app_config if app_config is not None else current_app.config
    submitter = form.submitter
    overrides: Dict[str, Any] = {
        'redirect_delay_ms': int(config.get('ISSUE_REDIRECT_DELAY_MS', submitter.redirect_delay_ms)),
        'default_request_type_id': int(config.get('DEFAULT_REQUEST_TYPE_ID', submitter.default_request_type_id)),
    }
    if submitter.feedback_timeout_ms == DEFAULT_FEEDBACK_TIMEOUT_MS:
        overrides['feedback_timeout_ms'] = int(config.get('ISSUE_FEEDBACK_TIMEOUT_MS', DEFAULT_FEEDBACK_TIMEOUT_MS))
    return replace(submitter, **overrides)
