import pytest

from goods_issue.extensions import db
from goods_issue.models import Issue, IssueAsset, IssueLine, IssueRequest, StockReceipt
from goods_issue.services.issue_errors import PersistenceFailure
from goods_issue.services.issue_store import SqlAlchemyIssueStore
from goods_issue.services.transaction_state import LineItem
from goods_issue.utils.timezone_utils import TimezoneUtils


def _create_issue(store, **overrides):
    data = dict(
        issued_at=TimezoneUtils.utc_now(),
        approver_id='A100',
        requester_id='R300',
        request_number=None,
        comments='',
        finalized=True,
    )
    data.update(overrides)
    return store.create_issue(**data)


def test_request_type_resolution_is_case_insensitive_substring(app_context):
    store = SqlAlchemyIssueStore()

    assert store.resolve_request_type('OFICINA', 1) == 2
    assert store.resolve_request_type('herram', 1) == 3


def test_unknown_request_type_falls_back_to_default(app_context):
    store = SqlAlchemyIssueStore()

    assert store.resolve_request_type('does-not-exist', 1) == 1
    assert store.resolve_request_type('', 4) == 4


def test_commit_sequence_persists_request_header_and_lines(app_context):
    store = SqlAlchemyIssueStore()

    number = store.create_request(
        request_type_id=2,
        description='Office supplies withdrawal',
        requested_at=TimezoneUtils.utc_now(),
        responsible_id='A100',
        requester_id='R300',
        destination='Finance',
    )
    issue_id = _create_issue(store, request_number=number, comments='Quarterly restock')
    inserted = store.insert_lines(issue_id, [
        LineItem(item_code='OF-001', quantity=2, unit_price=4.5),
        LineItem(item_code='OF-002', quantity=10, unit_price=0.35),
    ])

    request = db.session.get(IssueRequest, number)
    issue = db.session.get(Issue, issue_id)
    assert request.responsible_id == 'A100'
    assert request.destination == 'Finance'
    assert issue.request_number == number
    assert issue.comments == 'Quarterly restock'
    assert issue.receipt_number == f'SA-{issue_id:04d}'
    assert inserted == 2
    assert [(line.article_code, line.quantity) for line in issue.lines.order_by(IssueLine.id)] == [
        ('OF-001', 2),
        ('OF-002', 10),
    ]


def test_available_quantities_subtract_issued_lines(app_context):
    store = SqlAlchemyIssueStore()
    issue_id = _create_issue(store)
    store.insert_lines(issue_id, [LineItem(item_code='TL-001', quantity=4, unit_price=12.0)])
    db.session.add(StockReceipt(article_code='TL-001', quantity=1))
    db.session.commit()

    live = store.available_quantities(['TL-001', 'OF-001', 'NOPE'])

    assert live == {'TL-001': 3.0, 'OF-001': 40.0}


def test_failed_line_insert_leaves_header_in_place(app_context):
    store = SqlAlchemyIssueStore()
    issue_id = _create_issue(store)

    with pytest.raises(PersistenceFailure) as excinfo:
        store.insert_lines(issue_id, [LineItem(item_code='OF-001', quantity=0)])

    assert excinfo.value.step == 'lines'
    assert db.session.get(Issue, issue_id) is not None
    assert IssueLine.query.filter_by(issue_id=issue_id).count() == 0


def test_finalize_issue(app_context):
    store = SqlAlchemyIssueStore()
    issue_id = _create_issue(store, finalized=False)

    assert store.finalize_issue(issue_id) is True
    assert db.session.get(Issue, issue_id).finalized is True
    assert store.finalize_issue(999) is False


def test_record_issue_asset(app_context):
    store = SqlAlchemyIssueStore()
    issue_id = _create_issue(store)

    store.record_issue_asset(issue_id, 1)

    assert IssueAsset.query.filter_by(issue_id=issue_id, asset_id=1).count() == 1
