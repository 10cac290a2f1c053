import pytest

from goods_issue.services.feedback import Severity
from goods_issue.services.issue_errors import DuplicateItem, OutOfStock, RowNotFound
from goods_issue.services.transaction_state import (
    DEFAULT_UNIT,
    NO_BRAND_LABEL,
    CatalogItem,
    LineItem,
    TransactionHeader,
    TransactionState,
)


def _catalog_item(code='X1', available=10, **overrides):
    data = dict(code=code, name=f'Item {code}', available_quantity=available, unit='UND', unit_price=2.5)
    data.update(overrides)
    return CatalogItem(**data)


def test_new_state_starts_with_single_placeholder_row():
    state = TransactionState(approver_id='A1')

    assert len(state) == 1
    assert state.rows[0].item_code == ''
    assert state.rows[0].quantity == 0
    assert state.header.approver_id == 'A1'
    assert state.valid_items() == []


def test_add_and_remove_rows_track_counts_with_placeholder_policy():
    state = TransactionState()
    state.add_empty_row()
    state.add_empty_row()
    assert len(state) == 3

    state.remove_row(2)
    state.remove_row(1)
    state.remove_row(0)
    assert len(state) == 1  # placeholder kept

    state.remove_row(0, keep_placeholder=False)
    assert len(state) == 0


def test_state_without_placeholder_policy_can_become_empty():
    state = TransactionState(keep_placeholder=False)
    state.remove_row(0)
    assert state.rows == []


def test_selecting_catalog_item_replaces_row_and_resets_quantity():
    state = TransactionState()
    state.rows[0].quantity = 7

    row = state.update_row_with_catalog_item(0, _catalog_item(brand=None, image_url='http://img/x1.png'))

    assert row.item_code == 'X1'
    assert row.item_name == 'Item X1'
    assert row.quantity == 0
    assert row.available_quantity == 10
    assert row.unit_price == 2.5
    assert row.brand == NO_BRAND_LABEL
    assert row.image_url == 'http://img/x1.png'


def test_duplicate_selection_leaves_state_unchanged():
    state = TransactionState()
    state.add_empty_row()
    state.update_row_with_catalog_item(1, _catalog_item('X2'))
    before = [row.to_dict() for row in state.rows]

    with pytest.raises(DuplicateItem) as excinfo:
        state.update_row_with_catalog_item(0, _catalog_item('X2'))

    assert [row.to_dict() for row in state.rows] == before
    assert len(state) == 2
    assert excinfo.value.to_feedback().severity is Severity.WARNING
    assert excinfo.value.item_code == 'X2'


def test_reselecting_same_item_in_same_row_is_allowed():
    state = TransactionState()
    state.update_row_with_catalog_item(0, _catalog_item('X1'))
    state.update_field(0, 'quantity', 4)

    row = state.update_row_with_catalog_item(0, _catalog_item('X1', available=8))

    assert row.available_quantity == 8
    assert row.quantity == 0


def test_quantity_above_ceiling_is_clamped_with_warning():
    state = TransactionState(feedback_timeout_ms=1234)
    state.update_row_with_catalog_item(0, _catalog_item(available=10))

    feedback = state.update_field(0, 'quantity', '12')

    assert state.rows[0].quantity == 10
    assert feedback.severity is Severity.WARNING
    assert feedback.message == 'Insufficient stock: only 10 available.'
    assert feedback.timeout_ms == 1234


@pytest.mark.parametrize('value', ['', None, '   ', 'abc', -3])
def test_blank_invalid_or_negative_quantity_becomes_zero_silently(value):
    state = TransactionState()
    state.update_row_with_catalog_item(0, _catalog_item())
    state.update_field(0, 'quantity', 5)

    assert state.update_field(0, 'quantity', value) is None
    assert state.rows[0].quantity == 0


def test_fractional_quantity_is_kept():
    state = TransactionState()
    state.update_row_with_catalog_item(0, _catalog_item(available=3))

    state.update_field(0, 'quantity', '2.5')

    assert state.rows[0].quantity == 2.5


def test_update_field_rejects_non_editable_fields():
    state = TransactionState()
    with pytest.raises(ValueError):
        state.update_field(0, 'item_code', 'X9')


def test_unit_price_never_negative():
    state = TransactionState()
    state.update_field(0, 'unit_price', -4)
    assert state.rows[0].unit_price == 0


def test_out_of_range_index_raises_row_not_found():
    state = TransactionState()
    with pytest.raises(RowNotFound):
        state.update_field(3, 'quantity', 1)
    with pytest.raises(RowNotFound):
        state.remove_row(-1)


def test_valid_items_filters_and_preserves_order():
    state = TransactionState(rows=[
        LineItem(item_code='B', quantity=1, available_quantity=5, unit_price=1.1),
        LineItem(item_code='', quantity=3, available_quantity=5),
        LineItem(item_code='C', quantity=0, available_quantity=5),
        LineItem(item_code='A', quantity=2, available_quantity=5, unit_price=9.99),
    ])

    assert [(row.item_code, row.unit_price) for row in state.valid_items()] == [('B', 1.1), ('A', 9.99)]


def test_reset_returns_to_single_empty_row():
    state = TransactionState()
    state.update_row_with_catalog_item(0, _catalog_item())
    state.add_empty_row()

    state.reset()

    assert len(state) == 1
    assert state.rows[0].item_code == ''


def test_state_survives_session_serialization():
    state = TransactionState(approver_id='A1', keep_placeholder=False, feedback_timeout_ms=5000)
    state.header.requester_id = 'R1'
    state.header.request_number = 42
    state.update_row_with_catalog_item(0, _catalog_item())
    state.update_field(0, 'quantity', 3)

    restored = TransactionState.from_dict(state.to_dict())

    assert restored.to_dict() == state.to_dict()
    assert restored.keep_placeholder is False
    assert restored.header.request_number == 42


def test_selecting_item_without_stock_is_rejected_and_row_untouched():
    state = TransactionState()

    with pytest.raises(OutOfStock) as excinfo:
        state.update_row_with_catalog_item(0, _catalog_item(available=0))

    assert excinfo.value.to_feedback().severity == Severity.WARNING
    assert state.rows[0].item_code == ''


def test_missing_unit_defaults_to_und():
    state = TransactionState()

    row = state.update_row_with_catalog_item(0, _catalog_item(unit=''))

    assert row.unit == DEFAULT_UNIT == 'UND'
    assert CatalogItem.from_mapping({'code': 'X2', 'name': 'Item X2'}).unit == DEFAULT_UNIT


def test_header_from_dict_ignores_non_string_timestamp():
    header = TransactionHeader.from_dict({'requested_at': 5, 'destination': 42})

    assert header.requested_at is None
    assert header.destination == '42'
