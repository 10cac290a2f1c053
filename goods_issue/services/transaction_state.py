"""In-progress withdrawal: line items plus header fields for one form."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from ..utils.error_messages import ErrorMessages as EM
from ..utils.error_messages import WarningMessages as WM
from ..utils.timezone_utils import TimezoneUtils
from .feedback import DEFAULT_FEEDBACK_TIMEOUT_MS, Feedback
from .issue_errors import DuplicateItem, OutOfStock, RowNotFound, format_quantity

NO_BRAND_LABEL = "No brand"
DEFAULT_UNIT = "UND"


@dataclass(frozen=True)
class CatalogItem:
    """Snapshot of one catalog entry as returned by the catalog query."""
    code: str
    name: str
    available_quantity: float
    unit: str = DEFAULT_UNIT
    unit_price: float = 0.0
    image_url: Optional[str] = None
    brand: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CatalogItem":
        return cls(
            code=str(data.get("code") or ""),
            name=str(data.get("name") or ""),
            available_quantity=_safe_number(data.get("available_quantity")),
            unit=data.get("unit") or DEFAULT_UNIT,
            unit_price=_safe_number(data.get("unit_price")),
            image_url=data.get("image_url"),
            brand=data.get("brand"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class LineItem:
    item_code: str = ""
    item_name: str = ""
    quantity: float = 0.0
    unit: str = ""
    unit_price: float = 0.0
    brand: str = ""
    available_quantity: float = 0.0
    image_url: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return bool(self.item_code) and self.quantity > 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LineItem":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


@dataclass
class TransactionHeader:
    approver_id: str = ""
    requester_id: str = ""
    comments: str = ""
    request_number: Optional[int] = None
    destination: Optional[str] = None
    requested_at: Optional[datetime] = None
    asset_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["requested_at"] = self.requested_at.isoformat() if self.requested_at else None
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TransactionHeader":
        return cls(
            approver_id=str(data.get("approver_id") or ""),
            requester_id=str(data.get("requester_id") or ""),
            comments=str(data.get("comments") or ""),
            request_number=_safe_int(data.get("request_number")),
            destination=str(data["destination"]) if data.get("destination") else None,
            requested_at=TimezoneUtils.parse_iso(data.get("requested_at")),
            asset_id=_safe_int(data.get("asset_id")),
        )


class TransactionState:
    """Line items plus header for one withdrawal form instance.

    Owned by a single form; never shared across forms. The stock ceiling on
    each row is the catalog snapshot taken when the item was picked and may be
    stale by the time the form is submitted.
    """

    EDITABLE_FIELDS = ("quantity", "unit", "unit_price")

    def __init__(
        self,
        *,
        approver_id: str = "",
        rows: Optional[List[LineItem]] = None,
        header: Optional[TransactionHeader] = None,
        keep_placeholder: bool = True,
        feedback_timeout_ms: int = DEFAULT_FEEDBACK_TIMEOUT_MS,
    ):
        self.header = header or TransactionHeader(approver_id=approver_id or "")
        self.rows: List[LineItem] = list(rows) if rows is not None else [LineItem()]
        self.keep_placeholder = keep_placeholder
        self.feedback_timeout_ms = feedback_timeout_ms

    def __len__(self) -> int:
        return len(self.rows)

    # ------------------------------------------------------------------
    # Row operations
    # ------------------------------------------------------------------
    def add_empty_row(self) -> LineItem:
        row = LineItem()
        self.rows.append(row)
        return row

    def update_row_with_catalog_item(self, row_index: int, catalog_item: CatalogItem) -> LineItem:
        """Fill a row from a catalog pick. Quantity always restarts at zero.

        Raises DuplicateItem when another row already holds the same code and
        OutOfStock when the item has nothing available; the state is left
        untouched in both cases.
        """
        self._check_index(row_index)
        for index, row in enumerate(self.rows):
            if index != row_index and row.item_code and row.item_code == catalog_item.code:
                raise DuplicateItem(catalog_item.code)
        if _safe_number(catalog_item.available_quantity) <= 0:
            raise OutOfStock(catalog_item.code)

        row = LineItem(
            item_code=catalog_item.code,
            item_name=catalog_item.name,
            quantity=0.0,
            unit=catalog_item.unit or DEFAULT_UNIT,
            unit_price=_safe_number(catalog_item.unit_price),
            brand=catalog_item.brand or NO_BRAND_LABEL,
            available_quantity=_safe_number(catalog_item.available_quantity),
            image_url=catalog_item.image_url,
        )
        self.rows[row_index] = row
        return row

    def update_field(self, row_index: int, field_name: str, value: Any) -> Optional[Feedback]:
        """Set one field on a row; returns a warning Feedback when stock clamps the quantity."""
        self._check_index(row_index)
        if field_name not in self.EDITABLE_FIELDS:
            raise ValueError(EM.FIELD_NOT_EDITABLE.format(field=field_name))

        row = self.rows[row_index]
        if field_name == "quantity":
            return self._update_quantity(row, value)
        if field_name == "unit_price":
            row.unit_price = max(0.0, _safe_number(value))
        else:
            row.unit = str(value or "")
        return None

    def remove_row(self, row_index: int, *, keep_placeholder: Optional[bool] = None) -> None:
        self._check_index(row_index)
        del self.rows[row_index]
        keep = self.keep_placeholder if keep_placeholder is None else keep_placeholder
        if keep and not self.rows:
            self.rows.append(LineItem())

    def reset(self) -> None:
        self.rows = [LineItem()]

    def valid_items(self) -> List[LineItem]:
        return [row for row in self.rows if row.is_valid]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "header": self.header.to_dict(),
            "rows": [row.to_dict() for row in self.rows],
            "keep_placeholder": self.keep_placeholder,
            "feedback_timeout_ms": self.feedback_timeout_ms,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TransactionState":
        return cls(
            header=TransactionHeader.from_dict(data.get("header") or {}),
            rows=[LineItem.from_dict(row) for row in data.get("rows") or []],
            keep_placeholder=bool(data.get("keep_placeholder", True)),
            feedback_timeout_ms=int(data.get("feedback_timeout_ms") or DEFAULT_FEEDBACK_TIMEOUT_MS),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _check_index(self, row_index: int) -> None:
        if not isinstance(row_index, int) or row_index < 0 or row_index >= len(self.rows):
            raise RowNotFound(row_index)

    def _update_quantity(self, row: LineItem, value: Any) -> Optional[Feedback]:
        if value is None or (isinstance(value, str) and not value.strip()):
            row.quantity = 0.0
            return None

        quantity = _safe_number(value)
        if quantity > row.available_quantity:
            row.quantity = max(0.0, row.available_quantity)
            return Feedback.warning(
                WM.INSUFFICIENT_STOCK.format(available=format_quantity(row.available_quantity)),
                self.feedback_timeout_ms,
            )
        row.quantity = max(0.0, quantity)
        return None


def _safe_number(value: Any) -> float:
    if value in (None, "", "null"):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _safe_int(value: Any) -> Optional[int]:
    if value in (None, "", "null"):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
