"""Available stock derived from receipts minus issued line items."""
from __future__ import annotations

from typing import Dict, Iterable, NamedTuple

from sqlalchemy import func, select

from ..extensions import db
from ..models import Article, IssueLine, StockReceipt


class StockColumns(NamedTuple):
    received: object
    issued: object
    available: object


def stock_columns() -> StockColumns:
    """Aggregated subqueries plus the ``available`` expression built on them.

    Callers outer-join both subqueries on ``code`` against ``Article.code``.
    """
    received = (
        select(
            StockReceipt.article_code.label("code"),
            func.sum(StockReceipt.quantity).label("quantity"),
        )
        .group_by(StockReceipt.article_code)
        .subquery("received_stock")
    )
    issued = (
        select(
            IssueLine.article_code.label("code"),
            func.sum(IssueLine.quantity).label("quantity"),
        )
        .group_by(IssueLine.article_code)
        .subquery("issued_stock")
    )
    available = func.coalesce(received.c.quantity, 0) - func.coalesce(issued.c.quantity, 0)
    return StockColumns(received, issued, available)


def stock_query(*entities):
    """Query over Article joined to stock aggregates; ``available`` is appended last."""
    columns = stock_columns()
    query = (
        db.session.query(*entities, columns.available.label("available_quantity"))
        .select_from(Article)
        .outerjoin(columns.received, columns.received.c.code == Article.code)
        .outerjoin(columns.issued, columns.issued.c.code == Article.code)
    )
    return query, columns


def available_quantities(codes: Iterable[str]) -> Dict[str, float]:
    """Live available quantity per article code; unknown codes are omitted."""
    code_list = sorted({code for code in codes if code})
    if not code_list:
        return {}
    query, _ = stock_query(Article.code)
    rows = query.filter(Article.code.in_(code_list)).all()
    return {code: float(available or 0) for code, available in rows}
