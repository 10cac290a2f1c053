from __future__ import annotations

import logging
from typing import Dict, List, Optional

from flask import current_app
from sqlalchemy import or_

from ..models import Article
from .stock_levels import stock_query
from .transaction_state import NO_BRAND_LABEL, CatalogItem

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 50
DEFAULT_BULK_LIMIT = 1000


class CatalogSearchService:
    @staticmethod
    def search_catalog(query_text: Optional[str] = None, *, limit: Optional[int] = None) -> List[CatalogItem]:
        """Return in-stock catalog entries for the item search modal.

        The optional text matches name or code case-insensitively; only items
        with a positive available quantity are returned.
        """
        limit = CatalogSearchService._clamp_limit(
            limit, _config_int("CATALOG_SEARCH_LIMIT", DEFAULT_SEARCH_LIMIT)
        )
        query, columns = stock_query(Article)
        query = query.filter(columns.available > 0)

        normalized_query = (query_text or "").strip()
        if normalized_query:
            pattern = f"%{normalized_query}%"
            query = query.filter(or_(Article.name.ilike(pattern), Article.code.ilike(pattern)))

        rows = query.order_by(Article.name.asc()).limit(limit).all()
        return [CatalogSearchService._serialize(article, available) for article, available in rows]

    @staticmethod
    def get_item(code: str) -> Optional[CatalogItem]:
        """Single catalog entry with its live available quantity, in stock or not."""
        if not code:
            return None
        query, _ = stock_query(Article)
        row = query.filter(Article.code == code).first()
        if row is None:
            return None
        article, available = row
        return CatalogSearchService._serialize(article, available)

    @staticmethod
    def load_catalog_page(page: int = 1, *, per_page: Optional[int] = None) -> Dict:
        """Bulk-load the in-stock catalog ordered by name, one page at a time."""
        per_page = CatalogSearchService._clamp_limit(
            per_page, _config_int("CATALOG_BULK_LIMIT", DEFAULT_BULK_LIMIT)
        )
        page = max(1, int(page or 1))

        query, columns = stock_query(Article)
        query = query.filter(columns.available > 0)
        total = query.count()
        rows = (
            query.order_by(Article.name.asc())
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        items = [CatalogSearchService._serialize(article, available) for article, available in rows]
        logger.debug("Loaded catalog page %s (%s of %s items)", page, len(items), total)
        return {
            "items": items,
            "page": page,
            "per_page": per_page,
            "total": total,
            "has_more": page * per_page < total,
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _clamp_limit(limit: Optional[int], ceiling: int) -> int:
        try:
            value = int(limit) if limit is not None else ceiling
        except (TypeError, ValueError):
            value = ceiling
        return max(1, min(value, ceiling))

    @staticmethod
    def _serialize(article: Article, available) -> CatalogItem:
        return CatalogItem(
            code=article.code,
            name=article.name,
            available_quantity=float(available or 0),
            unit=article.unit or "UND",
            unit_price=float(article.unit_price or 0),
            image_url=article.image_url,
            brand=article.brand or NO_BRAND_LABEL,
        )


def _config_int(key: str, default: int) -> int:
    try:
        return int(current_app.config.get(key, default))
    except (TypeError, ValueError):
        return default
