"""
Query helpers for offset pagination and aggregate counts.
"""

import math
from typing import Any, Dict, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from app.core.config import settings


def normalize_page(limit: int | None = None, offset: int | None = None) -> Tuple[int, int]:
    """Clamp limit to [1, MAX_PAGE_SIZE] and offset to >= 0."""
    if limit is None:
        limit = settings.default_page_size
    limit = min(max(1, int(limit)), settings.max_page_size)
    offset = max(0, int(offset or 0))
    return limit, offset


def paginate(stmt: Select, limit: int, offset: int) -> Select:
    """Apply offset pagination to a select statement."""
    return stmt.offset(offset).limit(limit)


def count_rows(db: Session, stmt: Select) -> int:
    """Count the rows a select would return, ignoring its ORDER BY/LIMIT.

    Listings build their total from the same statement they page through so
    `total_count` always matches the exhaustive listing.
    """
    subquery = stmt.order_by(None).limit(None).offset(None).subquery()
    return db.execute(select(func.count()).select_from(subquery)).scalar_one()


def build_pagination(limit: int, offset: int, total_count: int) -> Dict[str, Any]:
    """Pagination block shared by every list endpoint."""
    total_pages = math.ceil(total_count / limit) if limit else 0
    return {
        "limit": limit,
        "offset": offset,
        "total_count": total_count,
        "total_pages": total_pages,
        "current_page": offset // limit + 1 if limit else 1,
        "has_next": offset + limit < total_count,
        "has_prev": offset > 0,
    }


__all__ = [
    "normalize_page",
    "paginate",
    "count_rows",
    "build_pagination",
]
