"""Core database access helpers.

Re-exports the engine, session factory and `get_db` dependency from
`app.core.database.session` together with the shared declarative `Base`
and the pagination/query helpers used by the services.
"""

from app.models.base import Base

from .query_helpers import (
    build_pagination,
    count_rows,
    normalize_page,
    paginate,
)
from .session import SessionLocal, build_engine, engine, get_db

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "build_engine",
    "build_pagination",
    "count_rows",
    "normalize_page",
    "paginate",
]
