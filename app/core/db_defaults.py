"""Database-aware helpers for SQL column defaults."""

from datetime import datetime, timezone

from sqlalchemy.sql import text


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp with microsecond precision.

    Assigned from Python so rows created in the same second still order
    deterministically on SQLite, whose CURRENT_TIMESTAMP has second resolution.
    """
    return datetime.now(timezone.utc)


def timestamp_default():
    """Return a server-side timestamp default portable across dialects."""
    return text("CURRENT_TIMESTAMP")


__all__ = ["utcnow", "timestamp_default"]
