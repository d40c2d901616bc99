"""CI helper that runs the Alembic history up, down and up again on a scratch database.

Usage:
    python scripts/check_migrations.py

Uses ``ALEMBIC_DATABASE_URL`` when set (point it at a throwaway Postgres database),
otherwise a temporary SQLite file that is removed afterwards.
"""

import os
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import make_url

ROOT = Path(__file__).resolve().parents[1]


def main() -> None:
    temp_db = ROOT / ".alembic_ci.db"
    os.environ.setdefault("APP_ENV", "test")

    db_url = os.getenv("ALEMBIC_DATABASE_URL") or f"sqlite:///{temp_db}"
    url = make_url(db_url)
    if url.drivername.startswith("postgresql") and not (url.database or "").endswith(
        "_test"
    ):
        raise SystemExit(
            f"[check_migrations] Refusing to run against '{url.database}'; use a *_test database."
        )

    os.environ["ALEMBIC_DATABASE_URL"] = db_url
    if temp_db.exists():
        temp_db.unlink()

    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    try:
        command.upgrade(cfg, "head")
        command.downgrade(cfg, "base")
        command.upgrade(cfg, "head")
        print("[check_migrations] upgrade/downgrade cycle OK")
    finally:
        if temp_db.exists():
            temp_db.unlink()


if __name__ == "__main__":
    main()
