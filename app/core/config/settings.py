"""Application settings loaded from environment with safe fallbacks.

Environment precedence:
- Loads `.env` from the repo root before reading process env vars.
- Most values are pulled straight from env; booleans go through `_env_flag` so `"0"/"false"` work.
- CORS is normalized from `CORS_ORIGINS` (comma-separated).

Key expectations (defaults in parentheses):
- `APP_ENV` controls environment-specific behaviour (`production` default).
- Database: `DATABASE_URL` or component parts (`DATABASE_*`), with `_test` suffix enforced in tests.
- Tokens: `SECRET_KEY`, `ALGORITHM` (`HS256`), `ACCESS_TOKEN_EXPIRE_MINUTES` (`1440`).
- Passwords: `BCRYPT_ROUNDS` (`12`).
- Pagination: `DEFAULT_PAGE_SIZE` (`20`), `MAX_PAGE_SIZE` (`100`).
"""

import logging
import os
from pathlib import Path
from typing import Annotated, ClassVar, Optional

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Base directory of the project; used for resolving relative paths reliably.
# (__file__ is app/core/config/settings.py, so we need to traverse three levels up)
BASE_DIR = Path(__file__).resolve().parents[3]


load_dotenv(BASE_DIR / ".env")

logger = logging.getLogger(__name__)


def _env_flag(name: str, *, default: Optional[bool] = False) -> Optional[bool]:
    """
    Helper to parse boolean-like environment variables.
    """
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Behavior highlights:
    - Loads `.env` at repo root, then lets process env override.
    - Enforces safe DB URLs (prefers `DATABASE_URL`, ensures `_test` suffix for test DBs).
    - Feature toggles parsed via `_env_flag` to accept common truthy/falsey strings.
    - CORS origins normalized once to avoid mutation side effects in settings instances.
    """

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: Optional[str] = os.getenv("DATABASE_URL")
    test_database_url: Optional[str] = os.getenv("TEST_DATABASE_URL")
    database_hostname: Optional[str] = os.getenv("DATABASE_HOSTNAME")
    database_port: str = os.getenv("DATABASE_PORT", "5432")
    database_password: Optional[str] = os.getenv("DATABASE_PASSWORD")
    database_name: Optional[str] = os.getenv("DATABASE_NAME")
    database_username: Optional[str] = os.getenv("DATABASE_USERNAME")
    database_ssl_mode: str = os.getenv("DATABASE_SSL_MODE", "prefer")
    environment: str = os.getenv("APP_ENV", "production")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_dir: Optional[str] = os.getenv("LOG_DIR", "logs")
    use_json_logs: bool = _env_flag("USE_JSON_LOGS", default=False)
    cors_origins: Annotated[list[str], NoDecode] = []
    app_name: str = os.getenv("APP_NAME", "minisocial")

    secret_key: str = os.getenv("SECRET_KEY", "change-me-in-production")
    algorithm: str = os.getenv("ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24)
    )
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", 12))

    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", 20))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", 100))

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        env_override = os.getenv("APP_ENV")
        if env_override:
            object.__setattr__(self, "environment", env_override)

        if not self.cors_origins:
            object.__setattr__(self, "cors_origins", ["*"])

        if (
            self.environment.lower() == "production"
            and self.secret_key == "change-me-in-production"
        ):
            logger.warning("SECRET_KEY is not set; tokens are signed with the default key.")

    def get_database_url(self, *, use_test: bool = False) -> str:
        """Resolve the SQLAlchemy database URL for runtime or tests.

        Priority: explicit `DATABASE_URL` (or `_test` variant when requested),
        then composed Postgres parts, then `TEST_DATABASE_URL`, finally sqlite fallback.
        Enforces dedicated test DB names to avoid destructive writes to prod data.
        """
        if use_test:
            test_url = self._resolve_test_database_url()
            if test_url.startswith("sqlite"):
                return test_url
            if "_test" not in test_url:
                raise ValueError(
                    "Test database URL must point to a dedicated test database (contains '_test')."
                )
            return test_url

        if self.database_url:
            return self.database_url

        if (
            self.database_hostname
            and self.database_username
            and self.database_password
            and self.database_name
        ):
            return self._compose_postgres_url(self.database_name)

        if self.test_database_url:
            return self.test_database_url

        # Fail open to local SQLite so the app can start (health checks) when env vars are missing.
        logger.warning("Database configuration is incomplete; using local SQLite.")
        return "sqlite:///./minisocial.db"

    def _compose_postgres_url(self, database_name: str) -> str:
        base_url = (
            f"postgresql+psycopg2://{self.database_username}:{self.database_password}"
            f"@{self.database_hostname}:{self.database_port}/{database_name}"
        )
        if self.database_ssl_mode:
            return f"{base_url}?sslmode={self.database_ssl_mode}"
        return base_url

    def _resolve_test_database_url(self) -> str:
        """
        Build a test database URL.
        Priority:
        1) Explicit TEST_DATABASE_URL env.
        2) Derive from DATABASE_URL with a *_test suffix (or reuse sqlite).
        3) Derive from Postgres components with a *_test suffix.
        4) Fallback to sqlite for ad-hoc local runs.
        """
        if self.test_database_url:
            return self.test_database_url

        if self.database_url:
            from sqlalchemy.engine import make_url

            url = make_url(self.database_url)
            if url.drivername.startswith("sqlite"):
                return self.database_url
            db_name = url.database or ""
            suffix_name = db_name if db_name.endswith("_test") else f"{db_name}_test"
            return url.set(database=suffix_name).render_as_string(hide_password=False)

        if (
            self.database_hostname
            and self.database_username
            and self.database_password
            and self.database_name
        ):
            return self._compose_postgres_url(f"{self.database_name}_test")

        return "sqlite:///./test.db"


settings = Settings()
