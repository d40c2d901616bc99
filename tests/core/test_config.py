import pytest

from app.core.config import Settings, settings


def test_test_environment_flags_are_applied():
    assert settings.environment == "test"
    assert settings.bcrypt_rounds == 4
    assert not settings.log_dir


def test_sqlite_test_url_is_used_as_is():
    cfg = Settings(test_database_url="sqlite:///./other.db")
    assert cfg.get_database_url(use_test=True) == "sqlite:///./other.db"


def test_non_test_postgres_database_is_refused():
    cfg = Settings(test_database_url="postgresql://u:p@localhost:5432/prod")
    with pytest.raises(ValueError):
        cfg.get_database_url(use_test=True)


def test_test_url_derived_from_database_url():
    cfg = Settings(
        test_database_url=None,
        database_url="postgresql://u:p@localhost:5432/social",
    )
    assert cfg.get_database_url(use_test=True).endswith("/social_test")


def test_database_url_composed_from_parts():
    cfg = Settings(
        database_url=None,
        database_hostname="db",
        database_port="5433",
        database_username="app",
        database_password="secret",
        database_name="social",
        database_ssl_mode="disable",
    )
    assert (
        cfg.get_database_url()
        == "postgresql+psycopg2://app:secret@db:5433/social?sslmode=disable"
    )


def test_cors_origins_split_from_env(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "http://a.example, http://b.example")
    cfg = Settings()
    assert cfg.cors_origins == ["http://a.example", "http://b.example"]


def test_cors_origins_default_to_wildcard(monkeypatch):
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    assert Settings().cors_origins == ["*"]


def test_pagination_defaults():
    assert settings.default_page_size == 20
    assert settings.max_page_size == 100
