# ruff: noqa: E402
import os
from typing import Any

import pytest

# Set testing environment flags before importing the app or settings
os.environ["APP_ENV"] = "test"
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_DIR", "")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///./tests/test.db")

from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

import app.models.registry  # noqa: F401 - register every table on Base.metadata
from app.core.config import settings
from app.core.database import Base, build_engine, get_db
from app.main import app
from app.oauth2 import create_access_token
from app.services.users import UserService
from tests.testclient import TestClient, auth_headers


class AttrDict(dict):
    """Dict with attribute-style access for fixtures."""

    def __getattr__(self, item: str) -> Any:
        try:
            return self[item]
        except KeyError as exc:
            raise AttributeError(item) from exc


test_db_url = settings.get_database_url(use_test=True)

# Safety: never run tests against a non-test Postgres database.
parsed_url = make_url(test_db_url)
if parsed_url.drivername.startswith("postgresql") and not (
    parsed_url.database or ""
).endswith("_test"):
    raise RuntimeError(
        f"Refusing to run tests against non-test database '{parsed_url.database}'."
    )

engine = build_engine(test_db_url)
Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _clear_tables() -> None:
    with engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())


@pytest.fixture(scope="function")
def session():
    """Fresh database session over empty tables for each test."""
    _clear_tables()
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(session):
    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        try:
            yield test_client
        finally:
            app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def make_user(session):
    """Factory registering users straight through the service layer."""
    counter = {"n": 0}

    def _make(username: str | None = None, **overrides) -> AttrDict:
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        data = {
            "username": username,
            "email": overrides.pop("email", f"{username}@example.com"),
            "password": overrides.pop("password", "password123"),
            "name": overrides.pop("name", username.capitalize()),
        }
        user = UserService(session).register(**data)
        user["password"] = data["password"]
        user["token"] = create_access_token(
            {"user_id": user["id"], "username": user["username"]}
        )
        return AttrDict(user)

    return _make


def _register(client, username: str) -> AttrDict:
    user_data = {
        "username": username,
        "email": f"{username}@example.com",
        "password": "password123",
        "name": username.capitalize(),
    }
    res = client.post("/api/auth/register", json=user_data)
    assert res.status_code == 201
    body = res.json()
    user = body["user"]
    user["password"] = user_data["password"]
    user["token"] = body["token"]
    return AttrDict(user)


@pytest.fixture(scope="function")
def test_user(client):
    return _register(client, "hello123")


@pytest.fixture(scope="function")
def test_user2(client):
    return _register(client, "hello456")


@pytest.fixture(scope="function")
def token(test_user):
    return create_access_token(
        {"user_id": test_user["id"], "username": test_user["username"]}
    )


@pytest.fixture(scope="function")
def authorized_client(client, token):
    client.headers.update(auth_headers(token))
    return client


@pytest.fixture(scope="function")
def test_post(authorized_client):
    res = authorized_client.post(
        "/api/posts", json={"content": "Fixture post content"}
    )
    assert res.status_code == 201
    return AttrDict(res.json()["post"])
