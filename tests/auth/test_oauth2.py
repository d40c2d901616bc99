from datetime import timedelta

import pytest
from jose import jwt

from app.core.config import settings
from app.core.exceptions import InvalidTokenException, TokenExpiredException
from app.oauth2 import create_access_token, verify_access_token
from tests.testclient import auth_headers


def test_token_round_trip_claims():
    token = create_access_token({"user_id": "7", "username": "alice"})
    data = verify_access_token(token)
    assert data.id == 7
    assert data.username == "alice"
    claims = jwt.get_unverified_claims(token)
    assert "exp" in claims


def test_expired_token_rejected():
    token = create_access_token({"user_id": 1}, expires_delta=timedelta(minutes=-1))
    with pytest.raises(TokenExpiredException):
        verify_access_token(token)


def test_wrong_signature_rejected():
    token = jwt.encode({"user_id": 1}, "another-secret", algorithm=settings.algorithm)
    with pytest.raises(InvalidTokenException):
        verify_access_token(token)


def test_token_without_user_id_rejected():
    token = create_access_token({"username": "ghost"})
    with pytest.raises(InvalidTokenException):
        verify_access_token(token)


def test_create_token_rejects_bad_user_id():
    with pytest.raises(ValueError):
        create_access_token({"user_id": "not-a-number"})


def test_expired_token_over_http(client, test_user):
    token = create_access_token(
        {"user_id": test_user.id}, expires_delta=timedelta(seconds=-5)
    )
    res = client.get("/api/auth/me", headers=auth_headers(token))
    assert res.status_code == 401
    assert res.json()["code"] == "token_expired"


def test_garbage_token_over_http(client):
    res = client.get("/api/auth/me", headers=auth_headers("not.a.jwt"))
    assert res.status_code == 401
    assert res.json()["code"] == "invalid_token"


def test_token_of_unknown_user(client):
    token = create_access_token({"user_id": 9999, "username": "ghost"})
    res = client.get("/api/auth/me", headers=auth_headers(token))
    assert res.status_code == 401
    assert res.json()["code"] == "not_authenticated"


def test_token_stops_working_after_account_deletion(client, test_user):
    headers = auth_headers(test_user.token)
    assert client.delete("/api/users/me", headers=headers).status_code == 200
    res = client.get("/api/auth/me", headers=headers)
    assert res.status_code == 401
    assert res.json()["error"] == "User not found or inactive"


def test_optional_auth_ignores_bad_token(client, test_user, test_user2):
    post = client.post(
        "/api/posts",
        json={"content": "public"},
        headers=auth_headers(test_user.token),
    ).json()["post"]
    client.post(
        f"/api/likes/{post['id']}/like", headers=auth_headers(test_user2.token)
    )

    anonymous = client.get(f"/api/posts/{post['id']}")
    assert anonymous.status_code == 200
    assert anonymous.json()["post"]["liked_by_user"] is False

    broken = client.get(
        f"/api/posts/{post['id']}", headers=auth_headers("broken-token")
    )
    assert broken.status_code == 200
    assert broken.json()["post"]["liked_by_user"] is False

    liker = client.get(
        f"/api/posts/{post['id']}", headers=auth_headers(test_user2.token)
    )
    assert liker.json()["post"]["liked_by_user"] is True
    assert liker.json()["post"]["like_count"] == 1
