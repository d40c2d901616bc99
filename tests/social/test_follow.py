import pytest

from app.core.exceptions import (
    AlreadyFollowingException,
    NotFollowingException,
    ResourceNotFoundException,
    SelfFollowException,
)
from app.services.social import FollowService
from app.services.users import UserService
from tests.testclient import auth_headers


@pytest.fixture
def follow_service(session):
    return FollowService(session)


def test_follow_creates_edge(follow_service, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    edge = follow_service.follow(alice.id, bob.id)
    assert edge["follower_id"] == alice.id
    assert edge["followed_id"] == bob.id
    assert edge["created_at"] is not None
    assert follow_service.exists(alice.id, bob.id)
    assert not follow_service.exists(bob.id, alice.id)


def test_self_follow_rejected(follow_service, make_user):
    alice = make_user("alice")
    with pytest.raises(SelfFollowException):
        follow_service.follow(alice.id, alice.id)


def test_double_follow_rejected(follow_service, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    follow_service.follow(alice.id, bob.id)
    with pytest.raises(AlreadyFollowingException):
        follow_service.follow(alice.id, bob.id)


def test_follow_missing_or_deleted_user(session, follow_service, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    with pytest.raises(ResourceNotFoundException):
        follow_service.follow(alice.id, 9999)
    UserService(session).soft_delete(bob.id)
    with pytest.raises(ResourceNotFoundException):
        follow_service.follow(alice.id, bob.id)


def test_unfollow(follow_service, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    follow_service.follow(alice.id, bob.id)
    follow_service.unfollow(alice.id, bob.id)
    assert not follow_service.exists(alice.id, bob.id)
    with pytest.raises(NotFollowingException):
        follow_service.unfollow(alice.id, bob.id)


def test_listings_newest_first(follow_service, make_user):
    alice = make_user("alice")
    others = [make_user(f"friend{i}") for i in range(3)]
    for other in others:
        follow_service.follow(alice.id, other.id)
        follow_service.follow(other.id, alice.id)

    following = follow_service.list_following(alice.id)
    assert [u["id"] for u in following["following"]] == [
        o.id for o in reversed(others)
    ]
    assert following["pagination"]["total_count"] == 3
    assert all(u["followed_at"] is not None for u in following["following"])

    followers = follow_service.list_followers(alice.id, limit=2)
    assert len(followers["followers"]) == 2
    assert followers["pagination"]["has_next"] is True
    assert followers["pagination"]["total_pages"] == 2


def test_counts_skip_deleted_accounts(session, follow_service, make_user):
    alice, bob, carol = make_user("alice"), make_user("bob"), make_user("carol")
    follow_service.follow(bob.id, alice.id)
    follow_service.follow(carol.id, alice.id)
    follow_service.follow(alice.id, bob.id)
    assert follow_service.counts(alice.id) == {
        "follower_count": 2,
        "following_count": 1,
    }

    UserService(session).soft_delete(carol.id)
    assert follow_service.counts(alice.id)["follower_count"] == 1
    followers = follow_service.list_followers(alice.id)["followers"]
    assert [u["id"] for u in followers] == [bob.id]


def test_mutual_follows(follow_service, make_user):
    alice, bob, carol = make_user("alice"), make_user("bob"), make_user("carol")
    follow_service.follow(alice.id, bob.id)
    follow_service.follow(bob.id, alice.id)
    follow_service.follow(alice.id, carol.id)

    mutual = follow_service.mutual_follows(alice.id)
    assert [u["id"] for u in mutual["users"]] == [bob.id]
    assert follow_service.check_mutual(alice.id, bob.id)["is_mutual"] is True
    assert follow_service.check_mutual(alice.id, carol.id) == {
        "following": True,
        "followed_by": False,
        "is_mutual": False,
    }


# ----- HTTP -----


def test_follow_endpoints(client, test_user, test_user2):
    headers = auth_headers(test_user.token)
    res = client.post("/api/users/follow", json={"user_id": test_user2.id}, headers=headers)
    assert res.status_code == 201
    assert res.json()["follow"]["followed_id"] == test_user2.id

    again = client.post(
        "/api/users/follow", json={"userId": test_user2.id}, headers=headers
    )
    assert again.status_code == 400
    assert again.json()["code"] == "already_following"

    following = client.get("/api/users/following", headers=headers).json()
    assert following["following"][0]["username"] == test_user2.username
    assert following["pagination"]["limit"] == 10

    followers = client.get(
        "/api/users/followers", headers=auth_headers(test_user2.token)
    ).json()
    assert followers["followers"][0]["id"] == test_user.id

    res = client.request(
        "DELETE", "/api/users/unfollow", json={"user_id": test_user2.id}, headers=headers
    )
    assert res.status_code == 200

    res = client.request(
        "DELETE", "/api/users/unfollow", json={"user_id": test_user2.id}, headers=headers
    )
    assert res.status_code == 400
    assert res.json()["code"] == "not_following"


def test_follow_self_over_http(client, test_user):
    res = client.post(
        "/api/users/follow",
        json={"user_id": test_user.id},
        headers=auth_headers(test_user.token),
    )
    assert res.status_code == 400
    assert res.json()["code"] == "self_follow"


def test_follow_unknown_user_over_http(client, test_user):
    res = client.post(
        "/api/users/follow",
        json={"user_id": 424242},
        headers=auth_headers(test_user.token),
    )
    assert res.status_code == 404


def test_follow_requires_auth(client, test_user2):
    res = client.post("/api/users/follow", json={"user_id": test_user2.id})
    assert res.status_code == 401


def test_follow_body_validation(client, test_user):
    res = client.post(
        "/api/users/follow", json={"user_id": 0}, headers=auth_headers(test_user.token)
    )
    assert res.status_code == 400
    assert res.json()["code"] == "validation_error"


def test_relationship_and_mutual_endpoints(client, test_user, test_user2):
    h1, h2 = auth_headers(test_user.token), auth_headers(test_user2.token)
    client.post("/api/users/follow", json={"user_id": test_user2.id}, headers=h1)
    client.post("/api/users/follow", json={"user_id": test_user.id}, headers=h2)

    rel = client.get(f"/api/users/{test_user2.id}/relationship", headers=h1).json()
    assert rel["user_id"] == test_user2.id
    assert rel["relationship"]["is_mutual"] is True

    mutual = client.get(f"/api/users/{test_user.id}/mutual", headers=h1)
    assert mutual.status_code == 200
    assert [u["id"] for u in mutual.json()["users"]] == [test_user2.id]

    forbidden = client.get(f"/api/users/{test_user2.id}/mutual", headers=h1)
    assert forbidden.status_code == 403


def test_stats_endpoint(client, test_user, test_user2):
    h1 = auth_headers(test_user.token)
    client.post("/api/users/follow", json={"user_id": test_user2.id}, headers=h1)
    client.post("/api/posts", json={"content": "one"}, headers=h1)
    stats = client.get("/api/users/stats", headers=h1).json()["stats"]
    assert stats == {"follower_count": 0, "following_count": 1, "post_count": 1}
