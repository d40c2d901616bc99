from datetime import timedelta

import pytest
from sqlalchemy import update

from app.core.db_defaults import utcnow
from app.core.exceptions import (
    AlreadyLikedException,
    ResourceNotFoundException,
    ValidationException,
)
from app.modules.posts.models import Post
from app.services.posts import LikeService, PostService
from app.services.users import UserService
from tests.testclient import auth_headers


@pytest.fixture
def like_service(session):
    return LikeService(session)


def _age_post(session, post_id: int, days: int) -> None:
    session.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(created_at=utcnow() - timedelta(days=days))
    )
    session.commit()


def test_like_and_unlike(like_service, session, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    post = PostService(session).create(alice.id, "likeable")

    like = like_service.like(bob.id, post["id"])
    assert like["user_id"] == bob.id
    assert like_service.has_liked(bob.id, post["id"])
    assert like_service.count_for_post(post["id"]) == 1

    with pytest.raises(AlreadyLikedException):
        like_service.like(bob.id, post["id"])

    removed = like_service.unlike(bob.id, post["id"])
    assert removed["id"] == like["id"]
    assert like_service.count_for_post(post["id"]) == 0
    with pytest.raises(ResourceNotFoundException):
        like_service.unlike(bob.id, post["id"])


def test_self_like_counts(like_service, session, make_user):
    alice = make_user("alice")
    post = PostService(session).create(alice.id, "my own")
    like_service.like(alice.id, post["id"])
    assert like_service.count_for_post(post["id"]) == 1


def test_cannot_like_hidden_post(like_service, session, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    posts = PostService(session)
    post = posts.create(alice.id, "soon gone")
    posts.soft_delete(post["id"], alice.id)
    with pytest.raises(ResourceNotFoundException):
        like_service.like(bob.id, post["id"])
    with pytest.raises(ResourceNotFoundException):
        like_service.like(bob.id, 9999)


def test_likes_from_deleted_accounts_not_counted(like_service, session, make_user):
    alice, bob, carol = make_user("alice"), make_user("bob"), make_user("carol")
    posts = PostService(session)
    post = posts.create(alice.id, "popular")
    like_service.like(bob.id, post["id"])
    like_service.like(carol.id, post["id"])

    UserService(session).soft_delete(carol.id)
    assert like_service.count_for_post(post["id"]) == 1
    assert posts.get_by_id(post["id"])["like_count"] == 1
    likers = like_service.list_for_post(post["id"])["likes"]
    assert [row["user_id"] for row in likers] == [bob.id]


def test_list_for_post_newest_first(like_service, session, make_user):
    alice = make_user("alice")
    fans = [make_user(f"fan{i}") for i in range(3)]
    post = PostService(session).create(alice.id, "post")
    for fan in fans:
        like_service.like(fan.id, post["id"])
    listing = like_service.list_for_post(post["id"], limit=2)
    assert [row["user_id"] for row in listing["likes"]] == [fans[2].id, fans[1].id]
    assert listing["pagination"]["total_count"] == 3


def test_list_for_user(like_service, session, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    posts = PostService(session)
    first = posts.create(alice.id, "first")
    second = posts.create(alice.id, "second")
    like_service.like(bob.id, second["id"])
    like_service.like(bob.id, first["id"])

    liked = like_service.list_for_user(bob.id)["posts"]
    assert [p["id"] for p in liked] == [first["id"], second["id"]]
    assert all(p["liked_at"] is not None for p in liked)


def test_most_liked_ranks_by_count_then_newest(like_service, session, make_user):
    alice, bob, carol = make_user("alice"), make_user("bob"), make_user("carol")
    posts = PostService(session)
    quiet = posts.create(alice.id, "quiet")
    loud = posts.create(alice.id, "loud")
    tied = posts.create(alice.id, "tied")
    for fan in (bob, carol):
        like_service.like(fan.id, loud["id"])
    like_service.like(bob.id, quiet["id"])
    like_service.like(carol.id, tied["id"])

    ranked = like_service.most_liked(limit=10, time_frame="all")
    assert [p["id"] for p in ranked] == [loud["id"], tied["id"], quiet["id"]]
    assert [p["like_count"] for p in ranked] == [2, 1, 1]


def test_most_liked_respects_time_frame(like_service, session, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    posts = PostService(session)
    old = posts.create(alice.id, "old but loved")
    recent = posts.create(alice.id, "fresh")
    like_service.like(bob.id, old["id"])
    _age_post(session, old["id"], days=10)

    week = [p["id"] for p in like_service.most_liked(time_frame="week")]
    assert week == [recent["id"]]
    month = [p["id"] for p in like_service.most_liked(time_frame="month")]
    assert month == [old["id"], recent["id"]]


def test_most_liked_rejects_unknown_time_frame(like_service):
    with pytest.raises(ValidationException):
        like_service.most_liked(time_frame="year")


def test_recent_likes_on_my_posts(like_service, session, make_user):
    alice, bob = make_user("alice"), make_user("bob")
    post = PostService(session).create(alice.id, "notice me")
    like_service.like(bob.id, post["id"])
    recent = like_service.recent_for_user_posts(alice.id)
    assert len(recent) == 1
    assert recent[0]["user"]["username"] == "bob"
    assert recent[0]["post_content"] == "notice me"


# ----- HTTP -----


def test_like_endpoints(client, test_post, test_user2):
    headers = auth_headers(test_user2.token)
    res = client.post(f"/api/likes/{test_post.id}/like", headers=headers)
    assert res.status_code == 201
    assert res.json()["like"]["post_id"] == test_post.id

    again = client.post(f"/api/likes/{test_post.id}/like", headers=headers)
    assert again.status_code == 400
    assert again.json()["code"] == "already_liked"

    status = client.get(f"/api/likes/{test_post.id}/status", headers=headers).json()
    assert status == {"post_id": test_post.id, "liked": True, "like_count": 1}

    listing = client.get(f"/api/likes/{test_post.id}", headers=headers).json()
    assert listing["liked_by_user"] is True
    assert listing["likes"][0]["username"] == test_user2.username

    res = client.delete(f"/api/likes/{test_post.id}/like", headers=headers)
    assert res.status_code == 200
    res = client.delete(f"/api/likes/{test_post.id}/like", headers=headers)
    assert res.status_code == 404


def test_like_missing_post(authorized_client):
    res = authorized_client.post("/api/likes/9999/like")
    assert res.status_code == 404


def test_like_requires_auth(client, test_post):
    res = client.post(
        f"/api/likes/{test_post.id}/like", headers={"Authorization": ""}
    )
    assert res.status_code == 401


def test_popular_endpoint(client, test_post, test_user2):
    client.post(
        f"/api/likes/{test_post.id}/like", headers=auth_headers(test_user2.token)
    )
    res = client.get("/api/likes/popular", params={"time_frame": "day"})
    assert res.status_code == 200
    body = res.json()
    assert body["time_frame"] == "day"
    assert body["posts"][0]["id"] == test_post.id
    assert body["posts"][0]["like_count"] == 1


def test_popular_rejects_unknown_time_frame(client):
    res = client.get("/api/likes/popular", params={"time_frame": "year"})
    assert res.status_code == 400


def test_user_liked_posts_endpoint(client, test_post, test_user2):
    client.post(
        f"/api/likes/{test_post.id}/like", headers=auth_headers(test_user2.token)
    )
    res = client.get(f"/api/likes/user/{test_user2.id}")
    assert res.status_code == 200
    assert [p["id"] for p in res.json()["posts"]] == [test_post.id]


def test_recent_endpoint(client, test_post, test_user, test_user2):
    client.post(
        f"/api/likes/{test_post.id}/like", headers=auth_headers(test_user2.token)
    )
    res = client.get("/api/likes/recent", headers=auth_headers(test_user.token))
    assert res.status_code == 200
    assert res.json()["likes"][0]["user"]["id"] == test_user2.id
