from tests.testclient import auth_headers


def _register(client, username):
    res = client.post(
        "/api/auth/register",
        json={
            "username": username,
            "email": f"{username}@example.com",
            "password": "password123",
            "name": username.capitalize(),
        },
    )
    assert res.status_code == 201
    return res.json()


def test_post_follow_comment_lifecycle(client):
    _register(client, "alice")
    login = client.post(
        "/api/auth/login", json={"username": "alice", "password": "password123"}
    )
    assert login.status_code == 200
    alice = auth_headers(login.json()["token"])

    post = client.post("/api/posts", json={"content": "hello"}, headers=alice)
    assert post.status_code == 201
    post_id = post.json()["post"]["id"]

    bob_account = _register(client, "bob")
    bob = auth_headers(bob_account["token"])
    alice_id = login.json()["user"]["id"]
    res = client.post("/api/users/follow", json={"user_id": alice_id}, headers=bob)
    assert res.status_code == 201

    feed = client.get("/api/posts/feed", headers=bob).json()
    assert [p["id"] for p in feed["posts"]] == [post_id]

    res = client.put(
        f"/api/posts/{post_id}", json={"comments_enabled": False}, headers=alice
    )
    assert res.status_code == 200
    res = client.post(
        f"/api/comments/post/{post_id}", json={"content": "hi alice"}, headers=bob
    )
    assert res.status_code == 400
    assert res.json()["code"] == "comments_disabled"

    res = client.put(
        f"/api/posts/{post_id}", json={"comments_enabled": True}, headers=alice
    )
    assert res.status_code == 200
    res = client.post(
        f"/api/comments/post/{post_id}", json={"content": "hi alice"}, headers=bob
    )
    assert res.status_code == 201
    comment_id = res.json()["comment"]["id"]

    comments = client.get(f"/api/comments/post/{post_id}").json()["comments"]
    assert [c["id"] for c in comments] == [comment_id]

    detail = client.get(f"/api/posts/{post_id}", headers=bob).json()["post"]
    assert detail["comment_count"] == 1


def test_new_post_surfaces_first_in_feed(client):
    alice = auth_headers(_register(client, "alice")["token"])
    for i in range(3):
        client.post("/api/posts", json={"content": f"older {i}"}, headers=alice)
    newest = client.post("/api/posts", json={"content": "newest"}, headers=alice)

    feed = client.get("/api/posts/feed", params={"limit": 1}, headers=alice).json()
    assert feed["posts"][0]["id"] == newest.json()["post"]["id"]
    assert feed["pagination"]["total_count"] == 4
    assert feed["pagination"]["has_next"] is True


def test_total_count_matches_exhaustive_listing(client):
    alice = auth_headers(_register(client, "alice")["token"])
    for i in range(7):
        client.post("/api/posts", json={"content": f"post {i}"}, headers=alice)

    paged = client.get("/api/posts/my", params={"limit": 3}, headers=alice).json()
    everything = client.get("/api/posts/my", params={"limit": 100}, headers=alice).json()
    assert paged["pagination"]["total_count"] == len(everything["posts"]) == 7
    assert paged["pagination"]["total_pages"] == 3


def test_deleted_author_disappears_everywhere(client):
    alice_account = _register(client, "alice")
    alice = auth_headers(alice_account["token"])
    bob = auth_headers(_register(client, "bob")["token"])
    alice_id = alice_account["user"]["id"]

    post_id = client.post("/api/posts", json={"content": "soon hidden"}, headers=alice).json()["post"]["id"]
    client.post("/api/users/follow", json={"user_id": alice_id}, headers=bob)
    client.post(f"/api/likes/{post_id}/like", headers=bob)

    assert client.delete("/api/users/me", headers=alice).status_code == 200

    assert client.get("/api/posts/feed", headers=bob).json()["posts"] == []
    assert client.get(f"/api/posts/{post_id}").status_code == 404
    assert client.get(f"/api/users/{alice_id}").status_code == 404
    assert client.get("/api/users/stats", headers=bob).json()["stats"]["following_count"] == 0
    assert client.get("/api/posts/search", params={"q": "hidden"}).json()["posts"] == []
