"""Tests for post endpoints."""

from fastapi import status

from pulse_feed.models import Post


def test_create_post_success(client, db_session, alice, auth_headers) -> None:
    response = client.post(
        "/api/v1/posts", json={"content": "Test post content"}, headers=auth_headers(alice)
    )

    assert response.status_code == status.HTTP_201_CREATED
    post = db_session.get(Post, response.json()["id"])
    assert post.content == "Test post content"
    assert post.user_id == alice.id


def test_create_reply_bumps_parent(client, db_session, alice, bob, auth_headers, make_post) -> None:
    parent = make_post(alice, "parent")

    response = client.post(
        "/api/v1/posts",
        json={"content": "a reply", "parentId": parent.id},
        headers=auth_headers(bob),
    )

    assert response.status_code == status.HTTP_201_CREATED
    detail = client.get(f"/api/v1/posts/{parent.id}").json()
    assert detail["replyCount"] == 1
    replies = client.get(f"/api/v1/posts/{parent.id}/replies").json()
    assert [item["id"] for item in replies["items"]] == [response.json()["id"]]
    assert replies["items"][0]["parentId"] == parent.id


def test_create_post_requires_authentication(client) -> None:
    response = client.post("/api/v1/posts", json={"content": "anonymous"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_create_post_rejects_whitespace_content(client, alice, auth_headers) -> None:
    response = client.post("/api/v1/posts", json={"content": "   "}, headers=auth_headers(alice))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Post content must not be empty"


def test_create_post_rejects_empty_body(client, alice, auth_headers) -> None:
    response = client.post("/api/v1/posts", json={"content": ""}, headers=auth_headers(alice))
    assert response.status_code == 422


def test_get_post_annotated_for_viewer(client, alice, bob, auth_headers, make_post) -> None:
    post = make_post(bob, "look at me")
    client.post(f"/api/v1/posts/{post.id}/save", headers=auth_headers(alice))

    anonymous = client.get(f"/api/v1/posts/{post.id}").json()
    personal = client.get(f"/api/v1/posts/{post.id}", headers=auth_headers(alice)).json()

    assert anonymous["saved"] is False
    assert personal["saved"] is True
    assert personal["author"]["name"] == "Bob"


def test_get_missing_post(client) -> None:
    response = client.get("/api/v1/posts/9999")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Post not found"


def test_delete_own_post(client, db_session, alice, auth_headers, make_post) -> None:
    post = make_post(alice)
    post_id = post.id

    response = client.delete(f"/api/v1/posts/{post_id}", headers=auth_headers(alice))

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True}
    assert client.get(f"/api/v1/posts/{post_id}").status_code == status.HTTP_404_NOT_FOUND


def test_delete_someone_elses_post_is_forbidden(client, alice, bob, auth_headers, make_post) -> None:
    post = make_post(alice)

    response = client.delete(f"/api/v1/posts/{post.id}", headers=auth_headers(bob))

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert client.get(f"/api/v1/posts/{post.id}").status_code == status.HTTP_200_OK


def test_delete_missing_post(client, alice, auth_headers) -> None:
    response = client.delete("/api/v1/posts/9999", headers=auth_headers(alice))
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_like_toggles(client, alice, bob, auth_headers, make_post) -> None:
    post = make_post(bob)
    url = f"/api/v1/posts/{post.id}/like"

    assert client.post(url, headers=auth_headers(alice)).json() == {"liked": True}
    assert client.get(f"/api/v1/posts/{post.id}").json()["likeCount"] == 1
    assert client.post(url, headers=auth_headers(alice)).json() == {"liked": False}
    assert client.get(f"/api/v1/posts/{post.id}").json()["likeCount"] == 0


def test_like_missing_post(client, alice, auth_headers) -> None:
    response = client.post("/api/v1/posts/9999/like", headers=auth_headers(alice))
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_like_requires_authentication(client, bob, make_post) -> None:
    post = make_post(bob)
    response = client.post(f"/api/v1/posts/{post.id}/like")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_save_toggles_and_lists(client, alice, bob, auth_headers, make_post) -> None:
    first = make_post(bob, "first")
    second = make_post(bob, "second")
    headers = auth_headers(alice)

    assert client.post(f"/api/v1/posts/{first.id}/save", headers=headers).json() == {"saved": True}
    client.post(f"/api/v1/posts/{second.id}/save", headers=headers)

    saved = client.get("/api/v1/posts/saved", headers=headers).json()
    assert [item["id"] for item in saved["items"]] == [second.id, first.id]
    assert all(item["saved"] for item in saved["items"])

    assert client.post(f"/api/v1/posts/{first.id}/save", headers=headers).json() == {
        "saved": False
    }
    saved = client.get("/api/v1/posts/saved", headers=headers).json()
    assert [item["id"] for item in saved["items"]] == [second.id]


def test_saved_posts_require_authentication(client) -> None:
    response = client.get("/api/v1/posts/saved")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_search_posts(client, alice, make_post) -> None:
    match = make_post(alice, "Pulse is live")
    make_post(alice, "nothing to see")

    response = client.get("/api/v1/posts/search", params={"q": "pulse"})

    assert response.status_code == status.HTTP_200_OK
    assert [item["id"] for item in response.json()["items"]] == [match.id]


def test_search_requires_query(client) -> None:
    assert client.get("/api/v1/posts/search").status_code == 422
    blank = client.get("/api/v1/posts/search", params={"q": "  "})
    assert blank.status_code == status.HTTP_400_BAD_REQUEST
