# tests/v1/test_posts.py
"""Tests for post endpoints."""

import pytest
from fastapi import status

from threadline.core.enums import ContentStatus


def test_create_and_get_post(client, auth_headers, category):
    r = client.post(
        "/api/v1/posts/",
        json={"title": "Hello", "content": "World", "categories": [category.id]},
        headers=auth_headers,
    )
    assert r.status_code == status.HTTP_201_CREATED
    post = r.json()
    assert post["author"]["login"] == "alice"
    assert post["status"] == "ACTIVE"
    assert [c["title"] for c in post["categories"]] == ["News"]
    assert post["reactions"] == {"likes": 0, "dislikes": 0, "total": 0}

    r = client.get(f"/api/v1/posts/{post['id']}", headers=auth_headers)
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["title"] == "Hello"

    r = client.get(f"/api/v1/posts/{post['id']}/categories", headers=auth_headers)
    assert [c["id"] for c in r.json()] == [category.id]


def test_unknown_category(client, auth_headers):
    r = client.post(
        "/api/v1/posts/",
        json={"title": "Hello", "content": "World", "categories": [42]},
        headers=auth_headers,
    )
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_list_posts_paginates(client, auth_headers, make_post, test_user):
    for i in range(5):
        make_post(test_user, title=f"post {i}")

    r = client.get("/api/v1/posts/", params={"page": 2, "limit": 2}, headers=auth_headers)
    assert r.status_code == status.HTTP_200_OK
    body = r.json()
    assert body["pagination"] == {"total": 5, "page": 2, "pages": 3}
    assert [p["title"] for p in body["posts"]] == ["post 2", "post 1"]


def test_inactive_posts_are_hidden(client, auth_headers, other_headers, make_post, test_user):
    draft = make_post(test_user, status=ContentStatus.INACTIVE)

    r = client.get(f"/api/v1/posts/{draft.id}", headers=other_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND

    r = client.get("/api/v1/posts/", headers=other_headers)
    assert r.json()["pagination"]["total"] == 0

    r = client.get("/api/v1/posts/mine", headers=auth_headers)
    assert [p["id"] for p in r.json()["posts"]] == [draft.id]


class TestUpdateDelete:
    def test_owner_updates(self, client, auth_headers, test_post):
        r = client.patch(
            f"/api/v1/posts/{test_post.id}",
            json={"title": "Renamed", "status": "INACTIVE"},
            headers=auth_headers,
        )
        assert r.status_code == status.HTTP_200_OK
        assert r.json()["title"] == "Renamed"
        assert r.json()["status"] == "INACTIVE"

    def test_stranger_is_forbidden(self, client, other_headers, test_post):
        r = client.patch(
            f"/api/v1/posts/{test_post.id}", json={"title": "Mine now"}, headers=other_headers
        )
        assert r.status_code == status.HTTP_403_FORBIDDEN
        assert r.json()["detail"] == "Forbidden: not-owner"

    def test_missing_post_is_404_before_403(self, client, other_headers):
        r = client.patch("/api/v1/posts/999", json={"title": "x"}, headers=other_headers)
        assert r.status_code == status.HTTP_404_NOT_FOUND

    def test_admin_deletes(self, client, admin_headers, auth_headers, test_post):
        r = client.delete(f"/api/v1/posts/{test_post.id}", headers=admin_headers)
        assert r.status_code == status.HTTP_204_NO_CONTENT
        r = client.get(f"/api/v1/posts/{test_post.id}", headers=auth_headers)
        assert r.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.parametrize("payload", [{"title": ""}, {"status": "DRAFT"}])
    def test_invalid_update(self, client, auth_headers, test_post, payload):
        r = client.patch(f"/api/v1/posts/{test_post.id}", json=payload, headers=auth_headers)
        assert r.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
