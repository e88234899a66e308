# tests/v1/test_categories.py
"""Tests for category endpoints."""

from fastapi import status


def test_admin_crud(client, admin_headers, auth_headers):
    r = client.post(
        "/api/v1/categories/",
        json={"title": "Tech", "description": "Gadgets"},
        headers=admin_headers,
    )
    assert r.status_code == status.HTTP_201_CREATED
    category = r.json()

    r = client.patch(
        f"/api/v1/categories/{category['id']}", json={"title": "Science"}, headers=admin_headers
    )
    assert r.json()["title"] == "Science"

    r = client.get("/api/v1/categories/", headers=auth_headers)
    assert [c["title"] for c in r.json()] == ["Science"]

    r = client.delete(f"/api/v1/categories/{category['id']}", headers=admin_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT

    r = client.get(f"/api/v1/categories/{category['id']}", headers=auth_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_user_cannot_manage(client, auth_headers, category):
    r = client.post("/api/v1/categories/", json={"title": "Mine"}, headers=auth_headers)
    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.json()["detail"] == "Forbidden: role"

    r = client.patch(
        f"/api/v1/categories/{category.id}", json={"title": "Mine"}, headers=auth_headers
    )
    assert r.status_code == status.HTTP_403_FORBIDDEN

    r = client.delete("/api/v1/categories/999", headers=auth_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_posts_in_category(client, auth_headers, category):
    client.post(
        "/api/v1/posts/",
        json={"title": "Filed", "content": "x", "categories": [category.id]},
        headers=auth_headers,
    )
    client.post("/api/v1/posts/", json={"title": "Loose", "content": "x"}, headers=auth_headers)

    r = client.get(f"/api/v1/categories/{category.id}/posts", headers=auth_headers)
    assert r.status_code == status.HTTP_200_OK
    assert [p["title"] for p in r.json()["posts"]] == ["Filed"]
