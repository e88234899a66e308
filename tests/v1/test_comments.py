# tests/v1/test_comments.py
"""Tests for comment and reply endpoints."""

from fastapi import status

from threadline.core.enums import ContentStatus


def _comment(client, headers, post_id, content="First!"):
    r = client.post(f"/api/v1/posts/{post_id}/comments", json={"content": content}, headers=headers)
    assert r.status_code == status.HTTP_201_CREATED, r.text
    return r.json()


def test_reply_anchoring_and_non_owner_denial(client, auth_headers, other_headers, test_post):
    root = _comment(client, auth_headers, test_post.id)

    r = client.post(
        f"/api/v1/posts/{test_post.id}/comments/{root['id']}/replies",
        json={"content": "reply"},
        headers=other_headers,
    )
    assert r.status_code == status.HTTP_201_CREATED
    reply = r.json()
    assert reply["post_id"] == test_post.id
    assert reply["parent_comment_id"] == root["id"]

    r = client.patch(
        f"/api/v1/comments/{root['id']}", json={"content": "edited"}, headers=other_headers
    )
    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.json() == {"detail": "Forbidden: not-owner", "code": "forbidden"}


def test_admin_updates_any_comment(client, auth_headers, admin_headers, test_post):
    root = _comment(client, auth_headers, test_post.id)
    r = client.patch(
        f"/api/v1/comments/{root['id']}",
        json={"content": "moderated", "status": "INACTIVE"},
        headers=admin_headers,
    )
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["content"] == "moderated"
    assert r.json()["status"] == "INACTIVE"


def test_reply_to_missing_parent(client, auth_headers, test_post):
    r = client.post(
        f"/api/v1/posts/{test_post.id}/comments/999/replies",
        json={"content": "reply"},
        headers=auth_headers,
    )
    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert r.json()["code"] == "parent_not_found"


def test_comment_on_missing_or_inactive_post(client, auth_headers, make_post, test_user):
    r = client.post("/api/v1/posts/999/comments", json={"content": "x"}, headers=auth_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND

    draft = make_post(test_user, status=ContentStatus.INACTIVE)
    r = client.post(f"/api/v1/posts/{draft.id}/comments", json={"content": "x"}, headers=auth_headers)
    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.json()["code"] == "target_unavailable"


def test_whitespace_content(client, auth_headers, test_post):
    r = client.post(
        f"/api/v1/posts/{test_post.id}/comments", json={"content": "   "}, headers=auth_headers
    )
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_list_tree_and_replies(client, auth_headers, test_post):
    root = _comment(client, auth_headers, test_post.id, "root")
    r = client.post(
        f"/api/v1/posts/{test_post.id}/comments/{root['id']}/replies",
        json={"content": "child"},
        headers=auth_headers,
    )
    child = r.json()
    client.post(
        f"/api/v1/posts/{test_post.id}/comments/{child['id']}/replies",
        json={"content": "grandchild"},
        headers=auth_headers,
    )

    r = client.get(f"/api/v1/posts/{test_post.id}/comments", headers=auth_headers)
    assert r.json()["pagination"]["total"] == 3

    r = client.get(f"/api/v1/posts/{test_post.id}/comments/tree", headers=auth_headers)
    tree = r.json()
    assert len(tree) == 1
    assert tree[0]["replies"][0]["content"] == "child"
    assert tree[0]["replies"][0]["replies"][0]["content"] == "grandchild"

    r = client.get(f"/api/v1/comments/{root['id']}/replies", headers=auth_headers)
    assert [c["id"] for c in r.json()] == [child["id"]]


def test_delete_reroots_replies(client, auth_headers, other_headers, test_post):
    root = _comment(client, auth_headers, test_post.id, "root")
    middle = client.post(
        f"/api/v1/posts/{test_post.id}/comments/{root['id']}/replies",
        json={"content": "middle"},
        headers=other_headers,
    ).json()
    leaf = client.post(
        f"/api/v1/posts/{test_post.id}/comments/{middle['id']}/replies",
        json={"content": "leaf"},
        headers=auth_headers,
    ).json()

    r = client.delete(f"/api/v1/comments/{middle['id']}", headers=auth_headers)
    assert r.status_code == status.HTTP_403_FORBIDDEN

    r = client.delete(f"/api/v1/comments/{middle['id']}", headers=other_headers)
    assert r.status_code == status.HTTP_204_NO_CONTENT

    r = client.get(f"/api/v1/comments/{leaf['id']}", headers=auth_headers)
    assert r.json()["parent_comment_id"] == root["id"]

    r = client.get(f"/api/v1/comments/{middle['id']}", headers=auth_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_hidden_comment_looks_missing_on_every_route(
    client, auth_headers, other_headers, test_post, make_comment, test_user
):
    hidden = make_comment(test_user, test_post, status=ContentStatus.INACTIVE)
    url = f"/api/v1/comments/{hidden.id}"

    assert client.get(url, headers=other_headers).status_code == status.HTTP_404_NOT_FOUND
    r = client.patch(url, json={"content": "x"}, headers=other_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert r.json()["code"] == "not_found"
    assert client.delete(url, headers=other_headers).status_code == status.HTTP_404_NOT_FOUND

    r = client.patch(url, json={"content": "still mine"}, headers=auth_headers)
    assert r.status_code == status.HTTP_200_OK
