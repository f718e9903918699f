"""
Postboard Backend - Post Endpoint Tests
=========================================

What:  HTTP-level tests for /posts through the full middleware chain.
How:   HTTPX AsyncClient over ASGITransport; the DB session is a mock shared
       with the test, so results are arranged on it and calls inspected.

What we test:
    ✅ JSON contract uses camelCase (selectedFile, createdAt, numberOfPages)
    ✅ Status codes: 201 create, 404 malformed id, 401 missing user
    ✅ Get of an absent post answers null
    ✅ Every error uses the same envelope with a request ID
    ✅ Like / comment / delete scenario end to end
"""

import uuid
from unittest.mock import AsyncMock

import pytest

USER = {"X-User-Id": "U1"}


def _assert_error(response, status, code):
    assert response.status_code == status
    body = response.json()
    assert body["error"] == code
    assert body["message"]
    assert body["request_id"] == response.headers["X-Request-ID"]
    return body


class TestListAndSearch:

    @pytest.mark.asyncio
    async def test_list_page_two(self, test_client, mock_db_session, db_result, make_post):
        posts = [make_post(title="Post 2"), make_post(title="Post 1")]
        mock_db_session.execute = AsyncMock(
            side_effect=[db_result(count=10), db_result(many=posts)]
        )

        response = await test_client.get("/posts", params={"page": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["currentPage"] == 2
        assert body["numberOfPages"] == 2
        assert len(body["data"]) == 2
        assert {"id", "title", "message", "creator", "tags", "selectedFile",
                "createdAt", "likes", "comments"} <= set(body["data"][0])

    @pytest.mark.asyncio
    async def test_list_defaults_to_first_page(self, test_client, mock_db_session, db_result):
        mock_db_session.execute = AsyncMock(
            side_effect=[db_result(count=0), db_result(many=[])]
        )

        response = await test_client.get("/posts")

        assert response.status_code == 200
        assert response.json() == {"data": [], "currentPage": 1, "numberOfPages": 0}

    @pytest.mark.asyncio
    async def test_list_rejects_page_zero(self, test_client, mock_db_session):
        response = await test_client.get("/posts", params={"page": 0})

        assert response.status_code == 422
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search(self, test_client, mock_db_session, db_result, make_post):
        mock_db_session.execute.return_value = db_result(many=[make_post(tags=["news"])])

        response = await test_client.get(
            "/posts/search", params={"searchQuery": "hello", "tags": "news,tech"}
        )

        assert response.status_code == 200
        body = response.json()
        assert list(body) == ["data"]
        assert body["data"][0]["tags"] == ["news"]

    @pytest.mark.asyncio
    async def test_search_failure_is_404(self, test_client, mock_db_session):
        from sqlalchemy.exc import OperationalError
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("invalid regular expression"))
        )

        response = await test_client.get("/posts/search", params={"searchQuery": "("})

        _assert_error(response, 404, "not_found")


class TestGet:

    @pytest.mark.asyncio
    async def test_found(self, test_client, mock_db_session, db_result, make_post):
        post = make_post()
        mock_db_session.execute.return_value = db_result(one=post)

        response = await test_client.get(f"/posts/{post.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == str(post.id)
        assert body["selectedFile"] == post.selected_file
        assert body["createdAt"].startswith("2026-01-15T12:00:00")

    @pytest.mark.asyncio
    async def test_absent_is_null(self, test_client, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(one=None)

        response = await test_client.get(f"/posts/{uuid.uuid4()}")

        assert response.status_code == 200
        assert response.json() is None

    @pytest.mark.asyncio
    async def test_malformed_id(self, test_client, mock_db_session):
        response = await test_client.get("/posts/not-an-id")

        body = _assert_error(response, 404, "not_found")
        assert body["message"] == "No post with id: not-an-id"
        mock_db_session.execute.assert_not_awaited()


class TestCreate:

    @pytest.mark.asyncio
    async def test_creator_from_header(self, test_client, mock_db_session):
        response = await test_client.post(
            "/posts",
            json={
                "title": "Hello",
                "message": "First",
                "tags": ["x"],
                "selectedFile": "data:image/png;base64,AAAA",
                "creator": "mallory",
                "createdAt": "1999-01-01T00:00:00Z",
            },
            headers=USER,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["creator"] == "U1"
        assert body["title"] == "Hello"
        assert body["tags"] == ["x"]
        assert body["selectedFile"] == "data:image/png;base64,AAAA"
        assert not body["createdAt"].startswith("1999")
        assert body["likes"] == [] and body["comments"] == []
        mock_db_session.add.assert_called_once()

    @pytest.mark.asyncio
    async def test_requires_user(self, test_client, mock_db_session):
        response = await test_client.post("/posts", json={"title": "Hello"})

        body = _assert_error(response, 401, "unauthenticated")
        assert body["message"] == "Unauthenticated"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_rejection_is_409(self, test_client, mock_db_session):
        from sqlalchemy.exc import IntegrityError
        mock_db_session.flush = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("value too long"))
        )

        response = await test_client.post("/posts", json={"title": "Hello"}, headers=USER)

        _assert_error(response, 409, "conflict")


class TestUpdateAndDelete:

    @pytest.mark.asyncio
    async def test_update(self, test_client, mock_db_session, db_result, make_post):
        post = make_post(title="Edited")
        mock_db_session.execute.return_value = db_result(one=post)

        response = await test_client.patch(
            f"/posts/{post.id}", json={"title": "Edited", "creator": "mallory"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Edited"
        assert body["creator"] == "user-1"
        assert body["id"] == str(post.id)

    @pytest.mark.asyncio
    async def test_put_is_accepted(self, test_client, mock_db_session, db_result, make_post):
        post = make_post()
        mock_db_session.execute.return_value = db_result(one=post)

        response = await test_client.put(f"/posts/{post.id}", json={"message": "m"})

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_update_malformed_id(self, test_client, mock_db_session):
        response = await test_client.patch("/posts/123", json={"title": "x"})

        body = _assert_error(response, 404, "not_found")
        assert body["message"] == "No post with id: 123"
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete(self, test_client, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(one=None)

        response = await test_client.delete(f"/posts/{uuid.uuid4()}")

        assert response.status_code == 200
        assert response.json() == {"message": "Post deleted successfully."}

    @pytest.mark.asyncio
    async def test_delete_malformed_id(self, test_client, mock_db_session):
        response = await test_client.delete("/posts/xyz")

        _assert_error(response, 404, "not_found")
        mock_db_session.execute.assert_not_awaited()


class TestLikeAndComment:

    @pytest.mark.asyncio
    async def test_like_requires_user(self, test_client, mock_db_session):
        response = await test_client.patch(f"/posts/{uuid.uuid4()}/likePost")

        body = _assert_error(response, 401, "unauthenticated")
        assert body["message"] == "Unauthenticated"
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_like_malformed_id(self, test_client, mock_db_session):
        response = await test_client.patch("/posts/bad/likePost", headers=USER)

        _assert_error(response, 404, "not_found")
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_comment_body_required(self, test_client, mock_db_session):
        response = await test_client.post(f"/posts/{uuid.uuid4()}/commentPost", json={})

        assert response.status_code == 422
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_comment_rejected(self, test_client, mock_db_session):
        response = await test_client.post(f"/posts/{uuid.uuid4()}/commentPost", json={"value": ""})

        assert response.status_code == 422
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_comment_absent_post(self, test_client, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(one=None)

        response = await test_client.post(
            f"/posts/{uuid.uuid4()}/commentPost", json={"value": "nice"}
        )

        _assert_error(response, 404, "not_found")

    @pytest.mark.asyncio
    async def test_like_unlike_comment_delete(self, test_client, mock_db_session, db_result, make_post):
        """Create → like → unlike → comment → delete → get returns null."""
        post = make_post(title="Hello", tags=["x"], creator="U1")
        pid = post.id
        mock_db_session.execute = AsyncMock(side_effect=[
            db_result(one=make_post(id=pid, likes=["U1"])),
            db_result(one=make_post(id=pid, likes=[])),
            db_result(one=make_post(id=pid, comments=["nice"])),
            db_result(one=None),
            db_result(one=None),
        ])

        liked = await test_client.patch(f"/posts/{pid}/likePost", headers=USER)
        unliked = await test_client.patch(f"/posts/{pid}/likePost", headers=USER)
        commented = await test_client.post(
            f"/posts/{pid}/commentPost", json={"value": "nice"}, headers=USER
        )
        deleted = await test_client.delete(f"/posts/{pid}", headers=USER)
        fetched = await test_client.get(f"/posts/{pid}")

        assert liked.json()["likes"] == ["U1"]
        assert unliked.json()["likes"] == []
        assert commented.json()["comments"] == ["nice"]
        assert deleted.json()["message"] == "Post deleted successfully."
        assert fetched.status_code == 200
        assert fetched.json() is None
        assert mock_db_session.execute.await_count == 5


class TestMiddleware:

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(one=None)

        response = await test_client.get(
            f"/posts/{uuid.uuid4()}", headers={"X-Request-ID": "trace-123"}
        )

        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_blank_user_header_is_anonymous(self, test_client):
        response = await test_client.post(
            "/posts", json={"title": "Hello"}, headers={"X-User-Id": "   "}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_malformed_request_id_replaced(self, test_client, mock_db_session):
        response = await test_client.get(
            "/posts/bad-id", headers={"X-Request-ID": "x" * 200}
        )

        rid = response.headers["X-Request-ID"]
        assert len(rid) == 8
        assert response.json()["request_id"] == rid
