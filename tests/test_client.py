import asyncio
import json

import httpx
import pytest

from services.CommentClient import CommentClient, CommentClientError


def make_client(handler) -> CommentClient:
    return CommentClient(httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api"))


def run(coro):
    return asyncio.run(coro)


FLAT = [
    {"id": "1", "parent_id": None, "content": "root", "created_at": "2024-01-01T00:00:00Z", "updated_at": "2024-01-01T00:00:00Z"},
    {"id": "2", "parent_id": "1", "content": "old", "created_at": "2024-01-02T00:00:00Z", "updated_at": "2024-01-02T00:00:00Z"},
    {"id": "3", "parent_id": "1", "content": "new", "created_at": "2024-01-03T00:00:00Z", "updated_at": "2024-01-03T00:00:00Z"},
]


def test_get_comments_returns_forest():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=FLAT)

    forest = run(make_client(handler).get_comments(search="root", limit=10, offset=0))

    assert [node["id"] for node in forest] == ["1"]
    assert [node["id"] for node in forest[0]["children"]] == ["3", "2"]
    assert requests[0].url.path == "/api/comments/"
    assert dict(requests[0].url.params) == {"search": "root", "limit": "10", "offset": "0"}


def test_get_comments_null_body():
    forest = run(make_client(lambda request: httpx.Response(200, content=b"null")).get_comments())

    assert forest == []


def test_get_comments_empty_body():
    forest = run(make_client(lambda request: httpx.Response(200, content=b"")).get_comments())

    assert forest == []


def test_unreadable_json_body():
    client = make_client(lambda request: httpx.Response(200, content=b"<html>oops</html>"))

    with pytest.raises(CommentClientError) as exc_info:
        run(client.get_comments())

    assert exc_info.value.status_code == 502


def test_get_comment():
    node = dict(FLAT[0], children=[])

    def handler(request):
        assert request.url.path == "/api/comments/1"
        return httpx.Response(200, json=node)

    assert run(make_client(handler).get_comment("1")) == node


def test_create_comment_sends_payload():
    def handler(request):
        assert request.method == "POST"
        assert json.loads(request.content) == {"content": "hi", "parent_id": "1"}
        return httpx.Response(201, json=dict(FLAT[1], content="hi"))

    created = run(make_client(handler).create_comment("hi", "1"))

    assert created["content"] == "hi"


def test_delete_comment():
    def handler(request):
        assert request.method == "DELETE"
        assert request.url.path == "/api/comments/1"
        return httpx.Response(200, json={"message": "comment deleted"})

    assert run(make_client(handler).delete_comment("1")) is None


def test_api_error_carries_status_and_detail():
    client = make_client(lambda request: httpx.Response(404, json={"detail": "Comment not found"}))

    with pytest.raises(CommentClientError) as exc_info:
        run(client.get_comment("1"))

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Comment not found"


def test_non_json_error_body():
    client = make_client(lambda request: httpx.Response(502, text="Bad Gateway"))

    with pytest.raises(CommentClientError) as exc_info:
        run(client.delete_comment("1"))

    assert exc_info.value.status_code == 502
    assert exc_info.value.detail == "Bad Gateway"


def test_unreachable_api():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CommentClientError) as exc_info:
        run(make_client(handler).get_comments())

    assert exc_info.value.status_code == 503
