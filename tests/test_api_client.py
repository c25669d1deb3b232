"""Tests for the async task API client."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from taskgrid.api import (
    ClientError,
    NotFoundError,
    ServerError,
    TaskApiClient,
    TransportError,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_client(handler: Any) -> TaskApiClient:
    """Build a TaskApiClient wired to an httpx.MockTransport."""
    transport = httpx.MockTransport(handler)
    client = TaskApiClient(base_url="http://test")
    client._client = httpx.AsyncClient(transport=transport, base_url="http://test")
    return client


def _json_response(status_code: int = 200, json: Any = None) -> httpx.Response:
    return httpx.Response(status_code, json=json)


# ---------------------------------------------------------------------------
# Context manager
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_context_manager_enter_exit() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return _json_response(200, {"tasks": []})

    async with TaskApiClient(base_url="http://test") as client:
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
        assert await client.fetch_tasks() == {"tasks": []}


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_fetch_tasks_route() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/api/tasks/tasks"
        return _json_response(200, {"tasks": [{"id": 1, "title": "a"}]})

    client = _make_client(handler)
    result = await client.fetch_tasks()
    assert result == {"tasks": [{"id": 1, "title": "a"}]}
    await client.close()


@pytest.mark.asyncio
async def test_create_task_posts_json_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/api/tasks/create"
        body = json.loads(request.content)
        assert body == {"title": "x", "estimate": 30}
        return _json_response(200, {"task": {"id": 7, **body}})

    client = _make_client(handler)
    result = await client.create_task({"title": "x", "estimate": 30})
    assert result["task"]["id"] == 7
    await client.close()


@pytest.mark.asyncio
async def test_update_routes_use_patch() -> None:
    seen: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        return _json_response(200, {"ok": True})

    client = _make_client(handler)
    await client.update_task({"id": 1})
    await client.update_subtask({"id": 2})
    await client.update_label({"id": 3})
    await client.close()

    assert seen == [
        ("PATCH", "/api/tasks/update"),
        ("PATCH", "/api/subtasks/update"),
        ("PATCH", "/api/labels/update"),
    ]


@pytest.mark.asyncio
async def test_delete_routes_pass_id_as_query_param() -> None:
    seen: list[tuple[str, str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, request.url.params["id"]))
        return _json_response(200, {"id": int(request.url.params["id"])})

    client = _make_client(handler)
    assert await client.delete_task(5) == {"id": 5}
    assert await client.delete_subtask(6) == {"id": 6}
    assert await client.delete_label(7) == {"id": 7}
    await client.close()

    assert seen == [
        ("DELETE", "/api/tasks/delete", "5"),
        ("DELETE", "/api/subtasks/delete", "6"),
        ("DELETE", "/api/labels/delete", "7"),
    ]


@pytest.mark.asyncio
async def test_subtask_and_label_create_routes() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return _json_response(200, {"labels": []})

    client = _make_client(handler)
    await client.create_subtask({"taskId": 1, "title": "s"})
    await client.create_label({"name": "n", "color": "#fff"})
    await client.fetch_labels()
    await client.close()

    assert seen == ["/api/subtasks/create", "/api/labels/create", "/api/labels/labels"]


@pytest.mark.asyncio
async def test_null_and_empty_bodies_return_none() -> None:
    responses = iter([httpx.Response(200, content=b"null"), httpx.Response(200, content=b"")])

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    client = _make_client(handler)
    assert await client.create_task({"title": "x"}) is None
    assert await client.create_task({"title": "y"}) is None
    await client.close()


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_404_raises_not_found() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return _json_response(404, {"error": "Task not found"})

    client = _make_client(handler)
    with pytest.raises(NotFoundError) as exc_info:
        await client.delete_task(99)
    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Task not found"
    await client.close()


@pytest.mark.asyncio
async def test_5xx_raises_server_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    client = _make_client(handler)
    with pytest.raises(ServerError) as exc_info:
        await client.fetch_tasks()
    assert exc_info.value.status_code == 502
    assert exc_info.value.message == "bad gateway"
    await client.close()


@pytest.mark.asyncio
async def test_4xx_raises_client_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return _json_response(422, {"detail": "title is required"})

    client = _make_client(handler)
    with pytest.raises(ClientError) as exc_info:
        await client.create_task({})
    assert exc_info.value.status_code == 422
    assert "title is required" in str(exc_info.value)
    await client.close()


@pytest.mark.asyncio
async def test_timeout_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    client = _make_client(handler)
    with pytest.raises(TransportError, match="timed out"):
        await client.fetch_labels()
    await client.close()


@pytest.mark.asyncio
async def test_connect_error_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = _make_client(handler)
    with pytest.raises(TransportError, match="ConnectError"):
        await client.fetch_tasks()
    await client.close()
