"""Async HTTP client for the task/subtask/label REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .errors import ClientError, NotFoundError, ServerError, TransportError

logger = logging.getLogger(__name__)


class TaskApiClient:
    """Async client wrapping the task CRUD service.

    Usage::

        async with TaskApiClient("http://127.0.0.1:3000") as api:
            body = await api.fetch_tasks()
            tasks = body["tasks"]

    Every method returns the decoded JSON body. A JSON ``null`` body comes back
    as ``None``; callers treat that as "no change".

    Args:
        base_url: Base URL of the API server.
        timeout: Overall request timeout in seconds.
        connect_timeout: Connect timeout in seconds.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:3000",
        timeout: float = 10.0,
        connect_timeout: float = 5.0,
    ) -> None:
        self._base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout, connect=connect_timeout),
            headers={"Content-Type": "application/json"},
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> TaskApiClient:
        """Enter the async context manager.

        Returns:
            The client instance.
        """
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Exit the async context manager, closing the underlying HTTP client."""
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> Any:
        """Send an HTTP request and return the parsed JSON body.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE).
            path: URL path relative to ``base_url``.
            **kwargs: Extra keyword arguments forwarded to ``httpx.AsyncClient.request``.

        Returns:
            Parsed JSON body, or None for an empty / null body.

        Raises:
            TransportError: If no response was received (timeout, network error).
            NotFoundError: If the server responds with 404.
            ServerError: If the server responds with a 5xx status code.
            ClientError: For any other non-2xx status code.
        """
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportError(f"{method} {path} timed out") from e
        except httpx.RequestError as e:
            raise TransportError(f"{method} {path} failed: {e.__class__.__name__}") from e

        logger.debug("%s %s -> %s", method, path, response.status_code)

        if response.status_code == 404:
            raise NotFoundError(message=self._extract_detail(response))

        if response.status_code >= 500:
            raise ServerError(status_code=response.status_code, message=self._extract_detail(response))

        if response.status_code >= 400:
            raise ClientError(status_code=response.status_code, message=self._extract_detail(response))

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ClientError(status_code=response.status_code, message="Response is not JSON") from e

    @staticmethod
    def _extract_detail(response: httpx.Response) -> str:
        """Extract a human-readable error detail from a response.

        Tries the JSON body's ``error`` / ``detail`` / ``message`` keys; falls back
        to the raw response text.
        """
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            for key in ("error", "detail", "message"):
                if key in body:
                    return str(body[key])
        return response.text

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def fetch_tasks(self) -> Any:
        """Fetch every task: ``{"tasks": [...]}``."""
        return await self._request("GET", "/api/tasks/tasks")

    async def create_task(self, payload: dict[str, Any]) -> Any:
        """Create a task (no id in payload): ``{"task": {...}}``."""
        return await self._request("POST", "/api/tasks/create", json=payload)

    async def update_task(self, payload: dict[str, Any]) -> Any:
        """Replace a task's mutable fields (payload carries the id): ``{"task": {...}}``."""
        return await self._request("PATCH", "/api/tasks/update", json=payload)

    async def delete_task(self, task_id: int) -> Any:
        """Delete a task: ``{"id": ...}``."""
        return await self._request("DELETE", "/api/tasks/delete", params={"id": task_id})

    # ------------------------------------------------------------------
    # Subtasks
    # ------------------------------------------------------------------

    async def create_subtask(self, payload: dict[str, Any]) -> Any:
        return await self._request("POST", "/api/subtasks/create", json=payload)

    async def update_subtask(self, payload: dict[str, Any]) -> Any:
        return await self._request("PATCH", "/api/subtasks/update", json=payload)

    async def delete_subtask(self, subtask_id: int) -> Any:
        return await self._request("DELETE", "/api/subtasks/delete", params={"id": subtask_id})

    # ------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------

    async def fetch_labels(self) -> Any:
        """Fetch every label: ``{"labels": [...]}``."""
        return await self._request("GET", "/api/labels/labels")

    async def create_label(self, payload: dict[str, Any]) -> Any:
        return await self._request("POST", "/api/labels/create", json=payload)

    async def update_label(self, payload: dict[str, Any]) -> Any:
        return await self._request("PATCH", "/api/labels/update", json=payload)

    async def delete_label(self, label_id: int) -> Any:
        return await self._request("DELETE", "/api/labels/delete", params={"id": label_id})
