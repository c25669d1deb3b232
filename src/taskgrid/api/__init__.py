"""Async Python client for the task CRUD REST API."""

from .client import TaskApiClient
from .errors import ClientError, NotFoundError, ServerError, TaskApiError, TransportError

__all__ = [
    "ClientError",
    "NotFoundError",
    "ServerError",
    "TaskApiClient",
    "TaskApiError",
    "TransportError",
]
