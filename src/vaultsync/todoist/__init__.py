"""Todoist API access."""

from .client import (
    TodoistAuthError,
    TodoistClient,
    TodoistClientError,
    TodoistNotFoundError,
    TodoistRateLimitError,
    TodoistTransportError,
)
from .protocol import TaskGatewayProtocol

__all__ = [
    "TaskGatewayProtocol",
    "TodoistAuthError",
    "TodoistClient",
    "TodoistClientError",
    "TodoistNotFoundError",
    "TodoistRateLimitError",
    "TodoistTransportError",
]
