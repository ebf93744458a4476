from __future__ import annotations

from typing import Any


class TodoStoreError(Exception):
    """Base class for every error raised by the persistence core."""


# PUBLIC_INTERFACE
class NotFoundError(TodoStoreError):
    """No row exists for the requested id."""

    def __init__(self, todo_id: Any) -> None:
        super().__init__(f"Todo item {todo_id} was not found")
        self.todo_id = todo_id


# PUBLIC_INTERFACE
class ConflictError(TodoStoreError):
    """A row with the same id already exists."""

    def __init__(self, todo_id: Any) -> None:
        super().__init__(f"Todo item {todo_id} already exists")
        self.todo_id = todo_id


# PUBLIC_INTERFACE
class InfrastructureError(TodoStoreError):
    """
    The store could not serve the request: pool checkout timed out, the
    store is unreachable, or a row could not be decoded. Never retried here.
    """


# PUBLIC_INTERFACE
class StartupError(TodoStoreError):
    """Fatal error while assembling the persistence layer (pool or migrations)."""


class ConfigurationError(StartupError):
    """Required configuration is missing or malformed."""
