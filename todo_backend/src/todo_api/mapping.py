"""
Pure conversions between the wire-facing request/response models and the
stored TodoEntity.

The completion invariant (``completed_at`` is set iff ``completed``) is
established here on every write path; the stores do not enforce it.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import UUID, uuid4

from .models import TodoEntity
from .schemas import CreateTodoItemRequest, TodoItem, UpdateTodoItemRequest


def utcnow() -> datetime:
    """Naive UTC timestamp, the resolution stored in the todos table."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# PUBLIC_INTERFACE
def entity_from_create(
    request: CreateTodoItemRequest,
    now: Optional[datetime] = None,
    id_factory: Callable[[], UUID] = uuid4,
) -> TodoEntity:
    """
    Build a brand new entity from a create request.

    A fresh id is generated, ``created_at`` is set to now and the item starts
    out open (``completed=False``, ``completed_at=None``).
    """
    return {
        "id": id_factory(),
        "title": request.title,
        "description": request.description,
        "completed": False,
        "completed_at": None,
        "created_at": now or utcnow(),
    }


# PUBLIC_INTERFACE
def entity_from_update(
    todo_id: UUID,
    request: UpdateTodoItemRequest,
    now: Optional[datetime] = None,
) -> TodoEntity:
    """
    Build the replacement entity for an update of ``todo_id``.

    ``completed_at`` is now when the request marks the item completed and
    None otherwise. ``created_at`` is only a placeholder: repositories keep
    the stored creation timestamp and return it from ``update``.
    """
    stamp = now or utcnow()
    return {
        "id": todo_id,
        "title": request.new_title,
        "description": request.new_description,
        "completed": request.completed,
        "completed_at": stamp if request.completed else None,
        "created_at": stamp,
    }


# PUBLIC_INTERFACE
def to_response(entity: TodoEntity) -> TodoItem:
    """Field-for-field copy of an entity into the response DTO."""
    return TodoItem(
        id=entity["id"],
        title=entity["title"],
        description=entity["description"],
        completed=entity["completed"],
        completed_at=entity["completed_at"],
        created_at=entity["created_at"],
    )
