from __future__ import annotations

from datetime import datetime
from typing import Optional, TypedDict
from uuid import UUID


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    The stored representation of a Todo item, shared by every repository
    backend.

    Fields:
    - id: Globally unique identifier, assigned at creation and never reused
    - title: Non-empty title
    - description: Detailed description, may be empty
    - completed: Boolean completion flag
    - completed_at: Naive UTC completion timestamp; set iff completed is True
    - created_at: Naive UTC creation timestamp, never changed after insert
    """

    id: UUID
    title: str
    description: str
    completed: bool
    completed_at: Optional[datetime]
    created_at: datetime
