from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _validate_title(v: str) -> str:
    """
    Strip whitespace and enforce 1..200 length.
    """
    if v is None:
        raise ValueError("title is required")
    s = v.strip()
    if not (1 <= len(s) <= 200):
        raise ValueError("title length must be between 1 and 200 characters")
    return s


# PUBLIC_INTERFACE
class CreateTodoItemRequest(BaseModel):
    """
    Schema for creating a new Todo item. Identifier and timestamps are
    assigned server side.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
            }
        }
    )

    title: str = Field(..., description="Title of the todo item", min_length=1, max_length=200)
    description: str = Field(default="", description="Description of the todo item, may be empty")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _validate_title(v)


# PUBLIC_INTERFACE
class UpdateTodoItemRequest(BaseModel):
    """
    Schema for replacing the mutable fields of an existing Todo item.
    All fields are required; completed_at is derived from `completed`.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "new_title": "Buy groceries and supplies",
                "new_description": "Milk, eggs, bread, and paper towels",
                "completed": True,
            }
        }
    )

    new_title: str = Field(..., description="New title of the todo item", min_length=1, max_length=200)
    new_description: str = Field(..., description="New description of the todo item")
    completed: bool = Field(..., description="Indicates whether the todo item is completed")

    @field_validator("new_title")
    @classmethod
    def validate_new_title(cls, v: str) -> str:
        return _validate_title(v)


# PUBLIC_INTERFACE
class TodoItem(BaseModel):
    """
    Response DTO for a Todo item. This is the only shape serialized to callers.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "120400b8-eee8-47cc-9e96-5bc0a3e2e874",
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "completed_at": None,
                "created_at": "2025-01-25T10:15:30.123456",
            }
        }
    )

    id: UUID = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Title of the todo item")
    description: str = Field(..., description="Description of the todo item")
    completed: bool = Field(..., description="Completion status flag")
    completed_at: Optional[datetime] = Field(
        default=None, description="Completion timestamp, null while the item is open"
    )
    created_at: datetime = Field(..., description="Creation timestamp")
