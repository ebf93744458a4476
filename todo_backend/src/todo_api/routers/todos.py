from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status

from .. import mapping
from ..models import TodoEntity
from ..repositories import Repository
from ..schemas import CreateTodoItemRequest, TodoItem, UpdateTodoItemRequest

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/todo",
    tags=["todos"],
)


def _get_repo(request: Request) -> Repository[TodoEntity]:
    """
    Dependency returning the repository owned by the application.
    """
    return request.app.state.repository


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoItem],
    summary="List Todos",
    description="Return every Todo item currently stored. No ordering is guaranteed.",
)
def get_todos(repo: Repository[TodoEntity] = Depends(_get_repo)) -> List[TodoItem]:
    """
    List all Todo items.
    """
    return [mapping.to_response(entity) for entity in repo.get_all()]


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoItem,
    summary="Get Todo",
    description="Get a single Todo item by ID.",
    responses={
        200: {"description": "Todo found"},
        404: {"description": "Todo not found"},
        422: {"description": "Malformed ID"},
    },
)
def get_todo_by_id(todo_id: UUID, repo: Repository[TodoEntity] = Depends(_get_repo)) -> TodoItem:
    """
    Retrieve a single Todo item by its ID.
    """
    entity = repo.get_by_id(todo_id)
    if entity is None:
        logger.warning("Todo item with id %s was not found in the data store", todo_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")
    return mapping.to_response(entity)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoItem,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item and return the created resource.",
    responses={
        201: {"description": "Todo created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_todo(payload: CreateTodoItemRequest, repo: Repository[TodoEntity] = Depends(_get_repo)) -> TodoItem:
    """
    Create a new Todo. The id and creation timestamp are generated here.
    """
    created = repo.insert(mapping.entity_from_create(payload))
    return mapping.to_response(created)


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoItem,
    summary="Update Todo",
    description=(
        "Replace title, description and completion status of an existing Todo item. "
        "The completion timestamp is set when the item is marked completed and cleared otherwise."
    ),
    responses={
        200: {"description": "Todo updated"},
        404: {"description": "Todo not found"},
    },
)
def update_todo(
    todo_id: UUID,
    payload: UpdateTodoItemRequest,
    repo: Repository[TodoEntity] = Depends(_get_repo),
) -> TodoItem:
    """
    Update a Todo item. A missing id surfaces as NotFoundError, answered with 404.
    """
    updated = repo.update(todo_id, mapping.entity_from_update(todo_id, payload))
    return mapping.to_response(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Todo",
    description="Delete a Todo item by ID.",
    responses={
        204: {"description": "Todo deleted"},
        404: {"description": "Todo not found"},
    },
)
def delete_todo(todo_id: UUID, repo: Repository[TodoEntity] = Depends(_get_repo)) -> None:
    """
    Delete a Todo. Returns 204 on success, 404 if not found.
    """
    if not repo.delete(todo_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")
    return None
