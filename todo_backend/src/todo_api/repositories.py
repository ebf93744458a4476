from __future__ import annotations

from abc import ABC, abstractmethod
from threading import Lock
from typing import Dict, Generic, List, Optional, TypeVar
from uuid import UUID

from .errors import ConflictError, NotFoundError
from .models import TodoEntity

T = TypeVar("T")


# PUBLIC_INTERFACE
class Repository(ABC, Generic[T]):
    """
    Storage-agnostic CRUD contract for one entity type.

    Every operation is a single atomic unit of work against the store.
    Logical absence is never reported as an exception except by ``update``;
    infrastructure failures raise ``InfrastructureError``.
    """

    @abstractmethod
    def get_all(self) -> List[T]:
        """Return every persisted entity, in store-native order."""

    @abstractmethod
    def get_by_id(self, entity_id: UUID) -> Optional[T]:
        """Return the entity with ``entity_id``, or None if it does not exist."""

    @abstractmethod
    def insert(self, entity: T) -> T:
        """
        Persist a new entity with its caller-assigned id and return it.
        Raises ConflictError if the id already exists.
        """

    @abstractmethod
    def update(self, entity_id: UUID, entity: T) -> T:
        """
        Overwrite title, description, completed and completed_at of an existing
        entity. ``id`` and ``created_at`` keep their stored values. Returns the
        entity as persisted. Raises NotFoundError if the id does not exist.
        """

    @abstractmethod
    def delete(self, entity_id: UUID) -> bool:
        """Delete an entity by id. Return True if a row was removed, False if not found."""


class InMemoryRepository(Repository[TodoEntity]):
    """
    Dictionary-backed repository guarded by one lock. Satisfies the same
    contract as SQLRepository; used as a test double.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._items: Dict[UUID, TodoEntity] = {}

    def get_all(self) -> List[TodoEntity]:
        with self._lock:
            return [item.copy() for item in self._items.values()]

    def get_by_id(self, entity_id: UUID) -> Optional[TodoEntity]:
        with self._lock:
            item = self._items.get(entity_id)
            return None if item is None else item.copy()

    def insert(self, entity: TodoEntity) -> TodoEntity:
        with self._lock:
            if entity["id"] in self._items:
                raise ConflictError(entity["id"])
            self._items[entity["id"]] = entity.copy()
            return entity.copy()

    def update(self, entity_id: UUID, entity: TodoEntity) -> TodoEntity:
        with self._lock:
            existing = self._items.get(entity_id)
            if existing is None:
                raise NotFoundError(entity_id)

            updated = existing.copy()
            updated["title"] = entity["title"]
            updated["description"] = entity["description"]
            updated["completed"] = entity["completed"]
            updated["completed_at"] = entity["completed_at"]

            self._items[entity_id] = updated
            return updated.copy()

    def delete(self, entity_id: UUID) -> bool:
        with self._lock:
            return self._items.pop(entity_id, None) is not None
