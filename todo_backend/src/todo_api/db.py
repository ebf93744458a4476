from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Generator, List, Mapping, Optional
from uuid import UUID

from sqlalchemy import Boolean, Column, DateTime, MetaData, Table, Text, Uuid, delete, insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .errors import ConflictError, InfrastructureError, NotFoundError
from .models import TodoEntity
from .repositories import Repository

logger = logging.getLogger(__name__)

metadata = MetaData()

# Mirrors the schema built by the migrations in todo_api/migrations/versions.
todos = Table(
    "todos",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("title", Text, nullable=False),
    Column("description", Text, nullable=False),
    Column("completed", Boolean, nullable=False, default=False, index=True),
    Column("completed_at", DateTime, nullable=True),
    Column("created_at", DateTime, nullable=False, index=True),
)


class SQLRepository(Repository[TodoEntity]):
    """
    Relational repository over a pooled SQLAlchemy engine.

    Each public operation checks out one connection, runs inside a single
    transaction, and returns the connection to the pool before returning.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @contextmanager
    def _conn(self) -> Generator[Connection, None, None]:
        try:
            with self._engine.begin() as conn:
                yield conn
        except SQLAlchemyError as e:
            logger.warning("Store operation failed: %s", e)
            raise InfrastructureError(str(e)) from e

    def _row_to_entity(self, row: Mapping[str, Any]) -> TodoEntity:
        try:
            entity: TodoEntity = {
                "id": _as_uuid(row["id"]),
                "title": str(row["title"]),
                "description": str(row["description"]),
                "completed": bool(row["completed"]),
                "completed_at": _as_datetime(row["completed_at"]),
                "created_at": _as_datetime(row["created_at"]),  # type: ignore[typeddict-item]
            }
        except (KeyError, TypeError, ValueError) as e:
            raise InfrastructureError(f"Malformed todo row: {e}") from e
        if entity["created_at"] is None:
            raise InfrastructureError(f"Malformed todo row {entity['id']}: created_at is null")
        return entity

    def _select_one(self, conn: Connection, entity_id: UUID) -> Optional[TodoEntity]:
        row = conn.execute(select(todos).where(todos.c.id == entity_id)).mappings().first()
        return self._row_to_entity(row) if row else None

    def get_all(self) -> List[TodoEntity]:
        with self._conn() as conn:
            rows = conn.execute(select(todos)).mappings().all()
            return [self._row_to_entity(r) for r in rows]

    def get_by_id(self, entity_id: UUID) -> Optional[TodoEntity]:
        with self._conn() as conn:
            return self._select_one(conn, entity_id)

    def insert(self, entity: TodoEntity) -> TodoEntity:
        try:
            with self._conn() as conn:
                conn.execute(
                    insert(todos).values(
                        id=entity["id"],
                        title=entity["title"],
                        description=entity["description"],
                        completed=entity["completed"],
                        completed_at=entity["completed_at"],
                        created_at=entity["created_at"],
                    )
                )
                stored = self._select_one(conn, entity["id"])
        except InfrastructureError as e:
            # Only an id collision is a conflict
            if isinstance(e.__cause__, IntegrityError) and self.get_by_id(entity["id"]) is not None:
                raise ConflictError(entity["id"]) from e.__cause__
            raise
        assert stored is not None
        return stored

    def update(self, entity_id: UUID, entity: TodoEntity) -> TodoEntity:
        with self._conn() as conn:
            result = conn.execute(
                update(todos)
                .where(todos.c.id == entity_id)
                .values(
                    title=entity["title"],
                    description=entity["description"],
                    completed=entity["completed"],
                    completed_at=entity["completed_at"],
                )
            )
            if result.rowcount == 0:
                raise NotFoundError(entity_id)
            stored = self._select_one(conn, entity_id)
        assert stored is not None
        return stored

    def delete(self, entity_id: UUID) -> bool:
        with self._conn() as conn:
            result = conn.execute(delete(todos).where(todos.c.id == entity_id))
            return result.rowcount > 0


def _as_uuid(value: Any) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
