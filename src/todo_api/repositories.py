from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from psycopg import sql

from .db import COLS, Database
from .logger import get_logger
from .models import TodoChanges, TodoEntity
from .utils import to_iso_utc

logger = get_logger(__name__)

_RETURNING = f"{COLS.id}, {COLS.title}, {COLS.completed}, {COLS.created_at}"


class EmptyUpdateError(ValueError):
    """Raised when an update request carries no fields to change."""

    def __init__(self) -> None:
        super().__init__("Provide at least one field to update.")


# PUBLIC_INTERFACE
def build_assignments(changes: TodoChanges) -> List[Tuple[str, Any]]:
    """
    Map a partial update request to the ordered column assignments it implies.

    Title (trimmed) comes before completed; fields left as None are skipped.
    """
    assignments: List[Tuple[str, Any]] = []
    if changes.title is not None:
        assignments.append((COLS.title, changes.title.strip()))
    if changes.completed is not None:
        assignments.append((COLS.completed, bool(changes.completed)))
    return assignments


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    async def list(self) -> List[TodoEntity]:
        """Return every TodoEntity, newest first."""

    @abstractmethod
    async def create(self, title: str) -> TodoEntity:
        """Create and return a new, not yet completed TodoEntity."""

    @abstractmethod
    async def update(self, todo_id: int, changes: TodoChanges) -> Optional[TodoEntity]:
        """
        Apply the supplied fields to an existing TodoEntity.

        Returns the updated entity, or None if no row has this id.
        Raises EmptyUpdateError if `changes` supplies no field.
        """

    @abstractmethod
    async def delete(self, todo_id: int) -> bool:
        """Delete a TodoEntity by id. Return True if deleted, False if not found."""


class PostgresTodoRepository(Repository):
    """
    PostgreSQL repository; the only component that issues SQL.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    @staticmethod
    def _row_to_entity(row: Dict[str, Any]) -> TodoEntity:
        return {
            "id": int(row[COLS.id]),
            "title": str(row[COLS.title]),
            "completed": bool(row[COLS.completed]),
            "created_at": to_iso_utc(row[COLS.created_at]),
        }

    async def list(self) -> List[TodoEntity]:
        await self._db.ensure_schema()
        rows = await self._db.fetch_all(
            f"SELECT {_RETURNING} FROM {COLS.table} ORDER BY {COLS.created_at} DESC"
        )
        return [self._row_to_entity(r) for r in rows]

    async def create(self, title: str) -> TodoEntity:
        await self._db.ensure_schema()
        row = await self._db.fetch_one(
            f"INSERT INTO {COLS.table} ({COLS.title}) VALUES (%s) RETURNING {_RETURNING}",
            (title.strip(),),
        )
        if row is None:
            raise RuntimeError("INSERT did not return the created row")
        entity = self._row_to_entity(row)
        logger.info("Created todo #%s", entity["id"])
        return entity

    async def update(self, todo_id: int, changes: TodoChanges) -> Optional[TodoEntity]:
        assignments = build_assignments(changes)
        if not assignments:
            raise EmptyUpdateError()

        await self._db.ensure_schema()
        query = sql.SQL("UPDATE {table} SET {fields} WHERE {id} = %s RETURNING {returning}").format(
            table=sql.Identifier(COLS.table),
            fields=sql.SQL(", ").join(
                sql.SQL("{} = %s").format(sql.Identifier(column)) for column, _ in assignments
            ),
            id=sql.Identifier(COLS.id),
            returning=sql.SQL(_RETURNING),
        )
        row = await self._db.fetch_one(query, [value for _, value in assignments] + [todo_id])
        return self._row_to_entity(row) if row else None

    async def delete(self, todo_id: int) -> bool:
        await self._db.ensure_schema()
        count = await self._db.execute(
            f"DELETE FROM {COLS.table} WHERE {COLS.id} = %s", (todo_id,)
        )
        deleted = count > 0
        if deleted:
            logger.info("Deleted todo #%s", todo_id)
        return deleted


class InMemoryRepository(Repository):
    """
    Dict-backed repository with the same contract as PostgresTodoRepository,
    suitable for testing.
    """

    def __init__(self) -> None:
        self._items: dict[int, Tuple[TodoEntity, datetime]] = {}
        self._next_id = 1

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _allocate_id(self) -> int:
        i = self._next_id
        self._next_id += 1
        return i

    async def list(self) -> List[TodoEntity]:
        ordered = sorted(
            self._items.values(), key=lambda pair: (pair[1], pair[0]["id"]), reverse=True
        )
        # Return copies to avoid external mutation
        return [entity.copy() for entity, _ in ordered]

    async def create(self, title: str) -> TodoEntity:
        now = self._now()
        entity: TodoEntity = {
            "id": self._allocate_id(),
            "title": title.strip(),
            "completed": False,
            "created_at": to_iso_utc(now),
        }
        self._items[entity["id"]] = (entity, now)
        return entity.copy()

    async def update(self, todo_id: int, changes: TodoChanges) -> Optional[TodoEntity]:
        assignments = build_assignments(changes)
        if not assignments:
            raise EmptyUpdateError()

        existing = self._items.get(todo_id)
        if existing is None:
            return None

        entity, created = existing
        updated = entity.copy()
        for column, value in assignments:
            updated[column] = value  # type: ignore[literal-required]
        self._items[todo_id] = (updated, created)
        return updated.copy()

    async def delete(self, todo_id: int) -> bool:
        return self._items.pop(todo_id, None) is not None
