from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from psycopg import AsyncConnection
from psycopg.abc import Query
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from .logger import get_logger
from .settings import Settings

logger = get_logger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "todos"
    id: str = "id"
    title: str = "title"
    completed: str = "completed"
    created_at: str = "created_at"


COLS = _Cols()

SCHEMA_SQL = f"""
CREATE TABLE IF NOT EXISTS {COLS.table} (
    {COLS.id} SERIAL PRIMARY KEY,
    {COLS.title} TEXT NOT NULL,
    {COLS.completed} BOOLEAN NOT NULL DEFAULT FALSE,
    {COLS.created_at} TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""


class Database:
    """
    Shared PostgreSQL access for the process: one connection pool plus the
    one-time "ensure table exists" step.

    The pool is injected so tests can pass a stand-in exposing the same
    open/close/connection() surface as psycopg_pool.AsyncConnectionPool.
    """

    def __init__(self, pool: Any) -> None:
        self._pool = pool
        self._opened = False
        self._open_lock = asyncio.Lock()
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()

    # PUBLIC_INTERFACE
    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """
        Build a Database over a not-yet-opened AsyncConnectionPool.

        Raises:
            ConfigurationError: if DATABASE_URL is missing.
        """
        pool = AsyncConnectionPool(
            settings.require_database_url(),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            open=False,
            name="todo-api",
        )
        return cls(pool)

    @property
    def schema_ready(self) -> bool:
        return self._schema_ready

    # -- lifecycle -------------------------------------------------------------

    async def open(self) -> None:
        if self._opened:
            return
        async with self._open_lock:
            if self._opened:
                return
            await self._pool.open()
            self._opened = True
            logger.info("Database connection pool opened")

    async def close(self) -> None:
        if not self._opened:
            return
        await self._pool.close()
        self._opened = False
        logger.info("Database connection pool closed")

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[AsyncConnection]:
        """Borrow a pooled connection; the pool commits on success and rolls back on error."""
        await self.open()
        async with self._pool.connection() as conn:
            yield conn

    # PUBLIC_INTERFACE
    async def ensure_schema(self) -> None:
        """Create the todos table on first call; later calls return immediately."""
        if self._schema_ready:
            return
        async with self._schema_lock:
            if self._schema_ready:
                return
            await self.execute(SCHEMA_SQL)
            self._schema_ready = True
            logger.info("Ensured table %r exists", COLS.table)

    # -- query helpers ---------------------------------------------------------

    async def fetch_all(self, query: Query, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(query, params)
                return await cur.fetchall()

    async def fetch_one(self, query: Query, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        async with self.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(query, params)
                return await cur.fetchone()

    async def execute(self, query: Query, params: Sequence[Any] = ()) -> int:
        """Run a statement and return the number of affected rows."""
        async with self.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
                return cur.rowcount
