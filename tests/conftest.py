import asyncio
import os
from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient

# Keep request logging quiet; storage failures are still logged at ERROR
os.environ.setdefault("LOG_LEVEL", "WARNING")

from todo_api.db import Database  # noqa: E402
from todo_api.main import create_app  # noqa: E402
from todo_api.repositories import InMemoryRepository  # noqa: E402
from todo_api.settings import get_settings  # noqa: E402


class FakeResult:
    def __init__(self, rows=(), rowcount=None):
        self.rows = [dict(r) for r in rows]
        self.rowcount = len(self.rows) if rowcount is None else rowcount


class FakeCursor:
    def __init__(self, pool):
        self._pool = pool
        self._rows = []
        self.rowcount = -1

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, query, params=()):
        # Yield so concurrent callers can interleave like real I/O
        await asyncio.sleep(0)
        self._pool.statements.append((query, tuple(params)))
        if self._pool.error is not None:
            raise self._pool.error
        is_ddl = isinstance(query, str) and query.lstrip().upper().startswith("CREATE")
        result = FakeResult()
        if not is_ddl and self._pool.results:
            result = self._pool.results.pop(0)
        self._rows = list(result.rows)
        self.rowcount = result.rowcount

    async def fetchall(self):
        return list(self._rows)

    async def fetchone(self):
        return self._rows[0] if self._rows else None


class FakeConnection:
    def __init__(self, pool):
        self._pool = pool

    def cursor(self, row_factory=None):
        return FakeCursor(self._pool)


class FakePool:
    """Stand-in for psycopg_pool.AsyncConnectionPool that records every statement."""

    def __init__(self):
        self.statements = []
        self.results = []
        self.error = None
        self.open_calls = 0
        self.close_calls = 0

    def queue(self, rows=(), rowcount=None):
        self.results.append(FakeResult(rows, rowcount))

    async def open(self):
        self.open_calls += 1

    async def close(self):
        self.close_calls += 1

    @asynccontextmanager
    async def connection(self):
        yield FakeConnection(self)

    def ddl_statements(self):
        return [q for q, _ in self.statements if isinstance(q, str) and "CREATE TABLE" in q]


@pytest.fixture
def fake_pool():
    return FakePool()


@pytest.fixture
def database(fake_pool):
    return Database(fake_pool)


@pytest.fixture
def memory_repo():
    return InMemoryRepository()


@pytest.fixture
def client(memory_repo):
    app = create_app(settings=get_settings(), repository=memory_repo)
    with TestClient(app) as c:
        yield c
