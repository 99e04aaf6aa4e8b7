"""
DB-API instrumentation for the resource tracker.

Wraps a caller-owned connection so that every cursor it opens is registered
with a ResourceTracker. The connection itself is never opened, committed,
rolled back or closed here.

Usage:
    from sqlsweep.db import unit_of_work

    with unit_of_work(conn) as db:
        result = db.execute("SELECT id, name FROM person WHERE active = %s", (True,))
        rows = result.fetchall()
    # Statements and result cursors are closed; conn stays open.
"""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2.extensions

from sqlsweep.errors import SqlError
from sqlsweep.tracker import Closeable, ResourceTracker

logger = logging.getLogger(__name__)


class ResultCursor:
    """Result rows produced by an executed statement.

    Reports the statement that produced it through ``statement``. Closing a
    result over a server-side (named) cursor closes that cursor too; plain
    statements are left to the statement sweep.
    """

    def __init__(self, statement: psycopg2.extensions.cursor) -> None:
        if statement is None:
            raise ValueError("statement must not be None")
        self._statement = statement
        self._closed = False

    @property
    def statement(self) -> psycopg2.extensions.cursor:
        return self._statement

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def description(self):
        return self._statement.description

    @property
    def rowcount(self) -> int:
        return self._statement.rowcount

    def _check_open(self) -> None:
        if self._closed:
            raise SqlError("Result cursor is already closed")

    def fetchone(self) -> Any:
        self._check_open()
        return self._statement.fetchone()

    def fetchmany(self, size: int | None = None) -> list:
        self._check_open()
        if size is None:
            return self._statement.fetchmany()
        return self._statement.fetchmany(size)

    def fetchall(self) -> list:
        self._check_open()
        return self._statement.fetchall()

    def __iter__(self) -> Iterator[Any]:
        self._check_open()
        return iter(self._statement)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if getattr(self._statement, "name", None):
            self._statement.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<ResultCursor {state} statement={self._statement!r}>"


class TrackedConnection:
    """Proxy around a DB-API connection that registers every cursor it opens."""

    def __init__(
        self,
        conn: psycopg2.extensions.connection,
        tracker: ResourceTracker | None = None,
    ) -> None:
        if conn is None:
            raise ValueError("conn must not be None")
        self._conn = conn
        self.tracker = tracker if tracker is not None else ResourceTracker()

    @property
    def connection(self) -> psycopg2.extensions.connection:
        return self._conn

    def cursor(self, *args: Any, **kwargs: Any) -> psycopg2.extensions.cursor:
        """Open a driver cursor and register it as a statement."""
        return self.tracker.add_statement(self._conn.cursor(*args, **kwargs))

    def execute(self, sql: str, params: Any = None, **cursor_kwargs: Any) -> ResultCursor:
        """Execute ``sql`` on a new statement and return its registered result."""
        statement = self.cursor(**cursor_kwargs)
        statement.execute(sql, params)
        return self.tracker.add_cursor(ResultCursor(statement), register_statement=True)

    def release(self, handle: Closeable | None) -> None:
        """Hand a statement or result back to the caller; it will not be closed here."""
        self.tracker.ignore_cursor(handle)
        self.tracker.ignore_statement(handle)
        if isinstance(handle, ResultCursor):
            self.tracker.ignore_statement(handle.statement)

    def close(self) -> None:
        """Close tracked statements and results. The connection stays open."""
        logger.debug("Closing %d tracked resource(s)", len(self.tracker))
        self.tracker.close()

    def __getattr__(self, name: str) -> Any:
        if name == "_conn":
            raise AttributeError(name)
        return getattr(self._conn, name)

    def __enter__(self) -> TrackedConnection:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


@contextmanager
def unit_of_work(
    conn: psycopg2.extensions.connection,
    tracker: ResourceTracker | None = None,
) -> Generator[TrackedConnection, None, None]:
    """Yield a TrackedConnection; tracked resources are closed on every exit path.

    No commit or rollback is issued and ``conn`` is left open.
    """
    db = TrackedConnection(conn, tracker)
    try:
        yield db
    finally:
        db.close()
