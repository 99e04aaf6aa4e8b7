"""
Resource tracker: collects the statements and result cursors opened during
one unit of work and closes them all in a single sweep.

Usage:
    from sqlsweep.tracker import tracked

    with tracked() as tracker:
        stmt = tracker.add_statement(conn.cursor())
        stmt.execute("SELECT 1")
    # Every registered statement and cursor is closed here.

A tracker belongs to one caller at a time; it does no locking.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any, Protocol, TypeVar

from sqlsweep.config import get_tracker_config
from sqlsweep.errors import SqlError

logger = logging.getLogger(__name__)


class Closeable(Protocol):
    def close(self) -> Any: ...


C = TypeVar("C", bound=Closeable)

LeakCallback = Callable[["ResourceTracker"], None]

# Handles are keyed by id(); equality and hashing of driver objects are never consulted.
Registry = dict[int, Closeable]

_MISSING = object()


def log_leak(tracker: ResourceTracker) -> None:
    """Default leak callback: emit a warning through the module logger."""
    logger.warning(
        "Resources leaked: tracker collected with %d cursor(s) and %d statement(s) "
        "still open. Somebody forgot to call close().",
        len(tracker.cursors),
        len(tracker.statements),
    )


class ResourceTracker:
    """Registry of open cursors and statements for one unit of work."""

    def __init__(self, on_leak: LeakCallback | None = None) -> None:
        self._cursors: Registry = {}
        self._statements: Registry = {}
        if on_leak is None and get_tracker_config().warn_on_leak:
            on_leak = log_leak
        self._on_leak = on_leak

    # ── Registration ─────────────────────────────────────────────────

    def add_cursor(self, cursor: C, register_statement: bool = False) -> C:
        """Register a result cursor to be closed by close().

        With register_statement=True the statement that produced the cursor
        (its ``statement`` attribute) is registered as well. Returns the cursor.
        """
        if cursor is None:
            raise ValueError("cursor must not be None")
        self._cursors[id(cursor)] = cursor

        if register_statement:
            statement = _owning_statement(cursor)
            if statement is not None:
                self._statements[id(statement)] = statement

        return cursor

    def add_statement(self, statement: C) -> C:
        """Register a statement to be closed by close(). Returns the statement."""
        if statement is None:
            raise ValueError("statement must not be None")
        self._statements[id(statement)] = statement
        return statement

    def ignore_cursor(self, cursor: Closeable | None) -> None:
        """Stop tracking a cursor; its lifecycle now belongs to the caller."""
        if cursor is not None:
            _forget(self._cursors, cursor)

    def ignore_statement(self, statement: Closeable | None) -> None:
        """Stop tracking a statement; its lifecycle now belongs to the caller."""
        if statement is not None:
            _forget(self._statements, statement)

    # ── Cleanup ──────────────────────────────────────────────────────

    def close(self) -> None:
        """Close every tracked cursor, then every tracked statement.

        Failures closing individual resources are logged at DEBUG and
        discarded. Both sets are empty afterwards.
        """
        try:
            self.close_cursors()
        finally:
            self.close_statements()

    def close_cursors(self) -> None:
        """Close and forget every tracked cursor."""
        _sweep(self._cursors, "cursor")

    def close_statements(self) -> None:
        """Close and forget every tracked statement."""
        _sweep(self._statements, "statement")

    # ── Introspection ────────────────────────────────────────────────

    @property
    def cursors(self) -> tuple[Closeable, ...]:
        return tuple(self._cursors.values())

    @property
    def statements(self) -> tuple[Closeable, ...]:
        return tuple(self._statements.values())

    def is_tracked(self, handle: Closeable | None) -> bool:
        if handle is None:
            return False
        key = id(handle)
        return self._cursors.get(key) is handle or self._statements.get(key) is handle

    def __len__(self) -> int:
        return len(self._cursors) + len(self._statements)

    def __bool__(self) -> bool:
        return bool(self._cursors or self._statements)

    def __repr__(self) -> str:
        return f"<ResourceTracker cursors={len(self._cursors)} statements={len(self._statements)}>"

    # ── Scoped use ───────────────────────────────────────────────────

    def __enter__(self) -> ResourceTracker:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self) -> None:
        cursors = getattr(self, "_cursors", None)
        statements = getattr(self, "_statements", None)
        if not cursors and not statements:
            return
        try:
            if self._on_leak is not None:
                self._on_leak(self)
        finally:
            self.close()


def _owning_statement(cursor: Closeable) -> Closeable | None:
    if inspect.getattr_static(cursor, "statement", _MISSING) is _MISSING:
        return None
    try:
        return cursor.statement
    except Exception as e:
        raise SqlError("Unable to retrieve the statement that produced the cursor", e) from e


def _forget(handles: Registry, handle: Closeable) -> None:
    if handles.get(id(handle)) is handle:
        del handles[id(handle)]


def _sweep(handles: Registry, kind: str) -> None:
    try:
        for handle in list(handles.values()):
            try:
                handle.close()
            except Exception:
                logger.debug("Ignoring failure closing %s %r", kind, handle, exc_info=True)
    finally:
        handles.clear()


def get_tracker() -> ResourceTracker:
    """Return a new tracker configured from the environment."""
    return ResourceTracker()


@contextmanager
def tracked(on_leak: LeakCallback | None = None) -> Generator[ResourceTracker, None, None]:
    """Yield a fresh tracker and close it on every exit path.

    Usage:
        with tracked() as tracker:
            rows = tracker.add_statement(conn.cursor())
        # Everything registered is closed, even if the block raised.
    """
    tracker = ResourceTracker(on_leak=on_leak)
    try:
        yield tracker
    finally:
        tracker.close()
