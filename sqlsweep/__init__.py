"""
sqlsweep: close every statement and result cursor of a unit of work in one call.

Public API:
    ResourceTracker()        → registry of open cursors and statements
    get_tracker()            → new tracker configured from the environment
    tracked()                → context manager yielding a tracker, closed on exit
    unit_of_work(conn)       → context manager yielding a TrackedConnection
    SqlError                 → wrapped database driver failure
"""

from __future__ import annotations

from sqlsweep.db import ResultCursor, TrackedConnection, unit_of_work
from sqlsweep.errors import SqlError, SqlSweepError
from sqlsweep.tracker import ResourceTracker, get_tracker, log_leak, tracked

__all__ = [
    "ResourceTracker",
    "ResultCursor",
    "SqlError",
    "SqlSweepError",
    "TrackedConnection",
    "get_tracker",
    "log_leak",
    "tracked",
    "unit_of_work",
]
