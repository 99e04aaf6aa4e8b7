"""DB-API instrumentation for sqlsweep."""

from sqlsweep.db.connection import ResultCursor, TrackedConnection, unit_of_work

__all__ = ["ResultCursor", "TrackedConnection", "unit_of_work"]
