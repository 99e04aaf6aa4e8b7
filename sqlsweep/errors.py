"""Exception types raised by sqlsweep."""

from __future__ import annotations


class SqlSweepError(Exception):
    pass


class SqlError(SqlSweepError):
    """Wraps a database driver failure surfaced by sqlsweep.

    Accepts no detail, a message, a cause, or both:

        SqlError()
        SqlError("lookup failed")
        SqlError(cause=exc)
        SqlError("lookup failed", exc)
    """

    def __init__(self, message: str | None = None, cause: BaseException | None = None) -> None:
        self._message = message
        self._cause = cause
        if message is not None:
            text = message
        elif cause is not None:
            text = f"{type(cause).__name__}: {cause}"
        else:
            text = ""
        super().__init__(text)
        if cause is not None:
            self.__cause__ = cause

    @property
    def message(self) -> str | None:
        return self._message

    @property
    def cause(self) -> BaseException | None:
        return self._cause
