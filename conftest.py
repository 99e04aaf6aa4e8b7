"""
Root-level shared test fixtures.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from sqlsweep.config import reset_config


@pytest.fixture
def clean_env(monkeypatch):
    """Remove sqlsweep env vars that leak between tests."""
    for key in [
        "SQLSWEEP_WARN_ON_LEAK",
        "SQLSWEEP_DB_HOST",
        "SQLSWEEP_DB_PORT",
        "SQLSWEEP_DB_NAME",
        "SQLSWEEP_DB_USER",
        "SQLSWEEP_DB_PASSWORD",
    ]:
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def make_handle():
    """Factory for closeable mock handles that report no owning statement."""

    def _make(close_error: Exception | None = None):
        handle = MagicMock(spec=["close"])
        if close_error is not None:
            handle.close.side_effect = close_error
        return handle

    return _make
