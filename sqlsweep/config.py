"""
Centralized configuration for sqlsweep.

All configuration is loaded from environment variables with sensible defaults.
The library never opens connections itself; the database settings exist for
callers and for the PostgreSQL integration tests.

Usage:
    from sqlsweep.config import get_config, get_tracker_config
    get_tracker_config().warn_on_leak   # True
    get_config().db.safe_dsn            # "dbname=sqlsweep port=5432 ..."

Tracker settings load on their own, so a malformed database variable never
breaks tracker construction.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class DatabaseConfig:
    """Where callers and integration tests find PostgreSQL."""

    host: str = ""  # empty = Unix socket (peer auth)
    port: int = 5432
    name: str = "sqlsweep"
    user: str = ""
    password: str = ""

    @property
    def dict(self) -> dict[str, str | int]:
        """psycopg2.connect() kwargs; unset values are left to libpq defaults."""
        params: dict[str, str | int] = {
            "dbname": self.name,
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
        }
        return {k: v for k, v in params.items() if v != ""}

    @property
    def dsn(self) -> str:
        """libpq keyword/value connection string."""
        return " ".join(f"{k}={v}" for k, v in self.dict.items())

    @property
    def safe_dsn(self) -> str:
        """Connection string with the password masked, for logs and messages."""
        return " ".join(
            f"{k}={'***' if k == 'password' else v}" for k, v in self.dict.items()
        )


@dataclass(frozen=True)
class TrackerConfig:
    """Resource tracker behaviour."""

    # Log a warning when a tracker is collected with resources still registered
    warn_on_leak: bool = True


@dataclass(frozen=True)
class Config:
    """Top-level sqlsweep configuration."""

    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    db: DatabaseConfig = field(default_factory=DatabaseConfig)


# Singletons
_config: Config | None = None
_tracker_config: TrackerConfig | None = None


def get_config() -> Config:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = Config(tracker=get_tracker_config(), db=_load_db_from_env())
    return _config


def get_tracker_config() -> TrackerConfig:
    """Tracker settings only; never touches the database variables."""
    global _tracker_config
    if _tracker_config is not None:
        return _tracker_config
    _tracker_config = TrackerConfig(
        warn_on_leak=_env_flag("SQLSWEEP_WARN_ON_LEAK", True),
    )
    return _tracker_config


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in _FALSY


def _env_port(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer port, got {raw!r}") from None


def _load_db_from_env() -> DatabaseConfig:
    return DatabaseConfig(
        host=os.environ.get("SQLSWEEP_DB_HOST", ""),
        port=_env_port("SQLSWEEP_DB_PORT", 5432),
        name=os.environ.get("SQLSWEEP_DB_NAME", "sqlsweep"),
        user=os.environ.get("SQLSWEEP_DB_USER", os.environ.get("USER", "")),
        password=os.environ.get("SQLSWEEP_DB_PASSWORD", ""),
    )


def reset_config() -> None:
    """Reset the singleton configs (for testing)."""
    global _config, _tracker_config
    _config = None
    _tracker_config = None
