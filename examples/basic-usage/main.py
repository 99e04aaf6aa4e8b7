"""
Basic Usage Example
===================

Demonstrates the sqlsweep resource tracker against PostgreSQL:
  - Registering statements and result cursors for one unit of work
  - Handing a result back to the caller with release()
  - The leak warning when a tracker is dropped without close()

Prerequisites:
  - PostgreSQL running and reachable with the SQLSWEEP_DB_* settings

Usage:
  export SQLSWEEP_DB_NAME=postgres
  export SQLSWEEP_DB_USER=your_user
  python main.py
"""

import gc
import logging

import psycopg2

from sqlsweep import ResourceTracker, unit_of_work
from sqlsweep.config import get_config

# Set up logging so you can see what's happening
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def demo_unit_of_work(conn) -> None:
    """Open several statements and close them all at once."""
    print("\n" + "=" * 60)
    print("STEP 1: One sweep for the whole unit of work")
    print("=" * 60)

    with unit_of_work(conn) as db:
        numbers = db.execute("SELECT generate_series(1, 5)")
        print(f"Numbers: {[r[0] for r in numbers.fetchall()]}")

        now = db.execute("SELECT now()")
        print(f"Server time: {now.fetchone()[0]}")

        print(f"Tracked before exit: {db.tracker!r}")

    print(f"Statements closed: {numbers.statement.closed}, {now.statement.closed}")


def open_report(conn):
    """Return an open result to the caller, releasing it from the tracker."""
    with unit_of_work(conn) as db:
        scratch = db.execute("SELECT 'scratch'")
        scratch.fetchall()
        report = db.execute("SELECT relname FROM pg_class ORDER BY relname LIMIT 3")
        db.release(report)
    return report


def demo_release(conn) -> None:
    print("\n" + "=" * 60)
    print("STEP 2: Handing a result back to the caller")
    print("=" * 60)

    report = open_report(conn)
    try:
        for (name,) in report:
            print(f"  {name}")
    finally:
        report.statement.close()


def demo_leak(conn) -> None:
    print("\n" + "=" * 60)
    print("STEP 3: Forgetting to close (watch for the warning)")
    print("=" * 60)

    tracker = ResourceTracker()
    cur = tracker.add_statement(conn.cursor())
    cur.execute("SELECT 1")
    del tracker
    gc.collect()
    print(f"Statement closed by the safety net: {cur.closed}")


def main() -> None:
    cfg = get_config()
    print(f"Connecting with: {cfg.db.safe_dsn}")

    conn = psycopg2.connect(**cfg.db.dict)
    try:
        demo_unit_of_work(conn)
        demo_release(conn)
        demo_leak(conn)
    finally:
        conn.rollback()
        conn.close()


if __name__ == "__main__":
    main()
