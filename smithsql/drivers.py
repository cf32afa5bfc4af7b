"""Database drivers that run generated SQL against a TPC-C schema."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from .profile import DriverKind

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = Path("assets/sqlite/tpcc-create-table.sql")


class DriverError(Exception):
    """A driver could not be created or a statement could not be run."""


class SqliteDriver:
    """In-memory SQLite database initialised from a schema script."""

    def __init__(self, schema_path: str | Path = DEFAULT_SCHEMA_PATH) -> None:
        self._conn = sqlite3.connect(":memory:", isolation_level=None, check_same_thread=False)
        try:
            logger.info("Initializing SQLite in-memory database...")
            self._init(Path(schema_path))
            if not self._verify():
                raise DriverError("SQLite verify failed after init.")
        except BaseException:
            self._conn.close()
            raise

    def _init(self, schema_path: Path) -> None:
        logger.info("(SQLite) Executing init SQL from %s...", schema_path)
        try:
            script = schema_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise DriverError(f"Failed to read SQL file: {schema_path}: {exc}") from exc
        try:
            self._conn.executescript(script)
        except sqlite3.Error as exc:
            raise DriverError(f"Failed to execute SQLite init SQL batch: {exc}") from exc
        logger.info("(SQLite) TPC-C tables created successfully.")

    def _verify(self) -> bool:
        conn = self._conn
        (count,) = conn.execute("SELECT count(*) FROM warehouse").fetchone()
        if count != 0:
            return False

        conn.execute(
            "INSERT INTO warehouse (w_id, w_name, w_ytd, w_tax, w_street_1, w_street_2, "
            "w_city, w_state, w_zip) VALUES (1, 'test', 0, 0, 'a', 'b', 'c', 'd', 'e')"
        )
        count, name = conn.execute("SELECT count(*), w_name FROM warehouse").fetchone()
        conn.execute("DELETE FROM warehouse WHERE w_id=1")
        if count != 1 or name != "test":
            return False

        (count,) = conn.execute("SELECT count(*) FROM warehouse").fetchone()
        return count == 0

    def exec(self, sql: str) -> int:
        """Run one statement; return rows read for queries, rows changed otherwise.

        SQLite errors propagate as ``sqlite3.Error``.
        """
        lowered = sql.lower()
        if lowered.startswith(("select", "pragma")):
            return self.query(sql)
        cursor = self._conn.execute(sql)
        try:
            if cursor.description is not None and cursor.fetchone() is not None:
                raise DriverError("Execute returned results - did you mean to call query?")
            return max(cursor.rowcount, 0)
        finally:
            cursor.close()

    def query(self, sql: str) -> int:
        """Run a statement and return how many rows it produced."""
        cursor = self._conn.execute(sql)
        try:
            return sum(1 for _ in cursor)
        finally:
            cursor.close()

    @property
    def connection(self) -> sqlite3.Connection:
        """The underlying SQLite connection."""
        return self._conn

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> SqliteDriver:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def new_conn(kind: DriverKind, schema_path: str | Path = DEFAULT_SCHEMA_PATH) -> SqliteDriver:
    """Create the driver for ``kind``."""
    if kind is DriverKind.SQLITE_IN_MEM:
        return SqliteDriver(schema_path)
    if kind is DriverKind.LIMBO_IN_MEM:
        raise DriverError("LIMBO driver is not implemented")
    raise DriverError(f"unknown driver kind: {kind!r}")