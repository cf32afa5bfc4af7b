"""Reading table and column information from a SQLite connection."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field

_TABLES_SQL = "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%';"


@dataclass
class Table:
    """A table name with its ``(column name, declared type)`` pairs."""

    name: str
    columns: list[tuple[str, str]] = field(default_factory=list)

    def column_names(self) -> list[str]:
        return [name for name, _ in self.columns]


def _columns(conn: sqlite3.Connection, pragma: str) -> list[tuple[str, str]]:
    return [
        (row[1], row[2])
        for row in conn.execute(pragma)
        if isinstance(row[1], str) and isinstance(row[2], str)
    ]


def get_tables(conn: sqlite3.Connection) -> list[Table]:
    """All user tables with their columns; SQLite errors propagate."""
    names = [row[0] for row in conn.execute(_TABLES_SQL)]
    return [Table(name, _columns(conn, f"PRAGMA table_info('{name}')")) for name in names]


def get_tables_with_columns(conn: sqlite3.Connection) -> list[Table]:
    """Like :func:`get_tables`, but skips what cannot be read instead of raising."""
    try:
        tables = get_tables(conn)
    except sqlite3.Error:
        return []
    result = []
    for table in tables:
        try:
            columns = _columns(conn, f"PRAGMA table_info({table.name})")
        except sqlite3.Error:
            continue
        result.append(Table(table.name, columns))
    return result