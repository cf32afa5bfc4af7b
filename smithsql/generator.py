"""Statement dispatch: choose a statement kind and generate SQL for a SQLite schema."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from enum import Enum

from .datefunc import gen_datefunc_stmt
from .ddl import gen_create_trigger_stmt, gen_drop_trigger_stmt
from .dml import (
    gen_delete_stmt,
    gen_insert_stmt,
    gen_select_stmt,
    gen_update_stmt,
    gen_vacuum_stmt,
)
from .pragma import gen_pragma_stmt
from .profile import StmtProb
from .rng import LcgRng
from .schema import Table, get_tables, get_tables_with_columns

FALLBACK_SQL = "SELECT 1;"


class SqlKind(Enum):
    """Kinds of statements that can be generated."""

    SELECT = "Select"
    INSERT = "Insert"
    UPDATE = "Update"
    DELETE = "Delete"
    VACUUM = "Vacuum"
    PRAGMA = "Pragma"
    CREATE_TRIGGER = "CreateTrigger"
    DROP_TRIGGER = "DropTrigger"
    DATE_FUNC = "DateFunc"


_PROFILE_KINDS = {
    "SELECT": SqlKind.SELECT,
    "INSERT": SqlKind.INSERT,
    "UPDATE": SqlKind.UPDATE,
    "DELETE": SqlKind.DELETE,
    "VACUUM": SqlKind.VACUUM,
    "PRAGMA": SqlKind.PRAGMA,
    "CREATE_TRIGGER": SqlKind.CREATE_TRIGGER,
    "DROP_TRIGGER": SqlKind.DROP_TRIGGER,
    "DATE_FUNC": SqlKind.DATE_FUNC,
}


def _tables(conn: sqlite3.Connection) -> list[Table] | None:
    try:
        tables = get_tables(conn)
    except sqlite3.Error:
        return None
    return tables or None


def get_stmt_by_seed(conn: sqlite3.Connection, rng: LcgRng, kind: SqlKind) -> str | None:
    """Generate a statement of ``kind`` against the schema of ``conn``, or None."""
    if kind is SqlKind.SELECT:
        tables = _tables(conn)
        return None if tables is None else gen_select_stmt(tables, rng)
    if kind is SqlKind.INSERT:
        return gen_insert_stmt(get_tables_with_columns(conn), rng)
    if kind is SqlKind.UPDATE:
        return gen_update_stmt(get_tables_with_columns(conn), rng)
    if kind is SqlKind.DELETE:
        return gen_delete_stmt(get_tables_with_columns(conn), rng)
    if kind is SqlKind.DROP_TRIGGER:
        tables = _tables(conn)
        return None if tables is None else gen_drop_trigger_stmt([t.name for t in tables], rng)
    if kind is SqlKind.VACUUM:
        return gen_vacuum_stmt()
    if kind is SqlKind.PRAGMA:
        return gen_pragma_stmt(rng)
    if kind is SqlKind.CREATE_TRIGGER:
        return gen_create_trigger_stmt(get_tables_with_columns(conn), rng)
    if kind is SqlKind.DATE_FUNC:
        return gen_datefunc_stmt(rng)
    raise ValueError(f"unknown statement kind: {kind!r}")


def generate_sql_by_prob(
    prob: StmtProb,
    rng: LcgRng,
    get_stmt: Callable[[SqlKind, LcgRng], str | None],
) -> str:
    """Draw a statement kind by weight and ask ``get_stmt`` for its SQL.

    Falls back to ``SELECT 1;`` when all weights are zero or nothing is generated.
    """
    weights = [(_PROFILE_KINDS[name], weight) for name, weight in prob.weights()]
    total = sum(weight for _, weight in weights)
    if total == 0:
        return FALLBACK_SQL

    r = rng.rand() % total
    accum = 0
    for kind, weight in weights:
        accum += weight
        if r < accum:
            stmt = get_stmt(kind, rng)
            return FALLBACK_SQL if stmt is None else stmt
    return FALLBACK_SQL