"""Generators for SELECT, INSERT, UPDATE, DELETE and VACUUM statements."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from .rng import LcgRng
from .schema import Table
from .values import generate_value_by_type

_T = TypeVar("_T")


def _pick(items: Sequence[_T], rng: LcgRng) -> _T:
    return items[rng.rand() % len(items)]


def _random_subset(items: Sequence[_T], rng: LcgRng) -> list[_T]:
    """Choose a count, shuffle a copy (Fisher-Yates) and keep that many items."""
    count = rng.rand() % len(items) + 1
    shuffled = list(items)
    for i in reversed(range(1, len(shuffled))):
        j = rng.rand() % (i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled[:count]


def _coin(rng: LcgRng) -> bool:
    return rng.rand() % 2 == 0


def gen_select_stmt(tables: Sequence[Table], rng: LcgRng) -> str | None:
    """A random single-table SELECT, or None if there is nothing to select from."""
    if not tables:
        return None
    table = _pick(tables, rng)
    columns = table.column_names()
    if not columns:
        return None

    selected = _random_subset(columns, rng)
    distinct = "DISTINCT " if _coin(rng) else ""

    where_clause = ""
    if _coin(rng):
        column = _pick(columns, rng)
        where_clause = f"WHERE {column} = {rng.rand() % 100}"

    group_by_clause = ""
    if _coin(rng):
        group_by_clause = f"GROUP BY {_pick(columns, rng)}"

    order_by_clause = ""
    if _coin(rng):
        column = _pick(columns, rng)
        order = "ASC" if _coin(rng) else "DESC"
        order_by_clause = f"ORDER BY {column} {order}"

    limit_clause = f"LIMIT {rng.rand() % 100}" if _coin(rng) else ""

    return (
        f"SELECT {distinct}{', '.join(selected)} FROM {table.name} "
        f"{where_clause} {group_by_clause} {order_by_clause} {limit_clause};"
    )


def gen_insert_stmt(tables: Sequence[Table], rng: LcgRng) -> str | None:
    """A random INSERT: DEFAULT VALUES, explicit VALUES, or INSERT ... SELECT."""
    if not tables:
        return None
    table = _pick(tables, rng)
    columns = table.columns
    if not columns:
        return None

    insert_type = rng.rand() % 3
    if insert_type == 0:
        return f"INSERT INTO {table.name} DEFAULT VALUES;"

    if insert_type == 1:
        selected = _random_subset(columns, rng)
        names = ", ".join(name for name, _ in selected)
        values = ", ".join(generate_value_by_type(ty, rng) for _, ty in selected)
        return f"INSERT INTO {table.name} ({names}) VALUES ({values});"

    if len(tables) > 1:
        other = _pick(tables, rng)
        if other.name != table.name and other.columns:
            selected = _random_subset(columns, rng)
            names = ", ".join(name for name, _ in selected)
            other_names = ", ".join(name for name, _ in other.columns[: len(selected)])
            return (
                f"INSERT INTO {table.name} ({names}) "
                f"SELECT {other_names} FROM {other.name};"
            )
    return None


def gen_update_stmt(tables: Sequence[Table], rng: LcgRng) -> str | None:
    """A random UPDATE with optional WHERE, LIMIT and FROM clauses."""
    if not tables:
        return None
    table = _pick(tables, rng)
    columns = table.columns
    if not columns:
        return None

    selected = _random_subset(columns, rng)
    set_clause = ", ".join(
        f"{name} = {generate_value_by_type(ty, rng)}" for name, ty in selected
    )

    where_clause = ""
    if _coin(rng):
        name, ty = _pick(columns, rng)
        where_clause = f"WHERE {name} = {generate_value_by_type(ty, rng)}"

    limit_clause = f"LIMIT {rng.rand() % 100}" if _coin(rng) else ""

    from_clause = ""
    if _coin(rng) and len(tables) > 1:
        other = _pick(tables, rng)
        if other.name != table.name:
            from_clause = f"FROM {other.name}"

    return f"UPDATE {table.name} {from_clause} SET {set_clause} {where_clause} {limit_clause};"


def _delete_value(rng: LcgRng) -> str:
    choice = rng.rand() % 4
    if choice == 0:
        return str(rng.rand() % 1000)
    if choice == 1:
        return f"'val{rng.rand() % 1000}'"
    if choice == 2:
        return "NULL"
    return "1"


def gen_delete_stmt(tables: Sequence[Table], rng: LcgRng) -> str | None:
    """A random DELETE with optional WHERE, LIMIT and RETURNING clauses."""
    if not tables:
        return None
    table = _pick(tables, rng)
    columns = table.columns
    if not columns:
        return None

    where_part = ""
    if _coin(rng):
        first_column = columns[0][0]
        where_part = f"WHERE {first_column} = {_delete_value(rng)}"

    limit_clause = f"LIMIT {rng.rand() % 100}" if _coin(rng) else ""

    returning_clause = ""
    if _coin(rng):
        selected = _random_subset(columns, rng)
        returning_clause = "RETURNING " + ", ".join(name for name, _ in selected)

    return f"DELETE FROM {table.name} {where_part} {limit_clause} {returning_clause};"


def gen_vacuum_stmt() -> str:
    return "VACUUM;"