"""Generators for CREATE TRIGGER and DROP TRIGGER statements."""

from __future__ import annotations

from collections.abc import Sequence

from .rng import LcgRng
from .schema import Table

_EVENTS = ("INSERT", "UPDATE", "DELETE")


def gen_create_trigger_stmt(tables: Sequence[Table], rng: LcgRng) -> str | None:
    """A CREATE TRIGGER on a random table that logs into ``trigger_log``.

    Returns None when there are no tables.
    """
    if not tables:
        return None
    table = tables[rng.rand() % len(tables)]
    timing = "BEFORE" if rng.rand() % 2 == 0 else "AFTER"
    event = _EVENTS[rng.rand() % len(_EVENTS)]

    body = (
        "BEGIN\n"
        "    -- Example trigger action\n"
        "    INSERT INTO trigger_log (operation, table_name) "
        f"VALUES ('{event}', '{table.name}');\n"
        "END"
    )
    return (
        f"CREATE TRIGGER IF NOT EXISTS trig_{table.name}_{timing.lower()}_{event.lower()}\n"
        f"{timing} {event} ON {table.name}\n"
        f"{body}"
    )


def gen_drop_trigger_stmt(table_names: Sequence[str], rng: LcgRng) -> str | None:
    """A DROP TRIGGER IF EXISTS for a trigger name derived from a random table."""
    if not table_names:
        return None
    table = table_names[rng.rand() % len(table_names)]
    trigger_name = f"trigger_{table}_{rng.rand() % 1000}"
    return f"DROP TRIGGER IF EXISTS {trigger_name};"