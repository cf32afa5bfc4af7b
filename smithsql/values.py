"""Random SQL literals for a declared column type."""

from __future__ import annotations

from .rng import LcgRng


def _float_literal(value: float) -> str:
    """Shortest round-trip text for ``value``, without a trailing ``.0``."""
    text = repr(value)
    return text[:-2] if text.endswith(".0") else text


def _blob_literal(rng: LcgRng) -> str:
    length = rng.rand() % 16 + 1
    data = bytes(rng.rand() % 256 for _ in range(length))
    return f"X'{data.hex()}'"


def _numeric_literal(rng: LcgRng) -> str:
    choice = rng.rand() % 3
    if choice == 0:
        return str(rng.rand() % 1000)
    if choice == 1:
        return _float_literal(rng.rand() / 100.0)
    year = 2000 + rng.rand() % 30
    month = 1 + rng.rand() % 12
    day = 1 + rng.rand() % 28
    return f"'{year}-{month:02}-{day:02}'"


def generate_value_by_type(ty: str, rng: LcgRng) -> str:
    """Return a SQL literal suited to the column type ``ty`` (case-insensitive).

    Unknown types give ``NULL``.
    """
    kind = ty.upper()
    if kind == "INTEGER":
        return str(rng.rand() % 1000)
    if kind == "REAL":
        return _float_literal(rng.rand() / 100.0)
    if kind == "TEXT":
        return f"'val{rng.rand() % 1000}'"
    if kind == "BLOB":
        return _blob_literal(rng)
    if kind == "NUMERIC":
        return _numeric_literal(rng)
    return "NULL"