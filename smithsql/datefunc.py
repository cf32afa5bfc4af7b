"""Generator for SELECT statements that call SQLite date and time functions."""

from __future__ import annotations

from .rng import LcgRng

FUNCTIONS = ("date", "time", "datetime", "julianday", "strftime")

MODIFIERS = (
    "start of month",
    "start of year",
    "start of day",
    "+1 day",
    "+1 month",
    "+1 year",
    "-1 day",
    "-1 month",
    "-1 year",
    "localtime",
    "utc",
)

_STRFTIME_FORMATS = ("'%Y-%m-%d %H:%M:%S'", "'%H:%M:%S'", "'%Y-%m-%d'")


def _base_date(rng: LcgRng) -> str:
    year = 2000 + rng.rand() % 30
    month = 1 + rng.rand() % 12
    day = 1 + rng.rand() % 28
    hour = rng.rand() % 24
    minute = rng.rand() % 60
    second = rng.rand() % 60
    if rng.rand() % 2 == 0:
        return f"'{year:04}-{month:02}-{day:02}'"
    return f"'{year:04}-{month:02}-{day:02} {hour:02}:{minute:02}:{second:02}'"


def _modifiers(rng: LcgRng) -> list[str]:
    chosen: list[str] = []
    for _ in range(rng.rand() % 3):
        modifier = MODIFIERS[rng.rand() % len(MODIFIERS)]
        if modifier not in chosen:
            chosen.append(modifier)
    if rng.rand() % 4 == 0:
        chosen.append(f"weekday {rng.rand() % 7}")
    return chosen


def gen_datefunc_stmt(rng: LcgRng) -> str:
    """A ``SELECT func(...)`` using a static date, optional modifiers and, for strftime, a format."""
    func = FUNCTIONS[rng.rand() % len(FUNCTIONS)]
    base = _base_date(rng)
    modifiers = _modifiers(rng)
    tail = "".join(f", '{m}'" for m in modifiers)

    if func == "strftime":
        fmt = _STRFTIME_FORMATS[rng.rand() % 3]
        return f"SELECT {func}({fmt}, {base}{tail});"
    return f"SELECT {func}({base}{tail});"