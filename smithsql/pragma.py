"""Generator for random PRAGMA statements."""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from .rng import LcgRng


class PragmaKind(Enum):
    """How a pragma's argument is produced."""

    NO_ARG = "no_arg"
    BOOL_ARG = "bool_arg"
    INT_ARG = "int_arg"
    STRING_ARG = "string_arg"


class _Pragma(NamedTuple):
    kind: PragmaKind
    name: str
    low: int = 0
    high: int = 0


_NO_ARG = (
    "integrity_check", "quick_check", "foreign_key_check", "database_list",
    "collation_list", "table_info", "index_list", "index_info", "stats",
    "page_count", "schema_version", "user_version", "encoding", "application_id",
    "auto_vacuum", "cache_size", "page_size", "wal_checkpoint", "journal_mode",
    "locking_mode", "synchronous", "temp_store", "secure_delete", "data_version",
    "freelist_count", "max_page_count", "read_uncommitted", "recursive_triggers",
    "reverse_unordered_selects", "shrink_memory", "soft_heap_limit", "threads",
    "trusted_schema", "writable_schema",
)

_BOOL_ARG = (
    "foreign_keys", "case_sensitive_like", "automatic_index", "cache_spill",
    "recursive_triggers", "journal_size_limit", "legacy_file_format",
    "writable_schema", "secure_delete", "read_uncommitted",
    "reverse_unordered_selects", "trusted_schema",
)

_INT_ARG = (
    ("cache_size", -10000, 10000),
    ("page_size", 512, 65536),
    ("mmap_size", 0, 104857600),
    ("wal_autocheckpoint", 1, 10000),
    ("max_page_count", 1, 1000000),
    ("soft_heap_limit", 0, 104857600),
    ("threads", 0, 8),
)

_STRING_CHOICES = {
    "journal_mode": ("DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"),
    "locking_mode": ("NORMAL", "EXCLUSIVE"),
    "synchronous": ("OFF", "NORMAL", "FULL", "EXTRA"),
    "temp_store": ("DEFAULT", "FILE", "MEMORY"),
    "encoding": ('"UTF-8"', '"UTF-16"', '"UTF-16le"', '"UTF-16be"'),
}

_PRAGMAS: tuple[_Pragma, ...] = (
    *(_Pragma(PragmaKind.NO_ARG, name) for name in _NO_ARG),
    *(_Pragma(PragmaKind.BOOL_ARG, name) for name in _BOOL_ARG),
    *(_Pragma(PragmaKind.INT_ARG, name, low, high) for name, low, high in _INT_ARG),
    *(_Pragma(PragmaKind.STRING_ARG, name) for name in _STRING_CHOICES),
)


def gen_pragma_stmt(rng: LcgRng) -> str:
    """A random PRAGMA, either a query or an assignment with a fitting value."""
    pragma = _PRAGMAS[rng.rand() % len(_PRAGMAS)]
    if pragma.kind is PragmaKind.NO_ARG:
        return f"PRAGMA {pragma.name};"
    if pragma.kind is PragmaKind.BOOL_ARG:
        value = "ON" if rng.rand() % 2 == 0 else "OFF"
    elif pragma.kind is PragmaKind.INT_ARG:
        value = str(pragma.low + rng.rand() % (pragma.high - pragma.low + 1))
    else:
        choices = _STRING_CHOICES.get(pragma.name)
        value = choices[rng.rand() % len(choices)] if choices else "ON"
    return f"PRAGMA {pragma.name} = {value};"