"""Run profile: which driver to use, how much to run and what to generate."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

PROFILE_PATH = "profile.json"

_U64_LIMIT = 1 << 64


class DriverKind(Enum):
    """Database back end the executor talks to."""

    SQLITE_IN_MEM = "SQLITE_IN_MEM"
    LIMBO_IN_MEM = "LIMBO_IN_MEM"


def _uint(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an unsigned integer, got {value!r}")
    if not 0 <= value < _U64_LIMIT:
        raise ValueError(f"{name} out of range: {value}")
    return value


def _bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be a boolean, got {value!r}")
    return value


def _require(data: dict, key: str, what: str) -> Any:
    if key not in data:
        raise ValueError(f"missing field {key!r} in {what}")
    return data[key]


@dataclass
class StmtProb:
    """Relative weights of each statement kind."""

    delete: int
    select: int
    insert: int
    update: int
    vacuum: int
    pragma: int
    create_trigger: int
    drop_trigger: int
    date_func: int

    def weights(self) -> list[tuple[str, int]]:
        """(kind name, weight) pairs in the order statements are drawn."""
        return [
            ("SELECT", self.select),
            ("INSERT", self.insert),
            ("UPDATE", self.update),
            ("DELETE", self.delete),
            ("VACUUM", self.vacuum),
            ("PRAGMA", self.pragma),
            ("CREATE_TRIGGER", self.create_trigger),
            ("DROP_TRIGGER", self.drop_trigger),
            ("DATE_FUNC", self.date_func),
        ]

    def _to_dict(self) -> dict[str, int]:
        return {f.name.upper(): getattr(self, f.name) for f in fields(self)}

    @classmethod
    def _from_dict(cls, data: Any) -> StmtProb:
        if not isinstance(data, dict):
            raise ValueError("stmt_prob must be an object")
        return cls(
            **{
                f.name: _uint(_require(data, f.name.upper(), "stmt_prob"), f.name.upper())
                for f in fields(cls)
            }
        )


@dataclass
class DebugOptions:
    """Which executed statements are logged."""

    show_success_sql: bool
    show_failed_sql: bool

    def _to_dict(self) -> dict[str, bool]:
        return {
            "show_success_sql": self.show_success_sql,
            "show_failed_sql": self.show_failed_sql,
        }

    @classmethod
    def _from_dict(cls, data: Any) -> DebugOptions:
        if not isinstance(data, dict):
            raise ValueError("debug must be an object")
        return cls(
            show_success_sql=_bool(
                _require(data, "show_success_sql", "debug"), "show_success_sql"
            ),
            show_failed_sql=_bool(
                _require(data, "show_failed_sql", "debug"), "show_failed_sql"
            ),
        )


@dataclass
class Profile:
    """Settings for a fuzzing run; every field may be left unset."""

    driver: DriverKind | None = None
    count: int | None = None
    executor_count: int | None = None
    thread_per_exec: int | None = None
    stmt_prob: StmtProb | None = None
    debug: DebugOptions | None = None
    seed: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Profile:
        """Build a profile from parsed JSON; raise ValueError on bad content."""
        if not isinstance(data, dict):
            raise ValueError("profile must be an object")

        driver = data.get("driver")
        if driver is not None:
            if not isinstance(driver, str):
                raise ValueError(f"driver must be a string, got {driver!r}")
            try:
                driver = DriverKind[driver]
            except KeyError:
                raise ValueError(f"unknown driver {driver!r}") from None

        def opt_uint(key: str) -> int | None:
            value = data.get(key)
            return None if value is None else _uint(value, key)

        stmt_prob = data.get("stmt_prob")
        debug = data.get("debug")
        return cls(
            driver=driver,
            count=opt_uint("count"),
            executor_count=opt_uint("executor_count"),
            thread_per_exec=opt_uint("thread_per_exec"),
            stmt_prob=None if stmt_prob is None else StmtProb._from_dict(stmt_prob),
            debug=None if debug is None else DebugOptions._from_dict(debug),
            seed=opt_uint("seed"),
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation with every key present."""
        return {
            "driver": None if self.driver is None else self.driver.value,
            "count": self.count,
            "executor_count": self.executor_count,
            "thread_per_exec": self.thread_per_exec,
            "stmt_prob": None if self.stmt_prob is None else self.stmt_prob._to_dict(),
            "debug": None if self.debug is None else self.debug._to_dict(),
            "seed": self.seed,
        }

    def summary(self) -> str:
        """One-line description, filling unset sizes with their defaults."""
        driver = self.driver or DriverKind.SQLITE_IN_MEM
        items = [
            f"driver={driver.name}",
            f"count={8 if self.count is None else self.count}",
            f"executor_count={5 if self.executor_count is None else self.executor_count}",
            f"thread_per_exec={5 if self.thread_per_exec is None else self.thread_per_exec}",
        ]
        if self.seed is not None:
            items.append(f"seed={self.seed}")
        if self.stmt_prob is not None:
            prob = self.stmt_prob
            items += [
                f"SELECT={prob.select}",
                f"INSERT={prob.insert}",
                f"UPDATE={prob.update}",
                f"VACUUM={prob.vacuum}",
                f"DELETE={prob.delete}",
                f"PRAGMA={prob.pragma}",
                f"CREATE_TRIGGER={prob.create_trigger}",
                f"DROP_TRIGGER={prob.drop_trigger}",
                f"DATE_FUNC={prob.date_func}",
            ]
        if self.debug is not None:
            items.append(f"show_success_sql={str(self.debug.show_success_sql).lower()}")
            items.append(f"show_failed_sql={str(self.debug.show_failed_sql).lower()}")
        return ", ".join(items)

    def print(self) -> str:
        """Log the summary at INFO level and return the logged line."""
        line = f"Profile: {self.summary()}"
        logger.info("%s", line)
        return line


def default_profile() -> Profile:
    """The profile used when none can be read."""
    return Profile(
        driver=DriverKind.SQLITE_IN_MEM,
        count=8,
        executor_count=5,
        thread_per_exec=5,
        stmt_prob=StmtProb(
            select=100,
            insert=50,
            update=50,
            delete=20,
            vacuum=20,
            pragma=10,
            create_trigger=10,
            drop_trigger=10,
            date_func=20,
        ),
        debug=DebugOptions(show_success_sql=False, show_failed_sql=True),
        seed=0,
    )


def write_profile(profile: Profile, path: str | Path = PROFILE_PATH) -> None:
    """Write the profile as pretty-printed JSON; raise OSError on failure."""
    Path(path).write_text(json.dumps(profile.to_dict(), indent=2), encoding="utf-8")


def read_profile(path: str | Path = PROFILE_PATH) -> Profile:
    """Read the profile, or write and return the default when it is missing or invalid."""
    path = Path(path)
    try:
        return Profile.from_dict(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, UnicodeDecodeError, ValueError):
        pass

    profile = default_profile()
    try:
        write_profile(profile, path)
    except OSError as exc:
        print(f"Failed to write {path.name}: {exc}", file=sys.stderr)
    logger.info("default %s created", path.name)
    return profile