"""Execution statistics reported by executors and aggregated by the server."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

_INT_FIELDS = (
    "elapsed_ms",
    "success_count",
    "failed_expected_count",
    "failed_new_count",
    "total_queries",
    "thread_count",
)
_FLOAT_FIELDS = ("queries_per_second", "error_rate")
_STR_FIELDS = ("executor_id", "timestamp")

NO_DATA_MESSAGE = "No executor statistics collected yet"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _rate(queries: int, elapsed_ms: int) -> float:
    return queries / (elapsed_ms / 1000.0) if elapsed_ms > 0 else 0.0


def _error_rate(failed_new: int, total: int) -> float:
    return failed_new / total * 100.0 if total > 0 else 0.0


def _elapsed_ms(elapsed: float | timedelta) -> int:
    if isinstance(elapsed, timedelta):
        return elapsed // timedelta(milliseconds=1)
    return int(elapsed * 1000)


def _field(data: dict, key: str) -> Any:
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    return data[key]


def _uint(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{key} must be an unsigned integer, got {value!r}")
    return value


def _float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number, got {value!r}")
    return float(value)


def _str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {value!r}")
    return value


def _counts(value: Any) -> dict[str, int]:
    if not isinstance(value, dict):
        raise ValueError("stmt_type_counts must be an object")
    return {_str(k, "stmt_type_counts key"): _uint(v, f"stmt_type_counts[{k!r}]") for k, v in value.items()}


@dataclass
class ExecutionStats:
    """Outcome of one executor run."""

    elapsed_ms: int
    success_count: int
    failed_expected_count: int
    failed_new_count: int
    total_queries: int
    thread_count: int
    queries_per_second: float
    error_rate: float
    stmt_type_counts: dict[str, int]
    executor_id: str
    timestamp: str

    @classmethod
    def create(
        cls,
        elapsed: float | timedelta,
        success_count: int,
        failed_expected_count: int,
        failed_new_count: int,
        thread_count: int,
        stmt_type_counts: dict[str, int],
        executor_id: str,
    ) -> ExecutionStats:
        """Derive totals and rates; ``elapsed`` is seconds or a timedelta."""
        total = success_count + failed_expected_count + failed_new_count
        elapsed_ms = _elapsed_ms(elapsed)
        return cls(
            elapsed_ms=elapsed_ms,
            success_count=success_count,
            failed_expected_count=failed_expected_count,
            failed_new_count=failed_new_count,
            total_queries=total,
            thread_count=thread_count,
            queries_per_second=_rate(total, elapsed_ms),
            error_rate=_error_rate(failed_new_count, total),
            stmt_type_counts=dict(stmt_type_counts),
            executor_id=executor_id,
            timestamp=_now(),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> ExecutionStats:
        """Build from parsed JSON; raise ValueError on missing or mistyped fields."""
        if not isinstance(data, dict):
            raise ValueError("statistics must be an object")
        values: dict[str, Any] = {}
        for key in _INT_FIELDS:
            values[key] = _uint(_field(data, key), key)
        for key in _FLOAT_FIELDS:
            values[key] = _float(_field(data, key), key)
        for key in _STR_FIELDS:
            values[key] = _str(_field(data, key), key)
        values["stmt_type_counts"] = _counts(_field(data, "stmt_type_counts"))
        return cls(**values)


@dataclass
class AggregatedStats:
    """Totals over every executor that has reported so far."""

    total_executors: int
    total_elapsed_ms: int
    total_success_count: int
    total_failed_expected_count: int
    total_failed_new_count: int
    total_queries: int
    total_thread_count: int
    combined_stmt_type_counts: dict[str, int] = field(default_factory=dict)
    last_updated: str = field(default_factory=_now)

    @classmethod
    def from_stats(cls, stats: ExecutionStats) -> AggregatedStats:
        return cls(
            total_executors=1,
            total_elapsed_ms=stats.elapsed_ms,
            total_success_count=stats.success_count,
            total_failed_expected_count=stats.failed_expected_count,
            total_failed_new_count=stats.failed_new_count,
            total_queries=stats.total_queries,
            total_thread_count=stats.thread_count,
            combined_stmt_type_counts=dict(stats.stmt_type_counts),
            last_updated=_now(),
        )

    def merge(self, stats: ExecutionStats) -> None:
        """Add one executor's report; elapsed time keeps the maximum."""
        self.total_executors += 1
        self.total_elapsed_ms = max(self.total_elapsed_ms, stats.elapsed_ms)
        self.total_success_count += stats.success_count
        self.total_failed_expected_count += stats.failed_expected_count
        self.total_failed_new_count += stats.failed_new_count
        self.total_queries += stats.total_queries
        self.total_thread_count += stats.thread_count
        for kind, count in stats.stmt_type_counts.items():
            self.combined_stmt_type_counts[kind] = self.combined_stmt_type_counts.get(kind, 0) + count
        self.last_updated = _now()

    def queries_per_second(self) -> float:
        return _rate(self.total_queries, self.total_elapsed_ms)

    def error_rate(self) -> float:
        return _error_rate(self.total_failed_new_count, self.total_queries)

    def summary(self) -> str:
        """Human-readable text returned to a submitting executor."""
        return (
            "Statistics updated successfully!\n\nAggregated Results:\n"
            f"Executors: {self.total_executors}\n"
            f"Total Queries: {self.total_queries}\n"
            f"Success: {self.total_success_count}\n"
            f"Failed (expected): {self.total_failed_expected_count}\n"
            f"Failed (new): {self.total_failed_new_count}\n"
            f"Total Threads: {self.total_thread_count}\n"
            f"Overall QPS: {self.queries_per_second():.2f}\n"
            f"Overall Error Rate: {self.error_rate():.2f}%\n"
            f"Max Execution Time: {self.total_elapsed_ms}ms\n"
            f"Last Updated: {self.last_updated}"
        )

    def to_report(self) -> dict[str, Any]:
        """JSON-ready report of the aggregate."""
        return {
            "timestamp": self.last_updated,
            "executor_stats": {
                "total_executors": self.total_executors,
                "active_executors": 0,
                "completed_executors": self.total_executors,
            },
            "execution_results": {
                "total_queries": self.total_queries,
                "successful_queries": self.total_success_count,
                "failed_expected_queries": self.total_failed_expected_count,
                "failed_new_queries": self.total_failed_new_count,
                "error_rate": self.error_rate(),
                "stmt_type_counts": dict(self.combined_stmt_type_counts),
            },
            "performance": {
                "max_execution_time_ms": self.total_elapsed_ms,
                "queries_per_second": self.queries_per_second(),
                "total_thread_count": self.total_thread_count,
            },
        }


def empty_report() -> dict[str, Any]:
    """The report given before any executor has submitted statistics."""
    return {
        "timestamp": _now(),
        "executor_stats": {
            "total_executors": 0,
            "active_executors": 0,
            "completed_executors": 0,
        },
        "execution_results": {
            "total_queries": 0,
            "successful_queries": 0,
            "failed_expected_queries": 0,
            "failed_new_queries": 0,
            "error_rate": 0.0,
            "stmt_type_counts": {},
        },
        "performance": {
            "max_execution_time_ms": 0,
            "queries_per_second": 0.0,
            "total_thread_count": 0,
        },
        "message": NO_DATA_MESSAGE,
    }