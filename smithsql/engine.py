"""Engine that runs generated statements against fresh SQLite databases in threads."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import time
import urllib.error
import urllib.request
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from .drivers import DEFAULT_SCHEMA_PATH, DriverError, new_conn
from .generator import FALLBACK_SQL, SqlKind, generate_sql_by_prob, get_stmt_by_seed
from .profile import DebugOptions, DriverKind, Profile, StmtProb
from .rng import LcgRng
from .stats import ExecutionStats

logger = logging.getLogger(__name__)

STATS_URL = "http://127.0.0.1:8080/internal/stat/submit"
SEED_ENV = "EXEC_PARAM_SEED"

_MASK64 = (1 << 64) - 1


@dataclass
class _Tally:
    success: int = 0
    failed_expected: int = 0
    failed_new: int = 0
    stmt_type_counts: Counter = field(default_factory=Counter)


class SqliteEngine:
    """Generates statements from weighted kinds and executes them on SQLite."""

    def __init__(
        self,
        seed: int,
        run_count: int,
        thread_per_exec: int,
        stmt_prob: StmtProb | None = None,
        debug: DebugOptions | None = None,
        schema_path: str | Path = DEFAULT_SCHEMA_PATH,
    ) -> None:
        self.rng = LcgRng(seed)
        self.run_count = run_count
        self.thread_per_exec = thread_per_exec
        self.stmt_prob = stmt_prob
        self.debug = debug
        self.schema_path = Path(schema_path)
        self.driver = new_conn(DriverKind.SQLITE_IN_MEM, self.schema_path)

    def generate_sql(self) -> str:
        """Generate one statement against this engine's own database."""
        if self.stmt_prob is None:
            return FALLBACK_SQL
        conn = self.driver.connection
        return generate_sql_by_prob(
            self.stmt_prob, self.rng, lambda kind, rng: get_stmt_by_seed(conn, rng, kind)
        )

    def _worker(self, seed: int) -> _Tally:
        tally = _Tally()
        show_success = self.debug is not None and self.debug.show_success_sql
        show_failed = self.debug is not None and self.debug.show_failed_sql
        with new_conn(DriverKind.SQLITE_IN_MEM, self.schema_path) as driver:
            rng = LcgRng(seed)
            conn = driver.connection

            def get_stmt(kind: SqlKind, rng: LcgRng) -> str | None:
                tally.stmt_type_counts[kind.value] += 1
                return get_stmt_by_seed(conn, rng, kind)

            for _ in range(self.run_count):
                if self.stmt_prob is None:
                    sql = FALLBACK_SQL
                else:
                    sql = generate_sql_by_prob(self.stmt_prob, rng, get_stmt)
                try:
                    affected = driver.exec(sql)
                except sqlite3.IntegrityError:
                    tally.failed_expected += 1
                except (sqlite3.Error, sqlite3.Warning, DriverError) as exc:
                    tally.failed_new += 1
                    if show_failed:
                        logger.info("Error executing SQL: %s with ret: [%s]", sql, exc)
                else:
                    tally.success += 1
                    if show_success:
                        logger.info("SQL executed successfully: %s (affected: %d)", sql, affected)
        return tally

    def run(self) -> ExecutionStats:
        """Run ``run_count`` statements in each of ``thread_per_exec`` threads.

        Each thread gets its own database and a seed offset by its index.
        The statistics are submitted to the server and returned.
        """
        base_seed = self.rng.base_seed
        seeds = [(base_seed + n) & _MASK64 for n in range(self.thread_per_exec)]

        start = time.perf_counter()
        with ThreadPoolExecutor(max_workers=max(self.thread_per_exec, 1)) as pool:
            tallies = list(pool.map(self._worker, seeds))
        elapsed = time.perf_counter() - start

        success = sum(t.success for t in tallies)
        failed_expected = sum(t.failed_expected for t in tallies)
        failed_new = sum(t.failed_new for t in tallies)
        stmt_counts = dict(sum((t.stmt_type_counts for t in tallies), Counter()))

        logger.info(
            "finish exec in %.2fs, success/failed_exp/failed_new: %d/%d/%d",
            elapsed,
            success,
            failed_expected,
            failed_new,
        )
        logger.info("Statement type statistics: %s", stmt_counts)

        stats = ExecutionStats.create(
            elapsed,
            success,
            failed_expected,
            failed_new,
            self.thread_per_exec,
            stmt_counts,
            os.environ.get(SEED_ENV, "unknown"),
        )
        try:
            submit_stats(stats)
        except OSError as exc:
            logger.warning("Failed to submit statistics: %s", exc)
        return stats


def with_driver_kind(seed: int, kind: DriverKind, run_count: int, profile: Profile) -> SqliteEngine:
    """Create the engine for ``kind`` configured from ``profile``."""
    thread_per_exec = 5 if profile.thread_per_exec is None else profile.thread_per_exec
    if kind is DriverKind.SQLITE_IN_MEM:
        return SqliteEngine(
            seed,
            run_count,
            thread_per_exec,
            profile.stmt_prob,
            profile.debug,
            DEFAULT_SCHEMA_PATH,
        )
    if kind is DriverKind.LIMBO_IN_MEM:
        raise DriverError("LIMBO driver is not implemented")
    raise DriverError(f"unknown driver kind: {kind!r}")


def submit_stats(stats: ExecutionStats, url: str = STATS_URL) -> None:
    """POST the statistics as JSON; raise ``urllib.error.URLError`` on failure."""
    request = urllib.request.Request(
        url,
        data=json.dumps(stats.to_dict()).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with urllib.request.urlopen(request, timeout=30) as response:
            status = response.status
            headers = response.headers
    except urllib.error.HTTPError as exc:
        logger.warning("Failed to submit statistics: HTTP %s", exc.code)
        raise
    except OSError as exc:
        logger.warning("Failed to submit statistics to server: %s", exc)
        raise
    if not 200 <= status < 300:
        logger.warning("Failed to submit statistics: HTTP %s", status)
        raise urllib.error.HTTPError(url, status, f"HTTP {status}", headers, None)
    logger.info("Statistics submitted successfully for executor: %s", stats.executor_id)