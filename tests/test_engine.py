import json
import threading
import urllib.error
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from unittest import mock

import pytest

from smithsql.drivers import DriverError
from smithsql.engine import SqliteEngine, submit_stats, with_driver_kind
from smithsql.profile import DebugOptions, DriverKind, Profile, StmtProb, default_profile
from smithsql.stats import ExecutionStats

SCHEMA = """
CREATE TABLE warehouse (
    w_id INTEGER PRIMARY KEY, w_name TEXT, w_ytd REAL, w_tax REAL,
    w_street_1 TEXT, w_street_2 TEXT, w_city TEXT, w_state TEXT, w_zip TEXT
);
CREATE TABLE district (d_id INTEGER, d_w_id INTEGER, d_name TEXT, PRIMARY KEY (d_w_id, d_id));
CREATE TABLE trigger_log (operation TEXT, table_name TEXT);
"""


@pytest.fixture
def schema_path(tmp_path):
    path = tmp_path / "schema.sql"
    path.write_text(SCHEMA)
    return path


def _prob(**weights):
    base = dict(select=0, insert=0, update=0, delete=0, vacuum=0, pragma=0,
                create_trigger=0, drop_trigger=0, date_func=0)
    base.update(weights)
    return StmtProb(**base)


def _refused():
    return mock.patch("urllib.request.urlopen", side_effect=urllib.error.URLError("refused"))


def test_generate_sql_without_prob_is_fallback(schema_path):
    engine = SqliteEngine(1, 1, 1, None, None, schema_path)
    assert engine.generate_sql() == "SELECT 1;"


def test_generate_sql_single_kind(schema_path):
    engine = SqliteEngine(1, 1, 1, _prob(vacuum=1), None, schema_path)
    assert engine.generate_sql() == "VACUUM;"


def test_generate_sql_is_reproducible(schema_path):
    prob = default_profile().stmt_prob
    first = SqliteEngine(42, 1, 1, prob, None, schema_path)
    second = SqliteEngine(42, 1, 1, prob, None, schema_path)
    assert [first.generate_sql() for _ in range(10)] == [second.generate_sql() for _ in range(10)]


def test_run_counts_every_statement(schema_path, monkeypatch):
    monkeypatch.setenv("EXEC_PARAM_SEED", "12")
    engine = SqliteEngine(3, 4, 3, _prob(vacuum=1), DebugOptions(True, True), schema_path)
    with _refused() as urlopen:
        stats = engine.run()
    assert urlopen.call_count == 1
    assert stats.total_queries == engine.run_count * engine.thread_per_exec
    assert stats.success_count == stats.total_queries
    assert stats.thread_count == engine.thread_per_exec
    assert stats.stmt_type_counts == {"Vacuum": stats.total_queries}
    assert stats.executor_id == "12"


def test_run_outcomes_add_up(schema_path, monkeypatch):
    monkeypatch.delenv("EXEC_PARAM_SEED", raising=False)
    engine = SqliteEngine(7, 10, 2, default_profile().stmt_prob, None, schema_path)
    with _refused():
        stats = engine.run()
    assert stats.success_count + stats.failed_expected_count + stats.failed_new_count == 20
    assert sum(stats.stmt_type_counts.values()) <= stats.total_queries
    assert stats.executor_id == "unknown"


def test_run_without_prob_runs_fallback(schema_path):
    engine = SqliteEngine(0, 3, 2, None, None, schema_path)
    with _refused():
        stats = engine.run()
    assert stats.success_count == stats.total_queries == 6
    assert stats.stmt_type_counts == {}


def test_run_is_reproducible(schema_path):
    prob = default_profile().stmt_prob
    with _refused():
        first = SqliteEngine(99, 8, 2, prob, None, schema_path).run()
        second = SqliteEngine(99, 8, 2, prob, None, schema_path).run()
    assert first.stmt_type_counts == second.stmt_type_counts
    assert first.success_count == second.success_count


def test_missing_schema_raises(tmp_path):
    with pytest.raises(DriverError):
        SqliteEngine(0, 1, 1, None, None, tmp_path / "absent.sql")


def test_with_driver_kind_limbo_raises(schema_path):
    with pytest.raises(DriverError):
        with_driver_kind(0, DriverKind.LIMBO_IN_MEM, 1, Profile())


def test_with_driver_kind_sqlite_defaults(tmp_path, monkeypatch):
    assets = tmp_path / "assets" / "sqlite"
    assets.mkdir(parents=True)
    (assets / "tpcc-create-table.sql").write_text(SCHEMA)
    monkeypatch.chdir(tmp_path)
    profile = Profile(stmt_prob=_prob(select=1), seed=5)
    engine = with_driver_kind(5, DriverKind.SQLITE_IN_MEM, 3, profile)
    assert engine.thread_per_exec == 5
    assert engine.run_count == 3
    assert engine.rng.base_seed == 5
    assert engine.stmt_prob == profile.stmt_prob


@pytest.fixture
def stats_server():
    received = []
    statuses = [200]

    class Handler(BaseHTTPRequestHandler):
        def do_POST(self):
            length = int(self.headers["Content-Length"])
            received.append((self.path, json.loads(self.rfile.read(length))))
            self.send_response(statuses[0])
            self.send_header("Content-Length", "0")
            self.end_headers()

        def log_message(self, *args):
            pass

    server = HTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    url = f"http://127.0.0.1:{server.server_address[1]}/internal/stat/submit"
    yield url, received, statuses
    server.shutdown()
    server.server_close()


def test_submit_stats_posts_json(stats_server):
    url, received, _ = stats_server
    stats = ExecutionStats.create(1.0, 2, 0, 1, 1, {"Select": 3}, "4")
    submit_stats(stats, url)
    assert len(received) == 1
    path, body = received[0]
    assert path == "/internal/stat/submit"
    assert ExecutionStats.from_dict(body) == stats


def test_submit_stats_rejected_raises(stats_server):
    url, _, statuses = stats_server
    statuses[0] = 400
    stats = ExecutionStats.create(1.0, 1, 0, 0, 1, {}, "x")
    with pytest.raises(urllib.error.HTTPError) as info:
        submit_stats(stats, url)
    assert info.value.code == 400


def test_submit_stats_connection_failure():
    stats = ExecutionStats.create(1.0, 1, 0, 0, 1, {}, "1")
    with _refused(), pytest.raises(urllib.error.URLError):
        submit_stats(stats, "http://127.0.0.1:9/none")