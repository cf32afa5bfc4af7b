import json
import sys

import pytest

from smithsql.profile import Profile, default_profile, read_profile
from smithsql.server import create_app
from smithsql.stats import NO_DATA_MESSAGE


@pytest.fixture
def profile_path(tmp_path):
    return tmp_path / "profile.json"


@pytest.fixture
def client(profile_path):
    app = create_app(profile_path)
    app.config["TESTING"] = True
    return app.test_client()


def _stats(executor_id="7", elapsed_ms=2000, success=6, failed_exp=2, failed_new=2, threads=5, counts=None):
    total = success + failed_exp + failed_new
    return {
        "elapsed_ms": elapsed_ms,
        "success_count": success,
        "failed_expected_count": failed_exp,
        "failed_new_count": failed_new,
        "total_queries": total,
        "thread_count": threads,
        "queries_per_second": 0.0,
        "error_rate": 0.0,
        "stmt_type_counts": counts if counts is not None else {"Select": 4, "Insert": 6},
        "executor_id": executor_id,
        "timestamp": "2024-01-01T00:00:00+00:00",
    }


def test_get_profile_creates_default(client, profile_path):
    response = client.get("/profile/get")
    assert response.status_code == 200
    assert response.mimetype == "application/json"
    assert Profile.from_dict(response.get_json()) == default_profile()
    assert profile_path.exists()


def test_put_profile_round_trip(client, profile_path):
    profile = default_profile()
    profile.count = 42
    profile.seed = 9
    response = client.post("/profile/put", json=profile.to_dict())
    assert response.status_code == 200
    assert response.get_data(as_text=True) == "Profile saved successfully"
    assert read_profile(profile_path) == profile
    assert Profile.from_dict(client.get("/profile/get").get_json()) == profile


def test_put_profile_rejects_bad_body(client, profile_path):
    response = client.post("/profile/put", json={"count": "many"})
    assert response.status_code == 400
    assert not profile_path.exists()


def test_collect_without_data(client):
    report = client.get("/internal/stat/collect").get_json()
    assert report["message"] == NO_DATA_MESSAGE
    assert report["executor_stats"]["total_executors"] == 0
    assert report["execution_results"]["stmt_type_counts"] == {}


def test_submit_then_collect(client):
    response = client.post("/internal/stat/submit", json=_stats())
    assert response.status_code == 200
    text = response.get_data(as_text=True)
    assert text.startswith("Statistics updated successfully!")
    assert "Executors: 1" in text

    report = client.get("/internal/stat/collect").get_json()
    assert "message" not in report
    results = report["execution_results"]
    assert results["total_queries"] == 10
    assert results["successful_queries"] == 6
    assert results["failed_new_queries"] == 2
    assert results["error_rate"] == pytest.approx(20.0)
    assert report["performance"]["queries_per_second"] == pytest.approx(5.0)
    assert report["executor_stats"]["completed_executors"] == 1


def test_submissions_are_aggregated(client):
    client.post("/internal/stat/submit", json=_stats(executor_id="1", elapsed_ms=1000, counts={"Select": 1}))
    client.post(
        "/internal/stat/submit",
        json=_stats(executor_id="2", elapsed_ms=3000, counts={"Select": 2, "Vacuum": 3}),
    )
    report = client.get("/internal/stat/collect").get_json()
    assert report["executor_stats"]["total_executors"] == 2
    assert report["performance"]["max_execution_time_ms"] == 3000
    assert report["performance"]["total_thread_count"] == 10
    assert report["execution_results"]["stmt_type_counts"] == {"Select": 3, "Vacuum": 3}


def test_submit_rejects_non_numeric_executor_id(client):
    response = client.post("/internal/stat/submit", json=_stats(executor_id="unknown"))
    assert response.status_code == 400
    assert response.get_data(as_text=True) == "executor_id must be a valid number"
    report = client.get("/internal/stat/collect").get_json()
    assert report["message"] == NO_DATA_MESSAGE


def test_submit_rejects_executor_id_beyond_u32(client):
    response = client.post("/internal/stat/submit", json=_stats(executor_id=str(1 << 32)))
    assert response.status_code == 400


def test_submit_rejects_missing_fields(client):
    data = _stats()
    del data["elapsed_ms"]
    response = client.post("/internal/stat/submit", data=json.dumps(data), content_type="application/json")
    assert response.status_code == 400


def test_cors_echoes_origin(client):
    response = client.get("/profile/get", headers={"Origin": "http://example.com"})
    assert response.headers["Access-Control-Allow-Origin"] == "http://example.com"
    assert response.headers["Access-Control-Allow-Credentials"] == "true"


def test_run_starts_executors(client, profile_path, tmp_path):
    profile = default_profile()
    profile.executor_count = 2
    client.post("/profile/put", json=profile.to_dict())
    marker_dir = tmp_path / "markers"
    marker_dir.mkdir()
    client.application.config["EXECUTOR_COMMAND"] = [
        sys.executable,
        "-c",
        "import os, sys, pathlib; s = os.environ['EXEC_PARAM_SEED']; pathlib.Path(sys.argv[1], s).write_text(s)",
        str(marker_dir),
    ]
    response = client.get("/run")
    assert response.status_code == 200
    assert response.get_data(as_text=True) == "Done!"
    assert len(list(marker_dir.iterdir())) == 2