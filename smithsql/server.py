"""HTTP control server: edits the profile, starts executors and aggregates statistics."""

from __future__ import annotations

import json
import logging
import re
import sys
import threading
from pathlib import Path

from flask import Flask, Response, request

from .fork_server import fork_server_main
from .logger import configure_logging
from .profile import PROFILE_PATH, Profile, read_profile, write_profile
from .stats import AggregatedStats, ExecutionStats, empty_report

logger = logging.getLogger(__name__)

HOST = "127.0.0.1"
PORT = 8080

_STATS_KEY = "smithsql_stats"
_UNSIGNED = re.compile(r"\+?[0-9]+")
_U32_LIMIT = 1 << 32


class _StatsStore:
    """Aggregate of submitted statistics, guarded by a lock."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.aggregate: AggregatedStats | None = None


def _text(body: str, status: int = 200) -> Response:
    return Response(body, status=status, mimetype="text/plain")


def _json(data: object, status: int = 200) -> Response:
    return Response(json.dumps(data, indent=2), status=status, mimetype="application/json")


def _valid_executor_id(value: str) -> bool:
    return bool(_UNSIGNED.fullmatch(value)) and int(value) < _U32_LIMIT


def create_app(profile_path: str | Path = PROFILE_PATH) -> Flask:
    """Build the server application working on the profile at ``profile_path``.

    ``app.config["EXECUTOR_COMMAND"]`` may name the command that starts an executor.
    """
    profile_path = Path(profile_path)
    app = Flask(__name__)
    app.config["EXECUTOR_COMMAND"] = None
    store = _StatsStore()
    app.extensions[_STATS_KEY] = store

    @app.after_request
    def _cors(response: Response) -> Response:
        origin = request.headers.get("Origin")
        response.headers["Access-Control-Allow-Origin"] = origin or "*"
        if origin:
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Vary"] = "Origin"
        method = request.headers.get("Access-Control-Request-Method")
        if method:
            response.headers["Access-Control-Allow-Methods"] = method
        headers = request.headers.get("Access-Control-Request-Headers")
        if headers:
            response.headers["Access-Control-Allow-Headers"] = headers
        response.headers["Access-Control-Expose-Headers"] = "*"
        return response

    @app.get("/profile/get")
    def show_profile() -> Response:
        return _json(read_profile(profile_path).to_dict())

    @app.post("/profile/put")
    def put_profile() -> Response:
        data = request.get_json(force=True, silent=True)
        try:
            profile = Profile.from_dict(data)
        except ValueError as exc:
            return _text(f"Invalid profile: {exc}", 400)
        try:
            write_profile(profile, profile_path)
        except OSError as exc:
            return _text(f"Failed to save profile: {exc}", 500)
        return _text("Profile saved successfully")

    @app.get("/run")
    def run() -> Response:
        profile = read_profile(profile_path)
        profile.print()
        fork_server_main(profile, app.config.get("EXECUTOR_COMMAND"))
        return _text("Done!")

    @app.get("/internal/stat/collect")
    def collect() -> Response:
        with store.lock:
            report = empty_report() if store.aggregate is None else store.aggregate.to_report()
        return _json(report)

    @app.post("/internal/stat/submit")
    def submit() -> Response:
        data = request.get_json(force=True, silent=True)
        try:
            stats = ExecutionStats.from_dict(data)
        except ValueError as exc:
            return _text(f"Invalid statistics: {exc}", 400)
        logger.info("Received executor statistics from: %s", stats.executor_id)

        if not _valid_executor_id(stats.executor_id):
            return _text("executor_id must be a valid number", 400)

        with store.lock:
            if store.aggregate is None:
                store.aggregate = AggregatedStats.from_stats(stats)
            else:
                store.aggregate.merge(stats)
            summary = store.aggregate.summary()
        return _text(summary)

    return app


def main(argv: list[str] | None = None) -> int:
    """Serve on 127.0.0.1:8080; command-line arguments are accepted and ignored."""
    configure_logging()
    read_profile()
    app = create_app()
    app.run(host=HOST, port=PORT, threaded=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())