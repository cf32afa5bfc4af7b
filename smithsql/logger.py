"""Logging setup shared by the server and the executor."""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path

DEFAULT_LOG_FILE = "sqlsmith-rs.log"

_LEVEL_NAMES = {"WARNING": "WARN", "CRITICAL": "ERROR"}
_MARKER = "_smithsql_handler"


def _program_name() -> str:
    if sys.argv and sys.argv[0]:
        return Path(sys.argv[0]).name or "unknown"
    return "unknown"


class _Formatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        stamp = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created))
        level = _LEVEL_NAMES.get(record.levelname, record.levelname)
        target = record.name.rsplit(".", 1)[-1]
        return f"[{stamp}][{level}][{_program_name()}][{target}] {record.getMessage()}"


def configure_logging(log_file: str | Path = DEFAULT_LOG_FILE) -> logging.Logger:
    """Send INFO and above to stdout and append it to ``log_file``.

    Calling it again replaces the handlers installed by an earlier call.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _MARKER, False):
            root.removeHandler(handler)
            handler.close()

    formatter = _Formatter()
    handlers: list[logging.Handler] = [
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(log_file, mode="a", encoding="utf-8"),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _MARKER, True)
        root.addHandler(handler)
    root.setLevel(logging.INFO)

    logging.getLogger(__name__).info("Logging configured.")
    return root