import logging
import re

import pytest

from smithsql.logger import configure_logging

LINE = re.compile(r"^\[\d{4}-\d\d-\d\dT\d\d:\d\d:\d\dZ\]\[(\w+)\]\[[^\]]+\]\[([^\]]+)\] (.*)$")


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in saved_handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(saved_level)


def _lines(path):
    return path.read_text(encoding="utf-8").splitlines()


def test_line_format(tmp_path, restore_root):
    log_file = tmp_path / "run.log"
    configure_logging(log_file)
    logging.getLogger("a.b.c").info("hello")
    last = _lines(log_file)[-1]
    match = LINE.match(last)
    assert match is not None
    assert match.group(1) == "INFO"
    assert match.group(2) == "c"
    assert match.group(3) == "hello"


def test_startup_message_is_logged(tmp_path, restore_root):
    log_file = tmp_path / "run.log"
    configure_logging(log_file)
    first = LINE.match(_lines(log_file)[0])
    assert first.group(2) == "logger"


def test_warning_uses_short_level_name(tmp_path, restore_root):
    log_file = tmp_path / "run.log"
    configure_logging(log_file)
    logging.getLogger("x").warning("careful")
    assert LINE.match(_lines(log_file)[-1]).group(1) == "WARN"


def test_debug_is_filtered(tmp_path, restore_root):
    log_file = tmp_path / "run.log"
    configure_logging(log_file)
    logging.getLogger("x").debug("quiet")
    assert all("quiet" not in line for line in _lines(log_file))


def test_appends_to_existing_file(tmp_path, restore_root):
    log_file = tmp_path / "run.log"
    log_file.write_text("earlier\n", encoding="utf-8")
    configure_logging(log_file)
    assert _lines(log_file)[0] == "earlier"
    assert len(_lines(log_file)) > 1


def test_reconfiguring_does_not_duplicate(tmp_path, restore_root):
    log_file = tmp_path / "run.log"
    configure_logging(log_file)
    configure_logging(log_file)
    logging.getLogger("dup").info("once")
    assert sum(1 for line in _lines(log_file) if line.endswith(" once")) == 1