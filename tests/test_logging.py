"""Tests for logging setup."""

import logging

import pytest

from prd_reader.utils.logging import setup_logging, verbosity_to_level


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    for name in ("httpx", "httpcore", "notion_client"):
        logging.getLogger(name).setLevel(logging.NOTSET)


@pytest.mark.parametrize(
    "verbosity,level",
    [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (3, logging.DEBUG)],
)
def test_verbosity_to_level(verbosity, level):
    assert verbosity_to_level(verbosity) == level


def test_console_only_by_default():
    setup_logging(verbosity=1)

    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert handlers[0].level == logging.INFO


def test_file_handler_captures_debug(tmp_path):
    log_file = tmp_path / "logs" / "run.log"

    setup_logging(verbosity=0, log_file=str(log_file))
    logging.getLogger("prd_reader.test").debug("detail message")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert log_file.exists()
    assert "detail message" in log_file.read_text(encoding="utf-8")


def test_sdk_loggers_quiet_below_max_verbosity():
    setup_logging(verbosity=2)
    assert logging.getLogger("httpx").level == logging.WARNING

    setup_logging(verbosity=3)
    assert logging.getLogger("httpx").level == logging.DEBUG
