"""Tests for shared logging configuration."""

import logging

import pytest

from civic_data.logging_config import DEFAULT_LOG_FILE, configure_logging


@pytest.fixture
def bare_root(monkeypatch):
    """Root logger with no handlers; restored after the test."""
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)
    yield root
    for handler in root.handlers:
        handler.close()


def test_default_log_file():
    assert DEFAULT_LOG_FILE == "logs/pipeline.log"


def test_writes_to_log_file(bare_root, tmp_path):
    log_file = tmp_path / "logs" / "pipeline.log"

    configure_logging(logging.INFO, log_file=str(log_file))
    logging.getLogger("civic_data.test").info("population: 7975000")
    for handler in bare_root.handlers:
        handler.flush()

    assert log_file.exists()
    assert "population: 7975000" in log_file.read_text()


def test_repeat_calls_are_noops(bare_root, tmp_path):
    configure_logging(log_file=str(tmp_path / "a.log"))
    count = len(bare_root.handlers)

    configure_logging(log_file=str(tmp_path / "b.log"))

    assert len(bare_root.handlers) == count
    assert not (tmp_path / "b.log").exists()


def test_console_only(bare_root):
    configure_logging(logging.DEBUG, log_file=None)

    assert len(bare_root.handlers) == 1
    assert bare_root.level == logging.DEBUG
