"""
Tests for structured logging setup.
"""

import json
import logging
import logging.handlers
import sys

import pytest

from cookiesec.logging_config import JSONFormatter, get_logger, setup_logging


@pytest.fixture
def restore_logger():
    root = logging.getLogger("cookiesec")
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(**extra):
    record = logging.LogRecord("cookiesec.analyzer", logging.INFO, __file__, 1, "Cookie report written", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "cookiesec.analyzer"
        assert data["message"] == "Cookie report written"
        assert "url" not in data

    def test_extra_fields(self):
        line = JSONFormatter().format(
            _record(url="https://example.com", cookie_count=3, attribute_source="heuristic", format="md")
        )
        data = json.loads(line)
        assert data["url"] == "https://example.com"
        assert data["cookie_count"] == 3
        assert data["attribute_source"] == "heuristic"
        assert data["format"] == "md"

    def test_exception_included(self):
        try:
            raise ValueError("bad jar")
        except ValueError:
            record = logging.LogRecord("cookiesec", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())
        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad jar" in data["exception"]


class TestSetupLogging:
    def test_writes_json_log_file(self, tmp_path, restore_logger):
        logger = setup_logging(log_dir=tmp_path / "logs")
        assert logger is restore_logger
        assert logger.level == logging.DEBUG

        get_logger("analyzer").info("hello", extra={"url": "https://example.com"})
        for handler in logger.handlers:
            handler.flush()

        lines = (tmp_path / "logs" / "cookiesec.log").read_text(encoding="utf-8").splitlines()
        entry = json.loads(lines[-1])
        assert entry["message"] == "hello"
        assert entry["url"] == "https://example.com"

    def test_file_handler_rotates(self, tmp_path, restore_logger):
        logger = setup_logging(log_dir=tmp_path)
        (handler,) = logger.handlers
        assert isinstance(handler, logging.handlers.RotatingFileHandler)
        assert handler.maxBytes == 5 * 1024 * 1024
        assert handler.backupCount == 3

    def test_verbose_adds_console(self, tmp_path, restore_logger):
        logger = setup_logging(verbose=True, log_dir=tmp_path)
        kinds = sorted(type(h).__name__ for h in logger.handlers)
        assert kinds == ["RotatingFileHandler", "StreamHandler"]

    def test_unusable_log_dir_falls_back_to_stderr(self, tmp_path, restore_logger):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")

        logger = setup_logging(log_dir=blocker / "logs")
        (handler,) = logger.handlers
        assert type(handler) is logging.StreamHandler
        assert logger.level == logging.WARNING

    def test_repeated_setup_does_not_stack_handlers(self, tmp_path, restore_logger):
        setup_logging(log_dir=tmp_path)
        logger = setup_logging(log_dir=tmp_path)
        assert len(logger.handlers) == 1
