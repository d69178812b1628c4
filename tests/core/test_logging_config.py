"""Tests for taskweave.core.logging_config module."""

import json
import logging
import sys

import pytest

from taskweave.core import logging_config
from taskweave.core.logging_config import (
    LOGGER_NAME,
    JsonFormatter,
    configure_logging,
    set_level,
)


@pytest.fixture
def clean_logger(monkeypatch):
    """Restore the taskweave logger after each test."""
    logger = logging.getLogger(LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    monkeypatch.setattr(logging_config, "_configured", False)
    for key in ("TASKWEAVE_LOG_LEVEL", "TASKWEAVE_LOG_FORMAT", "TASKWEAVE_LOG_FILE"):
        monkeypatch.delenv(key, raising=False)

    yield logger

    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_defaults(self, clean_logger):
        """Test INFO level and one stderr handler by default."""
        configure_logging()

        assert clean_logger.level == logging.INFO
        assert len(clean_logger.handlers) == 1
        assert not isinstance(clean_logger.handlers[0].formatter, JsonFormatter)

    def test_root_logger_untouched(self, clean_logger):
        """Test only the package logger gains handlers."""
        root_handlers = list(logging.getLogger().handlers)

        configure_logging(level="DEBUG")

        assert logging.getLogger().handlers == root_handlers

    def test_second_call_ignored(self, clean_logger):
        """Test repeat calls are no-ops unless forced."""
        configure_logging(level="DEBUG")
        configure_logging(level="ERROR")
        assert clean_logger.level == logging.DEBUG

        configure_logging(level="ERROR", force=True)
        assert clean_logger.level == logging.ERROR
        assert len(clean_logger.handlers) == 1

    def test_environment(self, clean_logger, monkeypatch):
        """Test environment variables supply defaults."""
        monkeypatch.setenv("TASKWEAVE_LOG_LEVEL", "warning")
        monkeypatch.setenv("TASKWEAVE_LOG_FORMAT", "json")

        configure_logging()

        assert clean_logger.level == logging.WARNING
        assert isinstance(clean_logger.handlers[0].formatter, JsonFormatter)

    def test_file_handler(self, clean_logger, tmp_path):
        """Test a log file gets its own handler."""
        path = tmp_path / "taskweave.log"

        configure_logging(file_path=str(path))
        logging.getLogger("taskweave.test").info("written")
        for handler in clean_logger.handlers:
            handler.flush()

        assert len(clean_logger.handlers) == 2
        assert "written" in path.read_text()

    def test_bad_format(self, clean_logger):
        """Test unknown formats raise."""
        with pytest.raises(ValueError, match="Unknown log format"):
            configure_logging(format="xml")

    def test_bad_level(self, clean_logger):
        """Test unknown levels raise."""
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging(level="LOUD")


class TestSetLevel:
    """Tests for set_level()."""

    def test_package_logger_by_default(self, clean_logger):
        """Test set_level targets the taskweave logger."""
        set_level("debug")
        assert clean_logger.level == logging.DEBUG

    def test_named_logger(self, clean_logger):
        """Test set_level on a child logger."""
        child = logging.getLogger("taskweave.core.dag.executor")
        original = child.level
        try:
            set_level("ERROR", "taskweave.core.dag.executor")
            assert child.level == logging.ERROR
        finally:
            child.setLevel(original)


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_run_id_lifted(self):
        """Test the run-id prefix becomes its own field."""
        record = logging.LogRecord(
            name="taskweave.core.dag.executor",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="[%s] run_complete: tasks=%d",
            args=("run_20260105_143000_x7k", 3),
            exc_info=None,
        )

        data = json.loads(JsonFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "taskweave.core.dag.executor"
        assert data["run_id"] == "run_20260105_143000_x7k"
        assert data["message"] == "run_complete: tasks=3"
        assert "extra" not in data

    def test_plain_message_and_extras(self):
        """Test messages without a run ID pass through with their extras."""
        record = logging.LogRecord(
            name="taskweave",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg="plain [bracketed] text",
            args=(),
            exc_info=None,
        )
        record.attempt = 2

        data = json.loads(JsonFormatter().format(record))

        assert "run_id" not in data
        assert data["message"] == "plain [bracketed] text"
        assert data["extra"] == {"attempt": 2}

    def test_exception(self):
        """Test exception text is included."""
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            exc_info = sys.exc_info()

        record = logging.LogRecord(
            name="taskweave",
            level=logging.ERROR,
            pathname=__file__,
            lineno=1,
            msg="failed",
            args=(),
            exc_info=exc_info,
        )

        data = json.loads(JsonFormatter().format(record))

        assert "RuntimeError: boom" in data["exception"]
