"""Centralized logging configuration for taskweave.

The library itself only ever calls ``logging.getLogger(__name__)``.
Applications that want taskweave's log output formatted consistently
call :func:`configure_logging` once at startup.

Usage:
    from taskweave.core.logging_config import configure_logging

    # Configure once at application startup
    configure_logging(level="DEBUG", format="json")

Environment Variables:
    TASKWEAVE_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    TASKWEAVE_LOG_FORMAT: Output format ("text" or "json")
    TASKWEAVE_LOG_FILE: Optional log file path
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from datetime import datetime
from typing import Any, Literal

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
TEXT_FORMAT_WITH_MS = "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOGGER_NAME = "taskweave"

_RUN_PREFIX = re.compile(r"\[(run_[^\]]+)\] ")

_configured = False

# Attributes every LogRecord carries; anything else came in via ``extra=``
_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with the run ID lifted out of the message.

    Executor log lines start with ``[run_...]``; that prefix becomes a
    ``run_id`` field so runs can be filtered without parsing messages:

        {"time": "2026-01-05T14:30:00.123456", "level": "DEBUG",
         "logger": "taskweave.core.dag.executor", "run_id": "run_20260105_143000_x7k",
         "message": "task_start: task=fetch"}
    """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        entry: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }

        match = _RUN_PREFIX.match(message)
        if match:
            entry["run_id"] = match.group(1)
            message = message[match.end() :]
        entry["message"] = message

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and key not in entry:
                entry.setdefault("extra", {})[key] = value

        return json.dumps(entry, default=str)


def configure_logging(
    level: str | None = None,
    format: Literal["text", "json"] | None = None,
    file_path: str | None = None,
    include_ms: bool = True,
    force: bool = False,
) -> None:
    """Configure the ``taskweave`` logger hierarchy.

    Subsequent calls are ignored unless force=True. Only the
    ``taskweave`` logger is touched, never the root logger, so embedding
    applications keep their own handlers.

    Args:
        level: Log level. Defaults to TASKWEAVE_LOG_LEVEL or "INFO".
        format: Output format. Defaults to TASKWEAVE_LOG_FORMAT or "text".
        file_path: Optional file path. Defaults to TASKWEAVE_LOG_FILE.
        include_ms: Include milliseconds in timestamp.
        force: Force reconfiguration even if already configured.

    Raises:
        ValueError: If the level or format is not recognised.
    """
    global _configured
    if _configured and not force:
        return

    level = level or os.environ.get("TASKWEAVE_LOG_LEVEL", "INFO")
    format = format or os.environ.get("TASKWEAVE_LOG_FORMAT", "text")  # type: ignore[assignment]
    file_path = file_path or os.environ.get("TASKWEAVE_LOG_FILE")

    formatter = _make_formatter(format, include_ms)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_parse_level(level))

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if file_path:
        handlers.append(logging.FileHandler(file_path))

    for handler in handlers:
        handler.setFormatter(formatter)
    logger.handlers[:] = handlers

    _configured = True


def set_level(level: str, logger_name: str | None = LOGGER_NAME) -> None:
    """Set log level for a specific logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        logger_name: Logger name. Defaults to the ``taskweave`` logger.
    """
    logging.getLogger(logger_name).setLevel(_parse_level(level))


def _make_formatter(format: str, include_ms: bool) -> logging.Formatter:
    if format == "json":
        return JsonFormatter()
    if format == "text":
        return logging.Formatter(TEXT_FORMAT_WITH_MS if include_ms else TEXT_FORMAT, DATE_FORMAT)
    raise ValueError(f"Unknown log format '{format}', expected 'text' or 'json'")


def _parse_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level '{level}'")
    return value
