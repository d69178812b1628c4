"""Run-scoped log lines for executor invocations.

Every invocation gets a run ID so interleaved log lines from concurrent
invocations can be told apart.

Log Format:
    [<run_id>] action: key=value, key=value (duration)

Examples:
    [run_20260105_143022_x7k] run_start: tasks=4, roots=['user']
    [run_20260105_143022_x7k] task_start: task=posts, depends_on=['user']
    [run_20260105_143022_x7k] task_complete: task=posts (0.2s)
    [run_20260105_143022_x7k] run_complete: tasks=4 (0.5s)
"""

from __future__ import annotations

import logging
import random
import string
import time
from typing import Any


def generate_run_id() -> str:
    """Generate a unique run ID.

    Format: run_YYYYMMDD_HHMMSS_xxx (3-char random suffix).

    Returns:
        Run ID string like "run_20260105_143022_x7k"
    """
    timestamp = time.strftime("%Y%m%d_%H%M%S")
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=3))
    return f"run_{timestamp}_{suffix}"


def truncate(value: Any, max_length: int = 100) -> str:
    """Truncate a value for logging.

    Args:
        value: Value to truncate.
        max_length: Maximum length before truncation.

    Returns:
        Truncated string with length indicator if truncated.
    """
    s = str(value)
    if len(s) <= max_length:
        return s
    return f"{s[:max_length]}... ({len(s)} chars)"


def _format(identifier: str, action: str, kwargs: dict[str, Any]) -> str:
    kv_pairs = ", ".join(f"{k}={truncate(v)}" for k, v in kwargs.items())
    return f"[{identifier}] {action}: {kv_pairs}" if kv_pairs else f"[{identifier}] {action}"


def log_start(logger: logging.Logger, identifier: str, action: str, **kwargs: Any) -> None:
    """Log a start event at DEBUG."""
    logger.debug(_format(identifier, action, kwargs))


def log_complete(
    logger: logging.Logger,
    identifier: str,
    action: str,
    duration_s: float,
    level: int = logging.DEBUG,
    **kwargs: Any,
) -> None:
    """Log a completion event with its duration.

    Args:
        logger: Logger to use.
        identifier: Run ID.
        action: Action name (e.g., "task_complete", "run_complete").
        duration_s: Duration in seconds.
        level: Log level, DEBUG unless the event summarises a whole run.
        **kwargs: Additional key=value pairs to log.
    """
    logger.log(level, f"{_format(identifier, action, kwargs)} ({duration_s:.1f}s)")


def log_error(
    logger: logging.Logger,
    identifier: str,
    action: str,
    error: str | BaseException,
    **kwargs: Any,
) -> None:
    """Log an error event.

    Exceptions are rendered as ``Type: message`` so empty messages stay
    readable.
    """
    if isinstance(error, BaseException):
        error = f"{type(error).__name__}: {error}"
    kwargs["error"] = truncate(error, max_length=200)
    logger.error(_format(identifier, action, kwargs))


def log_warning(logger: logging.Logger, identifier: str, action: str, **kwargs: Any) -> None:
    """Log a warning event."""
    logger.warning(_format(identifier, action, kwargs))
