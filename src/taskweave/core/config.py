"""Executor configuration.

ExecutorConfig groups the knobs that change scheduling behaviour.
Defaults reproduce plain fail-fast execution: unbounded concurrency,
siblings left running after a failure, unknown dependency names rejected.
Whenever no config is passed, the executor reads these from the
environment through ExecutorConfig.from_env(); an explicit config wins.

Environment Variables:
    TASKWEAVE_CANCEL_SIBLINGS: "1"/"true"/"yes" to cancel in-flight tasks
        when one task fails.
    TASKWEAVE_STRICT_DEPENDENCIES: "0"/"false"/"no" to tolerate dependency
        names that match no registered task.
    TASKWEAVE_MAX_CONCURRENCY: Positive integer bound on running tasks.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class ExecutorConfig:
    """Scheduling configuration for one executor invocation.

    Attributes:
        cancel_siblings_on_failure: Cancel every in-flight task and start
            nothing new once any task fails. The failing task's error is
            still the one raised.
        strict_dependencies: Reject dependency names that match no
            registered task before any task starts. When False the edge is
            dropped and the task receives None for that name.
        max_concurrency: Maximum number of task bodies running at once.
            None means unbounded.
    """

    cancel_siblings_on_failure: bool = False
    strict_dependencies: bool = True
    max_concurrency: int | None = None

    def __post_init__(self) -> None:
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ValueError(
                f"max_concurrency must be a positive integer or None, got {self.max_concurrency}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ExecutorConfig:
        """Build a config from TASKWEAVE_* environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            Config with defaults for every unset variable.

        Raises:
            ValueError: If a variable holds an unparseable value.
        """
        env = os.environ if environ is None else environ

        max_concurrency: int | None = None
        raw_limit = env.get("TASKWEAVE_MAX_CONCURRENCY", "").strip()
        if raw_limit:
            try:
                max_concurrency = int(raw_limit)
            except ValueError:
                raise ValueError(
                    f"TASKWEAVE_MAX_CONCURRENCY must be an integer, got {raw_limit!r}"
                ) from None

        return cls(
            cancel_siblings_on_failure=_parse_bool(env, "TASKWEAVE_CANCEL_SIBLINGS", False),
            strict_dependencies=_parse_bool(env, "TASKWEAVE_STRICT_DEPENDENCIES", True),
            max_concurrency=max_concurrency,
        )


def _parse_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{key} must be a boolean (true/false), got {raw!r}")
