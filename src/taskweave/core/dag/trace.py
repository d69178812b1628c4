"""Execution tracing for executor invocations.

Traces record which tasks ran, when, and how each one ended. Tracing is
opt-in: pass an ExecutionTrace to the executor to have it filled in.

Timestamps come from ``time.monotonic()`` so they can be compared with
each other (start order, overlap) but not with wall-clock time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from taskweave.core.types import TaskStatus


@dataclass
class TaskRecord:
    """Trace record for a single task execution.

    Attributes:
        name: Task name.
        dependencies: Names whose results the task received.
        status: Final status (COMPLETED, FAILED or CANCELLED).
        started_at: Monotonic time the task body was entered.
        finished_at: Monotonic time the task body returned or raised.
        error: ``Type: message`` if the task failed, None otherwise.
        metadata: The task's metadata dict.
    """

    name: str
    dependencies: tuple[str, ...]
    status: TaskStatus
    started_at: float
    finished_at: float
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        """Time spent in the task body, in milliseconds."""
        return (self.finished_at - self.started_at) * 1000

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "name": self.name,
            "dependencies": list(self.dependencies),
            "status": self.status.value,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "duration_ms": self.duration_ms,
            "error": self.error,
            "metadata": {str(k): _safe_repr(v) for k, v in self.metadata.items()},
        }


@dataclass
class ExecutionTrace:
    """Trace record for one executor invocation.

    Attributes:
        run_id: Identifier used in this invocation's log lines.
        started_at: Monotonic start time of the invocation.
        finished_at: Monotonic end time (None while running).
        status: Invocation status.
        tasks: Task records in completion order.
        error: ``Type: message`` of the error the invocation raised.

    Example:
        >>> trace = ExecutionTrace()
        >>> results = await execute_with_dependencies(tasks, trace=trace)
        >>> print(trace.explain())
    """

    run_id: str | None = None
    started_at: float | None = None
    finished_at: float | None = None
    status: Literal["pending", "running", "completed", "failed"] = "pending"
    tasks: list[TaskRecord] = field(default_factory=list)
    error: str | None = None

    def start(self, run_id: str, now: float) -> None:
        """Reset and mark the trace as running."""
        self.run_id = run_id
        self.started_at = now
        self.finished_at = None
        self.status = "running"
        self.tasks = []
        self.error = None

    def add(self, record: TaskRecord) -> None:
        """Append a finished task's record."""
        self.tasks.append(record)

    def complete(self, now: float, error: BaseException | None = None) -> None:
        """Mark the invocation as finished.

        Args:
            now: Monotonic end time.
            error: The error the invocation raised, if any.
        """
        self.finished_at = now
        if error is not None:
            self.status = "failed"
            self.error = f"{type(error).__name__}: {error}"
        else:
            self.status = "completed"

    def get(self, name: str) -> TaskRecord | None:
        """Get the record for a task, or None if it never finished."""
        for record in self.tasks:
            if record.name == name:
                return record
        return None

    @property
    def duration_ms(self) -> float | None:
        """Total invocation duration in milliseconds, None while running."""
        if self.started_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.started_at) * 1000

    def explain(self) -> str:
        """Generate a human-readable execution summary."""
        lines = [
            f"Run: {self.run_id}",
            f"Status: {self.status}",
        ]
        if self.duration_ms is not None:
            lines.append(f"Duration: {self.duration_ms:.0f}ms")
        lines.append(f"Tasks: {len(self.tasks)}")

        origin = self.started_at or 0.0
        for record in sorted(self.tasks, key=lambda r: r.started_at):
            indicator = {TaskStatus.COMPLETED: "+", TaskStatus.FAILED: "x"}.get(record.status, "-")
            lines.append(
                f"  [{indicator}] {record.name}: "
                f"+{(record.started_at - origin) * 1000:.0f}ms, {record.duration_ms:.0f}ms"
            )
            if record.error:
                lines.append(f"      Error: {record.error}")

        if self.error:
            lines.append(f"Error: {self.error}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "run_id": self.run_id,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "status": self.status,
            "duration_ms": self.duration_ms,
            "tasks": [record.to_dict() for record in self.tasks],
            "error": self.error,
        }


def _safe_repr(value: Any) -> Any:
    """Convert a value to a JSON-safe representation."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_safe_repr(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _safe_repr(v) for k, v in value.items()}
    return str(value)
