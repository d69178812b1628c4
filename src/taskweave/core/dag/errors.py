"""Errors raised by the executor itself.

Errors raised inside a task body are never wrapped: they reach the caller
exactly as the task raised them.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence


class DependencyError(Exception):
    """Base class for graph and scheduling errors."""


class CycleError(DependencyError):
    """The graph cannot be satisfied: no task is free to start.

    Raised before any task runs when every task depends on something.
    """

    def __init__(self, tasks: Iterable[str], message: str | None = None) -> None:
        self.tasks = list(tasks)
        super().__init__(message or "Circular dependency detected: no tasks without dependencies")


class StuckTasksError(CycleError):
    """Some tasks never became ready even though the roots finished.

    Attributes:
        tasks: Names of the tasks that never completed.
        cycles: Dependency cycles found among them, each as a name path
            that starts and ends with the same task.
    """

    def __init__(
        self,
        tasks: Iterable[str],
        cycles: Sequence[Sequence[str]] = (),
    ) -> None:
        names = list(tasks)
        self.cycles = [tuple(c) for c in cycles]
        message = f"Circular dependency detected: tasks {', '.join(names)} could not complete"
        if self.cycles:
            message += " (" + "; ".join(" -> ".join(c) for c in self.cycles) + ")"
        super().__init__(names, message)


class UnknownDependencyError(DependencyError):
    """A task depends on a name that no registered task provides.

    Attributes:
        missing: Task name -> unknown dependency names it declared.
    """

    def __init__(self, missing: Mapping[str, Sequence[str]]) -> None:
        self.missing = {task: list(deps) for task, deps in missing.items()}
        details = ", ".join(
            f"'{task}' -> {', '.join(repr(d) for d in deps)}" for task, deps in self.missing.items()
        )
        super().__init__(f"Tasks depend on unknown tasks: {details}")
