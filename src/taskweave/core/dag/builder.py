"""Fluent builder for incremental task registration.

    >>> results = await (
    ...     create_executor()
    ...     .add("user", fetch_user)
    ...     .add_dependent("posts", fetch_posts)        # async def fetch_posts(user)
    ...     .add_dependent("comments", fetch_comments)  # async def fetch_comments(user)
    ...     .add_dependent("stats", summarize)          # async def summarize(posts, comments)
    ...     .execute()
    ... )
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from taskweave.core.config import ExecutorConfig
from taskweave.core.dag.executor import execute_with_dependencies
from taskweave.core.dag.graph import TaskGraph
from taskweave.core.dag.task import Task, TaskFunction


class DependencyExecutor:
    """Collects tasks one call at a time and executes them together.

    Adds no runtime behaviour of its own: :meth:`execute` hands the
    registered tasks to :func:`execute_with_dependencies`. Registering a
    name twice replaces the earlier task.

    Args:
        config: Scheduling options used by :meth:`execute` and :meth:`graph`.
            Read from TASKWEAVE_* variables when omitted.
    """

    def __init__(self, config: ExecutorConfig | None = None) -> None:
        self._config = config
        self._tasks: dict[str, Task] = {}

    def add(
        self,
        name: str,
        fn: TaskFunction,
        metadata: dict[str, Any] | None = None,
    ) -> DependencyExecutor:
        """Add a task with no dependencies.

        The function's signature is not inspected; it is called with no
        arguments.

        Args:
            name: Task name.
            fn: Zero-argument coroutine function.
            metadata: Optional data carried into traces.

        Returns:
            Self for chaining.
        """
        self._tasks[name] = Task(name=name, fn=fn, depends_on=[], metadata=metadata or {})
        return self

    def add_dependent(
        self,
        name: str,
        fn: TaskFunction,
        depends_on: Iterable[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> DependencyExecutor:
        """Add a task that depends on other tasks.

        Args:
            name: Task name.
            fn: Coroutine function receiving each dependency's result as a
                keyword argument.
            depends_on: Dependency names. Inferred from the parameters of
                ``fn`` when omitted.
            metadata: Optional data carried into traces.

        Returns:
            Self for chaining.
        """
        self._tasks[name] = Task(
            name=name,
            fn=fn,
            depends_on=list(depends_on) if depends_on is not None else None,
            metadata=metadata or {},
        )
        return self

    @property
    def tasks(self) -> Mapping[str, Task]:
        """Read-only view of the registered tasks."""
        return MappingProxyType(self._tasks)

    @property
    def names(self) -> list[str]:
        """Registered task names in registration order."""
        return list(self._tasks)

    def graph(self) -> TaskGraph:
        """Build the graph :meth:`execute` would run, without running it."""
        return TaskGraph.build(self._tasks.values(), self._config)

    async def execute(self, **kwargs: Any) -> dict[str, Any]:
        """Execute all tasks with dependency-based parallelization.

        Args:
            **kwargs: Passed to execute_with_dependencies (trace,
                on_task_start, on_task_complete, config).

        Returns:
            ``{name: result}`` for every registered task.
        """
        kwargs.setdefault("config", self._config)
        return await execute_with_dependencies(list(self._tasks.values()), **kwargs)

    def __len__(self) -> int:
        return len(self._tasks)

    def __repr__(self) -> str:
        return f"DependencyExecutor({self.names})"


def create_executor(config: ExecutorConfig | None = None) -> DependencyExecutor:
    """Create a new dependency executor."""
    return DependencyExecutor(config)
