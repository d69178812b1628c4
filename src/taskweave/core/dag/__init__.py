"""Dependency-aware task execution.

Pure asyncio scheduling - no persistence, no retries, no I/O of its own.
Just tasks, the results they need, and the order that follows from that.

Classes:
    Task: A named coroutine function and its dependencies.
    TaskGraph: Dependency graph built fresh for each invocation.
    Scheduler: Runs one graph to completion.
    DependencyExecutor: Fluent builder over execute_with_dependencies.
    ExecutionTrace: Opt-in per-task timing record.

Example:
    >>> from taskweave.core.dag import execute_with_dependencies
    >>>
    >>> async def user():
    ...     return await fetch_user()
    >>>
    >>> async def posts(user):
    ...     return await fetch_posts(user["id"])
    >>>
    >>> results = await execute_with_dependencies({"user": user, "posts": posts})
    >>> print(results["posts"])
"""

from taskweave.core.dag.builder import DependencyExecutor, create_executor
from taskweave.core.dag.errors import (
    CycleError,
    DependencyError,
    StuckTasksError,
    UnknownDependencyError,
)
from taskweave.core.dag.executor import Scheduler, execute_with_dependencies
from taskweave.core.dag.graph import TaskGraph, TaskNode
from taskweave.core.dag.inference import (
    DependencySignature,
    infer_dependencies,
    inspect_dependencies,
)
from taskweave.core.dag.render import print_plan, render_tree, render_waves, to_mermaid
from taskweave.core.dag.task import Task
from taskweave.core.dag.trace import ExecutionTrace, TaskRecord

__all__ = [
    "CycleError",
    "DependencyError",
    "DependencyExecutor",
    "DependencySignature",
    "ExecutionTrace",
    "Scheduler",
    "StuckTasksError",
    "Task",
    "TaskGraph",
    "TaskNode",
    "TaskRecord",
    "UnknownDependencyError",
    "create_executor",
    "execute_with_dependencies",
    "infer_dependencies",
    "inspect_dependencies",
    "print_plan",
    "render_tree",
    "render_waves",
    "to_mermaid",
]
