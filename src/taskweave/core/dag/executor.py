"""Dependency-aware parallel execution.

Each task starts the moment its last dependency completes. There are no
waves: a slow task only delays the tasks that actually depend on it.

    >>> results = await execute_with_dependencies({
    ...     "user": fetch_user,                       # async def fetch_user()
    ...     "posts": fetch_posts,                     # async def fetch_posts(user)
    ...     "comments": fetch_comments,               # async def fetch_comments(user)
    ...     "stats": summarize,                       # async def summarize(posts, comments)
    ... })
    # user -> (posts, comments concurrently) -> stats

Scheduling is cooperative on the running event loop. Completing a task
writes its result, then attempts every dependent; each dependent re-checks
its full dependency list, so a task is started at most once and never
before all of its dependencies have completed.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Callable
from typing import Any

from taskweave.core.config import ExecutorConfig
from taskweave.core.dag.errors import CycleError, StuckTasksError
from taskweave.core.dag.graph import TaskGraph, TaskNode, TaskSource
from taskweave.core.dag.run_logging import (
    generate_run_id,
    log_complete,
    log_error,
    log_start,
    log_warning,
)
from taskweave.core.dag.trace import ExecutionTrace, TaskRecord
from taskweave.core.types import TaskStatus

logger = logging.getLogger(__name__)

TaskStartCallback = Callable[[str], None]
TaskCompleteCallback = Callable[[TaskRecord], None]


class Scheduler:
    """Runs one built graph to completion.

    A scheduler owns the result set for a single invocation and is not
    reusable. Use :func:`execute_with_dependencies` unless you need to
    inspect the graph between building and running it.

    Args:
        graph: Freshly built graph; node statuses are mutated in place.
        config: Scheduling options. Defaults to ExecutorConfig.from_env().
        run_id: Identifier for log lines and the trace.
        trace: Optional trace to receive one record per finished task.
        on_task_start: Called with the task name as its body starts.
        on_task_complete: Called with the task's record when it finishes.
    """

    def __init__(
        self,
        graph: TaskGraph,
        config: ExecutorConfig | None = None,
        run_id: str | None = None,
        trace: ExecutionTrace | None = None,
        on_task_start: TaskStartCallback | None = None,
        on_task_complete: TaskCompleteCallback | None = None,
    ) -> None:
        self._graph = graph
        self._config = config or ExecutorConfig.from_env()
        self._run_id = run_id or generate_run_id()
        self._trace = trace
        self._on_task_start = on_task_start
        self._on_task_complete = on_task_complete

        self._results: dict[str, Any] = {}
        self._inflight: dict[str, asyncio.Task[Any]] = {}
        self._started_at: dict[str, float] = {}
        self._failure: Exception | None = None
        self._finished = False
        self._semaphore = (
            asyncio.Semaphore(self._config.max_concurrency)
            if self._config.max_concurrency is not None
            else None
        )

    @property
    def run_id(self) -> str:
        return self._run_id

    async def run(self) -> dict[str, Any]:
        """Execute every task and collect the results.

        Returns:
            ``{name: result}`` for exactly the registered names, in
            registration order.

        Raises:
            CycleError: No task is free to start; nothing was run.
            StuckTasksError: The roots finished but some tasks never
                became ready.
            Exception: The first error raised by any task, unchanged.
        """
        graph = self._graph
        roots = graph.roots

        if graph.nodes and not roots:
            log_error(logger, self._run_id, "run_blocked", "no tasks without dependencies")
            raise CycleError(graph.names)

        try:
            await asyncio.gather(*(self._attempt(name) for name in roots))
        except (Exception, asyncio.CancelledError) as e:
            # Cancelled siblings or a later failure can surface first; report
            # the failure that happened first.
            if self._failure is None or e is self._failure:
                raise
            raise self._failure from None
        finally:
            # Siblings still running after a failure report nothing further
            self._finished = True

        stuck = graph.incomplete()
        if stuck:
            stuck_names = set(stuck)
            cycles = [c for c in graph.find_cycles() if stuck_names.intersection(c)]
            log_error(logger, self._run_id, "run_stuck", "tasks could not complete", tasks=stuck)
            raise StuckTasksError(stuck, cycles)

        return {name: self._results[name] for name in graph.names}

    async def _attempt(self, name: str) -> None:
        """Start ``name`` if it is ready, then wake its dependents.

        Safe to call any number of times for the same task: only the call
        that finds it PENDING with every dependency COMPLETED runs it.
        """
        node = self._graph.nodes.get(name)
        if node is None or node.status is not TaskStatus.PENDING:
            return
        if self._failure is not None and self._config.cancel_siblings_on_failure:
            return
        if not self._graph.is_ready(name):
            return

        context = {dep: self._results[dep] for dep in node.dependencies}
        for dep in node.absent:
            context[dep] = None

        node.status = TaskStatus.RUNNING
        result = await self._invoke(node, context)

        self._results[name] = result
        node.status = TaskStatus.COMPLETED

        dependents = self._graph.dependents_of(name)
        if dependents:
            await asyncio.gather(*(self._attempt(dependent) for dependent in dependents))

    async def _invoke(self, node: TaskNode, context: dict[str, Any]) -> Any:
        """Run the task body as its own asyncio task and record the outcome."""
        future = asyncio.ensure_future(self._call(node, context))
        self._inflight[node.name] = future
        try:
            result = await future
        except asyncio.CancelledError:
            if node.status is not TaskStatus.CANCELLED:
                self._cancelled(node)
            raise
        except Exception as e:
            node.status = TaskStatus.FAILED
            self._record(node, TaskStatus.FAILED, e)
            log_error(logger, self._run_id, "task_failed", e, task=node.name)
            self._fail(node.name, e)
            raise
        finally:
            self._inflight.pop(node.name, None)

        record = self._record(node, TaskStatus.COMPLETED)
        log_complete(
            logger,
            self._run_id,
            "task_complete",
            record.duration_ms / 1000,
            task=node.name,
        )
        return result

    async def _call(self, node: TaskNode, context: dict[str, Any]) -> Any:
        if self._semaphore is None:
            return await self._call_body(node, context)
        async with self._semaphore:
            return await self._call_body(node, context)

    async def _call_body(self, node: TaskNode, context: dict[str, Any]) -> Any:
        self._started_at[node.name] = time.monotonic()
        log_start(
            logger,
            self._run_id,
            "task_start",
            task=node.name,
            depends_on=list(node.dependencies),
        )
        if self._on_task_start:
            self._on_task_start(node.name)

        result = node.task.fn(**context)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _fail(self, name: str, error: Exception) -> None:
        if self._failure is None:
            self._failure = error
        if not self._config.cancel_siblings_on_failure:
            return
        for other, future in list(self._inflight.items()):
            if other != name and not future.done():
                future.cancel()
                self._cancelled(self._graph.nodes[other])

    def _cancelled(self, node: TaskNode) -> None:
        node.status = TaskStatus.CANCELLED
        self._record(node, TaskStatus.CANCELLED)
        log_warning(logger, self._run_id, "task_cancelled", task=node.name)

    def _record(
        self,
        node: TaskNode,
        status: TaskStatus,
        error: BaseException | None = None,
    ) -> TaskRecord:
        now = time.monotonic()
        record = TaskRecord(
            name=node.name,
            dependencies=node.dependencies,
            status=status,
            # Cancelled while queued on the semaphore: never started
            started_at=self._started_at.get(node.name, now),
            finished_at=now,
            error=f"{type(error).__name__}: {error}" if error is not None else None,
            metadata=dict(node.task.metadata),
        )
        if self._finished:
            return record
        if self._trace is not None:
            self._trace.add(record)
        if self._on_task_complete:
            self._on_task_complete(record)
        return record


async def execute_with_dependencies(
    tasks: TaskSource,
    *,
    config: ExecutorConfig | None = None,
    trace: ExecutionTrace | None = None,
    on_task_start: TaskStartCallback | None = None,
    on_task_complete: TaskCompleteCallback | None = None,
) -> dict[str, Any]:
    """Execute tasks with dependency-based parallelization.

    Tasks run as soon as their dependencies are satisfied, maximizing
    concurrency while respecting every declared edge.

    Args:
        tasks: ``{name: coroutine_function}`` with dependencies inferred
            from parameter names, or an iterable of Task declarations.
        config: Scheduling options. Defaults to ExecutorConfig.from_env(),
            so TASKWEAVE_* environment variables apply.
        trace: Optional trace filled in with per-task timing.
        on_task_start: Called with the task name as its body starts.
        on_task_complete: Called with a TaskRecord as each task finishes.

    Returns:
        ``{name: result}`` with exactly the registered names.

    Raises:
        UnknownDependencyError: A task requires an unregistered name.
        CycleError: No task is free to start.
        StuckTasksError: Some tasks could never become ready.
        Exception: The first error raised by a task, unchanged.

    Example:
        >>> async def a():
        ...     return "a"
        >>> async def b(a):
        ...     return a + "b"
        >>> await execute_with_dependencies({"a": a, "b": b})
        {'a': 'a', 'b': 'ab'}
    """
    config = config or ExecutorConfig.from_env()
    run_id = generate_run_id()
    started = time.monotonic()
    if trace is not None:
        trace.start(run_id, started)

    try:
        graph = TaskGraph.build(tasks, config)
        log_start(logger, run_id, "run_start", tasks=len(graph), roots=graph.roots)
        scheduler = Scheduler(
            graph,
            config,
            run_id=run_id,
            trace=trace,
            on_task_start=on_task_start,
            on_task_complete=on_task_complete,
        )
        results = await scheduler.run()
    except (Exception, asyncio.CancelledError) as e:
        if trace is not None:
            trace.complete(time.monotonic(), e)
        log_error(logger, run_id, "run_failed", e)
        raise

    finished = time.monotonic()
    if trace is not None:
        trace.complete(finished)
    log_complete(
        logger,
        run_id,
        "run_complete",
        finished - started,
        level=logging.INFO,
        tasks=len(results),
    )
    return results
