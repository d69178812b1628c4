"""taskweave - dependency-aware parallel execution for asyncio.

Hand taskweave a set of named coroutine functions. Each one names the
results it needs through its parameters; taskweave works out the graph,
starts every task the moment its dependencies are done, and returns all
results at once.

Quick Start:
    >>> from taskweave import execute_with_dependencies
    >>>
    >>> async def user():
    ...     return await fetch_user()
    >>>
    >>> async def posts(user):
    ...     return await fetch_posts(user["id"])
    >>>
    >>> async def comments(user):
    ...     return await fetch_comments(user["id"])
    >>>
    >>> async def stats(posts, comments):
    ...     return {"posts": len(posts), "comments": len(comments)}
    >>>
    >>> results = await execute_with_dependencies(
    ...     {"user": user, "posts": posts, "comments": comments, "stats": stats}
    ... )
    # user -> (posts, comments concurrently) -> stats

With the builder:
    >>> from taskweave import create_executor
    >>> results = await (
    ...     create_executor()
    ...     .add("user", user)
    ...     .add_dependent("posts", posts)
    ...     .add_dependent("stats", stats, depends_on=["posts", "comments"])
    ...     .add_dependent("comments", comments)
    ...     .execute()
    ... )
"""

from taskweave.__version__ import __version__
from taskweave.core import (
    CycleError,
    DependencyError,
    DependencyExecutor,
    ExecutionTrace,
    ExecutorConfig,
    StuckTasksError,
    Task,
    TaskGraph,
    TaskRecord,
    TaskStatus,
    UnknownDependencyError,
    create_executor,
    execute_with_dependencies,
    infer_dependencies,
)

__all__ = [
    "__version__",
    "CycleError",
    "DependencyError",
    "DependencyExecutor",
    "ExecutionTrace",
    "ExecutorConfig",
    "StuckTasksError",
    "Task",
    "TaskGraph",
    "TaskRecord",
    "TaskStatus",
    "UnknownDependencyError",
    "create_executor",
    "execute_with_dependencies",
    "infer_dependencies",
]
