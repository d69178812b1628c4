"""Core - the executor and its supporting types.

Architecture:
    dag/            Inference, graph construction, scheduling, builder
    config          ExecutorConfig and its environment overrides
    logging_config  Optional logging setup for applications
    types           Pure data types
"""

from taskweave.core.config import ExecutorConfig
from taskweave.core.dag import (
    CycleError,
    DependencyError,
    DependencyExecutor,
    ExecutionTrace,
    StuckTasksError,
    Task,
    TaskGraph,
    TaskRecord,
    UnknownDependencyError,
    create_executor,
    execute_with_dependencies,
    infer_dependencies,
)
from taskweave.core.types import TaskStatus

__all__ = [
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
