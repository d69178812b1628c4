"""Task graph construction and analysis."""

from __future__ import annotations

import graphlib
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from graphlib import TopologicalSorter
from typing import Any

from taskweave.core.config import ExecutorConfig
from taskweave.core.dag.errors import UnknownDependencyError
from taskweave.core.dag.task import Task
from taskweave.core.types import TaskStatus

logger = logging.getLogger(__name__)

TaskSource = Mapping[str, Callable[..., Any]] | Iterable[Task]


@dataclass
class TaskNode:
    """A task plus the scheduling state derived from the graph.

    Attributes:
        name: Task name.
        task: The declaration this node wraps.
        dependencies: Names that must complete before this node starts.
            Fixed for the lifetime of one invocation.
        absent: Declared names with no registered task. The task receives
            None for each of them (only when strict checking is off).
        dependents: Reverse edges: nodes that list this one as a dependency.
        status: Current lifecycle state.
    """

    name: str
    task: Task
    dependencies: tuple[str, ...] = ()
    absent: tuple[str, ...] = ()
    dependents: set[str] = field(default_factory=set)
    status: TaskStatus = TaskStatus.PENDING

    @property
    def is_root(self) -> bool:
        """True if the node can start immediately."""
        return not self.dependencies


class TaskGraph:
    """Directed graph of tasks, built fresh for each invocation.

    Construction resolves every task's dependencies exactly once,
    validates them against the registered names and indexes the reverse
    edges so a completing task knows whom to wake.

    Example:
        >>> async def user():
        ...     return {"id": 1}
        >>> async def posts(user):
        ...     return [user["id"]]
        >>> graph = TaskGraph.build({"user": user, "posts": posts})
        >>> graph.roots
        ['user']
        >>> graph.nodes["user"].dependents
        {'posts'}
        >>> graph.waves()
        [['user'], ['posts']]
    """

    def __init__(self, nodes: dict[str, TaskNode]) -> None:
        self.nodes = nodes

    @classmethod
    def build(
        cls,
        tasks: TaskSource,
        config: ExecutorConfig | None = None,
    ) -> TaskGraph:
        """Build a graph from a task mapping or an iterable of Task objects.

        Args:
            tasks: ``{name: coroutine_function}`` (dependencies inferred)
                or Task declarations. Later duplicates replace earlier ones.
            config: Controls unknown-name handling. Defaults to
                ExecutorConfig.from_env(), which is strict unless
                TASKWEAVE_STRICT_DEPENDENCIES turns it off.

        Returns:
            The built graph.

        Raises:
            UnknownDependencyError: If strict checking is on and a task
                requires a name no task provides.
            ValueError: If a task name is empty.
        """
        config = config or ExecutorConfig.from_env()
        registry = _normalize(tasks)

        nodes: dict[str, TaskNode] = {}
        missing: dict[str, list[str]] = {}

        for name, task in registry.items():
            signature = task.dependency_signature()
            dependencies: list[str] = []
            absent: list[str] = []

            for dep in signature.names:
                if dep in registry:
                    dependencies.append(dep)
                elif dep in signature.optional:
                    # Parameter default applies
                    logger.debug("Task '%s': optional dependency '%s' not registered", name, dep)
                elif config.strict_dependencies:
                    missing.setdefault(name, []).append(dep)
                else:
                    logger.warning(
                        "Task '%s' depends on unknown task '%s', passing None", name, dep
                    )
                    absent.append(dep)

            nodes[name] = TaskNode(
                name=name,
                task=task,
                dependencies=tuple(dependencies),
                absent=tuple(absent),
            )

        if missing:
            raise UnknownDependencyError(missing)

        for name, node in nodes.items():
            for dep in node.dependencies:
                nodes[dep].dependents.add(name)

        graph = cls(nodes)
        logger.debug(
            "Built task graph: tasks=%d, roots=%s",
            len(nodes),
            graph.roots,
        )
        return graph

    @property
    def names(self) -> list[str]:
        """Task names in registration order."""
        return list(self.nodes.keys())

    @property
    def roots(self) -> list[str]:
        """Names of tasks with no dependencies, in registration order."""
        return [name for name, node in self.nodes.items() if node.is_root]

    def dependents_of(self, name: str) -> list[str]:
        """Reverse edges of ``name`` in registration order."""
        dependents = self.nodes[name].dependents
        return [n for n in self.nodes if n in dependents]

    def is_ready(self, name: str) -> bool:
        """True if every dependency of ``name`` has completed."""
        node = self.nodes[name]
        return all(self.nodes[dep].status is TaskStatus.COMPLETED for dep in node.dependencies)

    def incomplete(self) -> list[str]:
        """Names of tasks that have not completed, in registration order."""
        return [n for n, node in self.nodes.items() if node.status is not TaskStatus.COMPLETED]

    def validate(self) -> list[str]:
        """Check the graph for problems without raising.

        Checks for:
        - Self-dependencies
        - Dependency names with no registered task
        - Cycles
        - No root task

        Returns:
            List of error messages (empty if valid).
        """
        errors: list[str] = []

        for name, node in self.nodes.items():
            if name in node.dependencies:
                errors.append(f"Task '{name}' depends on itself")
            for dep in node.absent:
                errors.append(f"Task '{name}' depends on unknown task '{dep}'")

        for cycle in self.find_cycles():
            if len(cycle) > 2:
                errors.append(f"Cycle detected: {' -> '.join(cycle)}")

        if self.nodes and not self.roots:
            errors.append("No task without dependencies")

        return errors

    def find_cycles(self) -> list[tuple[str, ...]]:
        """Find dependency cycles.

        TopologicalSorter reports one cycle at a time, so each cycle found
        has one of its edges dropped before searching again. Every task on
        a cycle either appears in a reported cycle or depends on one.

        Returns:
            Each cycle as a name path that begins and ends with the same
            task, each task followed by one of its dependencies.
        """
        order = {name: index for index, name in enumerate(self.nodes)}
        edges = {name: set(node.dependencies) for name, node in self.nodes.items()}
        cycles: list[tuple[str, ...]] = []

        while True:
            try:
                TopologicalSorter(edges).prepare()
            except graphlib.CycleError as e:
                cycle = _canonical_cycle(e.args[1], order)
                cycles.append(cycle)
                edges[cycle[0]].discard(cycle[1])
            else:
                return cycles

    def waves(self) -> list[list[str]]:
        """Group tasks into layers.

        Layer N holds the tasks whose longest dependency chain has N links,
        i.e. what would run side by side if every task took the same time.
        Tasks caught in a cycle, and everything that depends on them,
        appear in no layer.

        Returns:
            Layers of task names, each in registration order.
        """
        blocked = self._blocked()
        sorter = TopologicalSorter(
            {
                name: node.dependencies
                for name, node in self.nodes.items()
                if name not in blocked
            }
        )
        sorter.prepare()

        layers: list[list[str]] = []
        while sorter.is_active():
            ready = set(sorter.get_ready())
            layers.append([name for name in self.nodes if name in ready])
            sorter.done(*ready)
        return layers

    def _blocked(self) -> set[str]:
        """Tasks on a cycle plus everything downstream of one."""
        pending = [name for cycle in self.find_cycles() for name in cycle]
        blocked: set[str] = set()
        while pending:
            name = pending.pop()
            if name not in blocked:
                blocked.add(name)
                pending.extend(self.nodes[name].dependents)
        return blocked

    def critical_path(self) -> list[str]:
        """Longest dependency chain, root first.

        Returns:
            Task names along the chain; empty for an empty or fully
            cyclic graph.
        """
        order = [name for layer in self.waves() for name in layer]
        if not order:
            return []

        # longest[name] = (chain length starting at name, next task on the chain)
        longest: dict[str, tuple[int, str | None]] = {}
        for name in reversed(order):
            best_length, best_next = 0, None
            for dependent in sorted(self.nodes[name].dependents):
                if dependent in longest and longest[dependent][0] + 1 > best_length:
                    best_length, best_next = longest[dependent][0] + 1, dependent
            longest[name] = (best_length, best_next)

        current: str | None = max(order, key=lambda n: longest[n][0])
        path: list[str] = []
        while current is not None:
            path.append(current)
            current = longest[current][1]
        return path

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, name: object) -> bool:
        return name in self.nodes

    def __repr__(self) -> str:
        return f"TaskGraph({self.names})"


def _normalize(tasks: TaskSource) -> dict[str, Task]:
    """Turn either accepted task form into a name -> Task registry."""
    registry: dict[str, Task] = {}
    if isinstance(tasks, Mapping):
        for name, fn in tasks.items():
            task = fn if isinstance(fn, Task) else Task(name=name, fn=fn)
            registry[name] = task
    else:
        for task in tasks:
            if not isinstance(task, Task):
                raise TypeError(f"Expected Task, got {type(task).__name__}")
            registry[task.name] = task
    return registry


def _canonical_cycle(cycle: list[str], order: Mapping[str, int]) -> tuple[str, ...]:
    """Orient a graphlib cycle task -> dependency, starting at the earliest task.

    graphlib walks from a dependency to its dependents and repeats the
    first node at the end.
    """
    path = list(reversed(cycle))[:-1]
    start = min(range(len(path)), key=lambda i: order[path[i]])
    path = path[start:] + path[:start]
    return (*path, path[0])
