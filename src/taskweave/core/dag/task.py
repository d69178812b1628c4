"""Task declaration."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from taskweave.core.dag.inference import DependencySignature, inspect_dependencies

TaskFunction = Callable[..., Awaitable[Any]]


@dataclass
class Task:
    """A named unit of asynchronous work.

    The callable is awaited with its dependencies' results as keyword
    arguments, one per dependency name. Only declared dependencies are
    passed, so a task cannot see results it did not ask for.

    Attributes:
        name: Unique identifier within one invocation.
        fn: Coroutine function performing the work.
        depends_on: Explicit dependency names. None means infer them
            from the signature of ``fn``.
        metadata: Optional caller data, carried through to traces.

    Example:
        >>> async def stats(posts, comments):
        ...     return {"posts": len(posts), "comments": len(comments)}
        >>> Task(name="stats", fn=stats).dependency_signature().names
        ('posts', 'comments')
        >>> Task(name="stats", fn=stats, depends_on=["posts"]).dependency_signature().names
        ('posts',)
    """

    name: str
    fn: TaskFunction
    depends_on: list[str] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("task name cannot be empty")
        if not callable(self.fn):
            raise TypeError(
                f"Task '{self.name}': fn must be callable, got {type(self.fn).__name__}"
            )
        if self.depends_on is not None:
            if isinstance(self.depends_on, str):
                raise TypeError(
                    f"Task '{self.name}': depends_on must be a list of names, not a string"
                )
            self.depends_on = list(dict.fromkeys(self.depends_on))

    @property
    def explicit(self) -> bool:
        """True if dependencies were declared rather than inferred."""
        return self.depends_on is not None

    def dependency_signature(self) -> DependencySignature:
        """Resolve this task's dependencies.

        Explicit declarations are all required; inferred ones keep the
        optional flag of parameters with defaults.
        """
        if self.depends_on is not None:
            return DependencySignature(names=tuple(self.depends_on))
        return inspect_dependencies(self.fn)

    def __hash__(self) -> int:
        return hash(self.name)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Task):
            return self.name == other.name
        return False
