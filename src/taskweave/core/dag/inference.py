"""Dependency inference from task signatures.

A task names what it needs through its parameters:

    >>> async def posts(user):
    ...     return await fetch_posts(user["id"])
    >>> infer_dependencies(posts)
    ['user']

Every parameter that can be passed by keyword is a dependency. Parameters
with a default are optional: they only become edges when a task of that
name is registered. ``*args``, ``**kwargs`` and positional-only parameters
are never dependencies.

Inference fails open. A callable whose signature cannot be read is treated
as having no dependencies instead of raising.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

_KEYWORD_KINDS = (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)


@dataclass(frozen=True)
class DependencySignature:
    """What a callable's signature says about its dependencies.

    Attributes:
        names: Dependency names in declaration order.
        optional: Subset of names whose parameters have defaults.
        accepts_extra: True if the callable takes ``**kwargs``.
    """

    names: tuple[str, ...] = ()
    optional: frozenset[str] = field(default_factory=frozenset)
    accepts_extra: bool = False

    @property
    def required(self) -> tuple[str, ...]:
        """Names without a default value."""
        return tuple(n for n in self.names if n not in self.optional)


def inspect_dependencies(fn: Callable[..., Any]) -> DependencySignature:
    """Read the dependency declaration off a callable's signature.

    Args:
        fn: Task callable (function, bound method, partial, callable object).

    Returns:
        The declared dependencies. Empty if the signature is unreadable.
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError) as e:
        logger.debug("Cannot read signature of %r, assuming no dependencies: %s", fn, e)
        return DependencySignature()

    names: list[str] = []
    optional: set[str] = set()
    accepts_extra = False

    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            accepts_extra = True
        elif param.kind in _KEYWORD_KINDS:
            names.append(param.name)
            if param.default is not inspect.Parameter.empty:
                optional.add(param.name)

    return DependencySignature(
        names=tuple(names),
        optional=frozenset(optional),
        accepts_extra=accepts_extra,
    )


def infer_dependencies(fn: Callable[..., Any]) -> list[str]:
    """List the task names a callable depends on.

    Args:
        fn: Task callable.

    Returns:
        Dependency names in declaration order; empty for root tasks.
    """
    return list(inspect_dependencies(fn).names)
