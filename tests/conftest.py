"""Pytest configuration and fixtures."""

import asyncio
import time

import pytest


class Timeline:
    """Records when task bodies start and finish (monotonic seconds)."""

    def __init__(self):
        self.origin = time.monotonic()
        self.starts: dict[str, float] = {}
        self.ends: dict[str, float] = {}
        self.order: list[str] = []

    def start(self, name: str) -> None:
        self.starts[name] = time.monotonic() - self.origin
        self.order.append(name)

    def end(self, name: str) -> None:
        self.ends[name] = time.monotonic() - self.origin

    def sleeper(self, name: str, value, delay: float = 0.05):
        """Build a root task that sleeps ``delay`` seconds and returns ``value``."""

        async def task():
            self.start(name)
            await asyncio.sleep(delay)
            self.end(name)
            return value

        task.__name__ = name
        return task


@pytest.fixture
def timeline():
    """Fresh timeline for timing assertions."""
    return Timeline()


@pytest.fixture(autouse=True)
def clean_executor_env(monkeypatch):
    """Keep TASKWEAVE_* scheduling variables from leaking into tests."""
    for key in (
        "TASKWEAVE_CANCEL_SIBLINGS",
        "TASKWEAVE_STRICT_DEPENDENCIES",
        "TASKWEAVE_MAX_CONCURRENCY",
    ):
        monkeypatch.delenv(key, raising=False)
