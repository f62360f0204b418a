# tests/fakes.py

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from batch_migrate.core.ports import MigrationHooks
from batch_migrate.tasks.memory_store import InMemoryTaskStore
from batch_migrate.tasks.task_models import Task, TaskId, TaskStatus


@dataclass(slots=True)
class RecordingHooks(MigrationHooks):
    """
    Deterministic MigrationHooks used by driver tests.

    - `outcomes` scripts apply() per call (1-based call number -> exception to raise)
    - `events` records the call order: "start", "apply:<payload>", "commit", "rollback"
    - tracks the peak number of apply() calls in flight
    """

    outcomes: dict[int, BaseException] = field(default_factory=dict)
    delay: float = 0.0
    events: list[str] = field(default_factory=list)
    applied: list[Any] = field(default_factory=list)
    apply_calls: int = 0
    starts: int = 0
    commits: int = 0
    rollbacks: int = 0
    in_flight: int = 0
    peak_in_flight: int = 0

    async def apply(self, payload: Any) -> None:
        self.apply_calls += 1
        call_no = self.apply_calls
        self.events.append(f"apply:{payload}")
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            # Yield so siblings get a chance to overlap.
            await asyncio.sleep(self.delay)
            err = self.outcomes.get(call_no)
            if err is not None:
                raise err
            self.applied.append(payload)
        finally:
            self.in_flight -= 1

    async def start_transaction(self) -> None:
        self.starts += 1
        self.events.append("start")

    async def commit_transaction(self) -> None:
        self.commits += 1
        self.events.append("commit")

    async def rollback_transaction(self) -> None:
        self.rollbacks += 1
        self.events.append("rollback")


def make_hooks(**kwargs: Any) -> RecordingHooks:
    """Factory used by loader tests."""
    return RecordingHooks(**kwargs)


def failing_hooks() -> RecordingHooks:
    """Factory used by CLI tests: the first apply() of the run fails."""
    return RecordingHooks(outcomes={1: RuntimeError("first row is broken")})


DEFAULT_HOOKS = RecordingHooks()


class SpyTaskStore(InMemoryTaskStore[Any]):
    """InMemoryTaskStore that records take()/update() calls."""

    def __init__(self, items=None) -> None:
        super().__init__(items)
        self.take_calls: list[int] = []
        self.updates: list[tuple[TaskId, TaskStatus]] = []

    async def take(self, n: int) -> list[Task[Any]]:
        self.take_calls.append(n)
        return await super().take(n)

    async def update(self, task_id: TaskId, status: TaskStatus) -> None:
        self.updates.append((task_id, status))
        await super().update(task_id, status)


class BrokenTaskStore(SpyTaskStore):
    """SpyTaskStore whose update() raises for selected ids."""

    def __init__(self, items=None, *, fail_on: Callable[[TaskId], bool] = lambda _: True) -> None:
        super().__init__(items)
        self.fail_on = fail_on

    async def update(self, task_id: TaskId, status: TaskStatus) -> None:
        if self.fail_on(task_id):
            self.updates.append((task_id, status))
            raise ConnectionError(f"store down while updating {task_id!r}")
        await super().update(task_id, status)
