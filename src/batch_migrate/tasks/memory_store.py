# src/batch_migrate/tasks/memory_store.py

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Iterable
from typing import Generic, TypeVar

from ..errors import TaskNotFoundError
from .task_models import TAKEABLE_STATUSES, Task, TaskId, TaskStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InMemoryTaskStore(Generic[T]):
    """
    Dict-backed task store.

    Tasks are kept in insertion order, which is also the `take` order.
    An asyncio.Lock serializes every call, so the driver's concurrent
    update() fan-out never interleaves with a take().
    """

    def __init__(self, items: Iterable[tuple[TaskId, T]] | None = None) -> None:
        self._tasks: dict[TaskId, Task[T]] = {}
        self._lock = asyncio.Lock()
        for task_id, payload in items or ():
            if task_id in self._tasks:
                continue
            self._tasks[task_id] = Task(id=task_id, payload=payload)

    async def clear(self) -> None:
        async with self._lock:
            n = len(self._tasks)
            self._tasks.clear()
        logger.debug("InMemoryTaskStore cleared %d tasks", n)

    async def take(self, n: int) -> list[Task[T]]:
        if n <= 0:
            return []
        async with self._lock:
            out: list[Task[T]] = []
            for t in self._tasks.values():
                if t.status in TAKEABLE_STATUSES:
                    # Copies: callers get a view, not the stored record.
                    out.append(Task(id=t.id, payload=t.payload, status=t.status))
                    if len(out) >= n:
                        break
            return out

    async def add(self, task_id: TaskId, payload: T) -> bool:
        async with self._lock:
            if task_id in self._tasks:
                logger.debug("Duplicate task id=%r ignored", task_id)
                return False
            self._tasks[task_id] = Task(id=task_id, payload=payload)
            return True

    async def update(self, task_id: TaskId, status: TaskStatus) -> None:
        async with self._lock:
            t = self._tasks.get(task_id)
            if t is None:
                raise TaskNotFoundError(task_id)
            t.status = TaskStatus(status)

    # ---- helpers (not part of TaskRepo) ----

    async def seed(self, items: Iterable[tuple[TaskId, T]]) -> int:
        """Bulk add; returns how many were actually inserted."""
        added = 0
        for task_id, payload in items:
            if await self.add(task_id, payload):
                added += 1
        return added

    def get(self, task_id: TaskId) -> Task[T] | None:
        return self._tasks.get(task_id)

    def count_by_status(self) -> dict[TaskStatus, int]:
        counts = Counter(t.status for t in self._tasks.values())
        return {s: counts.get(s, 0) for s in TaskStatus}

    def __len__(self) -> int:
        return len(self._tasks)
