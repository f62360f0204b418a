# src/batch_migrate/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the migration driver.

The driver depends on Protocols instead of concrete implementations.
This keeps task stores and migration logic swappable and makes testing easier.
"""

from typing import Any, Protocol, TypeVar

from ..tasks.task_models import Task, TaskId, TaskStatus

T = TypeVar("T")


class TaskRepo(Protocol[T]):
    """
    Data-plane boundary: task identity -> payload -> status.

    The driver assumes the store serializes the concurrent update()/take() calls
    it issues. There is no claim/lease: one driver per store.
    """

    async def clear(self) -> None:
        """Remove all tasks (setup/reset only, never called mid-run)."""
        ...

    async def take(self, n: int) -> list[Task[T]]:
        """Return up to n PENDING or FAILED tasks in a stable order. Does not change status."""
        ...

    async def add(self, task_id: TaskId, payload: T) -> bool:
        """Insert a PENDING task. Returns False if the identity already exists."""
        ...

    async def update(self, task_id: TaskId, status: TaskStatus) -> None:
        """Set the status of an existing task; unknown ids raise TaskNotFoundError."""
        ...


class MigrationHooks(Protocol[T]):
    """
    The capability set a concrete migration supplies.

    The driver treats the transaction hooks as opaque boundary markers and only
    relies on their ordering: start -> (commit | rollback).
    """

    async def apply(self, payload: T) -> Any: ...
    async def start_transaction(self) -> None: ...
    async def commit_transaction(self) -> None: ...
    async def rollback_transaction(self) -> None: ...
