"""
batch_migrate: take a bounded batch of pending tasks, apply a migration to each
inside a transaction, commit on success or roll back and stop on failure.

Components:
- tasks/: data model + task stores (in-memory, SQLite)
- core/ports.py: collaborator Protocols (TaskRepo, MigrationHooks)
- migration/: the batch driver, progress accounting, hooks loading
- cli/: composition root + `batch-migrate` entrypoint
"""

from __future__ import annotations

from .errors import HooksLoadError, ItemTimeoutError, MigrationError, TaskNotFoundError
from .migration.driver import MigrationDriver
from .migration.hooks import CallableHooks
from .tasks.memory_store import InMemoryTaskStore
from .tasks.task_models import (
    ErrorRecord,
    MigrationOutcome,
    MigrationResult,
    Task,
    TaskId,
    TaskStatus,
)
from .tasks.task_store import SQLiteTaskStore

__all__ = [
    "CallableHooks",
    "ErrorRecord",
    "HooksLoadError",
    "InMemoryTaskStore",
    "ItemTimeoutError",
    "MigrationDriver",
    "MigrationError",
    "MigrationOutcome",
    "MigrationResult",
    "SQLiteTaskStore",
    "Task",
    "TaskId",
    "TaskNotFoundError",
    "TaskStatus",
]
