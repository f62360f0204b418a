# src/batch_migrate/errors.py

"""
Exception types raised by batch_migrate itself.

Failures coming from the applier, the transaction hooks or a task store are
whatever those collaborators raise; only per-item apply failures are caught
by the driver.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base class for errors raised by batch_migrate."""


class TaskNotFoundError(MigrationError, KeyError):
    def __init__(self, task_id: object) -> None:
        super().__init__(task_id)
        self.task_id = task_id

    def __str__(self) -> str:
        return f"Unknown task id: {self.task_id!r}"


class ItemTimeoutError(MigrationError, TimeoutError):
    """An apply() call ran longer than the configured per-item timeout."""

    def __init__(self, task_id: object, timeout_seconds: float) -> None:
        super().__init__(f"apply() for task {task_id!r} timed out after {timeout_seconds:g}s")
        self.task_id = task_id
        self.timeout_seconds = timeout_seconds


class HooksLoadError(MigrationError):
    pass
