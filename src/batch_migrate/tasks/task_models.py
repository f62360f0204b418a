# src/batch_migrate/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, TypeVar

T = TypeVar("T")

TaskId = str | int | bytes


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Notes:
    - FAILED tasks are eligible for `take` again, same as PENDING ones.
    - SUCCESS is only written after the whole batch applied cleanly.
    """

    PENDING = "PENDING"
    FAILED = "FAILED"
    SUCCESS = "SUCCESS"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw.strip().upper())
        except ValueError:
            return cls.PENDING


TAKEABLE_STATUSES: tuple[TaskStatus, ...] = (TaskStatus.PENDING, TaskStatus.FAILED)


@dataclass(slots=True)
class Task(Generic[T]):
    id: TaskId
    payload: T
    status: TaskStatus = TaskStatus.PENDING


def task_id_repr(task_id: TaskId) -> str | int:
    """JSON-friendly rendering of a task identity (bytes become hex)."""
    if isinstance(task_id, bytes):
        return task_id.hex()
    return task_id


@dataclass(slots=True, frozen=True)
class ErrorRecord:
    task_id: TaskId
    error: BaseException

    def as_dict(self) -> dict[str, Any]:
        err = self.error
        msg = str(err)
        text = f"{type(err).__name__}: {msg}" if msg else type(err).__name__
        return {"task": task_id_repr(self.task_id), "error": text}


class MigrationOutcome(StrEnum):
    COMPLETED = "completed"
    ROLLED_BACK = "rolled_back"


@dataclass(slots=True)
class MigrationResult:
    """What a `MigrationDriver.process` run ended with."""

    outcome: MigrationOutcome
    processed: int = 0
    batches: int = 0
    elapsed_seconds: float = 0.0
    errors: list[ErrorRecord] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome == MigrationOutcome.COMPLETED
