# src/batch_migrate/migration/hooks.py

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")

AsyncHook = Callable[[], Awaitable[None] | None]


async def _noop() -> None:
    return None


@dataclass(slots=True)
class CallableHooks(Generic[T]):
    """
    MigrationHooks assembled from plain callables.

    Useful when the migration has no real transaction (the boundary hooks
    default to no-ops) or when wiring a migration from functions in a script.
    Callables may be sync or async.
    """

    apply_fn: Callable[[T], Any]
    start_fn: AsyncHook = _noop
    commit_fn: AsyncHook = _noop
    rollback_fn: AsyncHook = _noop

    def apply(self, payload: T) -> Any:
        return self.apply_fn(payload)

    def start_transaction(self) -> Any:
        return self.start_fn()

    def commit_transaction(self) -> Any:
        return self.commit_fn()

    def rollback_transaction(self) -> Any:
        return self.rollback_fn()
