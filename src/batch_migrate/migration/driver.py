# src/batch_migrate/migration/driver.py

from __future__ import annotations

"""
Batch migration driver.

One run is a sequence of batch cycles:
- take up to `concurrency` PENDING/FAILED tasks (empty batch -> done),
- start a transaction,
- apply the migration to every payload, at most `concurrency` in flight,
  collecting per-item failures without cancelling siblings,
- any failure: report, roll back, stop the run;
  otherwise: mark the batch SUCCESS, commit, take the next batch.

Only per-item apply failures are handled here. Store and transaction hook
failures propagate to the caller of process().
"""

import asyncio
import contextlib
import inspect
import logging
import time
from collections.abc import Awaitable, Iterable
from typing import Any, Generic, TypeVar

from ..core.ports import MigrationHooks, TaskRepo
from ..errors import ItemTimeoutError
from ..tasks.task_models import ErrorRecord, MigrationOutcome, MigrationResult, Task, TaskStatus
from .progress import ProgressCounter, format_duration, format_errors, run_progress_reporter

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class _ErrorCollector:
    """Lock-guarded accumulator for the current batch's failures."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._items: list[tuple[int, ErrorRecord]] = []

    async def add(self, index: int, record: ErrorRecord) -> None:
        async with self._lock:
            self._items.append((index, record))

    def records(self) -> list[ErrorRecord]:
        # Batch order, not completion order.
        return [rec for _, rec in sorted(self._items, key=lambda x: x[0])]


class MigrationDriver(Generic[T]):
    """
    Drives batch cycles against a task store until it runs dry or a batch fails.

    `hooks` supplies apply/start_transaction/commit_transaction/rollback_transaction.
    process() never raises for a failed batch: it rolls back and returns a
    MigrationResult with outcome ROLLED_BACK and the collected errors.
    """

    def __init__(
        self,
        task_store: TaskRepo[T],
        hooks: MigrationHooks[T],
        *,
        report_interval_seconds: float = 5.0,
        item_timeout_seconds: float | None = None,
    ) -> None:
        if item_timeout_seconds is not None and item_timeout_seconds <= 0:
            raise ValueError("item_timeout_seconds must be positive or None")
        self._task_store = task_store
        self._hooks = hooks
        self._report_interval_seconds = float(report_interval_seconds)
        self._item_timeout_seconds = item_timeout_seconds

    async def process(self, concurrency: int = 1) -> MigrationResult:
        if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
            raise ValueError(f"concurrency must be a positive integer, got {concurrency!r}")

        counter = ProgressCounter()
        reporter = asyncio.create_task(
            run_progress_reporter(counter, interval_seconds=self._report_interval_seconds),
            name="migration-progress-reporter",
        )
        started = time.monotonic()

        try:
            while True:
                tasks = await self._task_store.take(concurrency)
                if not tasks:
                    break

                logger.debug("Batch #%d: %d task(s)", counter.batches + 1, len(tasks))
                await _maybe_await(self._hooks.start_transaction())

                errors = await self._apply_batch(tasks, concurrency)
                if errors:
                    logger.error(
                        "Migration encountered %d error(s):\n%s", len(errors), format_errors(errors)
                    )
                    await _maybe_await(self._hooks.rollback_transaction())
                    logger.warning(
                        "Batch rolled back; migration stopped after %d record(s)", counter.processed
                    )
                    return MigrationResult(
                        outcome=MigrationOutcome.ROLLED_BACK,
                        processed=counter.processed,
                        batches=counter.batches,
                        elapsed_seconds=time.monotonic() - started,
                        errors=errors,
                    )

                await self._gather_bounded(
                    (self._task_store.update(t.id, TaskStatus.SUCCESS) for t in tasks),
                    concurrency,
                )
                await _maybe_await(self._hooks.commit_transaction())
                counter.add_batch(len(tasks))
        finally:
            reporter.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reporter

        elapsed = time.monotonic() - started
        logger.info("Migration successfully finished after %s.", format_duration(elapsed))
        logger.info("Total records migrated: %d", counter.processed)
        return MigrationResult(
            outcome=MigrationOutcome.COMPLETED,
            processed=counter.processed,
            batches=counter.batches,
            elapsed_seconds=elapsed,
        )

    async def _apply_batch(self, tasks: list[Task[T]], concurrency: int) -> list[ErrorRecord]:
        gate = asyncio.Semaphore(concurrency)
        collector = _ErrorCollector()
        await asyncio.gather(
            *(self._apply_one(i, task, gate, collector) for i, task in enumerate(tasks))
        )
        return collector.records()

    async def _apply_one(
        self,
        index: int,
        task: Task[T],
        gate: asyncio.Semaphore,
        collector: _ErrorCollector,
    ) -> None:
        async with gate:
            deadline = asyncio.timeout(self._item_timeout_seconds)
            try:
                async with deadline:
                    await _maybe_await(self._hooks.apply(task.payload))
            except Exception as e:
                err: BaseException = e
                if isinstance(e, TimeoutError) and deadline.expired():
                    err = ItemTimeoutError(task.id, self._item_timeout_seconds or 0.0)
                logger.debug("apply() failed task_id=%r: %r", task.id, err)
                await collector.add(index, ErrorRecord(task_id=task.id, error=err))

    @staticmethod
    async def _gather_bounded(calls: Iterable[Awaitable[Any]], limit: int) -> list[Any]:
        """
        Run awaitables with at most `limit` in flight and wait for all of them.

        If any failed, the first failure (in submission order) is re-raised
        after every call has finished.
        """
        gate = asyncio.Semaphore(limit)

        async def run(aw: Awaitable[Any]) -> Any:
            async with gate:
                return await aw

        results = await asyncio.gather(*(run(aw) for aw in calls), return_exceptions=True)
        for r in results:
            if isinstance(r, BaseException):
                raise r
        return results
