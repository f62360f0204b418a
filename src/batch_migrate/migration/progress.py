# src/batch_migrate/migration/progress.py

from __future__ import annotations

"""
Progress and timing accounting for a migration run.

The driver bumps a ProgressCounter between phases; a background reporter
logs the running total on a fixed wall-clock interval, independent of
batch boundaries. To stop the reporter, cancel its task.
"""

import asyncio
import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ..tasks.task_models import ErrorRecord

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProgressCounter:
    processed: int = 0
    batches: int = 0

    def add_batch(self, size: int) -> None:
        # Single event loop thread: both fields change in one step with no await in between.
        self.processed += int(size)
        self.batches += 1

    def snapshot(self) -> tuple[int, int]:
        return self.processed, self.batches


async def run_progress_reporter(counter: ProgressCounter, *, interval_seconds: float = 5.0) -> None:
    """Log the cumulative processed count every interval_seconds until cancelled."""
    sleep_s = max(0.01, float(interval_seconds))
    while True:
        await asyncio.sleep(sleep_s)
        processed, batches = counter.snapshot()
        logger.info("Total processed records: %d (batches=%d)", processed, batches)


def format_duration(seconds: float) -> str:
    """
    Compact human-readable duration.

    >>> format_duration(0.85)
    '850ms'
    >>> format_duration(12.34)
    '12.3s'
    >>> format_duration(242)
    '4m 2s'
    """
    seconds = max(0.0, float(seconds))
    millis = int(round(seconds * 1000))
    if millis < 1000:
        return f"{millis}ms"
    tenths = round(seconds, 1)
    if tenths < 60.0:
        return f"{tenths:.1f}s"

    total = int(round(seconds))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


def format_errors(errors: Iterable[ErrorRecord]) -> str:
    return json.dumps([e.as_dict() for e in errors], ensure_ascii=False, indent=2)
