# src/batch_migrate/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- ensures local (gitignored) directories exist,
- wires the SQLite task store from settings,
- resolves the migration hooks and builds the driver.
"""

from __future__ import annotations

import logging
from typing import Any

from ..config import Settings, get_settings
from ..errors import HooksLoadError
from ..migration.driver import MigrationDriver
from ..migration.loader import load_hooks
from ..tasks.task_store import SQLiteTaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.log_dir.mkdir(parents=True, exist_ok=True)


def create_task_store(*, settings: Settings | None = None) -> SQLiteTaskStore:
    """
    Build the task store from the provided settings.

    Keeping settings injectable makes the CLI easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)
    return SQLiteTaskStore(settings.tasks_db_path)


def create_driver(
    *,
    settings: Settings | None = None,
    task_store: Any | None = None,
    hooks_spec: str | None = None,
    item_timeout_seconds: float | None = None,
) -> MigrationDriver[Any]:
    if settings is None:
        settings = get_settings()

    spec = hooks_spec or settings.hooks
    if not spec:
        raise HooksLoadError("No migration hooks given (use --hooks or MIGRATE_HOOKS)")

    hooks = load_hooks(spec)
    store = task_store if task_store is not None else create_task_store(settings=settings)
    timeout = item_timeout_seconds if item_timeout_seconds is not None else settings.item_timeout_seconds

    logger.info("Driver ready hooks=%s timeout=%s", spec, timeout)
    return MigrationDriver(
        store,
        hooks,
        report_interval_seconds=settings.report_interval_seconds,
        item_timeout_seconds=timeout,
    )
