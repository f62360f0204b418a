# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from batch_migrate.config import Settings, reset_settings
from batch_migrate.tasks.task_store import SQLiteTaskStore

from .fakes import RecordingHooks, SpyTaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings pointing at tmp paths.

    Built directly instead of via from_env() to keep tests isolated from the
    developer's environment and .env file.
    """
    return Settings(
        app_name="batch-migrate-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        log_dir=tmp_path / "logs",
        concurrency=1,
        report_interval_seconds=5.0,
        item_timeout_seconds=None,
        hooks=None,
    )


@pytest.fixture(autouse=True)
def _fresh_settings_cache():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture()
def five_tasks() -> SpyTaskStore:
    """Five PENDING tasks with ids 0..4 and payload == id."""
    return SpyTaskStore((i, i) for i in range(5))


@pytest.fixture()
def hooks() -> RecordingHooks:
    return RecordingHooks()


@pytest.fixture()
def sqlite_store(tmp_path: Path) -> SQLiteTaskStore:
    return SQLiteTaskStore(tmp_path / "tasks.sqlite3")
