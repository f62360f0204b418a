# tests/test_cli.py

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

import pytest

from batch_migrate.cli.bootstrap import create_driver, create_task_store
from batch_migrate.cli.main import EXIT_OK, EXIT_ROLLED_BACK, EXIT_USAGE, main
from batch_migrate.errors import HooksLoadError
from batch_migrate.tasks.task_models import TaskStatus
from batch_migrate.tasks.task_store import SQLiteTaskStore


@pytest.fixture()
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the CLI at a tmp data dir and restore root logging afterwards."""
    for key in ("MIGRATE_TASKS_DB_PATH", "MIGRATE_LOG_DIR", "MIGRATE_HOOKS", "MIGRATE_CONCURRENCY"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("MIGRATE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("MIGRATE_LOG_LEVEL", "WARNING")

    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield tmp_path
    for h in list(root.handlers):
        root.removeHandler(h)
        if h not in saved_handlers:
            h.close()
    for h in saved_handlers:
        root.addHandler(h)
    root.setLevel(saved_level)


def _store(data_dir: Path) -> SQLiteTaskStore:
    return SQLiteTaskStore(data_dir / "tasks.sqlite3")


def test_add_status_run_clear(cli_env: Path, capsys) -> None:
    assert main(["add", "a", "--payload", '{"x": 1}']) == EXIT_OK
    assert main(["add", "2", "--int-id"]) == EXIT_OK
    assert main(["add", "a"]) == EXIT_USAGE

    assert main(["status"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "PENDING  2" in out
    assert "TOTAL    2" in out

    assert main(["run", "--hooks", "tests.fakes:RecordingHooks", "--concurrency", "2"]) == EXIT_OK
    assert "Migrated 2 record(s) in 1 batch(es)." in capsys.readouterr().out
    assert _store(cli_env).count_by_status()[TaskStatus.SUCCESS] == 2

    assert main(["clear"]) == EXIT_OK
    assert _store(cli_env).count_tasks() == 0

    # Log file lands in the data dir by default and records its own location.
    log_file = cli_env / "migrate.log"
    assert f"Logging to {log_file}" in log_file.read_text(encoding="utf-8")


def test_run_rolled_back_exit_code(cli_env: Path, capsys) -> None:
    assert main(["add", "1", "--int-id"]) == EXIT_OK

    code = main(["run", "--hooks", "tests.fakes:failing_hooks"])

    assert code == EXIT_ROLLED_BACK
    assert "rolled back" in capsys.readouterr().err
    assert _store(cli_env).count_by_status()[TaskStatus.PENDING] == 1


def test_run_without_hooks_is_usage_error(cli_env: Path, capsys) -> None:
    assert main(["run"]) == EXIT_USAGE
    assert "No migration hooks given" in capsys.readouterr().err


def test_bad_payload_and_int_id(cli_env: Path, capsys) -> None:
    assert main(["add", "a", "--payload", "{not json"]) == EXIT_USAGE
    assert main(["add", "abc", "--int-id"]) == EXIT_USAGE
    err = capsys.readouterr().err
    assert "Invalid --payload JSON" in err
    assert "not an integer" in err


def test_concurrency_must_be_positive(cli_env: Path) -> None:
    with pytest.raises(SystemExit):
        main(["run", "--hooks", "tests.fakes:RecordingHooks", "--concurrency", "0"])


def test_bootstrap_wires_settings_into_driver(settings, tmp_path: Path) -> None:
    store = create_task_store(settings=settings)
    assert store.db_path == tmp_path / "tasks.sqlite3"
    assert settings.log_dir.is_dir()

    with pytest.raises(HooksLoadError):
        create_driver(settings=settings, task_store=store)

    configured = replace(settings, hooks="tests.fakes:RecordingHooks", item_timeout_seconds=2.0)
    driver = create_driver(settings=configured, task_store=store)
    assert driver._item_timeout_seconds == 2.0
    assert driver._report_interval_seconds == 5.0
