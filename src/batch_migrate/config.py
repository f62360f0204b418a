# src/batch_migrate/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every key has a default.
- Junk values fall back to defaults instead of crashing the run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "MIGRATE"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path
    log_dir: Path

    # ---- Driver tuning ----
    concurrency: int
    report_interval_seconds: float
    item_timeout_seconds: float | None

    # ---- Default migration hooks ("package.module:attr") ----
    hooks: str | None

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "batch-migrate").strip() or "batch-migrate"
        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/migrate"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        log_dir = _env_path(_k("LOG_DIR"), data_dir)

        concurrency = max(1, _env_int(_k("CONCURRENCY"), 1))
        report_interval_seconds = max(0.1, _env_float(_k("REPORT_INTERVAL_SECONDS"), 5.0) or 5.0)

        item_timeout_seconds = _env_float(_k("ITEM_TIMEOUT_SECONDS"), None)
        if item_timeout_seconds is not None and item_timeout_seconds <= 0:
            item_timeout_seconds = None

        hooks = _env(_k("HOOKS"), "").strip() or None

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            log_dir=log_dir,
            concurrency=concurrency,
            report_interval_seconds=report_interval_seconds,
            item_timeout_seconds=item_timeout_seconds,
            hooks=hooks,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Load .env (never overriding real env vars) and build Settings once."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS


def reset_settings() -> None:
    """Drop the cached Settings (tests, long-lived processes re-reading env)."""
    global _SETTINGS
    _SETTINGS = None
