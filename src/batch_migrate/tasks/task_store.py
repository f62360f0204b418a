# src/batch_migrate/tasks/task_store.py

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any

from ..errors import TaskNotFoundError
from .task_models import TAKEABLE_STATUSES, Task, TaskId, TaskStatus

logger = logging.getLogger(__name__)


class SQLiteTaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Identities keep their native SQLite type (TEXT / INTEGER / BLOB), so
    "1" and 1 are distinct tasks. Payloads are stored as JSON.

    Concurrency:
    - each call opens its own SQLite connection and runs in a worker thread
    - writes are serialized with a process-local lock
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.Lock()
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except sqlite3.Error:
            total = -1
        logger.info("SQLiteTaskStore ready db=%s total=%s", self._db_path, total)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            # BLOB declared type => no affinity, ids are stored as given.
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS migration_tasks (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    task_id BLOB NOT NULL UNIQUE,
                    payload TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'PENDING',
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )

            cur.execute("PRAGMA table_info(migration_tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE migration_tasks ADD COLUMN {name} {decl}")
                logger.info("SQLiteTaskStore migration: added column %s", name)

            add_col("status", "TEXT NOT NULL DEFAULT 'PENDING'")
            add_col("created_at", "REAL NOT NULL DEFAULT 0")
            add_col("updated_at", "REAL NOT NULL DEFAULT 0")

            # Status is read case-insensitively and unknown values count as PENDING;
            # rewrite stored rows the same way so take() and counts agree.
            known = [s.value for s in TaskStatus]
            cur.execute(
                f"""
                UPDATE migration_tasks
                SET status = CASE
                    WHEN UPPER(TRIM(status)) IN ({",".join("?" for _ in known)})
                        THEN UPPER(TRIM(status))
                    ELSE ?
                END
                WHERE status IS NULL OR status NOT IN ({",".join("?" for _ in known)})
                """,
                (*known, TaskStatus.PENDING.value, *known),
            )
            if cur.rowcount > 0:
                logger.info("SQLiteTaskStore migration: normalized status on %d rows", cur.rowcount)

            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_migration_tasks_status_seq "
                "ON migration_tasks(status, seq)"
            )

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _payload_to_str(payload: Any) -> str:
        try:
            return json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Task payload is not JSON-serializable: {e}") from e

    @staticmethod
    def _str_to_payload(s: str | None) -> Any:
        if s is None:
            return None
        return json.loads(s)

    def _row_to_task(self, row: sqlite3.Row) -> Task[Any]:
        return Task(
            id=row["task_id"],
            payload=self._str_to_payload(row["payload"]),
            status=TaskStatus.from_db(row["status"]),
        )

    # ---- sync implementations (run in worker threads) ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM migration_tasks")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def count_by_status(self) -> dict[TaskStatus, int]:
        out = {s: 0 for s in TaskStatus}
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT status, COUNT(*) AS n FROM migration_tasks GROUP BY status")
            for row in cur.fetchall():
                status = TaskStatus.from_db(row["status"])
                out[status] += int(row["n"])
            return out
        finally:
            conn.close()

    def _clear_sync(self) -> None:
        with self._write_lock:
            conn = self._get_conn()
            try:
                cur = conn.execute("DELETE FROM migration_tasks")
                conn.commit()
                logger.info("SQLiteTaskStore cleared %d tasks", cur.rowcount)
            finally:
                conn.close()

    def _take_sync(self, n: int) -> list[Task[Any]]:
        # Same reading as TaskStatus.from_db: anything not a known non-takeable
        # status (unknown, empty, any case) is takeable.
        done = [s.value for s in TaskStatus if s not in TAKEABLE_STATUSES]
        placeholders = ",".join("?" for _ in done)
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                f"""
                SELECT task_id, payload, status
                FROM migration_tasks
                WHERE UPPER(TRIM(COALESCE(status, ''))) NOT IN ({placeholders})
                ORDER BY seq ASC
                    LIMIT ?
                """,
                (*done, int(n)),
            )
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def _add_sync(self, task_id: TaskId, payload: Any) -> bool:
        payload_str = self._payload_to_str(payload)
        now = time.time()
        with self._write_lock:
            conn = self._get_conn()
            try:
                cur = conn.execute(
                    """
                    INSERT OR IGNORE INTO migration_tasks(task_id, payload, status, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (task_id, payload_str, TaskStatus.PENDING.value, now, now),
                )
                conn.commit()
                added = cur.rowcount == 1
            finally:
                conn.close()
        if added:
            logger.debug("Task added id=%r", task_id)
        else:
            logger.debug("Duplicate task id=%r ignored", task_id)
        return added

    def _update_sync(self, task_id: TaskId, status: TaskStatus) -> None:
        now = time.time()
        with self._write_lock:
            conn = self._get_conn()
            try:
                cur = conn.execute(
                    "UPDATE migration_tasks SET status = ?, updated_at = ? WHERE task_id = ?",
                    (TaskStatus(status).value, now, task_id),
                )
                conn.commit()
                if cur.rowcount == 0:
                    raise TaskNotFoundError(task_id)
            finally:
                conn.close()

    # ---- TaskRepo API ----

    async def clear(self) -> None:
        await asyncio.to_thread(self._clear_sync)

    async def take(self, n: int) -> list[Task[Any]]:
        if n <= 0:
            return []
        return await asyncio.to_thread(self._take_sync, n)

    async def add(self, task_id: TaskId, payload: Any) -> bool:
        return await asyncio.to_thread(self._add_sync, task_id, payload)

    async def update(self, task_id: TaskId, status: TaskStatus) -> None:
        await asyncio.to_thread(self._update_sync, task_id, status)
