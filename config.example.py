# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "MIGRATE_APP_NAME": "App display name used in log lines (default: batch-migrate).",
    "MIGRATE_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "MIGRATE_DATA_DIR": "Local data directory (default: .local/migrate).",
    "MIGRATE_TASKS_DB_PATH": "SQLite task store path (default: <data_dir>/tasks.sqlite3).",
    "MIGRATE_LOG_DIR": "Directory for migrate.log (default: <data_dir>).",
    # Driver tuning
    "MIGRATE_CONCURRENCY": "Batch size and in-flight apply limit (default: 1).",
    "MIGRATE_REPORT_INTERVAL_SECONDS": "Progress log interval in seconds (default: 5).",
    "MIGRATE_ITEM_TIMEOUT_SECONDS": "Per-item apply timeout in seconds (default: unset, no timeout).",
    # Hooks
    "MIGRATE_HOOKS": "Default migration hooks as 'package.module:attr' (overridden by --hooks).",
}
