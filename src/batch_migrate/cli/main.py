# src/batch_migrate/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds the SQLite task store, then dispatches a subcommand:
- run:    drive the migration until the store runs dry or a batch fails
- status: task counts per status
- clear:  remove every task
- add:    enqueue one PENDING task
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from ..cli.bootstrap import create_driver, create_task_store
from ..config import get_settings
from ..errors import MigrationError
from ..logging_setup import setup_logging
from ..tasks.task_models import TaskStatus

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ROLLED_BACK = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def _positive_int(raw: str) -> int:
    try:
        n = int(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not an integer: {raw!r}") from e
    if n < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return n


def _positive_float(raw: str) -> float:
    try:
        x = float(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not a number: {raw!r}") from e
    if x <= 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return x


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batch-migrate",
        description="Batch task-migration driver (take, apply, commit or roll back).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Process pending tasks until done or a batch fails")
    run.add_argument(
        "--hooks",
        default=None,
        help="Migration hooks as 'package.module:attr' (default: MIGRATE_HOOKS)",
    )
    run.add_argument(
        "--concurrency",
        type=_positive_int,
        default=None,
        help="Batch size and in-flight apply limit (default: MIGRATE_CONCURRENCY or 1)",
    )
    run.add_argument(
        "--item-timeout",
        type=_positive_float,
        default=None,
        help="Per-item apply timeout in seconds (default: none)",
    )

    subparsers.add_parser("status", help="Show task counts per status")
    subparsers.add_parser("clear", help="Remove all tasks from the store")

    add = subparsers.add_parser("add", help="Enqueue one PENDING task")
    add.add_argument("task_id", help="Task identity")
    add.add_argument("--payload", default="null", help="Task payload as JSON (default: null)")
    add.add_argument("--int-id", action="store_true", help="Store the identity as an integer")

    return parser


def _cmd_run(args: argparse.Namespace, settings) -> int:
    driver = create_driver(
        settings=settings,
        hooks_spec=args.hooks,
        item_timeout_seconds=args.item_timeout,
    )
    concurrency = args.concurrency or settings.concurrency
    logger.info("Starting %s concurrency=%d", settings.app_name, concurrency)

    result = asyncio.run(driver.process(concurrency))
    if result.ok:
        print(f"Migrated {result.processed} record(s) in {result.batches} batch(es).")
        return EXIT_OK

    print(
        f"Migration rolled back after {result.processed} record(s); "
        f"{len(result.errors)} error(s) in the failing batch.",
        file=sys.stderr,
    )
    return EXIT_ROLLED_BACK


def _cmd_status(settings) -> int:
    store = create_task_store(settings=settings)
    counts = store.count_by_status()
    for status in TaskStatus:
        print(f"{status.value:<8} {counts[status]}")
    print(f"{'TOTAL':<8} {sum(counts.values())}")
    return EXIT_OK


def _cmd_clear(settings) -> int:
    store = create_task_store(settings=settings)
    asyncio.run(store.clear())
    print("Cleared all tasks.")
    return EXIT_OK


def _cmd_add(args: argparse.Namespace, settings) -> int:
    try:
        payload = json.loads(args.payload)
    except json.JSONDecodeError as e:
        print(f"Invalid --payload JSON: {e}", file=sys.stderr)
        return EXIT_USAGE

    task_id: str | int = args.task_id
    if args.int_id:
        try:
            task_id = int(args.task_id)
        except ValueError:
            print(f"--int-id given but {args.task_id!r} is not an integer", file=sys.stderr)
            return EXIT_USAGE

    store = create_task_store(settings=settings)
    if not asyncio.run(store.add(task_id, payload)):
        print(f"Task {task_id!r} already exists.", file=sys.stderr)
        return EXIT_USAGE
    print(f"Added task {task_id!r}.")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()

    console_level = getattr(logging, settings.log_level, logging.INFO)
    log_file = setup_logging(log_dir=settings.log_dir, console_level=console_level)
    logger.debug("Logging to %s", log_file)

    try:
        if args.command == "run":
            return _cmd_run(args, settings)
        if args.command == "status":
            return _cmd_status(settings)
        if args.command == "clear":
            return _cmd_clear(settings)
        if args.command == "add":
            return _cmd_add(args, settings)
    except MigrationError as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
        return EXIT_INTERRUPTED

    parser.error(f"Unknown command: {args.command}")
    return EXIT_USAGE


if __name__ == "__main__":
    raise SystemExit(main())
