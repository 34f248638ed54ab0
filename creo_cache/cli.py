#!/usr/bin/env python3
"""
Cache Command-Line Utility

Operational commands against the configured cache backend:

    creo-cache health            probe the backend (exit 1 when unhealthy)
    creo-cache stats             combined local + edge statistics
    creo-cache warm              run all warm jobs (exit 1 if any job failed)
    creo-cache clear --yes       drop every entry in the namespace

Results are printed to stdout as JSON; failures are reported on stderr with
a non-zero exit code.

Author: Creo Platform Team
Date: 2026-01-14
"""

import argparse
import asyncio
import sys
from collections.abc import Awaitable, Callable
from datetime import datetime
from enum import Enum
from typing import Any

import orjson

from creo_cache.application.runtime import CacheRuntime
from creo_cache.config.settings import get_settings
from creo_cache.core.exceptions import CacheCoreError
from creo_cache.core.logging.logger import get_logger, setup_logging

logger = get_logger(__name__)


class ExitCode(Enum):
    SUCCESS = 0
    FAILURE = 1
    USAGE = 2


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="creo-cache",
        description="Shared cache operations: health, statistics, warming and clearing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s health                   # Probe the backend
  %(prog)s stats                    # Print combined statistics
  %(prog)s warm --require-jobs      # Warm all hot keys
  %(prog)s clear --yes              # Drop every cache entry
        """,
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override LOG_LEVEL",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("health", help="Probe the cache backend")
    subparsers.add_parser("stats", help="Print combined cache statistics")

    warm = subparsers.add_parser("warm", help="Run all registered warm jobs")
    warm.add_argument(
        "--require-jobs", action="store_true", help="Fail when no warm jobs are registered"
    )

    clear = subparsers.add_parser("clear", help="Remove every entry in the cache namespace")
    clear.add_argument("--yes", action="store_true", help="Confirm the destructive clear")

    return parser


def _emit(payload: dict[str, Any]) -> None:
    sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode("utf-8") + "\n")


def _timestamp() -> str:
    return datetime.utcnow().isoformat() + "Z"


async def _health(runtime: CacheRuntime, args: argparse.Namespace) -> ExitCode:
    health = await runtime.store.health()
    _emit(health.to_dict())
    if not health.is_healthy:
        sys.stderr.write(f"Cache unhealthy: {health.error}\n")
        return ExitCode.FAILURE
    return ExitCode.SUCCESS


async def _stats(runtime: CacheRuntime, args: argparse.Namespace) -> ExitCode:
    _emit(await runtime.stats_service.get_stats())
    return ExitCode.SUCCESS


async def _warm(runtime: CacheRuntime, args: argparse.Namespace) -> ExitCode:
    report = await runtime.warmer.warm_all(require_jobs=args.require_jobs)
    _emit({"timestamp": _timestamp(), **report.to_dict()})
    if not report.ok:
        names = ", ".join(job.name for job in report.failed)
        sys.stderr.write(f"Warm jobs failed: {names}\n")
        return ExitCode.FAILURE
    return ExitCode.SUCCESS


async def _clear(runtime: CacheRuntime, args: argparse.Namespace) -> ExitCode:
    await runtime.store.clear()
    _emit({"message": "Cache cleared successfully", "timestamp": _timestamp()})
    return ExitCode.SUCCESS


COMMANDS: dict[str, Callable[[CacheRuntime, argparse.Namespace], Awaitable[ExitCode]]] = {
    "health": _health,
    "stats": _stats,
    "warm": _warm,
    "clear": _clear,
}


async def run_command(runtime: CacheRuntime, args: argparse.Namespace) -> ExitCode:
    """
    Start the runtime, run one command, and always close the runtime.

    The health command tolerates a backend that is down at startup: the
    probe itself reports it.
    """
    try:
        try:
            await runtime.start()
        except CacheCoreError:
            if args.command != "health":
                raise
        return await COMMANDS[args.command](runtime, args)
    finally:
        await runtime.close()


def main(argv: list[str] | None = None) -> int:
    """Application entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command == "clear" and not args.yes:
        sys.stderr.write("Refusing to clear the cache without --yes\n")
        return ExitCode.USAGE.value

    settings = get_settings()
    setup_logging(log_level=args.log_level or settings.logging.LOG_LEVEL)

    # Scheduled warming and startup warming belong to the server process
    settings = settings.model_copy(update={"WARM_ON_STARTUP": False, "WARM_SCHEDULE_ENABLED": False})

    try:
        runtime = CacheRuntime.build(settings)
        return asyncio.run(run_command(runtime, args)).value
    except KeyboardInterrupt:
        sys.stderr.write("Interrupted\n")
        return ExitCode.FAILURE.value
    except CacheCoreError as e:
        sys.stderr.write(f"{type(e).__name__}: {e.message}\n")
        return ExitCode.FAILURE.value
    except Exception as e:
        logger.error("Unexpected error", error=str(e), error_type=type(e).__name__, exc_info=True)
        sys.stderr.write(f"Unexpected error: {e}\n")
        return ExitCode.FAILURE.value


if __name__ == "__main__":
    sys.exit(main())
