#!/usr/bin/env python3
"""
Stockwatch management CLI.

Usage:
    python manage.py migrate     Apply pending database migrations
    python manage.py status      Show applied and pending migrations
    python manage.py check       Evaluate stock levels once and print alerts
    python manage.py monitor     Run the monitoring loop until interrupted
    python manage.py serve       Start the API server
"""

import argparse
import asyncio
import sys

from stockwatch.config import configure_logging, get_settings


def cmd_migrate(args: argparse.Namespace) -> None:
    from stockwatch.infrastructure.storage.sqlite.migrations import run_migrations

    results = asyncio.run(run_migrations())
    if not results:
        print("Database is up to date.")
        return
    for result in results:
        state = "ok" if result.success else f"FAILED: {result.error}"
        print(f"  v{result.version}_{result.name}: {state} ({result.execution_time_ms} ms)")
    if not all(r.success for r in results):
        sys.exit(1)


def cmd_status(args: argparse.Namespace) -> None:
    from stockwatch.infrastructure.storage.sqlite.migrations import get_migration_status

    status = asyncio.run(get_migration_status())
    if not status["exists"]:
        print("Database does not exist yet. Run: python manage.py migrate")
    print(f"Applied: {', '.join(status['applied_migrations']) or '-'}")
    print(f"Pending: {', '.join(status['pending_migrations']) or '-'}")


async def _check_once() -> int:
    from stockwatch.core.services import AlertEngine
    from stockwatch.infrastructure.storage.sqlite import close_pool, get_stock_repository

    try:
        repository = await get_stock_repository()
        alerts = AlertEngine().evaluate(await repository.fetch_under_threshold())
    finally:
        await close_pool()

    if not alerts:
        print("All items are above their minimum stock.")
        return 0
    for alert in alerts:
        print(f"[{alert.severity.value:>9}] {alert.description}")
    return 1


def cmd_check(args: argparse.Namespace) -> None:
    exit_code = asyncio.run(_check_once())
    if args.fail_on_alerts:
        sys.exit(exit_code)


async def _monitor_forever(interval: float | None) -> None:
    from stockwatch.application.monitoring import shutdown_monitoring, start_monitoring
    from stockwatch.infrastructure.storage.sqlite import close_pool

    settings = get_settings()
    if interval is not None:
        settings.monitoring.interval_seconds = interval

    await start_monitoring(settings=settings)
    try:
        await asyncio.Event().wait()
    finally:
        await shutdown_monitoring()
        await close_pool()


def cmd_monitor(args: argparse.Namespace) -> None:
    print("Monitoring stock levels. Press Ctrl+C to stop.")
    try:
        asyncio.run(_monitor_forever(args.interval))
    except KeyboardInterrupt:
        print("\nStopped.")


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "stockwatch.api.main:app",
        host=args.host or settings.api.host,
        port=args.port or settings.api.port,
        reload=args.reload,
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Stockwatch management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override LOG_LEVEL for this run",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_migrate = sub.add_parser("migrate", help="Apply pending database migrations")
    p_migrate.set_defaults(func=cmd_migrate)

    p_status = sub.add_parser("status", help="Show migration status")
    p_status.set_defaults(func=cmd_status)

    p_check = sub.add_parser("check", help="Evaluate stock levels once")
    p_check.add_argument(
        "--fail-on-alerts",
        action="store_true",
        help="Exit with status 1 when any item is at or below its minimum",
    )
    p_check.set_defaults(func=cmd_check)

    p_monitor = sub.add_parser("monitor", help="Run the monitoring loop")
    p_monitor.add_argument("--interval", type=float, default=None, help="Seconds between checks")
    p_monitor.set_defaults(func=cmd_monitor)

    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args()
    configure_logging(args.log_level)
    args.func(args)


if __name__ == "__main__":
    main()
