"""
Process-wide stock monitoring.

One MonitoringLoop per process, created and started by ``start_monitoring``
at application startup and stopped by ``shutdown_monitoring``. Nothing else
starts it.
"""

from stockwatch.config import Settings, get_logger, get_settings
from stockwatch.core.interfaces.stock_repository import IStockRepository
from stockwatch.core.services.alert_sinks import LoggingAlertSink, RecentAlertsFeed
from stockwatch.core.services.monitoring_loop import MonitoringLoop
from stockwatch.infrastructure.storage.sqlite.change_feed import DataVersionWatcher

logger = get_logger(__name__, component="monitor")

_monitor: MonitoringLoop | None = None
_feed: RecentAlertsFeed | None = None
_watcher: DataVersionWatcher | None = None


def get_monitoring_loop() -> MonitoringLoop | None:
    """The process monitoring loop, or None before start_monitoring."""
    return _monitor


def get_alerts_feed() -> RecentAlertsFeed:
    """Recent new-alert notifications."""
    global _feed
    if _feed is None:
        _feed = RecentAlertsFeed(maxlen=get_settings().monitoring.recent_alerts_size)
    return _feed


async def start_monitoring(
    repository: IStockRepository | None = None,
    settings: Settings | None = None,
) -> MonitoringLoop:
    """Create the process monitoring loop and start it."""
    global _monitor, _watcher
    settings = settings or get_settings()

    if _monitor is not None:
        return _monitor

    if repository is None:
        from stockwatch.infrastructure.storage.sqlite import get_stock_repository

        repository = await get_stock_repository()

    _monitor = MonitoringLoop(
        repository,
        sinks=[LoggingAlertSink(), get_alerts_feed()],
        interval_seconds=settings.monitoring.interval_seconds,
        debounce_seconds=settings.monitoring.debounce_seconds,
    )

    if settings.monitoring.poll_changes:
        from stockwatch.infrastructure.storage.sqlite import SQLiteStockRepository

        if isinstance(repository, SQLiteStockRepository):
            _watcher = DataVersionWatcher(
                settings.storage.db_path,
                repository.hub,
                poll_interval=settings.monitoring.poll_interval_seconds,
            )
            await _watcher.start()
        else:
            logger.warning("change_polling_unsupported", repository=type(repository).__name__)

    _monitor.start()
    return _monitor


async def shutdown_monitoring() -> None:
    """Stop the process monitoring loop and release its resources."""
    global _monitor, _watcher
    if _watcher is not None:
        await _watcher.stop()
        _watcher = None
    if _monitor is not None:
        _monitor.stop()
        await _monitor.drain()
        _monitor = None


def reset_monitoring() -> None:
    """Forget the singletons without awaiting anything (for testing)."""
    global _monitor, _feed, _watcher
    if _monitor is not None:
        _monitor.stop()
    _monitor = None
    _feed = None
    _watcher = None
