"""
Stock monitoring loop.

Re-evaluates stock alerts on a fixed interval and shortly after the
repository reports item changes. Runs on the caller's asyncio event loop;
cycles never overlap.
"""

from __future__ import annotations

import asyncio
import inspect
from datetime import datetime

from stockwatch.config import get_logger
from stockwatch.core.entities.inventory import StockAlert, utcnow
from stockwatch.core.exceptions import StorageError
from stockwatch.core.interfaces.stock_repository import (
    IStockRepository,
    ItemChange,
    Unsubscribe,
)
from stockwatch.core.services.alert_engine import AlertEngine
from stockwatch.core.services.alert_sinks import AlertSink

logger = get_logger(__name__, component="monitor")

DEFAULT_INTERVAL_SECONDS = 30.0
DEFAULT_DEBOUNCE_SECONDS = 1.0


class MonitoringHandle:
    """Returned by MonitoringLoop.start; cancelling it stops the loop."""

    def __init__(self, monitor: MonitoringLoop, generation: int) -> None:
        self._monitor = monitor
        self.generation = generation
        self.active = True

    def cancel(self) -> None:
        self._monitor.stop(self)


class MonitoringLoop:
    """
    Periodic and change-driven stock alert monitoring.

    Keeps the set of item ids alerted in the last completed cycle and
    notifies sinks only about alerts that were not in that set.
    """

    def __init__(
        self,
        repository: IStockRepository,
        engine: AlertEngine | None = None,
        sinks: list[AlertSink] | None = None,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._repository = repository
        self._engine = engine or AlertEngine()
        self._sinks: list[AlertSink] = list(sinks or [])
        self._interval = interval_seconds
        self._debounce = debounce_seconds

        self._retained_ids: set[int] = set()
        self._current_alerts: list[StockAlert] = []
        self._last_checked_at: datetime | None = None
        self._cycle_count = 0

        self._handle: MonitoringHandle | None = None
        self._generation = 0
        self._loop: asyncio.AbstractEventLoop | None = None
        self._periodic_task: asyncio.Task | None = None
        self._cycle_task: asyncio.Task | None = None
        self._debounce_timer: asyncio.TimerHandle | None = None
        self._unsubscribe: Unsubscribe | None = None
        self._in_flight = False

    # State

    @property
    def is_running(self) -> bool:
        return self._handle is not None and self._handle.active

    @property
    def current_alerts(self) -> list[StockAlert]:
        return list(self._current_alerts)

    @property
    def retained_ids(self) -> frozenset[int]:
        return frozenset(self._retained_ids)

    @property
    def last_checked_at(self) -> datetime | None:
        return self._last_checked_at

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @property
    def interval_seconds(self) -> float:
        return self._interval

    def add_sink(self, sink: AlertSink) -> None:
        self._sinks.append(sink)

    # Lifecycle

    def start(self, interval_seconds: float | None = None) -> MonitoringHandle:
        """
        Start monitoring on the running event loop.

        Runs one cycle right away, then one every ``interval_seconds``.
        Starting a running loop returns its existing handle.
        """
        if self._handle is not None and self._handle.active:
            return self._handle

        if interval_seconds is not None:
            if interval_seconds <= 0:
                raise ValueError("interval_seconds must be positive")
            self._interval = interval_seconds

        self._loop = asyncio.get_running_loop()
        self._generation += 1
        handle = MonitoringHandle(self, self._generation)
        self._handle = handle
        self._in_flight = False

        self._unsubscribe = self._repository.subscribe_to_item_changes(
            self._on_item_change
        )
        self._spawn_cycle(handle, "startup")
        self._periodic_task = self._loop.create_task(self._run_periodic(handle))

        logger.info(
            "monitoring_started",
            generation=handle.generation,
            interval_seconds=self._interval,
            debounce_seconds=self._debounce,
        )
        return handle

    def stop(self, handle: MonitoringHandle | None = None) -> None:
        """
        Stop monitoring. Safe to call any number of times.

        No cycle is started after this returns. A cycle whose repository
        call is still pending completes, but its result is discarded.
        """
        current = self._handle
        if handle is not None and handle is not current:
            handle.active = False
            return
        if current is None or not current.active:
            return

        current.active = False
        self._in_flight = False

        if self._periodic_task is not None:
            self._periodic_task.cancel()

        if self._debounce_timer is not None:
            self._debounce_timer.cancel()
            self._debounce_timer = None

        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            try:
                unsubscribe()
            except Exception as e:
                logger.warning("monitoring_unsubscribe_failed", error=str(e))

        logger.info("monitoring_stopped", generation=current.generation)

    async def drain(self) -> None:
        """Wait for the cycle in flight and, once stopped, for the timer task to unwind."""
        tasks = [self._cycle_task]
        if not self.is_running:
            tasks.append(self._periodic_task)
        pending = [t for t in tasks if t is not None and not t.done()]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # Triggers

    async def check_now(self) -> list[StockAlert] | None:
        """
        Re-evaluate immediately, e.g. after a stock write.

        When a cycle is already in flight the re-check is deferred to the
        debounce timer. Returns the alerts of the cycle run here, or None.
        """
        handle = self._handle
        if handle is None or not handle.active:
            return None
        if self._in_flight:
            self._arm_debounce(handle)
            return None
        self._in_flight = True
        return await self._run_cycle(handle, "manual")

    def _on_item_change(self, change: ItemChange) -> None:
        handle = self._handle
        if handle is None or not handle.active:
            return
        logger.debug(
            "inventory_change_detected",
            operation=change.operation,
            item_id=change.item_id,
        )
        self._arm_debounce(handle)

    def _arm_debounce(self, handle: MonitoringHandle) -> None:
        if self._debounce_timer is not None or self._loop is None:
            return
        self._debounce_timer = self._loop.call_later(
            self._debounce, self._on_debounce_elapsed, handle
        )

    def _on_debounce_elapsed(self, handle: MonitoringHandle) -> None:
        self._debounce_timer = None
        self._spawn_cycle(handle, "change")

    async def _run_periodic(self, handle: MonitoringHandle) -> None:
        while handle.active:
            await asyncio.sleep(self._interval)
            self._spawn_cycle(handle, "interval")

    def _spawn_cycle(self, handle: MonitoringHandle, trigger: str) -> None:
        if not handle.active or handle is not self._handle or self._loop is None:
            return
        if self._in_flight:
            logger.debug("monitoring_cycle_skipped", trigger=trigger)
            return
        self._in_flight = True
        self._cycle_task = self._loop.create_task(self._run_cycle(handle, trigger))

    # Cycle

    async def _run_cycle(
        self, handle: MonitoringHandle, trigger: str
    ) -> list[StockAlert] | None:
        try:
            try:
                snapshot = await self._repository.fetch_under_threshold()
            except StorageError as e:
                logger.warning(
                    "monitoring_cycle_failed",
                    trigger=trigger,
                    error_code=e.code,
                    error=str(e),
                    retained=len(self._retained_ids),
                )
                return None

            if not handle.active:
                logger.debug("monitoring_cycle_discarded", trigger=trigger)
                return None

            alerts = self._engine.evaluate(snapshot)
            new_alerts = self._engine.diff_new(self._retained_ids, alerts)

            self._retained_ids = {alert.item_id for alert in alerts}
            self._current_alerts = alerts
            self._last_checked_at = utcnow()
            self._cycle_count += 1

            logger.info(
                "monitoring_cycle_complete",
                trigger=trigger,
                alerts=len(alerts),
                new_alerts=len(new_alerts),
            )

            if new_alerts:
                await self._emit(handle, new_alerts)
            return alerts

        except Exception as e:
            logger.error(
                "monitoring_cycle_error",
                trigger=trigger,
                error=str(e),
                exc_info=True,
            )
            return None
        finally:
            if handle is self._handle and handle.active:
                self._in_flight = False

    async def _emit(self, handle: MonitoringHandle, alerts: list[StockAlert]) -> None:
        for sink in self._sinks:
            if not handle.active:
                logger.debug("alert_emit_stopped", alerts=len(alerts))
                break
            try:
                result = sink(alerts)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    "alert_sink_failed",
                    sink=type(sink).__name__,
                    error=str(e),
                )
