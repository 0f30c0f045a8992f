"""Consumers of newly raised stock alerts."""

from __future__ import annotations

from collections import deque
from collections.abc import Awaitable, Callable
from datetime import datetime

from pydantic import BaseModel, Field

from stockwatch.config import get_logger
from stockwatch.core.entities.inventory import AlertSeverity, StockAlert, utcnow

logger = get_logger(__name__, component="alerts")

AlertSink = Callable[[list[StockAlert]], Awaitable[None] | None]


class AlertNotification(BaseModel):
    """A new alert as it was surfaced to users."""

    alert: StockAlert
    title: str
    description: str
    raised_at: datetime = Field(default_factory=utcnow)


class LoggingAlertSink:
    """Writes one log event per new alert."""

    def __call__(self, alerts: list[StockAlert]) -> None:
        for alert in alerts:
            log = logger.warning if alert.severity == AlertSeverity.CRITICAL else logger.info
            log(
                "stock_alert_raised",
                title=alert.title,
                item_id=alert.item_id,
                sku=alert.sku,
                severity=alert.severity.value,
                current_stock=alert.current_stock,
                minimum_stock=alert.minimum_stock,
                supplier=alert.supplier_name,
            )


class RecentAlertsFeed:
    """Bounded, newest-first history of new-alert notifications."""

    def __init__(self, maxlen: int = 100) -> None:
        self._items: deque[AlertNotification] = deque(maxlen=maxlen)

    def __call__(self, alerts: list[StockAlert]) -> None:
        for alert in alerts:
            self._items.appendleft(
                AlertNotification(
                    alert=alert,
                    title=alert.title,
                    description=alert.description,
                )
            )

    def recent(self, limit: int | None = None) -> list[AlertNotification]:
        items = list(self._items)
        return items if limit is None else items[:limit]

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
