"""Stock alert endpoints."""

from fastapi import APIRouter, Depends, Query

from stockwatch.api.dependencies import get_feed, get_monitor, get_running_monitor
from stockwatch.application.dto.responses import (
    AlertNotificationResponse,
    AlertsResponse,
    ErrorResponse,
    StockAlertResponse,
)
from stockwatch.core.entities.inventory import AlertSeverity, StockAlert
from stockwatch.core.services import MonitoringLoop, RecentAlertsFeed

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


def _alerts_response(monitor: MonitoringLoop | None, alerts: list[StockAlert]) -> AlertsResponse:
    return AlertsResponse(
        alerts=[StockAlertResponse.from_entity(alert) for alert in alerts],
        critical=sum(1 for a in alerts if a.severity == AlertSeverity.CRITICAL),
        low_stock=sum(1 for a in alerts if a.severity == AlertSeverity.LOW_STOCK),
        monitoring=monitor is not None and monitor.is_running,
        last_checked_at=monitor.last_checked_at if monitor is not None else None,
    )


@router.get("", response_model=AlertsResponse)
async def get_alerts(
    monitor: MonitoringLoop | None = Depends(get_monitor),
) -> AlertsResponse:
    """Alerts from the last completed monitoring cycle."""
    alerts = monitor.current_alerts if monitor is not None else []
    return _alerts_response(monitor, alerts)


@router.get("/recent", response_model=list[AlertNotificationResponse])
async def get_recent_notifications(
    limit: int = Query(default=20, ge=1, le=500),
    feed: RecentAlertsFeed = Depends(get_feed),
) -> list[AlertNotificationResponse]:
    """Newly raised alerts, newest first."""
    return [
        AlertNotificationResponse(
            title=n.title,
            description=n.description,
            severity=n.alert.severity.value,
            item_id=n.alert.item_id,
            raised_at=n.raised_at,
        )
        for n in feed.recent(limit)
    ]


@router.post(
    "/check",
    response_model=AlertsResponse,
    responses={503: {"model": ErrorResponse}},
)
async def check_stock_levels(
    monitor: MonitoringLoop = Depends(get_running_monitor),
) -> AlertsResponse:
    """Re-evaluate stock levels now."""
    alerts = await monitor.check_now()
    return _alerts_response(monitor, alerts if alerts is not None else monitor.current_alerts)
