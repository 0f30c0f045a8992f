"""
Dependency injection container for FastAPI.

Provides repository, monitoring and use case instances to route handlers.
"""

from fastapi import HTTPException, status

from stockwatch.application.monitoring import get_alerts_feed, get_monitoring_loop
from stockwatch.application.use_cases import AdjustStockUseCase, GeneratePurchaseOrdersUseCase
from stockwatch.config import Settings, get_settings
from stockwatch.core.interfaces import IStockRepository
from stockwatch.core.services import MonitoringLoop, RecentAlertsFeed
from stockwatch.infrastructure.storage.sqlite import get_stock_repository


def get_app_settings() -> Settings:
    """Get application settings."""
    return get_settings()


async def get_repository() -> IStockRepository:
    """Get stock repository."""
    return await get_stock_repository()


def get_monitor() -> MonitoringLoop | None:
    """Get the process monitoring loop, if started."""
    return get_monitoring_loop()


def get_running_monitor() -> MonitoringLoop:
    """Get the process monitoring loop; 503 when it is not running."""
    monitor = get_monitoring_loop()
    if monitor is None or not monitor.is_running:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Stock monitoring is not running",
        )
    return monitor


def get_feed() -> RecentAlertsFeed:
    """Get recent alert notifications."""
    return get_alerts_feed()


async def get_adjust_stock_use_case() -> AdjustStockUseCase:
    """Get adjust stock use case."""
    return AdjustStockUseCase(repository=await get_repository(), monitor=get_monitor())


async def get_generate_purchase_orders_use_case() -> GeneratePurchaseOrdersUseCase:
    """Get generate purchase orders use case."""
    return GeneratePurchaseOrdersUseCase(repository=await get_repository(), monitor=get_monitor())
