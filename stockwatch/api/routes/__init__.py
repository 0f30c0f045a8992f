"""API routes."""

from stockwatch.api.routes.alerts import router as alerts_router
from stockwatch.api.routes.health import router as health_router
from stockwatch.api.routes.inventory import router as inventory_router
from stockwatch.api.routes.purchase_orders import router as purchase_orders_router

__all__ = [
    "alerts_router",
    "health_router",
    "inventory_router",
    "purchase_orders_router",
]
