"""Core interfaces (ports) for dependency injection."""

from stockwatch.core.interfaces.stock_repository import (
    IStockRepository,
    ItemChange,
    ItemChangeHandler,
    Unsubscribe,
)

__all__ = [
    "IStockRepository",
    "ItemChange",
    "ItemChangeHandler",
    "Unsubscribe",
]
