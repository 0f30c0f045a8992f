"""SQLite storage implementations."""

from stockwatch.infrastructure.storage.sqlite.change_feed import (
    DataVersionWatcher,
    ItemChangeHub,
)
from stockwatch.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_pool,
    open_connection,
)
from stockwatch.infrastructure.storage.sqlite.stock_repository import SQLiteStockRepository

# Singleton instances
_stock_repository: SQLiteStockRepository | None = None


async def get_stock_repository() -> SQLiteStockRepository:
    """Get singleton stock repository instance."""
    global _stock_repository
    if _stock_repository is None:
        _stock_repository = SQLiteStockRepository(pool=await get_pool())
    return _stock_repository


def reset_stock_repository() -> None:
    """Drop the singleton repository (for testing and shutdown)."""
    global _stock_repository
    _stock_repository = None


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "open_connection",
    # Change notifications
    "DataVersionWatcher",
    "ItemChangeHub",
    # Store classes
    "SQLiteStockRepository",
    # Factory functions
    "get_stock_repository",
    "reset_stock_repository",
]
