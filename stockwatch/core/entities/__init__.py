"""Core domain entities."""

from stockwatch.core.entities.inventory import (
    CRITICAL_RATIO,
    MAX_STOCK_LEVEL,
    AlertSeverity,
    InventoryItem,
    MovementType,
    StockAlert,
    StockMovement,
    StockStatus,
    Supplier,
    classify_stock_level,
)
from stockwatch.core.entities.purchase_order import (
    DraftLine,
    PurchaseOrder,
    PurchaseOrderDraft,
    PurchaseOrderLine,
    PurchaseOrderStatus,
)

__all__ = [
    # Inventory
    "CRITICAL_RATIO",
    "MAX_STOCK_LEVEL",
    "AlertSeverity",
    "InventoryItem",
    "MovementType",
    "StockAlert",
    "StockMovement",
    "StockStatus",
    "Supplier",
    "classify_stock_level",
    # Purchase orders
    "DraftLine",
    "PurchaseOrder",
    "PurchaseOrderDraft",
    "PurchaseOrderLine",
    "PurchaseOrderStatus",
]
