"""Data transfer objects for the API."""

from stockwatch.application.dto.requests import (
    AdjustStockRequest,
    PurchaseOrderSelectionRequest,
    SetStockLevelRequest,
)
from stockwatch.application.dto.responses import (
    AdjustStockResponse,
    AlertNotificationResponse,
    AlertsResponse,
    AutoGenerateResponse,
    ErrorResponse,
    HealthResponse,
    InventoryItemResponse,
    InventoryListResponse,
    PurchaseOrderDraftResponse,
    PurchaseOrderResponse,
    StockAlertResponse,
    StockMovementResponse,
    SupplierOrderResult,
)

__all__ = [
    # Requests
    "AdjustStockRequest",
    "PurchaseOrderSelectionRequest",
    "SetStockLevelRequest",
    # Responses
    "AdjustStockResponse",
    "AlertNotificationResponse",
    "AlertsResponse",
    "AutoGenerateResponse",
    "ErrorResponse",
    "HealthResponse",
    "InventoryItemResponse",
    "InventoryListResponse",
    "PurchaseOrderDraftResponse",
    "PurchaseOrderResponse",
    "StockAlertResponse",
    "StockMovementResponse",
    "SupplierOrderResult",
]
