"""
Response DTOs for API endpoints.

Pydantic models for API responses.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from stockwatch.core.entities.inventory import InventoryItem, StockAlert, StockMovement
from stockwatch.core.entities.purchase_order import PurchaseOrder, PurchaseOrderDraft


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. ITEM_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    uptime_seconds: float
    database: str | None = None
    monitoring: bool | None = None


# --- Inventory ---


class InventoryItemResponse(BaseModel):
    """Inventory item response DTO."""

    id: int
    name: str
    sku: str
    category_id: int | None = None
    supplier_id: int | None = None
    supplier_name: str | None = None
    current_stock: int
    minimum_stock: int
    unit_price: int
    total_value: int
    status: str
    last_updated: datetime

    @classmethod
    def from_entity(cls, item: InventoryItem) -> "InventoryItemResponse":
        return cls(
            id=item.id,  # type: ignore[arg-type]
            name=item.name,
            sku=item.sku,
            category_id=item.category_id,
            supplier_id=item.supplier_id,
            supplier_name=item.supplier_name,
            current_stock=item.current_stock,
            minimum_stock=item.minimum_stock,
            unit_price=item.unit_price,
            total_value=item.total_value,
            status=item.status.value,
            last_updated=item.last_updated,
        )


class StockMovementResponse(BaseModel):
    """Stock movement response DTO."""

    id: int
    inventory_item_id: int
    movement_type: str
    quantity: int
    previous_stock: int
    new_stock: int
    delta: int
    reason: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, movement: StockMovement) -> "StockMovementResponse":
        return cls(
            id=movement.id,  # type: ignore[arg-type]
            inventory_item_id=movement.inventory_item_id,
            movement_type=movement.movement_type.value,
            quantity=movement.quantity,
            previous_stock=movement.previous_stock,
            new_stock=movement.new_stock,
            delta=movement.delta,
            reason=movement.reason,
            created_at=movement.created_at,
        )


class AdjustStockResponse(BaseModel):
    """Response for a stock adjustment."""

    inventory_item: InventoryItemResponse
    movement: StockMovementResponse


class InventoryListResponse(BaseModel):
    """One page of the inventory listing."""

    items: list[InventoryItemResponse]
    count: int = Field(..., description="Number of items on this page")


# --- Alerts ---


class StockAlertResponse(BaseModel):
    """A current stock alert."""

    item_id: int
    name: str
    sku: str
    current_stock: int
    minimum_stock: int
    severity: str
    supplier_name: str | None = None

    @classmethod
    def from_entity(cls, alert: StockAlert) -> "StockAlertResponse":
        return cls(
            item_id=alert.item_id,
            name=alert.name,
            sku=alert.sku,
            current_stock=alert.current_stock,
            minimum_stock=alert.minimum_stock,
            severity=alert.severity.value,
            supplier_name=alert.supplier_name,
        )


class AlertsResponse(BaseModel):
    """Current alert set and monitoring state."""

    alerts: list[StockAlertResponse]
    critical: int
    low_stock: int
    monitoring: bool
    last_checked_at: datetime | None = None


class AlertNotificationResponse(BaseModel):
    """A new-alert notification as shown to users."""

    title: str
    description: str
    severity: str
    item_id: int
    raised_at: datetime


# --- Purchase Orders ---


class DraftLineResponse(BaseModel):
    """Suggested order line."""

    inventory_item_id: int
    name: str
    sku: str
    suggested_quantity: int
    unit_price: int
    line_total: int


class PurchaseOrderDraftResponse(BaseModel):
    """Unconfirmed purchase order for one supplier."""

    supplier_id: int
    supplier_name: str | None = None
    lines: list[DraftLineResponse]
    total_amount: int

    @classmethod
    def from_entity(cls, draft: PurchaseOrderDraft) -> "PurchaseOrderDraftResponse":
        return cls(
            supplier_id=draft.supplier_id,
            supplier_name=draft.supplier_name,
            lines=[
                DraftLineResponse(
                    inventory_item_id=line.inventory_item_id,
                    name=line.name,
                    sku=line.sku,
                    suggested_quantity=line.suggested_quantity,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                )
                for line in draft.lines
            ],
            total_amount=draft.total_amount,
        )


class PurchaseOrderLineResponse(BaseModel):
    """Persisted order line."""

    inventory_item_id: int
    quantity: int
    unit_price: int
    total_price: int


class PurchaseOrderResponse(BaseModel):
    """Persisted purchase order."""

    id: int
    po_number: str
    supplier_id: int
    status: str
    order_date: date
    total_amount: int
    created_at: datetime
    lines: list[PurchaseOrderLineResponse] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, order: PurchaseOrder) -> "PurchaseOrderResponse":
        return cls(
            id=order.id,  # type: ignore[arg-type]
            po_number=order.po_number,
            supplier_id=order.supplier_id,
            status=order.status.value,
            order_date=order.order_date,
            total_amount=order.total_amount,
            created_at=order.created_at,
            lines=[
                PurchaseOrderLineResponse(
                    inventory_item_id=line.inventory_item_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    total_price=line.total_price,
                )
                for line in order.lines
            ],
        )


class SupplierOrderResult(BaseModel):
    """Outcome for one supplier in an auto-generate batch."""

    supplier_id: int
    success: bool
    order: PurchaseOrderResponse | None = None
    error_code: str | None = None
    error: str | None = None


class AutoGenerateResponse(BaseModel):
    """Per-supplier results of automatic purchase order generation."""

    results: list[SupplierOrderResult]
    created: int
    failed: int
    partial_failure: bool
