"""Purchase order domain entities."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from stockwatch.core.entities.inventory import utcnow


class PurchaseOrderStatus(str, Enum):
    """Lifecycle states of a purchase order."""

    PENDING = "pending"
    APPROVED = "approved"
    ORDERED = "ordered"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class DraftLine(BaseModel):
    """A suggested order line for one inventory item."""

    inventory_item_id: int
    name: str
    sku: str
    suggested_quantity: int = Field(gt=0)
    unit_price: int = Field(ge=0)

    @property
    def line_total(self) -> int:
        return self.suggested_quantity * self.unit_price


class PurchaseOrderDraft(BaseModel):
    """Unconfirmed purchase order for a single supplier."""

    supplier_id: int
    supplier_name: str | None = None
    lines: list[DraftLine] = Field(default_factory=list)

    @property
    def total_amount(self) -> int:
        return sum(line.line_total for line in self.lines)


class PurchaseOrderLine(BaseModel):
    """Persisted line item of a purchase order."""

    id: int | None = None
    purchase_order_id: int | None = None
    inventory_item_id: int
    quantity: int = Field(gt=0)
    unit_price: int = Field(ge=0)
    total_price: int = Field(ge=0)


class PurchaseOrder(BaseModel):
    """Persisted purchase order header with its lines."""

    id: int | None = None
    po_number: str
    supplier_id: int
    status: PurchaseOrderStatus = PurchaseOrderStatus.PENDING
    order_date: date = Field(default_factory=date.today)
    total_amount: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
    lines: list[PurchaseOrderLine] = Field(default_factory=list)
