"""Inventory domain entities."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Items at or below this fraction of their minimum are critical
CRITICAL_RATIO = 0.5

# Largest value a SQLite INTEGER column can hold
MAX_STOCK_LEVEL = 2**63 - 1


def utcnow() -> datetime:
    return datetime.now(UTC)


class MovementType(str, Enum):
    """Types of stock movements."""

    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"


class StockStatus(str, Enum):
    """Stock level status derived from current vs minimum stock."""

    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    CRITICAL = "critical"


def classify_stock_level(current_stock: int, minimum_stock: int) -> StockStatus:
    """Classify a stock level.

    Critical when nothing is left or stock is at or below half the minimum,
    low-stock when at or below the minimum, in-stock otherwise.
    """
    if current_stock > minimum_stock:
        return StockStatus.IN_STOCK
    if current_stock == 0 or current_stock <= minimum_stock * CRITICAL_RATIO:
        return StockStatus.CRITICAL
    return StockStatus.LOW_STOCK


class Supplier(BaseModel):
    """Vendor that inventory items are ordered from."""

    id: int | None = None
    name: str
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class InventoryItem(BaseModel):
    """Tracks the stock level of a catalog item.

    ``status`` is never stored; it is recomputed from the stock levels on
    every read.
    """

    id: int | None = None
    name: str
    sku: str
    category_id: int | None = None
    supplier_id: int | None = None
    supplier_name: str | None = None  # joined from suppliers, read-only
    current_stock: int = Field(default=0, ge=0)
    minimum_stock: int = Field(default=0, ge=0)
    unit_price: int = Field(default=0, ge=0)  # minor currency units (cents)
    created_at: datetime = Field(default_factory=utcnow)
    last_updated: datetime = Field(default_factory=utcnow)

    @property
    def status(self) -> StockStatus:
        return classify_stock_level(self.current_stock, self.minimum_stock)

    @property
    def is_under_threshold(self) -> bool:
        return self.current_stock <= self.minimum_stock

    @property
    def total_value(self) -> int:
        """Total inventory value = current_stock * unit_price."""
        return self.current_stock * self.unit_price


class StockMovement(BaseModel):
    """Records a single stock movement (in, out, or adjustment).

    For ``in``/``out`` the quantity is the delta; for ``adjustment`` it is the
    resulting total.
    """

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    inventory_item_id: int
    movement_type: MovementType
    quantity: int = Field(ge=0)
    previous_stock: int = Field(ge=0)
    new_stock: int = Field(ge=0)
    reason: str | None = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def delta(self) -> int:
        return self.new_stock - self.previous_stock


class AlertSeverity(str, Enum):
    """Severity of a stock alert."""

    LOW_STOCK = "low-stock"
    CRITICAL = "critical"


class StockAlert(BaseModel):
    """An item at or below its minimum stock. Derived on each check, never stored."""

    model_config = ConfigDict(frozen=True)

    item_id: int
    name: str
    sku: str
    current_stock: int
    minimum_stock: int
    severity: AlertSeverity
    supplier_name: str | None = None

    @property
    def title(self) -> str:
        if self.severity == AlertSeverity.CRITICAL:
            return "Critical Stock Alert"
        return "Low Stock Alert"

    @property
    def description(self) -> str:
        level = "critically low" if self.severity == AlertSeverity.CRITICAL else "running low"
        return (
            f"{self.name} ({self.sku}) is {level} - "
            f"Current: {self.current_stock}, Minimum: {self.minimum_stock}"
        )
