"""
Request DTOs for API endpoints.

Pydantic models for validating incoming requests.
"""

from pydantic import BaseModel, Field

from stockwatch.core.entities.inventory import MAX_STOCK_LEVEL, MovementType


class AdjustStockRequest(BaseModel):
    """Request to change an item's stock level."""

    movement_type: MovementType = Field(
        ...,
        description="'in' and 'out' apply a delta, 'adjustment' sets the new total",
    )
    quantity: int = Field(
        ...,
        ge=0,
        le=MAX_STOCK_LEVEL,
        description="Delta for in/out, new total for adjustment",
    )
    reason: str | None = Field(default=None, max_length=500, description="Why the stock changed")


class SetStockLevelRequest(BaseModel):
    """Request to set an item's stock to an absolute value."""

    new_stock: int = Field(..., ge=0, le=MAX_STOCK_LEVEL, description="Resulting stock level")
    reason: str = Field(default="Manual adjustment", max_length=500)


class PurchaseOrderSelectionRequest(BaseModel):
    """Items selected for automatic purchase order generation."""

    item_ids: list[int] = Field(..., min_length=1, description="Inventory item IDs to reorder")
