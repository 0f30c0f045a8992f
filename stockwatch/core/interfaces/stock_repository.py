"""Abstract interface for stock storage."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from stockwatch.core.entities.inventory import InventoryItem, StockMovement, Supplier
from stockwatch.core.entities.purchase_order import PurchaseOrder, PurchaseOrderLine


@dataclass(frozen=True)
class ItemChange:
    """Notification that the inventory item collection changed."""

    operation: Literal["insert", "update", "delete", "external"]
    item_id: int | None = None


ItemChangeHandler = Callable[[ItemChange], None]
Unsubscribe = Callable[[], None]


class IStockRepository(ABC):
    """Interface for inventory items, stock movements and purchase orders."""

    @abstractmethod
    async def fetch_under_threshold(self) -> list[InventoryItem]:
        """Items whose current stock is at or below their minimum, with supplier name."""
        pass

    @abstractmethod
    async def fetch_item(self, item_id: int) -> InventoryItem | None:
        """Get inventory item by ID."""
        pass

    @abstractmethod
    async def update_item_stock(self, item_id: int, new_stock: int) -> None:
        """Set the current stock of an item."""
        pass

    @abstractmethod
    async def append_movement(self, movement: StockMovement) -> StockMovement:
        """Record a stock movement."""
        pass

    @abstractmethod
    async def record_stock_change(
        self,
        item_id: int,
        expected_stock: int,
        new_stock: int,
        movement: StockMovement,
    ) -> tuple[InventoryItem, StockMovement]:
        """Update item stock and append its movement in one transaction.

        The update only applies if the item still holds ``expected_stock``.
        Raises NoPartialUpdateError when either write does not happen.
        """
        pass

    @abstractmethod
    def subscribe_to_item_changes(self, handler: ItemChangeHandler) -> Unsubscribe:
        """Register a handler fired on any insert/update/delete of items."""
        pass

    @abstractmethod
    async def create_purchase_order(
        self, header: PurchaseOrder, lines: list[PurchaseOrderLine]
    ) -> PurchaseOrder:
        """Persist an order header and all its lines atomically."""
        pass

    # Catalog helpers

    @abstractmethod
    async def create_supplier(self, supplier: Supplier) -> Supplier:
        """Create a new supplier."""
        pass

    @abstractmethod
    async def create_item(self, item: InventoryItem) -> InventoryItem:
        """Create a new inventory item."""
        pass

    @abstractmethod
    async def list_items(
        self, limit: int = 100, offset: int = 0
    ) -> list[InventoryItem]:
        """List inventory items with pagination."""
        pass

    @abstractmethod
    async def get_movements(
        self, inventory_item_id: int, limit: int = 100
    ) -> list[StockMovement]:
        """Get movements for an inventory item, newest first."""
        pass

    @abstractmethod
    async def list_purchase_orders(
        self, limit: int = 100, offset: int = 0
    ) -> list[PurchaseOrder]:
        """List purchase orders, newest first."""
        pass
