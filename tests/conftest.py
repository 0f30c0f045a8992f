"""Pytest configuration and fixtures."""

from collections.abc import Callable
from itertools import count

import pytest

from stockwatch.core.entities.inventory import InventoryItem, StockMovement, Supplier
from stockwatch.core.entities.purchase_order import PurchaseOrder, PurchaseOrderLine
from stockwatch.core.exceptions import ItemNotFoundError, NoPartialUpdateError
from stockwatch.core.interfaces.stock_repository import (
    IStockRepository,
    ItemChange,
    ItemChangeHandler,
    Unsubscribe,
)


class InMemoryStockRepository(IStockRepository):
    """Dict-backed repository with failure injection for service tests."""

    def __init__(self) -> None:
        self.items: dict[int, InventoryItem] = {}
        self.suppliers: dict[int, Supplier] = {}
        self.movements: list[StockMovement] = []
        self.orders: list[PurchaseOrder] = []
        self.handlers: list[ItemChangeHandler] = []
        self.fetch_calls = 0
        self.fetch_error: Exception | None = None
        self.movement_error: Exception | None = None
        self._ids = count(1)

    # Test helpers

    def add(self, item: InventoryItem) -> InventoryItem:
        if item.id is None:
            item.id = next(self._ids)
        if item.supplier_id is not None and item.supplier_id in self.suppliers:
            item.supplier_name = self.suppliers[item.supplier_id].name
        self.items[item.id] = item
        return item

    def set_stock(self, item_id: int, stock: int) -> None:
        self.items[item_id] = self.items[item_id].model_copy(update={"current_stock": stock})

    def notify(self, item_id: int | None = None) -> None:
        for handler in list(self.handlers):
            handler(ItemChange(operation="update", item_id=item_id))

    # IStockRepository

    async def fetch_under_threshold(self) -> list[InventoryItem]:
        self.fetch_calls += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        return [i.model_copy() for i in self.items.values() if i.is_under_threshold]

    async def fetch_item(self, item_id: int) -> InventoryItem | None:
        item = self.items.get(item_id)
        return item.model_copy() if item is not None else None

    async def update_item_stock(self, item_id: int, new_stock: int) -> None:
        if item_id not in self.items:
            raise ItemNotFoundError(item_id)
        self.set_stock(item_id, new_stock)

    async def append_movement(self, movement: StockMovement) -> StockMovement:
        stored = movement.model_copy(update={"id": len(self.movements) + 1})
        self.movements.append(stored)
        return stored

    async def record_stock_change(
        self,
        item_id: int,
        expected_stock: int,
        new_stock: int,
        movement: StockMovement,
    ) -> tuple[InventoryItem, StockMovement]:
        item = self.items.get(item_id)
        if item is None or item.current_stock != expected_stock:
            raise NoPartialUpdateError(item_id, "stock changed since it was read")
        if self.movement_error is not None:
            raise NoPartialUpdateError(item_id, str(self.movement_error))
        self.set_stock(item_id, new_stock)
        stored = await self.append_movement(movement)
        self.notify(item_id)
        return self.items[item_id].model_copy(), stored

    def subscribe_to_item_changes(self, handler: ItemChangeHandler) -> Unsubscribe:
        self.handlers.append(handler)
        return lambda: self.handlers.remove(handler)

    async def create_purchase_order(
        self, header: PurchaseOrder, lines: list[PurchaseOrderLine]
    ) -> PurchaseOrder:
        order = header.model_copy(update={"id": len(self.orders) + 1, "lines": lines})
        self.orders.append(order)
        return order

    async def create_supplier(self, supplier: Supplier) -> Supplier:
        supplier.id = next(self._ids)
        self.suppliers[supplier.id] = supplier
        return supplier

    async def create_item(self, item: InventoryItem) -> InventoryItem:
        return self.add(item)

    async def list_items(self, limit: int = 100, offset: int = 0) -> list[InventoryItem]:
        return list(self.items.values())[offset : offset + limit]

    async def get_movements(self, inventory_item_id: int, limit: int = 100) -> list[StockMovement]:
        own = [m for m in self.movements if m.inventory_item_id == inventory_item_id]
        return list(reversed(own))[:limit]

    async def list_purchase_orders(self, limit: int = 100, offset: int = 0) -> list[PurchaseOrder]:
        return list(reversed(self.orders))[offset : offset + limit]


@pytest.fixture
def memory_repo() -> InMemoryStockRepository:
    """Empty in-memory stock repository."""
    return InMemoryStockRepository()


@pytest.fixture
def make_item() -> Callable[..., InventoryItem]:
    """Factory for inventory items with sensible defaults."""
    counter = count(1)

    def _make(**overrides) -> InventoryItem:
        n = next(counter)
        data = {
            "name": f"Item {n}",
            "sku": f"SKU-{n:03d}",
            "current_stock": 10,
            "minimum_stock": 5,
            "unit_price": 100,
        }
        data.update(overrides)
        return InventoryItem(**data)

    return _make


@pytest.fixture
def sample_snapshot(make_item) -> list[InventoryItem]:
    """Two under-threshold items: one out of stock, one slightly low."""
    return [
        make_item(id=1, name="Toner Cartridges", current_stock=0, minimum_stock=15),
        make_item(id=2, name="USB Cables", current_stock=45, minimum_stock=50),
    ]
