"""Tests for inventory and purchase order entities."""

import pytest
from pydantic import ValidationError

from stockwatch.core.entities import (
    AlertSeverity,
    DraftLine,
    InventoryItem,
    MovementType,
    PurchaseOrder,
    PurchaseOrderDraft,
    PurchaseOrderStatus,
    StockAlert,
    StockMovement,
    StockStatus,
    classify_stock_level,
)


class TestClassifyStockLevel:
    @pytest.mark.parametrize(
        ("current", "minimum", "expected"),
        [
            (0, 15, StockStatus.CRITICAL),
            (5, 10, StockStatus.CRITICAL),
            (6, 10, StockStatus.LOW_STOCK),
            (10, 10, StockStatus.LOW_STOCK),
            (45, 50, StockStatus.LOW_STOCK),
            (11, 10, StockStatus.IN_STOCK),
            (0, 0, StockStatus.CRITICAL),
            (1, 0, StockStatus.IN_STOCK),
        ],
    )
    def test_thresholds(self, current, minimum, expected):
        assert classify_stock_level(current, minimum) == expected

    def test_zero_stock_is_always_critical(self):
        """Empty shelves are critical even with a minimum of one."""
        assert classify_stock_level(0, 1) == StockStatus.CRITICAL
        assert classify_stock_level(1, 1) == StockStatus.LOW_STOCK


class TestInventoryItem:
    def test_status_is_recomputed(self):
        item = InventoryItem(name="Toner", sku="TN-1", current_stock=20, minimum_stock=10)
        assert item.status == StockStatus.IN_STOCK

        item.current_stock = 3
        assert item.status == StockStatus.CRITICAL
        assert item.is_under_threshold

    def test_total_value(self):
        item = InventoryItem(name="Cable", sku="CB-1", current_stock=4, unit_price=250)
        assert item.total_value == 1000

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError):
            InventoryItem(name="Cable", sku="CB-1", current_stock=-1)

    def test_timestamps_are_timezone_aware(self):
        item = InventoryItem(name="Cable", sku="CB-1")
        assert item.created_at.tzinfo is not None


class TestStockMovement:
    def test_delta(self):
        movement = StockMovement(
            inventory_item_id=1,
            movement_type=MovementType.OUT,
            quantity=4,
            previous_stock=10,
            new_stock=6,
        )
        assert movement.delta == -4

    def test_is_immutable(self):
        movement = StockMovement(
            inventory_item_id=1,
            movement_type=MovementType.IN,
            quantity=1,
            previous_stock=0,
            new_stock=1,
        )
        with pytest.raises(ValidationError):
            movement.quantity = 5

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            StockMovement(
                inventory_item_id=1,
                movement_type="transfer",
                quantity=1,
                previous_stock=0,
                new_stock=1,
            )


class TestStockAlert:
    def test_critical_wording(self):
        alert = StockAlert(
            item_id=1,
            name="Toner Cartridges",
            sku="TN-100",
            current_stock=0,
            minimum_stock=15,
            severity=AlertSeverity.CRITICAL,
        )
        assert alert.title == "Critical Stock Alert"
        assert alert.description == (
            "Toner Cartridges (TN-100) is critically low - Current: 0, Minimum: 15"
        )

    def test_low_stock_wording(self):
        alert = StockAlert(
            item_id=2,
            name="USB Cables",
            sku="USB-2",
            current_stock=45,
            minimum_stock=50,
            severity=AlertSeverity.LOW_STOCK,
        )
        assert alert.title == "Low Stock Alert"
        assert "is running low" in alert.description


class TestPurchaseOrderEntities:
    def test_draft_total(self):
        draft = PurchaseOrderDraft(
            supplier_id=7,
            lines=[
                DraftLine(inventory_item_id=1, name="A", sku="A", suggested_quantity=3, unit_price=100),
                DraftLine(inventory_item_id=2, name="B", sku="B", suggested_quantity=2, unit_price=50),
            ],
        )
        assert draft.lines[0].line_total == 300
        assert draft.total_amount == 400

    def test_draft_line_requires_positive_quantity(self):
        with pytest.raises(ValidationError):
            DraftLine(inventory_item_id=1, name="A", sku="A", suggested_quantity=0, unit_price=1)

    def test_order_defaults_to_pending(self):
        order = PurchaseOrder(po_number="PO-20240115-001", supplier_id=1)
        assert order.status == PurchaseOrderStatus.PENDING
        assert order.lines == []
