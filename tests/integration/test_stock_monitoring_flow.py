"""
Integration test: adjust stock, see alerts, reorder.

Runs the use cases and the monitoring loop against a migrated SQLite
database.
"""

import asyncio
from pathlib import Path

import pytest

from stockwatch.application.dto.requests import PurchaseOrderSelectionRequest
from stockwatch.application.use_cases import AdjustStockUseCase, GeneratePurchaseOrdersUseCase
from stockwatch.core.entities import InventoryItem, MovementType, Supplier
from stockwatch.core.exceptions import InvalidQuantityError
from stockwatch.core.services import MonitoringLoop, RecentAlertsFeed
from stockwatch.infrastructure.storage.sqlite import ConnectionPool, SQLiteStockRepository
from stockwatch.infrastructure.storage.sqlite.migrations import run_migrations


@pytest.fixture
async def repository(tmp_path: Path):
    db_path = tmp_path / "flow.db"
    await run_migrations(db_path)
    pool = ConnectionPool(db_path, pool_size=2)
    yield SQLiteStockRepository(pool=pool)
    await pool.close()


@pytest.fixture
async def catalog(repository):
    office = await repository.create_supplier(Supplier(name="Office Supply Co"))
    cables = await repository.create_supplier(Supplier(name="Cable World"))
    items = [
        InventoryItem(name="Toner Cartridges", sku="TN-100", current_stock=20,
                      minimum_stock=15, unit_price=4500, supplier_id=office.id),
        InventoryItem(name="USB Cables", sku="USB-200", current_stock=45,
                      minimum_stock=50, unit_price=300, supplier_id=cables.id),
    ]
    return [await repository.create_item(item) for item in items]


async def test_stock_out_alert_and_reorder(repository, catalog):
    toner, usb = catalog
    feed = RecentAlertsFeed()
    monitor = MonitoringLoop(repository, sinks=[feed], interval_seconds=60, debounce_seconds=0.01)
    monitor.start()
    await monitor.drain()

    assert [n.alert.sku for n in feed.recent()] == ["USB-200"]

    adjust = AdjustStockUseCase(repository=repository, monitor=monitor)
    result = await adjust.apply(toner.id, MovementType.OUT, 20, reason="Printer fleet refill")

    assert result.inventory_item.current_stock == 0
    assert feed.recent(1)[0].title == "Critical Stock Alert"
    assert monitor.retained_ids == {toner.id, usb.id}

    generate = GeneratePurchaseOrdersUseCase(repository=repository, monitor=monitor)
    batch = await generate.execute(PurchaseOrderSelectionRequest(item_ids=[toner.id, usb.id]))

    assert len(batch.succeeded) == 2
    orders = await repository.list_purchase_orders()
    quantities = sorted(line.quantity for order in orders for line in order.lines)
    assert quantities == [30, 55]

    await asyncio.sleep(0.05)
    monitor.stop()
    await monitor.drain()

    assert len(feed) == 2


async def test_restock_clears_alert(repository, catalog):
    _, usb = catalog
    monitor = MonitoringLoop(repository, interval_seconds=60)
    monitor.start()
    await monitor.drain()

    adjust = AdjustStockUseCase(repository=repository, monitor=monitor)
    await adjust.set_stock_level(usb.id, 100)

    assert monitor.current_alerts == []
    movements = await repository.get_movements(usb.id)
    assert movements[0].movement_type == MovementType.IN
    assert movements[0].quantity == 55

    monitor.stop()
    await monitor.drain()


async def test_oversized_receipt_is_rejected(repository, catalog):
    toner, _ = catalog
    adjust = AdjustStockUseCase(repository=repository)

    with pytest.raises(InvalidQuantityError):
        await adjust.apply(toner.id, MovementType.IN, 2**63)

    stored = await repository.fetch_item(toner.id)
    assert stored.current_stock == 20
    assert await repository.get_movements(toner.id) == []
