"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from stockwatch.core.entities import InventoryItem, Supplier
from stockwatch.infrastructure.storage.sqlite import ConnectionPool, SQLiteStockRepository
from stockwatch.infrastructure.storage.sqlite.migrations import run_migrations


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def migrated_db(temp_db_path: Path) -> Path:
    """Temporary database with the full schema applied."""
    results = await run_migrations(temp_db_path)
    assert all(r.success for r in results)
    return temp_db_path


@pytest.fixture
async def pool(migrated_db: Path) -> AsyncGenerator[ConnectionPool, None]:
    pool = ConnectionPool(migrated_db, pool_size=2)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
def repository(pool: ConnectionPool) -> SQLiteStockRepository:
    return SQLiteStockRepository(pool=pool)


@pytest.fixture
async def supplier(repository: SQLiteStockRepository) -> Supplier:
    return await repository.create_supplier(
        Supplier(name="Office Supply Co", email="orders@officesupply.test")
    )


@pytest.fixture
async def seeded_items(
    repository: SQLiteStockRepository, supplier: Supplier
) -> list[InventoryItem]:
    """Toner is out of stock, cables are slightly low, paper is fine."""
    items = [
        InventoryItem(name="Toner Cartridges", sku="TN-100", current_stock=0,
                      minimum_stock=15, unit_price=4500, supplier_id=supplier.id),
        InventoryItem(name="USB Cables", sku="USB-200", current_stock=45,
                      minimum_stock=50, unit_price=300, supplier_id=supplier.id),
        InventoryItem(name="A4 Paper", sku="PPR-300", current_stock=120,
                      minimum_stock=40, unit_price=800, supplier_id=supplier.id),
    ]
    return [await repository.create_item(item) for item in items]
