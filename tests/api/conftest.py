"""Fixtures for API tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from stockwatch.api.dependencies import (
    get_adjust_stock_use_case,
    get_feed,
    get_generate_purchase_orders_use_case,
    get_monitor,
    get_repository,
    get_running_monitor,
)
from stockwatch.api.main import app
from stockwatch.application.use_cases import AdjustStockUseCase, GeneratePurchaseOrdersUseCase
from stockwatch.core.services import MonitoringLoop, RecentAlertsFeed


@pytest.fixture
def seeded_repo(memory_repo, make_item):
    """Toner is out of stock, cables are slightly low, paper is fine."""
    memory_repo.add(make_item(id=1, name="Toner Cartridges", sku="TN-100", current_stock=0,
                              minimum_stock=15, unit_price=4500, supplier_id=20,
                              supplier_name="Printer Parts"))
    memory_repo.add(make_item(id=2, name="USB Cables", sku="USB-200", current_stock=45,
                              minimum_stock=50, unit_price=300, supplier_id=10,
                              supplier_name="Cable World"))
    memory_repo.add(make_item(id=3, name="A4 Paper", sku="PPR-300", current_stock=120,
                              minimum_stock=40, unit_price=800, supplier_id=10,
                              supplier_name="Cable World"))
    return memory_repo


@pytest.fixture
def feed():
    return RecentAlertsFeed()


@pytest.fixture
async def running_monitor(seeded_repo, feed):
    monitor = MonitoringLoop(seeded_repo, sinks=[feed], interval_seconds=60, debounce_seconds=0.01)
    monitor.start()
    await monitor.drain()
    yield monitor
    monitor.stop()
    await monitor.drain()


@pytest.fixture
async def api_client(seeded_repo, feed):
    """Client wired to the in-memory repository, without a monitoring loop."""
    overrides = {
        get_repository: lambda: seeded_repo,
        get_feed: lambda: feed,
        get_adjust_stock_use_case: lambda: AdjustStockUseCase(repository=seeded_repo),
        get_generate_purchase_orders_use_case: lambda: GeneratePurchaseOrdersUseCase(
            repository=seeded_repo
        ),
    }
    app.dependency_overrides.update(overrides)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    for dependency in overrides:
        app.dependency_overrides.pop(dependency, None)


@pytest.fixture
async def monitored_client(api_client, seeded_repo, running_monitor):
    """Client whose use cases and alert routes share a running monitoring loop."""
    overrides = {
        get_monitor: lambda: running_monitor,
        get_running_monitor: lambda: running_monitor,
        get_adjust_stock_use_case: lambda: AdjustStockUseCase(
            repository=seeded_repo, monitor=running_monitor
        ),
    }
    app.dependency_overrides.update(overrides)
    yield api_client
    for dependency in overrides:
        app.dependency_overrides.pop(dependency, None)
