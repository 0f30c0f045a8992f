"""SQLite implementation of stock storage."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime

import aiosqlite

from stockwatch.config import get_logger
from stockwatch.core.entities.inventory import (
    InventoryItem,
    MovementType,
    StockMovement,
    Supplier,
    utcnow,
)
from stockwatch.core.entities.purchase_order import (
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
)
from stockwatch.core.exceptions import (
    DuplicatePONumberError,
    ItemNotFoundError,
    NoPartialUpdateError,
    RepositoryUnavailableError,
)
from stockwatch.core.interfaces.stock_repository import (
    IStockRepository,
    ItemChange,
    ItemChangeHandler,
    Unsubscribe,
)
from stockwatch.infrastructure.storage.sqlite.change_feed import ItemChangeHub
from stockwatch.infrastructure.storage.sqlite.connection import ConnectionPool, get_pool

logger = get_logger(__name__, component="storage")

_ITEM_SELECT = """
    SELECT i.*, s.name AS supplier_name
    FROM inventory_items i
    LEFT JOIN suppliers s ON s.id = i.supplier_id
"""


@contextmanager
def _unavailable_on_error(operation: str) -> Iterator[None]:
    try:
        yield
    except aiosqlite.Error as e:
        logger.error("repository_operation_failed", operation=operation, error=str(e))
        raise RepositoryUnavailableError(operation, str(e)) from e


class SQLiteStockRepository(IStockRepository):
    """SQLite implementation of inventory, movement and purchase order storage."""

    def __init__(
        self,
        pool: ConnectionPool | None = None,
        hub: ItemChangeHub | None = None,
    ) -> None:
        self._pool = pool
        self._hub = hub or ItemChangeHub()

    @property
    def hub(self) -> ItemChangeHub:
        return self._hub

    async def _get_pool(self) -> ConnectionPool:
        if self._pool is None:
            self._pool = await get_pool()
        return self._pool

    # Change notifications

    def subscribe_to_item_changes(self, handler: ItemChangeHandler) -> Unsubscribe:
        return self._hub.subscribe(handler)

    # Reads

    async def fetch_under_threshold(self) -> list[InventoryItem]:
        pool = await self._get_pool()
        with _unavailable_on_error("fetch_under_threshold"):
            async with pool.acquire() as conn:
                cursor = await conn.execute(
                    _ITEM_SELECT
                    + " WHERE i.current_stock <= i.minimum_stock ORDER BY i.name, i.id"
                )
                rows = await cursor.fetchall()
        return [self._row_to_item(row) for row in rows]

    async def fetch_item(self, item_id: int) -> InventoryItem | None:
        pool = await self._get_pool()
        with _unavailable_on_error("fetch_item"):
            async with pool.acquire() as conn:
                return await self._select_item(conn, item_id)

    async def list_items(
        self, limit: int = 100, offset: int = 0
    ) -> list[InventoryItem]:
        pool = await self._get_pool()
        with _unavailable_on_error("list_items"):
            async with pool.acquire() as conn:
                cursor = await conn.execute(
                    _ITEM_SELECT + " ORDER BY i.name, i.id LIMIT ? OFFSET ?",
                    (limit, offset),
                )
                rows = await cursor.fetchall()
        return [self._row_to_item(row) for row in rows]

    async def get_movements(
        self, inventory_item_id: int, limit: int = 100
    ) -> list[StockMovement]:
        pool = await self._get_pool()
        with _unavailable_on_error("get_movements"):
            async with pool.acquire() as conn:
                cursor = await conn.execute(
                    """
                    SELECT * FROM stock_movements
                    WHERE inventory_item_id = ?
                    ORDER BY created_at DESC, id DESC
                    LIMIT ?
                    """,
                    (inventory_item_id, limit),
                )
                rows = await cursor.fetchall()
        return [self._row_to_movement(row) for row in rows]

    async def list_purchase_orders(
        self, limit: int = 100, offset: int = 0
    ) -> list[PurchaseOrder]:
        pool = await self._get_pool()
        with _unavailable_on_error("list_purchase_orders"):
            async with pool.acquire() as conn:
                cursor = await conn.execute(
                    """
                    SELECT * FROM purchase_orders
                    ORDER BY created_at DESC, id DESC
                    LIMIT ? OFFSET ?
                    """,
                    (limit, offset),
                )
                headers = await cursor.fetchall()

                orders = []
                for header in headers:
                    cursor = await conn.execute(
                        "SELECT * FROM purchase_order_items WHERE purchase_order_id = ? ORDER BY id",
                        (header["id"],),
                    )
                    lines = [self._row_to_order_line(row) for row in await cursor.fetchall()]
                    orders.append(self._row_to_order(header, lines))
        return orders

    # Writes

    async def create_supplier(self, supplier: Supplier) -> Supplier:
        pool = await self._get_pool()
        with _unavailable_on_error("create_supplier"):
            async with pool.transaction() as conn:
                cursor = await conn.execute(
                    """
                    INSERT INTO suppliers (name, contact_person, email, phone, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        supplier.name,
                        supplier.contact_person,
                        supplier.email,
                        supplier.phone,
                        supplier.created_at.isoformat(),
                    ),
                )
                supplier.id = cursor.lastrowid
        logger.info("supplier_created", supplier_id=supplier.id, name=supplier.name)
        return supplier

    async def create_item(self, item: InventoryItem) -> InventoryItem:
        now = utcnow()
        pool = await self._get_pool()
        with _unavailable_on_error("create_item"):
            async with pool.transaction() as conn:
                cursor = await conn.execute(
                    """
                    INSERT INTO inventory_items (
                        name, sku, category_id, supplier_id, current_stock,
                        minimum_stock, unit_price, created_at, last_updated
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        item.name,
                        item.sku,
                        item.category_id,
                        item.supplier_id,
                        item.current_stock,
                        item.minimum_stock,
                        item.unit_price,
                        now.isoformat(),
                        now.isoformat(),
                    ),
                )
                created = await self._select_item(conn, cursor.lastrowid)

        assert created is not None
        logger.info("inventory_item_created", item_id=created.id, sku=created.sku)
        self._hub.publish(ItemChange(operation="insert", item_id=created.id))
        return created

    async def update_item_stock(self, item_id: int, new_stock: int) -> None:
        pool = await self._get_pool()
        with _unavailable_on_error("update_item_stock"):
            async with pool.transaction() as conn:
                cursor = await conn.execute(
                    "UPDATE inventory_items SET current_stock = ?, last_updated = ? WHERE id = ?",
                    (new_stock, utcnow().isoformat(), item_id),
                )
                if cursor.rowcount == 0:
                    raise ItemNotFoundError(item_id)

        logger.info("inventory_item_stock_updated", item_id=item_id, new_stock=new_stock)
        self._hub.publish(ItemChange(operation="update", item_id=item_id))

    async def append_movement(self, movement: StockMovement) -> StockMovement:
        pool = await self._get_pool()
        with _unavailable_on_error("append_movement"):
            async with pool.transaction() as conn:
                stored = await self._insert_movement(conn, movement)

        logger.info(
            "stock_movement_recorded",
            movement_id=stored.id,
            type=stored.movement_type.value,
            qty=stored.quantity,
        )
        return stored

    async def record_stock_change(
        self,
        item_id: int,
        expected_stock: int,
        new_stock: int,
        movement: StockMovement,
    ) -> tuple[InventoryItem, StockMovement]:
        pool = await self._get_pool()
        try:
            async with pool.transaction() as conn:
                cursor = await conn.execute(
                    """
                    UPDATE inventory_items SET current_stock = ?, last_updated = ?
                    WHERE id = ? AND current_stock = ?
                    """,
                    (new_stock, utcnow().isoformat(), item_id, expected_stock),
                )
                if cursor.rowcount != 1:
                    raise NoPartialUpdateError(
                        item_id, "item missing or stock changed since it was read"
                    )

                stored = await self._insert_movement(conn, movement)
                item = await self._select_item(conn, item_id)
        except aiosqlite.Error as e:
            logger.error("stock_change_rolled_back", item_id=item_id, error=str(e))
            raise NoPartialUpdateError(item_id, str(e)) from e

        assert item is not None
        logger.info(
            "stock_change_recorded",
            item_id=item_id,
            movement_id=stored.id,
            previous_stock=stored.previous_stock,
            new_stock=stored.new_stock,
        )
        self._hub.publish(ItemChange(operation="update", item_id=item_id))
        return item, stored

    async def create_purchase_order(
        self, header: PurchaseOrder, lines: list[PurchaseOrderLine]
    ) -> PurchaseOrder:
        pool = await self._get_pool()
        with _unavailable_on_error("create_purchase_order"):
            try:
                async with pool.transaction() as conn:
                    cursor = await conn.execute(
                        """
                        INSERT INTO purchase_orders (
                            po_number, supplier_id, status, order_date,
                            total_amount, created_at
                        ) VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (
                            header.po_number,
                            header.supplier_id,
                            header.status.value,
                            header.order_date.isoformat(),
                            header.total_amount,
                            header.created_at.isoformat(),
                        ),
                    )
                    order_id = cursor.lastrowid

                    stored_lines = []
                    for line in lines:
                        cursor = await conn.execute(
                            """
                            INSERT INTO purchase_order_items (
                                purchase_order_id, inventory_item_id, quantity,
                                unit_price, total_price
                            ) VALUES (?, ?, ?, ?, ?)
                            """,
                            (
                                order_id,
                                line.inventory_item_id,
                                line.quantity,
                                line.unit_price,
                                line.total_price,
                            ),
                        )
                        stored_lines.append(
                            line.model_copy(
                                update={"id": cursor.lastrowid, "purchase_order_id": order_id}
                            )
                        )
            except aiosqlite.IntegrityError as e:
                if "po_number" in str(e):
                    raise DuplicatePONumberError(header.po_number) from e
                raise

        logger.info(
            "purchase_order_created",
            order_id=order_id,
            po_number=header.po_number,
            lines=len(stored_lines),
        )
        return header.model_copy(update={"id": order_id, "lines": stored_lines})

    # Helpers

    async def _select_item(
        self, conn: aiosqlite.Connection, item_id: int | None
    ) -> InventoryItem | None:
        cursor = await conn.execute(_ITEM_SELECT + " WHERE i.id = ?", (item_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_item(row)

    @staticmethod
    async def _insert_movement(
        conn: aiosqlite.Connection, movement: StockMovement
    ) -> StockMovement:
        cursor = await conn.execute(
            """
            INSERT INTO stock_movements (
                inventory_item_id, movement_type, quantity,
                previous_stock, new_stock, reason, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                movement.inventory_item_id,
                movement.movement_type.value,
                movement.quantity,
                movement.previous_stock,
                movement.new_stock,
                movement.reason,
                movement.created_at.isoformat(),
            ),
        )
        return movement.model_copy(update={"id": cursor.lastrowid})

    @staticmethod
    def _parse_datetime(value: str | None) -> datetime:
        if value:
            try:
                return datetime.fromisoformat(value)
            except (ValueError, TypeError):
                pass
        return utcnow()

    @classmethod
    def _row_to_item(cls, row: aiosqlite.Row) -> InventoryItem:
        """Convert a database row to an InventoryItem entity."""
        return InventoryItem(
            id=row["id"],
            name=row["name"],
            sku=row["sku"],
            category_id=row["category_id"],
            supplier_id=row["supplier_id"],
            supplier_name=row["supplier_name"],
            current_stock=int(row["current_stock"]),
            minimum_stock=int(row["minimum_stock"]),
            unit_price=int(row["unit_price"]),
            created_at=cls._parse_datetime(row["created_at"]),
            last_updated=cls._parse_datetime(row["last_updated"]),
        )

    @classmethod
    def _row_to_movement(cls, row: aiosqlite.Row) -> StockMovement:
        """Convert a database row to a StockMovement entity."""
        return StockMovement(
            id=row["id"],
            inventory_item_id=row["inventory_item_id"],
            movement_type=MovementType(row["movement_type"]),
            quantity=int(row["quantity"]),
            previous_stock=int(row["previous_stock"]),
            new_stock=int(row["new_stock"]),
            reason=row["reason"],
            created_at=cls._parse_datetime(row["created_at"]),
        )

    @staticmethod
    def _row_to_order_line(row: aiosqlite.Row) -> PurchaseOrderLine:
        return PurchaseOrderLine(
            id=row["id"],
            purchase_order_id=row["purchase_order_id"],
            inventory_item_id=row["inventory_item_id"],
            quantity=int(row["quantity"]),
            unit_price=int(row["unit_price"]),
            total_price=int(row["total_price"]),
        )

    @classmethod
    def _row_to_order(
        cls, row: aiosqlite.Row, lines: list[PurchaseOrderLine]
    ) -> PurchaseOrder:
        order_date = date.today()
        if row["order_date"]:
            try:
                order_date = date.fromisoformat(row["order_date"])
            except (ValueError, TypeError):
                pass

        return PurchaseOrder(
            id=row["id"],
            po_number=row["po_number"],
            supplier_id=row["supplier_id"],
            status=PurchaseOrderStatus(row["status"]),
            order_date=order_date,
            total_amount=int(row["total_amount"]),
            created_at=cls._parse_datetime(row["created_at"]),
            lines=lines,
        )
