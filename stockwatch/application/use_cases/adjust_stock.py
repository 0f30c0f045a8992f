"""Adjust Stock Use Case: validated stock change with an audited movement."""

from dataclasses import dataclass

from stockwatch.application.dto.requests import AdjustStockRequest, SetStockLevelRequest
from stockwatch.application.dto.responses import (
    AdjustStockResponse,
    InventoryItemResponse,
    StockMovementResponse,
)
from stockwatch.config import get_logger
from stockwatch.core.entities.inventory import (
    MAX_STOCK_LEVEL,
    InventoryItem,
    MovementType,
    StockMovement,
)
from stockwatch.core.exceptions import InvalidQuantityError, ItemNotFoundError, ValidationError
from stockwatch.core.interfaces.stock_repository import IStockRepository
from stockwatch.core.services.monitoring_loop import MonitoringLoop

logger = get_logger(__name__, component="stock")


@dataclass
class AdjustmentResult:
    """Result of a stock adjustment."""

    inventory_item: InventoryItem
    movement: StockMovement


def compute_new_stock(current_stock: int, movement_type: MovementType, quantity: int) -> int:
    """
    Resulting stock level for a movement.

    Raises:
        InvalidQuantityError: quantity is not a whole number, is not positive
            for in/out, is negative for an adjustment, takes stock below zero
            or beyond MAX_STOCK_LEVEL
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError("Quantity must be a whole number", quantity)
    if quantity > MAX_STOCK_LEVEL:
        raise InvalidQuantityError(f"Quantity cannot exceed {MAX_STOCK_LEVEL}", quantity)

    if movement_type == MovementType.ADJUSTMENT:
        if quantity < 0:
            raise InvalidQuantityError("Adjusted stock cannot be negative", quantity)
        return quantity

    if quantity <= 0:
        raise InvalidQuantityError("Quantity must be greater than zero", quantity)

    if movement_type == MovementType.IN:
        new_stock = current_stock + quantity
        if new_stock > MAX_STOCK_LEVEL:
            raise InvalidQuantityError(
                f"Receiving {quantity} units would exceed the maximum stock level",
                quantity,
            )
        return new_stock

    if quantity > current_stock:
        raise InvalidQuantityError(
            f"Cannot remove {quantity} units, only {current_stock} in stock",
            quantity,
            available=current_stock,
        )
    return current_stock - quantity


class AdjustStockUseCase:
    """Apply in/out/adjustment movements to an item's stock."""

    def __init__(
        self,
        repository: IStockRepository | None = None,
        monitor: MonitoringLoop | None = None,
    ):
        self._repository = repository
        self._monitor = monitor

    async def _get_repository(self) -> IStockRepository:
        if self._repository is None:
            from stockwatch.infrastructure.storage.sqlite import get_stock_repository

            self._repository = await get_stock_repository()
        return self._repository

    async def _get_item(self, item_id: int) -> InventoryItem:
        repository = await self._get_repository()
        item = await repository.fetch_item(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    async def apply(
        self,
        item_id: int,
        movement_type: MovementType | str,
        quantity: int,
        reason: str | None = None,
    ) -> AdjustmentResult:
        """
        Change an item's stock and log the movement.

        Args:
            item_id: Inventory item to change
            movement_type: ``in`` adds, ``out`` removes, ``adjustment`` sets
                the stock to ``quantity``
            quantity: Delta for in/out, resulting total for adjustment
            reason: Optional note stored with the movement

        Raises:
            InvalidQuantityError: See compute_new_stock
            ItemNotFoundError: No such item
            NoPartialUpdateError: The item update and the movement insert
                could not both be committed; nothing was written
        """
        try:
            movement_type = MovementType(movement_type)
        except ValueError as e:
            raise ValidationError("movement_type", "Unknown movement type", movement_type) from e

        logger.info(
            "stock_adjustment_started",
            item_id=item_id,
            movement_type=movement_type.value,
            quantity=quantity,
        )

        item = await self._get_item(item_id)
        new_stock = compute_new_stock(item.current_stock, movement_type, quantity)
        return await self._commit(item, movement_type, quantity, new_stock, reason)

    async def set_stock_level(
        self,
        item_id: int,
        new_stock: int,
        reason: str = "Manual adjustment",
    ) -> AdjustmentResult:
        """
        Set stock to an absolute level, logging it as an in or out movement.

        The movement type follows the direction of the change; an unchanged
        level is logged as an adjustment.
        """
        if isinstance(new_stock, bool) or not isinstance(new_stock, int) or new_stock < 0:
            raise InvalidQuantityError("Stock level must be a non-negative whole number", new_stock)
        if new_stock > MAX_STOCK_LEVEL:
            raise InvalidQuantityError(f"Stock level cannot exceed {MAX_STOCK_LEVEL}", new_stock)

        item = await self._get_item(item_id)
        previous = item.current_stock
        if new_stock > previous:
            movement_type, quantity = MovementType.IN, new_stock - previous
        elif new_stock < previous:
            movement_type, quantity = MovementType.OUT, previous - new_stock
        else:
            movement_type, quantity = MovementType.ADJUSTMENT, new_stock
        return await self._commit(item, movement_type, quantity, new_stock, reason)

    async def execute(self, item_id: int, request: AdjustStockRequest) -> AdjustmentResult:
        """Execute adjust stock use case."""
        return await self.apply(item_id, request.movement_type, request.quantity, request.reason)

    async def execute_set_level(
        self, item_id: int, request: SetStockLevelRequest
    ) -> AdjustmentResult:
        """Execute set stock level use case."""
        return await self.set_stock_level(item_id, request.new_stock, request.reason)

    async def _commit(
        self,
        item: InventoryItem,
        movement_type: MovementType,
        quantity: int,
        new_stock: int,
        reason: str | None,
    ) -> AdjustmentResult:
        repository = await self._get_repository()
        movement = StockMovement(
            inventory_item_id=item.id,  # type: ignore[arg-type]
            movement_type=movement_type,
            quantity=quantity,
            previous_stock=item.current_stock,
            new_stock=new_stock,
            reason=reason,
        )
        updated, stored = await repository.record_stock_change(
            item.id,  # type: ignore[arg-type]
            expected_stock=item.current_stock,
            new_stock=new_stock,
            movement=movement,
        )

        logger.info(
            "stock_adjusted",
            item_id=updated.id,
            movement_type=movement_type.value,
            previous_stock=stored.previous_stock,
            new_stock=stored.new_stock,
            status=updated.status.value,
        )

        if self._monitor is not None:
            await self._monitor.check_now()

        return AdjustmentResult(inventory_item=updated, movement=stored)

    def to_response(self, result: AdjustmentResult) -> AdjustStockResponse:
        """Convert result to API response."""
        return AdjustStockResponse(
            inventory_item=InventoryItemResponse.from_entity(result.inventory_item),
            movement=StockMovementResponse.from_entity(result.movement),
        )
