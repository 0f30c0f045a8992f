"""Inventory endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from stockwatch.api.dependencies import get_adjust_stock_use_case, get_repository
from stockwatch.application.dto.requests import AdjustStockRequest, SetStockLevelRequest
from stockwatch.application.dto.responses import (
    AdjustStockResponse,
    ErrorResponse,
    InventoryItemResponse,
    InventoryListResponse,
    StockMovementResponse,
)
from stockwatch.application.use_cases.adjust_stock import AdjustStockUseCase
from stockwatch.core.interfaces import IStockRepository

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get("/items", response_model=InventoryListResponse)
async def list_items(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    repository: IStockRepository = Depends(get_repository),
) -> InventoryListResponse:
    """List inventory items with their computed stock status."""
    items = await repository.list_items(limit=limit, offset=offset)
    return InventoryListResponse(
        items=[InventoryItemResponse.from_entity(item) for item in items],
        count=len(items),
    )


@router.get(
    "/items/{item_id}",
    response_model=InventoryItemResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_item(
    item_id: int,
    repository: IStockRepository = Depends(get_repository),
) -> InventoryItemResponse:
    """Get a single inventory item."""
    item = await repository.fetch_item(item_id)
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Inventory item not found: {item_id}",
        )
    return InventoryItemResponse.from_entity(item)


@router.post(
    "/items/{item_id}/adjust",
    response_model=AdjustStockResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def adjust_stock(
    item_id: int,
    request: AdjustStockRequest,
    use_case: AdjustStockUseCase = Depends(get_adjust_stock_use_case),
) -> AdjustStockResponse:
    """Apply an in, out or adjustment movement to an item."""
    result = await use_case.execute(item_id, request)
    return use_case.to_response(result)


@router.put(
    "/items/{item_id}/stock",
    response_model=AdjustStockResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def set_stock_level(
    item_id: int,
    request: SetStockLevelRequest,
    use_case: AdjustStockUseCase = Depends(get_adjust_stock_use_case),
) -> AdjustStockResponse:
    """Set an item's stock to an absolute level."""
    result = await use_case.execute_set_level(item_id, request)
    return use_case.to_response(result)


@router.get(
    "/items/{item_id}/movements",
    response_model=list[StockMovementResponse],
)
async def get_movements(
    item_id: int,
    limit: int = Query(default=100, ge=1, le=1000),
    repository: IStockRepository = Depends(get_repository),
) -> list[StockMovementResponse]:
    """Get the movement log of an item, newest first."""
    movements = await repository.get_movements(item_id, limit=limit)
    return [StockMovementResponse.from_entity(m) for m in movements]
