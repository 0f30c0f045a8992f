"""Purchase order endpoints."""

from fastapi import APIRouter, Depends, Query, status

from stockwatch.api.dependencies import get_generate_purchase_orders_use_case, get_repository
from stockwatch.application.dto.requests import PurchaseOrderSelectionRequest
from stockwatch.application.dto.responses import (
    AutoGenerateResponse,
    ErrorResponse,
    PurchaseOrderDraftResponse,
    PurchaseOrderResponse,
)
from stockwatch.application.use_cases.generate_purchase_orders import (
    GeneratePurchaseOrdersUseCase,
)
from stockwatch.core.interfaces import IStockRepository

router = APIRouter(prefix="/api/purchase-orders", tags=["purchase-orders"])


@router.get("", response_model=list[PurchaseOrderResponse])
async def list_purchase_orders(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    repository: IStockRepository = Depends(get_repository),
) -> list[PurchaseOrderResponse]:
    """List purchase orders, newest first."""
    orders = await repository.list_purchase_orders(limit=limit, offset=offset)
    return [PurchaseOrderResponse.from_entity(order) for order in orders]


@router.post("/preview", response_model=list[PurchaseOrderDraftResponse])
async def preview_purchase_orders(
    request: PurchaseOrderSelectionRequest,
    use_case: GeneratePurchaseOrdersUseCase = Depends(get_generate_purchase_orders_use_case),
) -> list[PurchaseOrderDraftResponse]:
    """Suggested per-supplier orders for the selected items, without saving."""
    drafts = await use_case.preview(request.item_ids)
    return use_case.drafts_to_response(drafts)


@router.post(
    "/auto-generate",
    response_model=AutoGenerateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def auto_generate_purchase_orders(
    request: PurchaseOrderSelectionRequest,
    use_case: GeneratePurchaseOrdersUseCase = Depends(get_generate_purchase_orders_use_case),
) -> AutoGenerateResponse:
    """Create one pending purchase order per supplier for the selected items."""
    batch = await use_case.execute(request)
    return use_case.to_response(batch)
