"""Generate Purchase Orders Use Case: per-supplier reorder of low-stock items."""

from stockwatch.application.dto.requests import PurchaseOrderSelectionRequest
from stockwatch.application.dto.responses import (
    AutoGenerateResponse,
    PurchaseOrderDraftResponse,
    PurchaseOrderResponse,
    SupplierOrderResult,
)
from stockwatch.config import get_logger
from stockwatch.core.entities.purchase_order import PurchaseOrderDraft
from stockwatch.core.exceptions import EmptySelectionError
from stockwatch.core.interfaces.stock_repository import IStockRepository
from stockwatch.core.services.monitoring_loop import MonitoringLoop
from stockwatch.core.services.reorder_planner import AutoReorderPlanner, ConfirmationBatch

logger = get_logger(__name__, component="reorder")


class GeneratePurchaseOrdersUseCase:
    """Plan and confirm purchase orders for selected low-stock items."""

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

    async def preview(self, item_ids: list[int]) -> list[PurchaseOrderDraft]:
        """Drafts for the selection against the current low-stock rows. Writes nothing."""
        repository = await self._get_repository()
        catalog = await repository.fetch_under_threshold()
        return AutoReorderPlanner(repository).plan(item_ids, catalog)

    async def execute(self, request: PurchaseOrderSelectionRequest) -> ConfirmationBatch:
        """Execute generate purchase orders use case."""
        logger.info("purchase_order_generation_started", selected=len(request.item_ids))

        repository = await self._get_repository()
        planner = AutoReorderPlanner(repository)

        catalog = await repository.fetch_under_threshold()
        drafts = planner.plan(request.item_ids, catalog)
        if not drafts:
            raise EmptySelectionError(len(request.item_ids))

        batch = await planner.confirm_all(drafts)

        logger.info(
            "purchase_order_generation_complete",
            created=len(batch.succeeded),
            failed=len(batch.failed),
        )

        if batch.succeeded and self._monitor is not None:
            await self._monitor.check_now()

        return batch

    @staticmethod
    def drafts_to_response(drafts: list[PurchaseOrderDraft]) -> list[PurchaseOrderDraftResponse]:
        return [PurchaseOrderDraftResponse.from_entity(draft) for draft in drafts]

    def to_response(self, batch: ConfirmationBatch) -> AutoGenerateResponse:
        """Convert batch to API response."""
        return AutoGenerateResponse(
            results=[
                SupplierOrderResult(
                    supplier_id=result.supplier_id,
                    success=result.success,
                    order=(
                        PurchaseOrderResponse.from_entity(result.order)
                        if result.order is not None
                        else None
                    ),
                    error_code=result.error_code,
                    error=result.error,
                )
                for result in batch.results
            ],
            created=len(batch.succeeded),
            failed=len(batch.failed),
            partial_failure=batch.partial_failure,
        )
