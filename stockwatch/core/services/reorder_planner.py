"""
Auto-reorder planning.

Groups low-stock items by supplier into purchase order drafts and confirms
them one supplier at a time.
"""

from __future__ import annotations

import random
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from stockwatch.config import get_logger
from stockwatch.core.entities.inventory import InventoryItem
from stockwatch.core.entities.purchase_order import (
    DraftLine,
    PurchaseOrder,
    PurchaseOrderDraft,
    PurchaseOrderLine,
    PurchaseOrderStatus,
)
from stockwatch.core.exceptions import DuplicatePONumberError, StockwatchError
from stockwatch.core.interfaces.stock_repository import IStockRepository

logger = get_logger(__name__, component="reorder")

# Orders replenish up to this multiple of the minimum stock
REORDER_TARGET_MULTIPLIER = 2

PO_NUMBER_ATTEMPTS = 3


def suggested_quantity(item: InventoryItem) -> int:
    """Quantity to order: up to twice the minimum, never less than the minimum."""
    return max(
        item.minimum_stock * REORDER_TARGET_MULTIPLIER - item.current_stock,
        item.minimum_stock,
    )


def generate_po_number(today: date | None = None) -> str:
    """Date-coded purchase order number, e.g. PO-20240115-042."""
    today = today or date.today()
    return f"PO-{today:%Y%m%d}-{random.randint(0, 999):03d}"


@dataclass
class ConfirmationResult:
    """Outcome of confirming the draft for one supplier."""

    supplier_id: int
    draft: PurchaseOrderDraft
    order: PurchaseOrder | None = None
    error_code: str | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.order is not None


@dataclass
class ConfirmationBatch:
    """Per-supplier results of a multi-supplier confirmation."""

    results: list[ConfirmationResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[ConfirmationResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[ConfirmationResult]:
        return [r for r in self.results if not r.success]

    @property
    def partial_failure(self) -> bool:
        return bool(self.failed)


class AutoReorderPlanner:
    """Builds and confirms per-supplier purchase order drafts."""

    def __init__(self, repository: IStockRepository) -> None:
        self._repository = repository

    def plan(
        self,
        selected_item_ids: Iterable[int],
        catalog: Iterable[InventoryItem],
    ) -> list[PurchaseOrderDraft]:
        """
        Build one draft per supplier for the selected low-stock items.

        Args:
            selected_item_ids: Items the user picked for reordering
            catalog: Current inventory rows; stale selections that are no
                longer under threshold are dropped

        Returns:
            Drafts ordered by supplier id, lines in catalog order
        """
        selected = set(selected_item_ids)
        drafts: dict[int, PurchaseOrderDraft] = {}

        for item in catalog:
            if item.id not in selected or not item.is_under_threshold:
                continue
            if item.supplier_id is None:
                logger.warning("reorder_item_without_supplier", item_id=item.id, sku=item.sku)
                continue

            quantity = suggested_quantity(item)
            if quantity <= 0:
                continue

            draft = drafts.get(item.supplier_id)
            if draft is None:
                draft = PurchaseOrderDraft(
                    supplier_id=item.supplier_id,
                    supplier_name=item.supplier_name,
                )
                drafts[item.supplier_id] = draft
            draft.lines.append(
                DraftLine(
                    inventory_item_id=item.id,
                    name=item.name,
                    sku=item.sku,
                    suggested_quantity=quantity,
                    unit_price=item.unit_price,
                )
            )

        result = [drafts[supplier_id] for supplier_id in sorted(drafts)]
        logger.info(
            "reorder_plan_built",
            selected=len(selected),
            suppliers=len(result),
            lines=sum(len(d.lines) for d in result),
        )
        return result

    async def confirm(self, draft: PurchaseOrderDraft) -> PurchaseOrder:
        """Persist a draft as a pending purchase order with all its lines."""
        lines = [
            PurchaseOrderLine(
                inventory_item_id=line.inventory_item_id,
                quantity=line.suggested_quantity,
                unit_price=line.unit_price,
                total_price=line.line_total,
            )
            for line in draft.lines
        ]

        attempt = 1
        while True:
            header = PurchaseOrder(
                po_number=generate_po_number(),
                supplier_id=draft.supplier_id,
                status=PurchaseOrderStatus.PENDING,
                total_amount=draft.total_amount,
            )
            try:
                order = await self._repository.create_purchase_order(header, lines)
                break
            except DuplicatePONumberError:
                if attempt >= PO_NUMBER_ATTEMPTS:
                    raise
                logger.info("po_number_collision", po_number=header.po_number, attempt=attempt)
                attempt += 1

        logger.info(
            "purchase_order_confirmed",
            po_number=order.po_number,
            supplier_id=order.supplier_id,
            lines=len(lines),
            total_amount=order.total_amount,
        )
        return order

    async def confirm_all(self, drafts: Iterable[PurchaseOrderDraft]) -> ConfirmationBatch:
        """
        Confirm each draft in its own transaction.

        A failing supplier does not undo orders already created for others.
        """
        batch = ConfirmationBatch()
        for draft in drafts:
            try:
                order = await self.confirm(draft)
            except StockwatchError as e:
                logger.error(
                    "purchase_order_confirm_failed",
                    supplier_id=draft.supplier_id,
                    error_code=e.code,
                    error=str(e),
                )
                batch.results.append(
                    ConfirmationResult(
                        supplier_id=draft.supplier_id,
                        draft=draft,
                        error_code=e.code,
                        error=e.message,
                    )
                )
                continue
            batch.results.append(
                ConfirmationResult(supplier_id=draft.supplier_id, draft=draft, order=order)
            )

        if batch.partial_failure:
            logger.warning(
                "purchase_order_batch_partial_failure",
                succeeded=len(batch.succeeded),
                failed=len(batch.failed),
            )
        return batch
