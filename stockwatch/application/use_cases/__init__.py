"""Application use cases."""

from stockwatch.application.use_cases.adjust_stock import (
    AdjustmentResult,
    AdjustStockUseCase,
    compute_new_stock,
)
from stockwatch.application.use_cases.generate_purchase_orders import (
    GeneratePurchaseOrdersUseCase,
)

__all__ = [
    "AdjustmentResult",
    "AdjustStockUseCase",
    "GeneratePurchaseOrdersUseCase",
    "compute_new_stock",
]
