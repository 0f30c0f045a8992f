"""
Stock alert evaluation.

Turns an inventory snapshot into the set of low-stock alerts and works out
which of them have not been surfaced before.
"""

from collections.abc import Iterable

from stockwatch.core.entities.inventory import (
    AlertSeverity,
    InventoryItem,
    StockAlert,
    StockStatus,
    classify_stock_level,
)


class AlertEngine:
    """Pure alert computation over inventory snapshots."""

    def severity(self, item: InventoryItem) -> AlertSeverity | None:
        """Alert severity for an item, or None when it is in stock."""
        status = classify_stock_level(item.current_stock, item.minimum_stock)
        if status == StockStatus.CRITICAL:
            return AlertSeverity.CRITICAL
        if status == StockStatus.LOW_STOCK:
            return AlertSeverity.LOW_STOCK
        return None

    def evaluate(self, snapshot: Iterable[InventoryItem]) -> list[StockAlert]:
        """
        Compute alerts for every item at or below its minimum stock.

        Args:
            snapshot: Inventory items to check. Items above their minimum
                are ignored, so a full catalog can be passed as well.

        Returns:
            Alerts in snapshot order
        """
        alerts: list[StockAlert] = []
        for item in snapshot:
            severity = self.severity(item)
            if severity is None or item.id is None:
                continue
            alerts.append(
                StockAlert(
                    item_id=item.id,
                    name=item.name,
                    sku=item.sku,
                    current_stock=item.current_stock,
                    minimum_stock=item.minimum_stock,
                    severity=severity,
                    supplier_name=item.supplier_name,
                )
            )
        return alerts

    @staticmethod
    def diff_new(
        previous: Iterable[int], current: Iterable[StockAlert]
    ) -> list[StockAlert]:
        """
        Alerts whose item was not alerted in the previous set.

        Compared by item id only; an item whose severity changed is not new.
        """
        seen = set(previous)
        return [alert for alert in current if alert.item_id not in seen]
