"""
Domain exceptions for the stockwatch application.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class StockwatchError(Exception):
    """Base exception for all stockwatch errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(StockwatchError):
    """Base exception for storage operations."""

    pass


class ItemNotFoundError(StorageError):
    """Inventory item not found in storage."""

    def __init__(self, item_id: int):
        super().__init__(
            f"Inventory item not found: {item_id}",
            code="ITEM_NOT_FOUND",
            details={"item_id": item_id},
        )


class RepositoryUnavailableError(StorageError):
    """A read or write against the backing store failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Repository unavailable during {operation}: {error}",
            code="REPOSITORY_UNAVAILABLE",
            details={"operation": operation, "error": error},
        )


class NoPartialUpdateError(StorageError):
    """Item stock and movement log could not be written together."""

    def __init__(self, item_id: int, reason: str):
        super().__init__(
            f"Stock change for item {item_id} was not applied: {reason}",
            code="NO_PARTIAL_UPDATE",
            details={"item_id": item_id, "reason": reason},
        )


class DuplicatePONumberError(StorageError):
    """Purchase order number already exists."""

    def __init__(self, po_number: str):
        super().__init__(
            f"Purchase order number already exists: {po_number}",
            code="DUPLICATE_PO_NUMBER",
            details={"po_number": po_number},
        )


# Validation Exceptions
class ValidationError(StockwatchError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class InvalidQuantityError(ValidationError):
    """Quantity is not acceptable for the requested movement."""

    def __init__(self, message: str, quantity: Any = None, available: int | None = None):
        super().__init__(field="quantity", message=message, value=quantity)
        self.code = "INVALID_QUANTITY"
        if available is not None:
            self.details["available"] = available


# Planner Exceptions
class PlannerError(StockwatchError):
    """Base exception for purchase order planning."""

    pass


class EmptySelectionError(PlannerError):
    """Nothing left to order for the selected items."""

    def __init__(self, selected: int):
        super().__init__(
            "No selected item is below its minimum stock level",
            code="EMPTY_SELECTION",
            details={"selected": selected},
        )


class ConfigurationError(StockwatchError):
    """Configuration error."""

    pass
