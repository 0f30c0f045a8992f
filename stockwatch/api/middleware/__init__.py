"""API middleware."""

from stockwatch.api.middleware.error_handler import ErrorHandlerMiddleware
from stockwatch.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
