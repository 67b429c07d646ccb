"""API middleware."""

from salepoint.api.middleware.error_handler import ErrorHandlerMiddleware
from salepoint.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
