"""API middleware."""

from partsledger.api.middleware.error_handler import ErrorHandlerMiddleware
from partsledger.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
