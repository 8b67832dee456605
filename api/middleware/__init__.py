"""
API Middleware Layer

Provides middleware components for request/response processing including:
- Error handling (file store errors -> RPC error body)
- CORS (via FastAPI)
"""

from .error_handler import (
    ErrorHandlerMiddleware,
    ErrorHandlerConfig,
    STATUS_NAMES,
    status_name,
    create_error_handler_middleware,
)

__all__ = [
    'ErrorHandlerMiddleware',
    'ErrorHandlerConfig',
    'STATUS_NAMES',
    'status_name',
    'create_error_handler_middleware',
]
