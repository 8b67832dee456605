"""
Global Error Handler Middleware - API Layer

Turns file store and validation exceptions into the RPC error body and logs them.

@.architecture
Incoming: app.py (middleware registration), Exception objects from endpoints --- {FastAPI Request objects, FileStoreError/ValidationError/other exceptions}
Processing: dispatch(), _handle_error(), _classify_error(), _build_error_response(), _log_error() --- {5 jobs: exception_catching, error_classification, response_formatting, sanitization, logging}
Outgoing: monitoring/logging.py, RPC clients (HTTP) --- {structured error logs, JSONResponse with error format: code/status/message/type}
"""

import logging
import traceback
from typing import Callable, Optional, Dict, Any, Tuple
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from data.storage.errors import FileStoreError
from security.sanitization import ValidationError, SizeExceededError, PathTraversalError

logger = logging.getLogger(__name__)


# RPC status names reported alongside the HTTP code
STATUS_NAMES: Dict[int, str] = {
    400: "INVALID_ARGUMENT",
    404: "NOT_FOUND",
    409: "ALREADY_EXISTS",
    413: "RESOURCE_EXHAUSTED",
    422: "INVALID_ARGUMENT",
    500: "INTERNAL",
    501: "UNIMPLEMENTED",
    503: "UNAVAILABLE",
    504: "DEADLINE_EXCEEDED",
}


def status_name(status_code: int) -> str:
    """RPC status name for an HTTP code."""
    if status_code in STATUS_NAMES:
        return STATUS_NAMES[status_code]
    return "INTERNAL" if status_code >= 500 else "UNKNOWN"


class ErrorHandlerConfig:
    """Configuration for error handler."""

    def __init__(
        self,
        include_traceback: bool = False,
        sanitize_errors: bool = True,
        log_errors: bool = True,
        custom_error_messages: Optional[Dict[int, str]] = None
    ):
        """
        Initialize error handler configuration.

        Args:
            include_traceback: Include traceback in response (dev only)
            sanitize_errors: Hide messages of unexpected exceptions
            log_errors: Log errors to logger
            custom_error_messages: Hints for HTTP status codes
        """
        self.include_traceback = include_traceback
        self.sanitize_errors = sanitize_errors
        self.log_errors = log_errors
        self.custom_error_messages = custom_error_messages or self._default_messages()

    @staticmethod
    def _default_messages() -> Dict[int, str]:
        return {
            400: "Invalid file id or extension",
            404: "File not found",
            413: "File too large",
            500: "Internal server error",
            503: "Service unavailable",
        }


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware for global error handling.

    Mapping:
    - ObjectNotFoundError -> 404 NOT_FOUND
    - StorageInternalError -> 500 INTERNAL
    - PathTraversalError / ValidationError -> 400 INVALID_ARGUMENT
    - SizeExceededError -> 413 RESOURCE_EXHAUSTED
    - anything else -> 500 INTERNAL (message sanitized unless configured otherwise)
    """

    def __init__(
        self,
        app: ASGIApp,
        config: Optional[ErrorHandlerConfig] = None
    ):
        super().__init__(app)
        self.config = config or ErrorHandlerConfig()
        logger.debug("Error handler middleware initialized")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return await self._handle_error(request, e)

    async def _handle_error(self, request: Request, error: Exception) -> JSONResponse:
        """
        Handle exception and return formatted error response.

        Args:
            request: Request that caused the error
            error: Exception that was raised

        Returns:
            JSONResponse with error details
        """
        status_code, error_status, error_message, error_type = self._classify_error(error)

        if self.config.log_errors:
            self._log_error(request, error, status_code)

        error_response = self._build_error_response(
            status_code=status_code,
            error_status=error_status,
            error_message=error_message,
            error_type=error_type,
            error=error if self.config.include_traceback else None
        )

        return JSONResponse(
            status_code=status_code,
            content=error_response
        )

    def _classify_error(self, error: Exception) -> Tuple[int, str, str, str]:
        """
        Classify error and determine status code and message.

        Args:
            error: Exception to classify

        Returns:
            Tuple of (status_code, status_name, message, error_type)
        """
        error_type = type(error).__name__

        if isinstance(error, FileStoreError):
            return error.status_code, error.status, error.message, error_type
        elif isinstance(error, SizeExceededError):
            return 413, status_name(413), str(error), error_type
        elif isinstance(error, PathTraversalError):
            return 400, status_name(400), f"Invalid path: {error}", error_type
        elif isinstance(error, ValidationError):
            return 400, status_name(400), str(error), error_type
        elif isinstance(getattr(error, 'status_code', None), int):
            return error.status_code, status_name(error.status_code), str(error), error_type
        else:
            if self.config.sanitize_errors:
                message = "An error occurred processing your request"
            else:
                message = str(error)
            return 500, status_name(500), message, error_type

    def _build_error_response(
        self,
        status_code: int,
        error_status: str,
        error_message: str,
        error_type: str,
        error: Optional[Exception] = None
    ) -> Dict[str, Any]:
        response = {
            "error": {
                "code": status_code,
                "status": error_status,
                "message": error_message,
                "type": error_type
            }
        }

        if status_code in self.config.custom_error_messages:
            response["error"]["hint"] = self.config.custom_error_messages[status_code]

        if self.config.include_traceback and error:
            response["error"]["traceback"] = traceback.format_exception(
                type(error), error, error.__traceback__
            )

        return response

    def _log_error(
        self,
        request: Request,
        error: Exception,
        status_code: int
    ) -> None:
        """5xx at ERROR with traceback, 4xx at WARNING."""
        context = {
            "method": request.method,
            "path": str(request.url.path),
            "status_code": status_code,
            "error_type": type(error).__name__,
            "client": request.client.host if request.client else "unknown"
        }

        if status_code >= 500:
            logger.error(
                f"Server error: {error}",
                extra={"extra_fields": context},
                exc_info=error
            )
        elif status_code >= 400:
            logger.warning(
                f"Client error: {error}",
                extra={"extra_fields": context}
            )
        else:
            logger.info(
                f"Request error: {error}",
                extra={"extra_fields": context}
            )


def create_error_handler_middleware(
    development: bool = False
):
    """
    Create error handler middleware factory with environment-appropriate config.

    Args:
        development: Whether running in development mode

    Returns:
        Middleware class and kwargs for FastAPI
    """
    if development:
        config = ErrorHandlerConfig(
            include_traceback=True,
            sanitize_errors=False,
            log_errors=True
        )
    else:
        config = ErrorHandlerConfig(
            include_traceback=False,
            sanitize_errors=True,
            log_errors=True
        )

    return (ErrorHandlerMiddleware, {"config": config})
