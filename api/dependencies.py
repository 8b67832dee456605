"""
API Dependencies

FastAPI dependency injection functions for:
- File store access
- Health checker access
- Request context setup

@.architecture
Incoming: app.py (create_app), api/v1/endpoints/*.py --- {set_file_store/set_health_checker calls, Depends() injections from endpoints}
Processing: get_file_store(), get_health_checker(), setup_request_context() --- {3 jobs: context_setup, dependency_injection, resource_management}
Outgoing: api/v1/endpoints/*.py, app.py --- {FileStore instance, HealthChecker instance, request context dict}
"""

from typing import Optional
from fastapi import HTTPException, Header, Request

from data.storage import FileStore
from monitoring import get_logger, set_request_context
from monitoring.health import HealthChecker
from utils.crypto import generate_token

logger = get_logger(__name__)


# =============================================================================
# File Store Dependencies
# =============================================================================

_file_store: Optional[FileStore] = None


def set_file_store(store: Optional[FileStore]) -> None:
    """Set the global file store instance."""
    global _file_store
    _file_store = store


def get_file_store() -> FileStore:
    """
    Get the file store instance.

    Returns:
        FileStore: The file store built at app creation

    Raises:
        HTTPException: If the file store is not initialized
    """
    if _file_store is None:
        logger.error("File store not initialized")
        raise HTTPException(
            status_code=503,
            detail="File store not initialized. Server is starting up."
        )
    return _file_store


# =============================================================================
# Health Dependencies
# =============================================================================

_health_checker: Optional[HealthChecker] = None


def set_health_checker(checker: Optional[HealthChecker]) -> None:
    """Set the global health checker instance."""
    global _health_checker
    _health_checker = checker


def get_health_checker() -> Optional[HealthChecker]:
    """Health checker, or None before app creation."""
    return _health_checker


# =============================================================================
# Request Context Dependencies
# =============================================================================

async def setup_request_context(
    request: Request,
    x_request_id: Optional[str] = Header(None),
) -> dict:
    """
    Setup request context for logging.

    Args:
        request: FastAPI request object
        x_request_id: Optional request ID from header

    Returns:
        dict: Request context information
    """
    request_id = x_request_id or generate_token(12)
    client_addr = request.client.host if request.client else None

    set_request_context(request_id=request_id, client_addr=client_addr)

    request.state.request_id = request_id

    return {
        "request_id": request_id,
        "client_addr": client_addr,
        "method": request.method,
        "path": request.url.path
    }
