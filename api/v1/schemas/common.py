"""
Common Schemas

Shared Pydantic models used across API endpoints.

@.architecture
Incoming: api/v1/endpoints/*.py, app.py --- {error data, service banner data}
Processing: Pydantic validation and serialization --- {2 jobs: data_validation, serialization}
Outgoing: api/v1/endpoints/*.py, app.py --- {ErrorResponse, ServiceInfoResponse, HealthStatus validated models}
"""

from typing import Any, Dict, List, Optional
from enum import Enum
from pydantic import BaseModel


# =============================================================================
# Error Models
# =============================================================================

class ErrorDetail(BaseModel):
    """Body of an RPC error."""
    code: int
    status: str
    message: str
    type: str
    hint: Optional[str] = None
    traceback: Optional[List[str]] = None


class ErrorResponse(BaseModel):
    """Error response model produced by the error handler middleware."""
    error: ErrorDetail


# Shared `responses=` table for storage routes (OpenAPI only)
ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid file id or extension"},
    404: {"model": ErrorResponse, "description": "File not found"},
    413: {"model": ErrorResponse, "description": "File too large"},
    500: {"model": ErrorResponse, "description": "Storage failure"},
}


# =============================================================================
# Status Models
# =============================================================================

class HealthStatus(str, Enum):
    """Health status levels."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


class ServiceInfoResponse(BaseModel):
    """Service banner returned at the root path."""
    name: str
    version: str
    status: str = "running"
    environment: str
    docs: str = "/docs"
