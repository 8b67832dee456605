"""
Health Check Schemas

Pydantic models for health check endpoints.

@.architecture
Incoming: api/v1/endpoints/health.py, monitoring/health.py --- {health check results, component status}
Processing: Pydantic validation and serialization --- {2 jobs: data_validation, serialization}
Outgoing: api/v1/endpoints/health.py --- {HealthCheckResponse, ComponentHealth, SimpleHealthResponse validated models}
"""

from typing import Dict, List, Optional, Any
from pydantic import BaseModel, ConfigDict

from .common import HealthStatus


class ComponentHealth(BaseModel):
    """Health status of a single component."""
    component: str
    status: HealthStatus
    message: Optional[str] = None
    response_time_ms: Optional[float] = None
    details: Optional[Dict[str, Any]] = None


class HealthCheckResponse(BaseModel):
    """Health check response covering storage and disk."""
    status: HealthStatus
    timestamp: str
    uptime_seconds: float
    check_duration_ms: float
    components: List[ComponentHealth]

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "status": "healthy",
            "timestamp": "2026-01-01T12:00:00Z",
            "uptime_seconds": 3600,
            "check_duration_ms": 1.4,
            "components": [
                {
                    "component": "disk",
                    "status": "healthy",
                    "message": "Disk space healthy",
                    "details": {"percent_used": 41.0}
                },
                {
                    "component": "storage",
                    "status": "healthy",
                    "message": "Storage directory writable",
                    "response_time_ms": 0.8
                }
            ]
        }
    })


class SimpleHealthResponse(BaseModel):
    """Liveness response."""
    status: str = "ok"
    timestamp: float
    uptime_seconds: float
