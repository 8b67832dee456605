"""
Health Check Endpoints

Storage health checks integrating with the monitoring layer.

@.architecture
Incoming: api/v1/router.py, Load Balancers, Operators (HTTP GET) --- {HTTP requests to /v1/health, /v1/health/live, /v1/health/ready, /v1/health/component/{name}}
Processing: health_check(), liveness_probe(), readiness_probe(), check_component_health() --- {3 jobs: component_checking, health_monitoring, resource_monitoring}
Outgoing: monitoring/health.py, api/dependencies.py, Load Balancers (HTTP) --- {health check results, HealthCheckResponse, SimpleHealthResponse, ComponentHealth schemas}
"""

import time
from fastapi import APIRouter, Depends, HTTPException, Response, status

from api.dependencies import get_health_checker, setup_request_context
from api.v1.schemas.health import (
    HealthCheckResponse,
    SimpleHealthResponse,
    ComponentHealth,
)
from api.v1.schemas.common import HealthStatus
from monitoring import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["health"])

# Track startup time
START_TIME = time.time()


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health check",
    description="Storage directory writability and disk space; 503 when unhealthy"
)
async def health_check(
    response: Response,
    _context: dict = Depends(setup_request_context)
) -> HealthCheckResponse:
    checker = get_health_checker()

    if checker is None:
        logger.warning("Health checker not initialized, returning basic status")
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthCheckResponse(
            status=HealthStatus.UNKNOWN,
            timestamp=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            uptime_seconds=time.time() - START_TIME,
            check_duration_ms=0.0,
            components=[]
        )

    health_data = await checker.check_all()
    overall = HealthStatus(health_data["status"])

    if overall == HealthStatus.UNHEALTHY:
        logger.warning("Health check reports unhealthy", components=health_data["components"])
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthCheckResponse(
        status=overall,
        timestamp=health_data["timestamp"],
        uptime_seconds=health_data["uptime_seconds"],
        check_duration_ms=health_data["check_duration_ms"],
        components=[ComponentHealth(**comp) for comp in health_data["components"]]
    )


@router.get(
    "/health/component/{component_name}",
    response_model=ComponentHealth,
    summary="Check specific component",
    description="Check health of one component (storage, disk)"
)
async def check_component_health(
    component_name: str,
    _context: dict = Depends(setup_request_context)
) -> ComponentHealth:
    """
    Check specific component health.

    Raises:
        HTTPException: If the checker is not ready or the component is unknown
    """
    checker = get_health_checker()

    if checker is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Health checker not initialized"
        )

    result = await checker.check_component(component_name)

    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Component '{component_name}' not found"
        )

    return ComponentHealth(**result.to_dict())


# =============================================================================
# Readiness and Liveness Probes (Kubernetes-style)
# =============================================================================

@router.get(
    "/health/ready",
    summary="Readiness probe",
    description="Ready when the storage directory is writable"
)
async def readiness_probe(response: Response) -> dict:
    checker = get_health_checker()

    if checker is None:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"ready": False, "reason": "Health checker not initialized"}

    result = await checker.check_component("storage")
    if result is None or result.status != HealthStatus.HEALTHY:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"ready": False, "reason": result.message if result else "Storage not registered"}

    return {"ready": True}


@router.get(
    "/health/live",
    response_model=SimpleHealthResponse,
    summary="Liveness probe",
    description="Check if application is alive"
)
async def liveness_probe() -> SimpleHealthResponse:
    return SimpleHealthResponse(
        status="ok",
        timestamp=time.time(),
        uptime_seconds=time.time() - START_TIME
    )
