"""
Health Checks - Monitoring Layer

Aggregates component health for the storage service:
- Storage directory writability (FileStore.check_health)
- Disk space on the volume holding the storage directory

@.architecture
Incoming: app.py, api/v1/endpoints/health.py, FileStore instance --- {FileStore, str component_name}
Processing: check_all(), check_component(), _check_disk(), register_checker(), _aggregate_status() --- {4 jobs: aggregation, health_checking, registration, resource_monitoring}
Outgoing: api/v1/endpoints/health.py --- {Dict[str, Any] health status, HealthCheckResult, HealthStatus enum}
"""

import time
import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

import psutil


class HealthStatus(str, Enum):
    """Health check status levels."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


@dataclass
class HealthCheckResult:
    """
    Result of a health check.

    Attributes:
        component: Component name
        status: Health status
        message: Status message
        details: Additional details
        checked_at: Timestamp of check
        response_time_ms: Check execution time
    """
    component: str
    status: HealthStatus
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    checked_at: str = field(default_factory=_utcnow)
    response_time_ms: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'component': self.component,
            'status': self.status.value,
            'message': self.message,
            'details': self.details,
            'response_time_ms': self.response_time_ms,
        }


class HealthChecker:
    """
    Runs registered component checks plus a disk check on the storage volume.

    Components register an object exposing ``async check_health() -> dict``
    with at least a ``healthy`` flag and a ``message``.
    """

    # free-space threshold below which the service reports degraded
    DISK_DEGRADED_PERCENT = 90.0

    def __init__(self, disk_path: Optional[Path] = None):
        self._start_time = time.time()
        self._checkers: Dict[str, Any] = {}
        self.disk_path = disk_path

    def register_checker(self, name: str, checker: Any) -> None:
        """
        Register a component health checker.

        Args:
            name: Component name
            checker: Object with async check_health() method
        """
        self._checkers[name] = checker

    async def _run_checker(self, name: str, checker: Any) -> HealthCheckResult:
        check_start = time.time()
        try:
            result = await checker.check_health()
        except Exception as e:
            return HealthCheckResult(
                component=name,
                status=HealthStatus.UNHEALTHY,
                message=f"Health check failed: {e}",
                details={'error': str(e)}
            )

        return HealthCheckResult(
            component=name,
            status=HealthStatus.HEALTHY if result.get('healthy', False) else HealthStatus.UNHEALTHY,
            message=result.get('message', 'Component check completed'),
            details=result,
            response_time_ms=(time.time() - check_start) * 1000
        )

    async def check_all(self) -> Dict[str, Any]:
        """
        Run all health checks.

        Returns:
            Aggregated health check results
        """
        start = time.time()
        results = []

        if self.disk_path is not None:
            results.append(await self._check_disk())

        for name, checker in self._checkers.items():
            results.append(await self._run_checker(name, checker))

        overall_status = self._aggregate_status(results)

        return {
            'status': overall_status.value,
            'timestamp': _utcnow(),
            'uptime_seconds': self.get_uptime(),
            'check_duration_ms': (time.time() - start) * 1000,
            'components': [r.to_dict() for r in results]
        }

    async def check_component(self, component: str) -> Optional[HealthCheckResult]:
        """
        Check health of specific component.

        Returns:
            HealthCheckResult or None if not found
        """
        if component == "disk" and self.disk_path is not None:
            return await self._check_disk()

        if component not in self._checkers:
            return None

        return await self._run_checker(component, self._checkers[component])

    async def _check_disk(self) -> HealthCheckResult:
        """Check free space on the volume holding the storage directory."""
        try:
            disk = await asyncio.to_thread(psutil.disk_usage, str(self.disk_path))
        except OSError as e:
            return HealthCheckResult(
                component="disk",
                status=HealthStatus.UNKNOWN,
                message=f"Failed to check disk: {e}",
                details={'error': str(e)}
            )

        status = HealthStatus.HEALTHY
        message = "Disk space healthy"
        if disk.percent > self.DISK_DEGRADED_PERCENT:
            status = HealthStatus.DEGRADED
            message = f"High disk usage: {disk.percent}%"

        return HealthCheckResult(
            component="disk",
            status=status,
            message=message,
            details={
                'path': str(self.disk_path),
                'total_gb': round(disk.total / (1024**3), 2),
                'free_gb': round(disk.free / (1024**3), 2),
                'percent_used': disk.percent
            }
        )

    def _aggregate_status(self, results: List[HealthCheckResult]) -> HealthStatus:
        """Worst component status wins."""
        if not results:
            return HealthStatus.UNKNOWN

        statuses = [r.status for r in results]

        if HealthStatus.UNHEALTHY in statuses:
            return HealthStatus.UNHEALTHY

        if HealthStatus.DEGRADED in statuses or HealthStatus.UNKNOWN in statuses:
            return HealthStatus.DEGRADED

        return HealthStatus.HEALTHY

    def get_uptime(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time


def initialize_health_checks(file_store: Any) -> HealthChecker:
    """
    Build the health checker for a file store.

    Args:
        file_store: FileStore instance

    Returns:
        Configured HealthChecker
    """
    checker = HealthChecker(disk_path=file_store.root)
    checker.register_checker('storage', file_store)
    return checker
