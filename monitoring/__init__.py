"""
Monitoring & Observability Layer

Provides monitoring for the storage service including:
- Structured logging (JSON formatting, request ID injection)
- Metrics collection (Prometheus-compatible counters, gauges, histograms)
- Health checks (storage directory, disk space)
"""

# Logging
from .logging import (
    JSONFormatter,
    ContextFilter,
    StructuredLogger,
    configure_logging,
    configure_from_preset,
    get_logger,
    set_request_context,
    clear_request_context,
    get_request_id,
    LOGGING_PRESETS,
)

# Metrics
from .metrics import (
    Counter,
    Gauge,
    Histogram,
    MetricsRegistry,
    get_registry,
    counter,
    gauge,
    histogram,
    setup_storage_metrics,
)

# Health checks
from .health import (
    HealthStatus,
    HealthCheckResult,
    HealthChecker,
    initialize_health_checks,
)

__all__ = [
    # Logging
    'JSONFormatter',
    'ContextFilter',
    'StructuredLogger',
    'configure_logging',
    'configure_from_preset',
    'get_logger',
    'set_request_context',
    'clear_request_context',
    'get_request_id',
    'LOGGING_PRESETS',

    # Metrics
    'Counter',
    'Gauge',
    'Histogram',
    'MetricsRegistry',
    'get_registry',
    'counter',
    'gauge',
    'histogram',
    'setup_storage_metrics',

    # Health
    'HealthStatus',
    'HealthCheckResult',
    'HealthChecker',
    'initialize_health_checks',
]
