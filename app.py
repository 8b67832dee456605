"""
FastAPI Application Factory

Creates and configures the FastAPI application with:
- API versioning
- Middleware (CORS, error handling)
- File store construction and dependency registration
- Lifecycle logging (startup/shutdown)

@.architecture
Incoming: main.py, tests/conftest.py, config/settings.py, api/v1/router.py, api/middleware/*.py --- {Settings object, APIRouter instances, middleware constructors}
Processing: create_app(), startup_event(), shutdown_event(), metrics() --- {6 jobs: application_creation, dependency_injection, health_monitoring, lifecycle_management, middleware_registration, routing_registration}
Outgoing: main.py, RPC clients (HTTP) --- {FastAPI application instance, HTTP responses}
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
import time

from config.settings import Settings, get_settings
from api.v1.router import api_v1_router
from api.middleware import create_error_handler_middleware
from api.dependencies import set_file_store, set_health_checker
from api.v1.schemas.common import ServiceInfoResponse
from data.storage import FileStore
from monitoring import (
    configure_from_preset,
    get_logger,
    get_registry,
    initialize_health_checks,
)

logger = get_logger(__name__)

# Track startup time for uptime calculation
START_TIME = time.time()

LOGGING_PRESET_BY_ENVIRONMENT = {
    "production": "production",
    "test": "testing",
    "development": "development",
}


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    The storage directory is created here, so the app is usable without
    lifespan events (e.g. under httpx ASGITransport).

    Args:
        settings: Settings to use (loaded via get_settings() if None)

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    preset = LOGGING_PRESET_BY_ENVIRONMENT[settings.environment]
    if preset == "production":
        configure_from_preset(
            preset,
            level=settings.monitoring.log_level,
            format_type=settings.monitoring.log_format
        )
    else:
        configure_from_preset(preset)

    logger.info(f"Creating {settings.app_name} application (environment: {settings.environment})")

    # ==========================================================================
    # Storage
    # ==========================================================================

    file_store = FileStore.from_settings(settings.storage)
    set_file_store(file_store)
    set_health_checker(initialize_health_checks(file_store))

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Remote blob file storage service",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        redirect_slashes=False
    )
    app.state.settings = settings
    app.state.file_store = file_store

    # ==========================================================================
    # Middleware Configuration
    # ==========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.allowed_origins,
        allow_credentials=settings.server.cors_allow_credentials,
        allow_methods=settings.server.cors_allow_methods,
        allow_headers=settings.server.cors_allow_headers,
    )

    # Error handler middleware (outermost)
    middleware_class, middleware_kwargs = create_error_handler_middleware(
        development=settings.environment == "development"
    )
    app.add_middleware(middleware_class, **middleware_kwargs)

    # ==========================================================================
    # API Routers
    # ==========================================================================

    app.include_router(api_v1_router)

    @app.get("/", response_model=ServiceInfoResponse)
    async def root() -> ServiceInfoResponse:
        """Service banner."""
        return ServiceInfoResponse(
            name=settings.app_name,
            version=settings.app_version,
            environment=settings.environment,
        )

    @app.get("/health")
    async def health_check():
        """
        Root-level health check.

        200 when the storage directory is writable, 503 otherwise.
        """
        storage = await file_store.check_health()
        return JSONResponse(
            status_code=200 if storage["healthy"] else 503,
            content={
                "status": "ok" if storage["healthy"] else "unhealthy",
                "timestamp": time.time(),
                "uptime_seconds": time.time() - START_TIME,
                "version": settings.app_version,
                "storage": storage
            }
        )

    if settings.monitoring.metrics_enabled:
        @app.get("/metrics", response_class=PlainTextResponse)
        async def metrics():
            """Prometheus text exposition."""
            return PlainTextResponse(
                get_registry().export_prometheus(),
                media_type="text/plain; version=0.0.4"
            )

    # ==========================================================================
    # Lifecycle Events
    # ==========================================================================

    @app.on_event("startup")
    async def startup_event():
        logger.info("=== Application Startup ===")
        file_store.ensure_root()
        logger.info(f"Serving files from {file_store.root}")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("=== Application Shutdown ===")

    return app
