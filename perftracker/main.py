"""
Performance Tracker API - revenue attribution ingestion and reporting.

Features:
- Revenue event ingestion (POST /api/track/revenue)
- Filtered, paginated reports with per-channel totals (GET /api/track/revenue)
- Structured logging with correlation IDs
- Prometheus metrics
- Health checks (liveness and readiness)
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from . import __version__
from .config import Settings, get_settings
from .logging import SERVICE_NAME, setup_logging, get_logger
from .api.router import router
from .middleware import (
    CorrelationIdMiddleware,
    ErrorHandlerMiddleware,
    MetricsMiddleware,
    ValidationMiddleware,
    register_exception_handlers,
)
from .metrics import Metrics
from .health import HealthChecker
from .services.revenue_service import RevenueService

logger = get_logger()


def create_app(settings: Settings | None = None, service: RevenueService | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration (defaults to environment settings)
        service: Revenue service to expose (a new one is built from settings
            when omitted, so each app owns its own store)
    """
    settings = settings or get_settings()
    setup_logging(json_output=settings.LOG_JSON, service_name=SERVICE_NAME, level=settings.LOG_LEVEL)

    metrics = Metrics(service_name=SERVICE_NAME, version=__version__)
    if service is None:
        service = RevenueService(
            cache_ttl_seconds=settings.CACHE_TTL_SECONDS,
            default_page_size=settings.DEFAULT_PAGE_SIZE,
        )
    service.metrics = metrics
    health_checker = HealthChecker(service, service_name=SERVICE_NAME, version=__version__)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "service_starting",
            version=__version__,
            env=settings.ENV,
            cache_ttl_seconds=settings.CACHE_TTL_SECONDS,
        )
        yield
        logger.info("service_stopping", events_stored=service.event_count())
        metrics.app_up.labels(service=SERVICE_NAME, version=__version__).set(0)

    app = FastAPI(
        title="Performance Tracker API",
        version=__version__,
        description="Revenue attribution ingestion and reporting",
        lifespan=lifespan,
    )
    app.state.revenue_service = service
    app.state.metrics = metrics
    app.state.settings = settings

    # Last added runs first: CORS, correlation, metrics, errors, validation
    app.add_middleware(ValidationMiddleware, max_size=settings.MAX_EVENT_SIZE)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(MetricsMiddleware, metrics=metrics)
    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    register_exception_handlers(app)

    app.include_router(router)

    metrics_app = make_asgi_app(registry=metrics.registry)
    app.mount("/metrics", metrics_app)

    @app.get("/health")
    async def health():
        """
        Liveness probe - basic health check.

        Returns 200 if service is running.
        """
        logger.debug("health_check_liveness")
        return health_checker.liveness()

    @app.get("/health/ready")
    async def health_ready():
        """
        Readiness probe.

        Returns:
            200: Service is ready to handle traffic
            503: Service is not ready
        """
        logger.debug("health_check_readiness")
        metrics.update_system_metrics()
        result = health_checker.readiness()
        status_code = 200 if result["status"] == "ready" else 503
        return JSONResponse(content=result, status_code=status_code)

    return app


app = create_app()


def run():
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "perftracker.main:app",
        host=settings.SERVICE_HOST,
        port=settings.SERVICE_PORT,
    )


if __name__ == "__main__":
    run()
