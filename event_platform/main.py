"""FastAPI application setup for the Event Service and the Booking Service."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api import bookings_router, events_router
from .clients.event_service_client import (
    CircuitBreakingEventServiceClient,
    EventServiceClient,
    LiveEventServiceClient
)
from .config import Settings, get_settings
from .database import DatabaseManager
from .middleware import (
    ErrorHandlerMiddleware,
    LoggingMiddleware,
    platform_error_handler,
    request_validation_error_handler
)
from .models import BOOKING_SERVICE_TABLES, EVENT_SERVICE_TABLES
from .utils.circuit_breaker import CircuitBreaker, CircuitBreakerConfig
from .utils.exceptions import EventPlatformError
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings, service_name: str) -> None:
    """Apply the logging settings for a service process."""
    setup_logging(
        log_level="DEBUG" if settings.debug else settings.log_level,
        log_file=settings.log_file,
        enable_json_logging=settings.enable_json_logging or settings.environment == "production",
        service_name=service_name
    )


def _install_common(app: FastAPI, settings: Settings) -> None:
    """Middleware and exception handlers shared by both services."""
    app.add_exception_handler(EventPlatformError, platform_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    # Added last runs first: CORS, then logging, then error handling
    app.add_middleware(ErrorHandlerMiddleware, debug=settings.debug)
    app.add_middleware(LoggingMiddleware, log_requests=settings.enable_request_logging)

    if settings.debug:
        # Development: Allow all origins for easier development
        cors_origins = ["*"]
        cors_allow_credentials = False  # Cannot use credentials with wildcard origins
    else:
        cors_origins = settings.cors_origins
        cors_allow_credentials = settings.cors_allow_credentials

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        expose_headers=settings.cors_expose_headers
    )


def create_event_app(
    settings: Optional[Settings] = None,
    db_manager: Optional[DatabaseManager] = None
) -> FastAPI:
    """
    Build the Event Service: event catalogue plus the seat inventory ledger.

    Args:
        settings: Settings to use, defaults to the environment
        db_manager: Database manager to use, defaults to ``events_database_url``
    """
    settings = settings or get_settings()
    db_manager = db_manager or DatabaseManager(
        settings.events_database_url,
        tables=EVENT_SERVICE_TABLES,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        name="event-service"
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Event Service")
        await db_manager.initialize()
        yield
        logger.info("Shutting down Event Service")
        await db_manager.close()

    app = FastAPI(
        title="Event Service",
        description="Event catalogue and the authoritative per-event seat counters.",
        version="1.0.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "events", "description": "Event management and seat reservation operations"},
            {"name": "health", "description": "Liveness endpoints"}
        ]
    )
    app.state.settings = settings
    app.state.db = db_manager

    _install_common(app, settings)
    app.include_router(events_router)
    return app


def create_event_client(settings: Settings) -> CircuitBreakingEventServiceClient:
    """Build the breaker-guarded Event Service client from settings."""
    breaker = CircuitBreaker(
        "event-service",
        CircuitBreakerConfig(
            failure_threshold=settings.circuit_breaker_failure_threshold,
            recovery_timeout=settings.circuit_breaker_recovery_timeout,
            success_threshold=settings.circuit_breaker_success_threshold
        )
    )
    live = LiveEventServiceClient(settings.event_service_url, timeout=settings.event_service_timeout)
    return CircuitBreakingEventServiceClient(live, breaker)


def create_booking_app(
    settings: Optional[Settings] = None,
    db_manager: Optional[DatabaseManager] = None,
    event_client: Optional[EventServiceClient] = None
) -> FastAPI:
    """
    Build the Booking Service.

    Args:
        settings: Settings to use, defaults to the environment
        db_manager: Database manager to use, defaults to ``bookings_database_url``
        event_client: Client for the Event Service, defaults to a breaker-guarded
            live client pointed at ``event_service_url``
    """
    settings = settings or get_settings()
    db_manager = db_manager or DatabaseManager(
        settings.bookings_database_url,
        tables=BOOKING_SERVICE_TABLES,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        name="booking-service"
    )
    event_client = event_client or create_event_client(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting Booking Service (event service at {settings.event_service_url})")
        await db_manager.initialize()
        yield
        logger.info("Shutting down Booking Service")
        await event_client.aclose()
        await db_manager.close()

    app = FastAPI(
        title="Booking Service",
        description="Booking lifecycle on top of the Event Service seat ledger.",
        version="1.0.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "bookings", "description": "Ticket booking operations"},
            {"name": "health", "description": "Liveness and monitoring endpoints"}
        ]
    )
    app.state.settings = settings
    app.state.db = db_manager
    app.state.event_client = event_client

    _install_common(app, settings)
    app.include_router(bookings_router)

    @app.get("/metrics", tags=["health"])
    async def get_metrics(request: Request):
        """Circuit breaker statistics of the Event Service client."""
        client = request.app.state.event_client
        breaker = getattr(client, "breaker", None)
        return {
            "circuit_breakers": [breaker.get_stats()] if breaker is not None else [],
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    return app


_SERVICES = {
    "event_app": ("event-service", create_event_app),
    "booking_app": ("booking-service", create_booking_app),
}
_apps = {}


def __getattr__(name: str):
    # Lets uvicorn import event_platform.main:event_app / :booking_app
    if name not in _SERVICES:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    if name not in _apps:
        service_name, factory = _SERVICES[name]
        settings = get_settings()
        configure_logging(settings, service_name)
        _apps[name] = factory(settings)
    return _apps[name]
