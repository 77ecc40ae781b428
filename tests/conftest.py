"""
Pytest fixtures: one SQLite database per service, both apps in process.

The Booking Service talks to the Event Service through the real HTTP client,
routed in process with ``httpx.ASGITransport``. ASGITransport does not run
lifespan events, so database managers are initialized by the fixtures.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from event_platform.clients.event_service_client import (
    CircuitBreakingEventServiceClient,
    LiveEventServiceClient
)
from event_platform.config import Settings
from event_platform.database import DatabaseManager
from event_platform.main import create_booking_app, create_event_app
from event_platform.models import BOOKING_SERVICE_TABLES, EVENT_SERVICE_TABLES
from event_platform.utils.circuit_breaker import CircuitBreaker, CircuitBreakerConfig

from .fakes import EVENT_SERVICE_URL, StubEventClient


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        events_database_url=f"sqlite+aiosqlite:///{tmp_path / 'events.db'}",
        bookings_database_url=f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}",
        event_service_url=EVENT_SERVICE_URL,
        circuit_breaker_failure_threshold=3,
        circuit_breaker_recovery_timeout=60,
        circuit_breaker_success_threshold=1,
    )


@pytest_asyncio.fixture
async def events_db(settings: Settings) -> AsyncGenerator[DatabaseManager, None]:
    db = DatabaseManager(settings.events_database_url, tables=EVENT_SERVICE_TABLES, name="event-service")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def bookings_db(settings: Settings) -> AsyncGenerator[DatabaseManager, None]:
    db = DatabaseManager(settings.bookings_database_url, tables=BOOKING_SERVICE_TABLES, name="booking-service")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def events_session(events_db: DatabaseManager) -> AsyncGenerator[AsyncSession, None]:
    async with events_db.get_session() as session:
        yield session


@pytest_asyncio.fixture
async def bookings_session(bookings_db: DatabaseManager) -> AsyncGenerator[AsyncSession, None]:
    async with bookings_db.get_session() as session:
        yield session


@pytest.fixture
def event_app(settings: Settings, events_db: DatabaseManager) -> FastAPI:
    return create_event_app(settings, db_manager=events_db)


@pytest_asyncio.fixture
async def event_http(event_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the Event Service API."""
    async with AsyncClient(transport=ASGITransport(app=event_app), base_url=EVENT_SERVICE_URL) as client:
        yield client


@pytest.fixture
def breaker(settings: Settings) -> CircuitBreaker:
    return CircuitBreaker(
        "event-service",
        CircuitBreakerConfig(
            failure_threshold=settings.circuit_breaker_failure_threshold,
            recovery_timeout=settings.circuit_breaker_recovery_timeout,
            success_threshold=settings.circuit_breaker_success_threshold
        )
    )


@pytest_asyncio.fixture
async def event_client(
    event_app: FastAPI, breaker: CircuitBreaker
) -> AsyncGenerator[CircuitBreakingEventServiceClient, None]:
    """Breaker-guarded live client wired to the in-process Event Service."""
    live = LiveEventServiceClient(EVENT_SERVICE_URL, timeout=5.0, transport=ASGITransport(app=event_app))
    client = CircuitBreakingEventServiceClient(live, breaker)
    yield client
    await client.aclose()


@pytest.fixture
def booking_app(
    settings: Settings, bookings_db: DatabaseManager, event_client: CircuitBreakingEventServiceClient
) -> FastAPI:
    return create_booking_app(settings, db_manager=bookings_db, event_client=event_client)


@pytest_asyncio.fixture
async def booking_http(booking_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the Booking Service API."""
    async with AsyncClient(transport=ASGITransport(app=booking_app), base_url="http://booking-service") as client:
        yield client


@pytest.fixture
def stub_client() -> StubEventClient:
    return StubEventClient()
