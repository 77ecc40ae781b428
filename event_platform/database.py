"""
Database connection management and session handling.

Each service owns one :class:`DatabaseManager` bound to its own database and
tables; nothing is shared between the Event Service and the Booking Service
storage.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Sequence

from fastapi import Request
from sqlalchemy import Table
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
    AsyncEngine,
)

from .models.base import Base

logger = logging.getLogger(__name__)


def create_database_engine(
    database_url: str,
    pool_size: int = 20,
    max_overflow: int = 30,
    echo: bool = False,
    application_name: str = "event_platform",
) -> AsyncEngine:
    """Create and configure the database engine with connection pooling."""
    if database_url.startswith("sqlite"):
        # SQLite pools do not take sizing arguments
        return create_async_engine(database_url, echo=echo)

    return create_async_engine(
        database_url,
        # Connection pool configuration for concurrent access
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,  # Validate connections before use
        pool_recycle=3600,   # Recycle connections every hour
        echo=echo,
        connect_args={
            "server_settings": {
                "application_name": application_name,
            }
        }
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory for database sessions."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=True,
    )


class DatabaseManager:
    """Database manager for handling connections and sessions of one service."""

    def __init__(
        self,
        database_url: str,
        tables: Optional[Sequence[Table]] = None,
        pool_size: int = 20,
        max_overflow: int = 30,
        echo: bool = False,
        name: str = "event_platform",
    ):
        self.database_url = database_url
        self.tables = list(tables) if tables is not None else None
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.echo = echo
        self.name = name
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_initialized(self) -> bool:
        return self.session_factory is not None

    async def initialize(self) -> None:
        """Initialize the database manager and create the service's tables."""
        if self.is_initialized:
            return

        logger.info(f"Initializing {self.name} database connection...")
        self.engine = create_database_engine(
            self.database_url,
            pool_size=self.pool_size,
            max_overflow=self.max_overflow,
            echo=self.echo,
            application_name=self.name,
        )
        self.session_factory = create_session_factory(self.engine)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, tables=self.tables)

        logger.info(f"{self.name} database initialized")

    async def close(self) -> None:
        """Close database connections."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            logger.info(f"{self.name} database connections closed")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get a database session with automatic cleanup.

        Usage:
            async with db_manager.get_session() as session:
                result = await session.execute(query)
        """
        if self.session_factory is None:
            raise RuntimeError("Database manager not initialized")

        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for getting database sessions of the serving app.

    Usage in FastAPI endpoints:
        @router.get("/endpoint")
        async def endpoint(db: AsyncSession = Depends(get_db)):
            ...
    """
    db_manager: DatabaseManager = request.app.state.db
    async with db_manager.get_session() as session:
        yield session
