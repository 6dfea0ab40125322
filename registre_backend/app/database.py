# registre_backend/app/database.py

"""
Async database access with schema-aware sessions.

Request handlers get one session through ``get_db`` and own its transaction.
Read-only collaborators that must run concurrently (the record sources of the
register export) open their own sessions from ``get_session_factory``.
"""

import asyncio
import logging
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .models.base import Base, SCHEMA_NAME

logger = logging.getLogger(__name__)


def to_async_url(database_url: str) -> str:
    """Plain ``postgresql://`` URLs are switched to the asyncpg driver."""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return database_url


class DatabaseManager:
    """Owns the async engine and the session factory of the process."""

    def __init__(self) -> None:
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None
        self.schema: str = SCHEMA_NAME

    @property
    def is_initialized(self) -> bool:
        return self.session_factory is not None

    async def initialize(
        self,
        database_url: str,
        schema: str = SCHEMA_NAME,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        **engine_options: Any,
    ) -> None:
        """
        Create the engine and check connectivity, retrying with a linear
        backoff. ``engine_options`` go to ``create_async_engine``.
        """
        if self.is_initialized:
            logger.warning("Database already initialized")
            return

        url = to_async_url(database_url)
        last_error: Optional[Exception] = None
        for attempt in range(1, max_retries + 1):
            engine = create_async_engine(
                url,
                pool_pre_ping=True,
                connect_args={"server_settings": {"search_path": f"{schema},public"}},
                **engine_options,
            )
            try:
                async with engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
            except Exception as e:
                last_error = e
                await engine.dispose()
                logger.error(
                    f"Database connection attempt {attempt}/{max_retries} failed: {e}"
                )
                if attempt < max_retries:
                    await asyncio.sleep(retry_delay * attempt)
                continue

            self.engine = engine
            self.schema = schema
            self.session_factory = async_sessionmaker(
                bind=engine, expire_on_commit=False, class_=AsyncSession
            )
            self._log_pool_events(engine)
            logger.info(f"Database initialized with schema: {schema}")
            return

        raise RuntimeError(
            f"Failed to initialize database after {max_retries} attempts"
        ) from last_error

    @staticmethod
    def _log_pool_events(engine: AsyncEngine) -> None:
        @event.listens_for(engine.sync_engine, "checkout")
        def on_checkout(dbapi_connection, connection_record, connection_proxy):
            logger.debug("Connection checked out from pool")

        @event.listens_for(engine.sync_engine, "checkin")
        def on_checkin(dbapi_connection, connection_record):
            logger.debug("Connection returned to pool")

    async def create_all_tables(self) -> None:
        if self.engine is None:
            raise RuntimeError("Database not initialized")

        async with self.engine.begin() as conn:
            await conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{self.schema}"'))
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Tables created in schema: {self.schema}")

    def pool_status(self) -> Dict[str, Any]:
        if self.engine is None:
            return {"status": "not initialized"}
        pool = self.engine.sync_engine.pool
        return {"status": pool.status()}

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Database connections closed")
        self.engine = None
        self.session_factory = None


db_manager = DatabaseManager()


def get_session_factory() -> async_sessionmaker:
    """Factory for sessions independent of the request transaction."""
    if not db_manager.is_initialized:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return db_manager.session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request; the caller commits or rolls back."""
    async with get_session_factory()() as session:
        yield session


async def init_db(
    database_url: str,
    create_tables: bool = False,
    schema: str = SCHEMA_NAME,
    **engine_options: Any,
) -> None:
    await db_manager.initialize(database_url, schema=schema, **engine_options)

    if create_tables:
        await db_manager.create_all_tables()


async def check_db_health() -> Dict[str, Any]:
    """Connectivity probe for the health endpoint; never raises."""
    if db_manager.engine is None:
        return {"status": "unhealthy", "message": "Database not initialized"}
    try:
        async with db_manager.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return {"status": "unhealthy", "message": str(e)}
    return {"status": "healthy", "connection_pool": db_manager.pool_status()}


__all__ = [
    "DatabaseManager",
    "db_manager",
    "get_db",
    "get_session_factory",
    "init_db",
    "check_db_health",
]
