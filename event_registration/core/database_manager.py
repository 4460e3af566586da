"""
Database management with per-backend connection pooling
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import event, text
from sqlalchemy.exc import DisconnectionError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from event_registration.core.settings import DatabaseSettings, get_settings

logger = logging.getLogger(__name__)

# SQLAlchemy declarative base
Base = declarative_base()


class DatabaseManager:
    """Owns the async engine and session factory for one database"""

    def __init__(
        self,
        database_url: Optional[str] = None,
        db_settings: Optional[DatabaseSettings] = None,
    ) -> None:
        self.db_settings = db_settings or get_settings().database
        self.database_url = database_url or self.db_settings.database_url
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._setup_engine()

    def _setup_engine(self) -> None:
        """Setup database engine and session factory"""
        engine_kwargs = self._get_engine_kwargs(self.database_url)
        self.engine = create_async_engine(self.database_url, **engine_kwargs)

        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        self._setup_event_listeners()

        logger.info(
            "Database engine initialized with URL: %s",
            self._mask_url(self.database_url),
        )

    def _get_engine_kwargs(self, db_url: str) -> Dict[str, Any]:
        """Get engine configuration based on database type"""
        base_kwargs: Dict[str, Any] = {"echo": self.db_settings.DB_ECHO}

        if "sqlite" in db_url:
            sqlite_connect_args: Dict[str, Any] = {
                "check_same_thread": False,
                "timeout": self.db_settings.DB_SQLITE_TIMEOUT,
            }
            base_kwargs["connect_args"] = sqlite_connect_args
            # An in-memory database only lives as long as its one connection
            if ":memory:" in db_url or "mode=memory" in db_url:
                base_kwargs["poolclass"] = StaticPool
        else:
            postgres_server_settings: Dict[str, str] = {
                "application_name": "event_registration",
                "statement_timeout": str(self.db_settings.DB_STATEMENT_TIMEOUT),
                "lock_timeout": str(self.db_settings.DB_LOCK_TIMEOUT),
            }
            base_kwargs.update(
                {
                    "pool_size": self.db_settings.DB_POOL_SIZE,
                    "max_overflow": self.db_settings.DB_MAX_OVERFLOW,
                    "pool_timeout": self.db_settings.DB_POOL_TIMEOUT,
                    "pool_recycle": self.db_settings.DB_POOL_RECYCLE,
                    "pool_pre_ping": self.db_settings.DB_POOL_PRE_PING,
                    "connect_args": {
                        "command_timeout": self.db_settings.DB_COMMAND_TIMEOUT,
                        "server_settings": postgres_server_settings,
                    },
                }
            )

        return base_kwargs

    def _setup_event_listeners(self) -> None:
        """Setup database event listeners"""
        if not self.engine:
            return

        @event.listens_for(self.engine.sync_engine, "invalidate")
        def receive_invalidate(
            dbapi_connection: Any, connection_record: Any, exception: Any
        ) -> None:
            logger.warning("Database connection invalidated: %s", exception)

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get database session, rolling back whatever was left uncommitted"""
        if not self.session_factory:
            raise RuntimeError("Database not initialized")

        session = self.session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_tables(self) -> None:
        """Create all tables known to the model metadata"""
        if not self.engine:
            raise RuntimeError("Database not initialized")

        # Register models on Base.metadata
        import event_registration.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def drop_tables(self) -> None:
        if not self.engine:
            raise RuntimeError("Database not initialized")

        import event_registration.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def health_check(self) -> dict[str, Any]:
        """Database connectivity check"""
        if not self.engine:
            return {"status": "error", "message": "Database engine not initialized"}

        try:
            start_time = time.time()

            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1 as health_check"))
                if result.scalar() != 1:
                    return {"status": "error", "message": "Health check query failed"}

            response_time = (time.time() - start_time) * 1000

            return {
                "status": "healthy",
                "response_time_ms": round(response_time, 2),
                "backend": self.engine.dialect.name,
                "database_url": self._mask_url(str(self.engine.url)),
            }

        except DisconnectionError as e:
            logger.error("Database disconnection error: %s", e)
            return {"status": "error", "message": "Database disconnected"}
        except SQLAlchemyError as e:
            logger.error("Database health check failed: %s", e)
            return {"status": "error", "message": "Database query failed"}

    async def close(self) -> None:
        """Close database engine and all connections"""
        if self.engine:
            await self.engine.dispose()
            logger.info("Database engine closed")

    def _mask_url(self, url: str) -> str:
        """Mask the password in a database URL"""
        if "@" in url:
            parts = url.split("@")
            if len(parts) == 2:
                auth_part = parts[0]
                if auth_part.count(":") > 1:
                    protocol_user = auth_part.rsplit(":", 1)[0]
                    return f"{protocol_user}:***@{parts[1]}"
        return url


# Global database manager instance
db_manager = DatabaseManager()
