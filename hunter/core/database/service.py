"""
Database Service - Core Infrastructure Layer

One async engine per process, and the two ways services touch it:

- ``get_session()``: reads; nothing is committed
- ``get_transaction()``: writes; commit on success, rollback and re-raise on
  any exception. Service code never calls ``commit()`` itself.

A whole reward chain (ledger, stats, level, rank, activity rows) runs inside
one ``get_transaction()`` block, so a failure at any step leaves no trace.

Pooling: ``AsyncAdaptedQueuePool`` sized from ``Config``, or ``NullPool``
when testing. On PostgreSQL every session sets ``statement_timeout``.

Usage Example
-------------
>>> async with DatabaseService.get_transaction() as session:
>>>     status = await DatabaseService.get_locked_entity(session, HunterStatus, 1)
>>>     status.total_experience += 50
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional, Type, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool

from hunter.core.config.config import Config
from hunter.core.database.base import Base
from hunter.core.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_POSTGRES_SCHEMES = ("postgresql://", "postgresql+asyncpg://")


class DatabaseInitializationError(RuntimeError):
    """Raised when database engine initialization fails."""


class DatabaseNotInitializedError(RuntimeError):
    """Raised when database operations are attempted before initialization."""


class DatabaseService:
    """
    Class-level engine and session management.

    - initialize() / shutdown()
    - create_schema()
    - get_session() / get_transaction()
    - get_locked_entity()
    - health_check()
    """

    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    _statement_timeout_ms: Optional[int] = None
    _init_lock: Optional[asyncio.Lock] = None

    # ========================================================================
    # Initialization & Shutdown
    # ========================================================================

    @classmethod
    def _lock(cls) -> asyncio.Lock:
        # Created lazily so the lock binds to the running loop
        if cls._init_lock is None:
            cls._init_lock = asyncio.Lock()
        return cls._init_lock

    @staticmethod
    def _engine_options() -> Dict[str, Any]:
        options: Dict[str, Any] = {"echo": Config.DATABASE_ECHO}
        if Config.is_testing():
            options["poolclass"] = NullPool
        else:
            options.update(
                poolclass=AsyncAdaptedQueuePool,
                pool_size=Config.DATABASE_POOL_SIZE,
                max_overflow=Config.DATABASE_MAX_OVERFLOW,
                pool_recycle=Config.DATABASE_POOL_RECYCLE,
                pool_timeout=Config.DATABASE_POOL_TIMEOUT,
            )
        return options

    @classmethod
    async def initialize(cls) -> None:
        """
        Create the engine and session factory. Idempotent.

        Raises
        ------
        DatabaseInitializationError
            DATABASE_URL is empty or the engine cannot be created.
        """
        async with cls._lock():
            if cls._engine is not None:
                return

            url = Config.DATABASE_URL
            if not url:
                logger.error("DATABASE_URL is not configured")
                raise DatabaseInitializationError("DATABASE_URL must be a non-empty string")

            options = cls._engine_options()
            try:
                cls._engine = create_async_engine(url, **options)
            except Exception as exc:
                logger.error(
                    "DatabaseService initialization failed",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                    exc_info=True,
                )
                raise DatabaseInitializationError(
                    f"Database initialization failed: {exc}"
                ) from exc

            cls._session_factory = async_sessionmaker(
                bind=cls._engine, class_=AsyncSession, expire_on_commit=False
            )
            cls._statement_timeout_ms = (
                Config.DATABASE_STATEMENT_TIMEOUT_MS if url.startswith(_POSTGRES_SCHEMES) else None
            )

            logger.info(
                "DatabaseService initialized",
                extra={
                    "url_scheme": url.split(":", 1)[0],
                    "pool_class": options["poolclass"].__name__,
                },
            )

    @classmethod
    async def shutdown(cls) -> None:
        """Dispose the engine and reset state. Safe to call twice."""
        async with cls._lock():
            engine, cls._engine = cls._engine, None
            cls._session_factory = None
            cls._statement_timeout_ms = None
            if engine is not None:
                await engine.dispose()
                logger.info("DatabaseService shutdown complete")

        cls._init_lock = None

    @classmethod
    def _factory(cls) -> async_sessionmaker[AsyncSession]:
        if cls._session_factory is None:
            raise DatabaseNotInitializedError(
                "DatabaseService must be initialized before use. "
                "Call DatabaseService.initialize() during startup."
            )
        return cls._session_factory

    # ========================================================================
    # Schema & Health
    # ========================================================================

    @classmethod
    async def create_schema(cls) -> None:
        """Create every table registered on ``Base.metadata`` if missing."""
        cls._factory()

        # Registers all mapped classes on Base.metadata
        import hunter.database.models  # noqa: F401

        async with cls._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database schema created", extra={"table_count": len(Base.metadata.tables)})

    @classmethod
    async def health_check(cls) -> bool:
        """``SELECT 1``; never raises."""
        if cls._engine is None:
            logger.warning("Health check called on uninitialized DatabaseService")
            return False

        try:
            async with cls._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except DBAPIError as exc:
            logger.warning(
                "Database health check failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            return False
        return True

    # ========================================================================
    # Sessions
    # ========================================================================

    @classmethod
    async def _open(cls, session: AsyncSession) -> None:
        if cls._statement_timeout_ms is not None:
            await session.execute(
                text(f"SET LOCAL statement_timeout = {cls._statement_timeout_ms}")
            )

    @classmethod
    @asynccontextmanager
    async def get_session(cls) -> AsyncGenerator[AsyncSession, None]:
        """Session for reads. Nothing is committed."""
        async with cls._factory()() as session:
            await cls._open(session)
            yield session

    @classmethod
    @asynccontextmanager
    async def get_transaction(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Session wrapped in one atomic transaction.

        Commits when the block exits normally. On any exception every write
        made inside the block is rolled back and the exception re-raised.
        """
        start = time.perf_counter()
        async with cls._factory()() as session:
            try:
                await cls._open(session)
                yield session
                await session.commit()
            except Exception as exc:
                await session.rollback()
                log = logger.error if isinstance(exc, DBAPIError) else logger.warning
                log(
                    "Transaction rolled back",
                    extra={
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                        "duration_ms": (time.perf_counter() - start) * 1000.0,
                    },
                    exc_info=isinstance(exc, DBAPIError),
                )
                raise

    @classmethod
    async def get_locked_entity(
        cls,
        session: AsyncSession,
        model: Type[T],
        primary_key: Any,
    ) -> Optional[T]:
        """
        Fetch a row with ``SELECT ... FOR UPDATE`` inside ``get_transaction()``.

        SQLite ignores the lock clause; its database-level write lock
        serializes writers instead.
        """
        return await session.get(model, primary_key, with_for_update=True)
