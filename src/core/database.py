"""Database configuration with async SQLAlchemy."""

from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy import text
import logging

from .config import get_settings
from .request_context import get_current_user_id

logger = logging.getLogger(__name__)


# Create engine and session maker lazily
_engine = None
_async_session_maker = None


def get_engine():
    """Get or create the async engine."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            str(settings.DATABASE_URL),
            echo=False,
            future=True,
            pool_size=settings.MAX_CONNECTIONS_COUNT,
            max_overflow=10,
            pool_pre_ping=True,
            pool_recycle=300,
            pool_timeout=10,
        )
    return _engine


def get_session_maker():
    """Get or create the async session maker."""
    global _async_session_maker
    if _async_session_maker is None:
        _async_session_maker = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _async_session_maker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get a database session scoped to the caller.

    Sets the PostgreSQL session variable read by the Row-Level Security
    policies, so every query only sees rows the caller may see. The
    explicit checks in ``services.access`` run on top of this.
    """
    async with get_session_maker()() as session:
        try:
            # set_config() instead of SET: asyncpg can't parameterize SET.
            # Pooled connections may still carry an admin flag, so reset it.
            user_id = get_current_user_id()
            await session.execute(
                text(
                    "SELECT set_config('app.current_user_id', :user_id, false), "
                    "set_config('app.is_admin', 'false', false)"
                ),
                {"user_id": user_id or ""}
            )
            yield session
            # Don't auto-commit - let the service layer handle it
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def get_admin_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get admin database session (bypasses RLS).

    Use this for:
    - Tenant onboarding (the new tenant has no membership yet)
    - Virus scanner callbacks (no end-user identity)
    - Scheduled maintenance such as the overdue-request sweep

    WARNING: Only use for legitimate admin operations!
    """
    async with get_session_maker()() as session:
        try:
            await session.execute(
                text(
                    "SELECT set_config('app.is_admin', 'true', false), "
                    "set_config('app.current_user_id', :user_id, false)"
                ),
                {"user_id": get_current_user_id() or ""}
            )
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """Register the models and create the engine.

    The schema itself is owned by the Alembic migrations.
    """
    import models  # noqa: F401

    get_engine()
    logger.info(f"Registered {len(models.Base.metadata.tables)} tables; schema managed by `alembic upgrade head`")


async def close_db() -> None:
    """Close database connections."""
    global _engine, _async_session_maker
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_maker = None
