"""
Database connection and session management for SQLAlchemy 2.0.
Configured for async operations with SQLite locally and PostgreSQL in production.
"""
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy import text
from urllib.parse import urlparse
import logging

from affiliate_gallery.config import settings

logger = logging.getLogger(__name__)

# Create declarative base for models
Base = declarative_base()

_SUPPORTED_SCHEMES = ("sqlite+aiosqlite://", "postgresql+asyncpg://")

_engine_args = {
    "echo": False,  # Set to True for SQL query logging in development
}

# Add PostgreSQL-specific connection pooling if using PostgreSQL
if settings.DATABASE_URL.startswith("postgresql"):
    _engine_args.update({
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,  # Verify connections before using (handles stale connections)
        "pool_recycle": 3600,
        "connect_args": {
            "server_settings": {
                "application_name": "affiliate-gallery-backend"
            }
        }
    })
elif settings.DATABASE_URL.startswith("sqlite"):
    _engine_args["connect_args"] = {"check_same_thread": False}

engine = create_async_engine(settings.DATABASE_URL, **_engine_args)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncSession:
    """
    FastAPI dependency yielding one session per request.
    Commits when the route returns normally, rolls back when it raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {str(e)}", exc_info=True)
            raise
        finally:
            await session.close()


def _validate_database_url(url: str) -> tuple[bool, str]:
    """
    Validate database URL and provide diagnostic information.
    Returns (is_valid, diagnostic_message)
    """
    if not url:
        return False, "DATABASE_URL is empty"

    if not url.startswith(_SUPPORTED_SCHEMES):
        scheme = urlparse(url).scheme or url
        return False, (
            f"Unsupported database URL scheme '{scheme}'. "
            f"Expected one of: {', '.join(_SUPPORTED_SCHEMES)}"
        )

    if url.startswith("sqlite"):
        return True, f"SQLite database: {url.split(':///', 1)[-1] or ':memory:'}"

    parsed = urlparse(url)
    if not parsed.hostname:
        return False, "No hostname found in DATABASE_URL"

    return True, f"Hostname: {parsed.hostname}, Port: {parsed.port or 5432}, Database: {parsed.path or '/postgres'}"


async def init_db():
    """
    Initialize database connection.
    Verifies connectivity and creates missing tables when AUTO_CREATE_TABLES is set.
    """
    is_valid, diagnostic = _validate_database_url(settings.DATABASE_URL)
    if not is_valid:
        logger.error(f"Invalid DATABASE_URL: {diagnostic}")
        raise ValueError(f"Invalid DATABASE_URL: {diagnostic}")

    logger.info(f"Database URL validation: {diagnostic}")

    # Register models on Base.metadata
    from affiliate_gallery import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        if settings.AUTO_CREATE_TABLES:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables verified")
    logger.info("Database connection initialized successfully")


async def close_db():
    """Dispose of the engine pool on shutdown."""
    await engine.dispose()
    logger.info("Database connections closed")
