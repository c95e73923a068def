"""
Database connection management.

Supports:
  - SQLite via aiosqlite (local dev, no setup)
  - PostgreSQL via asyncpg

Connection string comes from settings (DATABASE_URL env var or .env).
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from docverify.config.settings import get_settings
from docverify.infrastructure.db.models import Base

logger = logging.getLogger(__name__)


def get_database_url() -> str:
    """Get database URL from settings."""
    return get_settings().database_url


def create_db_engine(url: str | None = None) -> AsyncEngine:
    """Create SQLAlchemy async engine."""
    db_url = url or get_database_url()

    if db_url.startswith("sqlite"):
        engine = create_async_engine(db_url, echo=False)
    else:
        # PostgreSQL
        engine = create_async_engine(
            db_url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,
            echo=False,
        )

    return engine


# ── Global engine & session factory ──
_engine = None
_SessionFactory = None


def get_engine() -> AsyncEngine:
    """Get or create the global engine."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def get_session_factory() -> async_sessionmaker:
    """Get or create the session factory."""
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = async_sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _SessionFactory


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create all tables. Safe to call multiple times."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created/verified")


async def dispose_db() -> None:
    """Close pooled connections of the global engine."""
    global _engine, _SessionFactory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _SessionFactory = None
