"""
Database engine management for the Pickup Point Orders service.

Uses SQLAlchemy async engine (aiosqlite for SQLite, asyncpg for PostgreSQL)
for non-blocking DB operations inside FastAPI. Tables are auto-created on
server startup via init_db().
"""
import logging

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


# ── Engine ──────────────────────────────────────────────────────────

def to_async_url(url: str) -> str:
    """Map a plain database URL onto its async driver."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


engine = create_async_engine(
    to_async_url(settings.database_url),
    echo=False,
    future=True,
)


# ── Helpers ─────────────────────────────────────────────────────────

async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all tables. Called once on server startup."""
    # Import models so Base.metadata knows about them
    import db_models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables created (or already exist)")
