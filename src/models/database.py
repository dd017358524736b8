"""Async database setup for the records table"""

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
import logging

from src.config import settings

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> Dict[str, Any]:
    # aiosqlite connections are shared across the API's worker threads
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def build_engine(url: Optional[str] = None) -> AsyncEngine:
    url = url or settings.DATABASE_URL
    return create_async_engine(
        url,
        echo=settings.DEBUG,
        connect_args=_connect_args(url),
    )


engine = build_engine()

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

Base = declarative_base()


async def init_db() -> None:
    """Create the records table if it does not exist yet"""
    from src.models import db_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Database ready ({engine.url.render_as_string(hide_password=True)})")


async def close_db() -> None:
    """Release pooled connections"""
    await engine.dispose()
