"""Async SQLAlchemy engine and session factory.

Learn: one engine with connection pooling, one AsyncSession per request
handed out through the get_db dependency. The auth gates and the route
handlers of a request share that session (FastAPI caches dependencies
per request), so a task loaded by the ownership gate is the same object
the handler mutates.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from smarttodo.config import settings
from smarttodo.db.models import Base


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an engine; SQLite URLs skip the pool sizing knobs."""
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)
    return create_async_engine(url, echo=echo, pool_size=5, max_overflow=15)


engine = build_engine(settings.database_url, echo=settings.debug)

# Session factory — each request gets its own session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create any missing tables."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncSession:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
