"""Async database engine and session utilities."""
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def create_engine_for(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async SQLAlchemy engine for a database URL."""
    return create_async_engine(database_url, echo=echo, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create a session factory bound to an engine.

    Sessions keep loaded attributes after commit so records can be
    converted to snapshots once the transaction is closed.
    """
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables registered on Base (requires the PostGIS extension)."""
    import geometry_api.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
