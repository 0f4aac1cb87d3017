from collections.abc import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from tableside.config import settings


class Base(DeclarativeBase):
    pass


def build_engine(database_url: str, **kwargs) -> AsyncEngine:
    """Create the pooled engine. Statement timeout applies to PostgreSQL only."""
    if database_url.startswith("postgresql+asyncpg"):
        kwargs.setdefault(
            "connect_args",
            {"server_settings": {"statement_timeout": str(settings.db_statement_timeout_ms)}},
        )
    return create_async_engine(database_url, echo=False, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    # Register every model with Base.metadata before creating tables
    import tableside.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as db:
        yield db
