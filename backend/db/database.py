import ssl
from collections.abc import AsyncGenerator
from typing import Any, Optional, Sequence

from fastapi import Request
from sqlalchemy import Row
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def normalize_database_url(url: str) -> str:
    """Point plain Postgres DSNs at the asyncpg driver."""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


class Database:
    """Process-wide store handle: one async engine plus its session maker.

    Built once by the application factory and handed to whoever needs it,
    so tests can point it at a throwaway store.
    """

    def __init__(self, url: str, echo: bool = False, ssl_enabled: bool = False, **engine_kwargs: Any):
        if ssl_enabled:
            ctx = ssl.create_default_context()
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
            engine_kwargs.setdefault("connect_args", {})["ssl"] = ctx

        self.engine = create_async_engine(normalize_database_url(url), echo=echo, **engine_kwargs)
        self.session_maker = async_sessionmaker(self.engine, expire_on_commit=False)

    async def create_all(self):
        # Importing the models registers their tables on Base.metadata
        import db.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self):
        await self.engine.dispose()


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    database: Database = request.app.state.database
    async with database.session_maker() as session:
        yield session


async def query(session: AsyncSession, statement, params: Optional[dict] = None) -> Sequence[Row]:
    result = await session.execute(statement, params or {})
    return result.all()


async def query_one(session: AsyncSession, statement, params: Optional[dict] = None) -> Optional[Row]:
    result = await session.execute(statement, params or {})
    return result.first()
