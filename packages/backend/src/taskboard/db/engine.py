"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode: create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

Every wait on the database is bounded: pool_timeout caps how long a request
queues for a connection, and asyncpg's command_timeout caps each statement.
A slow database turns into an error the auth gate can reject on, not a hang.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskboard.config import settings


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # SQLite (tests, local dev): no pool sizing, driver-level busy timeout
        return {"connect_args": {"timeout": settings.db_command_timeout_seconds}}
    kwargs: dict = {
        "pool_size": 5,
        "max_overflow": 15,
        "pool_timeout": settings.db_pool_timeout_seconds,
    }
    if url.startswith("postgresql+asyncpg"):
        kwargs["connect_args"] = {
            "command_timeout": settings.db_command_timeout_seconds,
        }
    return kwargs


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_kwargs(settings.database_url),
)

# Session factory: each request gets its own session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """FastAPI dependency: yields a session per request, auto-closes.

    Closing rolls back anything left uncommitted, which is what undoes a
    half-run account link when the request is cancelled mid-transaction.
    """
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
