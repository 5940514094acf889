from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from daybook.config import settings


def _engine_options(url: str) -> dict:
    """SQLite (local development) cannot pre-ping or share threads by default."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    **_engine_options(settings.DATABASE_URL),
)

async_session = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base for the document table."""
    pass


async def get_db() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency that yields a session committed after the request.

    Any exception raised by the endpoint rolls the whole request back, so a
    multi-document operation (e.g. account deletion) is never half applied.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
