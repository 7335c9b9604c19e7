import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.ext.asyncio.session import async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.config import settings
from src.core.helpers.misc import DateTimeEncoder
from src.core.logging import get_logger

logger = get_logger(__name__)

# make sure all SQLModel models are imported (src.domain.models) before creating tables
# otherwise, SQLModel might fail to initialize relationships properly

DATABASE_URL = str(settings.SQLALCHEMY_DATABASE_URI)


def _engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {
        "echo": settings.DATABASE_ECHO,
        "json_serializer": lambda obj: json.dumps(obj, cls=DateTimeEncoder),
    }

    if url.startswith("sqlite"):
        # a single shared connection keeps in-memory databases alive across sessions
        options["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            options["poolclass"] = StaticPool
        return options

    options.update(
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_size=20,
        max_overflow=0,
    )
    return options


engine = create_async_engine(url=DATABASE_URL, **_engine_options(DATABASE_URL))

SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session."""
    session = SessionLocal()
    try:
        yield session
    finally:
        try:
            await session.close()
        except Exception as e:
            logger.warning("Session unexpectedly closed", exc_info=e)


db_context_manager = asynccontextmanager(get_db_session)
