from sqlalchemy.ext.asyncio.engine import AsyncEngine
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.core.logging import get_logger

logger = get_logger(__name__)


async def init_db(db_engine: AsyncEngine) -> None:
    """Verify the database answers a trivial query."""
    async with AsyncSession(db_engine) as session:
        (await session.exec(select(1))).all()


async def check_db_health(db_engine: AsyncEngine) -> dict[str, str]:
    try:
        async with AsyncSession(db_engine) as session:
            await session.exec(select(1))
            return {"status": "ok"}
    except Exception as e:
        logger.error(f"src.core.database.utils.check_db_health:: Database health check failed: {e}")
        return {"status": "error"}


async def create_tables(db_engine: AsyncEngine) -> None:
    """Create every table registered on ``SQLModel.metadata`` that does not exist yet."""
    import src.domain.models  # noqa: F401

    async with db_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    logger.info("Database tables ensured", extra={"event_type": "db_tables_created"})


async def drop_tables(db_engine: AsyncEngine) -> None:
    import src.domain.models  # noqa: F401

    async with db_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
