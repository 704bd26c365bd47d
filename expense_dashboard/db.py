import logging

from sqlalchemy import func
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import sessionmaker, declarative_base

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(database_url, echo=echo)


def build_sessionmaker(engine: AsyncEngine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """Create tables that do not exist yet"""
    # tables are registered on Base by importing the ORM module
    from expense_dashboard.models import orm  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("🗄️ Database tables ready")


async def verify_database(session_factory) -> int:
    """Round-trip the database and return the number of stored expenses"""
    from expense_dashboard.models.orm import Expense

    async with session_factory() as session:
        await session.execute(select(1))
        result = await session.execute(select(func.count(Expense.id)))
        count = result.scalar() or 0
    logger.info(f"✅ Database connected. Found {count} existing expenses.")
    return count
