"""
Database engine, session factory and declarative base.
"""
import logging
from typing import AsyncGenerator

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from autoshop.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def _engine_options(url: str) -> dict:
    # aiosqlite connections are bound to the loop that opened them
    if url.startswith("sqlite"):
        return {"poolclass": NullPool}
    return {"pool_pre_ping": True}


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(settings.database_url),
)

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for a single request."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def reload(db: AsyncSession, model, ident: int):
    """Fetch a row again so its eager-loaded relationships are current."""
    result = await db.execute(
        select(model).where(model.id == ident).execution_options(populate_existing=True)
    )
    return result.unique().scalar_one()


def update_values(model, changes, **dump_options) -> dict:
    """
    Fields sent in a partial update.

    An explicit null on a NOT NULL column leaves the stored value alone.
    """
    columns = model.__table__.columns
    return {
        field: value
        for field, value in changes.model_dump(exclude_unset=True, **dump_options).items()
        if value is not None or field not in columns or columns[field].nullable
    }


async def init_db() -> None:
    """Create all tables registered on the metadata."""
    import autoshop.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def drop_db() -> None:
    """Drop all tables. Used by the test suite."""
    import autoshop.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
