"""Declarative base, timestamp columns and async engine construction."""

import os
from datetime import datetime

from sqlalchemy import DateTime, MetaData, func
from sqlalchemy.ext.asyncio import AsyncAttrs, AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

DEFAULT_DATABASE_URL = "postgresql+asyncpg://localhost/depwatch"

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(AsyncAttrs, DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class TimestampMixin:
    """``created_at`` set by the database on insert, ``updated_at`` on every update."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


def create_engine(database_url: str | None = None) -> AsyncEngine:
    """Build the pooled engine for *database_url* or ``DEPWATCH_DATABASE_URL``."""
    url = database_url or os.environ.get("DEPWATCH_DATABASE_URL", DEFAULT_DATABASE_URL)
    return create_async_engine(
        url,
        pool_pre_ping=True,
        pool_size=int(os.environ.get("DEPWATCH_DB_POOL_SIZE", "5")),
        max_overflow=10,
        pool_recycle=1800,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create missing tables. There are no migrations; existing tables are left alone."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
