"""
Postboard Backend - Database Engine and Request Transactions
==============================================================

What:  The async engine for the `posts` table, the session factory and the
       per-request transaction dependency.
How:   Every request runs inside one transaction. Service calls execute their
       statements (INSERT + flush, UPDATE ... RETURNING, DELETE) in it, and
       the dependency commits once the handler has produced its response.
Who:   Routes take `db: AsyncSession = Depends(get_db_session)`; /health and
       Alembic use `engine` directly.

Pool settings come from DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_PRE_PING and
DB_POOL_RECYCLE. The engine connects lazily, so importing this module never
touches the database.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from postboard.config import settings

engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=settings.db_pool_pre_ping,
    pool_recycle=settings.db_pool_recycle,
    echo=settings.log_level == "DEBUG",
)

# Responses are built from ORM rows after commit, so rows must not expire
async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


class Base(DeclarativeBase):
    """Declarative base; its metadata drives Alembic autogenerate."""


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped transaction.

    Commits after the handler returns. Any exception raised by the handler,
    including application errors such as ConflictError after a failed flush,
    rolls the transaction back before it propagates to the exception handlers.
    A like or comment UPDATE therefore holds its row lock until the request
    either commits or rolls back.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    """Close pooled connections on shutdown."""
    await engine.dispose()
