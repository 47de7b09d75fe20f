"""
Database connection using SQLAlchemy + asyncpg.

Holds debate records and user profiles (Supabase Postgres in production).
Live debate state does NOT live here: sessions are in memory and only
their arguments and verdicts are written through the record store.

When DATABASE_URL is empty there is no engine at all and the app falls
back to in-memory record/profile stores (local dev and tests).
"""

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from debate_room.config import get_settings

settings = get_settings()

# Connection pool to Postgres
# - Reuses connections instead of opening a new one per query
# - echo logs all SQL statements (SQL_ECHO=true while debugging)
engine: Optional[AsyncEngine] = (
    create_async_engine(settings.database_url, echo=settings.sql_echo)
    if settings.database_url
    else None
)

# expire_on_commit=False keeps objects usable after commit (needed for async)
async_session: Optional[async_sessionmaker[AsyncSession]] = (
    async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    if engine is not None
    else None
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass
