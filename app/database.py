# app/database.py
"""Async engine and session factory for the listing tables."""
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base

from app.core.config import get_settings

settings = get_settings()

database_url = settings.DATABASE_URL
if not database_url:
    raise ValueError("DATABASE_URL is not set in environment variables")

# Hosted Postgres URLs come without the driver; the app needs asyncpg
if database_url.startswith('postgresql://'):
    database_url = database_url.replace('postgresql://', 'postgresql+asyncpg://', 1)

engine_kwargs = {"echo": False}
if not database_url.startswith("sqlite"):
    # One publish run holds a session for a handful of short queries
    engine_kwargs.update(pool_size=5, max_overflow=10, pool_pre_ping=True, pool_recycle=1800)

engine = create_async_engine(database_url, **engine_kwargs)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()
