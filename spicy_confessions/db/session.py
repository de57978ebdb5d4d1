from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from spicy_confessions.config import settings
from typing import AsyncGenerator
import logging

logger = logging.getLogger(__name__)

def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Async engine for the given URL.

    SQLite (tests, local runs) shares one connection so an in-memory
    database survives across sessions; PostgreSQL gets a checked pool.
    """
    if database_url.startswith("sqlite"):
        return create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_pre_ping=True,
    )

def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    # expire_on_commit=False keeps rows readable after the services commit
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

engine = build_engine(settings.database_url, echo=settings.DEBUG)
AsyncSessionLocal = build_session_factory(engine)

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {e}")
            raise
        finally:
            await session.close()

async def init_db():
    """Initialize database (create tables, etc.)"""
    from spicy_confessions.models import Base
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized successfully")

async def drop_db():
    """Drop every table owned by the application"""
    from spicy_confessions.models import Base
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Database dropped")

async def close_db():
    """Close database connections"""
    await engine.dispose()
    logger.info("Database connections closed")
