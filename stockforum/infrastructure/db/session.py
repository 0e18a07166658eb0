# stockforum/infrastructure/db/session.py
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from stockforum.config.settings import settings

Base = declarative_base()


def make_engine(url: str):
    if url.startswith("sqlite"):
        # sqlite (tests, local dev) does not take pool sizing arguments
        return create_async_engine(url, echo=False, future=True)
    return create_async_engine(
        url,
        echo=False,
        future=True,
        pool_pre_ping=True,      # validates connections
        pool_recycle=300,        # kills idle connections
        pool_size=10,
        max_overflow=20,
    )


engine = make_engine(settings.DATABASE_URL)

# Async session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_session():
    async with AsyncSessionLocal() as session:
        yield session


async def create_tables(bind=None) -> None:
    """Create missing tables. Existing tables are left alone."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables(bind=None) -> None:
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
