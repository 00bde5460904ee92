"""Async engine, session factory and schema management."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from casegraph.core.config import settings
from casegraph.database.base import Base
from casegraph.utils.logging import get_logger

LOGGER = get_logger(__name__)

engine = create_async_engine(
    settings.database.url,
    pool_size=settings.database.pool_size,
    max_overflow=settings.database.max_overflow,
    echo=settings.database.echo,
    future=True,
)

async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class DatabaseClient:
    """PostgreSQL client with connection checks and schema creation."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def connect(self) -> None:
        """Test the database connection."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        LOGGER.info("Database connection successful")

    async def create_tables(self) -> None:
        """Create missing tables for every model without dropping existing ones."""
        # Import models so they register on Base.metadata
        from casegraph.database import models  # noqa: F401

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            LOGGER.info("Database tables created/verified successfully")
        except Exception as e:
            LOGGER.error("Failed to create database tables", exc_info=True, extra={"error": str(e)})
            raise

    async def disconnect(self) -> None:
        await self.engine.dispose()
        LOGGER.info("Database connection closed")


db_client = DatabaseClient(engine)


async def init_database(create_tables: bool = True) -> None:
    """Check connectivity and optionally create the schema."""
    LOGGER.info("Initializing database connection...")
    await db_client.connect()
    if create_tables:
        await db_client.create_tables()
    LOGGER.info("Database initialization completed")
