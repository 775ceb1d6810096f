from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base
from mdfury.core.config import config
import logging
import urllib.parse

logger = logging.getLogger(__name__)


def _normalize_database_url(raw_url: str):
    """Return (url, connect_args) with the async driver and ssl mode applied."""
    url = urllib.parse.urlparse(raw_url)
    query_dict = dict(urllib.parse.parse_qsl(url.query))
    connect_args = {}
    if 'sslmode' in query_dict:
        # asyncpg doesn't understand sslmode, move it to connect_args
        sslmode = query_dict.pop('sslmode')
        new_query = urllib.parse.urlencode(query_dict)
        raw_url = f"{url.scheme}://{url.netloc}{url.path}?{new_query}" if new_query else f"{url.scheme}://{url.netloc}{url.path}"
        connect_args = {"ssl": sslmode == "require"}

    # Ensure the URL uses the asyncpg driver
    if raw_url.startswith('postgresql://'):
        raw_url = raw_url.replace('postgresql://', 'postgresql+asyncpg://', 1)
    return raw_url, connect_args


DATABASE_URL, connect_args = _normalize_database_url(config.DATABASE_URL)

engine_options = {"pool_pre_ping": True}
if not DATABASE_URL.startswith("sqlite"):
    engine_options.update(pool_size=20, max_overflow=10)

# Create async engine with proper configuration
engine = create_async_engine(DATABASE_URL,
                             echo=False,
                             connect_args=connect_args,
                             **engine_options)

# Configure async session maker
async_session_maker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Important for async operations
    autocommit=False,
    autoflush=False)

Base = declarative_base()


async def create_tables():
    """Create all database tables"""
    try:
        async with engine.begin() as conn:
            # Import all models here to ensure they're registered with SQLAlchemy
            from mdfury.database.models import User, Document, InviteCode, ErrorLog  # noqa: F401
            await conn.run_sync(Base.metadata.create_all)

            tables = Base.metadata.tables.keys()
            logger.info(f"Created tables: {', '.join(tables)}")

    except Exception as e:
        logger.error(f"Error creating database tables: {str(e)}")
        raise


async def drop_tables():
    """Drop all database tables"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def get_db():
    """Get database session"""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()
