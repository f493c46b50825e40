from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from shared.config.settings import settings

DATABASE_URL = settings.database_url


def _connect_args() -> dict:
    if DATABASE_URL.startswith("sqlite"):
        return {"check_same_thread": False}
    if settings.use_ssl():
        # asyncpg takes the libpq sslmode names
        return {"ssl": "require"}
    return {}


engine = create_async_engine(DATABASE_URL, connect_args=_connect_args())

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
