from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig


def engine_options(db_uri: str, lock_timeout_seconds: float) -> dict:
    """
    Driver options bounding how long a statement may wait on a lock

    SQLite serializes writers; its busy timeout caps the wait for the write
    lock. asyncpg's command_timeout caps any single statement.
    """
    if db_uri.startswith("sqlite"):
        return {"connect_args": {"timeout": lock_timeout_seconds}}
    if "asyncpg" in db_uri:
        return {"connect_args": {"command_timeout": lock_timeout_seconds}}
    return {}


def create_engine(db_uri: str = ApplicationConfig.DB_URI):
    return create_async_engine(
        db_uri,
        echo=False,
        future=True,
        **engine_options(db_uri, ApplicationConfig.DB_LOCK_TIMEOUT_SECONDS),
    )


engine = create_engine()

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session
