import pathlib

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from idle_miner.load_secrets import database_url, db_backend, db_name, host, password, port, user

SQLITE_PATH = pathlib.Path(__file__).parents[1] / "idle_miner.sqlite3"


def build_database_url() -> str:
    """Resolve the database URL from the environment

    Returns:
        str: DATABASE_URL if set, else an aiosqlite file URL for DB_BACKEND=sqlite,
        else an asyncpg URL built from the DB_* credentials
    """
    if database_url:
        return database_url
    if db_backend == "sqlite":
        return f"sqlite+aiosqlite:///{SQLITE_PATH}"
    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db_name}"


url = build_database_url()
if url.startswith("sqlite"):
    engine = create_async_engine(url=url, echo=False)
else:
    engine = create_async_engine(url, pool_size=20, max_overflow=20)

# Centralized session factory to avoid creating it in router modules.
Session = async_sessionmaker(
    autocommit=False,
    class_=AsyncSession,
    autoflush=True,
    expire_on_commit=False,
    bind=engine,
)
