from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.ext.asyncio import async_sessionmaker
from app.config import settings


DATABASE_URL = str(settings.DATABASE_URL)


def _build_engine(url: str):
    if not url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.DEBUG, future=True, pool_pre_ping=True)

    # SQLite has no row locks; take the database write lock at BEGIN so that
    # concurrent transactions serialize instead of failing on lock upgrade.
    eng = create_async_engine(url, echo=settings.DEBUG, future=True, connect_args={"timeout": 30})

    @event.listens_for(eng.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(eng.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return eng


# create async engine
engine = _build_engine(DATABASE_URL)

# session factory
async_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncSession:  # to be used as dependency
    async with async_session() as session:
        yield session
