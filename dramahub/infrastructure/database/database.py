from collections.abc import Generator

from sqlalchemy import event
from sqlalchemy.future import Engine
from sqlmodel import Session, SQLModel, create_engine

from ...config import settings


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on FK enforcement so deletes cascade to tags, versions and sessions."""

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _get_engine() -> Engine:
    database_url = settings.database_url
    connect_args: dict[str, bool] = {}
    engine_kwargs: dict[str, int | bool] = {}

    # Configure connection args based on database type
    if "sqlite" in database_url:
        # FastAPI runs sync endpoints in a threadpool
        connect_args["check_same_thread"] = False
    elif "postgresql" in database_url:
        # PostgreSQL specific configurations
        engine_kwargs["pool_pre_ping"] = True
        engine_kwargs["pool_size"] = 10
        engine_kwargs["max_overflow"] = 20

    engine = create_engine(
        database_url,
        # echo=True,  # Enable for SQL debugging
        connect_args=connect_args,
        **engine_kwargs,
    )
    if "sqlite" in database_url:
        enable_sqlite_foreign_keys(engine)
    return engine


def init_db(engine: Engine) -> None:
    # Import models so their tables are registered on the metadata
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


_engine: Engine | None = None


def get_main_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = _get_engine()
    return _engine


def get_session() -> Generator[Session, None, None]:
    with Session(get_main_engine()) as session:
        yield session
