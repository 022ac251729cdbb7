"""Database engine, session factory and declarative base."""

from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from aicon.config import settings

Base = declarative_base()


def create_db_engine(database_url: str, **kwargs) -> Engine:
    """Create an engine, enabling foreign keys for SQLite.

    Args:
        database_url: SQLAlchemy database URL
        **kwargs: Extra arguments forwarded to create_engine

    Returns:
        Configured Engine
    """
    if database_url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        db_engine = create_engine(database_url, connect_args=connect_args, **kwargs)

        # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on
        @event.listens_for(db_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return db_engine

    return create_engine(database_url, pool_pre_ping=True, **kwargs)


def _ensure_sqlite_dir(database_url: str) -> None:
    prefix = "sqlite:///"
    if database_url.startswith(prefix) and ":memory:" not in database_url:
        Path(database_url[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)


engine = create_db_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(db_engine: Engine = engine) -> None:
    """Create tables that do not exist yet."""
    _ensure_sqlite_dir(str(db_engine.url))

    # Register models on Base.metadata
    import aicon.models  # noqa: F401

    Base.metadata.create_all(bind=db_engine)
