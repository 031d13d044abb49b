"""Engine, declarative base and per-request sessions."""

from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from booru_stage.core.settings import Settings, settings


class Base(DeclarativeBase):
    """Declarative base for post, tag, snapshot and parameter tables."""


# Models register themselves on Base.metadata at import; alembic reads it from here.
import booru_stage.models  # noqa: E402,F401


def enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """Connect hook turning on SQLite's foreign key enforcement."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(config: Settings = settings) -> Engine:
    """Create the engine for ``config``'s database.

    SQLite connections are shared with FastAPI's worker threads and get
    foreign key enforcement so association rows follow their posts.
    """
    url = config.database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    built = create_engine(
        url,
        pool_pre_ping=True,
        echo=config.sql_debug,
        connect_args=connect_args,
    )
    if built.dialect.name == "sqlite":
        event.listen(built, "connect", enable_sqlite_foreign_keys)
    return built


engine = build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield one session per request and close it afterwards."""
    with SessionLocal() as db:
        yield db
