"""Database connection and session management for the SQL storage backend.

This module provides engine creation, session factories and health checks.
Engines are built from :class:`kingdoms.config.Settings` rather than kept
as process globals, so several repositories can point at different
databases (tests use one sqlite file per test).
"""

from typing import Any

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from kingdoms.config import Settings, get_settings
from kingdoms.models import Base


def _configure_sqlite_wal(
    dbapi_connection: Any, connection_record: Any  # noqa: ARG001
) -> None:
    """Configure SQLite to use WAL mode for better concurrency.

    Args:
        dbapi_connection: The DBAPI connection
        connection_record: Connection record (required by SQLAlchemy event API)
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def create_db_engine(settings: Settings | None = None) -> Engine:
    """Create and configure a database engine.

    Args:
        settings: Settings to read the URL from; defaults to the cached settings

    Returns:
        Engine: Configured SQLAlchemy engine

    Note:
        For SQLite databases, automatically configures WAL mode.
    """
    settings = settings or get_settings()
    engine = create_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
    )
    if settings.database_url.startswith("sqlite"):
        event.listen(engine, "connect", _configure_sqlite_wal)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Build a session factory bound to ``engine``."""

    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create every table that does not exist yet."""

    Base.metadata.create_all(bind=engine)


def check_database_health(engine: Engine) -> bool:
    """Check if the database is accessible.

    Returns:
        bool: True if a trivial query succeeds, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False


def get_table_names(engine: Engine) -> list[str]:
    """Get list of all table names in the database."""

    return inspect(engine).get_table_names()
