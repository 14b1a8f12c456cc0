"""Database connection and session management.

This module handles the database connection using SQLAlchemy. The engine is
created here but no schema work happens at import time: the application calls
``init_db()`` on startup and ``shutdown_db()`` on shutdown.
"""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import sessionmaker

from config import DATABASE_URL, DB_TIMEOUT_SECONDS
from models.base import Base
# Import models to ensure they are registered with Base.metadata
import models  # noqa: F401


def build_engine(url: str = DATABASE_URL, timeout: float = DB_TIMEOUT_SECONDS) -> Engine:
    """Create an engine for the given database URL.

    Args:
        url: SQLAlchemy database URL.
        timeout: Seconds to wait on a locked SQLite database.

    Returns:
        A new Engine.
    """
    connect_args = {}
    if make_url(url).get_backend_name() == "sqlite":
        connect_args = {"check_same_thread": False, "timeout": timeout}
    return create_engine(url, connect_args=connect_args)


engine = build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = None) -> None:
    """Create missing tables (and the SQLite data directory)."""
    bind = bind or engine
    database = bind.url.database
    if bind.url.get_backend_name() == "sqlite" and database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=bind)


def shutdown_db() -> None:
    """Close every pooled connection."""
    engine.dispose()


def get_db():
    """Dependency for getting a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
