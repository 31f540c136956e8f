"""Database configuration for the ministry events backend."""
from typing import Generator
import logging

from sqlmodel import create_engine, Session
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from ministry.config import DATABASE_URL

logger = logging.getLogger(__name__)


def build_engine(database_url: str = DATABASE_URL) -> Engine:
    """Create the SQLModel engine for `database_url`."""
    if not database_url.startswith("sqlite"):
        logger.info("[DB CONFIG] Using PostgreSQL database")
        return create_engine(database_url, echo=False, pool_pre_ping=True)

    logger.info(f"[DB CONFIG] Using SQLite database: {database_url}")
    connect_args = {"check_same_thread": False}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # Keep one shared connection so every session sees the same in-memory database
        sqlite_engine = create_engine(database_url, echo=False, connect_args=connect_args, poolclass=StaticPool)
    else:
        sqlite_engine = create_engine(database_url, echo=False, connect_args=connect_args)

    @event.listens_for(sqlite_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        # Enforce event.rule_id -> recurring_event.id
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


engine = build_engine()


def get_session() -> Generator[Session, None, None]:
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session
