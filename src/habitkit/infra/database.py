"""Database infrastructure for the SQLite backend."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..logging_config import get_logger
from ..models.records import HabitEntryRecord, HabitRecord

logger = get_logger(__name__)

TABLES = (HabitRecord.__table__, HabitEntryRecord.__table__)


def _install_pragmas(engine: Engine, pragmas: dict[str, str]) -> None:
    """Run the configured PRAGMAs on every new DBAPI connection."""

    @event.listens_for(engine, "connect")
    def _apply(dbapi_connection, _connection_record) -> None:  # pragma: no cover - driver hook
        cursor = dbapi_connection.cursor()
        try:
            for key, value in pragmas.items():
                cursor.execute(f"PRAGMA {key}={value}")
        finally:
            cursor.close()


def create_db_engine(config: BaseConfig) -> Engine:
    """Create SQLModel engine from configuration."""
    engine = create_engine(config.DATABASE_URL, **config.sqlalchemy_engine_options())
    if engine.dialect.name == "sqlite":
        _install_pragmas(engine, config.SQLITE_PRAGMAS)
    return engine


def init_database(engine: Engine) -> None:
    """Create the habits and habit_entries tables with their indexes.

    ``create_all`` skips anything that already exists, so repeated calls are harmless.
    """
    SQLModel.metadata.create_all(engine, tables=list(TABLES))
    logger.debug("Schema applied", extra={"url": str(engine.url)})


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """Provide a transactional scope around operations."""
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_session_factory(engine: Engine):
    """Create a session factory function."""

    def factory():
        """Create a new transactional session scope."""
        return session_scope(engine)

    return factory


__all__ = ["TABLES", "create_db_engine", "create_session_factory", "init_database", "session_scope"]
