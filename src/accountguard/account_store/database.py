"""SQLite engine setup for the Account Store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from accountguard.account_store.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Engine

MEMORY_PATH = ":memory:"
# Seconds a writer waits for another connection to release the write lock
BUSY_TIMEOUT = 5.0


def is_memory_path(db_path: str) -> bool:
    return db_path == MEMORY_PATH


def create_sqlite_engine(db_path: str) -> Engine:
    """Build an engine for an accounts database and create its tables.

    File databases run in WAL mode. An in-memory database is a single
    connection shared by every thread (StaticPool), so callers must
    serialize their sessions on it.

    Args:
        db_path: Path to the SQLite file, or ":memory:".
    """
    if is_memory_path(db_path):
        engine = create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            f"sqlite:///{db_path}",
            connect_args={"check_same_thread": False, "timeout": BUSY_TIMEOUT},
        )

        @event.listens_for(engine, "connect")
        def enable_wal(dbapi_connection: object, _connection_record: object) -> None:
            cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    Base.metadata.create_all(engine)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    # Rows stay readable after the session that loaded them closes
    return sessionmaker(bind=engine, expire_on_commit=False)


def journal_mode(engine: Engine) -> str:
    """Return the SQLite journal mode in effect, e.g. "wal"."""
    with engine.connect() as conn:
        return str(conn.execute(text("PRAGMA journal_mode")).scalar())
