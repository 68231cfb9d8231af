"""SQLite engine and session lifecycle for the item store."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from shopbot.config import get_settings
from shopbot.db.models import Base

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_sessions: Optional[sessionmaker[Session]] = None
_init_lock = threading.Lock()


def _sqlite_url(path: Path) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{path}"


def get_engine(database_path: Path | None = None) -> Engine:
    """Return the process-wide engine, creating the schema on first use."""
    global _engine, _sessions

    if _engine is not None:
        return _engine

    # Store calls arrive on worker threads, so the first ones can race here.
    with _init_lock:
        if _engine is None:
            path = database_path or get_settings().database_path
            engine = create_engine(_sqlite_url(path), connect_args={"check_same_thread": False})
            try:
                Base.metadata.create_all(engine)
            except OperationalError as exc:
                # Another process created the schema between the check and the CREATE.
                if "already exists" not in str(exc).lower():
                    raise
                logger.debug("Item store schema already initialized: %s", exc)
            _sessions = sessionmaker(bind=engine)
            _engine = engine
            logger.debug("Opened item store at %s", path)
    return _engine


def get_session() -> Session:
    if _sessions is None:
        get_engine()
    assert _sessions is not None  # for mypy
    return _sessions()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Yield a session inside one transaction: commit on success, roll back on error."""

    with get_session() as session, session.begin():
        yield session


def ping() -> bool:
    """Return True when the database answers a trivial query."""

    try:
        with session_scope() as session:
            session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Database ping failed: %s", exc)
        return False
    return True


def reset_repository_state() -> None:
    """Dispose the engine and forget the session factory (used by tests)."""

    global _engine, _sessions
    with _init_lock:
        if _engine is not None:
            _engine.dispose()
        _engine = None
        _sessions = None


__all__ = ["get_engine", "get_session", "session_scope", "ping", "reset_repository_state"]
