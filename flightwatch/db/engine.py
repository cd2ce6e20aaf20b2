# flightwatch/db/engine.py
"""
Database engine and session management.

The engine is created on first use so importing the package never opens
a connection.
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from ..settings import settings

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Get the SQLAlchemy engine, creating it on first call.

    Args:
        database_url: Overrides DATABASE_URL. A different URL replaces the
            current engine, which is disposed; no URL reuses whatever engine
            exists
    """
    global _engine, _session_factory
    if _engine is not None and (database_url is None or _engine.url == make_url(database_url)):
        return _engine

    url = make_url(database_url or settings.database_url)
    if url.get_backend_name() == "sqlite":
        engine = create_engine(url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(
            url,
            pool_pre_ping=True,  # Check connection health
            pool_size=10,
            max_overflow=20,
        )

    if _engine is not None:
        _engine.dispose()
    _engine = engine
    _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _engine


def get_session_factory() -> sessionmaker:
    get_engine()
    return _session_factory


@contextmanager
def session_scope(factory: Optional[sessionmaker] = None) -> Generator[Session, None, None]:
    """
    Context manager for a committed unit of work.

    Usage:
        with session_scope() as session:
            session.execute(...)
    """
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def check_connection() -> bool:
    """
    Check database connection.

    Returns:
        True if connection successful
    """
    try:
        with session_scope() as session:
            session.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
