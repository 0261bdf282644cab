"""Database session management."""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from ..config import get_settings
from .migrations import run_migrations

# Global engine instance
_engine = None
_session_factory = None


def get_engine():
    """Get the database engine."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_engine(
            settings.database_url,
            echo=False,  # Set to True for SQL debugging
            pool_pre_ping=True,
        )
    return _engine


def get_session_factory():
    """Get the session factory."""
    global _session_factory
    if _session_factory is None:
        # Objects stay readable after the session closes
        _session_factory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


def reset_engine() -> None:
    """Dispose the engine so the next call picks up the current settings."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Get a database session with automatic cleanup."""
    session_factory = get_session_factory()
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> int:
    """Create or upgrade the schema. Returns the schema version."""
    with get_engine().begin() as connection:
        return run_migrations(connection)
