"""Database engine and session management.

The engine is built on first use, so importing the audit engine never
connects to or validates AUDITABLE_DATABASE_URL.
"""

from collections.abc import Generator
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from auditable.config import get_settings


@lru_cache
def get_engine() -> Engine:
    """Get the cached engine for the configured database."""
    settings = get_settings()
    return create_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,  # Verify connections before use
    )


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    """Get the cached session factory bound to get_engine()."""
    return sessionmaker(
        bind=get_engine(),
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )


def get_session() -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on error.

    Usage:
        with contextlib.contextmanager(get_session)() as session:
            AuditedRepository(session).create(post)
    """
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
