"""Pytest configuration and shared fixtures."""

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from auditable.audit.context import clear_audit_context
from auditable.audit.models import Audit, AuditDelta  # noqa: F401
from auditable.audit.repository import AuditedRepository
from auditable.core.database import Base

# Import all models to ensure they're registered with Base.metadata
from tests.models import Ledger, Post  # noqa: F401


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Create an in-memory SQLite engine with all tables."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[Session, None, None]:
    """Provide a session that is rolled back after the test."""
    with Session(engine, expire_on_commit=False, autoflush=False) as session:
        yield session
        session.rollback()


@pytest.fixture
def repository(session: Session) -> AuditedRepository:
    """Provide an audited repository bound to the test session."""
    return AuditedRepository(session)


@pytest.fixture(autouse=True)
def reset_audit_state() -> Generator[None, None, None]:
    """Start every test without a bound request context or hook calls."""
    clear_audit_context()
    Ledger.calls.clear()
    yield
    clear_audit_context()
    Ledger.calls.clear()
