"""Request-scoped audit context.

Every audit header carries a correlation ID that groups all records
produced by one logical request. The context lives in a ContextVar so
each thread or async task gets its own isolated value; it can also be
passed explicitly to the controller.
"""

from collections.abc import Generator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any
from uuid import uuid4

import structlog
from pydantic import BaseModel, ConfigDict, field_validator


class AuditSource(BaseModel):
    """The user or system acting in an audited operation."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    description: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> str | None:
        """Store integer and UUID ids as text."""
        return None if v is None else str(v)

    @classmethod
    def coerce(cls, value: "AuditSource | Mapping[str, Any] | None") -> "AuditSource | None":
        """Build a source from a mapping such as {"id": 7, "description": "alice"}."""
        if value is None or isinstance(value, AuditSource):
            return value
        return cls.model_validate(dict(value))


def new_request_id() -> str:
    """Generate a fresh correlation ID."""
    return str(uuid4())


class AuditContext:
    """Context for audit logging within a request.

    Captures request-level information that should be included
    in all audit headers for the current request.
    """

    def __init__(
        self,
        request_id: str | None = None,
        source: AuditSource | Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize audit context.

        Args:
            request_id: Correlation ID; generated when omitted
            source: Acting user or system
        """
        self.request_id = request_id or new_request_id()
        self.source = AuditSource.coerce(source)

    def __repr__(self) -> str:
        return f"<AuditContext(request_id={self.request_id}, source={self.source})>"


# ContextVar for async-safe audit context storage
# Each async task/request gets its own isolated context
_audit_context: ContextVar[AuditContext | None] = ContextVar(
    "audit_context", default=None
)


def set_audit_context(context: AuditContext) -> None:
    """Bind an audit context to the current request.

    Args:
        context: The context to bind
    """
    _audit_context.set(context)
    structlog.contextvars.bind_contextvars(request_id=context.request_id)


def clear_audit_context() -> None:
    """Clear the audit context after request completes."""
    _audit_context.set(None)
    structlog.contextvars.unbind_contextvars("request_id")


def get_audit_context() -> AuditContext:
    """Get the audit context for the current request.

    A context is created and bound on first use, so repeated calls
    within one request return the same correlation ID.

    Returns:
        The bound audit context
    """
    context = _audit_context.get()
    if context is None:
        context = AuditContext()
        set_audit_context(context)
    return context


def get_request_id() -> str:
    """Get the correlation ID of the current request."""
    return get_audit_context().request_id


@contextmanager
def audit_context(
    request_id: str | None = None,
    source: AuditSource | Mapping[str, Any] | None = None,
) -> Generator[AuditContext, None, None]:
    """Bind a fresh audit context for the duration of a block.

    The previously bound context, if any, is restored on exit.

    Usage:
        with audit_context(source={"id": user.id, "description": user.email}):
            repository.update(post, {"title": "New title"})
    """
    context = AuditContext(request_id=request_id, source=source)
    token = _audit_context.set(context)
    with structlog.contextvars.bound_contextvars(request_id=context.request_id):
        try:
            yield context
        finally:
            _audit_context.reset(token)
