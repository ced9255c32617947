"""Error handling module."""

from auditable.core.errors.exceptions import (
    AppException,
    AuditStateError,
    EntityNotFoundError,
    NotFoundError,
)


__all__ = [
    "AppException",
    "AuditStateError",
    "EntityNotFoundError",
    "NotFoundError",
]
