"""Domain exceptions for the audit engine.

Absence of an entity after a save is a normal outcome and is never
raised; these exceptions cover the cases where auditing cannot proceed.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all package errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a requested resource is not found.

    Example:
        raise NotFoundError("Post not found", resource="Post", resource_id="42")
    """

    message = "Resource not found"
    error_code = "not_found"

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class EntityNotFoundError(NotFoundError):
    """Raised when an entity about to be deleted cannot be loaded.

    Example:
        raise EntityNotFoundError(resource="Post", resource_id="42")
    """

    message = "Entity to delete was not found"
    error_code = "entity_not_found"


class AuditStateError(AppException):
    """Raised when a lifecycle step runs without its preceding step.

    Example:
        raise AuditStateError(
            "No snapshot captured before delete",
            details={"model": "Post", "entity_id": "42"},
        )
    """

    message = "Audit lifecycle out of order"
    error_code = "audit_state_error"
