"""Optional capabilities a model type can expose to the audit engine.

The controller checks the model class against these protocols with
isinstance, so implementing one is a matter of defining the matching
classmethod on the model.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from uuid import UUID


if TYPE_CHECKING:
    from auditable.audit.context import AuditSource
    from auditable.audit.deltas import FieldDelta
    from auditable.audit.snapshot import Snapshot


@runtime_checkable
class IdentitySource(Protocol):
    """Resolves the user or system acting on the model."""

    def current_user(self) -> "AuditSource | Mapping[str, Any] | None": ...


@runtime_checkable
class VirtualFieldAware(Protocol):
    """Reports fields that are computed rather than stored."""

    def is_virtual_field(self, name: str) -> bool: ...


@runtime_checkable
class AfterAuditCreate(Protocol):
    """Called after the CREATE header of a new entity is written."""

    def after_audit_create(self, entity_id: Any, header_id: UUID) -> None: ...


@runtime_checkable
class AfterAuditUpdate(Protocol):
    """Called after the EDIT header and its deltas are written."""

    def after_audit_update(
        self,
        entity_id: Any,
        original: "Snapshot",
        deltas: "list[FieldDelta]",
        header_id: UUID,
    ) -> None: ...


@runtime_checkable
class AfterAuditProperty(Protocol):
    """Called once per changed field of an edited entity."""

    def after_audit_property(
        self,
        entity_id: Any,
        field: str,
        old_value: Any,
        new_value: Any,
    ) -> None: ...
