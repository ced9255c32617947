"""Audit storage models.

One Audit row is written per recorded operation and one AuditDelta
row per changed field. Neither table is ever updated or deleted by
the audit engine.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from auditable.core.constants import (
    MAX_ENTITY_ID_LENGTH,
    MAX_EVENT_LENGTH,
    MAX_MODEL_NAME_LENGTH,
    MAX_PROPERTY_NAME_LENGTH,
    MAX_REQUEST_ID_LENGTH,
    MAX_SOURCE_ID_LENGTH,
)
from auditable.core.database.base import Base, UUIDMixin


class AuditEvent(str, Enum):
    """Kind of lifecycle operation an audit header records."""

    CREATE = "CREATE"
    EDIT = "EDIT"
    DELETE = "DELETE"


class Audit(Base, UUIDMixin):
    """Audit header for one create, edit or delete of an entity.

    Attributes:
        event: CREATE, EDIT or DELETE
        model: Entity type name
        entity_id: Primary key of the affected entity
        request_id: Correlation ID grouping headers of one request
        json_object: JSON text {model: full snapshot}
        source_id: ID of the acting user or system (nullable)
        description: Description of the acting source (nullable)
        created_at: When the header was written
    """

    __tablename__ = "audits"

    event: Mapped[str] = mapped_column(
        String(MAX_EVENT_LENGTH),
        nullable=False,
        index=True,
    )
    model: Mapped[str] = mapped_column(
        String(MAX_MODEL_NAME_LENGTH),
        nullable=False,
        index=True,
    )
    entity_id: Mapped[str] = mapped_column(
        String(MAX_ENTITY_ID_LENGTH),
        nullable=False,
        index=True,
    )
    request_id: Mapped[str] = mapped_column(
        String(MAX_REQUEST_ID_LENGTH),
        nullable=False,
        index=True,
    )
    json_object: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    # Acting source
    source_id: Mapped[str | None] = mapped_column(
        String(MAX_SOURCE_ID_LENGTH),
        nullable=True,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    deltas: Mapped[list["AuditDelta"]] = relationship(
        back_populates="audit",
        order_by="AuditDelta.position",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return (
            f"<Audit(id={self.id}, event={self.event}, "
            f"model={self.model}, entity_id={self.entity_id})>"
        )


class AuditDelta(Base, UUIDMixin):
    """One changed field belonging to an Audit header.

    Attributes:
        audit_id: Parent header
        position: Order of the field within the snapshot
        property_name: Name of the changed field
        old_value: Value before the operation ("" on create)
        new_value: Value after the operation
    """

    __tablename__ = "audit_deltas"

    audit_id: Mapped[UUID] = mapped_column(
        ForeignKey("audits.id"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    property_name: Mapped[str] = mapped_column(
        String(MAX_PROPERTY_NAME_LENGTH),
        nullable=False,
    )
    old_value: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    new_value: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    audit: Mapped[Audit] = relationship(back_populates="deltas")

    def __repr__(self) -> str:
        return (
            f"<AuditDelta(audit_id={self.audit_id}, property_name={self.property_name}, "
            f"old_value={self.old_value!r}, new_value={self.new_value!r})>"
        )


AUDIT_MODELS: tuple[type[Base], ...] = (Audit, AuditDelta)


def is_audit_model(entity_type: type) -> bool:
    """Check if a model type is part of the audit storage itself."""
    return entity_type in AUDIT_MODELS
