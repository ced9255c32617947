"""SQLAlchemy declarative base and common mixins."""

from datetime import datetime
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, func, inspect
from sqlalchemy.orm import ColumnProperty, DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UUIDMixin:
    """Mixin that adds a UUID primary key."""

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
        index=True,
    )


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class AuditMixin:
    """Marker mixin to enable snapshot-diff audit logging.

    Models that inherit from this mixin are recorded in the audits
    table when they are created, updated, or deleted through an
    AuditableController.

    Class attributes:
        __audit_ignore__: Extra field names that never produce deltas
        __audit_habtm__: Many-to-many relationships to track in
            addition to the default of every such relationship

    Example:
        class Post(Base, TimestampMixin, AuditMixin):
            __tablename__ = "posts"
            __audit_ignore__ = ("view_count",)

            id: Mapped[int] = mapped_column(primary_key=True)
            title: Mapped[str] = mapped_column(String(255))
            tags: Mapped[list[Tag]] = relationship(secondary=post_tags)
    """

    # Marker attribute checked by the audit registry
    __audit__: bool = True
    __audit_ignore__: ClassVar[tuple[str, ...]] = ()
    __audit_habtm__: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def is_virtual_field(cls, name: str) -> bool:
        """Check whether a field is computed by SQL rather than stored.

        Column properties built from SQL expressions (column_property
        over a subquery or an arithmetic expression) are virtual.

        Args:
            name: Attribute name

        Returns:
            True if the attribute is a computed column property
        """
        prop = inspect(cls).attrs.get(name)
        if not isinstance(prop, ColumnProperty):
            return False
        return not all(isinstance(column, Column) for column in prop.columns)
