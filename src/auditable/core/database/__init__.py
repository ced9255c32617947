"""Database layer - base models and mixins.

Engine and session helpers live in auditable.core.database.session and
are imported from there.
"""

from auditable.core.database.base import AuditMixin, Base, TimestampMixin, UUIDMixin


__all__ = [
    "AuditMixin",
    "Base",
    "TimestampMixin",
    "UUIDMixin",
]
