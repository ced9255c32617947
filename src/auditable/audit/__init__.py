"""Snapshot-diff audit trail for SQLAlchemy models.

Provides:
- Audit and AuditDelta models for storing audit headers and field deltas
- AuditableController for wrapping saves and deletes
- AuditedRepository for audited writes through a session
- Request-scoped correlation IDs via AuditContext
"""

from auditable.audit.configuration import AuditConfig, AuditRegistry, build_config
from auditable.audit.context import (
    AuditContext,
    AuditSource,
    audit_context,
    clear_audit_context,
    get_audit_context,
    get_request_id,
    set_audit_context,
)
from auditable.audit.controller import AuditableController
from auditable.audit.deltas import DeltaComputer, FieldDelta
from auditable.audit.models import Audit, AuditDelta, AuditEvent
from auditable.audit.recorder import AuditRecorder
from auditable.audit.repository import AuditedRepository
from auditable.audit.snapshot import Snapshot, SnapshotReader
from auditable.audit.store import AuditStore, SqlAlchemyAuditStore


__all__ = [
    "Audit",
    "AuditConfig",
    "AuditContext",
    "AuditDelta",
    "AuditEvent",
    "AuditRecorder",
    "AuditRegistry",
    "AuditSource",
    "AuditStore",
    "AuditableController",
    "AuditedRepository",
    "DeltaComputer",
    "FieldDelta",
    "Snapshot",
    "SnapshotReader",
    "SqlAlchemyAuditStore",
    "audit_context",
    "build_config",
    "clear_audit_context",
    "get_audit_context",
    "get_request_id",
    "set_audit_context",
]
