"""Persistence of audit headers and their deltas."""

from collections.abc import Sequence
from contextlib import nullcontext
from typing import Any

import structlog

from auditable.audit.context import AuditSource
from auditable.audit.deltas import FieldDelta
from auditable.audit.models import Audit, AuditDelta, AuditEvent
from auditable.audit.serialization import delta_text
from auditable.audit.store import AuditStore


log = structlog.get_logger()


class AuditRecorder:
    """Writes one audit header and its delta rows.

    Insert failures propagate to the caller. With atomic enabled the
    header and its deltas share one store transaction, so a failed
    delta insert leaves no orphaned header behind.
    """

    def __init__(self, store: AuditStore, atomic: bool = False) -> None:
        """Initialize the recorder.

        Args:
            store: Storage the rows are inserted into
            atomic: Wrap each header and its deltas in one transaction
        """
        self.store = store
        self.atomic = atomic

    def record(
        self,
        event: AuditEvent,
        entity_name: str,
        entity_id: Any,
        json_object: str,
        source: AuditSource | None,
        deltas: Sequence[FieldDelta],
        request_id: str,
    ) -> Any:
        """Create an audit header and one delta row per changed field.

        Args:
            event: CREATE, EDIT or DELETE
            entity_name: Entity type name
            entity_id: Primary key of the entity
            json_object: Encoded full snapshot
            source: Acting user or system
            deltas: Changed fields, in display order
            request_id: Correlation ID of the current request

        Returns:
            The generated header ID
        """
        with self.store.atomic() if self.atomic else nullcontext():
            header_id = self.store.insert(
                Audit,
                {
                    "event": event.value,
                    "model": entity_name,
                    "entity_id": str(entity_id),
                    "request_id": request_id,
                    "json_object": json_object,
                    "source_id": source.id if source else None,
                    "description": source.description if source else None,
                },
            )

            for position, delta in enumerate(deltas):
                self.store.insert(
                    AuditDelta,
                    {
                        "audit_id": header_id,
                        "position": position,
                        "property_name": delta.field,
                        "old_value": delta_text(delta.old_value),
                        "new_value": delta_text(delta.new_value),
                    },
                )

        log.info(
            "audit_recorded",
            audit_event=event.value,
            model=entity_name,
            entity_id=str(entity_id),
            header_id=str(header_id),
            delta_count=len(deltas),
        )

        return header_id
