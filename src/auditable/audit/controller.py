"""Orchestration of snapshots, diffs and records around entity lifecycles.

Saving runs PRE_SAVE (before_save) then SAVED (after_save); deleting
runs PRE_DELETE (before_delete) then DELETED (after_delete). The audit
storage models themselves are never audited.
"""

from typing import Any

import structlog

from auditable.audit.configuration import AuditConfig, AuditRegistry
from auditable.audit.context import AuditContext, AuditSource, get_audit_context
from auditable.audit.deltas import DeltaComputer, FieldDelta
from auditable.audit.hooks import (
    AfterAuditCreate,
    AfterAuditProperty,
    AfterAuditUpdate,
    IdentitySource,
    VirtualFieldAware,
)
from auditable.audit.models import AuditEvent, is_audit_model
from auditable.audit.recorder import AuditRecorder
from auditable.audit.serialization import encode_snapshot
from auditable.audit.snapshot import Snapshot, SnapshotReader
from auditable.audit.store import AuditStore
from auditable.config import get_settings
from auditable.core.errors import AuditStateError, EntityNotFoundError


log = structlog.get_logger()


class AuditableController:
    """Wires snapshot reading, diffing and recording around saves and deletes.

    Snapshots taken in the "before" steps are held per entity until
    the matching "after" step consumes them, so one controller should
    serve one unit of work.

    Usage:
        controller = AuditableController(SqlAlchemyAuditStore(session))

        controller.before_save(Post, post.id)
        post.title = "New title"
        session.flush()
        controller.after_save(Post, post.id, created=False)
    """

    def __init__(
        self,
        store: AuditStore,
        registry: AuditRegistry | None = None,
        loose_comparison: bool | None = None,
        atomic: bool | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            store: Persistence the snapshots are read from and audits written to
            registry: Per-model configuration cache
            loose_comparison: Coercive value comparison; defaults to settings
            atomic: Transactional header and delta writes; defaults to settings
        """
        settings = get_settings()
        self.registry = registry or AuditRegistry()
        self.reader = SnapshotReader(store)
        self.computer = DeltaComputer(
            loose_comparison=(
                settings.audit_loose_comparison if loose_comparison is None else loose_comparison
            )
        )
        self.recorder = AuditRecorder(
            store,
            atomic=settings.audit_atomic_writes if atomic is None else atomic,
        )
        self._originals: dict[tuple[type[Any], str], Snapshot] = {}

    def before_save(self, entity_type: type[Any], entity_id: Any) -> None:
        """Hold the persisted state of an existing entity before it is saved.

        New entities (no ID yet) have nothing to capture.
        """
        if is_audit_model(entity_type) or entity_id is None:
            return

        original = self.reader.read(entity_type, entity_id, self._config(entity_type))
        if original is not None:
            self._originals[self._key(entity_type, entity_id)] = original

    def after_save(
        self,
        entity_type: type[Any],
        entity_id: Any,
        created: bool,
        context: AuditContext | None = None,
    ) -> Any | None:
        """Record the changes made by a completed save.

        If the entity no longer exists the save is treated as a delete
        of the state captured by before_save.

        Args:
            entity_type: Mapped model class
            entity_id: Primary key of the saved entity
            created: Whether the save inserted the entity
            context: Request context; the ambient one when omitted

        Returns:
            The header ID, or None when nothing was recorded
        """
        if is_audit_model(entity_type):
            return None

        config = self._config(entity_type)
        current = self.reader.read(entity_type, entity_id, config)
        if current is None:
            if self._key(entity_type, entity_id) in self._originals:
                return self.after_delete(entity_type, entity_id, context=context)
            log.info(
                "audit_skipped_missing_entity",
                model=entity_type.__name__,
                entity_id=str(entity_id),
            )
            return None

        original = self._originals.pop(self._key(entity_type, entity_id), None)
        deltas = self.computer.diff(
            original,
            current,
            config,
            is_create=created,
            is_virtual=self._virtual_check(entity_type),
        )
        if not created and not deltas:
            log.debug("audit_no_changes", model=entity_type.__name__, entity_id=str(entity_id))
            return None

        context = context or get_audit_context()
        header_id = self.recorder.record(
            AuditEvent.CREATE if created else AuditEvent.EDIT,
            entity_type.__name__,
            entity_id,
            encode_snapshot(entity_type.__name__, current),
            self._source(entity_type, context),
            deltas,
            request_id=context.request_id,
        )

        if created:
            if isinstance(entity_type, AfterAuditCreate):
                entity_type.after_audit_create(entity_id, header_id)
        else:
            self._after_update(entity_type, entity_id, original, deltas, header_id)

        return header_id

    def before_delete(self, entity_type: type[Any], entity_id: Any) -> None:
        """Hold the persisted state of an entity about to be deleted.

        Raises:
            EntityNotFoundError: If the entity does not exist
        """
        if is_audit_model(entity_type):
            return

        original = self.reader.read(
            entity_type, entity_id, self._config(entity_type), include_relations=False
        )
        if original is None:
            raise EntityNotFoundError(resource=entity_type.__name__, resource_id=str(entity_id))
        self._originals[self._key(entity_type, entity_id)] = original

    def after_delete(
        self,
        entity_type: type[Any],
        entity_id: Any,
        context: AuditContext | None = None,
    ) -> Any | None:
        """Record a DELETE header from the state held before deletion.

        Deletes carry no deltas; the prior state is kept in the
        header's json_object.

        Raises:
            AuditStateError: If no state was captured for the entity
        """
        if is_audit_model(entity_type):
            return None

        original = self._originals.pop(self._key(entity_type, entity_id), None)
        if original is None:
            raise AuditStateError(
                "No snapshot was captured before the delete",
                details={"model": entity_type.__name__, "entity_id": str(entity_id)},
            )

        context = context or get_audit_context()
        return self.recorder.record(
            AuditEvent.DELETE,
            entity_type.__name__,
            entity_id,
            encode_snapshot(entity_type.__name__, original),
            self._source(entity_type, context),
            [],
            request_id=context.request_id,
        )

    def _after_update(
        self,
        entity_type: type[Any],
        entity_id: Any,
        original: Snapshot | None,
        deltas: list[FieldDelta],
        header_id: Any,
    ) -> None:
        if isinstance(entity_type, AfterAuditUpdate):
            entity_type.after_audit_update(entity_id, original, deltas, header_id)
        if isinstance(entity_type, AfterAuditProperty):
            for delta in deltas:
                entity_type.after_audit_property(
                    entity_id, delta.field, delta.old_value, delta.new_value
                )

    def _config(self, entity_type: type[Any]) -> AuditConfig:
        return self.registry.config_for(entity_type)

    @staticmethod
    def _key(entity_type: type[Any], entity_id: Any) -> tuple[type[Any], str]:
        return entity_type, str(entity_id)

    @staticmethod
    def _virtual_check(entity_type: type[Any]) -> Any:
        if isinstance(entity_type, VirtualFieldAware):
            return entity_type.is_virtual_field
        return None

    @staticmethod
    def _source(entity_type: type[Any], context: AuditContext) -> AuditSource | None:
        if isinstance(entity_type, IdentitySource):
            return AuditSource.coerce(entity_type.current_user())
        return context.source
