"""Repository that audits the entities it writes."""

from collections.abc import Mapping
from typing import Any, TypeVar

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from auditable.audit.context import AuditContext
from auditable.audit.controller import AuditableController
from auditable.audit.store import SqlAlchemyAuditStore


ModelT = TypeVar("ModelT")


def _identity(instance: Any) -> Any:
    state = inspect(instance)
    if state.identity is None:
        return None
    (identity,) = state.identity
    return identity


class AuditedRepository:
    """Repository for audited model writes.

    Every write is flushed so the controller's follow-up read
    observes it. Committing stays with the caller.
    """

    def __init__(
        self,
        session: Session,
        controller: AuditableController | None = None,
        context: AuditContext | None = None,
    ) -> None:
        self.session = session
        self.controller = controller or AuditableController(SqlAlchemyAuditStore(session))
        self.context = context

    def create(self, instance: ModelT) -> ModelT:
        """Insert a new entity and record a CREATE audit.

        Args:
            instance: Transient model instance

        Returns:
            The created instance with its ID populated
        """
        self.session.add(instance)
        self.session.flush()
        self.controller.after_save(
            type(instance), _identity(instance), created=True, context=self.context
        )
        return instance

    def update(self, instance: ModelT, changes: Mapping[str, Any]) -> ModelT:
        """Apply attribute changes to a persistent entity and audit them.

        Args:
            instance: Persistent model instance
            changes: Attribute names mapped to their new values

        Returns:
            The updated instance
        """
        entity_type, entity_id = type(instance), _identity(instance)
        self.controller.before_save(entity_type, entity_id)
        for name, value in changes.items():
            setattr(instance, name, value)
        self.session.flush()
        self.controller.after_save(entity_type, entity_id, created=False, context=self.context)
        return instance

    def save(self, instance: ModelT) -> ModelT:
        """Create the entity if it is new, otherwise flush and audit its changes.

        Attribute changes already made on a persistent instance are
        still unflushed, so the snapshot read before the flush holds
        the stored values.
        """
        entity_id = _identity(instance)
        if entity_id is None:
            return self.create(instance)

        entity_type = type(instance)
        self.controller.before_save(entity_type, entity_id)
        self.session.flush()
        self.controller.after_save(entity_type, entity_id, created=False, context=self.context)
        return instance

    def delete(self, instance: Any) -> None:
        """Delete an entity and record a DELETE audit.

        Raises:
            EntityNotFoundError: If the entity is not stored
        """
        entity_type, entity_id = type(instance), _identity(instance)
        self.controller.before_delete(entity_type, entity_id)
        self.session.delete(instance)
        self.session.flush()
        self.controller.after_delete(entity_type, entity_id, context=self.context)
