"""Point-in-time snapshots of an entity's persisted state."""

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

import structlog

from auditable.audit.configuration import AuditConfig
from auditable.audit.store import AuditStore
from auditable.core.constants import HABTM_ID_SEPARATOR


log = structlog.get_logger()


class Snapshot(Mapping[str, Any]):
    """Immutable field-name to value mapping for one entity.

    Field order is the order the values were read in, which is the
    order deltas are reported in. Many-to-many relations appear as
    pseudo-fields holding a sorted, comma-joined id list.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | Iterable[tuple[str, Any]] = ()) -> None:
        self._data = dict(data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Snapshot({self._data!r})"

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)


def join_ids(ids: Iterable[Any]) -> str:
    """Sort related ids ascending and join them into one value.

    Example:
        join_ids([3, 1, 2]) == "1,2,3"
    """
    return HABTM_ID_SEPARATOR.join(str(related_id) for related_id in sorted(ids))


class SnapshotReader:
    """Loads snapshots through an AuditStore."""

    def __init__(self, store: AuditStore) -> None:
        self.store = store

    def read(
        self,
        entity_type: type[Any],
        entity_id: Any,
        config: AuditConfig,
        include_relations: bool = True,
    ) -> Snapshot | None:
        """Read the current persisted state of an entity.

        Args:
            entity_type: Mapped model class
            entity_id: Primary key value
            config: Audit configuration of the model
            include_relations: Fold the configured many-to-many
                relations into the snapshot

        Returns:
            The snapshot, or None if the entity no longer exists
        """
        include = config.habtm if include_relations else ()
        record = self.store.fetch_one(entity_type, entity_id, include)
        if record is None:
            log.debug(
                "audit_snapshot_absent",
                model=entity_type.__name__,
                entity_id=str(entity_id),
            )
            return None

        fields = {name: value for name, value in record.items() if name not in include}
        for name in include:
            if name in record:
                fields[name] = join_ids(row["id"] for row in record[name])
        return Snapshot(fields)
