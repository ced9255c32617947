"""Persistence interface consumed by the audit engine.

The engine only needs to fetch one entity by primary key and to
insert rows. SqlAlchemyAuditStore provides both on top of a
synchronous SQLAlchemy session.
"""

from collections.abc import Iterable, Iterator, Mapping
from contextlib import AbstractContextManager, contextmanager
from typing import Any, Protocol

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session


Record = dict[str, Any]


class AuditStore(Protocol):
    """Storage operations the audit engine relies on.

    A fetch issued right after a write must observe that write.
    """

    def fetch_one(
        self,
        entity_type: type[Any],
        entity_id: Any,
        include: Iterable[str] = (),
    ) -> Record | None:
        """Fetch one entity's field values by primary key.

        Each included relation maps to a list of {"id": related_id} rows.
        Returns None when the entity does not exist.
        """
        ...

    def insert(self, table: type[Any], record: Mapping[str, Any]) -> Any:
        """Insert a row and return its generated primary key."""
        ...

    def atomic(self) -> AbstractContextManager[None]:
        """Group several inserts into one transaction."""
        ...


class SqlAlchemyAuditStore:
    """AuditStore backed by a SQLAlchemy session.

    Reads select plain column values instead of ORM instances, so the
    identity map never serves a cached object and pending in-memory
    changes are neither returned nor autoflushed.

    Usage:
        store = SqlAlchemyAuditStore(session)
        controller = AuditableController(store)
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def fetch_one(
        self,
        entity_type: type[Any],
        entity_id: Any,
        include: Iterable[str] = (),
    ) -> Record | None:
        mapper = inspect(entity_type)
        (pk_column,) = mapper.primary_key
        columns = [
            getattr(entity_type, attr.key).label(attr.key) for attr in mapper.column_attrs
        ]

        with self.session.no_autoflush:
            row = self.session.execute(
                select(*columns).where(pk_column == entity_id)
            ).mappings().one_or_none()
            if row is None:
                return None

            record: Record = dict(row)
            for name in include:
                relationship = mapper.relationships[name]
                (related_pk,) = relationship.mapper.primary_key
                stmt = (
                    select(related_pk.label("id"))
                    .select_from(entity_type)
                    .join(getattr(entity_type, name))
                    .where(pk_column == entity_id)
                )
                record[name] = [dict(related) for related in self.session.execute(stmt).mappings()]

        return record

    def insert(self, table: type[Any], record: Mapping[str, Any]) -> Any:
        instance = table(**record)
        self.session.add(instance)
        self.session.flush()
        (identity,) = inspect(instance).identity
        return identity

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self.session.begin_nested():
            yield
