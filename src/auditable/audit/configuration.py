"""Per-model audit configuration.

Resolves which fields a model ignores and which many-to-many
relationships are folded into its snapshots.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import structlog
from sqlalchemy import inspect
from sqlalchemy.orm import RelationshipDirection

from auditable.config import get_settings


log = structlog.get_logger()


@dataclass(frozen=True)
class AuditConfig:
    """Resolved audit settings for one model type."""

    ignore: frozenset[str] = field(default_factory=frozenset)
    habtm: tuple[str, ...] = ()


def _ordered_union(*groups: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for group in groups:
        for name in group:
            seen.setdefault(name, None)
    return tuple(seen)


def _is_audited(model: Any) -> bool:
    return getattr(model, "__audit__", False)


def _tracked_relations(model: type[Any], names: Iterable[str]) -> tuple[str, ...]:
    """Keep only true many-to-many relationships to non-audited models."""
    relationships = inspect(model).relationships
    kept = []
    for name in names:
        relationship = relationships.get(name)
        if relationship is None or relationship.direction is not RelationshipDirection.MANYTOMANY:
            log.debug(
                "audit_habtm_dropped",
                model=model.__name__,
                relation=name,
                reason="not_many_to_many",
            )
            continue
        if _is_audited(relationship.mapper.class_):
            log.debug(
                "audit_habtm_dropped",
                model=model.__name__,
                relation=name,
                reason="target_audited",
            )
            continue
        kept.append(name)
    return tuple(kept)


def build_config(
    model: type[Any],
    ignore: Iterable[str] | None = None,
    habtm: Iterable[str] | None = None,
) -> AuditConfig:
    """Build the audit configuration for a model.

    Overrides are merged into the defaults: the configured timestamp
    fields and the primary key are always ignored, and every
    many-to-many relationship is tracked.

    Args:
        model: Mapped model class
        ignore: Extra field names to ignore
        habtm: Extra many-to-many relationship names to track

    Returns:
        The resolved configuration
    """
    mapper = inspect(model)
    primary_keys = [mapper.get_property_by_column(column).key for column in mapper.primary_key]
    default_habtm = [
        relationship.key
        for relationship in mapper.relationships
        if relationship.direction is RelationshipDirection.MANYTOMANY
    ]

    ignored = _ordered_union(get_settings().audit_ignore_fields, primary_keys, ignore or ())
    tracked = _ordered_union(default_habtm, habtm or ())

    return AuditConfig(
        ignore=frozenset(ignored),
        habtm=_tracked_relations(model, tracked),
    )


class AuditRegistry:
    """Caches the configuration of each audited model type.

    Class attributes __audit_ignore__ and __audit_habtm__ on the model
    supply the overrides merged into the defaults.
    """

    def __init__(self) -> None:
        self._configs: dict[type[Any], AuditConfig] = {}

    def register(
        self,
        model: type[Any],
        ignore: Iterable[str] | None = None,
        habtm: Iterable[str] | None = None,
    ) -> AuditConfig:
        """Resolve and cache the configuration of a model."""
        config = build_config(model, ignore=ignore, habtm=habtm)
        self._configs[model] = config
        return config

    def config_for(self, model: type[Any]) -> AuditConfig:
        """Get the configuration of a model, resolving it on first use."""
        config = self._configs.get(model)
        if config is None:
            config = self.register(
                model,
                ignore=getattr(model, "__audit_ignore__", None),
                habtm=getattr(model, "__audit_habtm__", None),
            )
        return config
