"""Field-by-field comparison of two snapshots."""

from collections.abc import Callable, Mapping, Sized
from decimal import Decimal, InvalidOperation
from typing import Any, NamedTuple

from auditable.audit.configuration import AuditConfig
from auditable.core.constants import CREATE_OLD_VALUE


class FieldDelta(NamedTuple):
    """One changed field between two snapshots."""

    field: str
    old_value: Any
    new_value: Any


def _as_number(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, int | float | Decimal):
        return Decimal(str(value))
    if isinstance(value, str) and value.strip():
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            return None
    return None


def _is_blank(value: Any) -> bool:
    return value is None or value is False or value == "" or (
        isinstance(value, int | float | Decimal) and value == 0
    )


def _is_falsy(value: Any) -> bool:
    return _is_blank(value) or value == "0"


def is_empty(value: Any, loose: bool = False) -> bool:
    """Check whether a value counts as empty when an entity is created.

    None, the empty string and empty collections are empty. In loose
    mode 0, "0" and False are empty as well.
    """
    if value is None or value == "":
        return True
    if isinstance(value, Sized) and not isinstance(value, str) and len(value) == 0:
        return True
    if loose:
        return _is_falsy(value)
    return False


def loosely_equal(old: Any, new: Any) -> bool:
    """Compare two values with type coercion.

    Blank values (None, "", False, 0) are equal to each other, numbers
    and numeric strings compare by value, anything else compares as text.
    Against None or False, "0" is blank too.
    """
    if old == new:
        return True
    if old is None or old is False or new is None or new is False:
        # Compared as booleans
        return _is_falsy(old) and _is_falsy(new)
    if _is_blank(old) and _is_blank(new):
        return True
    old_number, new_number = _as_number(old), _as_number(new)
    if old_number is not None and new_number is not None:
        return old_number == new_number
    return str(old) == str(new)


def values_differ(old: Any, new: Any, loose: bool = False) -> bool:
    """Check whether a field changed."""
    if loose:
        return not loosely_equal(old, new)
    return old != new


class DeltaComputer:
    """Computes the ordered list of changed fields between snapshots.

    Strict equality decides whether a field changed unless
    loose_comparison is enabled.
    """

    def __init__(self, loose_comparison: bool = False) -> None:
        self.loose_comparison = loose_comparison

    def diff(
        self,
        old: Mapping[str, Any] | None,
        new: Mapping[str, Any],
        config: AuditConfig,
        is_create: bool,
        is_virtual: Callable[[str], bool] | None = None,
    ) -> list[FieldDelta]:
        """Diff a fresh snapshot against the one taken before the operation.

        Args:
            old: Snapshot before the operation, None if there was none
            new: Snapshot after the operation
            config: Audit configuration of the model
            is_create: Whether the operation inserted the entity
            is_virtual: Reports computed fields to skip

        Returns:
            Changed fields in the order of the new snapshot
        """
        deltas: list[FieldDelta] = []

        for name, value in new.items():
            if name in config.ignore or (is_virtual is not None and is_virtual(name)):
                continue

            if is_create:
                if not is_empty(value, loose=self.loose_comparison):
                    deltas.append(FieldDelta(name, CREATE_OLD_VALUE, value))
            elif old is not None and name in old:
                if values_differ(old[name], value, loose=self.loose_comparison):
                    deltas.append(FieldDelta(name, old[name], value))

        return deltas
