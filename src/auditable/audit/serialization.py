"""Conversion of snapshot values to JSON-compatible primitives."""

import json
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


def serialize_value(value: Any) -> Any:
    """Serialize a value to JSON-compatible primitives.

    Recursively converts non-JSON-serializable types to their
    string or primitive representations.

    Args:
        value: Any value to serialize

    Returns:
        JSON-serializable representation of the value
    """
    # Pass through JSON primitives
    if value is None or isinstance(value, str | int | float | bool):
        return value

    # Handle specific types that need conversion
    result: Any
    if isinstance(value, UUID):
        result = str(value)
    elif isinstance(value, datetime | date):
        result = value.isoformat()
    elif isinstance(value, Decimal):
        result = str(value)
    elif isinstance(value, Enum):
        result = value.value
    elif isinstance(value, Mapping):
        result = {str(k): serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list | tuple | set | frozenset):
        result = [serialize_value(item) for item in value]
    elif isinstance(value, bytes):
        result = value.hex()
    else:
        # Fallback: convert to string
        result = str(value)

    return result


def encode_snapshot(entity_name: str, snapshot: Mapping[str, Any]) -> str:
    """Encode a snapshot as the header's json_object.

    The document has a single top-level key, the entity type name,
    mapping to the full field snapshot.
    """
    return json.dumps({entity_name: serialize_value(snapshot)})


def delta_text(value: Any) -> str | None:
    """Render a field value for storage in a delta text column.

    Strings are stored verbatim, None stays NULL, and everything
    else is stored as its JSON encoding.
    """
    if value is None:
        return None
    serialized = serialize_value(value)
    if isinstance(serialized, str):
        return serialized
    return json.dumps(serialized)
