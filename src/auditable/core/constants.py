"""Package-wide constants.

This module defines constants used throughout the package
to avoid magic numbers and ensure consistency.
"""

# Field names that never produce audit deltas unless overridden
DEFAULT_IGNORED_FIELDS = ("created", "updated", "modified", "created_at", "updated_at")

# Separator for many-to-many id lists stored in snapshots
HABTM_ID_SEPARATOR = ","

# Value recorded as the previous value of every field on creation
CREATE_OLD_VALUE = ""

# String field lengths
MAX_EVENT_LENGTH = 16
MAX_MODEL_NAME_LENGTH = 100
MAX_ENTITY_ID_LENGTH = 255
MAX_REQUEST_ID_LENGTH = 64
MAX_SOURCE_ID_LENGTH = 255
MAX_PROPERTY_NAME_LENGTH = 255
