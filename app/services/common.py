from __future__ import annotations

import uuid


def coerce_uuid(value: uuid.UUID | str) -> uuid.UUID:
    """Return ``value`` as a UUID; raises ValueError for malformed input."""
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value).strip())
