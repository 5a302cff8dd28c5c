from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from bson import Decimal128, ObjectId

from .exceptions import CursorSerializationError


class CursorSerializer:
    """
    Converts pivot values to plain, JSON-safe values for cursor tokens.

    Architectural Note:
    -------------------
    Tokens only carry text, numbers and booleans. Store types (ObjectId,
    Decimal128) and temporal values are normalized to a canonical string so
    the same document always yields the same token. The key's coercer turns
    the string back into a comparable value when the token is decoded.
    """

    def to_plain(self, values: dict[str, Any]) -> dict[str, Any]:
        """Converts a {field: value} map to plain values."""
        result = {}
        for k, v in values.items():
            try:
                result[k] = self.to_plain_value(v)
            except TypeError as e:
                raise CursorSerializationError(
                    f"Failed to serialize cursor field '{k}' of type {type(v).__name__}",
                    original_error=e,
                ) from e
        return result

    def to_plain_value(self, value: Any) -> Any:
        """
        Normalizes a single value.

        Converts:
        - datetime -> ISO 8601 string ('Z' suffix for UTC)
        - date -> ISO 8601 string
        - ObjectId / UUID -> string
        - Decimal / Decimal128 -> string
        - Enum -> value

        Raises:
            TypeError: For values with no canonical text form (lists, dicts, objects)
        """
        if value is None or isinstance(value, (bool, int, float, str)):
            return value
        if isinstance(value, datetime):
            # Pydantic uses 'Z' for UTC instead of '+00:00'
            utc_offset = value.utcoffset()
            if utc_offset is not None and utc_offset.total_seconds() == 0:
                return value.replace(tzinfo=None).isoformat() + "Z"
            return value.isoformat()
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, (ObjectId, UUID)):
            return str(value)
        if isinstance(value, (Decimal, Decimal128)):
            return str(value)
        if isinstance(value, Enum):
            return self.to_plain_value(value.value)
        raise TypeError(f"Unsupported cursor value type: {type(value).__name__}")
