import hashlib
import logging
from typing import Any

logger = logging.getLogger("mongopage")

# Silent unless the application attaches its own handlers
logger.addHandler(logging.NullHandler())


def _digest(value: Any) -> str:
    return hashlib.sha256(str(value).encode("utf-8")).hexdigest()[:8]


def redact_value(value: dict[str, Any] | Any) -> str:
    """
    Returns a short digest of a cursor value for log records.

    Equal values give equal digests, so a value can be traced across
    requests. For a {field: value} map, field names stay readable and only
    the values are digested.
    """
    try:
        if isinstance(value, dict):
            return str({field: _digest(v) for field, v in value.items()})
        return _digest(value)
    except Exception:
        return "<unredactable>"
