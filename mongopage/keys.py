"""
Ordering keys for cursor pagination.

A KeyOrdering describes one sort key: the document field it reads, an
optional coercer that turns raw cursor values back into comparable values,
and the sort direction. It produces the single-key "strictly after" and
"strictly before" predicates that the CursorPredicateBuilder composes.

Usage:
    from mongopage import KeyOrdering, SortDirection, parse_datetime

    created = KeyOrdering("created_at", coerce=parse_datetime,
                          direction=SortDirection.DESCENDING)
    created.after_predicate("2024-01-01T00:00:00+00:00")
    # {"$lt": datetime(2024, 1, 1, tzinfo=timezone.utc), "$exists": True}
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Any

import pymongo
from bson import ObjectId

from ._logging import logger, redact_value
from .exceptions import KeyCoercionError

Coercer = Callable[[Any], Any]


class SortDirection(IntEnum):
    """Sort direction, using the same integers as pymongo."""

    ASCENDING = pymongo.ASCENDING
    DESCENDING = pymongo.DESCENDING

    def flipped(self) -> SortDirection:
        if self is SortDirection.ASCENDING:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING

    @classmethod
    def parse(cls, value: Any) -> SortDirection:
        """
        Accepts 1/-1, "asc"/"desc", "ascending"/"descending" or a SortDirection.

        Raises:
            ValueError: If the value does not name a direction
        """
        if isinstance(value, SortDirection):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in ("asc", "ascending", "1"):
                return cls.ASCENDING
            if normalized in ("desc", "descending", "-1"):
                return cls.DESCENDING
            raise ValueError(f"Unknown sort direction: {value!r}")
        try:
            return cls(int(value))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Unknown sort direction: {value!r}") from e


ASC = SortDirection.ASCENDING
DESC = SortDirection.DESCENDING


def object_id(value: Any) -> ObjectId | Any:
    """Coerces a hex string to ObjectId. Non-string values pass through."""
    if isinstance(value, str):
        return ObjectId(value)
    return value


def parse_datetime(value: Any) -> datetime:
    """Coerces an ISO-8601 string to datetime. datetime values pass through."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        # fromisoformat() does not accept the 'Z' suffix before Python 3.11
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    raise TypeError(f"Cannot convert {type(value).__name__} to datetime")


@dataclass(frozen=True)
class KeyOrdering:
    """
    One ordering key: field, optional coercer, direction.

    Coercers must be idempotent: they receive raw token values as well as
    values read straight from fetched documents.
    """

    field: str
    coerce: Coercer | None = None
    direction: SortDirection = SortDirection.ASCENDING

    def __post_init__(self) -> None:
        if not self.field:
            raise ValueError("KeyOrdering requires a field name")
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "direction", SortDirection.parse(self.direction))

    @classmethod
    def from_config(cls, config: KeyOrdering | Mapping[str, Any]) -> KeyOrdering:
        """
        Builds a KeyOrdering from a {field, coerce?, direction?} mapping.

        Args:
            config: An existing KeyOrdering (returned as-is) or a mapping

        Returns:
            The KeyOrdering
        """
        if isinstance(config, KeyOrdering):
            return config
        if "field" not in config:
            raise ValueError("Key configuration requires a 'field'")
        return cls(
            field=config["field"],
            coerce=config.get("coerce"),
            direction=config.get("direction", SortDirection.ASCENDING),
        )

    @property
    def coercer_name(self) -> str:
        if self.coerce is None:
            return "identity"
        return getattr(self.coerce, "__qualname__", type(self.coerce).__name__)

    def coerce_value(self, value: Any) -> Any:
        """
        Applies the coercer to a raw cursor value.

        Raises:
            KeyCoercionError: If the value is missing or the coercer fails
        """
        if value is None:
            raise KeyCoercionError(self.field, value)
        if self.coerce is None:
            return value
        try:
            return self.coerce(value)
        except Exception as e:
            raise KeyCoercionError(self.field, value, original_error=e) from e

    def effective_direction(self, reverse: bool = False) -> SortDirection:
        """Returns the direction to sort by, flipped for reversed traversal."""
        return self.direction.flipped() if reverse else self.direction

    def after_predicate(self, value: Any) -> dict[str, Any] | None:
        """
        Returns the predicate for values strictly after `value` in this key's order.

        Returns None when the value cannot be coerced; the caller drops the
        constraint for this key.
        """
        operator = "$gt" if self.direction is SortDirection.ASCENDING else "$lt"
        return self._strict(operator, value)

    def before_predicate(self, value: Any) -> dict[str, Any] | None:
        """Returns the predicate for values strictly before `value` in this key's order."""
        operator = "$lt" if self.direction is SortDirection.ASCENDING else "$gt"
        return self._strict(operator, value)

    def _strict(self, operator: str, value: Any) -> dict[str, Any] | None:
        try:
            coerced = self.coerce_value(value)
        except KeyCoercionError:
            logger.debug(
                "Dropping key constraint for uncoercible cursor value",
                extra={"field": self.field, "value_hash": redact_value(value)},
            )
            return None
        return {operator: coerced, "$exists": True}


ID_FIELD = "_id"

# Default identifier ordering, also used as the implicit tiebreaker
ID_KEY = KeyOrdering(ID_FIELD, coerce=object_id, direction=SortDirection.ASCENDING)
