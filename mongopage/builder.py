"""
Compound seek predicates over one or two ordering keys.

CursorPredicateBuilder turns a boundary document (the pivot) into the filter
that selects every document strictly after or strictly before it under the
full ordering (primary, secondary, _id), and produces the matching sort
specification for forward or reversed traversal.
"""

import hashlib
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ._logging import logger
from .exceptions import KeyCoercionError
from .filters import Filter, get_path
from .keys import ID_KEY, KeyOrdering
from .serializer import CursorSerializer

KeyConfig = KeyOrdering | Mapping[str, Any]


@dataclass(frozen=True)
class Pivot:
    """
    Key values of one boundary document.

    Attributes:
        values: {field: value} for every active key, identifier included
    """

    values: dict[str, Any]

    def get(self, field: str) -> Any:
        return self.values.get(field)

    def __getitem__(self, field: str) -> Any:
        return self.values[field]


def _as_key(config: KeyConfig | None) -> KeyOrdering | None:
    if config is None:
        return None
    if isinstance(config, Mapping) and len(config) == 0:
        return None
    return KeyOrdering.from_config(config)


class CursorPredicateBuilder:
    """
    Builds "after"/"before" predicates and sort specifications for a key set.

    Args:
        primary: Main ordering key. Defaults to the identifier key.
        secondary: Optional key breaking ties on the primary key.
        tiebreaker: Unique identifier key appended to guarantee a total
            order. It is folded away when primary or secondary already
            orders on the same field. Pass None to disable it.

    Usage:
        builder = CursorPredicateBuilder(
            primary=KeyOrdering("score", direction=DESC),
            secondary=KeyOrdering("name"),
        )
        builder.sort_specification()  # {"score": -1, "name": 1, "_id": 1}
        builder.after_predicate(builder.extract_pivot(last_document))
    """

    def __init__(
        self,
        primary: KeyConfig | None = None,
        secondary: KeyConfig | None = None,
        tiebreaker: KeyOrdering | None = ID_KEY,
    ) -> None:
        primary_key = _as_key(primary)
        secondary_key = _as_key(secondary)

        # A lone secondary key is promoted to primary
        if primary_key is None and secondary_key is not None:
            primary_key, secondary_key = secondary_key, None
        if primary_key is None:
            primary_key = tiebreaker or ID_KEY

        if secondary_key is not None and secondary_key.field == primary_key.field:
            raise ValueError(f"Primary and secondary keys both order on '{primary_key.field}'")

        self.primary = primary_key
        self.secondary = secondary_key
        self.keys: list[KeyOrdering] = [primary_key]
        if secondary_key is not None:
            self.keys.append(secondary_key)

        self.tiebreaker: KeyOrdering | None = None
        if tiebreaker is not None and all(k.field != tiebreaker.field for k in self.keys):
            self.tiebreaker = tiebreaker
            self.keys.append(tiebreaker)

        self.serializer = CursorSerializer()

    @property
    def fields(self) -> list[str]:
        return [k.field for k in self.keys]

    def fingerprint(self) -> str:
        """Short digest of the ordering configuration, embedded in tokens."""
        layout = "|".join(f"{k.field}:{int(k.direction)}:{k.coercer_name}" for k in self.keys)
        return hashlib.sha256(layout.encode("utf-8")).hexdigest()[:12]

    # --- PIVOTS ---

    def extract_pivot(self, document: Any) -> Pivot:
        """Reads the value of every active key from a document."""
        return Pivot({k.field: get_path(document, k.field) for k in self.keys})

    def token_payload(self, document: Any) -> dict[str, Any]:
        """
        Returns the minimal plain {field: value} map needed to rebuild the pivot.

        Raises:
            CursorSerializationError: If a key value has no plain form
        """
        return self.serializer.to_plain(self.extract_pivot(document).values)

    def reconstruct_pivot(self, raw: Mapping[str, Any]) -> Pivot:
        """
        Rebuilds a typed pivot from decoded token values.

        Keys whose value cannot be coerced are recorded as None, which drops
        their constraint from the predicates.
        """
        values: dict[str, Any] = {}
        for key in self.keys:
            try:
                values[key.field] = key.coerce_value(raw.get(key.field))
            except KeyCoercionError:
                logger.debug("Cursor value could not be coerced", extra={"field": key.field})
                values[key.field] = None
        return Pivot(values)

    # --- PREDICATES ---

    def after_predicate(self, pivot: Pivot | Mapping[str, Any]) -> Filter:
        """Filter selecting documents strictly after the pivot."""
        return self._seek(pivot, after=True)

    def before_predicate(self, pivot: Pivot | Mapping[str, Any]) -> Filter:
        """Filter selecting documents strictly before the pivot."""
        return self._seek(pivot, after=False)

    def _seek(self, pivot: Pivot | Mapping[str, Any], after: bool) -> Filter:
        """
        Builds the lexicographic seek predicate.

        For keys k0..kn the predicate is the disjunction of
            k0 strictly after
            k0 == v0 AND k1 strictly after
            ...
            k0 == v0 AND ... AND k(n-1) == v(n-1) AND kn strictly after
        A single key needs no disjunction. Uncoercible values drop their
        constraint; a clause left empty matches everything, so the whole
        predicate becomes unconstrained.
        """
        values = pivot.values if isinstance(pivot, Pivot) else pivot

        def strict(key: KeyOrdering) -> dict[str, Any] | None:
            value = values.get(key.field)
            return key.after_predicate(value) if after else key.before_predicate(value)

        if len(self.keys) == 1:
            key = self.keys[0]
            predicate = strict(key)
            return {key.field: predicate} if predicate is not None else {}

        clauses: list[Filter] = []
        for i, key in enumerate(self.keys):
            clause: Filter = {}
            for prefix in self.keys[:i]:
                try:
                    clause[prefix.field] = {"$eq": prefix.coerce_value(values.get(prefix.field))}
                except KeyCoercionError:
                    # equality on this prefix key is dropped
                    continue
            predicate = strict(key)
            if predicate is not None:
                clause[key.field] = predicate
            if not clause:
                return {}
            clauses.append(clause)
        return {"$or": clauses}

    # --- SORT ---

    def sort_specification(self, reverse: bool = False) -> dict[str, int]:
        """
        Returns the sort document, every key flipped when `reverse` is True.

        The identifier tiebreaker always comes last so equal primary and
        secondary values still sort deterministically.
        """
        return {k.field: int(k.effective_direction(reverse)) for k in self.keys}
