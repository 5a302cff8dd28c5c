"""
Pure helpers for MongoDB filter documents.

Filters are plain dicts in MongoDB query syntax. None of these helpers mutate
their arguments: a base filter can be combined with several cursor predicates
(current page, next page, previous page) without aliasing.

Usage:
    from mongopage.filters import combine, prune

    combine({"status": "active"}, {"_id": {"$gt": oid, "$exists": True}})
    # {"status": "active", "_id": {"$gt": oid, "$exists": True}}

    combine({"$or": [...]}, {"$or": [...]})
    # {"$and": [{"$or": [...]}, {"$or": [...]}]}

    prune({"status": "active", "owner": None, "tags": []})
    # {"status": "active"}
"""

from collections.abc import Mapping
from typing import Any

Filter = dict[str, Any]

_MISSING = object()


def is_empty(value: Any) -> bool:
    """Returns True for None, "" and empty lists, tuples, sets and dicts."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def prune(filter: Mapping[str, Any] | None) -> Filter:
    """
    Drops top-level keys whose value is empty, absent or null.

    Args:
        filter: The filter to clean (not modified)

    Returns:
        A new filter holding only meaningful constraints
    """
    if not filter:
        return {}
    return {k: v for k, v in filter.items() if not is_empty(v)}


def combine(*filters: Mapping[str, Any] | None) -> Filter:
    """
    Conjunction of several filters.

    Filters with disjoint keys are merged into one document; as soon as two
    filters constrain the same key (including operators like "$or") they are
    wrapped in "$and" so neither constraint is overwritten.

    Args:
        *filters: Filters to combine; None and {} are ignored

    Returns:
        A new filter matching documents that satisfy every input
    """
    parts = [dict(f) for f in filters if f]
    if not parts:
        return {}
    if len(parts) == 1:
        return parts[0]

    merged: Filter = {}
    for part in parts:
        if any(k in merged for k in part):
            return {"$and": parts}
        merged.update(part)
    return merged


def get_path(document: Any, path: str, default: Any = None) -> Any:
    """
    Reads a possibly nested value ("meta.created_at") from a document.

    Mappings are read by key, other objects by attribute, so both raw store
    documents and model instances work.
    """
    current = document
    for part in path.split("."):
        if current is None:
            return default
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        else:
            current = getattr(current, part, _MISSING)
        if current is _MISSING:
            return default
    return current
