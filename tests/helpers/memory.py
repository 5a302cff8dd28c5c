"""
In-memory collection for unit tests.

Evaluates the subset of MongoDB query syntax mongopage emits ($and, $or,
$eq, $gt, $gte, $lt, $lte, $exists, $in, $text) against plain dicts, so
pagination can be walked end to end without a server.
"""

import asyncio
from typing import Any

from mongopage.filters import get_path

_MISSING = object()


def _lookup(document: dict[str, Any], path: str) -> Any:
    return get_path(document, path, default=_MISSING)


def _compare(actual: Any, operator: str, expected: Any) -> bool:
    if operator == "$exists":
        return (actual is not _MISSING) == bool(expected)
    if operator == "$eq":
        return actual is not _MISSING and actual == expected
    if operator == "$in":
        return actual is not _MISSING and actual in expected
    if actual is _MISSING or actual is None:
        return False
    if operator == "$gt":
        return actual > expected
    if operator == "$gte":
        return actual >= expected
    if operator == "$lt":
        return actual < expected
    if operator == "$lte":
        return actual <= expected
    raise NotImplementedError(operator)


def _text_match(document: dict[str, Any], search: str) -> bool:
    words = search.lower().split()
    text = " ".join(str(v).lower() for v in document.values() if isinstance(v, str))
    return any(word in text for word in words)


def matches(document: dict[str, Any], filter: dict[str, Any]) -> bool:
    """Returns True if the document satisfies the filter."""
    for key, condition in filter.items():
        if key == "$and":
            if not all(matches(document, part) for part in condition):
                return False
        elif key == "$or":
            if not any(matches(document, part) for part in condition):
                return False
        elif key == "$text":
            if not _text_match(document, condition["$search"]):
                return False
        elif isinstance(condition, dict) and condition and all(
            k.startswith("$") for k in condition
        ):
            actual = _lookup(document, key)
            if not all(_compare(actual, op, value) for op, value in condition.items()):
                return False
        elif condition is None:
            # null matches missing fields too
            if _lookup(document, key) not in (None, _MISSING):
                return False
        else:
            if _lookup(document, key) != condition:
                return False
    return True


def sort_documents(documents: list[dict[str, Any]], sort: dict[str, Any]) -> list[dict[str, Any]]:
    """Sorts documents by a MongoDB sort specification (textScore entries are ignored)."""
    result = list(documents)
    # Stable sorts applied from the least to the most significant key
    for field, direction in reversed(list(sort.items())):
        if not isinstance(direction, int):
            continue
        result.sort(key=lambda doc: _lookup(doc, field), reverse=direction < 0)
    return result


class MemoryCollection:
    """A list of documents with find() and an async count_documents()."""

    def __init__(self, documents: list[dict[str, Any]]) -> None:
        self.documents = documents
        self.count_calls: list[dict[str, Any]] = []

    def find(
        self,
        filter: dict[str, Any] | None = None,
        sort: list[tuple[str, Any]] | None = None,
        limit: int = 0,
        skip: int = 0,
    ) -> list[dict[str, Any]]:
        selected = [d for d in self.documents if matches(d, filter or {})]
        selected = sort_documents(selected, dict(sort or []))
        selected = selected[skip:]
        return selected[:limit] if limit else selected

    async def count_documents(self, filter: dict[str, Any]) -> int:
        self.count_calls.append(filter)
        # Yield so concurrent counts interleave
        await asyncio.sleep(0)
        return sum(1 for d in self.documents if matches(d, filter))
