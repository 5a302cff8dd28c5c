"""
Count executors.

A PaginationSession never talks to the store directly; it asks a count
executor for the number of documents matching a filter. Anything with an
async count_documents(filter) method qualifies. MongoCountExecutor adapts
pymongo collections (sync or async) and plain objects with a blocking
count_documents, and translates pymongo errors into ExecutorError.
"""

import asyncio
import inspect
from typing import Any, Protocol, runtime_checkable

from pymongo.asynchronous.collection import AsyncCollection
from pymongo.collection import Collection

from ._logging import logger
from .exceptions import handle_executor_errors
from .filters import Filter


@runtime_checkable
class CountExecutor(Protocol):
    async def count_documents(self, filter: Filter) -> int: ...


class MongoCountExecutor:
    """
    Runs count queries against a pymongo-style collection.

    A blocking count_documents (pymongo Collection or any object whose
    method is not a coroutine function) runs in a worker thread so several
    counts proceed concurrently without blocking the event loop. A pymongo
    AsyncCollection or a coroutine count_documents is awaited directly.

    Args:
        collection: A pymongo Collection, AsyncCollection or any object
            with a count_documents(filter) method
    """

    def __init__(self, collection: Any) -> None:
        self.collection = collection
        method = getattr(collection, "count_documents", None)
        self.threaded = not (
            isinstance(collection, AsyncCollection) or inspect.iscoroutinefunction(method)
        )

    async def count_documents(self, filter: Filter) -> int:
        logger.debug(
            "Counting documents",
            extra={"collection": getattr(self.collection, "name", None), "operation": "count"},
        )
        with handle_executor_errors(operation="count_documents"):
            if self.threaded:
                result = await asyncio.to_thread(self.collection.count_documents, filter)
            else:
                result = self.collection.count_documents(filter)
            if inspect.isawaitable(result):
                result = await result
        # An absent result counts as zero
        return int(result or 0)


def as_count_executor(target: Any) -> CountExecutor:
    """
    Returns a CountExecutor for `target`.

    Custom executors with a coroutine count_documents are used as-is, so
    their exceptions reach the caller unchanged. pymongo collections and
    anything else are wrapped in MongoCountExecutor.
    """
    if isinstance(target, MongoCountExecutor):
        return target
    if isinstance(target, (Collection, AsyncCollection)):
        return MongoCountExecutor(target)
    method = getattr(target, "count_documents", None)
    if method is None:
        raise TypeError(f"{type(target).__name__} has no count_documents() method")
    if inspect.iscoroutinefunction(method):
        return target
    return MongoCountExecutor(target)
