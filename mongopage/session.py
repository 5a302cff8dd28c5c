"""
Cursor pagination sessions.

A PaginationSession is built from one list request. Construction resolves the
cursor, derives the query filter and sort order, and stops: the caller runs
the find() itself, then hands the fetched page to build(), which computes
the next/previous cursors, runs the three count queries concurrently and
returns the response envelope.

Usage:
    session = PaginationSession(
        filter={"status": "active"},
        paging={"limit": 20, "cursors": {"after": request_token}},
        primary={"field": "created_at", "coerce": parse_datetime, "direction": "desc"},
        secret=settings.cursor_secret,
    )
    many = list(
        collection.find(session.filter).sort(session.sort_list).limit(session.limit)
    )
    page = await session.build(many, collection)
    page.model_dump()
    # {"data": [...], "paging": {"count": 120, "length": 20,
    #  "next": {"after": "...", "count": 80}, "previous": {"before": "...", "count": 20}}}
"""

import asyncio
import copy
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ._logging import logger
from .builder import CursorPredicateBuilder, KeyConfig, Pivot
from .codec import CursorCodec, CursorStatus, DecodedCursor
from .config import PagingOptions
from .exceptions import CursorConflictError, CursorSerializationError, SessionStateError
from .executors import as_count_executor
from .filters import Filter, combine, prune
from .keys import ID_KEY, KeyOrdering
from .pagination import (
    CursorInput,
    NextPage,
    Page,
    PagingInfo,
    PagingInput,
    PaginationRequest,
    PreviousPage,
)

TEXT_SCORE_FIELD = "score"
TEXT_SCORE = {"$meta": "textScore"}


class SessionState(str, Enum):
    INITIAL = "initial"
    CURSOR_RESOLVED = "cursor_resolved"
    FILTER_DERIVED = "filter_derived"
    AWAITING_FETCH = "awaiting_fetch"
    FINALIZED = "finalized"


@dataclass
class PageBoundaries:
    """
    Cursors and follow-up filters computed from one fetched page.

    Attributes:
        data: The page in natural display order
        after_cursor: Token resuming after the last item
        before_cursor: Token resuming before the first item
        filter_next: Filter matching everything after the page
        filter_previous: Filter matching everything before the page
    """

    data: list[Any]
    after_cursor: str | None = None
    before_cursor: str | None = None
    filter_next: Filter = field(default_factory=dict)
    filter_previous: Filter = field(default_factory=dict)


class PaginationSession:
    """
    One cursor-paginated request.

    Args:
        filter: Base query filter; never modified
        paging: PagingInput or mapping with limit, offset and cursors
        search: Optional full-text search term ($text)
        primary: Main ordering key (KeyOrdering or {field, coerce?, direction})
        secondary: Optional second ordering key
        to_entity: Optional projection applied to every returned item
        tiebreaker: Unique identifier key closing the ordering
        codec: Cursor codec; built from `secret`/`options` when omitted
        secret: Signing secret for a codec built here
        options: PagingOptions for a codec built here and the default limit;
            PagingOptions() (MONGOPAGE_* variables) when omitted

    Raises:
        CursorConflictError: If both an 'after' and a 'before' cursor are given
    """

    def __init__(
        self,
        filter: Mapping[str, Any] | None = None,
        paging: PagingInput | Mapping[str, Any] | None = None,
        search: str | None = None,
        primary: KeyConfig | None = None,
        secondary: KeyConfig | None = None,
        to_entity: Callable[[Any], Any] | None = None,
        *,
        tiebreaker: KeyOrdering | None = ID_KEY,
        codec: CursorCodec | None = None,
        secret: str | None = None,
        options: PagingOptions | None = None,
    ) -> None:
        self.state = SessionState.INITIAL

        options = options or PagingOptions()
        if codec is None:
            codec = CursorCodec(
                secret=secret if secret is not None else options.secret,
                algorithm=options.algorithm,
            )
        if not isinstance(paging, PagingInput):
            paging = PagingInput.model_validate(paging or {})

        self.codec = codec
        self.builder = CursorPredicateBuilder(primary, secondary, tiebreaker)
        self.search = search or None
        self.to_entity = to_entity

        # The caller's filter, used untouched for the total count
        self.condition: Filter = copy.deepcopy(dict(filter or {}))
        self.limit: int = paging.limit or options.default_limit
        self.skip: int = paging.offset or 0

        self.reverse = False
        self.pivot: Pivot | None = None
        self.scope: Filter = {}
        self.filter: Filter = {}
        self.sort: dict[str, Any] = {}

        decoded = self._resolve_cursor(paging.cursors)
        self._derive_filter(decoded)
        self.state = SessionState.AWAITING_FETCH

    @classmethod
    def from_request(
        cls, request: PaginationRequest | Mapping[str, Any], **kwargs: Any
    ) -> "PaginationSession":
        """Builds a session from a PaginationRequest (or its mapping form)."""
        if not isinstance(request, PaginationRequest):
            request = PaginationRequest.model_validate(request)
        return cls(
            filter=request.filter,
            paging=request.paging,
            search=request.search,
            primary=request.primary,
            secondary=request.secondary,
            to_entity=request.to_entity,
            **kwargs,
        )

    # --- CONSTRUCTION STEPS ---

    def _resolve_cursor(self, cursors: CursorInput | None) -> DecodedCursor:
        """
        Decodes the request cursor and sets the traversal direction.

        Unusable tokens degrade to "no cursor": the request starts over from
        the beginning of the collection instead of failing.
        """
        if cursors is None or not (cursors.after or cursors.before):
            self.state = SessionState.CURSOR_RESOLVED
            return DecodedCursor.absent()

        if cursors.after and cursors.before:
            raise CursorConflictError()

        direction = "before" if cursors.before else "after"
        decoded = self.codec.decode(
            cursors.before or cursors.after, fingerprint=self.builder.fingerprint()
        )
        if decoded.status is CursorStatus.INVALID:
            logger.warning(
                "Discarding unusable cursor",
                extra={"direction": direction, "reason": decoded.reason},
            )

        self.reverse = direction == "before" and decoded.is_decoded
        self.state = SessionState.CURSOR_RESOLVED
        return decoded

    def _derive_filter(self, decoded: DecodedCursor) -> None:
        """Builds the effective filter and sort order from the resolved cursor."""
        scope = dict(self.condition)
        if self.search:
            scope["$text"] = {"$search": self.search}
        self.scope = prune(scope)

        cursor_filter: Filter = {}
        if decoded.is_decoded and decoded.values is not None:
            self.pivot = self.builder.reconstruct_pivot(decoded.values)
            if self.reverse:
                cursor_filter = self.builder.before_predicate(self.pivot)
            else:
                cursor_filter = self.builder.after_predicate(self.pivot)
        self.filter = combine(self.scope, cursor_filter)

        sort: dict[str, Any] = dict(self.builder.sort_specification(self.reverse))
        if self.search:
            # Never displaces an ordering key of the same name
            sort.setdefault(TEXT_SCORE_FIELD, TEXT_SCORE)
        self.sort = sort

        self.state = SessionState.FILTER_DERIVED
        logger.debug(
            "Derived pagination query",
            extra={
                "direction": "before" if self.reverse else "after",
                "has_cursor": self.pivot is not None,
                "has_search": self.search is not None,
                "keys": self.builder.fields,
            },
        )

    # --- QUERY PARAMETERS ---

    @property
    def sort_list(self) -> list[tuple[str, Any]]:
        """The sort order as (field, direction) pairs, the form pymongo's sort() takes."""
        return list(self.sort.items())

    def find_kwargs(self) -> dict[str, Any]:
        """
        Keyword arguments for collection.find().

        Usage:
            many = list(collection.find(**session.find_kwargs()))
        """
        kwargs: dict[str, Any] = {"filter": self.filter, "sort": self.sort_list}
        if self.limit:
            kwargs["limit"] = self.limit
        if self.skip:
            kwargs["skip"] = self.skip
        return kwargs

    # --- POST-FETCH ---

    def encrypt(self, document: Any) -> str | None:
        """Returns the cursor token of a document, or None if it cannot be encoded."""
        try:
            values = self.builder.token_payload(document)
        except CursorSerializationError as e:
            logger.warning("Boundary document has no cursor form", extra={"error": e.message})
            return None
        return self.codec.encode(values, fingerprint=self.builder.fingerprint())

    def boundaries(self, many: Sequence[Any]) -> PageBoundaries:
        """
        Computes the cursors and follow-up filters of a fetched page.

        Pages fetched in reverse are flipped back to natural display order.
        An empty page has no boundaries.
        """
        data = list(reversed(many)) if self.reverse else list(many)
        if not data:
            return PageBoundaries(data=data)

        first, last = data[0], data[-1]
        filter_next = combine(
            self.scope, self.builder.after_predicate(self.builder.extract_pivot(last))
        )
        filter_previous = combine(
            self.scope, self.builder.before_predicate(self.builder.extract_pivot(first))
        )
        return PageBoundaries(
            data=data,
            after_cursor=self.encrypt(last),
            before_cursor=self.encrypt(first),
            filter_next=filter_next,
            filter_previous=filter_previous,
        )

    async def build(self, many: Sequence[Any] | None, executor: Any) -> Page:
        """
        Finalizes the session with the page the caller fetched.

        Args:
            many: Documents returned by find(filter, sort, limit, skip)
            executor: CountExecutor, or a pymongo collection to count with

        Returns:
            Page envelope with projected items and paging metadata

        Raises:
            SessionStateError: If the session was already finalized
            ExecutorError: If a pymongo count query fails
        """
        if self.state is not SessionState.AWAITING_FETCH:
            raise SessionStateError(self.state.value, "build")
        self.state = SessionState.FINALIZED

        counter = as_count_executor(executor)
        bounds = self.boundaries(many or [])

        if not bounds.data:
            count = await counter.count_documents(self.condition)
            logger.info("Built empty page", extra={"count": count or 0})
            return Page(data=[], paging=PagingInfo(count=count or 0, length=0))

        count_next, count_previous, count = await asyncio.gather(
            counter.count_documents(bounds.filter_next),
            counter.count_documents(bounds.filter_previous),
            counter.count_documents(self.condition),
        )
        count_next = count_next or 0
        count_previous = count_previous or 0

        data = bounds.data
        if self.to_entity is not None:
            data = [self.to_entity(one) for one in data]

        logger.info(
            "Built page",
            extra={
                "length": len(data),
                "count": count or 0,
                "count_next": count_next,
                "count_previous": count_previous,
                "direction": "before" if self.reverse else "after",
            },
        )
        return Page(
            data=data,
            paging=PagingInfo(
                count=count or 0,
                length=len(data),
                next=NextPage(after=bounds.after_cursor, count=count_next) if count_next else None,
                previous=(
                    PreviousPage(before=bounds.before_cursor, count=count_previous)
                    if count_previous
                    else None
                ),
            ),
        )

    def __repr__(self) -> str:
        return (
            f"PaginationSession(state={self.state.value!r}, keys={self.builder.fields!r}, "
            f"reverse={self.reverse!r})"
        )
