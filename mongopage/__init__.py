from .builder import CursorPredicateBuilder, Pivot
from .codec import CursorCodec, CursorPayload, CursorStatus, DecodedCursor
from .config import PagingOptions
from .exceptions import (
    CursorConflictError,
    CursorDecodeError,
    CursorSerializationError,
    ExecutorError,
    ExecutorTimeoutError,
    KeyCoercionError,
    MongopageError,
    SessionStateError,
    UsageError,
)
from .executors import CountExecutor, MongoCountExecutor, as_count_executor
from .keys import ASC, DESC, ID_KEY, KeyOrdering, SortDirection, object_id, parse_datetime
from .pages import PageNumberSession
from .pagination import (
    CursorInput,
    NextPage,
    Page,
    PageLink,
    PageWindow,
    PagingInfo,
    PagingInput,
    PaginationRequest,
    PreviousPage,
)
from .session import PageBoundaries, PaginationSession, SessionState

__all__ = [
    "PaginationSession",
    "PageNumberSession",
    "SessionState",
    "PageBoundaries",
    # Ordering
    "KeyOrdering",
    "SortDirection",
    "ASC",
    "DESC",
    "ID_KEY",
    "object_id",
    "parse_datetime",
    "CursorPredicateBuilder",
    "Pivot",
    # Tokens
    "CursorCodec",
    "CursorPayload",
    "CursorStatus",
    "DecodedCursor",
    # Executors
    "CountExecutor",
    "MongoCountExecutor",
    "as_count_executor",
    # Models
    "PagingOptions",
    "CursorInput",
    "PagingInput",
    "PaginationRequest",
    "Page",
    "PagingInfo",
    "NextPage",
    "PreviousPage",
    "PageLink",
    "PageWindow",
    # Exceptions
    "MongopageError",
    "UsageError",
    "CursorConflictError",
    "SessionStateError",
    "CursorDecodeError",
    "CursorSerializationError",
    "KeyCoercionError",
    "ExecutorError",
    "ExecutorTimeoutError",
]
