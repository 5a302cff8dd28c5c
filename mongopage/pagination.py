"""
Request and response models for mongopage.

This module provides the pydantic models exchanged with API layers: the
paging input a client sends (cursors, limit, offset) and the envelope a
PaginationSession returns (data plus paging metadata), so FastAPI backends
can use them directly as request and response schemas.
"""

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class CursorInput(BaseModel):
    """
    Opaque cursors sent back by the client.

    Attributes:
        after: Token of the last item of the previous page (forward traversal)
        before: Token of the first item of the next page (reverse traversal)
    """

    after: str | None = None
    before: str | None = None


class PagingInput(BaseModel):
    """
    Paging parameters of a list request.

    limit and offset are handed through to the caller's find() query.
    size is only used by page-number pagination.
    """

    model_config = ConfigDict(extra="ignore")

    limit: int | None = Field(default=None, ge=0)
    offset: int | None = Field(default=None, ge=0)
    size: int | None = Field(default=None, ge=1)
    cursors: CursorInput | None = None


class PaginationRequest(BaseModel):
    """
    Everything a PaginationSession is built from.

    primary/secondary accept a KeyOrdering or a {field, coerce?, direction}
    mapping.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    filter: dict[str, Any] = Field(default_factory=dict)
    paging: PagingInput = Field(default_factory=PagingInput)
    search: str | None = None
    primary: Any = None
    secondary: Any = None
    to_entity: Callable[[Any], Any] | None = None


class NextPage(BaseModel):
    after: str | None
    count: int


class PreviousPage(BaseModel):
    before: str | None
    count: int


class PagingInfo(BaseModel):
    """
    Paging metadata of one response.

    Attributes:
        count: Documents matching the base filter, ignoring the cursor
        length: Items in this page
        next: Cursor and remaining count after this page (None if nothing follows)
        previous: Cursor and remaining count before this page (None if nothing precedes)
    """

    count: int
    length: int
    next: NextPage | None = None
    previous: PreviousPage | None = None

    @property
    def has_next(self) -> bool:
        return self.next is not None

    @property
    def has_previous(self) -> bool:
        return self.previous is not None


class Page(BaseModel, Generic[T]):
    """Response envelope: projected items plus paging metadata."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    data: list[T]
    paging: PagingInfo


class PageLink(BaseModel):
    """One entry of a page-number navigation bar."""

    more: bool
    current: bool
    index: int
    limit: int
    offset: int


class PageWindow(BaseModel):
    """Page-number pagination metadata."""

    model_config = ConfigDict(populate_by_name=True)

    count: int
    from_: int = Field(alias="from")
    to: int
    pages: list[PageLink]
