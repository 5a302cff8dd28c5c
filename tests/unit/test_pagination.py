"""
Unit tests for the request and response models.
"""

import pytest
from pydantic import BaseModel, ValidationError

from mongopage.pagination import (
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


class ArticleOut(BaseModel):
    title: str


class TestPagingInput:
    """Test parsing of client paging parameters."""

    def test_defaults(self):
        paging = PagingInput()
        assert paging.limit is None
        assert paging.offset is None
        assert paging.cursors is None

    def test_nested_cursors(self):
        paging = PagingInput.model_validate({"limit": 5, "cursors": {"after": "tok"}})
        assert paging.cursors == CursorInput(after="tok")
        assert paging.cursors.before is None

    def test_unknown_fields_are_ignored(self):
        paging = PagingInput.model_validate({"limit": 5, "sort": "name"})
        assert paging.limit == 5

    @pytest.mark.parametrize("params", [{"size": 0}, {"limit": -1}, {"offset": -10}])
    def test_out_of_range_values_rejected(self, params):
        with pytest.raises(ValidationError):
            PagingInput.model_validate(params)

    def test_zero_limit_means_default(self):
        assert PagingInput(limit=0, offset=0).limit == 0

    def test_request_defaults(self):
        request = PaginationRequest()
        assert request.filter == {}
        assert request.paging == PagingInput()
        assert request.primary is None
        assert request.to_entity is None


class TestPagingInfo:
    """Test paging metadata."""

    def test_has_next_and_previous(self):
        info = PagingInfo(
            count=10,
            length=2,
            next=NextPage(after="a", count=3),
            previous=PreviousPage(before="b", count=5),
        )
        assert info.has_next is True
        assert info.has_previous is True

    def test_without_links(self):
        info = PagingInfo(count=0, length=0)
        assert info.has_next is False
        assert info.has_previous is False

    def test_dump_keeps_null_links(self):
        info = PagingInfo(count=2, length=2)
        assert info.model_dump() == {"count": 2, "length": 2, "next": None, "previous": None}


class TestPage:
    """Test the response envelope."""

    def test_typed_page(self):
        page = Page[ArticleOut](
            data=[ArticleOut(title="a")],
            paging=PagingInfo(count=1, length=1),
        )
        assert page.model_dump()["data"] == [{"title": "a"}]

    def test_typed_page_validates_items(self):
        page = Page[ArticleOut].model_validate(
            {"data": [{"title": "b"}], "paging": {"count": 1, "length": 1}}
        )
        assert isinstance(page.data[0], ArticleOut)

    def test_untyped_page_accepts_documents(self):
        page = Page(data=[{"_id": 1}], paging=PagingInfo(count=1, length=1))
        assert page.data == [{"_id": 1}]


class TestPageWindow:
    """Test page-number metadata."""

    def test_from_alias(self):
        window = PageWindow.model_validate({"count": 0, "from": 10, "to": 20, "pages": []})
        assert window.from_ == 10
        assert window.model_dump(by_alias=True)["from"] == 10

    def test_populate_by_name(self):
        link = PageLink(more=False, current=True, index=1, limit=10, offset=0)
        window = PageWindow(count=1, from_=0, to=1, pages=[link])
        assert window.pages[0].current is True
