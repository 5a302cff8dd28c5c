"""
Unit tests for page-number pagination.
"""

import pytest
from pydantic import ValidationError

from mongopage import PageNumberSession, PagingOptions


def indices(window):
    return [link.index for link in window.pages]


@pytest.mark.unit
class TestPageNumberSession:
    """Test sizing defaults."""

    def test_defaults(self):
        session = PageNumberSession()
        assert session.size == 10
        assert session.limit == 10
        assert session.skip == 0
        assert session.margin == 3

    def test_paging_input(self):
        session = PageNumberSession(paging={"size": 20, "offset": 40})
        assert session.size == 20
        assert session.limit == 20
        assert session.skip == 40

    def test_page_size_from_options(self):
        assert PageNumberSession(options=PagingOptions(page_size=25)).size == 25

    def test_page_size_from_environment(self, monkeypatch):
        monkeypatch.setenv("MONGOPAGE_PAGE_SIZE", "4")
        assert PageNumberSession().size == 4

    def test_zero_size_rejected(self):
        """A zero page size never reaches the window arithmetic."""
        with pytest.raises(ValidationError):
            PageNumberSession(paging={"size": 0})

    def test_zero_size_from_environment_rejected(self, monkeypatch):
        monkeypatch.setenv("MONGOPAGE_PAGE_SIZE", "0")
        with pytest.raises(ValidationError):
            PageNumberSession()


@pytest.mark.unit
class TestWindow:
    """Test the navigation window around the current page."""

    def test_no_pages_for_empty_result(self):
        window = PageNumberSession().window(count=0, fetched=0)
        assert window.pages == []
        assert window.count == 0

    def test_first_page_shifts_window_right(self):
        window = PageNumberSession().window(count=95, fetched=10)

        assert indices(window) == [1, 2, 3, 4, 5, 6, 10]
        assert window.pages[0].current is True
        assert window.pages[-1].more is True
        assert window.pages[-1].offset == 90

    def test_middle_page_adds_first_and_last(self):
        window = PageNumberSession(paging={"offset": 50}).window(count=95, fetched=10)

        assert indices(window) == [1, 4, 5, 6, 7, 8, 9, 10]
        assert [link.index for link in window.pages if link.current] == [6]
        assert window.pages[0].more is True
        assert window.pages[0].offset == 0
        assert window.pages[-1].more is True

    def test_last_page_shifts_window_left(self):
        window = PageNumberSession(paging={"offset": 90}).window(count=95, fetched=5)

        assert indices(window) == [1, 5, 6, 7, 8, 9, 10]
        assert window.pages[-1].current is True
        assert window.pages[-1].more is False

    def test_few_pages_are_all_listed(self):
        window = PageNumberSession().window(count=25, fetched=10)
        assert indices(window) == [1, 2, 3]
        assert not any(link.more for link in window.pages)

    def test_range(self):
        window = PageNumberSession(paging={"offset": 20}).window(count=25, fetched=5)
        assert window.from_ == 20
        assert window.to == 25
        assert window.model_dump(by_alias=True)["from"] == 20

    def test_links_carry_limit_and_offset(self):
        window = PageNumberSession(paging={"size": 5}).window(count=12, fetched=5)
        assert [(link.limit, link.offset) for link in window.pages] == [(5, 0), (5, 5), (5, 10)]


@pytest.mark.unit
class TestBuild:
    """Test counting through an executor."""

    @pytest.mark.asyncio
    async def test_build_counts_filter(self, memory_collection):
        session = PageNumberSession(filter={"status": "published"}, paging={"size": 5})
        many = memory_collection.find(
            filter=session.filter, sort=[("_id", 1)], limit=session.limit, skip=session.skip
        )

        window = await session.build(many, memory_collection)

        assert memory_collection.count_calls == [{"status": "published"}]
        assert window.count == 11
        assert indices(window) == [1, 2, 3]
        assert window.to == 5
