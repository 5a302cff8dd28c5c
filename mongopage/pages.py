import math
from collections.abc import Mapping, Sequence
from typing import Any

from ._logging import logger
from .config import PagingOptions
from .executors import as_count_executor
from .filters import Filter
from .pagination import PageLink, PageWindow, PagingInput


class PageNumberSession:
    """
    Offset pagination with a page-number navigation window.

    The caller fetches with session.limit and session.skip; build() counts
    the filter and returns the window of page links around the current page,
    always including the first and the last page.
    """

    def __init__(
        self,
        filter: Mapping[str, Any] | None = None,
        paging: PagingInput | Mapping[str, Any] | None = None,
        options: PagingOptions | None = None,
    ) -> None:
        options = options or PagingOptions()
        if not isinstance(paging, PagingInput):
            paging = PagingInput.model_validate(paging or {})

        self.size: int = paging.size or options.page_size
        self.limit: int = paging.limit or self.size
        self.skip: int = paging.offset or 0
        self.margin: int = options.page_margin
        self.filter: Filter = dict(filter or {})

    def window(self, count: int, fetched: int) -> PageWindow:
        """Computes the navigation window for `count` matching documents."""
        total_pages = math.ceil(count / self.size)
        current = math.ceil(self.skip / self.size) + 1

        if total_pages == 0:
            return PageWindow(count=count, from_=self.skip, to=self.skip + fetched, pages=[])

        pages = [
            PageLink(
                more=False,
                current=index == current,
                index=index,
                limit=self.size,
                offset=(index - 1) * self.size,
            )
            for index in range(1, total_pages + 1)
        ]

        start = current - self.margin
        end = current + self.margin
        # Shift the window right when it starts before the first page
        if start < 0:
            end -= start
            start = 0
        # Shift it left when it runs past the last page
        if end > total_pages:
            start = max(start - (end - total_pages), 0)
            end = total_pages
        links = pages[start:end]

        if not any(link.index == total_pages for link in links):
            links.append(
                PageLink(
                    more=True,
                    current=total_pages == current,
                    index=total_pages,
                    limit=self.size,
                    offset=(total_pages - 1) * self.size,
                )
            )
        if not any(link.index == 1 for link in links):
            links.insert(
                0,
                PageLink(more=True, current=current == 1, index=1, limit=self.size, offset=0),
            )

        return PageWindow(count=count, from_=self.skip, to=self.skip + fetched, pages=links)

    async def build(self, many: Sequence[Any] | None, executor: Any) -> PageWindow:
        """
        Counts the filter and returns the page window for the fetched page.

        Args:
            many: Documents the caller fetched with limit/skip
            executor: CountExecutor, or a pymongo collection to count with
        """
        count = await as_count_executor(executor).count_documents(self.filter)
        fetched = len(many or [])
        logger.debug(
            "Built page-number window",
            extra={"count": count, "skip": self.skip, "size": self.size},
        )
        return self.window(count or 0, fetched)
