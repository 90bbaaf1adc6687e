"""Lazy iteration over paged listings."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from loguru import logger

T = TypeVar("T")


@dataclass(slots=True)
class Page(Generic[T]):
    """One page of results and the marker for the page after it, if any."""

    items: list[T] = field(default_factory=list)
    next_marker: int | str | None = None


PageFetcher = Callable[[int | str | None], Awaitable[Page[T]]]


class Paginator(Generic[T]):
    """Async iterable over the items of a paged listing.

    Pages are requested only as iteration reaches them. Each new ``async for``
    starts again from the first page; use :meth:`collect` to keep the results.
    """

    def __init__(self, fetch_page: PageFetcher[T], *, start: int | str | None = None) -> None:
        self._fetch_page = fetch_page
        self._start = start

    async def pages(self) -> AsyncIterator[Page[T]]:
        marker = self._start
        seen: set[int | str] = set()
        number = 0
        while True:
            page = await self._fetch_page(marker)
            number += 1
            logger.debug(f"Fetched page {number} with {len(page.items)} items")
            yield page
            marker = page.next_marker
            if marker is None:
                return
            if marker in seen:
                logger.warning(f"Pagination marker {marker!r} repeated; stopping")
                return
            seen.add(marker)

    async def __aiter__(self) -> AsyncIterator[T]:
        async for page in self.pages():
            for item in page.items:
                yield item

    async def collect(self) -> list[T]:
        items: list[T] = []
        async for item in self:
            items.append(item)
        logger.info(f"Collected {len(items)} items")
        return items


def page_number_marker(page: int, total_pages: int) -> int | None:
    """Next page number for services reporting ``page`` and ``total-pages``."""
    return page + 1 if page < total_pages else None
