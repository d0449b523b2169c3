"""Explicit page cursor over the SDK's paged listings.

Listings (list_properties_of_keys, list_deleted_certificates, ...) return an
azure.core.paging.ItemPaged whose pages are fetched lazily. PageCursor
exposes them one page at a time with an explicit has_page() check and an
explicit move_to_next_page() call, so a sweep drains a page fully before
fetching the next one.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Generic, Protocol, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Paged(Protocol[T_co]):
    """Anything that can be iterated page by page (ItemPaged does)."""

    def by_page(self) -> Iterator[Iterable[T_co]]: ...


class PageCursor(Generic[T]):
    """Cursor positioned on one page of a paged listing.

    The first page is fetched on construction.

    Example:
        cursor = PageCursor(client.list_properties_of_keys())
        while cursor.has_page():
            for key in cursor.items:
                ...
            cursor.move_to_next_page()
    """

    def __init__(self, paged: Paged[T]) -> None:
        self._pages = iter(paged.by_page())
        self._items: list[T] | None = None
        self._page_count = 0
        self._advance()

    def _advance(self) -> None:
        try:
            page = next(self._pages)
        except StopIteration:
            self._items = None
            return
        self._items = list(page)
        self._page_count += 1

    def has_page(self) -> bool:
        """True while the cursor is positioned on a fetched page."""
        return self._items is not None

    @property
    def items(self) -> list[T]:
        if self._items is None:
            raise RuntimeError("No current page: the listing is exhausted")
        return self._items

    @property
    def page_count(self) -> int:
        """Number of pages fetched so far."""
        return self._page_count

    def move_to_next_page(self) -> None:
        """Fetch the next page; has_page() turns False after the last one."""
        if self._items is None:
            raise RuntimeError("Cannot move past the last page")
        self._advance()


def drain_pages(paged: Paged[T]) -> list[T]:
    """Collect every item of a paged listing, page by page."""
    cursor = PageCursor(paged)
    items: list[T] = []
    while cursor.has_page():
        items.extend(cursor.items)
        cursor.move_to_next_page()
    return items
