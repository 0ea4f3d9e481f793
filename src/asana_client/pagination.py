"""
Cursor-based pagination.

A listing call returns a ``NextPage`` cursor while more results exist and
``None`` once the listing is exhausted. The helpers here reissue a listing
call with the cursor's offset until it is.
"""

from __future__ import annotations
from typing import Any, Callable, Iterator, List, Optional, Tuple

from pydantic import BaseModel

from .options import Options
from .runtime.errors import InvalidPageSizeError, ProtocolError

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 100

PageFetcher = Callable[..., Tuple[Optional[List[Any]], Optional["NextPage"]]]


class NextPage(BaseModel):
    """Position of the next page of a listing."""
    offset: str = ""
    path: Optional[str] = None
    uri: Optional[str] = None

    def options(self, page_size: Optional[int] = None) -> Options:
        """Options that request the page this cursor points at."""
        return Options(limit=page_size, offset=self.offset)


def _check_page_size(page_size: int) -> None:
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise InvalidPageSizeError(f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {page_size}")


def iter_pages(fetch: PageFetcher, *options: Options,
               page_size: int = DEFAULT_PAGE_SIZE) -> Iterator[List[Any]]:
    """
    Yield each page of a listing in order.

    ``fetch`` is called with the caller's options followed by the page
    options, and must return ``(items, next_page)``.
    """
    _check_page_size(page_size)
    page = Options(limit=page_size, offset="")
    while True:
        items, next_page = fetch(*options, page)
        yield list(items or [])
        if next_page is None:
            return
        if not next_page.offset:
            raise ProtocolError("Pagination cursor has no offset", details={"path": next_page.path})
        page = next_page.options(page_size)


def fetch_all(fetch: PageFetcher, *options: Options,
              page_size: int = DEFAULT_PAGE_SIZE) -> List[Any]:
    """
    Fetch every page of a listing and concatenate the results.

    Any failure aborts the whole listing; pages already fetched are dropped.
    """
    _check_page_size(page_size)
    results: List[Any] = []
    for items in iter_pages(fetch, *options, page_size=page_size):
        results.extend(items)
    return results
