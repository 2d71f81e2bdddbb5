"""Merge bounded-size pages from a row source into one ordered stream."""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

from tqdm import tqdm

from ..core.errors import UpstreamFetchError
from .sources.base import PageSource, Row

logger = logging.getLogger(__name__)


class PagedFetch:
    """Sequentially request pages ``0, 1, 2, ...`` until the source runs dry.

    Exhaustion is detected by a page shorter than ``page_size``; an optional
    ``max_rows`` cap stops the fetch early. Rows come out in page-emission
    order. Any failing page request aborts the whole fetch with
    ``UpstreamFetchError``.

    Usage:
        fetch = PagedFetch(source, page_size=1000)
        for row in fetch:          # streaming
            ...
        rows = fetch.fetch_all()   # materialized
    """

    def __init__(
        self,
        source: PageSource,
        page_size: int = 1000,
        max_rows: Optional[int] = None,
        progress: bool = False,
    ):
        if page_size <= 0:
            raise ValueError("page_size must be positive.")
        if max_rows is not None and max_rows < 0:
            raise ValueError("max_rows must be non-negative.")
        declared = getattr(source, "max_page_size", None)
        if declared is not None and page_size > declared:
            raise ValueError(
                f"page_size {page_size} exceeds the maximum page size {declared} "
                f"declared by {source.get_name()}; the short-page exhaustion test "
                f"would be invalid."
            )
        self.source = source
        self.page_size = page_size
        self.max_rows = max_rows
        self.progress = progress
        self.pages_requested = 0

    def _fetch_page(self, index: int) -> List[Row]:
        offset = index * self.page_size
        self.pages_requested += 1
        try:
            page = self.source.fetch_page(offset, self.page_size)
        except UpstreamFetchError:
            raise
        except Exception as exc:
            raise UpstreamFetchError(
                f"Page {index} (offset {offset}) from {self.source.get_name()} failed: {exc}"
            ) from exc
        page = list(page or [])
        if len(page) > self.page_size:
            raise UpstreamFetchError(
                f"{self.source.get_name()} returned {len(page)} rows for a page of "
                f"{self.page_size}; the source ignores the requested limit."
            )
        return page

    def iter_pages(self) -> Iterator[List[Row]]:
        """Yield pages in order, truncating the last one at ``max_rows``."""
        self.pages_requested = 0
        emitted = 0
        index = 0
        with tqdm(desc=f"Fetching {self.source.get_name()}", unit="page",
                  disable=not self.progress) as bar:
            while self.max_rows is None or emitted < self.max_rows:
                page = self._fetch_page(index)
                exhausted = len(page) < self.page_size
                if self.max_rows is not None and emitted + len(page) > self.max_rows:
                    page = page[:self.max_rows - emitted]
                emitted += len(page)
                bar.update(1)
                logger.debug("%s page %d: %d rows", self.source.get_name(), index, len(page))
                if page:
                    yield page
                if exhausted:
                    break
                index += 1
        logger.info(
            "Fetched %d rows from %s in %d page request(s)",
            emitted, self.source.get_name(), self.pages_requested,
        )

    def __iter__(self) -> Iterator[Row]:
        for page in self.iter_pages():
            yield from page

    def fetch_all(self) -> List[Row]:
        return list(self)


def fetch_all(
    source: PageSource,
    page_size: int = 1000,
    max_rows: Optional[int] = None,
    progress: bool = False,
) -> List[Row]:
    """Convenience wrapper: page through ``source`` and return every row."""
    return PagedFetch(source, page_size=page_size, max_rows=max_rows, progress=progress).fetch_all()


__all__ = ["PagedFetch", "fetch_all"]
