"""Base page source class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

Row = Dict[str, Any]


class PageSource(ABC):
    """Base class for all row sources consumed by PagedFetch.

    Each source is responsible for:
    1. Returning at most ``limit`` rows starting at row ``offset``
    2. Keeping a deterministic row order across page calls
    3. Declaring the largest page it can serve in one call

    A page shorter than the requested limit signals exhaustion, so a source
    must never return a short page while more rows remain.
    """

    #: Largest ``limit`` a single call may request; None means unbounded.
    max_page_size: Optional[int] = None

    @abstractmethod
    def fetch_page(self, offset: int, limit: int) -> List[Row]:
        """Fetch one page of rows.

        Args:
            offset: Zero-based index of the first row to return
            limit: Maximum number of rows to return

        Returns:
            List of row dictionaries, shorter than ``limit`` once the
            source is exhausted.
        """
        pass

    def get_name(self) -> str:
        """Return a descriptive name for this source.

        Used for logging and debugging.
        """
        return self.__class__.__name__


class CallablePageSource(PageSource):
    """Adapt a plain ``fn(offset, limit) -> rows`` callable."""

    def __init__(
        self,
        fn: Callable[[int, int], List[Row]],
        max_page_size: Optional[int] = None,
        name: Optional[str] = None,
    ):
        self.fn = fn
        self.max_page_size = max_page_size
        self._name = name

    def fetch_page(self, offset: int, limit: int) -> List[Row]:
        return list(self.fn(offset, limit) or [])

    def get_name(self) -> str:
        return self._name or getattr(self.fn, "__name__", super().get_name())
