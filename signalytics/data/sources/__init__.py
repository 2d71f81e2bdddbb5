"""Row sources for paged fetching."""

from .base import CallablePageSource, PageSource
from .csv_source import CSVPageSource
from .frame_source import FramePageSource
from .rest_source import RestPageSource, get_robust_session

__all__ = [
    "PageSource",
    "CallablePageSource",
    "CSVPageSource",
    "FramePageSource",
    "RestPageSource",
    "get_robust_session",
]
