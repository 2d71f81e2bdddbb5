"""Row fetching and conversion infrastructure."""

from .sources import (
    PageSource,
    CallablePageSource,
    CSVPageSource,
    FramePageSource,
    RestPageSource,
    get_robust_session,
)
from .paged_fetch import PagedFetch, fetch_all
from .observations import (
    HORIZON_FIELDS,
    coerce_date,
    complete_rows,
    frame_to_observations,
    horizon_fields,
    observations_to_frame,
    rows_to_daily_series,
    rows_to_observations,
)

__all__ = [
    "PageSource",
    "CallablePageSource",
    "CSVPageSource",
    "FramePageSource",
    "RestPageSource",
    "get_robust_session",
    "PagedFetch",
    "fetch_all",
    "HORIZON_FIELDS",
    "coerce_date",
    "complete_rows",
    "frame_to_observations",
    "horizon_fields",
    "observations_to_frame",
    "rows_to_daily_series",
    "rows_to_observations",
]
