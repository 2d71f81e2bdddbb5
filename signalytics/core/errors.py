"""Exception types raised by the analytics engine."""


class AnalyticsError(Exception):
    """Base class for all analytics failures."""
    pass


class EmptyInputError(AnalyticsError, ValueError):
    """Raised when no rows remain after filtering.

    Callers are expected to render an explicit empty state instead of a
    computed-but-meaningless statistic.
    """
    pass


class UpstreamFetchError(AnalyticsError, RuntimeError):
    """Raised when a page request to the row source fails.

    Fatal to the whole analytic: no partial results are returned.
    """
    pass


__all__ = ["AnalyticsError", "EmptyInputError", "UpstreamFetchError"]
