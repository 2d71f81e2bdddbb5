"""Analytics execution engine."""

from .runner import AnalyticsRunner

__all__ = ["AnalyticsRunner"]
