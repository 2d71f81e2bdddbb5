"""Core data types, configuration and errors for the analytics engine."""

from .config import AnalyticsConfig
from .data_types import (
    BootstrapSummary,
    BucketResult,
    Direction,
    DistributionSummary,
    Observation,
    RankedViews,
    RankStat,
    RollingPoint,
    SymbolExpectancy,
    base_symbol,
    clean_float,
    make_daily_series,
    series_to_records,
    validate_daily_series,
)
from .errors import AnalyticsError, EmptyInputError, UpstreamFetchError

__all__ = [
    "AnalyticsConfig",
    "Observation",
    "Direction",
    "BucketResult",
    "RankStat",
    "RollingPoint",
    "BootstrapSummary",
    "SymbolExpectancy",
    "RankedViews",
    "DistributionSummary",
    "base_symbol",
    "clean_float",
    "make_daily_series",
    "series_to_records",
    "validate_daily_series",
    "AnalyticsError",
    "EmptyInputError",
    "UpstreamFetchError",
]
