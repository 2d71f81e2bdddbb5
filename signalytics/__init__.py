"""Signalytics - analytics for scored cross-sectional predictions.

This package provides:
- Core data types, configuration and errors
- Paged row fetching from REST, CSV and in-memory sources
- Cross-sectional bucketing, rank IC, rolling attribution and bootstrap analytics
- A runner that ties a row source to every analytic

Quick Start:
    from datetime import date

    from signalytics import AnalyticsConfig, AnalyticsRunner
    from signalytics.data import RestPageSource

    source = RestPageSource(
        base_url="https://example.supabase.co/rest/v1",
        table="predictions",
        columns=["date", "symbol_id", "y_pred_1d", "forward_returns_1"],
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
        api_key="...",
    )
    config = AnalyticsConfig(buckets=10, window=30, seed=7)
    runner = AnalyticsRunner(source, config, horizon="1d")

    deciles = runner.decile_returns()
    ic = runner.ic_distribution()
    interval = runner.bootstrap_mean("ic")
    best_worst = runner.symbol_expectancy()
"""

# Core exports
from .core import (
    AnalyticsConfig,
    AnalyticsError,
    EmptyInputError,
    UpstreamFetchError,
    Observation,
    Direction,
    BucketResult,
    RankStat,
    RollingPoint,
    BootstrapSummary,
    SymbolExpectancy,
    RankedViews,
)

# Main interface
from .engine import AnalyticsRunner

__version__ = "0.1.0"

__all__ = [
    # Core types
    "AnalyticsConfig",
    "Observation",
    "Direction",
    "BucketResult",
    "RankStat",
    "RollingPoint",
    "BootstrapSummary",
    "SymbolExpectancy",
    "RankedViews",
    # Errors
    "AnalyticsError",
    "EmptyInputError",
    "UpstreamFetchError",
    # Main interface
    "AnalyticsRunner",
]
