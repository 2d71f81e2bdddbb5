"""Analytics over scored observations and daily series."""

from .ranker import CrossSectionalRanker, ntile_buckets, top_bottom_spread
from .rank_correlation import (
    daily_ic,
    grouped_ic,
    ic_series,
    select_top_bottom,
    spearman_correlation,
)
from .rolling import (
    MIN_WINDOW_OBS,
    RollingWindowEngine,
    align_benchmark,
    ols_alpha_beta,
    rolling_summary,
    trim_warmup,
)
from .bootstrap import BootstrapResampler, histogram, percentile_indices
from .robustness import EquityCurveBootstrap, MetricDistribution, path_metrics
from .expectancy import SymbolExpectancyAggregator, daily_expectancy, filter_direction
from .distribution import summarize_distribution
from .regression import regress_alpha_beta

__all__ = [
    # Ranking
    "CrossSectionalRanker",
    "ntile_buckets",
    "top_bottom_spread",
    # Information coefficient
    "spearman_correlation",
    "daily_ic",
    "grouped_ic",
    "select_top_bottom",
    "ic_series",
    # Rolling attribution
    "MIN_WINDOW_OBS",
    "RollingWindowEngine",
    "align_benchmark",
    "ols_alpha_beta",
    "rolling_summary",
    "trim_warmup",
    "regress_alpha_beta",
    # Resampling
    "BootstrapResampler",
    "EquityCurveBootstrap",
    "MetricDistribution",
    "histogram",
    "percentile_indices",
    "path_metrics",
    # Expectancy
    "SymbolExpectancyAggregator",
    "daily_expectancy",
    "filter_direction",
    "summarize_distribution",
]
