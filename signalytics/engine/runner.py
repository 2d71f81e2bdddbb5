"""Orchestrator from a paged row source to finished analytics results."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from ..analysis import (
    BootstrapResampler,
    CrossSectionalRanker,
    EquityCurveBootstrap,
    MetricDistribution,
    RollingWindowEngine,
    SymbolExpectancyAggregator,
    daily_expectancy,
    daily_ic,
    grouped_ic,
    ic_series,
    regress_alpha_beta,
    rolling_summary,
    select_top_bottom,
    summarize_distribution,
    top_bottom_spread,
)
from ..core import (
    AnalyticsConfig,
    BootstrapSummary,
    BucketResult,
    Direction,
    DistributionSummary,
    Observation,
    RankedViews,
    RankStat,
    RollingPoint,
)
from ..core.errors import EmptyInputError
from ..data import PageSource, fetch_all, horizon_fields, rows_to_daily_series, rows_to_observations

logger = logging.getLogger(__name__)

SeriesInput = Union[pd.Series, PageSource]
DAILY_METRICS = ("ic", "spread", "expectancy")
ROLLING_STATISTICS = ("mean", "hit_rate")


class AnalyticsRunner:
    """Fetch observations once and run any analytic over them.

    Args:
        source: Row source of scored observations (one row per date and instrument)
        config: Analytics configuration; defaults to ``AnalyticsConfig()``
        horizon: Forecast horizon selecting the score/outcome fields ("1d" or "7d")
        instrument_field: Row field holding the instrument identifier
        date_field: Row field holding the observation date
        progress: Show tqdm progress bars while paging and resampling
    """

    def __init__(
        self,
        source: PageSource,
        config: Optional[AnalyticsConfig] = None,
        horizon: str = "1d",
        instrument_field: str = "symbol_id",
        date_field: str = "date",
        progress: bool = False,
    ):
        self.source = source
        self.config = config if config is not None else AnalyticsConfig()
        self.score_field, self.outcome_field = horizon_fields(horizon)
        self.horizon = horizon
        self.instrument_field = instrument_field
        self.date_field = date_field
        self.progress = progress
        self._observations: Optional[List[Observation]] = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_observations(self) -> List[Observation]:
        """Page through the source on first use and cache the Observations.

        Raises:
            UpstreamFetchError: If any page fails.
            EmptyInputError: If the source yields no usable rows.
        """
        if self._observations is None:
            rows = fetch_all(
                self.source,
                page_size=self.config.page_size,
                max_rows=self.config.max_rows,
                progress=self.progress,
            )
            observations = rows_to_observations(
                rows,
                date_field=self.date_field,
                instrument_field=self.instrument_field,
                score_field=self.score_field,
                outcome_field=self.outcome_field,
            )
            logger.info(
                "Loaded %d observations from %s (%s horizon)",
                len(observations), self.source.get_name(), self.horizon,
            )
            self._observations = observations
        if not self._observations:
            raise EmptyInputError(f"{self.source.get_name()} returned no observations.")
        return self._observations

    def load_series(self, source: SeriesInput, value_field: str = "value") -> pd.Series:
        """Resolve a DailySeries, paging ``source`` when it is a PageSource."""
        if isinstance(source, pd.Series):
            return source
        rows = fetch_all(
            source,
            page_size=self.config.page_size,
            max_rows=self.config.max_rows,
            progress=self.progress,
        )
        return rows_to_daily_series(rows, value_field, date_field=self.date_field)

    # ------------------------------------------------------------------
    # Cross-sectional buckets
    # ------------------------------------------------------------------

    def decile_returns(self, partition_by=("date",), statistic: str = "mean") -> List[BucketResult]:
        """Mean outcome per score bucket (K = ``config.buckets``)."""
        ranker = CrossSectionalRanker(
            buckets=self.config.buckets,
            partition_by=partition_by,
            descending=self.config.direction is Direction.SHORT,
            statistic=statistic,
            delimiter=self.config.delimiter,
        )
        return ranker.rank(self.load_observations())

    def top_bottom_spread(self) -> pd.Series:
        return top_bottom_spread(
            self.load_observations(),
            buckets=self.config.buckets,
            delimiter=self.config.delimiter,
        )

    # ------------------------------------------------------------------
    # Information coefficient
    # ------------------------------------------------------------------

    def daily_ic(self) -> List[RankStat]:
        return daily_ic(self.load_observations(), delimiter=self.config.delimiter)

    def ic_by_symbol(self, group_by: str = "base_symbol") -> RankedViews:
        """Top-N and bottom-N symbols by time-series rank correlation."""
        stats = grouped_ic(
            self.load_observations(),
            min_points=self.config.min_points,
            group_by=group_by,
            delimiter=self.config.delimiter,
        )
        views = select_top_bottom(stats, self.config.top_n)
        if not views.top:
            raise EmptyInputError(
                f"No {group_by} has at least {self.config.min_points} points with a defined IC."
            )
        return views

    def ic_distribution(self) -> DistributionSummary:
        """Mean, std, positive share and annualized ICIR of the daily IC."""
        return summarize_distribution(
            ic_series(self.daily_ic()),
            periods_per_year=self.config.periods_per_year,
        )

    # ------------------------------------------------------------------
    # Daily metric series
    # ------------------------------------------------------------------

    def daily_metric(self, metric: str = "ic") -> pd.Series:
        """DailySeries of ``ic``, ``spread`` or direction-filtered ``expectancy``."""
        if metric == "ic":
            return ic_series(self.daily_ic())
        if metric == "spread":
            return self.top_bottom_spread()
        if metric == "expectancy":
            return daily_expectancy(
                self.load_observations(),
                direction=self.config.direction,
                delimiter=self.config.delimiter,
            )
        raise ValueError(f"Unknown metric {metric!r}. Use one of {DAILY_METRICS}.")

    def rolling_statistic(self, metric: str = "ic", statistic: str = "mean") -> Dict[str, Any]:
        """Trailing mean or hit rate of a daily metric plus its latest-value summary."""
        if statistic not in ROLLING_STATISTICS:
            raise ValueError(f"statistic must be one of {ROLLING_STATISTICS}.")
        engine = RollingWindowEngine(window=self.config.window, min_periods=self.config.min_window_obs)
        series = self.daily_metric(metric)
        if statistic == "mean":
            rolled = engine.rolling_mean(series)
        else:
            rolled = engine.rolling_hit_rate(series)
        return {"series": rolled, "summary": rolling_summary(rolled)}

    # ------------------------------------------------------------------
    # Attribution against a benchmark
    # ------------------------------------------------------------------

    def rolling_alpha_beta(
        self,
        benchmark: SeriesInput,
        strategy: Optional[SeriesInput] = None,
        value_field: str = "value",
    ) -> List[RollingPoint]:
        """Rolling alpha/beta of a strategy series against ``benchmark``.

        The strategy defaults to the daily top-bottom spread of the signal.
        """
        strategy_series = (
            self.top_bottom_spread() if strategy is None
            else self.load_series(strategy, value_field)
        )
        benchmark_series = self.load_series(benchmark, value_field)
        engine = RollingWindowEngine(window=self.config.window, min_periods=self.config.min_window_obs)
        return engine.alpha_beta(strategy_series, benchmark_series, lag=self.config.lag)

    def regression(
        self,
        benchmark: SeriesInput,
        strategy: Optional[SeriesInput] = None,
        value_field: str = "value",
        cov_type: str = "HAC",
    ) -> Dict[str, Any]:
        """Full-sample OLS counterpart of :meth:`rolling_alpha_beta`."""
        strategy_series = (
            self.top_bottom_spread() if strategy is None
            else self.load_series(strategy, value_field)
        )
        return regress_alpha_beta(
            strategy_series,
            self.load_series(benchmark, value_field),
            lag=self.config.lag,
            cov_type=cov_type,
        )

    # ------------------------------------------------------------------
    # Resampling
    # ------------------------------------------------------------------

    def bootstrap_mean(self, metric: str = "ic") -> BootstrapSummary:
        """Bootstrap confidence interval of the mean of a daily metric."""
        resampler = BootstrapResampler(
            samples=self.config.samples,
            bins=self.config.bins,
            rng=self.config.make_rng(),
            lower=self.config.lower_percentile,
            upper=self.config.upper_percentile,
            progress=self.progress,
        )
        return resampler.run(self.daily_metric(metric))

    def equity_robustness(
        self,
        metric: str = "spread",
        iterations: int = 10000,
        fee: float = 0.003,
        period_days: int = 1,
    ) -> Dict[str, MetricDistribution]:
        """Equity-curve metric distributions of a daily return metric."""
        bootstrap = EquityCurveBootstrap(
            iterations=iterations,
            fee=fee,
            period_days=period_days,
            rng=self.config.make_rng(),
            progress=self.progress,
        )
        return bootstrap.run(self.daily_metric(metric))

    # ------------------------------------------------------------------
    # Expectancy
    # ------------------------------------------------------------------

    def symbol_expectancy(self) -> RankedViews:
        """Best and worst base symbols by mean outcome in ``config.direction``."""
        aggregator = SymbolExpectancyAggregator(
            direction=self.config.direction,
            min_obs=self.config.min_obs,
            top_n=self.config.top_n,
            delimiter=self.config.delimiter,
        )
        return aggregator.rank(self.load_observations())

    def __repr__(self) -> str:
        return f"AnalyticsRunner(source={self.source.get_name()}, horizon={self.horizon!r}, config={self.config!r})"


__all__ = ["AnalyticsRunner", "DAILY_METRICS", "ROLLING_STATISTICS"]
