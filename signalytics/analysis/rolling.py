"""Trailing-window statistics with one uniformly enforced warm-up policy."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..core.data_types import RollingPoint, validate_daily_series

logger = logging.getLogger(__name__)

MIN_WINDOW_OBS = 7
SUMMARY_OFFSETS = (1, 7, 30)


def align_benchmark(
    strategy: pd.Series,
    benchmark: pd.Series,
    lag: int = 1,
    fill_value: float = 0.0,
) -> np.ndarray:
    """Align ``benchmark`` to the strategy dates, then shift it by ``lag``.

    Benchmark dates missing from the strategy index are dropped, strategy
    dates missing from the benchmark take ``fill_value``. After shifting,
    position ``i`` holds the benchmark value of position ``i - lag`` and the
    first ``lag`` positions take ``fill_value``.
    """
    if lag < 0:
        raise ValueError("lag must be non-negative.")
    aligned = benchmark.reindex(strategy.index).astype(float)
    aligned = aligned.where(np.isfinite(aligned), fill_value).to_numpy()
    if lag == 0:
        return aligned
    shifted = np.full_like(aligned, fill_value)
    if lag < aligned.size:
        shifted[lag:] = aligned[:-lag]
    return shifted


def ols_alpha_beta(strategy: np.ndarray, benchmark: np.ndarray) -> Tuple[float, float]:
    """Single-predictor OLS intercept and slope with sample (n-1) moments.

    Beta falls back to 0 when the benchmark has no variance in the window.
    """
    n = strategy.size
    mean_s = float(strategy.mean())
    mean_b = float(benchmark.mean())
    denom = n - 1 if n > 1 else 1
    cov = float(np.dot(strategy - mean_s, benchmark - mean_b)) / denom
    var_b = float(np.dot(benchmark - mean_b, benchmark - mean_b)) / denom
    beta = cov / var_b if var_b > 0 else 0.0
    alpha = mean_s - beta * mean_b
    return alpha, beta


def _finite_mean(window: np.ndarray) -> Optional[float]:
    finite = window[np.isfinite(window)]
    return float(finite.mean()) if finite.size else None


def _finite_hit_rate(window: np.ndarray) -> Optional[float]:
    finite = window[np.isfinite(window)]
    return float((finite > 0).mean()) if finite.size else None


class RollingWindowEngine:
    """Evaluate a statistic over the trailing window of every position.

    The window of position ``i`` is ``[max(0, i - (window - 1)), i]``. While
    that window holds fewer than ``min_periods`` observations the position
    emits None and the engine moves on; warm-up values stay in place so the
    output always has the input's length.
    """

    def __init__(self, window: int = 30, min_periods: int = MIN_WINDOW_OBS):
        if window < 1:
            raise ValueError("window must be at least 1.")
        if min_periods < 1:
            raise ValueError("min_periods must be at least 1.")
        if window < min_periods:
            logger.warning(
                "window=%d is shorter than min_periods=%d; every position will be warm-up",
                window, min_periods,
            )
        self.window = window
        self.min_periods = min_periods

    def bounds(self, n: int):
        """Yield ``(i, start, stop)`` with ``stop`` exclusive for every position."""
        for i in range(n):
            yield i, max(0, i - (self.window - 1)), i + 1

    def apply(self, statistic: Callable[..., Any], *arrays: Sequence[float]) -> List[Any]:
        """Run ``statistic(*window_slices)`` over aligned arrays.

        Returns one entry per position: None during warm-up, otherwise the
        statistic's return value.
        """
        if not arrays:
            raise ValueError("apply() needs at least one input array.")
        columns = [np.asarray(a, dtype=float) for a in arrays]
        n = columns[0].size
        if any(c.size != n for c in columns):
            raise ValueError("All rolling inputs must have the same length.")

        results: List[Any] = []
        for i, start, stop in self.bounds(n):
            if stop - start < self.min_periods:
                results.append(None)
                continue
            results.append(statistic(*(c[start:stop] for c in columns)))
        return results

    def alpha_beta(
        self,
        strategy: pd.Series,
        benchmark: pd.Series,
        lag: int = 1,
        fill_value: float = 0.0,
    ) -> List[RollingPoint]:
        """Rolling OLS alpha/beta of the strategy against a lagged benchmark.

        Both inputs are DailySeries. Non-finite strategy values are treated
        as ``fill_value``.
        """
        validate_daily_series(strategy)
        validate_daily_series(benchmark)
        strat = strategy.astype(float)
        strat = strat.where(np.isfinite(strat), fill_value).to_numpy()
        bench = align_benchmark(strategy, benchmark, lag=lag, fill_value=fill_value)

        values = self.apply(ols_alpha_beta, strat, bench)
        points = []
        for day, value in zip(strategy.index, values):
            alpha, beta = value if value is not None else (None, None)
            points.append(RollingPoint(date=day, alpha=alpha, beta=beta))
        return points

    def _series_statistic(self, series: pd.Series, statistic, name: str) -> pd.Series:
        validate_daily_series(series)
        values = self.apply(statistic, series.to_numpy(dtype=float))
        return pd.Series(
            [np.nan if v is None else v for v in values],
            index=series.index,
            dtype=float,
            name=name,
        )

    def rolling_mean(self, series: pd.Series) -> pd.Series:
        """Trailing mean of a DailySeries (IC, spread, expectancy...).

        NaN values inside a window are ignored; a window with no finite
        value yields NaN.
        """
        return self._series_statistic(series, _finite_mean, f"rolling_{self.window}_mean")

    def rolling_hit_rate(self, series: pd.Series) -> pd.Series:
        """Trailing share of finite values that are strictly positive."""
        return self._series_statistic(series, _finite_hit_rate, f"rolling_{self.window}_hit_rate")


def trim_warmup(points: Sequence[RollingPoint]) -> List[RollingPoint]:
    """Drop the leading warm-up points."""
    for i, point in enumerate(points):
        if not point.is_warmup:
            return list(points[i:])
    return []


def rolling_summary(series: pd.Series, offsets: Sequence[int] = SUMMARY_OFFSETS) -> Dict[str, Any]:
    """Latest defined value of a rolling series and its change over ``offsets``.

    Deltas compare against the value ``k`` positions before the latest
    defined one; they are None when that position is missing or undefined.
    """
    values = series.to_numpy(dtype=float)
    defined = np.flatnonzero(np.isfinite(values))
    if defined.size == 0:
        return {"last": None, "last_date": None, "deltas": {f"d{k}": None for k in offsets}}

    last_idx = int(defined[-1])
    current = float(values[last_idx])
    last_date = series.index[last_idx]
    deltas = {}
    for k in offsets:
        j = last_idx - k
        deltas[f"d{k}"] = (
            current - float(values[j]) if j >= 0 and np.isfinite(values[j]) else None
        )
    return {
        "last": current,
        "last_date": last_date.isoformat() if isinstance(last_date, date) else last_date,
        "deltas": deltas,
    }


__all__ = [
    "MIN_WINDOW_OBS",
    "RollingWindowEngine",
    "align_benchmark",
    "ols_alpha_beta",
    "rolling_summary",
    "trim_warmup",
]
