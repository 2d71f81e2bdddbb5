"""Bootstrap robustness of a strategy's equity curve.

Resamples per-period strategy returns with replacement, compounds every
resampled path and collects the distribution of path-level risk/return
metrics. Where :class:`~signalytics.analysis.bootstrap.BootstrapResampler`
answers "how certain is the mean return", this answers "how bad could the
drawdown plausibly have been".
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from ..core.errors import EmptyInputError
from ..core.utils import finite_values
from .bootstrap import histogram

logger = logging.getLogger(__name__)

MIN_ITERATIONS = 1000
HISTOGRAM_BINS = 60
METRICS = ("max_drawdown", "avg_drawdown", "cagr", "sharpe", "sortino", "calmar")


@dataclass
class MetricDistribution:
    name: str
    mean: float
    p005: float
    p995: float
    histogram: List[Tuple[float, int]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "mean": self.mean,
            "p005": self.p005,
            "p995": self.p995,
            "centers": [c for c, _ in self.histogram],
            "counts": [n for _, n in self.histogram],
        }


def sorted_percentile(values: np.ndarray, p: float) -> float:
    """Percentile ``p`` (0-100) picked at index ``floor(p/100 * (n-1))``."""
    if values.size == 0:
        return 0.0
    ordered = np.sort(values)
    idx = int(math.floor(p / 100.0 * (ordered.size - 1)))
    return float(ordered[min(max(idx, 0), ordered.size - 1)])


def path_metrics(returns: np.ndarray, period_days: int = 1) -> Dict[str, float]:
    """Risk/return metrics of one compounded return path."""
    n = returns.size
    equity = np.cumprod(1.0 + returns)
    peaks = np.maximum.accumulate(np.maximum(equity, 1.0))
    drawdowns = equity / peaks - 1.0
    max_dd = float(min(drawdowns.min(), 0.0)) if n else 0.0
    underwater = drawdowns[drawdowns < 0]
    avg_dd = float(underwater.mean()) if underwater.size else 0.0

    years = max(1e-9, n * period_days / 365.0)
    final = float(equity[-1]) if n else 1.0
    cagr = final ** (1.0 / years) - 1.0 if final > 0 else -1.0

    periods_per_year = max(1, round(365 / period_days))
    mean = float(returns.mean()) if n else 0.0
    std = float(returns.std(ddof=1)) if n > 1 else 0.0
    sharpe = mean / std * math.sqrt(periods_per_year) if std else 0.0
    negative = returns[returns < 0]
    downside = math.sqrt(float((negative ** 2).mean())) if negative.size else 0.0
    sortino = mean / downside * math.sqrt(periods_per_year) if downside else 0.0
    calmar = cagr / abs(max_dd) if max_dd else 0.0
    return {
        "max_drawdown": max_dd,
        "avg_drawdown": avg_dd,
        "cagr": float(cagr),
        "sharpe": float(sharpe),
        "sortino": float(sortino),
        "calmar": float(calmar),
    }


class EquityCurveBootstrap:
    """Distribution of equity-curve metrics over resampled return paths.

    Args:
        iterations: Number of resampled paths (at least 1000)
        fee: Cost subtracted from every period return
        period_days: Keep every ``period_days``-th return (7 = weekly cadence)
        rng: Random source; pass a seeded generator for reproducible output
        progress: Show a tqdm progress bar over paths
    """

    def __init__(
        self,
        iterations: int = 10000,
        fee: float = 0.003,
        period_days: int = 1,
        rng: Optional[np.random.Generator] = None,
        progress: bool = False,
    ):
        if period_days < 1:
            raise ValueError("period_days must be at least 1.")
        if iterations < MIN_ITERATIONS:
            logger.info("Raising iterations from %d to the minimum of %d", iterations, MIN_ITERATIONS)
        self.iterations = max(MIN_ITERATIONS, int(iterations))
        self.fee = fee
        self.period_days = period_days
        self.rng = rng if rng is not None else np.random.default_rng()
        self.progress = progress

    def prepare(self, returns: Sequence[float]) -> np.ndarray:
        """Zero-fill missing returns, keep every ``period_days``-th one and charge the fee."""
        values = np.asarray([np.nan if v is None else v for v in returns], dtype=float)
        values = np.where(np.isfinite(values), values, 0.0)
        return values[::self.period_days] - float(self.fee or 0.0)

    def run(self, returns: Sequence[float]) -> Dict[str, MetricDistribution]:
        """Return one MetricDistribution per metric name.

        Raises:
            EmptyInputError: If the series has no finite return.
        """
        if finite_values(returns).size == 0:
            raise EmptyInputError("Cannot bootstrap an empty return series.")
        base = self.prepare(returns)
        n = base.size

        collected = {name: np.empty(self.iterations) for name in METRICS}
        for i in tqdm(range(self.iterations), desc="Equity bootstrap", disable=not self.progress):
            sampled = base[self.rng.integers(0, n, size=n)]
            for name, value in path_metrics(sampled, self.period_days).items():
                collected[name][i] = value

        return {
            name: MetricDistribution(
                name=name,
                mean=float(arr.mean()),
                p005=sorted_percentile(arr, 0.5),
                p995=sorted_percentile(arr, 99.5),
                histogram=histogram(arr, HISTOGRAM_BINS),
            )
            for name, arr in collected.items()
        }


__all__ = ["EquityCurveBootstrap", "MetricDistribution", "path_metrics", "sorted_percentile"]
