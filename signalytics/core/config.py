from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np

from .data_types import DEFAULT_DELIMITER, Direction
from .utils import frequency_to_periods_per_year


class AnalyticsConfig:
    """Configuration container for a single analytics request."""

    def __init__(
        self,
        # Fetch settings
        page_size: int = 1000,
        max_rows: Optional[int] = None,
        # Ranking settings
        buckets: int = 10,
        min_obs: int = 5,
        min_points: int = 10,
        top_n: int = 20,
        direction: str = "long",
        delimiter: str = DEFAULT_DELIMITER,
        # Rolling settings
        window: int = 30,
        min_window_obs: int = 7,
        lag: int = 1,
        # Bootstrap settings
        samples: int = 10000,
        bins: int = 20,
        confidence: Tuple[float, float] = (0.005, 0.995),
        seed: Optional[int] = None,
        # Annualization
        frequency: str = "D",
    ):
        """
        Initialize analytics configuration.

        Args:
            page_size: Rows requested per page from the row source
            max_rows: Optional cap on the total rows fetched
            buckets: Number of cross-sectional buckets (10 = deciles, 5 = quintiles)
            min_obs: Minimum observations per symbol for expectancy ranking
            min_points: Minimum observations per symbol for IC-by-symbol
            top_n: Size of the top-N and bottom-N views
            direction: "long", "short" or "combined"
            delimiter: Separator between base symbol and venue suffix in ids
            window: Trailing window length for rolling statistics
            min_window_obs: Observations required before a rolling value is emitted
            lag: Positions the benchmark is shifted by for rolling alpha/beta
            samples: Bootstrap draws
            bins: Histogram bins for bootstrap output
            confidence: (lower, upper) percentile of the bootstrap interval
            seed: Optional seed for reproducible bootstrap draws
            frequency: Observation frequency used for annualization ('D', '7D', ...)
        """
        self.page_size = page_size
        self.max_rows = max_rows
        self.buckets = buckets
        self.min_obs = min_obs
        self.min_points = min_points
        self.top_n = top_n
        self.direction = Direction.parse(direction)
        self.delimiter = delimiter
        self.window = window
        self.min_window_obs = min_window_obs
        self.lag = lag
        self.samples = samples
        self.bins = bins

        if not isinstance(confidence, tuple) or len(confidence) != 2:
            raise ValueError("confidence must be a tuple of (lower, upper) percentiles.")
        self.lower_percentile, self.upper_percentile = confidence
        self.seed = seed
        self.frequency = frequency

        # Validation
        if self.page_size <= 0:
            raise ValueError("page_size must be positive.")
        if self.max_rows is not None and self.max_rows < 0:
            raise ValueError("max_rows must be non-negative.")
        if self.buckets < 1:
            raise ValueError("buckets must be at least 1.")
        if self.min_obs < 1 or self.min_points < 1:
            raise ValueError("min_obs and min_points must be at least 1.")
        if self.top_n < 1:
            raise ValueError("top_n must be at least 1.")
        if not self.delimiter:
            raise ValueError("delimiter must be a non-empty string.")
        if self.window < 1:
            raise ValueError("window must be at least 1.")
        if self.min_window_obs < 1:
            raise ValueError("min_window_obs must be at least 1.")
        if self.lag < 0:
            raise ValueError("lag must be non-negative.")
        if self.samples < 1 or self.bins < 1:
            raise ValueError("samples and bins must be at least 1.")
        if not 0.0 <= self.lower_percentile < self.upper_percentile <= 1.0:
            raise ValueError("confidence must satisfy 0 <= lower < upper <= 1.")
        # Fails fast on unsupported frequencies.
        self._periods_per_year = frequency_to_periods_per_year(self.frequency)

    @property
    def confidence(self) -> Tuple[float, float]:
        return (self.lower_percentile, self.upper_percentile)

    @property
    def periods_per_year(self) -> float:
        return self._periods_per_year

    def make_rng(self) -> np.random.Generator:
        """Random source for the bootstrap; seeded when ``seed`` is set."""
        return np.random.default_rng(self.seed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_size": self.page_size,
            "max_rows": self.max_rows,
            "buckets": self.buckets,
            "min_obs": self.min_obs,
            "min_points": self.min_points,
            "top_n": self.top_n,
            "direction": self.direction.value,
            "delimiter": self.delimiter,
            "window": self.window,
            "min_window_obs": self.min_window_obs,
            "lag": self.lag,
            "samples": self.samples,
            "bins": self.bins,
            "confidence": list(self.confidence),
            "seed": self.seed,
            "frequency": self.frequency,
        }

    def __repr__(self) -> str:
        return (
            f"AnalyticsConfig(buckets={self.buckets}, "
            f"window={self.window}, "
            f"direction='{self.direction.value}', "
            f"samples={self.samples}, "
            f"frequency='{self.frequency}')"
        )
