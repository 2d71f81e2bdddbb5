"""Bootstrap confidence intervals for the mean of a daily statistic."""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from ..core.data_types import BootstrapSummary
from ..core.errors import EmptyInputError
from ..core.utils import finite_values

logger = logging.getLogger(__name__)

HISTOGRAM_EPSILON = 1e-12
# Upper bound on the number of drawn values held in memory at once.
MAX_DRAWS_PER_CHUNK = 2_000_000


def histogram(values: Sequence[float], bins: int) -> List[Tuple[float, int]]:
    """Equal-width histogram between the observed min and max.

    Returns ``(bin_center, count)`` pairs; counts sum to ``len(values)``.
    A tiny epsilon widens the range so identical values still bin cleanly.
    """
    if bins < 1:
        raise ValueError("bins must be at least 1.")
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return []
    lo = float(arr.min())
    hi = float(arr.max())
    width = (hi - lo + HISTOGRAM_EPSILON) / bins
    idx = np.floor((arr - lo) / width).astype(int)
    idx = np.clip(idx, 0, bins - 1)
    counts = np.bincount(idx, minlength=bins)
    return [(lo + (i + 0.5) * width, int(counts[i])) for i in range(bins)]


def percentile_indices(samples: int, lower: float, upper: float) -> Tuple[int, int]:
    """Indices of the lower/upper empirical percentiles in a sorted sample."""
    lo = min(max(int(math.floor(lower * samples)), 0), samples - 1)
    hi = min(max(int(math.ceil(upper * samples)), 0), samples - 1)
    return lo, hi


class BootstrapResampler:
    """Resample-with-replacement distribution of the mean.

    Args:
        samples: Number of bootstrap draws B
        bins: Histogram bins for the distribution of draw means
        rng: Random source; pass a seeded ``numpy.random.Generator`` for
            reproducible output
        lower: Lower percentile of the confidence interval
        upper: Upper percentile of the confidence interval
        progress: Show a tqdm progress bar over draw chunks
    """

    def __init__(
        self,
        samples: int = 10000,
        bins: int = 20,
        rng: Optional[np.random.Generator] = None,
        lower: float = 0.005,
        upper: float = 0.995,
        progress: bool = False,
    ):
        if samples < 1:
            raise ValueError("samples must be at least 1.")
        if bins < 1:
            raise ValueError("bins must be at least 1.")
        if not 0.0 <= lower < upper <= 1.0:
            raise ValueError("Percentiles must satisfy 0 <= lower < upper <= 1.")
        self.samples = samples
        self.bins = bins
        self.rng = rng if rng is not None else np.random.default_rng()
        self.lower = lower
        self.upper = upper
        self.progress = progress

    def resample_means(self, values: Sequence[float]) -> np.ndarray:
        """Means of B resamples of ``values``, sorted ascending."""
        data = np.asarray(values, dtype=float)
        n = data.size
        if n == 0:
            raise EmptyInputError("Cannot bootstrap an empty sample.")

        rows_per_chunk = max(1, MAX_DRAWS_PER_CHUNK // n)
        means = np.empty(self.samples, dtype=float)
        starts = range(0, self.samples, rows_per_chunk)
        for start in tqdm(starts, desc="Bootstrap", disable=not self.progress):
            stop = min(start + rows_per_chunk, self.samples)
            idx = self.rng.integers(0, n, size=(stop - start, n))
            means[start:stop] = data[idx].mean(axis=1)
        means.sort()
        return means

    def run(self, values: Sequence[float]) -> BootstrapSummary:
        """Bootstrap the mean of ``values`` (non-finite entries are dropped).

        Raises:
            EmptyInputError: If no finite value remains.
        """
        data = finite_values(values)
        dropped = len(values) - data.size
        if dropped:
            logger.debug("Dropped %d non-finite value(s) before bootstrapping", dropped)
        if data.size == 0:
            raise EmptyInputError("Cannot bootstrap an empty sample.")

        means = self.resample_means(data)
        lo, hi = percentile_indices(self.samples, self.lower, self.upper)
        if data.min() == data.max():
            # Every resample of a constant sample has that constant as its mean.
            value = float(data[0])
            means.fill(value)
            mean, ci_lower, ci_upper = value, value, value
        else:
            mean, ci_lower, ci_upper = float(means.mean()), float(means[lo]), float(means[hi])
        return BootstrapSummary(
            mean=mean,
            ci_lower=ci_lower,
            ci_upper=ci_upper,
            histogram=histogram(means, self.bins),
            samples=self.samples,
            points=int(data.size),
        )


__all__ = ["BootstrapResampler", "histogram", "percentile_indices"]
