"""Information Coefficient: Spearman rank correlation of score vs. outcome."""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd
from scipy.stats import rankdata

from ..core.data_types import DEFAULT_DELIMITER, RankedViews, RankStat, make_daily_series
from ..core.errors import EmptyInputError
from ..data.observations import ObservationInput, complete_rows, observations_to_frame

logger = logging.getLogger(__name__)

GROUP_COLUMNS = ("base_symbol", "instrument_id")


def spearman_correlation(scores: Sequence[float], outcomes: Sequence[float]) -> Optional[float]:
    """Pearson correlation of the competition ranks of both inputs.

    Ties share the lowest rank of their run (``rankdata(method="min")``).
    Returns None when fewer than two points are given or either rank
    vector has zero variance; 0.0 is a legitimate, informative result.
    """
    x = np.asarray(scores, dtype=float)
    y = np.asarray(outcomes, dtype=float)
    if x.shape != y.shape:
        raise ValueError(f"scores and outcomes must have the same length ({x.size} != {y.size}).")
    if x.size < 2:
        return None

    rx = rankdata(x, method="min")
    ry = rankdata(y, method="min")
    dx = rx - rx.mean()
    dy = ry - ry.mean()
    sxx = float(np.dot(dx, dx))
    syy = float(np.dot(dy, dy))
    if sxx <= 0.0 or syy <= 0.0:
        return None
    corr = float(np.dot(dx, dy) / math.sqrt(sxx * syy))
    if not math.isfinite(corr):
        return None
    # Guard against rounding just outside [-1, 1].
    return max(-1.0, min(1.0, corr))


def daily_ic(
    observations: ObservationInput,
    min_obs: int = 2,
    delimiter: str = DEFAULT_DELIMITER,
) -> List[RankStat]:
    """Time mode: one cross-sectional rank correlation per date.

    Dates with fewer than ``min_obs`` complete rows, or with degenerate
    ranks, keep their place in the output with a None correlation.

    Raises:
        EmptyInputError: If no row has both a score and an outcome.
    """
    frame = complete_rows(observations_to_frame(observations, delimiter))
    if frame.empty:
        raise EmptyInputError("No observations with both score and outcome for IC.")

    stats: List[RankStat] = []
    for day, group in frame.groupby("date", sort=True):
        count = len(group)
        corr = (
            spearman_correlation(group["score"].to_numpy(), group["outcome"].to_numpy())
            if count >= min_obs else None
        )
        stats.append(RankStat(key=day, correlation=corr, observation_count=count))
    return stats


def grouped_ic(
    observations: ObservationInput,
    min_points: int = 10,
    group_by: str = "base_symbol",
    delimiter: str = DEFAULT_DELIMITER,
) -> List[RankStat]:
    """Grouped mode: rank correlation within each instrument's own time series.

    Groups with fewer than ``min_points`` complete rows are dropped
    entirely. Output is ordered by group key.

    Raises:
        EmptyInputError: If no row has both a score and an outcome.
    """
    if group_by not in GROUP_COLUMNS:
        raise ValueError(f"group_by must be one of {GROUP_COLUMNS}.")
    frame = complete_rows(observations_to_frame(observations, delimiter))
    if frame.empty:
        raise EmptyInputError("No observations with both score and outcome for IC.")

    stats: List[RankStat] = []
    dropped = 0
    for key, group in frame.groupby(group_by, sort=True):
        count = len(group)
        if count < min_points:
            dropped += 1
            continue
        corr = spearman_correlation(group["score"].to_numpy(), group["outcome"].to_numpy())
        stats.append(RankStat(key=key, correlation=corr, observation_count=count))
    if dropped:
        logger.debug("Dropped %d group(s) with fewer than %d points", dropped, min_points)
    return stats


def select_top_bottom(stats: Iterable[RankStat], n: int) -> RankedViews:
    """Top-N and bottom-N groups by correlation.

    Undefined correlations are removed first. Both views come from one
    descending sort (ties broken by key): ``top`` is its head, ``bottom``
    its tail, so the bottom view lists the best of the worst first.
    """
    if n < 1:
        raise ValueError("n must be at least 1.")
    ranked = [
        s for s in stats
        if s.correlation is not None and math.isfinite(s.correlation)
    ]
    ranked.sort(key=lambda s: str(s.key))
    ranked.sort(key=lambda s: s.correlation, reverse=True)
    return RankedViews(top=ranked[:n], bottom=ranked[-n:])


def ic_series(stats: Iterable[RankStat]) -> pd.Series:
    """Time-mode stats as a DailySeries (NaN where the IC is undefined)."""
    stats = list(stats)
    return make_daily_series(
        [s.key for s in stats],
        [s.correlation for s in stats],
        name="ic",
    )


__all__ = [
    "spearman_correlation",
    "daily_ic",
    "grouped_ic",
    "select_top_bottom",
    "ic_series",
]
