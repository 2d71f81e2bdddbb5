"""Summary statistics of a daily metric's distribution (IC, spread, expectancy)."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..core.data_types import DistributionSummary
from ..core.errors import EmptyInputError
from ..core.utils import annualized_ratio, finite_values

DAILY_PERIODS_PER_YEAR = 365.0


def summarize_distribution(
    values: Sequence[float],
    periods_per_year: float = DAILY_PERIODS_PER_YEAR,
) -> DistributionSummary:
    """Mean, population std, share of positive days and annualized ratio.

    The annualized ratio is ``mean / std * sqrt(periods_per_year)``: the
    annualized ICIR for an IC series, the annualized Sharpe for a spread
    series. It is 0 when the std is 0.

    Raises:
        EmptyInputError: If ``values`` has no finite entry.
    """
    data = finite_values(values)
    if data.size == 0:
        raise EmptyInputError("No finite values to summarize.")
    mean = float(data.mean())
    std = float(data.std(ddof=0))
    return DistributionSummary(
        mean=mean,
        std=std,
        positive_share=float(np.mean(data > 0)),
        annualized_ratio=annualized_ratio(mean, std, periods_per_year),
        count=int(data.size),
    )


__all__ = ["summarize_distribution", "DAILY_PERIODS_PER_YEAR"]
