"""Per-symbol average outcome ranking for direction-filtered signals."""

from __future__ import annotations

import logging
from typing import List, Union

import pandas as pd

from ..core.data_types import (
    DEFAULT_DELIMITER,
    Direction,
    RankedViews,
    SymbolExpectancy,
    make_daily_series,
)
from ..core.errors import EmptyInputError
from ..data.observations import ObservationInput, observations_to_frame

logger = logging.getLogger(__name__)


def filter_direction(frame: pd.DataFrame, direction: Direction) -> pd.DataFrame:
    """Keep rows with an outcome whose score passes the direction predicate.

    ``long`` keeps positive scores, ``short`` negative scores; ``combined``
    keeps every row with an outcome, scored or not.
    """
    mask = frame["outcome"].notna()
    if direction is Direction.LONG:
        mask &= frame["score"] > 0
    elif direction is Direction.SHORT:
        mask &= frame["score"] < 0
    return frame[mask]


class SymbolExpectancyAggregator:
    """Rank base symbols by their mean realized outcome.

    Args:
        direction: "long", "short" or "combined"
        min_obs: Groups with fewer observations are excluded before ranking
        top_n: Size of the top and bottom views
        delimiter: Separator between base symbol and quote/venue suffix
    """

    def __init__(
        self,
        direction: Union[str, Direction] = Direction.LONG,
        min_obs: int = 5,
        top_n: int = 20,
        delimiter: str = DEFAULT_DELIMITER,
    ):
        if min_obs < 1:
            raise ValueError("min_obs must be at least 1.")
        if top_n < 1:
            raise ValueError("top_n must be at least 1.")
        self.direction = Direction.parse(direction)
        self.min_obs = min_obs
        self.top_n = top_n
        self.delimiter = delimiter

    def aggregate(self, observations: ObservationInput) -> List[SymbolExpectancy]:
        """Qualifying groups sorted by mean outcome (desc), ties by symbol (asc)."""
        frame = filter_direction(observations_to_frame(observations, self.delimiter), self.direction)
        if frame.empty:
            return []
        stats = frame.groupby("base_symbol")["outcome"].agg(mean_outcome="mean", observation_count="count")
        qualifying = stats[stats["observation_count"] >= self.min_obs]
        excluded = len(stats) - len(qualifying)
        if excluded:
            logger.debug("Excluded %d symbol(s) with fewer than %d observations", excluded, self.min_obs)

        qualifying = qualifying.rename_axis("symbol").reset_index()
        qualifying = qualifying.sort_values("symbol", kind="mergesort")
        qualifying = qualifying.sort_values("mean_outcome", ascending=False, kind="mergesort")
        return [
            SymbolExpectancy(
                symbol=str(row.symbol),
                mean_outcome=float(row.mean_outcome),
                observation_count=int(row.observation_count),
            )
            for row in qualifying.itertuples(index=False)
        ]

    def rank(self, observations: ObservationInput) -> RankedViews:
        """Top-N best and bottom-N worst symbols.

        The bottom view is the tail of the same descending order, so it
        lists the best of the worst first.

        Raises:
            EmptyInputError: If no symbol meets ``min_obs``.
        """
        ranked = self.aggregate(observations)
        if not ranked:
            raise EmptyInputError(
                f"No symbol has at least {self.min_obs} {self.direction.value} observations."
            )
        return RankedViews(top=ranked[:self.top_n], bottom=ranked[-self.top_n:])


def daily_expectancy(
    observations: ObservationInput,
    direction: Union[str, Direction] = Direction.COMBINED,
    delimiter: str = DEFAULT_DELIMITER,
) -> pd.Series:
    """DailySeries of the mean outcome of direction-filtered rows per date.

    Raises:
        EmptyInputError: If no row passes the filter.
    """
    direction = Direction.parse(direction)
    frame = filter_direction(observations_to_frame(observations, delimiter), direction)
    if frame.empty:
        raise EmptyInputError(f"No {direction.value} observations with an outcome.")
    means = frame.groupby("date", sort=True)["outcome"].mean()
    return make_daily_series(means.index, means.to_numpy(), name=f"{direction.value}_expectancy")


__all__ = ["SymbolExpectancyAggregator", "daily_expectancy", "filter_direction"]
