"""Cross-sectional percentile bucketing (deciles, quintiles) of signal scores."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from ..core.data_types import BucketResult, DEFAULT_DELIMITER, make_daily_series
from ..core.errors import EmptyInputError
from ..data.observations import ObservationInput, complete_rows, observations_to_frame

logger = logging.getLogger(__name__)

PARTITION_COLUMNS = ("date", "instrument_id", "base_symbol")


def ntile_buckets(n: int, k: int) -> np.ndarray:
    """Zero-based NTILE bucket for each of ``n`` sorted positions.

    The first ``n % k`` buckets receive ``n // k + 1`` rows and the rest
    ``n // k``. With fewer rows than buckets, row ``i`` lands in bucket ``i``.
    """
    if k < 1:
        raise ValueError("Bucket count must be at least 1.")
    positions = np.arange(n)
    base, remainder = divmod(n, k)
    if base == 0:
        return positions
    boundary = remainder * (base + 1)
    return np.where(
        positions < boundary,
        positions // (base + 1),
        remainder + (positions - boundary) // base,
    )


class CrossSectionalRanker:
    """Bucket instruments by score within each partition and average outcomes.

    Args:
        buckets: Number of buckets K (10 = deciles, 5 = quintiles)
        partition_by: Columns defining a cross-section, among ``date``,
            ``instrument_id`` and ``base_symbol``. None ranks all rows as a
            single partition.
        descending: Put the highest scores in bucket 1 instead of the lowest.
        statistic: ``"mean"`` or ``"median"`` of the outcome per bucket.
        delimiter: Separator used to derive ``base_symbol``.
    """

    def __init__(
        self,
        buckets: int = 10,
        partition_by: Optional[Sequence[str]] = ("date",),
        descending: bool = False,
        statistic: str = "mean",
        delimiter: str = DEFAULT_DELIMITER,
    ):
        if buckets < 1:
            raise ValueError("buckets must be at least 1.")
        if partition_by is not None:
            partition_by = list(partition_by)
            unknown = [c for c in partition_by if c not in PARTITION_COLUMNS]
            if unknown:
                raise ValueError(
                    f"Unsupported partition columns {unknown}. Use any of {PARTITION_COLUMNS}."
                )
        if statistic not in ("mean", "median"):
            raise ValueError("statistic must be 'mean' or 'median'.")
        self.buckets = buckets
        self.partition_by = partition_by or None
        self.descending = descending
        self.statistic = statistic
        self.delimiter = delimiter

    def assign(self, observations: ObservationInput) -> pd.DataFrame:
        """Return complete rows with a 1-indexed ``bucket`` column.

        Ties in score keep the original row order (stable sort).

        Raises:
            EmptyInputError: If no row has both a score and an outcome.
        """
        frame = complete_rows(observations_to_frame(observations, self.delimiter))
        if frame.empty:
            raise EmptyInputError("No observations with both score and outcome to bucket.")
        frame = frame.reset_index(drop=True)

        if self.partition_by is None:
            partitions = [np.arange(len(frame))]
        else:
            partitions = list(frame.groupby(self.partition_by, sort=True).indices.values())

        scores = frame["score"].to_numpy(dtype=float)
        bucket = np.empty(len(frame), dtype=int)
        for idx in partitions:
            keys = -scores[idx] if self.descending else scores[idx]
            order = np.argsort(keys, kind="stable")
            bucket[idx[order]] = ntile_buckets(len(idx), self.buckets) + 1

        logger.debug("Bucketed %d rows across %d partition(s)", len(frame), len(partitions))
        frame["bucket"] = bucket
        return frame

    def rank(self, observations: ObservationInput) -> List[BucketResult]:
        """Aggregate the outcome per bucket across all partitions.

        Always returns exactly K results ordered by bucket; buckets that
        received no rows report count 0 and a None outcome.
        """
        assigned = self.assign(observations)
        grouped = assigned.groupby("bucket")["outcome"]
        stats = pd.DataFrame({
            "value": grouped.mean() if self.statistic == "mean" else grouped.median(),
            "count": grouped.count(),
        }).reindex(range(1, self.buckets + 1))

        results = []
        for bucket, row in stats.iterrows():
            count = 0 if pd.isna(row["count"]) else int(row["count"])
            value = None if count == 0 or pd.isna(row["value"]) else float(row["value"])
            results.append(BucketResult(bucket=int(bucket), mean_outcome=value, count=count))
        return results


def top_bottom_spread(
    observations: ObservationInput,
    buckets: int = 10,
    descending: bool = False,
    delimiter: str = DEFAULT_DELIMITER,
) -> pd.Series:
    """Daily spread between the top and bottom score buckets.

    For each date, the mean outcome of bucket K minus that of bucket 1
    (highest minus lowest scores when ``descending`` is False). Dates that
    cannot fill both extreme buckets are skipped.

    Returns:
        DailySeries named ``top_bottom_spread``.

    Raises:
        EmptyInputError: If no date yields a spread.
    """
    ranker = CrossSectionalRanker(
        buckets=buckets, partition_by=("date",), descending=descending, delimiter=delimiter
    )
    assigned = ranker.assign(observations)
    means = assigned.groupby(["date", "bucket"])["outcome"].mean().unstack("bucket")
    if buckets not in means.columns or 1 not in means.columns:
        raise EmptyInputError(f"No date has enough instruments to fill {buckets} buckets.")
    spread = (means[buckets] - means[1]).dropna().sort_index()
    if spread.empty:
        raise EmptyInputError(f"No date has enough instruments to fill {buckets} buckets.")
    return make_daily_series(spread.index, spread.to_numpy(), name="top_bottom_spread")


__all__ = ["CrossSectionalRanker", "ntile_buckets", "top_bottom_spread"]
