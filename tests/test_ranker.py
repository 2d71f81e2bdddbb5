from __future__ import annotations

from datetime import date

import numpy as np
import pandas as pd
import pytest

from signalytics.analysis import CrossSectionalRanker, ntile_buckets, top_bottom_spread
from signalytics.core import BucketResult, EmptyInputError, Observation

D1 = date(2024, 1, 1)
D2 = date(2024, 1, 2)


def _observations(day: date, scores, outcomes, prefix: str = "S") -> list:
    return [
        Observation(day, f"{prefix}{i}_USDT", score=s, outcome=o)
        for i, (s, o) in enumerate(zip(scores, outcomes))
    ]


def test_three_instruments_three_buckets() -> None:
    observations = [
        Observation(D1, "A", score=1.0, outcome=0.02),
        Observation(D1, "B", score=2.0, outcome=0.05),
        Observation(D1, "C", score=3.0, outcome=-0.01),
    ]

    results = CrossSectionalRanker(buckets=3).rank(observations)

    assert results == [
        BucketResult(bucket=1, mean_outcome=0.02, count=1),
        BucketResult(bucket=2, mean_outcome=0.05, count=1),
        BucketResult(bucket=3, mean_outcome=-0.01, count=1),
    ]


@pytest.mark.parametrize("n, k, expected", [
    (10, 3, [4, 3, 3]),
    (6, 4, [2, 2, 1, 1]),
    (12, 4, [3, 3, 3, 3]),
    (2, 4, [1, 1, 0, 0]),
    (0, 5, [0, 0, 0, 0, 0]),
])
def test_ntile_remainder_goes_to_lowest_buckets(n, k, expected) -> None:
    buckets = ntile_buckets(n, k)
    counts = np.bincount(buckets, minlength=k).tolist()

    assert counts == expected
    assert list(buckets) == sorted(buckets)


def test_bucket_counts_sum_to_partition_size_and_every_bucket_is_reported() -> None:
    rng = np.random.default_rng(3)
    observations = (
        _observations(D1, rng.normal(size=23), rng.normal(size=23))
        + _observations(D2, rng.normal(size=4), rng.normal(size=4))
    )

    ranker = CrossSectionalRanker(buckets=10)
    assigned = ranker.assign(observations)
    results = ranker.rank(observations)

    per_day = assigned.groupby("date")["bucket"].count()
    assert per_day[D1] == 23
    assert per_day[D2] == 4
    assert [r.bucket for r in results] == list(range(1, 11))
    assert sum(r.count for r in results) == 27


def test_partition_smaller_than_bucket_count_leaves_empty_buckets() -> None:
    observations = _observations(D1, [0.3, 0.1], [0.01, 0.02])

    results = CrossSectionalRanker(buckets=5).rank(observations)

    assert [r.count for r in results] == [1, 1, 0, 0, 0]
    assert results[0].mean_outcome == 0.02
    assert results[1].mean_outcome == 0.01
    assert results[4].mean_outcome is None


def test_ties_keep_original_row_order() -> None:
    observations = _observations(D1, [1.0, 1.0, 1.0, 1.0], [0.1, 0.2, 0.3, 0.4])

    first = CrossSectionalRanker(buckets=2).assign(observations)
    second = CrossSectionalRanker(buckets=2).assign(observations)

    assert first["bucket"].tolist() == [1, 1, 2, 2]
    pd.testing.assert_frame_equal(first, second)


def test_descending_puts_highest_scores_first() -> None:
    observations = _observations(D1, [1.0, 2.0, 3.0], [0.1, 0.2, 0.3])

    results = CrossSectionalRanker(buckets=3, descending=True).rank(observations)

    assert [r.mean_outcome for r in results] == [0.3, 0.2, 0.1]


def test_global_partition_and_median_statistic() -> None:
    observations = (
        _observations(D1, [1.0, 2.0], [0.0, 1.0])
        + _observations(D2, [3.0, 4.0], [2.0, 10.0])
    )

    results = CrossSectionalRanker(buckets=2, partition_by=None, statistic="median").rank(observations)

    assert [r.count for r in results] == [2, 2]
    assert results[0].mean_outcome == pytest.approx(0.5)
    assert results[1].mean_outcome == pytest.approx(6.0)


def test_incomplete_rows_are_excluded() -> None:
    observations = [
        Observation(D1, "A", score=1.0, outcome=None),
        Observation(D1, "B", score=None, outcome=0.5),
    ]
    with pytest.raises(EmptyInputError):
        CrossSectionalRanker(buckets=3).rank(observations)


def test_invalid_ranker_arguments() -> None:
    with pytest.raises(ValueError):
        CrossSectionalRanker(buckets=0)
    with pytest.raises(ValueError):
        CrossSectionalRanker(partition_by=("venue",))
    with pytest.raises(ValueError):
        CrossSectionalRanker(statistic="mode")


def test_top_bottom_spread_per_date() -> None:
    observations = (
        _observations(D1, [1.0, 2.0, 3.0, 4.0], [-0.02, 0.0, 0.01, 0.04])
        + _observations(D2, [4.0, 3.0, 2.0, 1.0], [-0.01, 0.0, 0.0, 0.03])
    )

    spread = top_bottom_spread(observations, buckets=2)

    assert spread.name == "top_bottom_spread"
    assert list(spread.index) == [D1, D2]
    np.testing.assert_allclose(spread.to_numpy(), [0.035, -0.02])


def test_top_bottom_spread_without_full_cross_section() -> None:
    observations = _observations(D1, [1.0], [0.1])
    with pytest.raises(EmptyInputError):
        top_bottom_spread(observations, buckets=3)
