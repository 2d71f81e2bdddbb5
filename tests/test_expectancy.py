from __future__ import annotations

from datetime import date, timedelta

import numpy as np
import pytest

from signalytics.analysis import SymbolExpectancyAggregator, daily_expectancy
from signalytics.core import EmptyInputError, Observation

D1 = date(2024, 1, 1)


def _rows(instrument: str, outcomes, score: float = 1.0) -> list:
    return [
        Observation(D1 + timedelta(days=i), instrument, score=score, outcome=o)
        for i, o in enumerate(outcomes)
    ]


def test_group_below_min_obs_never_appears() -> None:
    min_obs = 5
    observations = (
        _rows("AAA_USDT", [0.5] * min_obs)
        + _rows("BBB_USDT", [9.0] * (min_obs - 1))
        + _rows("CCC_USDT", [-0.5] * min_obs)
    )

    views = SymbolExpectancyAggregator(min_obs=min_obs, top_n=10).rank(observations)

    symbols = [s.symbol for s in views.top] + [s.symbol for s in views.bottom]
    assert "BBB" not in symbols
    assert [s.symbol for s in views.top] == ["AAA", "CCC"]


def test_venues_merge_into_base_symbol() -> None:
    observations = _rows("BTC_USDT_BINANCE", [0.25, 0.75]) + _rows("BTC_USDT_OKX", [0.5])

    (btc,) = SymbolExpectancyAggregator(min_obs=3).aggregate(observations)

    assert btc.symbol == "BTC"
    assert btc.observation_count == 3
    assert btc.mean_outcome == pytest.approx(0.5)


def test_ties_break_by_symbol_and_bottom_is_tail_of_descending_order() -> None:
    observations = (
        _rows("DDD_USDT", [0.25])
        + _rows("BBB_USDT", [0.5])
        + _rows("AAA_USDT", [0.5])
        + _rows("CCC_USDT", [-0.25])
        + _rows("EEE_USDT", [-0.5])
    )

    aggregator = SymbolExpectancyAggregator(min_obs=1, top_n=2)
    ranked = aggregator.aggregate(observations)
    views = aggregator.rank(observations)

    assert [s.symbol for s in ranked] == ["AAA", "BBB", "DDD", "CCC", "EEE"]
    assert [s.symbol for s in views.top] == ["AAA", "BBB"]
    assert [s.symbol for s in views.bottom] == ["CCC", "EEE"]


def test_direction_filters_on_score_sign() -> None:
    observations = [
        Observation(D1, "AAA_USDT", score=0.7, outcome=0.5),
        Observation(D1, "BBB_USDT", score=-0.7, outcome=-0.5),
        Observation(D1, "CCC_USDT", score=0.0, outcome=1.0),
        Observation(D1, "DDD_USDT", score=None, outcome=2.0),
        Observation(D1, "EEE_USDT", score=0.4, outcome=None),
    ]

    def symbols(direction: str) -> list:
        return [s.symbol for s in SymbolExpectancyAggregator(direction, min_obs=1).aggregate(observations)]

    assert symbols("long") == ["AAA"]
    assert symbols("short") == ["BBB"]
    assert symbols("combined") == ["DDD", "CCC", "AAA", "BBB"]


def test_nothing_qualifies_signals_empty_result() -> None:
    observations = _rows("AAA_USDT", [0.5, 0.5], score=-1.0)

    with pytest.raises(EmptyInputError):
        SymbolExpectancyAggregator("long", min_obs=1).rank(observations)
    with pytest.raises(EmptyInputError):
        SymbolExpectancyAggregator("short", min_obs=3).rank(observations)


def test_daily_expectancy_averages_filtered_rows_per_date() -> None:
    d2 = D1 + timedelta(days=1)
    observations = [
        Observation(D1, "AAA", score=1.0, outcome=0.25),
        Observation(D1, "BBB", score=2.0, outcome=0.75),
        Observation(D1, "CCC", score=-1.0, outcome=-1.0),
        Observation(d2, "AAA", score=1.0, outcome=-0.5),
    ]

    series = daily_expectancy(observations, direction="long")

    assert series.name == "long_expectancy"
    assert list(series.index) == [D1, d2]
    np.testing.assert_allclose(series.to_numpy(), [0.5, -0.5])


def test_invalid_direction() -> None:
    with pytest.raises(ValueError):
        SymbolExpectancyAggregator("sideways")
