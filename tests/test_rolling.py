from __future__ import annotations

from datetime import date, timedelta

import numpy as np
import pandas as pd
import pytest

from signalytics.analysis import (
    RollingWindowEngine,
    align_benchmark,
    ols_alpha_beta,
    rolling_summary,
    trim_warmup,
)
from signalytics.core import make_daily_series


def _daily(values, start: date = date(2024, 1, 1), name: str = "value") -> pd.Series:
    dates = [start + timedelta(days=i) for i in range(len(values))]
    return make_daily_series(dates, values, name=name)


def test_fewer_than_seven_observations_is_all_warmup() -> None:
    strategy = _daily([0.01, 0.02, -0.01, 0.03, 0.0, 0.01])
    benchmark = _daily([0.02, 0.01, 0.0, -0.02, 0.01, 0.03])

    points = RollingWindowEngine(window=30).alpha_beta(strategy, benchmark)

    assert len(points) == 6
    assert all(p.alpha is None and p.beta is None for p in points)
    assert trim_warmup(points) == []


def test_warmup_ends_at_seventh_observation() -> None:
    rng = np.random.default_rng(0)
    strategy = _daily(rng.normal(size=12))
    benchmark = _daily(rng.normal(size=12))

    points = RollingWindowEngine(window=30).alpha_beta(strategy, benchmark)

    assert [p.is_warmup for p in points] == [True] * 6 + [False] * 6
    assert trim_warmup(points)[0].date == date(2024, 1, 7)


def test_flat_benchmark_gives_zero_beta() -> None:
    strategy = _daily([0.01, -0.02, 0.03, 0.0, 0.02, -0.01, 0.04, 0.01, 0.0, 0.02])
    benchmark = _daily([0.5] * 10)

    points = trim_warmup(RollingWindowEngine(window=10).alpha_beta(strategy, benchmark, lag=0))

    assert points
    for point in points:
        assert point.beta == 0.0
        window = strategy.loc[:point.date].to_numpy()
        assert point.alpha == pytest.approx(window.mean())


def test_lagged_benchmark_recovers_exact_linear_relation() -> None:
    bench = np.array([0.01, -0.02, 0.03, 0.015, -0.01, 0.02, 0.0, -0.005, 0.025, 0.01, -0.015])
    # strategy_t = 0.001 + 1.5 * benchmark_{t-1}
    strat = np.empty_like(bench)
    strat[0] = 0.001
    strat[1:] = 0.001 + 1.5 * bench[:-1]

    engine = RollingWindowEngine(window=7)
    points = engine.alpha_beta(_daily(strat), _daily(bench), lag=1)

    for point in trim_warmup(points)[1:]:
        assert point.alpha == pytest.approx(0.001)
        assert point.beta == pytest.approx(1.5)


def test_align_benchmark_fills_missing_dates_and_shifts() -> None:
    strategy = _daily([0.1, 0.2, 0.3, 0.4])
    benchmark = make_daily_series(
        [date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 4), date(2024, 1, 9)],
        [1.0, 3.0, 4.0, 9.0],
    )

    np.testing.assert_allclose(align_benchmark(strategy, benchmark, lag=0), [1.0, 0.0, 3.0, 4.0])
    np.testing.assert_allclose(align_benchmark(strategy, benchmark, lag=1), [0.0, 1.0, 0.0, 3.0])
    np.testing.assert_allclose(align_benchmark(strategy, benchmark, lag=5), [0.0, 0.0, 0.0, 0.0])


def test_ols_alpha_beta_uses_sample_moments() -> None:
    b = np.array([1.0, 2.0, 3.0, 4.0])
    s = np.array([2.0, 4.5, 5.5, 8.0])

    alpha, beta = ols_alpha_beta(s, b)
    slope, intercept = np.polyfit(b, s, 1)

    assert beta == pytest.approx(slope)
    assert alpha == pytest.approx(intercept)


def test_window_bounds_are_trailing() -> None:
    engine = RollingWindowEngine(window=3, min_periods=1)
    assert list(engine.bounds(4)) == [(0, 0, 1), (1, 0, 2), (2, 0, 3), (3, 1, 4)]


def test_rolling_mean_and_hit_rate_share_the_warmup_policy() -> None:
    series = _daily([0.1, -0.1, np.nan, 0.3, 0.2, -0.2, 0.1, 0.4], name="ic")
    engine = RollingWindowEngine(window=7, min_periods=7)

    mean = engine.rolling_mean(series)
    hit_rate = engine.rolling_hit_rate(series)

    assert mean.isna().sum() == 6
    assert hit_rate.isna().sum() == 6
    assert mean.iloc[6] == pytest.approx(np.mean([0.1, -0.1, 0.3, 0.2, -0.2, 0.1]))
    assert mean.iloc[7] == pytest.approx(np.mean([-0.1, 0.3, 0.2, -0.2, 0.1, 0.4]))
    assert hit_rate.iloc[7] == pytest.approx(4 / 6)
    assert list(mean.index) == list(series.index)


def test_rolling_summary_reports_latest_value_and_deltas() -> None:
    series = _daily([np.nan, 0.1, 0.2, 0.3, 0.5, 0.8, 1.3, 2.1, 3.4, np.nan])

    summary = rolling_summary(series)

    assert summary["last"] == pytest.approx(3.4)
    assert summary["last_date"] == "2024-01-09"
    assert summary["deltas"]["d1"] == pytest.approx(1.3)
    assert summary["deltas"]["d7"] == pytest.approx(3.3)
    assert summary["deltas"]["d30"] is None


def test_rolling_summary_of_undefined_series() -> None:
    summary = rolling_summary(_daily([np.nan, np.nan]))
    assert summary["last"] is None
    assert summary["deltas"] == {"d1": None, "d7": None, "d30": None}


def test_invalid_window() -> None:
    with pytest.raises(ValueError):
        RollingWindowEngine(window=0)
