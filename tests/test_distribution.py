from __future__ import annotations

import math

import numpy as np
import pytest

from signalytics.analysis import summarize_distribution
from signalytics.core import EmptyInputError


def test_summary_uses_population_std_and_daily_annualization() -> None:
    summary = summarize_distribution([1.0, -1.0, 1.0, 1.0, np.nan])

    assert summary.count == 4
    assert summary.mean == pytest.approx(0.5)
    assert summary.std == pytest.approx(math.sqrt(0.75))
    assert summary.positive_share == pytest.approx(0.75)
    assert summary.annualized_ratio == pytest.approx(0.5 / math.sqrt(0.75) * math.sqrt(365))


def test_flat_series_has_zero_ratio() -> None:
    summary = summarize_distribution([0.5, 0.5, 0.5], periods_per_year=52)
    assert summary.std == 0.0
    assert summary.annualized_ratio == 0.0
    assert summary.to_dict()["positive_share"] == 1.0


def test_empty_distribution() -> None:
    with pytest.raises(EmptyInputError):
        summarize_distribution([None, np.nan])
