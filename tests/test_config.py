from __future__ import annotations

import numpy as np
import pytest

from signalytics.core import AnalyticsConfig, Direction


def test_defaults() -> None:
    config = AnalyticsConfig()

    assert config.page_size == 1000
    assert config.buckets == 10
    assert config.window == 30
    assert config.min_window_obs == 7
    assert config.lag == 1
    assert config.direction is Direction.LONG
    assert config.confidence == (0.005, 0.995)
    assert config.periods_per_year == pytest.approx(365.0)


def test_weekly_frequency_annualization() -> None:
    assert AnalyticsConfig(frequency="7D").periods_per_year == pytest.approx(365.0 / 7)


def test_seeded_rng_is_reproducible() -> None:
    config = AnalyticsConfig(seed=123)
    np.testing.assert_array_equal(config.make_rng().normal(size=5), config.make_rng().normal(size=5))


def test_to_dict_is_plain_data() -> None:
    payload = AnalyticsConfig(direction="short", seed=7).to_dict()

    assert payload["direction"] == "short"
    assert payload["confidence"] == [0.005, 0.995]
    assert payload["seed"] == 7
    assert "AnalyticsConfig(" in repr(AnalyticsConfig())


@pytest.mark.parametrize("kwargs", [
    {"page_size": 0},
    {"max_rows": -1},
    {"buckets": 0},
    {"min_obs": 0},
    {"top_n": 0},
    {"delimiter": ""},
    {"window": 0},
    {"lag": -1},
    {"samples": 0},
    {"confidence": (0.9, 0.1)},
    {"confidence": [0.005, 0.995]},
    {"direction": "sideways"},
    {"frequency": "M"},
])
def test_invalid_settings_raise(kwargs) -> None:
    with pytest.raises(ValueError):
        AnalyticsConfig(**kwargs)
