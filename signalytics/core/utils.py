"""Utility functions shared by the analytics modules."""

import math

import numpy as np
import pandas as pd
from pandas.tseries.frequencies import to_offset


YEAR_NS = float(pd.Timedelta(days=365).value)


def frequency_to_periods_per_year(freq: str) -> float:
    """Convert a frequency string to periods per year.

    Works with pandas-compatible frequency strings for fixed frequencies:
    - Standard: 'D', 'h', 'min', 's'
    - Custom: '7D', '15min', '2h', etc.

    Note: Variable frequencies like 'M', 'W', 'Q', 'Y' are not supported.

    Args:
        freq: Pandas-compatible frequency string

    Returns:
        Number of periods in one (365-day) year
    """
    try:
        offset = to_offset(freq)
        delta = pd.Timedelta(offset)
        delta_ns = float(delta.value)
        if delta_ns <= 0:
            raise ValueError(f"Frequency must be positive: {freq}")
        return float(YEAR_NS / delta_ns)
    except (ValueError, TypeError) as e:
        raise ValueError(
            f"Invalid or unsupported frequency: {freq}. "
            f"Use fixed frequency formats like 'D', '7D', 'h', '15min', etc. "
            f"Variable frequencies like 'W', 'M', 'Q' are not supported. Error: {e}"
        )


def annualized_ratio(mean: float, std: float, periods_per_year: float) -> float:
    """Mean-over-std ratio scaled by sqrt(periods); 0 when std is 0."""
    if not std or not math.isfinite(std):
        return 0.0
    return float(mean / std * math.sqrt(periods_per_year))


def finite_values(values) -> np.ndarray:
    """Return the finite entries of ``values`` as a float array."""
    if isinstance(values, (pd.Series, np.ndarray)):
        arr = np.asarray(values, dtype=float)
    else:
        arr = np.asarray([np.nan if v is None else v for v in values], dtype=float)
    return arr[np.isfinite(arr)]
