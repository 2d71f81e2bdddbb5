from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd


DEFAULT_DELIMITER = "_"


class Direction(str, Enum):
    """Signal direction used to filter observations by score sign."""

    LONG = "long"
    SHORT = "short"
    COMBINED = "combined"

    @classmethod
    def parse(cls, value: Union[str, "Direction"]) -> "Direction":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unsupported direction {value!r}. Use one of: "
                f"{', '.join(d.value for d in cls)}"
            )

    def accepts(self, score: Optional[float]) -> bool:
        if self is Direction.COMBINED:
            return True
        if score is None:
            return False
        return score > 0 if self is Direction.LONG else score < 0


def _finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def clean_float(value: Any) -> Optional[float]:
    """Return ``value`` as a float, or None when it is missing or non-finite."""
    if value is None:
        return None
    try:
        val = float(value)
    except (TypeError, ValueError):
        return None
    return val if math.isfinite(val) else None


@dataclass(frozen=True)
class Observation:
    """One (instrument, date) row of predicted score and realized outcome."""

    date: date
    instrument_id: str
    score: Optional[float] = None
    outcome: Optional[float] = None

    @property
    def is_complete(self) -> bool:
        return _finite(self.score) and _finite(self.outcome)

    def base_symbol(self, delimiter: str = DEFAULT_DELIMITER) -> str:
        return base_symbol(self.instrument_id, delimiter)


def base_symbol(instrument_id: str, delimiter: str = DEFAULT_DELIMITER) -> str:
    """Strip the quote/venue suffix: ``BTC_USDT_BINANCE`` -> ``BTC``."""
    return str(instrument_id).split(delimiter, 1)[0]


# --- DailySeries -----------------------------------------------------------
# A DailySeries is a float pandas Series indexed by datetime.date, strictly
# increasing with no duplicate dates.

def make_daily_series(
    dates: Iterable[date],
    values: Iterable[Optional[float]],
    name: Optional[str] = None,
) -> pd.Series:
    """Build a validated DailySeries; ``None`` values become NaN."""
    dates = list(dates)
    values = [np.nan if v is None else float(v) for v in values]
    if len(dates) != len(values):
        raise ValueError(
            f"dates and values must have the same length ({len(dates)} != {len(values)})."
        )
    series = pd.Series(values, index=pd.Index(dates, name="date"), dtype=float, name=name)
    return validate_daily_series(series)


def validate_daily_series(series: pd.Series) -> pd.Series:
    if not isinstance(series, pd.Series):
        raise TypeError("A DailySeries must be a pandas Series indexed by date.")
    if series.index.has_duplicates:
        raise ValueError("DailySeries must not contain duplicate dates.")
    if len(series) > 1 and not series.index.is_monotonic_increasing:
        raise ValueError("DailySeries dates must be strictly increasing.")
    return series


def _json_number(value: Optional[float]) -> Optional[float]:
    return float(value) if _finite(value) else None


def _json_key(key: Any) -> Any:
    return key.isoformat() if isinstance(key, date) else key


# --- Result types ----------------------------------------------------------

@dataclass
class BucketResult:
    bucket: int
    mean_outcome: Optional[float]
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bucket": self.bucket,
            "mean_outcome": _json_number(self.mean_outcome),
            "count": self.count,
        }


@dataclass
class RankStat:
    key: Union[date, str]
    correlation: Optional[float]
    observation_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": _json_key(self.key),
            "correlation": _json_number(self.correlation),
            "observation_count": self.observation_count,
        }


@dataclass
class RollingPoint:
    date: date
    alpha: Optional[float]
    beta: Optional[float]

    @property
    def is_warmup(self) -> bool:
        return self.alpha is None and self.beta is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": _json_key(self.date),
            "alpha": _json_number(self.alpha),
            "beta": _json_number(self.beta),
        }


@dataclass
class BootstrapSummary:
    mean: float
    ci_lower: float
    ci_upper: float
    histogram: List[Tuple[float, int]] = field(default_factory=list)
    samples: int = 0
    points: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean": _json_number(self.mean),
            "ci_lower": _json_number(self.ci_lower),
            "ci_upper": _json_number(self.ci_upper),
            "histogram": [[float(c), int(n)] for c, n in self.histogram],
            "samples": self.samples,
            "points": self.points,
        }


@dataclass
class SymbolExpectancy:
    symbol: str
    mean_outcome: float
    observation_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "mean_outcome": _json_number(self.mean_outcome),
            "observation_count": self.observation_count,
        }


@dataclass
class RankedViews:
    """Top-N (best first) and bottom-N (best of the worst first) selections."""

    top: List[Any]
    bottom: List[Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "top": [item.to_dict() for item in self.top],
            "bottom": [item.to_dict() for item in self.bottom],
            "count": len(self.top) + len(self.bottom),
        }


@dataclass
class DistributionSummary:
    mean: float
    std: float
    positive_share: float
    annualized_ratio: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean": _json_number(self.mean),
            "std": _json_number(self.std),
            "positive_share": _json_number(self.positive_share),
            "annualized_ratio": _json_number(self.annualized_ratio),
            "count": self.count,
        }


def series_to_records(series: pd.Series, value_name: str = "value") -> List[Dict[str, Any]]:
    """Render a DailySeries as JSON-safe ``[{date, value}]`` records."""
    return [
        {"date": _json_key(idx), value_name: _json_number(val)}
        for idx, val in series.items()
    ]


def results_to_dicts(results: Sequence[Any]) -> List[Dict[str, Any]]:
    return [item.to_dict() for item in results]
