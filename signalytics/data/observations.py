"""Conversion between fetched rows, Observation records and DataFrames."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..core.data_types import (
    DEFAULT_DELIMITER,
    Observation,
    base_symbol,
    clean_float,
    make_daily_series,
)
from .sources.base import Row

logger = logging.getLogger(__name__)

OBSERVATION_COLUMNS = ["date", "instrument_id", "score", "outcome"]

# Column names of the upstream predictions table, per forecast horizon.
HORIZON_FIELDS = {
    "1d": ("y_pred_1d", "forward_returns_1"),
    "7d": ("y_pred_7d", "forward_returns_7"),
}

ObservationInput = Union[pd.DataFrame, Iterable[Observation]]


def coerce_date(value: Any) -> Optional[date]:
    """Parse ``2024-01-01``, ``2024-01-01T00:00:00Z``, datetimes and Timestamps."""
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, (pd.Timestamp, datetime)):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()[:10]
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def rows_to_observations(
    rows: Iterable[Row],
    *,
    date_field: str = "date",
    instrument_field: str = "symbol_id",
    score_field: str = "y_pred_1d",
    outcome_field: str = "forward_returns_1",
) -> List[Observation]:
    """Turn raw fetched rows into Observations.

    Rows without a parseable date or instrument are dropped. Scores and
    outcomes that are missing, non-numeric or non-finite become None.
    """
    observations: List[Observation] = []
    skipped = 0
    for row in rows:
        obs_date = coerce_date(row.get(date_field))
        instrument = row.get(instrument_field)
        if obs_date is None or instrument is None or instrument == "":
            skipped += 1
            continue
        observations.append(
            Observation(
                date=obs_date,
                instrument_id=str(instrument),
                score=clean_float(row.get(score_field)),
                outcome=clean_float(row.get(outcome_field)),
            )
        )
    if skipped:
        logger.debug("Dropped %d rows without a usable date or instrument", skipped)
    return observations


def horizon_fields(horizon: str) -> tuple:
    """Return the (score_field, outcome_field) pair for a forecast horizon."""
    try:
        return HORIZON_FIELDS[horizon]
    except KeyError:
        raise ValueError(
            f"Unsupported horizon {horizon!r}. Use one of: {', '.join(HORIZON_FIELDS)}"
        )


def observations_to_frame(
    observations: ObservationInput,
    delimiter: str = DEFAULT_DELIMITER,
) -> pd.DataFrame:
    """Build the working frame used by the analytics modules.

    Columns: date, instrument_id, score, outcome, base_symbol, row. ``row``
    keeps the original input position so stable tie-breaks can refer to it.
    Missing scores/outcomes are NaN.
    """
    if isinstance(observations, pd.DataFrame):
        missing = [c for c in OBSERVATION_COLUMNS if c not in observations.columns]
        if missing:
            raise KeyError(f"Observation frame is missing columns: {missing}")
        frame = observations[OBSERVATION_COLUMNS].copy()
        frame["date"] = [coerce_date(d) for d in frame["date"]]
        frame["instrument_id"] = frame["instrument_id"].astype(str)
        frame["score"] = pd.to_numeric(frame["score"], errors="coerce")
        frame["outcome"] = pd.to_numeric(frame["outcome"], errors="coerce")
    else:
        records = [
            (o.date, o.instrument_id,
             np.nan if o.score is None else o.score,
             np.nan if o.outcome is None else o.outcome)
            for o in observations
        ]
        frame = pd.DataFrame.from_records(records, columns=OBSERVATION_COLUMNS)
        frame["score"] = frame["score"].astype(float)
        frame["outcome"] = frame["outcome"].astype(float)

    frame = frame.reset_index(drop=True)
    frame[["score", "outcome"]] = frame[["score", "outcome"]].replace([np.inf, -np.inf], np.nan)
    frame["base_symbol"] = [base_symbol(i, delimiter) for i in frame["instrument_id"]]
    frame["row"] = np.arange(len(frame))
    return frame


def complete_rows(frame: pd.DataFrame) -> pd.DataFrame:
    """Dated rows with both a score and an outcome."""
    return frame[frame["date"].notna() & frame["score"].notna() & frame["outcome"].notna()]


def frame_to_observations(frame: pd.DataFrame) -> List[Observation]:
    return [
        Observation(
            date=coerce_date(r.date),
            instrument_id=str(r.instrument_id),
            score=clean_float(r.score),
            outcome=clean_float(r.outcome),
        )
        for r in frame[OBSERVATION_COLUMNS].itertuples(index=False)
    ]


def rows_to_daily_series(
    rows: Iterable[Row],
    value_field: str,
    *,
    date_field: str = "date",
    fill_value: Optional[float] = None,
    name: Optional[str] = None,
) -> pd.Series:
    """Turn ``[{date, value}]`` rows into a DailySeries.

    Non-numeric values become ``fill_value`` (NaN when None). When a date
    repeats, the last row wins.
    """
    values = {}
    for row in rows:
        row_date = coerce_date(row.get(date_field))
        if row_date is None:
            continue
        value = clean_float(row.get(value_field))
        values[row_date] = fill_value if value is None else value
    ordered = sorted(values)
    return make_daily_series(ordered, [values[d] for d in ordered], name=name or value_field)


__all__ = [
    "OBSERVATION_COLUMNS",
    "HORIZON_FIELDS",
    "coerce_date",
    "rows_to_observations",
    "horizon_fields",
    "observations_to_frame",
    "complete_rows",
    "frame_to_observations",
    "rows_to_daily_series",
]
