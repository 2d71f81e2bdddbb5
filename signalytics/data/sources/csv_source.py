"""CSV page source for exported prediction tables."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from .base import PageSource, Row


class CSVPageSource(PageSource):
    """Generic source for CSV files with one row per (date, instrument).

    The file is read once, on the first page request, filtered to the
    inclusive ``[start_date, end_date]`` range and ordered by ``date_col``.
    """

    def __init__(
        self,
        file_path: Union[str, Path],
        date_col: str = 'date',
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        filters: Optional[dict] = None,
    ):
        self.file_path = Path(file_path)
        self.date_col = date_col
        self.start_date = start_date
        self.end_date = end_date
        self.filters = dict(filters or {})
        self._frame: Optional[pd.DataFrame] = None

    def get_name(self) -> str:
        return f"CSVPageSource({self.file_path.name})"

    def _load(self) -> pd.DataFrame:
        if not self.file_path.exists():
            raise FileNotFoundError(f"CSV file {self.file_path} not found")

        df = pd.read_csv(self.file_path)
        if self.date_col not in df.columns:
            raise KeyError(f"CSV file {self.file_path} has no '{self.date_col}' column")
        dates = pd.to_datetime(df[self.date_col]).dt.date
        mask = pd.Series(True, index=df.index)
        if self.start_date is not None:
            mask &= dates >= self.start_date
        if self.end_date is not None:
            mask &= dates <= self.end_date
        for column, value in self.filters.items():
            mask &= df[column] == value
        df = df[mask].copy()
        df[self.date_col] = dates[mask]
        return df.sort_values(self.date_col, kind="mergesort").reset_index(drop=True)

    def fetch_page(self, offset: int, limit: int) -> List[Row]:
        if self._frame is None:
            self._frame = self._load()
        chunk = self._frame.iloc[offset:offset + limit]
        return chunk.astype(object).where(chunk.notna(), None).to_dict("records")


__all__ = ["CSVPageSource"]
