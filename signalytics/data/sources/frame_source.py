"""In-memory page source over a DataFrame or list of rows."""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

import pandas as pd

from .base import PageSource, Row


class FramePageSource(PageSource):
    """Serve pages out of rows that are already in memory."""

    def __init__(
        self,
        rows: Union[pd.DataFrame, Sequence[Row]],
        order_by: Optional[str] = None,
        ascending: bool = True,
        max_page_size: Optional[int] = None,
    ):
        frame = rows.copy() if isinstance(rows, pd.DataFrame) else pd.DataFrame.from_records(list(rows))
        if order_by is not None:
            if order_by not in frame.columns:
                raise KeyError(f"Cannot order by missing column '{order_by}'.")
            frame = frame.sort_values(order_by, ascending=ascending, kind="mergesort")
        self.frame = frame.reset_index(drop=True)
        self.max_page_size = max_page_size

    def __len__(self) -> int:
        return len(self.frame)

    def fetch_page(self, offset: int, limit: int) -> List[Row]:
        chunk = self.frame.iloc[offset:offset + limit]
        # NaN -> None so downstream coercion sees missing values uniformly.
        return chunk.astype(object).where(chunk.notna(), None).to_dict("records")


__all__ = ["FramePageSource"]
