from __future__ import annotations

from datetime import date
from pathlib import Path
from unittest import mock

import numpy as np
import pandas as pd
import pytest
import requests

from signalytics.core.errors import UpstreamFetchError
from signalytics.data import CSVPageSource, FramePageSource, RestPageSource, fetch_all, get_robust_session


def _write_predictions(csv_path: Path) -> None:
    records = [
        {"date": "2024-01-03", "symbol_id": "AAA_USDT_BINANCE", "y_pred_1d": 0.3, "forward_returns_1": 0.01},
        {"date": "2024-01-01", "symbol_id": "AAA_USDT_BINANCE", "y_pred_1d": 0.1, "forward_returns_1": np.nan},
        {"date": "2024-01-02", "symbol_id": "BBB_USDT_BINANCE", "y_pred_1d": -0.2, "forward_returns_1": 0.02},
        {"date": "2024-01-01", "symbol_id": "BBB_USDT_BINANCE", "y_pred_1d": 0.5, "forward_returns_1": -0.01},
    ]
    pd.DataFrame.from_records(records).to_csv(csv_path, index=False)


def test_frame_source_orders_rows_and_maps_nan_to_none() -> None:
    frame = pd.DataFrame({"date": ["2024-01-02", "2024-01-01"], "value": [np.nan, 1.5]})
    source = FramePageSource(frame, order_by="date")

    page = source.fetch_page(0, 10)

    assert [row["date"] for row in page] == ["2024-01-01", "2024-01-02"]
    assert page[0]["value"] == 1.5
    assert page[1]["value"] is None
    assert len(source) == 2
    assert source.fetch_page(2, 10) == []


def test_csv_source_filters_dates_and_sorts_stably(tmp_path: Path) -> None:
    csv_path = tmp_path / "predictions.csv"
    _write_predictions(csv_path)

    source = CSVPageSource(csv_path, start_date=date(2024, 1, 1), end_date=date(2024, 1, 2))
    rows = fetch_all(source, page_size=2)

    assert [(r["date"], r["symbol_id"]) for r in rows] == [
        (date(2024, 1, 1), "AAA_USDT_BINANCE"),
        (date(2024, 1, 1), "BBB_USDT_BINANCE"),
        (date(2024, 1, 2), "BBB_USDT_BINANCE"),
    ]
    assert rows[0]["forward_returns_1"] is None


def test_csv_source_equality_filter(tmp_path: Path) -> None:
    csv_path = tmp_path / "predictions.csv"
    _write_predictions(csv_path)

    source = CSVPageSource(csv_path, filters={"symbol_id": "AAA_USDT_BINANCE"})
    rows = source.fetch_page(0, 100)

    assert [r["date"] for r in rows] == [date(2024, 1, 1), date(2024, 1, 3)]


def test_csv_source_missing_file(tmp_path: Path) -> None:
    source = CSVPageSource(tmp_path / "missing.csv")
    with pytest.raises(FileNotFoundError):
        source.fetch_page(0, 10)


def test_rest_source_builds_postgrest_query() -> None:
    source = RestPageSource(
        "https://db.example.com/rest/v1/",
        "predictions",
        ["date", "symbol_id", "y_pred_1d"],
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
        equals={"symbol_id": "BTC_USDT_BINANCE"},
        session=mock.MagicMock(),
    )

    assert source.url == "https://db.example.com/rest/v1/predictions"
    assert source.build_params(2000, 1000) == [
        ("select", "date,symbol_id,y_pred_1d"),
        ("date", "gte.2024-01-01"),
        ("date", "lte.2024-01-31"),
        ("symbol_id", "eq.BTC_USDT_BINANCE"),
        ("order", "date.asc,symbol_id.asc"),
        ("offset", "2000"),
        ("limit", "1000"),
    ]


def test_rest_source_fetch_page_sends_auth_headers() -> None:
    session = mock.MagicMock()
    session.get.return_value.json.return_value = [{"date": "2024-01-01", "symbol_id": "A"}]
    source = RestPageSource("https://db.example.com", "predictions", ["date"], api_key="secret", session=session)

    rows = source.fetch_page(0, 1000)

    assert rows == [{"date": "2024-01-01", "symbol_id": "A"}]
    _, kwargs = session.get.call_args
    assert kwargs["headers"]["apikey"] == "secret"
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert ("limit", "1000") in kwargs["params"]
    session.get.return_value.raise_for_status.assert_called_once()


def test_rest_source_rejects_non_list_payload() -> None:
    session = mock.MagicMock()
    session.get.return_value.json.return_value = {"message": "permission denied"}
    source = RestPageSource("https://db.example.com", "predictions", ["date"], session=session)

    with pytest.raises(ValueError, match="JSON array"):
        source.fetch_page(0, 10)


def test_rest_http_error_becomes_upstream_failure() -> None:
    session = mock.MagicMock()
    session.get.return_value.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
    source = RestPageSource("https://db.example.com", "predictions", ["date"], session=session)

    with pytest.raises(UpstreamFetchError) as excinfo:
        fetch_all(source, page_size=1000)
    assert isinstance(excinfo.value.__cause__, requests.HTTPError)


def test_rest_source_declares_gateway_page_cap() -> None:
    source = RestPageSource("https://db.example.com", "predictions", ["date"], session=mock.MagicMock())
    assert source.max_page_size == 1000
    with pytest.raises(ValueError):
        fetch_all(source, page_size=5000)


def test_robust_session_retries_transient_statuses() -> None:
    session = get_robust_session(total_retries=5, backoff_factor=0.5)
    retry = session.get_adapter("https://db.example.com").max_retries

    assert retry.total == 5
    assert 429 in retry.status_forcelist
    assert 503 in retry.status_forcelist


def test_rest_source_custom_ordering() -> None:
    single = RestPageSource("https://db.example.com", "benchmark", ["date", "value"],
                            order_by="date", session=mock.MagicMock())
    unordered = RestPageSource("https://db.example.com", "benchmark", ["date"],
                               order_by=None, session=mock.MagicMock())

    assert ("order", "date.asc") in single.build_params(0, 10)
    assert all(key != "order" for key, _ in unordered.build_params(0, 10))
