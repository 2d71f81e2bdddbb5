"""Command line entry point: run one analytic over a CSV export and print JSON."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .core import AnalyticsConfig, AnalyticsError, series_to_records
from .core.data_types import results_to_dicts
from .data import CSVPageSource, HORIZON_FIELDS
from .engine import AnalyticsRunner
from .engine.runner import DAILY_METRICS, ROLLING_STATISTICS

logger = logging.getLogger(__name__)


def _parse_date(value: str):
    return datetime.strptime(value, "%Y-%m-%d").date()


def _common_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("csv", type=Path, help="CSV file with one row per (date, instrument)")
    parser.add_argument("--horizon", choices=sorted(HORIZON_FIELDS), default="1d",
                        help="Forecast horizon selecting the score/outcome columns (default: 1d)")
    parser.add_argument("--instrument-field", default="symbol_id",
                        help="Column holding the instrument id (default: symbol_id)")
    parser.add_argument("--start", type=_parse_date, help="Optional inclusive start date (YYYY-MM-DD)")
    parser.add_argument("--end", type=_parse_date, help="Optional inclusive end date (YYYY-MM-DD)")
    parser.add_argument("--page-size", type=int, default=1000, help="Rows per page (default: 1000)")
    parser.add_argument("--max-rows", type=int, help="Optional cap on the rows fetched")
    parser.add_argument("--delimiter", default="_",
                        help="Separator between base symbol and venue suffix (default: _)")
    parser.add_argument("--direction", choices=["long", "short", "combined"], default="long")
    parser.add_argument("--buckets", type=int, default=10, help="Score buckets (default: 10)")
    parser.add_argument("--top-n", type=int, default=20, help="Size of top/bottom views (default: 20)")
    parser.add_argument("--min-obs", type=int, default=5,
                        help="Minimum observations per symbol for expectancy (default: 5)")
    parser.add_argument("--min-points", type=int, default=10,
                        help="Minimum observations per symbol for IC by symbol (default: 10)")
    parser.add_argument("--window", type=int, default=30, help="Rolling window length (default: 30)")
    parser.add_argument("--min-window-obs", type=int, default=7,
                        help="Observations required before a rolling value is emitted (default: 7)")
    parser.add_argument("--lag", type=int, default=1, help="Benchmark lag in days (default: 1)")
    parser.add_argument("--samples", type=int, default=10000, help="Bootstrap draws (default: 10000)")
    parser.add_argument("--bins", type=int, default=20, help="Histogram bins (default: 20)")
    parser.add_argument("--seed", type=int, help="Seed for reproducible resampling")
    parser.add_argument("--frequency", default="D",
                        help="Observation frequency used for annualization, e.g. D or 7D (default: D)")
    parser.add_argument("--progress", action="store_true", help="Show progress bars")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level (default: WARNING)")
    return parser


def build_parser() -> argparse.ArgumentParser:
    common = _common_parser()
    parser = argparse.ArgumentParser(
        prog="signalytics",
        description="Quantitative analytics over scored (date, instrument) predictions.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    deciles = sub.add_parser("deciles", parents=[common], help="Mean outcome per score bucket")
    deciles.add_argument("--statistic", choices=["mean", "median"], default="mean")
    deciles.add_argument("--global", dest="global_partition", action="store_true",
                         help="Rank all rows as one partition instead of per date")

    ic = sub.add_parser("ic", parents=[common], help="Daily cross-sectional rank IC")
    ic.add_argument("--summary", action="store_true", help="Print the IC distribution summary only")

    sub.add_parser("ic-by-symbol", parents=[common], help="Top/bottom symbols by time-series IC")

    rolling = sub.add_parser("rolling", parents=[common], help="Rolling mean or hit rate of a daily metric")
    rolling.add_argument("--metric", choices=DAILY_METRICS, default="ic")
    rolling.add_argument("--statistic", choices=ROLLING_STATISTICS, default="mean")

    alpha = sub.add_parser("rolling-alpha", parents=[common],
                           help="Rolling alpha/beta of a strategy series against a benchmark")
    alpha.add_argument("--benchmark", type=Path, required=True, help="CSV of date,value benchmark returns")
    alpha.add_argument("--strategy", type=Path,
                       help="CSV of date,value strategy returns (default: daily top-bottom spread)")
    alpha.add_argument("--value-field", default="value", help="Value column of the series CSVs")
    alpha.add_argument("--keep-warmup", action="store_true", help="Keep the leading warm-up points")
    alpha.add_argument("--full-sample", action="store_true",
                       help="Also report a full-sample OLS regression")
    alpha.add_argument("--cov-type", type=lambda s: s.upper(), choices=["HAC", "HC3", "NONROBUST"],
                       default="HAC", help="Covariance estimator for the full-sample regression")

    boot = sub.add_parser("bootstrap", parents=[common], help="Bootstrap CI of a daily metric mean")
    boot.add_argument("--metric", choices=DAILY_METRICS, default="ic")

    robust = sub.add_parser("robustness", parents=[common],
                            help="Bootstrap equity-curve metrics of a daily return metric")
    robust.add_argument("--metric", choices=DAILY_METRICS, default="spread")
    robust.add_argument("--iterations", type=int, default=10000)
    robust.add_argument("--fee", type=float, default=0.003, help="Cost per period (default: 0.003)")
    robust.add_argument("--period-days", type=int, default=1, help="Rebalance cadence in days (default: 1)")

    sub.add_parser("expectancy", parents=[common], help="Top/bottom symbols by mean outcome")
    return parser


def _config_from_args(args: argparse.Namespace) -> AnalyticsConfig:
    return AnalyticsConfig(
        page_size=args.page_size,
        max_rows=args.max_rows,
        buckets=args.buckets,
        min_obs=args.min_obs,
        min_points=args.min_points,
        top_n=args.top_n,
        direction=args.direction,
        delimiter=args.delimiter,
        window=args.window,
        min_window_obs=args.min_window_obs,
        lag=args.lag,
        samples=args.samples,
        bins=args.bins,
        seed=args.seed,
        frequency=args.frequency,
    )


def run_command(args: argparse.Namespace) -> Dict[str, Any]:
    """Run the analytic selected by ``args.command`` and return a JSON-safe payload."""
    config = _config_from_args(args)
    source = CSVPageSource(args.csv, start_date=args.start, end_date=args.end)
    runner = AnalyticsRunner(
        source,
        config,
        horizon=args.horizon,
        instrument_field=args.instrument_field,
        progress=args.progress,
    )
    payload: Dict[str, Any] = {"command": args.command, "config": config.to_dict()}

    if args.command == "deciles":
        partition = None if args.global_partition else ("date",)
        payload["buckets"] = results_to_dicts(runner.decile_returns(partition, args.statistic))
    elif args.command == "ic":
        if args.summary:
            payload["summary"] = runner.ic_distribution().to_dict()
        else:
            payload["daily"] = results_to_dicts(runner.daily_ic())
    elif args.command == "ic-by-symbol":
        payload.update(runner.ic_by_symbol().to_dict())
    elif args.command == "rolling":
        result = runner.rolling_statistic(args.metric, args.statistic)
        payload["series"] = series_to_records(result["series"])
        payload["summary"] = result["summary"]
    elif args.command == "rolling-alpha":
        benchmark = CSVPageSource(args.benchmark, start_date=args.start, end_date=args.end)
        strategy = (
            CSVPageSource(args.strategy, start_date=args.start, end_date=args.end)
            if args.strategy else None
        )
        points = runner.rolling_alpha_beta(benchmark, strategy, value_field=args.value_field)
        if not args.keep_warmup:
            points = [p for p in points if not p.is_warmup]
        payload["points"] = results_to_dicts(points)
        if args.full_sample:
            payload["regression"] = runner.regression(
                benchmark, strategy, value_field=args.value_field, cov_type=args.cov_type
            )
    elif args.command == "bootstrap":
        payload.update(runner.bootstrap_mean(args.metric).to_dict())
    elif args.command == "robustness":
        distributions = runner.equity_robustness(
            args.metric, iterations=args.iterations, fee=args.fee, period_days=args.period_days
        )
        payload["metrics"] = {name: dist.to_dict() for name, dist in distributions.items()}
    elif args.command == "expectancy":
        payload.update(runner.symbol_expectancy().to_dict())
    return payload


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        payload = run_command(args)
    except (AnalyticsError, FileNotFoundError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
