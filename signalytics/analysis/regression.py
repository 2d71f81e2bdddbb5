"""Full-sample OLS attribution of a daily strategy series against a benchmark."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
import statsmodels.api as sm

from ..core.data_types import validate_daily_series
from ..core.errors import EmptyInputError
from .rolling import align_benchmark

logger = logging.getLogger(__name__)

COV_TYPES = ("HAC", "HC3", "NONROBUST")
MIN_REGRESSION_OBS = 3


def _default_hac_maxlags(n_obs: int) -> int:
    """Newey-West lag length that grows slowly with sample size."""
    if n_obs <= 1:
        return 1
    return max(1, int(math.ceil(n_obs ** 0.25)))


def _finite_float(value: Any) -> Optional[float]:
    try:
        val = float(value)
    except (TypeError, ValueError):
        return None
    return val if math.isfinite(val) else None


def regress_alpha_beta(
    strategy: pd.Series,
    benchmark: pd.Series,
    *,
    lag: int = 1,
    cov_type: str = "HAC",
    cov_kwds: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Regress strategy returns on the lagged benchmark over the whole sample.

    The benchmark is aligned the same way as the rolling attribution: missing
    dates and the first ``lag`` positions are 0. Non-finite strategy values
    are dropped together with their benchmark counterpart.

    Args:
        strategy: DailySeries of strategy returns
        benchmark: DailySeries of benchmark returns
        lag: Benchmark shift in positions
        cov_type: "HAC" (Newey-West), "HC3" or "NONROBUST"
        cov_kwds: Extra covariance options; HAC defaults ``maxlags`` to n^0.25

    Returns:
        Dict with alpha, beta, correlation, r_squared, beta_standard_error,
        beta_t_stat, beta_p_value and observations. Statistics that are not
        finite are reported as None.

    Raises:
        EmptyInputError: If fewer than three paired observations remain.
    """
    validate_daily_series(strategy)
    validate_daily_series(benchmark)
    cov_type_clean = cov_type.upper()
    if cov_type_clean not in COV_TYPES:
        raise ValueError(f"cov_type must be one of {COV_TYPES}, got {cov_type!r}.")

    x = align_benchmark(strategy, benchmark, lag=lag, fill_value=0.0)
    y = strategy.to_numpy(dtype=float)
    mask = np.isfinite(y)
    x, y = x[mask], y[mask]
    n_obs = int(y.size)
    if n_obs < MIN_REGRESSION_OBS:
        raise EmptyInputError(
            f"Regression requires at least {MIN_REGRESSION_OBS} observations, got {n_obs}."
        )

    cov_kwds_clean: Dict[str, Any] = dict(cov_kwds) if cov_kwds else {}
    if cov_type_clean == "HAC" and "maxlags" not in cov_kwds_clean:
        cov_kwds_clean["maxlags"] = _default_hac_maxlags(n_obs)
    fit_cov_type = "nonrobust" if cov_type_clean == "NONROBUST" else cov_type_clean

    model = sm.OLS(y, sm.add_constant(x, has_constant="add"))
    results = model.fit(cov_type=fit_cov_type, cov_kwds=cov_kwds_clean or None)
    logger.debug("OLS fit on %d observations with %s covariance", n_obs, fit_cov_type)

    if np.std(x) > 0 and np.std(y) > 0:
        corr = _finite_float(np.corrcoef(x, y)[0, 1])
    else:
        corr = None
    return {
        "alpha": _finite_float(results.params[0]),
        "beta": _finite_float(results.params[1]),
        "correlation": corr,
        "r_squared": corr ** 2 if corr is not None else None,
        "beta_standard_error": _finite_float(results.bse[1]),
        "beta_t_stat": _finite_float(results.tvalues[1]),
        "beta_p_value": _finite_float(results.pvalues[1]),
        "observations": n_obs,
    }


__all__ = ["COV_TYPES", "regress_alpha_beta"]
