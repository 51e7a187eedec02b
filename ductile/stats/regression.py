"""Provide regression utilities for strain-gauge coefficient fits.

This module supports:
- a closed-form ordinary least-squares fit with scatter diagnostics, and
- the exx-on-eyy fit whose slope is the Poisson-ratio-like coefficient
  reported for biaxial strain-gauge data.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Optional

import numpy as np
from scipy.stats import t as student_t

from ..errors import DegenerateFitError
from ..schema import Dataset, LinePoint, RegressionResult

logger = logging.getLogger(__name__)


def linear_regression(
    x: np.ndarray, y: np.ndarray, min_points: int = 2
) -> Dict[str, float]:
    """Fit an ordinary least-squares straight line to finite data pairs.

    Args:
        x (numpy.ndarray): Independent variable array.
        y (numpy.ndarray): Dependent variable array.
        min_points (int, optional): Minimum number of finite paired
            observations required. Defaults to ``2``.

    Returns:
        dict[str, float]: Regression diagnostics with keys ``m`` (slope),
        ``b`` (intercept), ``r2`` (coefficient of determination, ``nan`` when
        ``y`` has no variance), ``se_m``, ``se_b``, ``ci95_m``, ``ci95_b``
        (95% half-widths from the Student t distribution, ``nan`` with two
        points) and ``n``.

    Raises:
        ValueError: If there are fewer than ``min_points`` finite pairs.
        DegenerateFitError: If all ``x`` values are identical.

    Note:
        Slope and intercept use the summation form
        ``m = (nΣxy - ΣxΣy) / (nΣx² - (Σx)²)``, ``b = (Σy - mΣx) / n``.
    """
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    mask = np.isfinite(x_arr) & np.isfinite(y_arr)
    x_arr = x_arr[mask]
    y_arr = y_arr[mask]
    n = int(len(x_arr))
    if n < min_points:
        raise ValueError("Insufficient valid data for regression.")

    sum_x = float(np.sum(x_arr))
    sum_y = float(np.sum(y_arr))
    sum_xy = float(np.sum(x_arr * y_arr))
    sum_x2 = float(np.sum(x_arr * x_arr))
    denom = n * sum_x2 - sum_x * sum_x
    # Identical x values can leave a rounding residue in denom.
    if denom == 0 or np.all(x_arr == x_arr[0]):
        raise DegenerateFitError(
            "Regression is undefined: all x values are identical."
        )

    m = (n * sum_xy - sum_x * sum_y) / denom
    b = (sum_y - m * sum_x) / n

    resid = y_arr - (m * x_arr + b)
    sse = float(np.sum(resid**2))
    sst = float(np.sum((y_arr - y_arr.mean()) ** 2))
    r2 = 1.0 - sse / sst if sst > 0 else math.nan

    dof = n - 2
    xbar = float(np.mean(x_arr))
    ssxx = float(np.sum((x_arr - xbar) ** 2))

    se_m = math.nan
    se_b = math.nan
    ci95_m = math.nan
    ci95_b = math.nan

    if dof > 0 and ssxx > 0:
        mse = sse / dof
        se_m = float(np.sqrt(mse / ssxx))
        se_b = float(np.sqrt(mse * (1.0 / n + (xbar**2) / ssxx)))
        t_crit = float(student_t.ppf(0.975, dof))
        ci95_m = t_crit * se_m
        ci95_b = t_crit * se_b

    return {
        "m": float(m),
        "b": float(b),
        "r2": float(r2),
        "se_m": se_m,
        "se_b": se_b,
        "ci95_m": ci95_m,
        "ci95_b": ci95_b,
        "n": n,
        "dof": dof,
    }


def fit_strain_regression(dataset: Dataset) -> Optional[RegressionResult]:
    """Fit exx (y) against eyy (x) over all points carrying both gauges.

    Args:
        dataset (Dataset): Ordered sample points.

    Returns:
        RegressionResult | None: Slope, intercept and two plottable endpoints
        evaluated at the eyy of the first and last gauge rows (not at the
        eyy extrema). ``None`` when fewer than two gauge points exist.

    Raises:
        DegenerateFitError: If every eyy value is identical.
    """
    _, eyy, exx = dataset.gauge_arrays()
    if len(eyy) < 2:
        return None

    reg = linear_regression(eyy, exx, min_points=2)
    slope, intercept = reg["m"], reg["b"]
    first_x = float(eyy[0])
    last_x = float(eyy[-1])
    logger.info(
        "Strain regression over %d points: slope=%.6f, intercept=%.6f",
        reg["n"],
        slope,
        intercept,
    )
    return RegressionResult(
        slope=slope,
        intercept=intercept,
        first_point=LinePoint(first_x, slope * first_x + intercept),
        last_point=LinePoint(last_x, slope * last_x + intercept),
        r2=reg["r2"],
        n_points=reg["n"],
        slope_stderr=reg["se_m"],
        slope_ci95=reg["ci95_m"],
    )
