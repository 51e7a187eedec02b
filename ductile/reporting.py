"""Format analysis results for display and tabular export.

This module sits after the numerical analysis. It turns result records into
the labelled, fixed-precision text shown next to a chart and into one-row
result tables for CSV export.
"""

from __future__ import annotations

import os
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .schema import COLUMNS, AnalysisResult, CurvePoint, RegressionResult
from .units import REPORT_DECIMALS, STRESS_UNIT, TOUGHNESS_UNIT


def format_number(value: float, decimals: int = REPORT_DECIMALS) -> str:
    """Format a number with fixed decimals; non-finite values become ``"nan"``."""
    v = float(value)
    if not np.isfinite(v):
        return "nan"
    return f"{v:.{decimals}f}"


def _point_text(point: Optional[CurvePoint]) -> str:
    if point is None:
        return "not found"
    return (
        f"{format_number(point.stress)} {STRESS_UNIT} at "
        f"{format_number(point.strain)} strain"
    )


def format_analysis_report(
    result: AnalysisResult, n_points: Optional[int] = None
) -> list[str]:
    """Return the labelled result lines for one analysis run.

    Args:
        result (AnalysisResult): Output of the curve analysis.
        n_points (int, optional): Data point count to print. Defaults to the
            count stored on ``result``.

    Returns:
        list[str]: One line each for yield strength, UTS, fracture point,
        toughness and the total data point count, values to six decimals.
    """
    if n_points is None:
        n_points = result.n_points
    return [
        f"Yield Strength ({result.offset_percent:g}% offset): "
        f"{_point_text(result.yield_point)}",
        f"Ultimate Tensile Strength (UTS): {_point_text(result.uts_point)}",
        f"Fracture Point: {_point_text(result.fracture_point)}",
        f"Toughness (Area under curve): {format_number(result.toughness)} "
        f"{TOUGHNESS_UNIT}",
        f"Total Data Points: {int(n_points)}",
    ]


def format_regression_report(regression: RegressionResult) -> list[str]:
    """Return the labelled lines for the strain-gauge fit.

    Slope, intercept and both plotted line endpoints are always reported.
    The slope standard error and 95% half-width follow only when the fit had
    residual degrees of freedom.
    """
    start = regression.first_point
    end = regression.last_point
    lines = [
        f"{COLUMNS.reg_slope}: {format_number(regression.slope)}",
        f"{COLUMNS.reg_intercept}: {format_number(regression.intercept)}",
        f"Regression line start: ({format_number(start.x)}, "
        f"{format_number(start.y)})",
        f"Regression line end: ({format_number(end.x)}, {format_number(end.y)})",
    ]
    if np.isfinite(regression.slope_stderr):
        lines.append(
            f"{COLUMNS.reg_slope_se}: {format_number(regression.slope_stderr)}"
        )
    if np.isfinite(regression.slope_ci95):
        lines.append(
            f"{COLUMNS.reg_slope_ci95}: ±{format_number(regression.slope_ci95)}"
        )
    return lines


def create_results_dataframe(
    result: AnalysisResult,
    regression: Optional[RegressionResult] = None,
    source: Optional[str] = None,
) -> pd.DataFrame:
    """Build a one-row result table with standardized column labels.

    A missing yield point becomes NaN. Regression columns are only present
    when ``regression`` is given.
    """
    yp = result.yield_point
    row = {
        COLUMNS.source: source or "",
        COLUMNS.offset: result.offset_percent,
        COLUMNS.modulus: result.elastic_modulus,
        COLUMNS.yield_stress: yp.stress if yp is not None else np.nan,
        COLUMNS.yield_strain: yp.strain if yp is not None else np.nan,
        COLUMNS.uts_stress: result.uts_point.stress,
        COLUMNS.uts_strain: result.uts_point.strain,
        COLUMNS.fracture_stress: result.fracture_point.stress,
        COLUMNS.fracture_strain: result.fracture_point.strain,
        COLUMNS.toughness: result.toughness,
        COLUMNS.n_points: result.n_points,
    }
    if regression is not None:
        row[COLUMNS.reg_slope] = regression.slope
        row[COLUMNS.reg_intercept] = regression.intercept
        row[COLUMNS.reg_r2] = regression.r2
        row[COLUMNS.reg_slope_se] = regression.slope_stderr
        row[COLUMNS.reg_slope_ci95] = regression.slope_ci95
        row[COLUMNS.reg_start_x] = regression.first_point.x
        row[COLUMNS.reg_start_y] = regression.first_point.y
        row[COLUMNS.reg_end_x] = regression.last_point.x
        row[COLUMNS.reg_end_y] = regression.last_point.y
    return pd.DataFrame([row])


def add_formatted_reporting_columns(
    df: pd.DataFrame,
    value_columns: Iterable[str],
    suffix: str = " (reported)",
    decimals: int = REPORT_DECIMALS,
) -> pd.DataFrame:
    """Add fixed-precision string columns next to numeric result columns.

    Args:
        df (pandas.DataFrame): Input numeric table.
        value_columns (Iterable[str]): Columns to format.
        suffix (str, optional): Suffix appended to generated columns.
        decimals (int, optional): Decimal places. Defaults to six.

    Returns:
        pandas.DataFrame: Copy of ``df`` with string columns added; NaN
        values are reported as an empty string.

    Raises:
        KeyError: If a requested column is absent.

    Note:
        Original numeric columns are preserved for downstream computation.
    """
    out = df.copy()
    for col in value_columns:
        if col not in out.columns:
            raise KeyError(f"Missing value column '{col}' for reporting format.")
        values = pd.to_numeric(out[col], errors="coerce")
        out[f"{col}{suffix}"] = [
            format_number(v, decimals) if np.isfinite(v) else "" for v in values
        ]
    return out


def write_report_file(lines: list[str], output_dir: str, stem: str = "summary") -> str:
    """Write report lines to ``<stem>.txt`` in the target directory."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, f"{stem}.txt")
    with open(path, "w", encoding="utf-8") as handle:
        handle.write("\n".join(lines) + "\n")
    return path
