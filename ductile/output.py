"""Write analysis outputs to reproducible CSV files.

This module is the output boundary between in-memory analysis and the
tables a renderer or report consumes.
"""

from __future__ import annotations

import os
from typing import Optional, Sequence, Tuple

import pandas as pd

from .reporting import add_formatted_reporting_columns
from .schema import COLUMNS, LinePoint

_REPORTED_COLUMNS = (
    COLUMNS.yield_stress,
    COLUMNS.yield_strain,
    COLUMNS.uts_stress,
    COLUMNS.uts_strain,
    COLUMNS.fracture_stress,
    COLUMNS.fracture_strain,
    COLUMNS.toughness,
    COLUMNS.reg_slope,
    COLUMNS.reg_intercept,
    COLUMNS.reg_start_x,
    COLUMNS.reg_start_y,
    COLUMNS.reg_end_x,
    COLUMNS.reg_end_y,
)


def offset_line_frame(points: Sequence[LinePoint]) -> pd.DataFrame:
    """Tabulate sampled offset-line points as ``strain``/``stress`` columns."""
    return pd.DataFrame(
        {"strain": [p.x for p in points], "stress": [p.y for p in points]},
        dtype=float,
    )


def save_data_to_csv(
    results_df: pd.DataFrame,
    curve_df: pd.DataFrame,
    offset_line_df: Optional[pd.DataFrame] = None,
    output_dir: str = "output",
) -> Tuple[str, str]:
    """Save the result table and the ingested curve to CSV files.

    Args:
        results_df (pandas.DataFrame): Output from
            ``create_results_dataframe``.
        curve_df (pandas.DataFrame): Ingested sample points, e.g. from
            ``Dataset.to_frame``.
        offset_line_df (pandas.DataFrame, optional): Sampled offset line from
            :func:`offset_line_frame`; written to ``offset_line.csv`` when
            given.
        output_dir (str): Directory where CSV outputs are written.

    Returns:
        tuple[str, str]: Paths to ``analysis_results.csv`` and
        ``curve_points.csv``.
    """
    os.makedirs(output_dir, exist_ok=True)

    results_path = os.path.join(output_dir, "analysis_results.csv")
    curve_path = os.path.join(output_dir, "curve_points.csv")

    present = [c for c in _REPORTED_COLUMNS if c in results_df.columns]
    add_formatted_reporting_columns(results_df, present).to_csv(
        results_path, index=False
    )
    curve_df.to_csv(curve_path, index=False)

    print(f"Saved analysis results to {results_path}")
    print(f"Saved curve points to {curve_path}")

    if offset_line_df is not None:
        offset_path = os.path.join(output_dir, "offset_line.csv")
        offset_line_df.to_csv(offset_path, index=False)
        print(f"Saved offset line to {offset_path}")

    return results_path, curve_path
