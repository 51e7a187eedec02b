"""Tests for export-layer CSV output."""

import pandas as pd

from ductile.analysis import analyze_curve, offset_line_points
from ductile.output import offset_line_frame, save_data_to_csv
from ductile.reporting import create_results_dataframe


def test_save_data_to_csv_writes_all_tables(tmp_path, elastic_plastic):
    result = analyze_curve(elastic_plastic, 0.2)
    results_df = create_results_dataframe(result, source="sample.csv")
    offset_df = offset_line_frame(offset_line_points(elastic_plastic, 0.2))

    results_path, curve_path = save_data_to_csv(
        results_df, elastic_plastic.to_frame(), offset_df, output_dir=str(tmp_path)
    )

    saved = pd.read_csv(results_path, dtype=str)
    assert saved.loc[0, "UTS (MPa) (reported)"] == "550.000000"
    assert saved.loc[0, "Source File"] == "sample.csv"

    curve = pd.read_csv(curve_path)
    assert list(curve.columns) == ["strain", "stress", "exx", "eyy"]
    assert len(curve) == 5

    offset = pd.read_csv(tmp_path / "offset_line.csv")
    assert len(offset) == len(offset_df)


def test_save_data_to_csv_without_offset_line(tmp_path, elastic_plastic):
    results_df = create_results_dataframe(analyze_curve(elastic_plastic))

    save_data_to_csv(results_df, elastic_plastic.to_frame(), output_dir=str(tmp_path))

    assert not (tmp_path / "offset_line.csv").exists()
