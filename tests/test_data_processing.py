import logging

import numpy as np
import pytest

from ductile.data_processing import (
    dataset_to_csv,
    detect_layout,
    ingest,
    ingest_with_report,
    load_tensile_data,
)
from ductile.errors import IngestError, ParseError
from ductile.schema import ColumnLayout


def test_negative_strain_is_normalized():
    dataset = ingest("strain,stress\n-0.001,50\n0.002,120")

    assert len(dataset) == 2
    assert dataset.layout is ColumnLayout.CURVE
    assert dataset[0].strain == 0.001
    assert dataset[0].stress == 50.0
    assert dataset[1].strain == 0.002
    assert dataset[1].stress == 120.0


@pytest.mark.parametrize(
    "header, expected",
    [
        ("strain,stress", ColumnLayout.CURVE),
        ("Point,Stress (MPa),Strain", ColumnLayout.CURVE),
        ("time,load", ColumnLayout.CURVE),
        ("exx,eyy", ColumnLayout.GAUGES),
        ("Point,EXX,EYY", ColumnLayout.GAUGES),
        ("Point,Stress,Strain,exx,eyy", ColumnLayout.COMBINED),
        ("EXX,EYY,STRAIN", ColumnLayout.COMBINED),
    ],
)
def test_detect_layout(header, expected):
    assert detect_layout(header) is expected


def test_indexed_curve_reads_stress_before_strain():
    dataset = ingest("Point,Stress,Strain\n1,100,0.001\n2,200,-0.002\n")

    assert dataset[0].stress == 100.0
    assert dataset[0].strain == 0.001
    assert dataset[1].stress == 200.0
    assert dataset[1].strain == 0.002
    assert dataset[0].exx is None


def test_gauge_only_layout_mirrors_into_strain_and_stress():
    dataset = ingest("Point,exx,eyy\n1,-0.002,0.0006\n2,0.004,-0.0012\n")

    assert dataset.layout is ColumnLayout.GAUGES
    first = dataset[0]
    assert first.exx == -0.002
    assert first.eyy == 0.0006
    # strain mirrors exx as a magnitude, stress mirrors eyy as-is
    assert first.strain == 0.002
    assert first.stress == 0.0006
    assert dataset[1].stress == -0.0012


def test_two_column_gauge_layout():
    dataset = ingest("exx,eyy\n0.001,-0.0003\n")

    assert dataset[0].exx == 0.001
    assert dataset[0].eyy == -0.0003


def test_combined_layout_with_and_without_index():
    indexed = ingest("Point,Stress,Strain,exx,eyy\n1,100,0.001,0.0011,-0.0003\n")
    plain = ingest("Stress,Strain,exx,eyy\n100,0.001,0.0011,-0.0003\n")

    for dataset in (indexed, plain):
        point = dataset[0]
        assert dataset.layout is ColumnLayout.COMBINED
        assert point.stress == 100.0
        assert point.strain == 0.001
        assert point.exx == 0.0011
        assert point.eyy == -0.0003


def test_combined_row_keeps_whichever_pair_parsed():
    dataset = ingest(
        "Point,Stress,Strain,exx,eyy\n"
        "1,n/a,0.001,0.0011,-0.0003\n"
        "2,120,0.002,,\n"
    )

    assert len(dataset) == 2
    assert not dataset[0].has_curve
    assert dataset[0].has_gauges
    assert dataset[1].has_curve
    assert not dataset[1].has_gauges
    assert dataset.curve_count == 1
    assert dataset.gauge_count == 1


def test_invalid_rows_are_skipped_and_reported():
    text = "strain,stress\n0.001,50\nfoo,bar\n\n0.002,60\n7\n"

    report = ingest_with_report(text)

    assert len(report.dataset) == 2
    assert report.skipped_rows == 2
    assert [e.line_number for e in report.row_errors] == [3, 6]
    assert len(ingest(text)) == 2


def test_skipped_rows_are_logged(caplog):
    caplog.set_level(logging.DEBUG, logger="ductile.data_processing")

    ingest("strain,stress\n0.001,50\nfoo,bar\n0.002,60\n")

    assert any("Skipping line 3" in rec.message for rec in caplog.records)


def test_non_finite_fields_count_as_missing():
    report = ingest_with_report("strain,stress\nnan,10\n0.001,inf\n0.002,20\n")

    assert len(report.dataset) == 1
    assert report.skipped_rows == 2


def test_trailing_blank_lines_and_crlf_are_ignored():
    dataset = ingest("strain,stress\r\n0,0\r\n0.1,10\r\n\r\n   \n")

    assert len(dataset) == 2
    assert dataset[1].stress == 10.0


@pytest.mark.parametrize(
    "text",
    ["", "strain,stress", "strain,stress\n\n", "strain,stress\nfoo,bar\nx,y\n"],
)
def test_parse_error_when_no_valid_rows(text):
    with pytest.raises(ParseError):
        ingest(text)


def test_parse_error_is_an_ingest_error():
    with pytest.raises(IngestError, match="no data rows"):
        ingest("strain,stress\n")


def test_csv_round_trip_preserves_values():
    text = (
        "Point,Stress,Strain,exx,eyy\n"
        "1,0.0,0.0,0.0,0.0\n"
        "2,151.25,-0.00075,0.00074,-0.00022\n"
        "3,302.5,0.0015,0.0015,-0.00045\n"
    )
    original = ingest(text)

    again = ingest(dataset_to_csv(original))

    assert again.layout is ColumnLayout.COMBINED
    assert len(again) == len(original)
    for a, b in zip(original, again):
        assert np.isclose(a.stress, b.stress)
        assert np.isclose(a.strain, b.strain)
        assert np.isclose(a.exx, b.exx)
        assert np.isclose(a.eyy, b.eyy)
    # the sign of the second strain is lost on ingest
    assert again[1].strain == 0.00075


def test_curve_csv_round_trip():
    original = ingest("Point,Stress,Strain\n1,0,0\n2,151.25,-0.00075\n3,302.5,0.0015\n")

    text = dataset_to_csv(original)
    again = ingest(text)

    assert text.splitlines()[0] == "strain,stress"
    assert again.layout is ColumnLayout.CURVE
    assert [(p.strain, p.stress) for p in again] == [
        (p.strain, p.stress) for p in original
    ]
    assert again[1].strain == 0.00075
    assert again[1].exx is None


def test_gauge_csv_round_trip_keeps_exx_sign():
    original = ingest("exx,eyy\n0.0,0.0\n-0.0012,0.00036\n0.0024,-0.00072\n")

    text = dataset_to_csv(original)
    again = ingest(text)

    assert text.splitlines()[0] == "exx,eyy"
    assert again.layout is ColumnLayout.GAUGES
    assert len(again) == 3
    for a, b in zip(original, again):
        assert np.isclose(a.exx, b.exx)
        assert np.isclose(a.eyy, b.eyy)
    assert again[1].exx == -0.0012
    # the mirrored strain is a magnitude, the mirrored stress keeps its sign
    assert again[1].strain == 0.0012
    assert again[2].stress == -0.00072


def test_fields_with_unit_suffix_are_rejected():
    report = ingest_with_report("strain,stress\n0.001,50MPa\n0.002,120\n")

    assert len(report.dataset) == 1
    assert report.dataset[0].stress == 120.0
    assert [e.line_number for e in report.row_errors] == [2]


def test_load_tensile_data_strips_bom(tmp_path):
    csv_path = tmp_path / "sample.csv"
    csv_path.write_text("\ufeffexx,eyy\n0.001,-0.0003\n0.002,-0.0006\n", encoding="utf-8")

    dataset = load_tensile_data(str(csv_path))

    assert dataset.layout is ColumnLayout.GAUGES
    assert len(dataset) == 2
