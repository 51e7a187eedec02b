"""
Handles CSV parsing of tensile-test exports into typed sample points.
"""

# Algorithm summary: detect the column layout from the header, split every
# data row on commas, parse the fields the layout needs (unparseable fields
# count as missing), mirror exx/eyy into strain/stress for gauge-only files,
# and keep each row that still carries a complete strain/stress or exx/eyy
# pair. Quoted fields and embedded commas are not supported.

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import pandas as pd

from .errors import ParseError
from .schema import ColumnLayout, Dataset, SamplePoint

logger = logging.getLogger(__name__)

# Field positions per layout, keyed by whether a leading index column is
# present. Each entry maps field name -> column position.
_FIELD_POSITIONS = {
    ColumnLayout.COMBINED: {
        True: {"stress": 1, "strain": 2, "exx": 3, "eyy": 4},
        False: {"stress": 0, "strain": 1, "exx": 2, "eyy": 3},
    },
    ColumnLayout.GAUGES: {
        True: {"exx": 1, "eyy": 2},
        False: {"exx": 0, "eyy": 1},
    },
    ColumnLayout.CURVE: {
        True: {"stress": 1, "strain": 2},
        False: {"strain": 0, "stress": 1},
    },
}

# Minimum field count for the indexed form of each layout; rows with fewer
# fields use the plain form.
_INDEXED_WIDTH = {
    ColumnLayout.COMBINED: 5,
    ColumnLayout.GAUGES: 3,
    ColumnLayout.CURVE: 3,
}

_SERIALIZED_COLUMNS = {
    ColumnLayout.COMBINED: ["stress", "strain", "exx", "eyy"],
    ColumnLayout.GAUGES: ["exx", "eyy"],
    ColumnLayout.CURVE: ["strain", "stress"],
}


@dataclass(frozen=True)
class RowError:
    """A non-blank data row that did not produce a sample point."""

    line_number: int
    reason: str


@dataclass(frozen=True)
class IngestReport:
    dataset: Dataset
    row_errors: Tuple[RowError, ...] = ()

    @property
    def skipped_rows(self) -> int:
        return len(self.row_errors)


def detect_layout(header: str) -> ColumnLayout:
    """Detect the column layout from a header line (case-insensitive).

    Args:
        header (str): First line of the CSV text.

    Returns:
        ColumnLayout: ``COMBINED`` when both gauge columns and a stress or
        strain column are named, ``GAUGES`` when only the gauge columns are
        named, ``CURVE`` otherwise.
    """
    text = header.lower()
    has_gauges = "exx" in text and "eyy" in text
    has_curve = "stress" in text or "strain" in text
    if has_gauges and has_curve:
        return ColumnLayout.COMBINED
    if has_gauges:
        return ColumnLayout.GAUGES
    return ColumnLayout.CURVE


def _parse_field(raw: str) -> Optional[float]:
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _pair(a: Optional[float], b: Optional[float]) -> Tuple[Optional[float], Optional[float]]:
    if a is None or b is None:
        return None, None
    return a, b


def _parse_row(
    values: Sequence[str], layout: ColumnLayout, line_number: int
) -> Union[SamplePoint, RowError]:
    """Interpret one split row under ``layout``."""
    indexed = len(values) >= _INDEXED_WIDTH[layout]
    if layout is ColumnLayout.COMBINED and not indexed and len(values) < 4:
        return RowError(line_number, f"expected at least 4 fields, got {len(values)}")

    positions = _FIELD_POSITIONS[layout][indexed]
    fields = {name: _parse_field(values[pos]) for name, pos in positions.items()}

    exx, eyy = _pair(fields.get("exx"), fields.get("eyy"))
    if layout is ColumnLayout.GAUGES:
        # Gauge-only files mirror exx/eyy into strain/stress so the curve
        # analysis can run on them unchanged.
        strain, stress = exx, eyy
    else:
        strain, stress = _pair(fields.get("strain"), fields.get("stress"))

    if strain is None and exx is None:
        return RowError(line_number, "no complete strain/stress or exx/eyy pair")
    return SamplePoint(strain=strain, stress=stress, exx=exx, eyy=eyy)


def ingest_with_report(text: str) -> IngestReport:
    """Parse CSV text into a dataset and collect per-row diagnostics.

    Args:
        text (str): Complete CSV text with one header row.

    Returns:
        IngestReport: The dataset plus a :class:`RowError` for every non-blank
        data row that was skipped.

    Raises:
        ParseError: If there are no data rows after the header or no row
            yields a valid sample point.
    """
    lines = text.strip().splitlines()
    if len(lines) < 2:
        raise ParseError("CSV file has no data rows after the header.")

    layout = detect_layout(lines[0].lstrip("\ufeff"))
    logger.debug("Detected %s column layout from header %r", layout.value, lines[0])

    points: List[SamplePoint] = []
    errors: List[RowError] = []
    for line_number, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        values = line.split(",")
        if len(values) < 2:
            errors.append(RowError(line_number, "fewer than 2 fields"))
            continue
        outcome = _parse_row(values, layout, line_number)
        if isinstance(outcome, RowError):
            errors.append(outcome)
        else:
            points.append(outcome)

    for err in errors:
        logger.debug("Skipping line %d: %s", err.line_number, err.reason)

    if not points:
        raise ParseError(
            "Could not parse CSV file. Please ensure it has either "
            "(strain and stress) or (exx and eyy) columns."
        )

    if errors:
        logger.info("Skipped %d unparseable rows", len(errors))
    logger.info("Ingested %d data points (%s layout)", len(points), layout.value)
    return IngestReport(Dataset(tuple(points), layout), tuple(errors))


def ingest(text: str) -> Dataset:
    """Parse CSV text into a :class:`Dataset`, silently skipping invalid rows."""
    return ingest_with_report(text).dataset


def load_tensile_data(filepath):
    """
    Load tensile test data from a CSV file.

    Args:
        filepath (str): Path to the CSV file.

    Returns:
        Dataset: Ingested sample points.
    """
    with open(filepath, encoding="utf-8-sig") as fh:
        return ingest(fh.read())


def dataset_to_frame(dataset: Dataset) -> pd.DataFrame:
    """Return the dataset restricted to the columns of its own layout."""
    return dataset.to_frame()[_SERIALIZED_COLUMNS[dataset.layout]]


def dataset_to_csv(dataset: Dataset) -> str:
    """Serialize a dataset back to CSV text in its detected layout.

    The output has no index column and reads back through :func:`ingest`
    with the same values, except that strain signs are not restored.
    """
    return dataset_to_frame(dataset).to_csv(index=False, na_rep="")
