"""Define the immutable records exchanged between ingestion and analysis.

Sample points and datasets are produced by :mod:`ductile.data_processing`;
curve points, regression results and analysis results are produced by
:mod:`ductile.analysis` and :mod:`ductile.stats.regression`. All records are
frozen dataclasses so a renderer handed one cannot alter session state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from .errors import InvalidPointError


class ColumnLayout(str, Enum):
    """Column layout detected from a CSV header."""

    COMBINED = "combined"  # stress, strain, exx, eyy
    GAUGES = "gauges"  # exx, eyy
    CURVE = "curve"  # strain, stress


@dataclass(frozen=True)
class SamplePoint:
    """One row of a tensile test.

    Attributes:
        strain: Engineering strain, always stored as a non-negative magnitude.
        stress: Engineering stress in MPa.
        exx: Longitudinal strain-gauge reading.
        eyy: Transverse strain-gauge reading.

    Raises:
        InvalidPointError: If neither the ``strain``/``stress`` pair nor the
            ``exx``/``eyy`` pair is complete.
    """

    strain: Optional[float] = None
    stress: Optional[float] = None
    exx: Optional[float] = None
    eyy: Optional[float] = None

    def __post_init__(self) -> None:
        if self.strain is not None and self.strain < 0:
            object.__setattr__(self, "strain", abs(self.strain))
        if not (self.has_curve or self.has_gauges):
            raise InvalidPointError(
                "Sample point needs both strain and stress, or both exx and eyy."
            )

    @property
    def has_curve(self) -> bool:
        return self.strain is not None and self.stress is not None

    @property
    def has_gauges(self) -> bool:
        return self.exx is not None and self.eyy is not None


@dataclass(frozen=True)
class Dataset:
    """Ordered sample points of one upload, in file row order.

    Row order is the load/time order of the test and is never re-sorted.
    """

    points: Tuple[SamplePoint, ...]
    layout: ColumnLayout = ColumnLayout.CURVE

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, float]],
        layout: ColumnLayout = ColumnLayout.CURVE,
    ) -> "Dataset":
        """Build a dataset from dicts with ``strain``/``stress``/``exx``/``eyy`` keys."""
        return cls(tuple(SamplePoint(**dict(rec)) for rec in records), layout)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[SamplePoint]:
        return iter(self.points)

    def __getitem__(self, index: int) -> SamplePoint:
        return self.points[index]

    @property
    def curve_count(self) -> int:
        return sum(1 for p in self.points if p.has_curve)

    @property
    def gauge_count(self) -> int:
        return sum(1 for p in self.points if p.has_gauges)

    def curve_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return ``(indices, strain, stress)`` for points carrying a curve pair.

        ``indices`` are positions in this dataset, so results derived from the
        arrays can point back at the originating row.
        """
        rows = [(i, p.strain, p.stress) for i, p in enumerate(self.points) if p.has_curve]
        return _split_columns(rows)

    def gauge_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return ``(indices, eyy, exx)`` for points carrying a gauge pair."""
        rows = [(i, p.eyy, p.exx) for i, p in enumerate(self.points) if p.has_gauges]
        return _split_columns(rows)

    def to_frame(self) -> pd.DataFrame:
        """Return the points as a DataFrame with NaN for missing fields."""
        return pd.DataFrame(
            {
                "strain": [p.strain for p in self.points],
                "stress": [p.stress for p in self.points],
                "exx": [p.exx for p in self.points],
                "eyy": [p.eyy for p in self.points],
            },
            dtype=float,
        )


def _split_columns(rows) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    if not rows:
        empty = np.array([], dtype=float)
        return np.array([], dtype=int), empty, empty.copy()
    idx, a, b = zip(*rows)
    return (
        np.asarray(idx, dtype=int),
        np.asarray(a, dtype=float),
        np.asarray(b, dtype=float),
    )


@dataclass(frozen=True)
class CurvePoint:
    """A marker on the stress-strain curve.

    ``index`` is the dataset position the value was taken from, or the end of
    the segment it was interpolated in.
    """

    strain: float
    stress: float
    index: int


YieldPoint = CurvePoint
UtsPoint = CurvePoint
FracturePoint = CurvePoint


@dataclass(frozen=True)
class LinePoint:
    x: float
    y: float


@dataclass(frozen=True)
class RegressionResult:
    """Least-squares line of exx (y) on eyy (x).

    ``first_point`` and ``last_point`` are the line evaluated at the eyy of
    the first and last gauge rows, used to draw and report the line.
    ``slope_stderr`` and ``slope_ci95`` (the 95% half-width) are NaN for a
    two-point fit, which leaves no residual degrees of freedom.
    """

    slope: float
    intercept: float
    first_point: LinePoint
    last_point: LinePoint
    r2: float = float("nan")
    n_points: int = 0
    slope_stderr: float = float("nan")
    slope_ci95: float = float("nan")


@dataclass(frozen=True)
class AnalysisResult:
    """Everything reported for one stress-strain analysis run."""

    yield_point: Optional[CurvePoint]
    uts_point: CurvePoint
    fracture_point: CurvePoint
    toughness: float
    offset_percent: float
    elastic_modulus: float = float("nan")
    n_points: int = 0


@dataclass(frozen=True)
class ResultColumns:
    """Standardized column labels for result tables.

    Stress values are in MPa, strain is dimensionless and toughness is the
    area under the engineering curve in MPa·mm (the label printed on the
    graph sheet, although the integral is strictly MPa per unit strain).
    """

    source: str = "Source File"
    offset: str = "Offset (%)"
    modulus: str = "Elastic Modulus (MPa)"
    yield_stress: str = "Yield Strength (MPa)"
    yield_strain: str = "Yield Strain"
    uts_stress: str = "UTS (MPa)"
    uts_strain: str = "UTS Strain"
    fracture_stress: str = "Fracture Stress (MPa)"
    fracture_strain: str = "Fracture Strain"
    toughness: str = "Toughness (MPa·mm)"
    n_points: str = "Data Points"
    reg_slope: str = "Regression slope (Exx/Eyy)"
    reg_intercept: str = "Regression intercept"
    reg_r2: str = "Regression R2"
    reg_slope_se: str = "Regression slope SE"
    reg_slope_ci95: str = "Regression slope 95% CI"
    reg_start_x: str = "Regression start eyy"
    reg_start_y: str = "Regression start exx"
    reg_end_x: str = "Regression end eyy"
    reg_end_y: str = "Regression end exx"


COLUMNS = ResultColumns()
