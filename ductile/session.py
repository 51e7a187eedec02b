"""Own the dataset and derived results of one upload.

An :class:`AnalysisSession` is the only object a renderer or exporter needs:
it loads text, runs the curve analysis and the strain-gauge regression on
demand, and hands out immutable records. Each call either succeeds and
replaces the stored result, or raises and leaves the stored state exactly as
it was.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from .analysis import analyze_curve, offset_line_points
from .data_processing import RowError, ingest_with_report
from .errors import InsufficientDataError, MissingColumnsError
from .schema import AnalysisResult, Dataset, LinePoint, RegressionResult
from .stats.regression import fit_strain_regression
from .units import DEFAULT_OFFSET_PERCENT, OFFSET_LINE_STEPS

logger = logging.getLogger(__name__)


class AnalysisSession:
    """Analysis state for a single uploaded test file."""

    def __init__(self) -> None:
        self._dataset: Optional[Dataset] = None
        self._row_errors: Tuple[RowError, ...] = ()
        self._result: Optional[AnalysisResult] = None
        self._regression: Optional[RegressionResult] = None

    @property
    def dataset(self) -> Optional[Dataset]:
        return self._dataset

    @property
    def row_errors(self) -> Tuple[RowError, ...]:
        return self._row_errors

    @property
    def result(self) -> Optional[AnalysisResult]:
        return self._result

    @property
    def regression(self) -> Optional[RegressionResult]:
        return self._regression

    def load(self, raw_text: str) -> Dataset:
        """Ingest CSV text and make it the current dataset.

        Results derived from a previous dataset are discarded. On failure the
        ingest error propagates unchanged and nothing is replaced.
        """
        report = ingest_with_report(raw_text)
        logger.info(
            "Session dataset replaced: %d points, %d skipped rows",
            len(report.dataset),
            report.skipped_rows,
        )
        self._dataset = report.dataset
        self._row_errors = report.row_errors
        self._result = None
        self._regression = None
        return report.dataset

    def _require_dataset(self) -> Dataset:
        if self._dataset is None or len(self._dataset) == 0:
            raise InsufficientDataError("No data loaded; load a CSV file first.")
        return self._dataset

    def analyze(
        self,
        offset_percent: float = DEFAULT_OFFSET_PERCENT,
        fracture_method: str = "last",
    ) -> AnalysisResult:
        """Recompute yield, UTS, fracture and toughness from scratch."""
        dataset = self._require_dataset()
        result = analyze_curve(dataset, offset_percent, fracture_method=fracture_method)
        self._result = result
        return result

    def fit_regression(self) -> RegressionResult:
        """Fit exx against eyy for the current dataset.

        Raises:
            InsufficientDataError: If nothing is loaded, or only one point
                carries exx and eyy.
            MissingColumnsError: If no point carries both exx and eyy.
            DegenerateFitError: If every eyy value is identical.
        """
        dataset = self._require_dataset()
        n_gauges = dataset.gauge_count
        if n_gauges == 0:
            raise MissingColumnsError(
                "Regression requires exx and eyy columns; none were found."
            )
        regression = fit_strain_regression(dataset)
        if regression is None:
            raise InsufficientDataError(
                f"Regression requires at least 2 exx/eyy points; found {n_gauges}."
            )
        self._regression = regression
        return regression

    def offset_line(
        self,
        offset_percent: Optional[float] = None,
        steps: int = OFFSET_LINE_STEPS,
    ) -> Tuple[LinePoint, ...]:
        """Sample the offset line, using the last analysis offset by default."""
        dataset = self._require_dataset()
        if offset_percent is None:
            offset_percent = (
                self._result.offset_percent
                if self._result is not None
                else DEFAULT_OFFSET_PERCENT
            )
        return offset_line_points(dataset, offset_percent, steps=steps)
