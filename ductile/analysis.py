"""
Tensile stress-strain curve analysis.

This module estimates, from an ordered stress-strain series:
- Elastic modulus E as the secant slope between the second and third curve
  points (the first point is skipped to avoid initial seating noise).
- Offset yield strength as the first intersection, scanning in row order, of
  the offset line ``stress = E * (strain - offset)`` with the piecewise-linear
  curve. The intersection is solved exactly for the crossing segment.
- Ultimate tensile strength (UTS) as the maximum recorded stress, earliest
  occurrence on ties.
- Fracture point as the last recorded point (``method="last"``), or as the
  last point after UTS before stress falls below a fraction of UTS
  (``method="stress_drop"``).
- Toughness as the trapezoidal area under the curve in row order.

All functions are pure: they read a :class:`~ductile.schema.Dataset` and
return new records. Only points carrying both strain and stress take part;
reported indices are positions in the full dataset.
"""

from __future__ import annotations

import logging
import math
import warnings
from typing import Optional, Tuple

import numpy as np

from .errors import InsufficientDataError
from .schema import AnalysisResult, CurvePoint, Dataset, LinePoint
from .units import (
    DEFAULT_OFFSET_PERCENT,
    FRACTURE_DROP_FRACTION,
    OFFSET_LINE_STEPS,
    percent_to_fraction,
)

logger = logging.getLogger(__name__)

FRACTURE_METHODS = ("last", "stress_drop")
MIN_YIELD_POINTS = 3


def _curve(dataset: Dataset) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    return dataset.curve_arrays()


def compute_elastic_modulus(dataset: Dataset) -> float:
    """Return the secant slope between the second and third curve points.

    Args:
        dataset (Dataset): Ordered sample points.

    Returns:
        float: Elastic modulus in MPa, or ``nan`` when both points share the
        same strain.

    Raises:
        InsufficientDataError: If fewer than three curve points exist.
    """
    _, strain, stress = _curve(dataset)
    if len(strain) < MIN_YIELD_POINTS:
        raise InsufficientDataError(
            f"At least {MIN_YIELD_POINTS} strain/stress points are required for "
            f"the elastic modulus; found {len(strain)}."
        )
    d_strain = float(strain[2] - strain[1])
    if d_strain == 0:
        return math.nan
    return float(stress[2] - stress[1]) / d_strain


def _segment_intersection(
    p1: Tuple[float, float], p2: Tuple[float, float], modulus: float, offset: float
) -> Optional[Tuple[float, float]]:
    """Intersect the segment p1-p2 (as a full line) with the offset line."""
    x1, y1 = p1
    x2, y2 = p2
    if x2 == x1:
        # Vertical segment: the crossing sits at the segment's strain.
        return x1, modulus * (x1 - offset)

    m1 = (y2 - y1) / (x2 - x1)
    m2 = modulus
    if m1 == m2:
        return None
    x = (m1 * x1 - y1 - m2 * offset) / (m1 - m2)
    return x, m2 * (x - offset)


def compute_yield_point(
    dataset: Dataset, offset_percent: float = DEFAULT_OFFSET_PERCENT
) -> Optional[CurvePoint]:
    r"""Locate the offset yield point.

    The offset line :math:`\sigma = E(\varepsilon - \varepsilon_{off})` is
    compared with the curve at both ends of each consecutive segment. The
    first segment, scanning left to right, where the signed difference
    (curve minus line) changes sign or touches zero is the crossing segment;
    later crossings are never considered.

    Args:
        dataset (Dataset): Ordered sample points.
        offset_percent (float): Offset strain in percent (``0.2`` = 0.2 %).

    Returns:
        CurvePoint | None: Exact intersection with ``index`` set to the
        dataset position of the segment's end point, or ``None`` if the
        offset line never crosses the curve, the crossing segment is parallel
        to the offset line, or the elastic modulus is undefined.

    Raises:
        InsufficientDataError: If fewer than three curve points exist.
    """
    modulus = compute_elastic_modulus(dataset)
    if not math.isfinite(modulus):
        warnings.warn(
            "Elastic modulus is undefined (second and third points share the "
            "same strain); yield point cannot be located.",
            UserWarning,
            stacklevel=2,
        )
        return None

    offset = percent_to_fraction(offset_percent)
    indices, strain, stress = _curve(dataset)
    diff = stress - modulus * (strain - offset)

    for i in range(1, len(strain)):
        d1, d2 = diff[i - 1], diff[i]
        if not ((d1 <= 0 and d2 >= 0) or (d1 >= 0 and d2 <= 0)):
            continue
        hit = _segment_intersection(
            (float(strain[i - 1]), float(stress[i - 1])),
            (float(strain[i]), float(stress[i])),
            modulus,
            offset,
        )
        if hit is None:
            logger.debug("Crossing segment %d is parallel to the offset line", i)
            return None
        return CurvePoint(strain=float(hit[0]), stress=float(hit[1]), index=int(indices[i]))

    return None


def find_uts(dataset: Dataset) -> CurvePoint:
    """Return the point of maximum stress; the earliest one wins on ties.

    Raises:
        InsufficientDataError: If the dataset has no strain/stress points.
    """
    indices, strain, stress = _curve(dataset)
    if len(stress) == 0:
        raise InsufficientDataError("Cannot find UTS in an empty dataset.")
    # argmax returns the first occurrence of the maximum.
    pos = int(np.argmax(stress))
    return CurvePoint(strain=float(strain[pos]), stress=float(stress[pos]), index=int(indices[pos]))


def find_fracture_point(
    dataset: Dataset,
    uts_point: CurvePoint,
    method: str = "last",
    drop_fraction: float = FRACTURE_DROP_FRACTION,
) -> CurvePoint:
    """Return the fracture point.

    Args:
        dataset (Dataset): Ordered sample points.
        uts_point (CurvePoint): Result of :func:`find_uts`.
        method (str): ``"last"`` (default) returns the last recorded point
            regardless of the stress trend. ``"stress_drop"`` walks forward
            from the UTS point and returns the last point whose stress is
            still at least ``drop_fraction * UTS``; the final point is the
            fallback when the walk never starts.
        drop_fraction (float): Fraction of UTS used by ``"stress_drop"``.

    Raises:
        InsufficientDataError: If the dataset has no strain/stress points.
        ValueError: If ``method`` is unknown.
    """
    if method not in FRACTURE_METHODS:
        raise ValueError(f"method must be one of {FRACTURE_METHODS}, got {method!r}")

    indices, strain, stress = _curve(dataset)
    n = len(stress)
    if n == 0:
        raise InsufficientDataError("Cannot find a fracture point in an empty dataset.")

    pos = n - 1
    if method == "stress_drop":
        threshold = uts_point.stress * drop_fraction
        start = int(np.searchsorted(indices, uts_point.index))
        # The final point is only reached through the fallback above.
        for i in range(start, n - 1):
            if stress[i] < threshold:
                break
            pos = i

    return CurvePoint(strain=float(strain[pos]), stress=float(stress[pos]), index=int(indices[pos]))


def calculate_toughness(dataset: Dataset) -> float:
    """Integrate stress over strain with the trapezoidal rule.

    Points are taken in row order; strain is not sorted or checked for
    monotonicity, so a strain reversal contributes negative area.

    Returns:
        float: Area under the curve in MPa·mm, ``0.0`` for fewer than two
        curve points.
    """
    _, strain, stress = _curve(dataset)
    if len(strain) < 2:
        return 0.0
    widths = np.diff(strain)
    heights = (stress[1:] + stress[:-1]) / 2.0
    return float(np.sum(widths * heights))


def offset_line_points(
    dataset: Dataset,
    offset_percent: float = DEFAULT_OFFSET_PERCENT,
    steps: int = OFFSET_LINE_STEPS,
) -> Tuple[LinePoint, ...]:
    """Sample the offset line for plotting.

    Strain runs from the offset up to the maximum recorded strain in
    increments of ``max_strain / steps``; only samples with non-negative
    stress are kept.

    Raises:
        ValueError: If ``steps`` is less than 1.
    """
    if steps < 1:
        raise ValueError(f"steps must be >= 1; got {steps}.")
    modulus = compute_elastic_modulus(dataset)
    _, strain, _ = _curve(dataset)
    max_strain = float(np.max(strain))
    offset = percent_to_fraction(offset_percent)
    if not math.isfinite(modulus) or max_strain <= 0 or offset > max_strain:
        return ()

    step = max_strain / steps
    count = int(math.floor((max_strain - offset) / step + 1e-9)) + 1
    xs = offset + step * np.arange(count)
    ys = modulus * (xs - offset)
    return tuple(LinePoint(float(x), float(y)) for x, y in zip(xs, ys) if y >= 0)


def analyze_curve(
    dataset: Dataset,
    offset_percent: float = DEFAULT_OFFSET_PERCENT,
    fracture_method: str = "last",
) -> AnalysisResult:
    """Run the full curve analysis as one atomic step.

    Args:
        dataset (Dataset): Ordered sample points.
        offset_percent (float): Offset strain in percent.
        fracture_method (str): Passed to :func:`find_fracture_point`.

    Returns:
        AnalysisResult: Yield (possibly ``None``), UTS and fracture points,
        toughness and the elastic modulus used.

    Raises:
        InsufficientDataError: If fewer than three curve points exist.
    """
    n_curve = dataset.curve_count
    if n_curve < MIN_YIELD_POINTS:
        raise InsufficientDataError(
            f"Analysis requires at least {MIN_YIELD_POINTS} strain/stress points; "
            f"found {n_curve}."
        )

    modulus = compute_elastic_modulus(dataset)
    yield_point = compute_yield_point(dataset, offset_percent)
    uts_point = find_uts(dataset)
    fracture_point = find_fracture_point(dataset, uts_point, method=fracture_method)
    toughness = calculate_toughness(dataset)

    if yield_point is None:
        logger.warning(
            "No offset yield intersection found for %.4g%% offset", offset_percent
        )
    logger.info(
        "Analysis complete: E=%.6g MPa, UTS=%.6f MPa, toughness=%.6f",
        modulus,
        uts_point.stress,
        toughness,
    )

    return AnalysisResult(
        yield_point=yield_point,
        uts_point=uts_point,
        fracture_point=fracture_point,
        toughness=toughness,
        offset_percent=float(offset_percent),
        elastic_modulus=modulus,
        n_points=len(dataset),
    )
