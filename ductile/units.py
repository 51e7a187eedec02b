"""Unit labels, defaults and small conversions used across the package."""

from __future__ import annotations

STRESS_UNIT = "MPa"
TOUGHNESS_UNIT = "MPa·mm"

DEFAULT_OFFSET_PERCENT = 0.2
OFFSET_LINE_STEPS = 100
FRACTURE_DROP_FRACTION = 0.7
REPORT_DECIMALS = 6


def percent_to_fraction(percent: float) -> float:
    """Convert a strain percentage (``0.2`` meaning 0.2 %) to a fraction."""
    return float(percent) / 100.0
