"""
A Python package for analyzing uniaxial tensile test data.

Determines offset yield strength, ultimate tensile strength, fracture point,
toughness and the exx/eyy strain-gauge regression slope from CSV exports.

Modules:
    - data_processing: Parses CSV text into ordered sample points.
    - analysis: Yield, UTS, fracture and toughness from a stress-strain curve.
    - stats: Least-squares regression of exx on eyy.
    - session: Owns one upload and its derived results.
    - reporting: Formats results as labelled text and result tables.
    - output: Saves result tables to CSV.
"""

__version__ = "1.0.0"

from .analysis import (
    analyze_curve,
    calculate_toughness,
    compute_elastic_modulus,
    compute_yield_point,
    find_fracture_point,
    find_uts,
    offset_line_points,
)
from .data_processing import (
    dataset_to_csv,
    detect_layout,
    ingest,
    ingest_with_report,
    load_tensile_data,
)
from .errors import (
    DegenerateFitError,
    DuctileError,
    IngestError,
    InsufficientDataError,
    InvalidPointError,
    MissingColumnsError,
    ParseError,
)
from .schema import (
    AnalysisResult,
    ColumnLayout,
    CurvePoint,
    Dataset,
    LinePoint,
    RegressionResult,
    SamplePoint,
)
from .session import AnalysisSession
from .stats import fit_strain_regression

__all__ = [
    # Data processing
    "ingest",
    "ingest_with_report",
    "detect_layout",
    "load_tensile_data",
    "dataset_to_csv",
    # Analysis
    "compute_elastic_modulus",
    "compute_yield_point",
    "find_uts",
    "find_fracture_point",
    "calculate_toughness",
    "offset_line_points",
    "analyze_curve",
    "fit_strain_regression",
    # Session
    "AnalysisSession",
    # Records
    "SamplePoint",
    "Dataset",
    "ColumnLayout",
    "CurvePoint",
    "LinePoint",
    "RegressionResult",
    "AnalysisResult",
    # Errors
    "DuctileError",
    "IngestError",
    "ParseError",
    "InvalidPointError",
    "InsufficientDataError",
    "MissingColumnsError",
    "DegenerateFitError",
]
