"""Exception types raised by the ingestion and analysis pipeline.

Every error derives from :class:`ValueError` so callers that already guard
numerical input with ``except ValueError`` keep working.
"""

from __future__ import annotations


class DuctileError(ValueError):
    """Base class for all tensile-analysis errors."""


class IngestError(DuctileError):
    """Raw text could not be turned into a dataset."""


class ParseError(IngestError):
    """CSV text has no data rows, or no row yields a valid sample point."""


class InvalidPointError(DuctileError):
    """A sample point carries neither a strain/stress nor an exx/eyy pair."""


class InsufficientDataError(DuctileError):
    """Too few points for the requested computation."""


class MissingColumnsError(DuctileError):
    """Regression requested but no point carries both exx and eyy."""


class DegenerateFitError(DuctileError):
    """Least-squares denominator is zero (all x values identical)."""
