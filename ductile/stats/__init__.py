"""
Statistical utilities for tensile analysis.

This subpackage provides numerical routines for regression analysis. All
functions operate on arrays or on a :class:`~ductile.schema.Dataset`; no
curve-specific logic (yield, UTS, fracture) is included.

Modules:
    regression:
        Closed-form ordinary least squares with standard errors and
        confidence intervals, and the exx-on-eyy strain-gauge fit.

Design Principle:
    This subpackage depends only on ``ductile.schema`` and
    ``ductile.errors``. It can be tested independently of the curve analysis.
"""

from .regression import fit_strain_regression, linear_regression

__all__ = [
    "fit_strain_regression",
    "linear_regression",
]
