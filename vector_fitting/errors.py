"""
Exception types raised by the vector fitting engine.
"""


class VectorFittingError(Exception):
    """Base class for all vector fitting errors."""


class ConfigurationError(VectorFittingError, ValueError):
    """
    Invalid constructor arguments: empty sample set, mismatched channel
    counts, non-finite data, bad order or starting poles.

    Raised before any matrix work is done.
    """


class NumericalDegeneracy(VectorFittingError, ArithmeticError):
    """
    A least-squares system or eigenvalue problem could not be solved
    reliably (rank-deficient, non-finite entries, LAPACK failure).
    """


class ModelNotFitted(VectorFittingError, RuntimeError):
    """Evaluation was requested before a successful fit()."""
