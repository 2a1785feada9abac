"""
Vector Fitting - Rational Approximation of Frequency-Domain Data

Fits complex frequency-response samples (one or more channels sharing a
common pole set) with a pole-residue model

    H(s) = sum_k r_k / (s - p_k) + d + s*h

using the iterative pole relocation scheme of Gustavsen and Semlyen.
The fitted model is real-valued in the time domain: complex poles and
residues always come in conjugate pairs.

Version: 1.0.0
Author: SerDes SystemC Project Team
"""

# Fitting orchestrator
from .core import VectorFitting, FitState, IterationRecord, vector_fit

# Data containers
from .samples import Sample, SampleSet
from .model import RationalModel

# Individual stages (pure functions of poles and samples)
from .poles import identify_poles, initial_poles
from .residues import identify_residues

# Errors
from .errors import (
    VectorFittingError,
    ConfigurationError,
    NumericalDegeneracy,
    ModelNotFitted,
)

# Visualization utilities
from .visualization import plot_fit, plot_convergence

__version__ = "1.0.0"
__all__ = [
    # Fitting
    "VectorFitting",
    "FitState",
    "IterationRecord",
    "vector_fit",

    # Data
    "Sample",
    "SampleSet",
    "RationalModel",

    # Stages
    "identify_poles",
    "initial_poles",
    "identify_residues",

    # Errors
    "VectorFittingError",
    "ConfigurationError",
    "NumericalDegeneracy",
    "ModelNotFitted",

    # Visualization
    "plot_fit",
    "plot_convergence",
]
