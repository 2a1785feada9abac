"""
Residue Identification

Given a fixed pole set, solves for the residues and the constant and
s-proportional terms of every channel. All channels share the same
basis, so a single factorization serves every right-hand side.
"""

from typing import Tuple

import numpy as np

from .basis import asymptotic_columns, pole_basis, residues_from_real, solve_least_squares, split_complex
from .samples import SampleSet
from .utils import classify_poles


def identify_residues(samples: SampleSet, poles: np.ndarray,
                      constant_term: bool = True, linear_term: bool = False,
                      rcond: float = 1e-12) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Fit residues, d and h for a fixed pole set.

    Args:
        samples: Sample store
        poles: Poles in canonical order
        constant_term: Fit the constant term d (otherwise d = 0)
        linear_term: Fit the s-proportional term h (otherwise h = 0)
        rcond: Relative singular-value cutoff for rank decisions

    Returns:
        residues: Complex array, shape (n_channels, order)
        d: Real array, shape (n_channels,)
        h: Real array, shape (n_channels,)

    Raises:
        NumericalDegeneracy: If the system is singular
    """
    kinds = classify_poles(poles)
    n_poles = len(poles)
    s = samples.s

    A = np.hstack([pole_basis(s, poles, kinds), asymptotic_columns(s, constant_term, linear_term)])
    b = samples.responses.T

    x = solve_least_squares(split_complex(A), split_complex(b), rcond,
                            "Residue identification system")

    residues = residues_from_real(x[:n_poles].T, kinds)

    n_channels = samples.n_channels
    d = np.zeros(n_channels)
    h = np.zeros(n_channels)
    col = n_poles
    if constant_term:
        d = x[col].copy()
        col += 1
    if linear_term:
        h = x[col].copy()

    return residues, d, h
