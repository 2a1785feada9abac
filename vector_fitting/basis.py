"""
Partial-fraction basis and real-valued least squares.

Both fitting stages describe the response on the same basis: one column
1/(s - p) per real pole and, for a conjugate pair (p, p*), the two real
combinations

    1/(s - p) + 1/(s - p*)        and        j/(s - p) - j/(s - p*)

so that the unknown coefficients are real and the pair residues come
out exactly conjugate. Complex rows are split into real and imaginary
halves before solving with a real-valued LAPACK driver.
"""

import logging

import numpy as np
from scipy.linalg import LinAlgError, lstsq

from .errors import NumericalDegeneracy
from .utils import PAIR_FIRST, PAIR_SECOND, REAL_POLE

logger = logging.getLogger(__name__)


def pole_basis(s: np.ndarray, poles: np.ndarray, kinds: np.ndarray) -> np.ndarray:
    """
    Build the partial-fraction columns for a canonically ordered pole set.

    Args:
        s: Complex frequency array, shape (n_samples,)
        poles: Pole array in canonical order, shape (order,)
        kinds: Pole kinds from classify_poles()

    Returns:
        Complex matrix of shape (n_samples, order)
    """
    phi = np.zeros((len(s), len(poles)), dtype=complex)
    with np.errstate(divide='ignore', invalid='ignore'):
        for k, p in enumerate(poles):
            if kinds[k] == REAL_POLE:
                phi[:, k] = 1.0 / (s - p)
            elif kinds[k] == PAIR_FIRST:
                phi[:, k] = 1.0 / (s - p) + 1.0 / (s - np.conj(p))
            elif kinds[k] == PAIR_SECOND:
                q = poles[k - 1]
                phi[:, k] = 1j / (s - q) - 1j / (s - np.conj(q))
            else:
                raise RuntimeError(f"kinds[{k}] = {kinds[k]}")
    return phi


def asymptotic_columns(s: np.ndarray, constant_term: bool, linear_term: bool) -> np.ndarray:
    """Constant and s-proportional columns, as enabled."""
    columns = []
    if constant_term:
        columns.append(np.ones(len(s), dtype=complex))
    if linear_term:
        columns.append(np.asarray(s, dtype=complex))
    if not columns:
        return np.zeros((len(s), 0), dtype=complex)
    return np.column_stack(columns)


def split_complex(values: np.ndarray) -> np.ndarray:
    """Stack real parts on top of imaginary parts along the first axis."""
    return np.concatenate([values.real, values.imag], axis=0)


def residues_from_real(coefficients: np.ndarray, kinds: np.ndarray) -> np.ndarray:
    """
    Convert real basis coefficients back to complex residues.

    Args:
        coefficients: Real coefficients, last axis of length order
        kinds: Pole kinds from classify_poles()

    Returns:
        Complex residues with the same shape as coefficients
    """
    coefficients = np.asarray(coefficients, dtype=float)
    residues = coefficients.astype(complex)
    for k, kind in enumerate(kinds):
        if kind == PAIR_FIRST:
            re = coefficients[..., k]
            im = coefficients[..., k + 1]
            residues[..., k] = re + 1j * im
            residues[..., k + 1] = re - 1j * im
    return residues


def check_finite(matrix: np.ndarray, what: str) -> None:
    """Raise NumericalDegeneracy if matrix holds inf or nan."""
    if not np.all(np.isfinite(matrix)):
        raise NumericalDegeneracy(
            f"{what} contains non-finite entries (a pole coincides with a sample frequency?)"
        )


def solve_least_squares(A: np.ndarray, b: np.ndarray, rcond: float, what: str) -> np.ndarray:
    """
    Solve a real overdetermined system in the least-squares sense.

    Columns are scaled to unit norm before the SVD-based solve, and the
    numerical rank is checked against the number of unknowns.

    Args:
        A: Real system matrix, shape (rows, unknowns)
        b: Right-hand side, shape (rows,) or (rows, n_rhs)
        rcond: Relative singular-value cutoff
        what: Description used in error messages

    Returns:
        Solution with shape (unknowns,) or (unknowns, n_rhs)

    Raises:
        NumericalDegeneracy: If the system is rank-deficient or the solve fails
    """
    check_finite(A, what)
    check_finite(b, what)

    n_unknowns = A.shape[1]
    if A.shape[0] < n_unknowns:
        raise NumericalDegeneracy(
            f"{what} is underdetermined: {A.shape[0]} equations for {n_unknowns} unknowns"
        )

    col_norms = np.linalg.norm(A, axis=0)
    col_norms[col_norms == 0] = 1.0
    A_scaled = A / col_norms

    try:
        x, _, rank, sv = lstsq(A_scaled, b, cond=rcond, lapack_driver='gelsd')
    except (LinAlgError, ValueError) as e:
        raise NumericalDegeneracy(f"{what}: least-squares solve failed: {e}") from e

    if rank < n_unknowns:
        raise NumericalDegeneracy(
            f"{what} is rank-deficient: rank {rank} < {n_unknowns} unknowns"
        )

    if len(sv) > 0 and sv[-1] > 0:
        logger.debug(f"{what}: condition number {sv[0] / sv[-1]:.2e}")

    if x.ndim == 1:
        return x / col_norms
    return x / col_norms[:, np.newaxis]
