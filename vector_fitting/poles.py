"""
Pole Identification

Relocates a pole set by fitting the auxiliary weighting function

    sigma(s) = 1 + sum_k c_k / (s - p_k)

such that sigma(s) * f(s) is well described by a rational function with
the current poles, for every channel at once. The zeros of sigma are the
relocated poles.

Channels are coupled only through the shared sigma coefficients, so each
channel's block is first reduced by a QR factorization and only the rows
that involve sigma are stacked into the final least-squares problem
(Deschrijver et al., "Macromodeling of Multiport Systems Using a Fast
Implementation of the Vector Fitting Method", IEEE MWCL 2008).
"""

import logging

import numpy as np
from scipy.linalg import LinAlgError, eigvals, qr

from .basis import asymptotic_columns, check_finite, pole_basis, solve_least_squares, split_complex
from .errors import NumericalDegeneracy
from .samples import SampleSet
from .utils import PAIR_FIRST, REAL_POLE, canonical_pole_order, chop, classify_poles, flip_unstable

logger = logging.getLogger(__name__)


def initial_poles(samples: SampleSet, order: int, spacing: str = 'log') -> np.ndarray:
    """
    Generate starting poles spread over the sample frequency range.

    Complex conjugate pairs -beta/100 +/- j*beta are placed with beta
    log- or linearly spaced across [|s|_min, |s|_max]. An odd order adds
    one real pole at the geometric mean of the range.

    Args:
        samples: Sample store
        order: Number of poles
        spacing: 'log' or 'lin'

    Returns:
        Starting poles in canonical order
    """
    w_min, w_max = samples.frequency_range()
    n_pairs = order // 2
    n_real = order % 2

    if spacing == 'log':
        betas = np.geomspace(w_min, w_max, n_pairs)
    elif spacing == 'lin':
        betas = np.linspace(w_min, w_max, n_pairs)
    else:
        raise ValueError(f"Invalid pole spacing '{spacing}'. Valid options: ['log', 'lin']")

    poles = []
    if n_real:
        poles.append(-np.sqrt(w_min * w_max) + 0j)
    for beta in betas:
        alpha = beta / 100
        poles.append(-alpha + 1j * beta)
        poles.append(-alpha - 1j * beta)

    return canonical_pole_order(poles)


def sigma_state_matrix(poles: np.ndarray, kinds: np.ndarray, coefficients: np.ndarray) -> np.ndarray:
    """
    Real state matrix whose eigenvalues are the zeros of sigma.

    With sigma(s) = 1 + c^T (sI - A)^-1 b, the zeros are eig(A - b c^T).
    Conjugate pairs use the real 2x2 block [[a, w], [-w, a]] with
    b = [2, 0].
    """
    n = len(poles)
    A = np.zeros((n, n))
    b = np.ones(n)
    for k, p in enumerate(poles):
        if kinds[k] == REAL_POLE:
            A[k, k] = p.real
        elif kinds[k] == PAIR_FIRST:
            A[k, k] = A[k + 1, k + 1] = p.real
            A[k, k + 1] = p.imag
            A[k + 1, k] = -p.imag
            b[k] = 2.0
            b[k + 1] = 0.0
    return A - np.outer(b, coefficients)


def identify_poles(samples: SampleSet, poles: np.ndarray,
                   constant_term: bool = True, linear_term: bool = False,
                   enforce_stability: bool = True, rcond: float = 1e-12) -> np.ndarray:
    """
    Relocate poles for one vector fitting iteration.

    Args:
        samples: Sample store
        poles: Current poles in canonical order
        constant_term: Include the constant column in the per-channel fit
        linear_term: Include the s-proportional column in the per-channel fit
        enforce_stability: Reflect relocated poles with positive real part
        rcond: Relative singular-value cutoff for rank decisions

    Returns:
        Relocated poles in canonical order, same count as the input

    Raises:
        NumericalDegeneracy: If the system is singular or the eigenvalue
                             problem cannot be solved
    """
    kinds = classify_poles(poles)
    s = samples.s
    n_poles = len(poles)

    phi = pole_basis(s, poles, kinds)
    check_finite(phi, "Pole identification basis")

    # Common column scaling; the sigma block reuses the pole column norms
    # so its unknowns are scaled identically for every channel.
    phi_norms = np.linalg.norm(split_complex(phi), axis=0)
    phi_norms[phi_norms == 0] = 1.0
    phi = phi / phi_norms

    asym = asymptotic_columns(s, constant_term, linear_term)
    asym_norms = np.linalg.norm(split_complex(asym), axis=0)
    asym_norms[asym_norms == 0] = 1.0
    fit_block = np.hstack([phi, asym / asym_norms])
    n_fit = fit_block.shape[1]

    reduced_rows = []
    reduced_rhs = []
    for channel, f in enumerate(samples.responses):
        A = split_complex(np.hstack([fit_block, -f[:, np.newaxis] * phi]))
        b = split_complex(f)

        try:
            Q, R = qr(A, mode='economic')
        except (LinAlgError, ValueError) as e:
            raise NumericalDegeneracy(f"QR factorization failed for channel {channel}: {e}") from e

        diag = np.abs(np.diag(R[:n_fit, :n_fit]))
        if len(diag) < n_fit or diag.min() <= rcond * diag.max():
            raise NumericalDegeneracy(
                f"Pole identification basis is rank-deficient for channel {channel}"
            )

        reduced_rows.append(R[n_fit:, n_fit:])
        reduced_rhs.append(Q[:, n_fit:].T @ b)

    AA = np.vstack(reduced_rows)
    bb = np.concatenate(reduced_rhs)
    if AA.shape[0] == 0:
        raise NumericalDegeneracy(
            f"Pole identification is underdetermined: {2 * samples.n_samples} equations "
            f"per channel for {n_fit + n_poles} unknowns"
        )

    coefficients = solve_least_squares(AA, bb, rcond, "Pole identification system") / phi_norms

    state = sigma_state_matrix(poles, kinds, coefficients)
    try:
        zeros = eigvals(state)
    except (LinAlgError, ValueError) as e:
        raise NumericalDegeneracy(f"Eigenvalue computation for sigma zeros failed: {e}") from e
    if not np.all(np.isfinite(zeros)):
        raise NumericalDegeneracy("Sigma zeros are not finite")

    new_poles = chop(zeros)
    if enforce_stability:
        new_poles, n_flipped = flip_unstable(new_poles)
        if n_flipped:
            logger.debug(f"Flipped {n_flipped} unstable pole(s) to the left half-plane")

    return canonical_pole_order(new_poles)
