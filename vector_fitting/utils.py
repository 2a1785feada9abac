"""
Utility Functions for Vector Fitting

Argument validation and pole bookkeeping shared by the fitting stages.

Poles are always kept in canonical order: real poles first (sorted by
magnitude), then complex poles as adjacent conjugate pairs, the member
with positive imaginary part first. Both stages rely on this layout to
build their real-valued bases.
"""

from typing import Tuple

import numpy as np

from .errors import ConfigurationError

# Pole kinds as used by the basis construction
REAL_POLE = 0
PAIR_FIRST = 1
PAIR_SECOND = 2

# Relative imaginary part below which a pole is considered real
REAL_POLE_TOL = 1e-12


def validate_order(order) -> int:
    """
    Validate the approximation order.

    Args:
        order: Number of poles requested

    Returns:
        The order as a Python int

    Raises:
        ConfigurationError: If order is not a positive integer
    """
    if isinstance(order, bool) or not isinstance(order, (int, np.integer)):
        raise ConfigurationError(f"order must be an integer, got {order!r}")
    if order < 1:
        raise ConfigurationError(f"order must be at least 1, got {order}")
    return int(order)


def validate_positive_int(value, name: str, minimum: int = 1) -> int:
    """Validate an integer option with a lower bound."""
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {value}")
    return int(value)


def validate_positive_float(value, name: str) -> float:
    """Validate a strictly positive, finite float option."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None
    if not np.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{name} must be positive and finite, got {value}")
    return value


def chop(poles: np.ndarray, tol: float = REAL_POLE_TOL) -> np.ndarray:
    """
    Zero out negligible imaginary parts.

    Args:
        poles: Complex pole array
        tol: Relative tolerance on |imag| / |pole|

    Returns:
        Copy of poles with near-real entries made exactly real
    """
    poles = np.array(poles, dtype=complex)
    near_real = np.abs(poles.imag) <= tol * np.abs(poles)
    poles[near_real] = poles[near_real].real
    return poles


def canonical_pole_order(poles, tol: float = 1e-8) -> np.ndarray:
    """
    Arrange poles in canonical order with exact conjugate pairs.

    Every pole with positive imaginary part must have a partner with
    negative imaginary part matching its conjugate to within ``tol``
    (relative). The returned pairs are made exactly conjugate.

    Args:
        poles: Pole set (any order)
        tol: Relative tolerance for matching conjugate partners

    Returns:
        Pole array in canonical order, same length as the input

    Raises:
        ValueError: If a complex pole has no conjugate partner
    """
    poles = chop(np.atleast_1d(np.asarray(poles, dtype=complex)))

    real = poles[poles.imag == 0].real
    upper = poles[poles.imag > 0]
    lower = poles[poles.imag < 0]

    if len(upper) != len(lower):
        raise ValueError(
            f"Complex poles must come in conjugate pairs: "
            f"{len(upper)} with positive and {len(lower)} with negative imaginary part"
        )

    upper = upper[np.lexsort((upper.real, upper.imag))]
    partners = np.conj(lower)
    partners = partners[np.lexsort((partners.real, partners.imag))]

    scale = np.maximum(np.abs(upper), 1.0)
    if np.any(np.abs(upper - partners) > tol * scale):
        raise ValueError(f"Complex poles must come in conjugate pairs: {poles}")

    ordered = list(real[np.argsort(np.abs(real))].astype(complex))
    for p in upper:
        ordered.append(p)
        ordered.append(np.conj(p))

    return np.array(ordered, dtype=complex)


def classify_poles(poles: np.ndarray) -> np.ndarray:
    """
    Tag each pole of a canonically ordered pole set.

    Returns:
        Integer array: REAL_POLE, PAIR_FIRST or PAIR_SECOND per pole
    """
    kinds = np.full(len(poles), REAL_POLE, dtype=int)
    i = 0
    while i < len(poles):
        if poles[i].imag != 0:
            if i + 1 >= len(poles) or poles[i + 1] != np.conj(poles[i]):
                raise ValueError(f"Pole {poles[i]} is not followed by its conjugate")
            kinds[i] = PAIR_FIRST
            kinds[i + 1] = PAIR_SECOND
            i += 2
        else:
            i += 1
    return kinds


def flip_unstable(poles: np.ndarray) -> Tuple[np.ndarray, int]:
    """
    Reflect poles in the right half-plane to the left half-plane.

    Args:
        poles: Pole array

    Returns:
        Tuple of (stabilized poles, number of poles flipped)
    """
    stable = np.array(poles, dtype=complex)
    unstable = stable.real > 0
    stable[unstable] = -stable[unstable].real + 1j * stable[unstable].imag
    return stable, int(np.count_nonzero(unstable))


def relative_displacement(old_poles: np.ndarray, new_poles: np.ndarray) -> float:
    """
    Maximum pole movement relative to the size of the old pole set.

    Both sets are expected in canonical order.
    """
    change = np.max(np.abs(np.asarray(new_poles) - np.asarray(old_poles)))
    return float(change / (np.max(np.abs(old_poles)) + 1e-10))
