import numpy as np
import pytest

from vector_fitting.errors import ConfigurationError
from vector_fitting.utils import (
    PAIR_FIRST, PAIR_SECOND, REAL_POLE,
    canonical_pole_order, chop, classify_poles, flip_unstable,
    relative_displacement, validate_order,
)


def test_canonical_order_puts_real_poles_first():
    poles = canonical_pole_order([-1 - 2j, -3.0, -1 + 2j, -0.5])

    np.testing.assert_array_equal(poles, [-0.5, -3.0, -1 + 2j, -1 - 2j])


def test_canonical_order_makes_pairs_exact():
    poles = canonical_pole_order([-1 + 2j, -1 - 2j * (1 + 1e-12)])
    assert poles[1] == np.conj(poles[0])


def test_canonical_order_rejects_unpaired_pole():
    with pytest.raises(ValueError):
        canonical_pole_order([-1 + 2j, -3.0])
    with pytest.raises(ValueError):
        canonical_pole_order([-1 + 2j, -1 - 3j])


def test_classify_poles():
    kinds = classify_poles(np.array([-2.0, -1 + 1j, -1 - 1j, -3 + 5j, -3 - 5j]))
    np.testing.assert_array_equal(
        kinds, [REAL_POLE, PAIR_FIRST, PAIR_SECOND, PAIR_FIRST, PAIR_SECOND]
    )


def test_classify_poles_requires_adjacent_conjugate():
    with pytest.raises(ValueError):
        classify_poles(np.array([-1 + 1j, -2.0, -1 - 1j]))


def test_chop_removes_negligible_imaginary_part():
    poles = chop([-1.0 + 1e-15j, -1.0 + 1e-3j])
    assert poles[0].imag == 0
    assert poles[1].imag == 1e-3


def test_flip_unstable():
    poles, n_flipped = flip_unstable(np.array([2.0 + 1j, -1.0, 0.5]))

    assert n_flipped == 2
    np.testing.assert_array_equal(poles, [-2.0 + 1j, -1.0, -0.5])


def test_relative_displacement():
    old = np.array([-1.0, -2.0])
    new = np.array([-1.0, -2.2])
    assert relative_displacement(old, new) == pytest.approx(0.1, rel=1e-6)


@pytest.mark.parametrize("order", [0, -1, 1.5, True, "3"])
def test_validate_order_rejects(order):
    with pytest.raises(ConfigurationError):
        validate_order(order)
