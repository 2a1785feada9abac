import numpy as np
import pytest

from vector_fitting import RationalModel


@pytest.fixture
def model():
    poles = np.array([-3.0, -1 + 4j, -1 - 4j])
    residues = np.array([[2.0, 0.5 - 0.5j, 0.5 + 0.5j]])
    return RationalModel(poles, residues, d=[0.25], h=[0.0])


def test_evaluate_scalar_and_array(model):
    s = 2j
    expected = 2.0 / (s + 3) + (0.5 - 0.5j) / (s + 1 - 4j) + (0.5 + 0.5j) / (s + 1 + 4j) + 0.25

    assert model.evaluate(s).shape == (1,)
    assert model.evaluate(s)[0] == pytest.approx(expected)
    assert model.evaluate(np.array([s, 3j])).shape == (2, 1)
    assert model.evaluate(np.array([s, 3j]))[0, 0] == pytest.approx(model.evaluate(s)[0], rel=1e-14)


def test_real_valued_on_real_axis(model):
    values = model.evaluate(np.array([0.0, 0.5, 7.0]))
    np.testing.assert_allclose(values.imag, 0.0, atol=1e-14)


def test_evaluate_frequency(model):
    freq = np.array([0.1, 1.0])
    np.testing.assert_array_equal(model.evaluate_frequency(freq),
                                  model.evaluate(1j * 2 * np.pi * freq))


def test_dc_gain(model):
    assert model.dc_gain()[0] == pytest.approx(model.evaluate(0.0)[0].real)


def test_polynomial_coefficients_match_pole_residue_form(model):
    num, den = model.polynomial_coefficients()
    s = 1j * np.array([0.3, 1.0, 5.0])

    assert den[0] == 1.0
    assert num.shape == (1, 4)
    np.testing.assert_allclose(np.polyval(num[0], s) / np.polyval(den, s),
                               model.evaluate(s)[:, 0], rtol=1e-10)


def test_polynomial_coefficients_with_linear_term():
    model = RationalModel([-2.0], [[1.0]], d=[0.5], h=[0.1])
    num, den = model.polynomial_coefficients()
    s = 1j * np.array([0.5, 2.0])

    assert num.shape == (1, 3)
    np.testing.assert_allclose(np.polyval(num[0], s) / np.polyval(den, s),
                               model.evaluate(s)[:, 0], rtol=1e-12)


def test_model_is_immutable(model):
    with pytest.raises(ValueError):
        model.poles[0] = 0
    with pytest.raises(ValueError):
        model.residues[0, 0] = 0


def test_shape_validation():
    with pytest.raises(ValueError):
        RationalModel([-1.0, -2.0], [[1.0]], d=[0.0], h=[0.0])
    with pytest.raises(ValueError):
        RationalModel([-1.0], [[1.0], [2.0]], d=[0.0], h=[0.0])
