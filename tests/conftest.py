import matplotlib
matplotlib.use('Agg')

import numpy as np
import pytest

from vector_fitting import RationalModel, SampleSet


def make_samples(model, s):
    """Noiseless samples of a known model at complex frequencies s."""
    return SampleSet(list(zip(s, model.evaluate(s))))


@pytest.fixture
def two_channel_model():
    poles = np.array([-1.0, -0.5 + 5j, -0.5 - 5j])
    residues = np.array([
        [1.0, 0.5 + 1.0j, 0.5 - 1.0j],
        [-2.0, 0.2 - 0.3j, 0.2 + 0.3j],
    ])
    return RationalModel(poles, residues, d=[0.1, -0.2], h=[0.0, 0.0])


@pytest.fixture
def two_channel_samples(two_channel_model):
    s = 1j * np.geomspace(0.1, 10, 101)
    return make_samples(two_channel_model, s)


@pytest.fixture
def first_order_samples():
    """Three samples of 1/(s + 1) at s = 1j, 2j, 3j."""
    s = np.array([1j, 2j, 3j])
    return SampleSet([(si, [1.0 / (si + 1.0)]) for si in s])


@pytest.fixture
def delayed_samples():
    """Two channels of a delayed low-pass response; not exactly rational."""
    s = 1j * np.linspace(0.1, 10, 120)
    responses = np.vstack([
        np.exp(-0.2 * s) / (s + 1.0),
        np.exp(-0.1 * s) / (s ** 2 + 0.8 * s + 16.0),
    ])
    return SampleSet(list(zip(s, responses.T)))
