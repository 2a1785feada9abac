import numpy as np
import pytest

from vector_fitting import ConfigurationError, Sample, SampleSet


def test_sample_set_shapes():
    samples = SampleSet([(1j, [1.0, 2.0]), (2j, [3.0, 4.0]), (3j, [5.0, 6.0])])

    assert samples.n_samples == 3
    assert samples.n_channels == 2
    assert len(samples) == 3
    assert samples.s.shape == (3,)
    assert samples.responses.shape == (2, 3)
    np.testing.assert_array_equal(samples.responses[1], [2.0, 4.0, 6.0])


def test_sample_set_preserves_order():
    samples = SampleSet([(3j, [1.0]), (1j, [2.0]), (2j, [3.0])])
    np.testing.assert_array_equal(samples.s, [3j, 1j, 2j])


def test_scalar_response_is_single_channel():
    samples = SampleSet([(1j, 0.5), (2j, 0.25)])
    assert samples.n_channels == 1


def test_iteration_yields_samples():
    samples = SampleSet([(1j, [1.0 + 1j, 2.0]), (2j, [3.0, 4.0 - 1j])])
    items = list(samples)

    assert items[0] == Sample(1j, (1.0 + 1j, 2.0 + 0j))
    assert items[1].frequency == 2j
    assert items[1].response == (3.0 + 0j, 4.0 - 1j)


def test_arrays_are_read_only():
    samples = SampleSet([(1j, [1.0]), (2j, [2.0])])
    with pytest.raises(ValueError):
        samples.s[0] = 0
    with pytest.raises(ValueError):
        samples.responses[0, 0] = 0


def test_empty_sample_set_rejected():
    with pytest.raises(ConfigurationError):
        SampleSet([])


def test_mismatched_channel_count_rejected():
    with pytest.raises(ConfigurationError):
        SampleSet([(1j, [1.0, 2.0]), (2j, [3.0])])


def test_non_finite_values_rejected():
    with pytest.raises(ConfigurationError):
        SampleSet([(1j, [np.nan]), (2j, [1.0])])
    with pytest.raises(ConfigurationError):
        SampleSet([(np.inf, [1.0]), (2j, [1.0])])


def test_malformed_sample_rejected():
    with pytest.raises(ConfigurationError):
        SampleSet([1j, 2j])


def test_from_frequency_response_single_channel():
    freq = np.array([1e6, 2e6, 4e6])
    H = np.array([1.0, 0.5j, 0.25])
    samples = SampleSet.from_frequency_response(freq, H)

    assert samples.n_channels == 1
    np.testing.assert_allclose(samples.s, 1j * 2 * np.pi * freq)
    np.testing.assert_array_equal(samples.responses[0], H)


def test_from_frequency_response_multi_channel():
    freq = np.linspace(1.0, 10.0, 5)
    H = np.vstack([np.ones(5), 2 * np.ones(5), 3 * np.ones(5)])
    samples = SampleSet.from_frequency_response(freq, H)

    assert samples.n_channels == 3
    assert samples.n_samples == 5


def test_from_frequency_response_shape_mismatch():
    with pytest.raises(ConfigurationError):
        SampleSet.from_frequency_response(np.arange(4.0), np.ones(5))


def test_frequency_range_replaces_zero_lower_bound():
    samples = SampleSet([(0j, [1.0]), (10j, [1.0]), (100j, [1.0])])
    assert samples.frequency_range() == (0.1, 100.0)
