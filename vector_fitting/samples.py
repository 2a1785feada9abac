"""
Sample Store

Holds the frequency-domain data being fitted: complex frequencies s and,
for each of them, one complex response value per output channel.
"""

from typing import Iterator, NamedTuple, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError


class Sample(NamedTuple):
    """One (complex frequency, per-channel responses) pair."""
    frequency: complex
    response: Tuple[complex, ...]


class SampleSet:
    """
    Validated, immutable collection of samples.

    The data is stored as arrays for the fitting stages:
    ``s`` has shape (n_samples,) and ``responses`` has shape
    (n_channels, n_samples). Both arrays are read-only.

    Example:
        >>> samples = SampleSet([(1j, [0.5 - 0.5j]), (2j, [0.2 - 0.4j])])
        >>> samples.n_channels
        1
    """

    def __init__(self, samples: Sequence):
        """
        Build the sample store.

        Args:
            samples: Sequence of (frequency, responses) pairs. responses is
                     a sequence of complex values, one per channel; a bare
                     scalar is accepted as a single channel.

        Raises:
            ConfigurationError: If the sequence is empty, channel counts
                                differ, or any value is not finite
        """
        if samples is None or len(samples) == 0:
            raise ConfigurationError("At least one sample is required")

        freqs = []
        rows = []
        n_channels = None
        for i, item in enumerate(samples):
            try:
                freq, response = item
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"Sample {i} is not a (frequency, response) pair: {item!r}"
                ) from None

            response = np.atleast_1d(np.asarray(response, dtype=complex))
            if response.ndim != 1 or response.size == 0:
                raise ConfigurationError(
                    f"Sample {i} response must be a non-empty 1-D sequence, "
                    f"got shape {response.shape}"
                )
            if n_channels is None:
                n_channels = response.size
            elif response.size != n_channels:
                raise ConfigurationError(
                    f"Sample {i} has {response.size} channels, expected {n_channels}"
                )
            freqs.append(complex(freq))
            rows.append(response)

        s = np.array(freqs, dtype=complex)
        responses = np.array(rows, dtype=complex).T.copy()

        if not np.all(np.isfinite(s)):
            raise ConfigurationError("Sample frequencies must be finite")
        if not np.all(np.isfinite(responses)):
            raise ConfigurationError("Sample responses must be finite")

        s.flags.writeable = False
        responses.flags.writeable = False
        self._s = s
        self._responses = responses

    @classmethod
    def from_frequency_response(cls, freq, H) -> "SampleSet":
        """
        Build samples from tabulated data on a real frequency axis.

        Args:
            freq: Frequency array (Hz), shape (n_samples,)
            H: Complex response, shape (n_samples,) for a single channel
               or (n_channels, n_samples)

        Returns:
            SampleSet with s = j*2*pi*freq
        """
        freq = np.asarray(freq, dtype=float)
        H = np.asarray(H, dtype=complex)
        if H.ndim == 1:
            H = H[np.newaxis, :]
        if freq.ndim != 1 or H.ndim != 2 or H.shape[1] != freq.size:
            raise ConfigurationError(
                f"Response shape {H.shape} does not match {freq.size} frequencies"
            )
        s = 1j * 2 * np.pi * freq
        return cls(list(zip(s, H.T)))

    @property
    def s(self) -> np.ndarray:
        """Complex frequencies, shape (n_samples,)."""
        return self._s

    @property
    def responses(self) -> np.ndarray:
        """Responses, shape (n_channels, n_samples)."""
        return self._responses

    @property
    def n_samples(self) -> int:
        return self._s.size

    @property
    def n_channels(self) -> int:
        return self._responses.shape[0]

    def frequency_range(self) -> Tuple[float, float]:
        """
        Range of |s| used to place starting poles.

        A zero lower bound is replaced by |s|_max / 1000, and an all-zero
        axis falls back to (1e-3, 1).
        """
        magnitudes = np.abs(self._s)
        w_max = magnitudes.max()
        if w_max == 0:
            return 1e-3, 1.0
        w_min = magnitudes.min()
        if w_min == 0:
            w_min = w_max / 1000
        return float(w_min), float(w_max)

    def __len__(self) -> int:
        return self.n_samples

    def __getitem__(self, index: int) -> Sample:
        return Sample(complex(self._s[index]),
                      tuple(complex(v) for v in self._responses[:, index]))

    def __iter__(self) -> Iterator[Sample]:
        for i in range(self.n_samples):
            yield self[i]

    def __repr__(self) -> str:
        return f"SampleSet(n_samples={self.n_samples}, n_channels={self.n_channels})"
