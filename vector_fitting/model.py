"""
Fitted rational model

    H_c(s) = sum_k r_ck / (s - p_k) + d_c + s * h_c

for every channel c. Instances are immutable: all arrays are read-only.
"""

from typing import Tuple

import numpy as np

from .samples import SampleSet


def _frozen(values, dtype) -> np.ndarray:
    array = np.array(values, dtype=dtype)
    array.flags.writeable = False
    return array


class RationalModel:
    """
    Pole-residue model produced by a vector fitting run.

    Attributes:
        poles: Shared poles, shape (order,)
        residues: Residues, shape (n_channels, order)
        d: Constant terms, shape (n_channels,)
        h: s-proportional terms, shape (n_channels,)
    """

    def __init__(self, poles, residues, d, h):
        self._poles = _frozen(np.atleast_1d(poles), complex)
        self._residues = _frozen(np.atleast_2d(residues), complex)
        self._d = _frozen(np.atleast_1d(d), float)
        self._h = _frozen(np.atleast_1d(h), float)

        n_channels, order = self._residues.shape
        if order != self._poles.size:
            raise ValueError(f"Residues have {order} columns for {self._poles.size} poles")
        if self._d.size != n_channels or self._h.size != n_channels:
            raise ValueError(f"d and h must have one entry per channel ({n_channels})")

    @property
    def poles(self) -> np.ndarray:
        return self._poles

    @property
    def residues(self) -> np.ndarray:
        return self._residues

    @property
    def d(self) -> np.ndarray:
        return self._d

    @property
    def h(self) -> np.ndarray:
        return self._h

    @property
    def order(self) -> int:
        return self._poles.size

    @property
    def n_channels(self) -> int:
        return self._residues.shape[0]

    def evaluate(self, s) -> np.ndarray:
        """
        Evaluate the model at complex frequencies.

        Args:
            s: Complex frequency, scalar or array of shape (n,)

        Returns:
            Shape (n_channels,) for scalar s, otherwise (n, n_channels)
        """
        scalar = np.ndim(s) == 0
        s = np.atleast_1d(np.asarray(s, dtype=complex))[:, np.newaxis]

        H = np.zeros((s.shape[0], self.n_channels), dtype=complex)
        for r, p in zip(self._residues.T, self._poles):
            H += r / (s - p)
        H += self._d
        H += s * self._h

        return H[0] if scalar else H

    def evaluate_frequency(self, freq) -> np.ndarray:
        """
        Evaluate on a real frequency axis.

        Args:
            freq: Frequency array (Hz)

        Returns:
            Complex response, shape (len(freq), n_channels)
        """
        return self.evaluate(1j * 2 * np.pi * np.atleast_1d(np.asarray(freq, dtype=float)))

    def rmse(self, samples: SampleSet) -> float:
        """Root-mean-square error over all channels and samples."""
        error = self.evaluate(samples.s) - samples.responses.T
        return float(np.sqrt(np.mean(np.abs(error) ** 2)))

    def dc_gain(self) -> np.ndarray:
        """
        DC gain H(0) of every channel.

        From the pole-residue form: H(0) = d - sum(r_k / p_k). Poles at the
        origin are skipped.
        """
        gain = self._d.astype(complex)
        for r, p in zip(self._residues.T, self._poles):
            if np.abs(p) > 1e-12:
                gain = gain - r / p
        return np.real(gain)

    def polynomial_coefficients(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Convert to polynomial ratio form.

        H_c(s) = (b_n s^n + ... + b_0) / (s^m + ... + a_0)

        Returns:
            num: Numerator coefficients, shape (n_channels, order + 1), or
                 (n_channels, order + 2) when any h is nonzero; highest power first
            den: Monic denominator coefficients, shape (order + 1,)
        """
        order = self.order
        den = np.real(np.poly(self._poles)) if order else np.array([1.0])

        num = np.zeros((self.n_channels, order + 2), dtype=complex)
        for k in range(order):
            partial_den = np.atleast_1d(np.poly(np.delete(self._poles, k)))
            num[:, -len(partial_den):] += np.outer(self._residues[:, k], partial_den)

        num[:, 1:] += np.outer(self._d, den)
        num += np.outer(self._h, np.convolve(den, [1.0, 0.0]))

        num = np.real(num)
        if not np.any(self._h):
            num = num[:, 1:]
        return num, den

    def __repr__(self) -> str:
        return f"RationalModel(order={self.order}, n_channels={self.n_channels})"
