"""
Vector Fitting orchestrator.

Alternates pole identification and residue identification until the
poles stop moving or the iteration budget is spent, and exposes the
resulting rational model for evaluation.
"""

import logging
import threading
from enum import Enum
from typing import List, NamedTuple, Optional, Sequence, Union

import numpy as np

from .errors import ConfigurationError, ModelNotFitted, NumericalDegeneracy
from .model import RationalModel
from .poles import identify_poles, initial_poles
from .residues import identify_residues
from .samples import Sample, SampleSet
from .utils import (
    canonical_pole_order, relative_displacement, validate_order,
    validate_positive_float, validate_positive_int,
)

logger = logging.getLogger(__name__)


class FitState(Enum):
    INITIALIZED = 'initialized'
    ITERATING = 'iterating'
    CONVERGED = 'converged'
    EXHAUSTED = 'exhausted'
    FAILED = 'failed'


class IterationRecord(NamedTuple):
    iteration: int
    displacement: float
    rmse: float


class VectorFitting:
    """
    Vector Fitting of frequency-domain samples with a common pole set.

    Every channel c is approximated as

        H_c(s) = sum_k r_ck / (s - p_k) + d_c + s * h_c

    Example:
        >>> vf = VectorFitting(samples, order=8, max_iterations=20)
        >>> vf.fit()
        >>> vf.get_rmse()
        >>> vf.predict_response(1j * 2 * np.pi * 1e9)
    """

    def __init__(self, samples: Union[SampleSet, Sequence], order: int,
                 poles: Optional[Sequence[complex]] = None,
                 max_iterations: int = 10,
                 tolerance: float = 1e-6,
                 constant_term: bool = True,
                 linear_term: bool = False,
                 enforce_stability: bool = True,
                 pole_spacing: str = 'log',
                 rcond: float = 1e-12,
                 max_restarts: int = 0):
        """
        Initialize the fitter.

        Args:
            samples: SampleSet, or a sequence of (frequency, responses) pairs
            order: Number of poles (fitting order)
            poles: Starting poles; generated automatically if None. Must
                   contain exactly order poles, complex ones in conjugate pairs
            max_iterations: Maximum number of VF iterations
            tolerance: Convergence tolerance on the relative pole displacement
            constant_term: Fit a constant term d per channel
            linear_term: Fit an s-proportional term h per channel
            enforce_stability: Flip unstable relocated poles to the LHP
            pole_spacing: Spacing of automatic starting poles ('log' or 'lin')
            rcond: Relative singular-value cutoff for rank decisions
            max_restarts: Restarts from perturbed starting poles after a
                          numerical degeneracy before the run fails

        Raises:
            ConfigurationError: If any argument is invalid
        """
        self.order = validate_order(order)
        self.max_iterations = validate_positive_int(max_iterations, "max_iterations")
        self.tolerance = validate_positive_float(tolerance, "tolerance")
        self.rcond = validate_positive_float(rcond, "rcond")
        self.max_restarts = validate_positive_int(max_restarts, "max_restarts", minimum=0)
        self.constant_term = bool(constant_term)
        self.linear_term = bool(linear_term)
        self.enforce_stability = bool(enforce_stability)

        valid_spacing = ['log', 'lin']
        if pole_spacing not in valid_spacing:
            raise ConfigurationError(
                f"Invalid pole_spacing '{pole_spacing}'. Valid options: {valid_spacing}"
            )
        self.pole_spacing = pole_spacing

        self._samples = samples if isinstance(samples, SampleSet) else SampleSet(samples)

        if poles is None:
            self._starting_poles = initial_poles(self._samples, self.order, pole_spacing)
        else:
            self._starting_poles = self._validate_starting_poles(poles)

        self._state = FitState.INITIALIZED
        self._model: Optional[RationalModel] = None
        self._history: List[IterationRecord] = []
        self._iterations = 0
        self._cancel = threading.Event()

    def _validate_starting_poles(self, poles) -> np.ndarray:
        poles = np.atleast_1d(np.asarray(poles, dtype=complex))
        if poles.ndim != 1 or poles.size != self.order:
            raise ConfigurationError(
                f"Expected {self.order} starting poles, got {poles.size}"
            )
        if not np.all(np.isfinite(poles)):
            raise ConfigurationError("Starting poles must be finite")
        try:
            return canonical_pole_order(poles)
        except ValueError as e:
            raise ConfigurationError(str(e)) from None

    def fit(self) -> RationalModel:
        """
        Run the fitting iterations from the starting poles.

        Returns:
            The fitted model

        Raises:
            NumericalDegeneracy: If a stage hits a singular system and all
                                 restarts are used up
        """
        logger.info(
            f"Starting Vector Fitting with order={self.order}, "
            f"{self._samples.n_samples} samples, {self._samples.n_channels} channel(s)"
        )
        logger.debug(f"Initial poles: {self._starting_poles}")

        self._cancel.clear()
        starting = self._starting_poles
        restarts = 0
        while True:
            try:
                return self._iterate(starting)
            except NumericalDegeneracy as e:
                if restarts >= self.max_restarts:
                    self._state = FitState.FAILED
                    self._model = None
                    logger.error(f"Vector Fitting failed: {e}")
                    raise
                restarts += 1
                starting = self._starting_poles * (1.0 + 0.01 * restarts)
                logger.warning(
                    f"{e}; restarting from perturbed poles ({restarts}/{self.max_restarts})"
                )

    def _iterate(self, poles: np.ndarray) -> RationalModel:
        self._state = FitState.ITERATING
        self._model = None
        self._history = []
        self._iterations = 0

        for iteration in range(1, self.max_iterations + 1):
            new_poles = identify_poles(
                self._samples, poles,
                constant_term=self.constant_term,
                linear_term=self.linear_term,
                enforce_stability=self.enforce_stability,
                rcond=self.rcond,
            )
            residues, d, h = identify_residues(
                self._samples, new_poles,
                constant_term=self.constant_term,
                linear_term=self.linear_term,
                rcond=self.rcond,
            )
            model = RationalModel(new_poles, residues, d, h)

            displacement = relative_displacement(poles, new_poles)
            rmse = model.rmse(self._samples)
            self._history.append(IterationRecord(iteration, displacement, rmse))
            logger.debug(
                f"Iteration {iteration}: relative pole change = {displacement:.2e}, "
                f"RMSE = {rmse:.2e}"
            )

            poles = new_poles
            self._model = model
            self._iterations = iteration

            if displacement < self.tolerance:
                self._state = FitState.CONVERGED
                logger.info(f"Converged after {iteration} iterations, RMSE={rmse:.2e}")
                return model

            if self._cancel.is_set():
                logger.info(f"Cancelled after {iteration} iterations, RMSE={rmse:.2e}")
                break
        else:
            logger.warning(
                f"No convergence within {self.max_iterations} iterations, "
                f"RMSE={self._history[-1].rmse:.2e}"
            )

        self._state = FitState.EXHAUSTED
        return self._model

    def cancel(self) -> None:
        """Request that a running fit() stops after the current iteration."""
        self._cancel.set()

    @property
    def state(self) -> FitState:
        return self._state

    @property
    def iterations(self) -> int:
        """Number of iterations completed by the last fit()."""
        return self._iterations

    @property
    def history(self) -> List[IterationRecord]:
        """Per-iteration pole displacement and RMSE of the last fit()."""
        return list(self._history)

    @property
    def samples(self) -> SampleSet:
        return self._samples

    @property
    def starting_poles(self) -> np.ndarray:
        return self._starting_poles.copy()

    @property
    def model(self) -> RationalModel:
        """
        The fitted model.

        Raises:
            ModelNotFitted: If fit() has not completed successfully
        """
        if self._model is None or self._state not in (FitState.CONVERGED, FitState.EXHAUSTED):
            raise ModelNotFitted("No fitted model. Call fit() first.")
        return self._model

    def predict_response(self, frequency: complex) -> np.ndarray:
        """
        Evaluate the model at one complex frequency.

        Returns:
            Complex response, one value per channel
        """
        return self.model.evaluate(complex(frequency))

    def evaluate(self, s) -> np.ndarray:
        """Evaluate at an array of complex frequencies, shape (len(s), n_channels)."""
        return self.model.evaluate(np.atleast_1d(s))

    def get_fitted_samples(self) -> List[Sample]:
        """Model response at every original sample frequency."""
        model = self.model
        fitted = []
        for s in self._samples.s:
            response = model.evaluate(complex(s))
            fitted.append(Sample(complex(s), tuple(complex(v) for v in response)))
        return fitted

    def get_poles(self) -> np.ndarray:
        return self.model.poles.copy()

    def get_residues(self) -> np.ndarray:
        """Residues, shape (n_channels, order)."""
        return self.model.residues.copy()

    def get_constant_terms(self) -> np.ndarray:
        return self.model.d.copy()

    def get_linear_terms(self) -> np.ndarray:
        return self.model.h.copy()

    def get_rmse(self) -> float:
        """Root-mean-square error between fitted and original samples."""
        fitted = np.array([sample.response for sample in self.get_fitted_samples()])
        error = fitted - self._samples.responses.T
        return float(np.sqrt(np.mean(np.abs(error) ** 2)))

    def get_dc_gain(self) -> np.ndarray:
        """DC gain H(0) of every channel."""
        return self.model.dc_gain()

    def __repr__(self) -> str:
        return (f"VectorFitting(order={self.order}, samples={self._samples.n_samples}, "
                f"channels={self._samples.n_channels}, state={self._state.value})")


def vector_fit(freq, H, order: int, **kwargs) -> VectorFitting:
    """
    Convenience function for fitting tabulated frequency-response data.

    Args:
        freq: Frequency array (Hz)
        H: Complex response, shape (n_freq,) or (n_channels, n_freq)
        order: Number of poles
        **kwargs: Additional arguments passed to VectorFitting

    Returns:
        Fitted VectorFitting instance
    """
    vf = VectorFitting(SampleSet.from_frequency_response(freq, H), order, **kwargs)
    vf.fit()
    return vf
