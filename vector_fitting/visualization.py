"""
Vector Fitting Visualization Module

Plots for inspecting a completed fit:
- Magnitude of original samples vs. fitted model, with the deviation
- Convergence history (pole displacement and RMSE per iteration)
"""

from typing import Optional, Sequence, Tuple

import numpy as np
import matplotlib.pyplot as plt

from .core import VectorFitting


def _frequency_axis(s: np.ndarray) -> Tuple[np.ndarray, str]:
    """Pick a real x-axis for plotting complex frequencies."""
    if np.any(s.imag != 0):
        return np.abs(s.imag), 'Angular frequency |Im(s)| [rad/s]'
    return np.abs(s), '|s|'


def plot_fit(fitter: VectorFitting,
             output_path: str,
             channels: Optional[Sequence[int]] = None,
             dpi: int = 150,
             figsize: Tuple[float, float] = (10, 8)) -> None:
    """
    Plot original samples against the fitted model.

    The upper panel shows the magnitude in dB of the data (markers) and of
    the model (lines); the lower panel shows |fit - data| per channel.

    Args:
        fitter: VectorFitting instance after fit()
        output_path: Output file path (format from the extension)
        channels: Channel indices to plot (default: all)
        dpi: Output image DPI (default: 150)
        figsize: Figure size in inches (default: (10, 8))

    Raises:
        ModelNotFitted: If the fitter has no fitted model
    """
    samples = fitter.samples
    fitted = fitter.evaluate(samples.s)
    x, xlabel = _frequency_axis(samples.s)
    order = np.argsort(x)

    if channels is None:
        channels = range(samples.n_channels)

    fig, (ax_mag, ax_err) = plt.subplots(2, 1, figsize=figsize, sharex=True)

    for c in channels:
        data = samples.responses[c][order]
        model = fitted[order, c]
        line, = ax_mag.plot(x[order], 20 * np.log10(np.abs(model) + 1e-300),
                            label=f'Fit ch{c}')
        ax_mag.plot(x[order], 20 * np.log10(np.abs(data) + 1e-300), 'o',
                    color=line.get_color(), markersize=3, alpha=0.6,
                    label=f'Data ch{c}')
        ax_err.plot(x[order], np.abs(model - data) + 1e-300, color=line.get_color(),
                    label=f'ch{c}')

    use_log_x = np.all(x > 0)
    if use_log_x:
        ax_mag.set_xscale('log')
    ax_err.set_yscale('log')

    ax_mag.set_ylabel('Magnitude [dB]')
    ax_mag.set_title(
        f'Vector Fitting (order={fitter.order}, RMSE={fitter.get_rmse():.2e}, '
        f'{fitter.state.value})'
    )
    ax_mag.grid(True, which='both', alpha=0.3)
    ax_mag.legend(fontsize=8, loc='best')

    ax_err.set_xlabel(xlabel)
    ax_err.set_ylabel('|Fit - Data|')
    ax_err.grid(True, which='both', alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_path, dpi=dpi)
    plt.close(fig)


def plot_convergence(fitter: VectorFitting,
                     output_path: str,
                     dpi: int = 150,
                     figsize: Tuple[float, float] = (8, 5)) -> None:
    """
    Plot relative pole displacement and RMSE for every iteration.

    Args:
        fitter: VectorFitting instance after fit()
        output_path: Output file path
        dpi: Output image DPI (default: 150)
        figsize: Figure size in inches (default: (8, 5))

    Raises:
        ValueError: If the fitter has no iteration history
    """
    history = fitter.history
    if not history:
        raise ValueError("No iteration history. Call fit() first.")

    iterations = [record.iteration for record in history]
    displacement = np.array([record.displacement for record in history])
    rmse = np.array([record.rmse for record in history])

    fig, ax = plt.subplots(figsize=figsize)
    ax.semilogy(iterations, displacement + 1e-300, 'o-', label='Relative pole change')
    ax.semilogy(iterations, rmse + 1e-300, 's-', label='RMSE')
    ax.axhline(fitter.tolerance, color='gray', linestyle='--', linewidth=1,
               label=f'Tolerance ({fitter.tolerance:.0e})')

    ax.set_xlabel('Iteration')
    ax.set_title(f'Convergence ({fitter.state.value} after {fitter.iterations} iterations)')
    ax.grid(True, which='both', alpha=0.3)
    ax.legend(loc='best')

    plt.tight_layout()
    plt.savefig(output_path, dpi=dpi)
    plt.close(fig)
