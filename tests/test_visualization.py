import pytest

from vector_fitting import ModelNotFitted, VectorFitting, plot_convergence, plot_fit


def test_plot_fit_writes_file(two_channel_samples, tmp_path):
    vf = VectorFitting(two_channel_samples, order=3)
    vf.fit()
    output = tmp_path / "fit.png"

    plot_fit(vf, str(output))

    assert output.exists()
    assert output.stat().st_size > 0


def test_plot_fit_selected_channel(two_channel_samples, tmp_path):
    vf = VectorFitting(two_channel_samples, order=3)
    vf.fit()
    output = tmp_path / "fit_ch1.png"

    plot_fit(vf, str(output), channels=[1])

    assert output.exists()


def test_plot_convergence_writes_file(two_channel_samples, tmp_path):
    vf = VectorFitting(two_channel_samples, order=3, max_iterations=5)
    vf.fit()
    output = tmp_path / "convergence.png"

    plot_convergence(vf, str(output))

    assert output.exists()


def test_plots_require_fit(two_channel_samples, tmp_path):
    vf = VectorFitting(two_channel_samples, order=3)

    with pytest.raises(ModelNotFitted):
        plot_fit(vf, str(tmp_path / "fit.png"))
    with pytest.raises(ValueError):
        plot_convergence(vf, str(tmp_path / "convergence.png"))
