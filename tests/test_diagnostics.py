"""
Tests for run summaries and diagnostic plots.
"""

import os

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pytest

import automala.num as gnp
from automala.mcmc import (
    AutoMALAOptions,
    AutoMALAState,
    automala_sample,
    plot_automala_diagnostics,
    running_acceptance_rate,
    summarize,
)
from automala.misc import targets


def _fake_states(accepts):
    return [
        AutoMALAState(
            x=gnp.asarray([float(t)]),
            p=gnp.asarray([0.0]),
            lp=0.0,
            a=0.2,
            b=0.8,
            epsilon=2.0 ** (t % 3),
            j=(t % 3) - 1,
            isaccept=acc,
            iteration=t + 1,
        )
        for t, acc in enumerate(accepts)
    ]


def test_running_acceptance_rate():
    states = _fake_states([True, False, True, True, False, False])
    rates = running_acceptance_rate(states, window=2)
    np.testing.assert_allclose(rates, [1.0, 0.5, 0.5, 1.0, 0.5, 0.0])


def test_running_acceptance_rate_window_larger_than_chain():
    states = _fake_states([True, False, False, True])
    rates = running_acceptance_rate(states, window=10)
    np.testing.assert_allclose(rates, [1.0, 0.5, 1.0 / 3.0, 0.5])


def test_summarize():
    states = _fake_states([True, False, True, True])
    info = summarize(states)
    assert info["num_states"] == 4
    assert info["accept_rate"] == 0.75
    assert info["epsilon_min"] == 1.0
    assert info["epsilon_max"] == 4.0
    assert info["epsilon_mean"] == pytest.approx((1.0 + 2.0 + 4.0 + 1.0) / 4)
    assert (info["j_min"], info["j_max"]) == (-1, 1)
    assert (info["first_iteration"], info["last_iteration"]) == (1, 4)
    np.testing.assert_array_equal(info["final_position"], [3.0])


def test_empty_chain():
    with pytest.raises(ValueError):
        summarize([])
    with pytest.raises(ValueError):
        running_acceptance_rate([])


def test_plots_are_saved(tmp_path):
    model = targets.standard_normal(2)
    states = automala_sample(model, AutoMALAOptions(0.5, 0), num_samples=60, rng=0)
    figs = plot_automala_diagnostics(states, window=10, show=False, save_dir=str(tmp_path))
    assert len(figs) == 4
    for name in ("step_size.png", "doublings.png", "acceptance.png", "trace.png"):
        assert os.path.isfile(os.path.join(str(tmp_path), name))
    for fig in figs:
        plt.close(fig)
