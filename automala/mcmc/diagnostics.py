# automala/mcmc/diagnostics.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""Run summaries and trace plots for autoMALA chains."""

from __future__ import annotations

import os
from typing import Dict, List, Optional

import numpy as np
import matplotlib.pyplot as plt

import automala.num as gnp
from .automala import AutoMALAState


def _trace(states: List[AutoMALAState], field: str) -> np.ndarray:
    return np.asarray([getattr(s, field) for s in states], dtype=float)


def running_acceptance_rate(states: List[AutoMALAState], window: int = 50) -> np.ndarray:
    """Acceptance rate over a sliding window.

    For t < window, the mean is computed over the t+1 first states.
    """
    if not states:
        raise ValueError("states is empty")
    window = max(1, int(window))
    acc = _trace(states, "isaccept")
    cumsum = np.cumsum(acc)
    rates = np.empty_like(acc)
    n_head = min(window, acc.shape[0])
    rates[:n_head] = cumsum[:n_head] / (np.arange(n_head) + 1)
    rates[n_head:] = (cumsum[n_head:] - cumsum[:-n_head]) / window
    return rates


def summarize(states: List[AutoMALAState]) -> Dict[str, object]:
    if not states:
        raise ValueError("states is empty")
    eps = _trace(states, "epsilon")
    j = np.asarray([s.j for s in states], dtype=int)
    return {
        "num_states": len(states),
        "accept_rate": float(np.mean(_trace(states, "isaccept"))),
        "epsilon_mean": float(np.mean(eps)),
        "epsilon_min": float(np.min(eps)),
        "epsilon_max": float(np.max(eps)),
        "j_min": int(np.min(j)),
        "j_max": int(np.max(j)),
        "first_iteration": states[0].iteration,
        "last_iteration": states[-1].iteration,
        "final_position": gnp.to_np(states[-1].x),
    }


def plot_automala_diagnostics(
    states: List[AutoMALAState],
    window: int = 50,
    show: bool = True,
    save_dir: Optional[str] = None,
):
    """Plot step size, j, running acceptance and coordinate traces.

    Returns the list of matplotlib figures.
    """
    figs = []
    iters = _trace(states, "iteration")

    if save_dir is not None:
        os.makedirs(save_dir, exist_ok=True)

    def _finish(fig, name):
        figs.append(fig)
        if save_dir is not None:
            fig.savefig(os.path.join(save_dir, name), dpi=150)

    fig = plt.figure()
    plt.semilogy(iters, _trace(states, "epsilon"))
    plt.xlabel("iteration")
    plt.ylabel("step size")
    _finish(fig, "step_size.png")

    fig = plt.figure()
    plt.step(iters, _trace(states, "j"), where="post")
    plt.xlabel("iteration")
    plt.ylabel("doublings j")
    _finish(fig, "doublings.png")

    fig = plt.figure()
    plt.plot(iters, running_acceptance_rate(states, window))
    plt.ylim(0.0, 1.05)
    plt.xlabel("iteration")
    plt.ylabel(f"acceptance rate (window={window})")
    _finish(fig, "acceptance.png")

    x = np.stack([gnp.to_np(s.x) for s in states])
    fig = plt.figure()
    for k in range(x.shape[1]):
        plt.plot(iters, x[:, k], label=f"x[{k}]", linewidth=0.8)
    plt.xlabel("iteration")
    plt.ylabel("position")
    if x.shape[1] <= 10:
        plt.legend()
    _finish(fig, "trace.png")

    if show:
        plt.show()

    return figs
