"""
Calibrates the reference step size with round-based adaptation, then
samples a banana-shaped (Rosenbrock) density and plots the samples.

Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
Copyright (c) 2022-2026, CentraleSupelec
License: GPLv3 (see LICENSE)
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib import interactive
import automala
import automala.num as gnp
from automala.mcmc import sample_positions, summarize, plot_automala_diagnostics
from automala.misc import targets


def visualize_results(x, a, b, temperature):
    xs = np.linspace(-2.0, 3.0, 200)
    ys = np.linspace(-1.0, 6.0, 200)
    X, Y = np.meshgrid(xs, ys)
    U = ((a - X) ** 2 + b * (Y - X**2) ** 2) / temperature

    fig = plt.figure()
    plt.contour(X, Y, U, levels=np.logspace(-1, 2.5, 15))
    plt.scatter(x[:, 0], x[:, 1], s=4, alpha=0.4)
    plt.xlabel("$x$")
    plt.ylabel("$y$")
    plt.title(f"autoMALA samples on Rosenbrock (a={a}, b={b}, T={temperature})")
    plt.show()
    return fig


def main():
    a, b, temperature = 1.0, 10.0, 1.0
    model = targets.rosenbrock(a=a, b=b, temperature=temperature)

    options, x0 = automala.round_based_adaptation(
        model,
        automala.AutoMALAOptions(epsilon_init=1.0),
        num_rounds=7,
        rng=0,
        initial_position=gnp.asarray([-1.5, 1.5]),
        verbose=1,
    )
    print(f"adapted epsilon_init: {options.epsilon_init:.4g}")
    print("warm start          :", gnp.to_np(x0))

    states = automala.automala_sample(
        model, options, num_samples=1000, rng=1, initial_position=x0
    )
    info = summarize(states)
    print(f"acceptance rate     : {info['accept_rate']:.3f}")

    interactive(True)
    plot_automala_diagnostics(states, window=50, show=False)
    visualize_results(gnp.to_np(sample_positions(states)), a, b, temperature)


if __name__ == "__main__":
    main()
