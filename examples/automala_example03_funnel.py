"""
Neal's funnel: the local scale of the target changes by orders of magnitude
along the first coordinate. The doubling count j recorded by autoMALA follows
the geometry of the funnel.

Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
Copyright (c) 2022-2026, CentraleSupelec
License: GPLv3 (see LICENSE)
"""

import numpy as np
import matplotlib.pyplot as plt
import automala
import automala.num as gnp
from automala.mcmc import sample_positions
from automala.misc import targets


def main():
    model = targets.funnel(dim=5, scale=3.0)

    options, x0 = automala.round_based_adaptation(
        model,
        automala.AutoMALAOptions(epsilon_init=0.5, max_step_size_search=60),
        num_rounds=6,
        rng=3,
    )
    states = automala.automala_sample(
        model, options, num_samples=1500, rng=4, initial_position=x0
    )

    x = gnp.to_np(sample_positions(states))
    j = np.asarray([s.j for s in states])
    v = x[:, 0]

    print(f"mean of v (exact 0)   : {np.mean(v):.3f}")
    print(f"std of v  (exact 3)   : {np.std(v):.3f}")
    print(f"corr(v, j)            : {np.corrcoef(v, j)[0, 1]:.3f}")

    fig = plt.figure()
    plt.scatter(v, j, s=4, alpha=0.4)
    plt.xlabel("$v$")
    plt.ylabel("doublings $j$")
    plt.title("Selected step size along the funnel")
    plt.show()


if __name__ == "__main__":
    main()
