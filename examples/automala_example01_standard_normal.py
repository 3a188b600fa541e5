"""
Samples a standard normal distribution with autoMALA and compares the
empirical moments with the exact ones.

Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
Copyright (c) 2022-2026, CentraleSupelec
License: GPLv3 (see LICENSE)
"""

import numpy as np
import automala
import automala.num as gnp
from automala.mcmc import sample_positions, summarize
from automala.misc import targets


def main():
    dim = 3
    model = targets.standard_normal(dim)
    options = automala.AutoMALAOptions(epsilon_init=0.5, num_unadjusted=0)

    states = automala.automala_sample(
        model,
        options,
        num_samples=2000,
        rng=42,
        discard_initial=200,
        verbose=1,
        log_every=500,
    )

    x = gnp.to_np(sample_positions(states))
    info = summarize(states)

    print("\nStandard normal, dim =", dim)
    print("-----------------------")
    print("empirical mean :", np.mean(x, axis=0))
    print("empirical var  :", np.var(x, axis=0, ddof=1))
    print(f"acceptance rate: {info['accept_rate']:.3f}")
    print(f"mean step size : {info['epsilon_mean']:.4g}")
    print(f"j range        : [{info['j_min']}, {info['j_max']}]")


if __name__ == "__main__":
    main()
