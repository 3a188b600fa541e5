# automala/mcmc/automala.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
AutoMALA: a self-tuning Metropolis-adjusted Langevin algorithm.

This file implements the autoMALA kernel of Biron-Lattes, Surjanovic, Syed
et al. (2023) for targets on R^d known through an unnormalized log-density
and its gradient. The step size is chosen afresh at every iteration by a
reversible doubling/halving search, so that no global step size has to be
tuned by hand.

Target and joint density
------------------------
The model provides:
  logdensity(x) -> scalar,
  logdensity_and_gradient(x) -> (scalar, (dim,) array).

With an identity mass matrix, the joint log-density of a position x and a
momentum p is:
  $\\ell(x, p) = \\log \\pi(x) - \\tfrac12 \\|p\\|^2$.

Leapfrog proposal
-----------------
One leapfrog step with step size eps:
  p_half = p + (eps/2) * grad log pi(x)
  x_new  = x + eps * p_half
  p_new  = p_half + (eps/2) * grad log pi(x_new)

The proposal returns (x_new, -p_new). Negating the momentum makes the map an
involution: applying it twice with the same eps gives back (x, p).

Step size selection
-------------------
At each iteration, draw two uniforms and sort them to obtain thresholds
0 < a <= b < 1. Starting from the reference step size eps_init, let
  r(eps) = l(leapfrog(x, p, eps)) - l(x, p).

  - If log(a) <= r(eps_init) < log(b), keep eps_init (j = 0).
  - If r(eps_init) >= log(b), double eps while r stays >= log(b).
  - If r(eps_init) < log(a), halve eps while r stays < log(a).

When the search crosses the boundary at eps_init * 2^j, it returns
eps_init * 2^(j-1). The integer j is the signed number of doublings.

Reversibility check
-------------------
The search is run twice per iteration with the same (a, b): once from the
current state and once from the proposed state. The proposal is eligible for
Metropolis acceptance only if both searches return the same j. The step size
stored in the new state is the average of the two selected step sizes.

Adaptation
----------
round_based_adaptation runs rounds of length 2, 4, ..., 2^num_rounds in which
every proposal is accepted (the unadjusted phase). After each round, the
reference step size is replaced by the average of the step sizes recorded
during the round, and the last position seeds the next round.

References
----------
[1] M. Biron-Lattes, N. Surjanovic, S. Syed, T. Campbell, A. Bouchard-Cote
    (2023). "autoMALA: Locally adaptive Metropolis-adjusted Langevin
    algorithm." https://arxiv.org/abs/2310.16782
[2] R. M. Neal (2011). "MCMC Using Hamiltonian Dynamics." In: Handbook of
    Markov Chain Monte Carlo. https://arxiv.org/abs/1206.1901
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple

import logging
import math
import numbers
import time

from tqdm.auto import tqdm

import automala.config as config
import automala.num as gnp
from automala.model import LogDensityProblem

ArrayLike = any  # Placeholder for unified array type

_DEFAULT_EPSILON_INIT = 1.0
_DEFAULT_NUM_UNADJUSTED = 1
_DEFAULT_NUM_ROUNDS = 10
_DEFAULT_VERBOSE = 0
_DEFAULT_LOG_EVERY = 50

_logger = config.get_logger()


class StepSizeSearchError(RuntimeError):
    """Raised when a bounded step-size search runs out of doublings/halvings."""

    def __init__(self, epsilon_init: float, j: int, max_search: int):
        self.epsilon_init = epsilon_init
        self.j = j
        self.max_search = max_search
        super().__init__(
            f"step size search did not converge after {max_search} "
            f"doublings/halvings (epsilon_init={epsilon_init:.6g}, j={j})"
        )


@dataclass(frozen=True)
class AutoMALAOptions:
    """Sampler configuration.

    epsilon_init:
        Reference step size from which each search starts.
    num_unadjusted:
        Iterations with iteration < num_unadjusted accept every proposal.
    max_step_size_search:
        Maximum number of doublings/halvings per search. None means no
        bound; the search then runs until it crosses the band.
    """

    epsilon_init: float = _DEFAULT_EPSILON_INIT
    num_unadjusted: int = _DEFAULT_NUM_UNADJUSTED
    max_step_size_search: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "epsilon_init", float(self.epsilon_init))
        object.__setattr__(self, "num_unadjusted", int(self.num_unadjusted))


@dataclass(frozen=True)
class AutoMALAState:
    """One state of an autoMALA chain. A new state is built at every iteration."""

    # current position
    x: ArrayLike
    # current momentum
    p: ArrayLike
    # log-density of the joint (x, p)
    lp: float
    # lower threshold of the acceptance band
    a: float
    # upper threshold of the acceptance band
    b: float
    # step size, averaged over the forward and backward searches
    epsilon: float
    # number of doublings (> 0) or halvings (< 0) of epsilon_init
    j: int
    # whether the proposal was accepted
    isaccept: bool
    # iteration number, starting at 1
    iteration: int


def isunadjusted(options: AutoMALAOptions, state: AutoMALAState) -> bool:
    return state.iteration < options.num_unadjusted


# ---------------------------
# Random draws
# ---------------------------


def resolve_rng(rng=None):
    """None -> backend global generator, int -> seeded generator."""
    if rng is None or gnp.is_rng(rng):
        return rng
    if isinstance(rng, numbers.Integral):
        return gnp.default_rng(rng)
    raise TypeError(f"rng must be None, an int seed or a backend generator, got {rng!r}")


def _uniform(rng) -> float:
    u = gnp.to_scalar(gnp.rand(rng=rng))
    # thresholds live in log space, so stay away from 0
    while u <= 0.0:
        u = gnp.to_scalar(gnp.rand(rng=rng))
    return u


def sample_a_and_b(rng=None) -> Tuple[float, float]:
    u1, u2 = _uniform(rng), _uniform(rng)
    return min(u1, u2), max(u1, u2)


def sample_momentum(rng, model: LogDensityProblem) -> ArrayLike:
    return gnp.randn(model.dimension(), rng=rng)


# ---------------------------
# Integrator and step size selection
# ---------------------------


def kinetic(p: ArrayLike) -> float:
    return 0.5 * float(gnp.sum(p * p))


def compute_logprob(model: LogDensityProblem, x: ArrayLike, p: ArrayLike) -> float:
    return float(model.logdensity(x)) - kinetic(p)


def leapfrog(
    model: LogDensityProblem,
    x: ArrayLike,
    p: ArrayLike,
    epsilon: float,
) -> Tuple[ArrayLike, ArrayLike, float]:
    _, g = model.logdensity_and_gradient(x)
    p_half = p + (epsilon / 2) * g
    x_new = x + epsilon * p_half
    lp_x_new, g_new = model.logdensity_and_gradient(x_new)
    p_new = p_half + (epsilon / 2) * g_new
    return x_new, -p_new, float(lp_x_new) - kinetic(p_new)


def step_size_selector(
    model: LogDensityProblem,
    x: ArrayLike,
    p: ArrayLike,
    lp: float,
    a: float,
    b: float,
    epsilon_init: float,
    max_search: Optional[int] = None,
) -> Tuple[float, int]:
    """Return (epsilon, j) with epsilon = epsilon_init * 2**j."""
    log_a = math.log(a)
    log_b = math.log(b)

    epsilon = epsilon_init
    _, _, lp_new = leapfrog(model, x, p, epsilon)
    lp_ratio = lp_new - lp
    delta = int(lp_ratio >= log_b) - int(lp_ratio < log_a)
    j = 0

    if delta == 0:
        return epsilon, j

    while True:
        if max_search is not None and abs(j) >= max_search:
            raise StepSizeSearchError(epsilon_init, j, max_search)
        epsilon = epsilon * 2.0**delta
        j = j + delta
        _, _, lp_new = leapfrog(model, x, p, epsilon)
        lp_ratio = lp_new - lp
        if delta == 1 and lp_ratio < log_b:
            return epsilon / 2, j - 1
        elif delta == -1 and lp_ratio >= log_a:
            return epsilon / 2, j - 1


# ---------------------------
# Transition kernel
# ---------------------------


def automala_init(
    model: LogDensityProblem,
    options: Optional[AutoMALAOptions] = None,
    rng=None,
    initial_position: Optional[ArrayLike] = None,
) -> AutoMALAState:
    """First state of a chain.

    rng may be None, an int seed or a backend generator. To continue the
    chain with automala_transition, pass the same generator object.
    """
    options = options or AutoMALAOptions()
    rng = resolve_rng(rng)
    a, b = sample_a_and_b(rng)
    p = sample_momentum(rng, model)
    if initial_position is None:
        x = gnp.randn(model.dimension(), rng=rng)
    else:
        x = gnp.copy(gnp.asarray(initial_position))
        if tuple(x.shape) != (model.dimension(),):
            raise ValueError(
                f"initial_position must have shape ({model.dimension()},), "
                f"got {tuple(x.shape)}"
            )
    lp = compute_logprob(model, x, p)
    return AutoMALAState(x, p, lp, a, b, options.epsilon_init, 0, True, 1)


def automala_transition(
    model: LogDensityProblem,
    options: AutoMALAOptions,
    rng,
    state: AutoMALAState,
) -> AutoMALAState:
    """One autoMALA step from `state`.

    rng is None (backend global generator) or a backend generator. An int
    seed is refused here, since reseeding at every step would repeat the
    same draws.
    """
    if rng is not None and not gnp.is_rng(rng):
        raise TypeError(f"rng must be None or a backend generator, got {rng!r}")
    epsilon_init = options.epsilon_init
    max_search = options.max_step_size_search

    x_prev = state.x
    p_prev = sample_momentum(rng, model)
    lp_prev = compute_logprob(model, x_prev, p_prev)

    a, b = sample_a_and_b(rng)
    epsilon, j = step_size_selector(
        model, x_prev, p_prev, lp_prev, a, b, epsilon_init, max_search
    )
    x, p, lp = leapfrog(model, x_prev, p_prev, epsilon)
    epsilon_prop, j_prop = step_size_selector(
        model, x, p, lp, a, b, epsilon_init, max_search
    )
    epsilon_t = (epsilon + epsilon_prop) / 2
    log_alpha = lp - lp_prev

    isaccept = isunadjusted(options, state) or (
        j == j_prop and math.log(_uniform(rng)) < log_alpha
    )

    if _logger.isEnabledFor(logging.DEBUG):
        _logger.debug(
            "iter %d: eps=%.6g j=%d j_prop=%d log_alpha=%.4g accept=%s",
            state.iteration + 1,
            epsilon_t,
            j,
            j_prop,
            log_alpha,
            isaccept,
        )

    if isaccept:
        return AutoMALAState(x, p, lp, a, b, epsilon_t, j, True, state.iteration + 1)
    return AutoMALAState(
        x_prev, p_prev, lp_prev, a, b, epsilon_t, j, False, state.iteration + 1
    )


# ---------------------------
# Logging
# ---------------------------


class SimpleLogger:
    """
    verbose:
      0: silent
      1: phase events + periodic summaries
      2: more frequent summaries
    """

    def __init__(self, verbose: int = 1):
        self.verbose = int(verbose)

    def log(self, msg: str, level: int = 1) -> None:
        if self.verbose >= level:
            _logger.info(msg)


# ---------------------------
# Sampling driver
# ---------------------------


def automala_sample(
    model: LogDensityProblem,
    options: Optional[AutoMALAOptions] = None,
    num_samples: int = 1000,
    rng=None,
    initial_position: Optional[ArrayLike] = None,
    discard_initial: int = 0,
    progress: bool = False,
    verbose: int = _DEFAULT_VERBOSE,
    log_every: int = _DEFAULT_LOG_EVERY,
    callback: Optional[Callable[[AutoMALAState], None]] = None,
) -> List[AutoMALAState]:
    """Run one chain and return its states in order.

    The chain is run for discard_initial + num_samples iterations and the
    first discard_initial states are dropped.

    rng:
      None (backend global generator), an int seed, or a backend generator.
    callback:
      Called with each kept state.
    verbose:
      0: silent
      1: phase events + periodic summaries
      2: more frequent summaries
    """
    if num_samples < 1:
        raise ValueError("num_samples must be >= 1")
    if discard_initial < 0:
        raise ValueError("discard_initial must be >= 0")

    options = options or AutoMALAOptions()
    rng = resolve_rng(rng)
    logger = SimpleLogger(verbose=verbose)
    num_total = discard_initial + num_samples

    logger.log(
        f"dim={model.dimension()}, num_samples={num_samples}, "
        f"discard_initial={discard_initial}",
        level=1,
    )
    logger.log(
        f"epsilon_init={options.epsilon_init:.6g}, "
        f"num_unadjusted={options.num_unadjusted}",
        level=1,
    )

    iterations = range(num_total)
    if progress:
        iterations = tqdm(iterations, desc="automala", leave=True)

    states: List[AutoMALAState] = []
    n_accept = 0
    state = None
    t_start = time.time()

    for t in iterations:
        if state is None:
            state = automala_init(model, options, rng, initial_position)
        else:
            state = automala_transition(model, options, rng, state)
        n_accept += int(state.isaccept)

        if t >= discard_initial:
            states.append(state)
            if callback is not None:
                callback(state)

        do_log = ((t + 1) % max(1, log_every) == 0) or (t + 1 == num_total)
        if verbose >= 2:
            do_log = ((t + 1) % max(1, log_every // 5) == 0) or do_log
        if do_log:
            logger.log(
                f"iter {t+1}/{num_total}: eps={state.epsilon:.6g}, j={state.j}, "
                f"accept_rate={n_accept / (t + 1):.3f}",
                level=1,
            )
        if progress:
            iterations.set_postfix(
                eps=f"{state.epsilon:.3g}", acc=f"{n_accept / (t + 1):.3f}"
            )

    logger.log(f"sample: done in {time.time() - t_start:.2f}s", level=1)
    return states


def sample_positions(states: List[AutoMALAState]) -> ArrayLike:
    """Stack the positions of `states` into an (n, dim) array."""
    return gnp.stack([s.x for s in states])


# ---------------------------
# Adaptation driver
# ---------------------------


def round_based_adaptation(
    model: LogDensityProblem,
    options: Optional[AutoMALAOptions] = None,
    num_rounds: int = _DEFAULT_NUM_ROUNDS,
    rng=None,
    initial_position: Optional[ArrayLike] = None,
    verbose: int = _DEFAULT_VERBOSE,
    **kwargs,
) -> Tuple[AutoMALAOptions, ArrayLike]:
    """Run adaptation rounds, doubling the number of iterations each time.

    Parameters
    ----------
    model : LogDensityProblem
        Target model.
    options : AutoMALAOptions, optional
        Sampler whose epsilon_init seeds the first round.
    num_rounds : int
        Round i runs 2**i fully unadjusted iterations.
    rng : None, int or backend generator
    initial_position : array, optional
        Starting point of the first round (drawn from N(0, I) if None).
    **kwargs
        Passed to automala_sample.

    Returns
    -------
    options : AutoMALAOptions
        epsilon_init set to the average step size of the last round and
        num_unadjusted = 0.
    position : array
        Last position of the last round.
    """
    if num_rounds < 1:
        raise ValueError("num_rounds must be >= 1")

    options = options or AutoMALAOptions()
    rng = resolve_rng(rng)
    logger = SimpleLogger(verbose=verbose)

    epsilon_init = options.epsilon_init
    position = initial_position
    for i in range(1, num_rounds + 1):
        num_iters = 2**i
        options_round = replace(
            options, epsilon_init=epsilon_init, num_unadjusted=num_iters
        )
        states = automala_sample(
            model,
            options_round,
            num_iters,
            rng=rng,
            initial_position=position,
            **kwargs,
        )
        epsilon_init = sum(s.epsilon for s in states) / len(states)
        position = states[-1].x
        logger.log(
            f"adaptation round {i}/{num_rounds}: {num_iters} iterations, "
            f"epsilon_init -> {epsilon_init:.6g}",
            level=1,
        )

    return replace(options, epsilon_init=epsilon_init, num_unadjusted=0), position
