# automala/mcmc/__init__.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Markov chain Monte Carlo samplers for automala.

Public API
----------
AutoMALAOptions, AutoMALAState
    Sampler configuration and chain state.
automala_init, automala_transition
    First state and one transition of the autoMALA kernel.
leapfrog, step_size_selector, sample_a_and_b
    Building blocks of the kernel.
automala_sample, sample_positions
    Chain driver and position extraction.
round_based_adaptation
    Step size calibration by doubling rounds.
summarize, running_acceptance_rate, plot_automala_diagnostics
    Run summaries and trace plots.
"""
from __future__ import annotations

import importlib

__all__ = [
    "AutoMALAOptions",
    "AutoMALAState",
    "StepSizeSearchError",
    "automala_init",
    "automala_transition",
    "leapfrog",
    "step_size_selector",
    "sample_a_and_b",
    "automala_sample",
    "sample_positions",
    "round_based_adaptation",
    "summarize",
    "running_acceptance_rate",
    "plot_automala_diagnostics",
]

_EXPORT_TO_MODULE = {
    # Kernel
    "AutoMALAOptions": "automala",
    "AutoMALAState": "automala",
    "StepSizeSearchError": "automala",
    "automala_init": "automala",
    "automala_transition": "automala",
    "leapfrog": "automala",
    "step_size_selector": "automala",
    "sample_a_and_b": "automala",
    # Drivers
    "automala_sample": "automala",
    "sample_positions": "automala",
    "round_based_adaptation": "automala",
    # Diagnostics
    "summarize": "diagnostics",
    "running_acceptance_rate": "diagnostics",
    "plot_automala_diagnostics": "diagnostics",
}


def __getattr__(name: str):
    module_name = _EXPORT_TO_MODULE.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = importlib.import_module(f"{__name__}.{module_name}")
    obj = getattr(module, name)
    globals()[name] = obj
    return obj


def __dir__():
    return sorted(set(globals().keys()) | set(__all__))
