# automala/__init__.py

from . import config
from . import num
from . import model
from . import frontend
from . import mcmc
from . import misc
from .model import LogDensityModel, LogDensityProblem
from .frontend import getparams, register_frontend
from .mcmc.automala import (
    AutoMALAOptions,
    AutoMALAState,
    StepSizeSearchError,
    automala_init,
    automala_transition,
    automala_sample,
    round_based_adaptation,
)
import os

__all__ = [
    "num",
    "mcmc",
    "LogDensityModel",
    "LogDensityProblem",
    "AutoMALAOptions",
    "AutoMALAState",
    "StepSizeSearchError",
    "automala_init",
    "automala_transition",
    "automala_sample",
    "round_based_adaptation",
    "getparams",
    "register_frontend",
    "__version__",
]

# Read version from VERSION file at project root
_version_file = os.path.join(os.path.dirname(__file__), "..", "VERSION")
try:
    with open(_version_file, "r") as f:
        __version__ = f.read().strip()
except FileNotFoundError:
    __version__ = "0.0.0"
