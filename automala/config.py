# automala/config.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
import os
import logging
from importlib.util import find_spec

# Read version from VERSION file
_version_file = os.path.join(os.path.dirname(__file__), "..", "VERSION")
try:
    with open(os.path.abspath(_version_file), "r") as f:
        __version__ = f.read().strip()
except FileNotFoundError:
    __version__ = "0.0.0"

_BACKENDS = ("numpy", "torch")


class _AutoMALAConfig:
    def __init__(self):
        self.version = __version__
        self.backend = None
        self.dtype = float
        self.seed = 1234
        # logger lives in config
        self.logger = logging.getLogger("automala")
        if not self.logger.handlers:
            h = logging.StreamHandler()
            h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
            self.logger.addHandler(h)
        self.logger.setLevel(logging.INFO)

    def __str__(self):
        return (
            f"AutoMALAConfig("
            f"version={self.version}, "
            f"backend={self.backend}, "
            f"dtype={self.dtype}, "
            f"seed={self.seed})"
        )

    def __repr__(self):
        return (
            f"<AutoMALAConfig "
            f"version={self.version!r}, "
            f"backend={self.backend!r}, "
            f"dtype={self.dtype!r}, "
            f"seed={self.seed!r}>"
        )

    def update(self, **kwargs):
        for k, v in kwargs.items():
            setattr(self, k, v)
        return self


_config = _AutoMALAConfig()


def get_config():
    return _config


def _detect_backend():
    env = os.environ.get("AUTOMALA_BACKEND")
    if env in _BACKENDS:
        return env
    if find_spec("torch") is not None:
        return "torch"
    return "numpy"


def init_backend():
    """Idempotent. Detect and store backend, set env for downstream imports."""
    if _config.backend is None:
        backend = _detect_backend()
        _config.backend = backend
        os.environ["AUTOMALA_BACKEND"] = backend
    return _config.backend


def set_backend(backend: str):
    """Force a backend ('numpy'|'torch') before importing automala.num."""
    if backend not in _BACKENDS:
        raise ValueError("backend must be 'numpy' or 'torch'")
    _config.backend = backend
    os.environ["AUTOMALA_BACKEND"] = backend


def get_backend():
    """Return current backend; triggers detection if not set."""
    return _config.backend or init_backend()


def set_seed(seed: int):
    """Default seed used when a sampler is called without a generator.

    Also resets the global generator of the active backend.
    """
    _config.seed = int(seed)
    from automala import num

    num.set_seed(_config.seed)


def get_seed():
    return _config.seed


def get_logger():
    return _config.logger


def set_log_level(level):
    _config.logger.setLevel(level)
