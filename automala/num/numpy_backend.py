# automala/num/numpy_backend.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""NumPy numerical backend for automala.

Positions and momenta are 1d float arrays. Gradients of log-densities are
computed by 5-point central finite differences, one coordinate at a time,
so this backend is meant for targets of low to moderate dimension or for
models that supply an analytic gradient.
"""

from typing import Any, Callable, Optional, Tuple

from automala.config import get_config, init_backend, get_logger
from .shared import derivative_finite_diff, dtype_name

ArrayLike = Any

__all__ = [
    "ndarray",
    "asarray",
    "copy",
    "zeros",
    "to_np",
    "to_scalar",
    "stack",
    "abs",
    "exp",
    "sum",
    "einsum",
    "inv",
    "value_and_grad",
    "set_seed",
    "default_rng",
    "is_rng",
    "rand",
    "randn",
    "normal",
]

_automala_backend_: str = init_backend()
_config = get_config()
get_logger().debug("Using backend: %s", _automala_backend_)

import numpy
from numpy import stack, abs, exp, sum, einsum
from numpy.linalg import inv
from scipy.stats import norm as _scipy_normal

_np_dtype = numpy.dtype(dtype_name(_config.dtype)).type

ndarray = numpy.ndarray

# ..................................................


def asarray(x, dtype=None):
    if dtype is not None:
        return numpy.asarray(x, dtype=dtype)
    out = numpy.asarray(x)
    if numpy.issubdtype(out.dtype, numpy.integer) or numpy.issubdtype(
        out.dtype, numpy.floating
    ):
        return out.astype(_np_dtype, copy=False)
    return out


def copy(x):
    return numpy.array(x, copy=True)


def zeros(shape, dtype=None):
    return numpy.zeros(shape, dtype=_np_dtype if dtype is None else dtype)


def to_np(x):
    return numpy.asarray(x)


def to_scalar(x):
    return x.item()


# ..................................................


def _as_scalar(y):
    if numpy.isscalar(y):
        return y
    if isinstance(y, numpy.ndarray) and y.size == 1:
        return y.reshape(())
    raise ValueError("f(x) must return a scalar.")


def value_and_grad(
    f: Callable[[ArrayLike], ArrayLike],
    x: ArrayLike,
    *,
    h: float = 1e-5,
) -> Tuple[ArrayLike, ArrayLike]:
    """Return (f(x), grad f(x)) for a scalar function of a 1d array.

    Non-finite values are returned as they are; the gradient then
    contains nan or inf entries.
    """
    x = asarray(x)
    y = _as_scalar(f(x))
    g = numpy.zeros_like(x, dtype=_np_dtype)
    x_tmp = x.copy()
    for k in range(x.shape[0]):

        def f_k(xk):
            x_tmp[k] = xk
            return _as_scalar(f(x_tmp))

        g[k] = derivative_finite_diff(f_k, x[k], h)
        x_tmp[k] = x[k]
    return y, g


# ..................................................

# Global generator, used when a sampler is called with rng=None
_np_rng = numpy.random.default_rng(seed=_config.seed)


def set_seed(seed: int) -> None:
    """Reset the global NumPy generator."""
    global _np_rng
    _np_rng = numpy.random.default_rng(seed=seed)


def default_rng(seed: Optional[int] = None):
    """Return a new independent NumPy generator."""
    return numpy.random.default_rng(seed=seed)


def is_rng(obj) -> bool:
    return isinstance(obj, numpy.random.Generator)


def rand(*shape: int, rng=None) -> ArrayLike:
    g = _np_rng if rng is None else rng
    return g.random(shape, dtype=_np_dtype)


def randn(*shape: int, rng=None) -> ArrayLike:
    g = _np_rng if rng is None else rng
    return g.standard_normal(shape).astype(_np_dtype, copy=False)


class normal:
    @staticmethod
    def logpdf(x, loc=0.0, scale=1.0):
        return _scipy_normal.logpdf(x, loc, scale)
