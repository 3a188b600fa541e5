# automala/num/torch_backend.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""Torch numerical backend for automala.

Same API as the NumPy backend. Gradients of log-densities are computed
with torch.autograd, and random draws come from torch.Generator objects.
"""

from typing import Any, Callable, Optional, Tuple

from automala.config import get_config, init_backend, get_logger
from .shared import dtype_name

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

import torch
import numpy
from torch import stack, abs, einsum
from torch.linalg import inv
from torch.distributions.normal import Normal

_torch_dtype = getattr(torch, dtype_name(_config.dtype))
torch.set_default_dtype(_torch_dtype)

ndarray = torch.Tensor

# ..................................................


def asarray(x, dtype=None):
    if isinstance(x, torch.Tensor):
        t = x
    elif isinstance(x, numpy.ndarray):
        t = torch.from_numpy(numpy.ascontiguousarray(x))
    else:
        t = torch.as_tensor(x)
    target = _torch_dtype if dtype is None else dtype
    if t.dtype == torch.bool and dtype is None:
        return t
    return t if t.dtype == target else t.to(dtype=target)


def copy(x):
    return asarray(x).clone().detach()


def zeros(shape, dtype=None):
    return torch.zeros(shape, dtype=_torch_dtype if dtype is None else dtype)


def to_np(x):
    if torch.is_tensor(x):
        return x.detach().cpu().numpy()
    return numpy.asarray(x)


def to_scalar(x):
    return x.item()


def exp(x):
    return torch.exp(asarray(x))


def sum(x, axis=None):
    return torch.sum(x) if axis is None else torch.sum(x, dim=axis)


# ..................................................


def value_and_grad(
    f: Callable[[ArrayLike], ArrayLike], x: ArrayLike
) -> Tuple[ArrayLike, ArrayLike]:
    """Return (f(x), grad f(x)) computed by autograd.

    Non-finite values are returned as they are, together with the
    gradient autograd produces for them.
    """
    with torch.enable_grad():
        x_ = asarray(x).detach().requires_grad_(True)
        y = f(x_)
        if not torch.is_tensor(y) or y.numel() != 1:
            raise ValueError("f(x) must return a scalar tensor.")
        y = y.reshape(())
        (g,) = torch.autograd.grad(y, x_, allow_unused=True)
        if g is None:
            g = torch.zeros_like(x_)
    return y.detach(), g.detach()


# ..................................................

# Global generator, used when a sampler is called with rng=None
_torch_gen = torch.Generator()
_torch_gen.manual_seed(_config.seed)


def set_seed(seed: int) -> None:
    """Reset the global Torch generator."""
    global _torch_gen
    _torch_gen = torch.Generator()
    _torch_gen.manual_seed(int(seed))


def default_rng(seed: Optional[int] = None):
    """Return a new independent Torch generator."""
    g = torch.Generator()
    if seed is None:
        g.seed()
    else:
        g.manual_seed(int(seed))
    return g


def is_rng(obj) -> bool:
    return isinstance(obj, torch.Generator)


def rand(*shape, rng=None):
    return torch.rand(shape, generator=_torch_gen if rng is None else rng)


def randn(*shape, rng=None):
    return torch.randn(shape, generator=_torch_gen if rng is None else rng)


class normal:
    @staticmethod
    def logpdf(x, loc=0.0, scale=1.0):
        return Normal(asarray(loc), asarray(scale)).log_prob(asarray(x))
