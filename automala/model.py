# automala/model.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Target models.

A sampler only sees its target through three operations:

    dimension() -> int
    logdensity(x) -> scalar
    logdensity_and_gradient(x) -> (scalar, (dim,) array)

where x is a position of shape (dim,) and the log-density is known up to
an additive constant. Any object implementing these methods can be passed
to the samplers in automala.mcmc; LogDensityModel builds one from a plain
log_prob callable.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, Tuple, runtime_checkable

import automala.num as gnp

ArrayLike = any  # Placeholder for unified array type


@runtime_checkable
class LogDensityProblem(Protocol):
    """Capability interface of a target model."""

    def dimension(self) -> int: ...

    def logdensity(self, x: ArrayLike) -> ArrayLike: ...

    def logdensity_and_gradient(self, x: ArrayLike) -> Tuple[ArrayLike, ArrayLike]: ...


class LogDensityModel:
    """Target model built from a log-density callable.

    Parameters
    ----------
    log_prob : callable
        log_prob(x) -> scalar, with x of shape (dim,).
    dim : int
        Dimension of the target.
    grad_log_prob : callable, optional
        grad_log_prob(x) -> (dim,) array. If omitted, the gradient is
        obtained with gnp.value_and_grad (finite differences with the
        numpy backend, autograd with the torch backend).
    name : str, optional
        Label used in log messages.
    """

    def __init__(
        self,
        log_prob: Callable[[ArrayLike], ArrayLike],
        dim: int,
        grad_log_prob: Optional[Callable[[ArrayLike], ArrayLike]] = None,
        name: Optional[str] = None,
    ):
        if int(dim) < 1:
            raise ValueError("dim must be a positive integer")
        self.log_prob = log_prob
        self.dim = int(dim)
        self.grad_log_prob = grad_log_prob
        self.name = name or getattr(log_prob, "__name__", "log_prob")

    def __repr__(self):
        return f"LogDensityModel(name={self.name!r}, dim={self.dim})"

    def _check_position(self, x: ArrayLike) -> ArrayLike:
        x = gnp.asarray(x)
        if tuple(x.shape) != (self.dim,):
            raise ValueError(
                f"position must have shape ({self.dim},), got {tuple(x.shape)}"
            )
        return x

    def dimension(self) -> int:
        return self.dim

    def logdensity(self, x: ArrayLike) -> ArrayLike:
        return self.log_prob(self._check_position(x))

    def logdensity_and_gradient(self, x: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
        x = self._check_position(x)
        if self.grad_log_prob is not None:
            return self.log_prob(x), gnp.asarray(self.grad_log_prob(x))
        return gnp.value_and_grad(self.log_prob, x)


def as_model(target, dim: Optional[int] = None) -> LogDensityProblem:
    """Return `target` if it is already a model, else wrap a log_prob callable."""
    if isinstance(target, LogDensityProblem):
        return target
    if callable(target):
        if dim is None:
            raise ValueError("dim is required to wrap a log_prob callable")
        return LogDensityModel(target, dim)
    raise TypeError(
        "target must implement dimension/logdensity/logdensity_and_gradient "
        "or be a log_prob callable"
    )
