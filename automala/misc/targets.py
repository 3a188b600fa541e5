# automala/misc/targets.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Reference target distributions.

Each constructor returns a LogDensityModel. Log-densities are written with
automala.num operations so that the torch backend can differentiate them.
"""

import automala.num as gnp
from automala.model import LogDensityModel


def standard_normal(dim: int = 1, analytic_grad: bool = True) -> LogDensityModel:
    """N(0, I_dim), log pi(x) = -|x|^2 / 2."""

    def log_prob(x):
        return -0.5 * gnp.sum(x * x)

    def grad_log_prob(x):
        return -x

    return LogDensityModel(
        log_prob,
        dim,
        grad_log_prob=grad_log_prob if analytic_grad else None,
        name="standard_normal",
    )


def independent_normal(loc, scale) -> LogDensityModel:
    """Product of univariate normals N(loc[i], scale[i]^2)."""
    loc = gnp.asarray(loc).reshape(-1)
    scale = gnp.asarray(scale).reshape(-1)
    if loc.shape != scale.shape:
        raise ValueError("loc and scale must have the same length")

    def log_prob(x):
        return gnp.sum(gnp.normal.logpdf(x, loc, scale))

    def grad_log_prob(x):
        return -(x - loc) / (scale * scale)

    return LogDensityModel(
        log_prob, loc.shape[0], grad_log_prob=grad_log_prob, name="independent_normal"
    )


def gaussian(mean, cov) -> LogDensityModel:
    """Multivariate normal N(mean, cov), up to its normalizing constant."""
    mean = gnp.asarray(mean).reshape(-1)
    cov = gnp.asarray(cov)
    d = mean.shape[0]
    if tuple(cov.shape) != (d, d):
        raise ValueError("cov must have shape (dim, dim)")
    precision = gnp.inv(cov)

    def log_prob(x):
        dx = x - mean
        return -0.5 * gnp.einsum("i,ij,j->", dx, precision, dx)

    def grad_log_prob(x):
        return -gnp.einsum("ij,j->i", precision, x - mean)

    return LogDensityModel(log_prob, d, grad_log_prob=grad_log_prob, name="gaussian")


def rosenbrock(a: float = 1.0, b: float = 100.0, temperature: float = 1.0) -> LogDensityModel:
    """Banana-shaped density exp(-U(x, y) / T) with the Rosenbrock potential

        U(x, y) = (a - x)^2 + b (y - x^2)^2.

    b = 100 is the classic Rosenbrock; smaller b or larger T is easier to sample.
    The gradient is computed by the backend.
    """

    def log_prob(q):
        x = q[0]
        y = q[1]
        return -((a - x) ** 2 + b * (y - x**2) ** 2) / temperature

    return LogDensityModel(log_prob, 2, name="rosenbrock")


def funnel(dim: int = 2, scale: float = 3.0) -> LogDensityModel:
    """Neal's funnel: v ~ N(0, scale^2), x_k | v ~ N(0, exp(v)), k = 1..dim-1.

    The local scale varies by orders of magnitude along v, which is where a
    locally selected step size helps.
    """
    if dim < 2:
        raise ValueError("funnel needs dim >= 2")

    def log_prob(q):
        v = q[0]
        z = q[1:]
        return (
            -0.5 * v * v / scale**2
            - 0.5 * gnp.sum(z * z) * gnp.exp(-v)
            - 0.5 * (dim - 1) * v
        )

    def grad_log_prob(q):
        v = q[0]
        z = q[1:]
        g = gnp.zeros(dim)
        g[0] = -v / scale**2 + 0.5 * gnp.sum(z * z) * gnp.exp(-v) - 0.5 * (dim - 1)
        g[1:] = -z * gnp.exp(-v)
        return g

    return LogDensityModel(log_prob, dim, grad_log_prob=grad_log_prob, name="funnel")
