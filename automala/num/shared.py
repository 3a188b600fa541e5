# automala/num/shared.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""Helpers used by both backends."""


def dtype_name(dtype) -> str:
    """Name of the floating dtype ('float32' or 'float64') set in config."""
    if dtype is None or dtype is float:
        return "float64"
    s = str(dtype).lower()
    if "float32" in s or s == "single":
        return "float32"
    if "float64" in s or "double" in s:
        return "float64"
    raise ValueError(f"Unsupported dtype: {dtype!r}")


def derivative_finite_diff(f, x, h):
    """5-point central difference derivative of a scalar function f at x."""
    return (-f(x + 2 * h) + 8 * f(x + h) - 8 * f(x - h) + f(x - 2 * h)) / (12.0 * h)
