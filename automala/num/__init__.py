# automala/num/__init__.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Array operations used by automala, dispatched to the backend selected in
automala.config ('numpy' or 'torch').

    import automala.num as gnp

    x = gnp.randn(3, rng=gnp.default_rng(0))
    lp, g = gnp.value_and_grad(lambda x: -0.5 * gnp.sum(x * x), x)
"""

from automala.config import init_backend

if init_backend() == "torch":
    from .torch_backend import *  # noqa: F401,F403
else:
    from .numpy_backend import *  # noqa: F401,F403
