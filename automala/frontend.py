# automala/frontend.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Front-end registry.

An inference front end that drives an autoMALA chain asks for "the current
sample" through getparams rather than reading state fields. Front ends that
need another representation register their own extractor:

    register_frontend("mylib", lambda state: mylib.wrap(state.x))
    getparams(state, frontend="mylib")

Nothing is registered at import time apart from the "default" extractor.
"""

from typing import Any, Callable, Dict, List

from automala.config import get_logger

ParamsExtractor = Callable[[Any], Any]

_logger = get_logger()
_registry: Dict[str, ParamsExtractor] = {}


def register_frontend(name: str, extractor: ParamsExtractor, overwrite: bool = False) -> None:
    if not callable(extractor):
        raise TypeError("extractor must be callable")
    if name in _registry and not overwrite:
        raise ValueError(f"front end {name!r} is already registered")
    _registry[name] = extractor
    _logger.debug("registered front end %r", name)


def unregister_frontend(name: str) -> None:
    if name == "default":
        raise ValueError("the default front end cannot be removed")
    _registry.pop(name, None)


def get_frontend(name: str) -> ParamsExtractor:
    try:
        return _registry[name]
    except KeyError:
        raise KeyError(
            f"unknown front end {name!r}; available: {available_frontends()}"
        ) from None


def available_frontends() -> List[str]:
    return sorted(_registry)


def getparams(state, frontend: str = "default"):
    """Return the current sample of `state` as seen by `frontend`."""
    return get_frontend(frontend)(state)


def _default_getparams(state):
    return state.x


register_frontend("default", _default_getparams)
