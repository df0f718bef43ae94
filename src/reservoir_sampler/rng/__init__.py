"""Random source subsystem for reservoir-sampler.

Re-exports the ABC, registry, and all built-in source implementations
for convenient access::

    from reservoir_sampler.rng import RandomSource, get_random_source
    from reservoir_sampler.rng import NumpyRandomSource, ScriptedRandomSource
"""

from reservoir_sampler.rng.base import RandomSource
from reservoir_sampler.rng.numpy_source import NumpyRandomSource
from reservoir_sampler.rng.registry import (
    available_random_sources,
    get_random_source,
    register_random_source,
)
from reservoir_sampler.rng.scripted import ScriptedRandomSource
from reservoir_sampler.rng.system import SystemRandomSource

__all__ = [
    "NumpyRandomSource",
    "RandomSource",
    "ScriptedRandomSource",
    "SystemRandomSource",
    "available_random_sources",
    "get_random_source",
    "register_random_source",
]
