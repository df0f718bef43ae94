"""Seedable random source backed by ``numpy.random.Generator``.

This is the default source. With a fixed seed the draw sequence, and
therefore every append/replace/discard decision, is exactly reproducible.
"""

from __future__ import annotations

import numpy as np

from reservoir_sampler.rng.base import RandomSource
from reservoir_sampler.rng.registry import register_random_source


@register_random_source("numpy")
class NumpyRandomSource(RandomSource):
    """PCG64 generator from ``numpy.random.default_rng``.

    Args:
        seed: Optional seed for reproducible draws.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._seed = seed
        self._rng = np.random.default_rng(seed)

    @property
    def name(self) -> str:
        """Return ``'numpy'``."""
        return "numpy"

    @property
    def is_available(self) -> bool:
        """Always returns ``True``."""
        return True

    @property
    def seed(self) -> int | None:
        """The seed this source was created with."""
        return self._seed

    def randint(self, high: int) -> int:
        """Draw uniformly from ``[0, high]`` with ``Generator.integers``."""
        return int(self._rng.integers(0, high, endpoint=True))

    def close(self) -> None:
        """No-op: no resources to release."""
