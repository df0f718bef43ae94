"""System random source using the OS CSPRNG.

Always available and cryptographically secure, but not seedable: use it
when reproducibility does not matter.
"""

from __future__ import annotations

import secrets

from reservoir_sampler.rng.base import RandomSource
from reservoir_sampler.rng.registry import register_random_source


@register_random_source("system")
class SystemRandomSource(RandomSource):
    """``secrets.randbelow()`` wrapper, backed by ``os.urandom()``."""

    @property
    def name(self) -> str:
        """Return ``'system'``."""
        return "system"

    @property
    def is_available(self) -> bool:
        """Always returns ``True``."""
        return True

    def randint(self, high: int) -> int:
        """Draw uniformly from ``[0, high]``."""
        return secrets.randbelow(high + 1)

    def close(self) -> None:
        """No-op: no resources to release."""
