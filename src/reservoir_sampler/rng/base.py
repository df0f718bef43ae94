"""Abstract base class for all random sources.

Every random source, whether a seeded numpy generator, the OS CSPRNG or a
scripted test double, implements this interface. The sampling engine makes
exactly one ``randint()`` call per non-duplicate row once the reservoir is
full, so a source's draw sequence fully determines the sampling outcome.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class RandomSource(ABC):
    """Abstract base for all random sources.

    A source is instance-local mutable state: sharing one across threads
    without external synchronization is unsafe.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable source identifier (e.g., ``'numpy'``, ``'system'``)."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether the source can currently produce draws."""

    @abstractmethod
    def randint(self, high: int) -> int:
        """Return an integer drawn uniformly from the closed range ``[0, high]``.

        Args:
            high: Inclusive upper bound, ``>= 0``.

        Returns:
            One of the ``high + 1`` equally likely outcomes.

        Raises:
            RandomSourceError: If the source cannot produce a draw.
        """

    @abstractmethod
    def close(self) -> None:
        """Release resources held by the source."""

    def health_check(self) -> dict[str, Any]:
        """Return a status dictionary for this source.

        Returns:
            Dictionary with at least ``'source'`` and ``'healthy'`` keys.
        """
        return {"source": self.name, "healthy": self.is_available}
