"""Scripted random source that replays a fixed draw sequence.

Lets tests and simulations state the exact draws Algorithm R will see, so
the expected reservoir contents can be computed by hand.
"""

from __future__ import annotations

from collections.abc import Iterable

from reservoir_sampler.exceptions import RandomSourceError
from reservoir_sampler.rng.base import RandomSource


class ScriptedRandomSource(RandomSource):
    """Replays *draws* in order, one per ``randint()`` call.

    Every requested bound is recorded in :attr:`requested_bounds`, which
    makes it possible to assert which ``[0, v]`` ranges the engine asked for.

    Args:
        draws: The values to return, in order.
    """

    def __init__(self, draws: Iterable[int] = ()) -> None:
        self._draws = [int(d) for d in draws]
        self._position = 0
        self.requested_bounds: list[int] = []

    @property
    def name(self) -> str:
        """Return ``'scripted'``."""
        return "scripted"

    @property
    def is_available(self) -> bool:
        """``True`` while unconsumed draws remain."""
        return self._position < len(self._draws)

    @property
    def remaining(self) -> int:
        """Number of draws not yet consumed."""
        return len(self._draws) - self._position

    def randint(self, high: int) -> int:
        """Return the next scripted draw.

        Raises:
            RandomSourceError: If the script is exhausted or the next draw
                lies outside ``[0, high]``.
        """
        self.requested_bounds.append(high)
        if self._position >= len(self._draws):
            raise RandomSourceError(
                f"Scripted random source exhausted after {len(self._draws)} draws"
            )
        value = self._draws[self._position]
        if not 0 <= value <= high:
            raise RandomSourceError(
                f"Scripted draw #{self._position} = {value} is outside [0, {high}]"
            )
        self._position += 1
        return value

    def close(self) -> None:
        """No-op: no resources to release."""
