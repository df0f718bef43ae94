"""Visit counter: the number of non-duplicate rows processed so far."""

from __future__ import annotations

from typing import Any

import numpy as np

from reservoir_sampler.exceptions import (
    ConfigurationError,
    InternalConsistencyFault,
    ShapeMismatchError,
)


class VisitCounter:
    """Scalar int64 count backing Algorithm R's replacement probability.

    The value lives in a 0-d ``numpy.int64`` array so it can be exported and
    restored alongside the reservoir rows.

    Args:
        value: Initial count; a Python int or a 0-d array.

    Raises:
        ShapeMismatchError: If *value* is not a scalar.
        ConfigurationError: If *value* is negative.
    """

    def __init__(self, value: Any = 0) -> None:
        if np.ndim(value) != 0:
            raise ShapeMismatchError(
                f"Visit count must be a scalar, got shape {np.shape(value)}"
            )
        count = int(value)
        if count < 0:
            raise ConfigurationError(f"Visit count must be >= 0, got {count}")
        self._value = np.array(count, dtype=np.int64)

    @property
    def value(self) -> int:
        return int(self._value)

    def as_array(self) -> np.ndarray:
        """Return a copy of the count as a 0-d int64 array."""
        return self._value.copy()

    def increment(self) -> None:
        self._value += 1

    def check_advanced(self, before: int, expected_delta: int) -> None:
        """Assert the counter moved from *before* by exactly *expected_delta*.

        Raises:
            InternalConsistencyFault: If it did not.
        """
        if self.value != before + expected_delta:
            raise InternalConsistencyFault(
                f"Visit count is {self.value}, expected {before} + {expected_delta} "
                f"= {before + expected_delta}"
            )

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"VisitCounter({self.value})"
