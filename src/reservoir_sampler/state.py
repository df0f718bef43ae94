"""Caller-owned reservoir state, persisted across ``process`` calls.

A ``ReservoirState`` bundles the reservoir rows, the visit counter and,
when key tracking is on, the object index. The sampler never creates hidden
state of its own: the same state object is passed into every call and
accumulates the stream's history until the caller drops it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import numpy as np

from reservoir_sampler.buffer import ReservoirBuffer
from reservoir_sampler.counter import VisitCounter
from reservoir_sampler.exceptions import ConfigurationError, ShapeMismatchError
from reservoir_sampler.index import UNASSIGNED, ObjectIndex


def _check_capacity(capacity: int) -> None:
    if capacity <= 0:
        raise ConfigurationError(f"Reservoir capacity must be > 0, got {capacity}")


@dataclass
class ReservoirState:
    """Mutable state of one reservoir.

    Attributes:
        capacity: Maximum number of rows kept.
        buffer: Row storage.
        counter: Number of non-duplicate rows seen so far.
        index: Object index, ``None`` when key tracking is off.
    """

    capacity: int
    buffer: ReservoirBuffer
    counter: VisitCounter
    index: ObjectIndex | None = None

    @classmethod
    def empty(cls, capacity: int, key_tracking: bool = False) -> ReservoirState:
        """Create a fresh state: no rows, zero visits, all slots unassigned.

        Raises:
            ConfigurationError: If *capacity* is not positive.
        """
        _check_capacity(capacity)
        return cls(
            capacity=capacity,
            buffer=ReservoirBuffer(capacity),
            counter=VisitCounter(0),
            index=ObjectIndex(capacity) if key_tracking else None,
        )

    @classmethod
    def from_arrays(
        cls,
        capacity: int,
        reservoir: Any = None,
        visit_count: Any = 0,
        slot_owners: Any = None,
        position_map: Mapping[int, int] | None = None,
    ) -> ReservoirState:
        """Restore a state from arrays previously produced by :meth:`to_arrays`.

        Args:
            capacity: Maximum number of rows kept.
            reservoir: Occupied rows, first dimension indexing rows. ``None``
                for a reservoir that never saw a batch.
            visit_count: Scalar visit count.
            slot_owners: ``int64[capacity]`` owners; enables key tracking.
            position_map: Optional object id -> slot map, checked against
                *slot_owners*.

        Raises:
            ConfigurationError: If the parts do not describe a reachable state.
            ShapeMismatchError: If *visit_count* is not a scalar or
                *reservoir* has no row dimension.
        """
        _check_capacity(capacity)
        counter = VisitCounter(visit_count)
        buffer = ReservoirBuffer(capacity)

        rows = 0
        if reservoir is not None:
            data = np.asarray(reservoir)
            if data.ndim < 1:
                raise ShapeMismatchError("Reservoir must have a leading row dimension")
            rows = data.shape[0]
            if rows > capacity:
                raise ConfigurationError(f"Reservoir holds {rows} rows, capacity is {capacity}")
            if rows:
                buffer.load(data)
            else:
                buffer.adopt_shape_from(data)

        if rows != min(capacity, counter.value):
            raise ConfigurationError(
                f"Reservoir holds {rows} rows but visit count {counter.value} "
                f"implies {min(capacity, counter.value)}"
            )

        index = None
        if slot_owners is not None:
            owners = np.asarray(slot_owners, dtype=np.int64)
            if owners.shape != (capacity,):
                raise ConfigurationError(
                    f"Slot owners must have shape ({capacity},), got {owners.shape}"
                )
            if (owners[rows:] != UNASSIGNED).any():
                raise ConfigurationError("Unoccupied slots must not have an owner")
            index = ObjectIndex.from_arrays(owners, position_map)
        elif position_map is not None:
            raise ConfigurationError("A position map cannot be restored without slot owners")

        return cls(capacity=capacity, buffer=buffer, counter=counter, index=index)

    @property
    def key_tracking(self) -> bool:
        return self.index is not None

    @property
    def reservoir(self) -> np.ndarray | None:
        """Read-only view of the occupied rows, ``None`` before any batch."""
        return self.buffer.data

    @property
    def occupied(self) -> int:
        return self.buffer.occupied

    @property
    def visit_count(self) -> int:
        return self.counter.value

    @property
    def position_map(self) -> dict[int, int] | None:
        """Copy of object id -> slot, ``None`` without key tracking."""
        if self.index is None:
            return None
        return dict(self.index.position_map)

    @property
    def slot_owners(self) -> np.ndarray | None:
        """Copy of slot -> object id, ``None`` without key tracking."""
        if self.index is None:
            return None
        return self.index.slot_owners

    def to_arrays(self) -> dict[str, Any]:
        """Export the state as plain arrays accepted by :meth:`from_arrays`."""
        reservoir = self.buffer.data
        return {
            "capacity": self.capacity,
            "reservoir": None if reservoir is None else reservoir.copy(),
            "visit_count": self.counter.as_array(),
            "slot_owners": self.slot_owners,
            "position_map": self.position_map,
        }
