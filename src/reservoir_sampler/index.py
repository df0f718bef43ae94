"""Bidirectional object-id index for key-tracked reservoirs.

``ObjectIndex`` owns both directions of the mapping:

* the position map, object id -> slot
* the slot owners, slot -> object id, with :data:`UNASSIGNED` marking
  slots that have no owner

The two sides are only mutated together through :meth:`ObjectIndex.bind`
and :meth:`ObjectIndex.unbind`, so they cannot drift apart.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

import numpy as np

from reservoir_sampler.exceptions import (
    ConfigurationError,
    InternalConsistencyFault,
    ReservedObjectIdError,
)

# Owner value of a slot that holds no tracked object. Reserved: it can never
# be used as an object id.
UNASSIGNED: int = int(np.iinfo(np.int64).min)


class ObjectIndex:
    """Position map and slot owners for a reservoir of *capacity* slots.

    Every slot starts as :data:`UNASSIGNED` at allocation time, so the first
    bind on a fresh slot never evicts a stale key.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._owners = np.full(capacity, UNASSIGNED, dtype=np.int64)
        self._positions: dict[int, int] = {}

    @classmethod
    def from_arrays(
        cls,
        slot_owners: np.ndarray,
        position_map: Mapping[int, int] | None = None,
    ) -> ObjectIndex:
        """Rebuild an index from exported slot owners.

        Args:
            slot_owners: ``int64[capacity]`` owners, :data:`UNASSIGNED` for free slots.
            position_map: Optional exported position map; when given it must
                be the exact inverse of *slot_owners*.

        Raises:
            ConfigurationError: If *slot_owners* is not 1-D or holds an id twice.
            InternalConsistencyFault: If *position_map* disagrees with *slot_owners*.
        """
        owners = np.asarray(slot_owners, dtype=np.int64)
        if owners.ndim != 1:
            raise ConfigurationError(f"Slot owners must be 1-D, got shape {owners.shape}")
        index = cls(owners.shape[0])
        for slot, oid in enumerate(owners.tolist()):
            if oid == UNASSIGNED:
                continue
            if oid in index._positions:
                raise ConfigurationError(
                    f"Object id {oid} owns both slot {index._positions[oid]} and slot {slot}"
                )
            index.bind(slot, oid)
        if position_map is not None and dict(position_map) != index._positions:
            raise InternalConsistencyFault("Position map is not the inverse of the slot owners")
        return index

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def position_map(self) -> Mapping[int, int]:
        """Read-only view of object id -> slot."""
        return MappingProxyType(self._positions)

    @property
    def slot_owners(self) -> np.ndarray:
        """Copy of slot -> object id, :data:`UNASSIGNED` for free slots."""
        return self._owners.copy()

    def lookup(self, object_id: int) -> int | None:
        """Return the slot holding *object_id*, or ``None`` if it is absent."""
        return self._positions.get(object_id)

    def owner(self, slot: int) -> int | None:
        """Return the object id owning *slot*, or ``None`` if unassigned."""
        oid = int(self._owners[slot])
        return None if oid == UNASSIGNED else oid

    def bind(self, slot: int, object_id: int) -> None:
        """Make *object_id* the owner of *slot*.

        The slot's previous owner, if any, is dropped from the position map
        first. If *object_id* was bound elsewhere that slot is released.

        Raises:
            ReservedObjectIdError: If *object_id* is :data:`UNASSIGNED`.
        """
        object_id = int(object_id)
        if object_id == UNASSIGNED:
            raise ReservedObjectIdError(f"Object id {UNASSIGNED} is reserved for unassigned slots")

        previous_slot = self._positions.get(object_id)
        if previous_slot is not None and previous_slot != slot:
            self._owners[previous_slot] = UNASSIGNED

        old_oid = int(self._owners[slot])
        if old_oid != UNASSIGNED and old_oid != object_id:
            del self._positions[old_oid]

        self._owners[slot] = object_id
        self._positions[object_id] = slot

    def unbind(self, slot: int) -> int | None:
        """Release *slot*, returning the object id that owned it."""
        oid = self.owner(slot)
        if oid is not None:
            del self._positions[oid]
            self._owners[slot] = UNASSIGNED
        return oid

    def check_consistency(self) -> None:
        """Verify the position map is the exact inverse of the slot owners.

        Raises:
            InternalConsistencyFault: If the two sides disagree.
        """
        assigned = 0
        for slot, oid in enumerate(self._owners.tolist()):
            if oid == UNASSIGNED:
                continue
            assigned += 1
            if self._positions.get(oid) != slot:
                raise InternalConsistencyFault(
                    f"Slot {slot} is owned by {oid}, but the position map "
                    f"points it at {self._positions.get(oid)}"
                )
        if assigned != len(self._positions):
            raise InternalConsistencyFault(
                f"{len(self._positions)} position map entries for {assigned} owned slots"
            )

    def __contains__(self, object_id: object) -> bool:
        return object_id in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def __repr__(self) -> str:
        return f"ObjectIndex(capacity={self._capacity}, bound={len(self._positions)})"
