"""Streaming Algorithm R with key-aware deduplication.

For each row, with ``v`` the current visit count:

1. Key tracking on and the row's key already bound: skip the row
   entirely. Only the first-seen payload for a key is ever retained.
2. ``v < capacity``: append at slot ``v``, so the first ``capacity``
   distinct keys are always kept.
3. Otherwise draw ``r`` uniformly from ``[0, v]``. ``r < capacity``
   replaces slot ``r``; anything else discards the row.
4. Every non-skipped row advances the visit count by one.

After ``n > capacity`` non-duplicate rows each of them is in the
reservoir with probability ``capacity / n``. Duplicate keys never touch
the sample or the denominator ``n``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy as np

    from reservoir_sampler.rng.base import RandomSource
    from reservoir_sampler.state import ReservoirState


# Values of SlotDecision.action.
APPEND = "append"
REPLACE = "replace"
DISCARD = "discard"
SKIP = "skip"


@dataclass(frozen=True, slots=True)
class SlotDecision:
    """Outcome of offering one row to the reservoir.

    Attributes:
        row_index: Position of the row within its batch.
        action: Append, replace, discard or skip.
        slot: Slot written, ``None`` for discard and skip.
        draw: Value drawn from ``[0, visit_count]``, ``None`` if no draw was needed.
        visit_count: Visit count before the row was processed.
        object_id: The row's key, ``None`` without key tracking.
    """

    row_index: int
    action: str
    slot: int | None
    draw: int | None
    visit_count: int
    object_id: int | None


class SamplingEngine:
    """Decides append/replace/discard per row and applies the write.

    The engine holds no state of its own beyond the capacity: the reservoir
    state and the random source are passed in on every call.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity

    @property
    def capacity(self) -> int:
        return self._capacity

    def offer(
        self,
        row_index: int,
        block: np.ndarray,
        object_id: int | None,
        state: ReservoirState,
        random_source: RandomSource,
    ) -> SlotDecision:
        """Process a single row against *state*.

        Args:
            row_index: Position of the row within its batch.
            block: The row's raw block, as produced by ``buffer.as_blocks``.
            object_id: The row's key, or ``None`` without key tracking.
            state: Reservoir state, mutated in place.
            random_source: Source for the ``[0, v]`` draw once full.

        Returns:
            The decision taken for this row.
        """
        index = state.index
        visit_count = state.counter.value

        if index is not None and object_id is not None and object_id in index:
            return SlotDecision(row_index, SKIP, None, None, visit_count, object_id)

        draw: int | None = None
        if visit_count < self._capacity:
            slot: int | None = visit_count
            action = APPEND
        else:
            draw = random_source.randint(visit_count)
            if draw < self._capacity:
                slot = draw
                action = REPLACE
            else:
                slot = None
                action = DISCARD

        if slot is not None:
            state.buffer.write_block(slot, block)
            if index is not None and object_id is not None:
                index.bind(slot, object_id)

        state.counter.increment()
        return SlotDecision(row_index, action, slot, draw, visit_count, object_id)

    def run(
        self,
        blocks: np.ndarray,
        object_ids: Sequence[int] | None,
        state: ReservoirState,
        random_source: RandomSource,
    ) -> list[SlotDecision]:
        """Offer every row of a batch, strictly in arrival order."""
        decisions: list[SlotDecision] = []
        for i in range(blocks.shape[0]):
            oid = None if object_ids is None else object_ids[i]
            decisions.append(self.offer(i, blocks[i], oid, state, random_source))
        return decisions
