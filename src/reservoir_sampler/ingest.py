"""Batch ingestion: validation, pre-sizing and the end-of-batch sanity check.

``BatchIngest.process`` is the core operation of the package:

    validate -> reserve storage -> count new rows -> grow occupied region
    -> run the sampling engine -> verify the visit counter advanced correctly

All validation happens before the first row is written. A failure of the
final consistency check leaves the rows committed so far in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np

from reservoir_sampler.buffer import as_blocks
from reservoir_sampler.engine import APPEND, DISCARD, REPLACE, SKIP, SamplingEngine
from reservoir_sampler.exceptions import (
    ConfigurationError,
    InternalConsistencyFault,
    ReservedObjectIdError,
    ShapeMismatchError,
    SizeMismatchError,
)
from reservoir_sampler.index import UNASSIGNED

if TYPE_CHECKING:
    from reservoir_sampler.engine import SlotDecision
    from reservoir_sampler.rng.base import RandomSource
    from reservoir_sampler.state import ReservoirState

logger = logging.getLogger("reservoir_sampler")

_INT64_MAX = int(np.iinfo(np.int64).max)


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Summary of one ``process`` call.

    Attributes:
        rows: Rows in the batch.
        new_rows: Rows whose key was absent from the index at batch start
            (all rows without key tracking).
        appended: Rows written to a fresh slot.
        replaced: Rows that overwrote an existing slot.
        discarded: Rows counted but not kept.
        skipped: Rows ignored because their key was already in the reservoir.
        visit_count_before: Visit count when the batch started.
        visit_count_after: Visit count when the batch finished.
        occupied: Occupied slots after the batch.
        decisions: One decision per row, in arrival order.
    """

    rows: int
    new_rows: int
    appended: int
    replaced: int
    discarded: int
    skipped: int
    visit_count_before: int
    visit_count_after: int
    occupied: int
    decisions: tuple[SlotDecision, ...]


def _to_numpy(data: Any) -> np.ndarray:
    """Convert a tensor or array-like to a numpy array, zero-copy where possible."""
    if isinstance(data, np.ndarray):
        return data
    # .cpu() moves GPU tensors to host memory; no-op on CPU.
    try:
        result: np.ndarray = data.detach().cpu().numpy()
        return result
    except AttributeError:
        return np.asarray(data)


class BatchIngest:
    """Feeds batches of rows into a :class:`ReservoirState`.

    Args:
        capacity: Maximum number of rows kept; must be positive.
        key_tracking: Whether batches carry object ids for deduplication.

    Raises:
        ConfigurationError: If *capacity* is not positive.
    """

    def __init__(self, capacity: int, key_tracking: bool = False) -> None:
        if capacity <= 0:
            raise ConfigurationError(f"Reservoir capacity must be > 0, got {capacity}")
        self._capacity = capacity
        self._key_tracking = key_tracking
        self._engine = SamplingEngine(capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def key_tracking(self) -> bool:
        return self._key_tracking

    def process(
        self,
        state: ReservoirState,
        data: Any,
        random_source: RandomSource,
        object_ids: Any = None,
    ) -> BatchResult:
        """Sample one batch into *state*.

        Args:
            state: Reservoir state, mutated in place.
            data: Batch of rows; the first dimension indexes rows.
            random_source: Source for the replacement draws.
            object_ids: One int64 key per row, required with key tracking.

        Returns:
            Per-batch counts and decisions.

        Raises:
            ConfigurationError: If *state* or *object_ids* do not match the
                ingest configuration.
            ShapeMismatchError: If the row shape, dtype or id dimensionality
                is wrong.
            SizeMismatchError: If the id count differs from the row count.
            ReservedObjectIdError: If an id equals the unassigned sentinel.
            InternalConsistencyFault: If the visit counter or the index ends
                up in an impossible state.
        """
        self._check_state(state)
        batch = _to_numpy(data)
        if batch.ndim < 1:
            raise ShapeMismatchError("Batch must have a leading row dimension")
        num_rows = batch.shape[0]
        ids = self._validate_ids(object_ids, num_rows)

        buffer = state.buffer
        if buffer.is_initialized:
            self._check_row_shape(buffer.row_shape, buffer.dtype, batch)

        visit_before = state.counter.value
        if num_rows == 0:
            if not buffer.is_initialized:
                buffer.adopt_shape_from(batch)
            return BatchResult(0, 0, 0, 0, 0, 0, visit_before, visit_before, buffer.occupied, ())

        buffer.reserve(batch.shape[1:], batch.dtype)

        # Rows whose key is absent at batch start; repeats of one new key
        # inside the batch all count here but occupy at most one slot.
        if ids is None or state.index is None:
            new_mask = np.ones(num_rows, dtype=bool)
            distinct_new = num_rows
        else:
            index = state.index
            new_mask = np.fromiter((oid not in index for oid in ids), dtype=bool, count=num_rows)
            distinct_new = len({oid for oid, is_new in zip(ids, new_mask) if is_new})
        new_rows = int(new_mask.sum())

        buffer.grow_occupied_to(buffer.occupied + distinct_new)

        decisions = self._engine.run(as_blocks(batch), ids, state, random_source)

        # A new key repeated later in the batch is skipped once bound; a key
        # present at batch start is admitted again if a replacement evicted it.
        repeat_skips = 0
        readmitted = 0
        for d in decisions:
            if d.action == SKIP and new_mask[d.row_index]:
                repeat_skips += 1
            elif d.action != SKIP and not new_mask[d.row_index]:
                readmitted += 1
        state.counter.check_advanced(visit_before, new_rows - repeat_skips + readmitted)
        if buffer.occupied != min(self._capacity, state.counter.value):
            raise InternalConsistencyFault(
                f"{buffer.occupied} occupied slots after {state.counter.value} visits "
                f"with capacity {self._capacity}"
            )
        if state.index is not None:
            state.index.check_consistency()

        actions = [d.action for d in decisions]
        return BatchResult(
            rows=num_rows,
            new_rows=new_rows,
            appended=actions.count(APPEND),
            replaced=actions.count(REPLACE),
            discarded=actions.count(DISCARD),
            skipped=actions.count(SKIP),
            visit_count_before=visit_before,
            visit_count_after=state.counter.value,
            occupied=buffer.occupied,
            decisions=tuple(decisions),
        )

    def _check_state(self, state: ReservoirState) -> None:
        if state.capacity != self._capacity:
            raise ConfigurationError(
                f"State capacity {state.capacity} does not match ingest capacity {self._capacity}"
            )
        if state.key_tracking != self._key_tracking:
            raise ConfigurationError(
                f"State key tracking is {state.key_tracking}, ingest expects {self._key_tracking}"
            )

    @staticmethod
    def _check_row_shape(row_shape: Any, dtype: Any, batch: np.ndarray) -> None:
        if tuple(batch.shape[1:]) != row_shape:
            raise ShapeMismatchError(
                f"Batch rows have shape {tuple(batch.shape[1:])}, reservoir rows have {row_shape}"
            )
        if batch.dtype != dtype:
            raise ShapeMismatchError(
                f"Batch dtype {batch.dtype} does not match reservoir dtype {dtype}"
            )

    def _validate_ids(self, object_ids: Any, num_rows: int) -> list[int] | None:
        """Check the id vector and return it as a list of Python ints."""
        if object_ids is None:
            if self._key_tracking:
                raise ConfigurationError("Key tracking is enabled but no object ids were given")
            return None
        if not self._key_tracking:
            raise ConfigurationError("Object ids were given but key tracking is disabled")

        ids = _to_numpy(object_ids)
        if ids.ndim != 1:
            raise ShapeMismatchError(f"Object ids must be 1-D, got shape {ids.shape}")
        if ids.shape[0] != num_rows:
            raise SizeMismatchError(f"Got {ids.shape[0]} object ids for {num_rows} rows")
        if ids.size == 0:
            return []
        if ids.dtype.kind not in "iu":
            raise ShapeMismatchError(f"Object ids must be integers, got dtype {ids.dtype}")
        if ids.dtype.kind == "u" and int(ids.max()) > _INT64_MAX:
            raise ShapeMismatchError("Object ids do not fit in int64")

        id_list = [int(oid) for oid in ids.tolist()]
        if UNASSIGNED in id_list:
            raise ReservedObjectIdError(
                f"Object id {UNASSIGNED} is reserved for unassigned slots"
            )
        return id_list
