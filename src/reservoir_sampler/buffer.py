"""Fixed-capacity row storage for the reservoir.

Rows are treated as opaque blocks of ``prod(row_shape) * itemsize`` bytes.
Storage for all ``capacity`` slots is allocated once and writes go through a
``uint8`` view, so the buffer never interprets payload contents. Object
dtypes cannot be viewed as raw bytes; those rows are copied element-wise.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from reservoir_sampler.exceptions import InternalConsistencyFault, ShapeMismatchError

logger = logging.getLogger("reservoir_sampler")


def as_blocks(batch: np.ndarray) -> np.ndarray:
    """Return *batch* as one raw block per row.

    Args:
        batch: Array whose first dimension indexes rows.

    Returns:
        A ``(rows, block_nbytes)`` uint8 view of a C-contiguous copy of the
        batch, or the batch itself when its dtype holds Python objects.
    """
    if batch.dtype.hasobject:
        return batch
    contiguous = np.ascontiguousarray(batch)
    block_nbytes = math.prod(batch.shape[1:]) * batch.dtype.itemsize
    return contiguous.reshape(-1).view(np.uint8).reshape(batch.shape[0], block_nbytes)


class ReservoirBuffer:
    """Preallocated storage for ``capacity`` rows with a growing occupied prefix.

    Occupied size only ever grows, one resize per growth step, so at most
    ``capacity`` resizes happen over the buffer's life.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._storage: np.ndarray | None = None
        self._blocks: np.ndarray | None = None
        self._row_shape: tuple[int, ...] | None = None
        self._dtype: np.dtype | None = None
        self._occupied = 0
        self._resize_count = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def occupied(self) -> int:
        """Number of slots holding a row."""
        return self._occupied

    @property
    def row_shape(self) -> tuple[int, ...] | None:
        """Shape of one row, or ``None`` before any batch was seen."""
        return self._row_shape

    @property
    def dtype(self) -> np.dtype | None:
        return self._dtype

    @property
    def block_nbytes(self) -> int:
        """Size in bytes of one row's block (0 before a shape is known)."""
        if self._row_shape is None or self._dtype is None:
            return 0
        return math.prod(self._row_shape) * self._dtype.itemsize

    @property
    def is_initialized(self) -> bool:
        """Whether the reservoir holds at least one row."""
        return self._occupied > 0

    @property
    def resize_count(self) -> int:
        """How many times the occupied region has grown."""
        return self._resize_count

    @property
    def data(self) -> np.ndarray | None:
        """Read-only view of the occupied rows, ``None`` if no shape is known."""
        if self._row_shape is None:
            return None
        if self._storage is None:
            view = np.empty((0, *self._row_shape), dtype=self._dtype)
        else:
            view = self._storage[: self._occupied]
        view.flags.writeable = False
        return view

    def reserve(self, row_shape: tuple[int, ...], dtype: np.dtype) -> None:
        """Preallocate storage for ``capacity`` rows of *row_shape* and *dtype*.

        Idempotent: calling it again with the established shape and dtype is a
        no-op. The occupied size is never changed.

        Raises:
            ShapeMismatchError: If the buffer already holds rows of a
                different shape or dtype.
        """
        row_shape = tuple(int(d) for d in row_shape)
        dtype = np.dtype(dtype)
        if (
            self._storage is not None
            and self._row_shape == row_shape
            and self._dtype == dtype
        ):
            return
        if self.is_initialized:
            raise ShapeMismatchError(
                f"Reservoir holds rows of shape {self._row_shape} and dtype {self._dtype}, "
                f"cannot reserve {row_shape} / {dtype}"
            )

        self._storage = np.zeros((self._capacity, *row_shape), dtype=dtype)
        if dtype.hasobject:
            self._blocks = None
        else:
            block_nbytes = math.prod(row_shape) * dtype.itemsize
            self._blocks = self._storage.reshape(-1).view(np.uint8).reshape(
                self._capacity, block_nbytes
            )
        self._row_shape = row_shape
        self._dtype = dtype
        logger.debug(
            "Reserved %d slots of shape %s, dtype %s (%d bytes per block)",
            self._capacity,
            row_shape,
            dtype,
            self.block_nbytes,
        )

    def grow_occupied_to(self, n: int) -> None:
        """Extend the occupied region to ``min(capacity, n)`` slots.

        Never shrinks. Slots become visible through :attr:`data` as soon as
        they are occupied, so callers must write them in the same batch.
        """
        target = min(self._capacity, n)
        if target <= self._occupied:
            return
        if self._storage is None:
            raise InternalConsistencyFault("Cannot grow a reservoir before storage is reserved")
        logger.debug("Growing occupied region %d -> %d", self._occupied, target)
        self._occupied = target
        self._resize_count += 1

    def write_block(self, slot: int, block: np.ndarray) -> None:
        """Overwrite *slot* in place with one row's block.

        Args:
            slot: Target slot, ``0 <= slot < capacity``.
            block: One row of :func:`as_blocks` output.

        Raises:
            InternalConsistencyFault: If *slot* is out of range or no storage
                has been reserved.
        """
        if not 0 <= slot < self._capacity:
            raise InternalConsistencyFault(
                f"Slot {slot} is outside the reservoir [0, {self._capacity})"
            )
        if self._storage is None:
            raise InternalConsistencyFault("Cannot write to a reservoir before storage is reserved")
        if self._blocks is not None:
            self._blocks[slot] = block
        else:
            self._storage[slot] = block

    def adopt_shape_from(self, batch: np.ndarray) -> None:
        """Adopt the row shape and dtype of *batch* without copying any rows.

        Only applies while the reservoir has never been initialized; an
        initialized buffer is left untouched.
        """
        if self.is_initialized:
            return
        self._row_shape = tuple(int(d) for d in batch.shape[1:])
        self._dtype = batch.dtype
        self._storage = None
        self._blocks = None
        logger.debug("Adopted row shape %s, dtype %s from empty batch", self._row_shape, self._dtype)

    def load(self, rows: np.ndarray) -> None:
        """Fill a fresh buffer with previously exported *rows*.

        Callers validate the row count against the capacity before loading.
        """
        self.reserve(rows.shape[1:], rows.dtype)
        count = rows.shape[0]
        self._storage[:count] = rows  # type: ignore[index]
        if count > self._occupied:
            self._occupied = count
            self._resize_count += 1
