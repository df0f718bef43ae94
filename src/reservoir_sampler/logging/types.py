"""Data types for the diagnostic logging subsystem."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class BatchSamplingRecord:
    """Immutable record of one processed batch.

    Attributes:
        timestamp_ns: Start of processing (``time.perf_counter_ns``).
        total_ms: Time spent in ``process`` (milliseconds).
        rows: Rows in the batch.
        new_rows: Rows whose key was absent at batch start.
        appended: Rows written to a fresh slot.
        replaced: Rows that overwrote an existing slot.
        discarded: Rows counted but not kept.
        skipped: Duplicate-key rows ignored.
        visit_count_before: Visit count when the batch started.
        visit_count_after: Visit count when the batch finished.
        occupied: Occupied slots after the batch.
        capacity: Reservoir capacity.
        random_source: Name of the random source used for draws.
        config_hash: 16-char SHA-256 prefix of the active config.
    """

    # Timing
    timestamp_ns: int
    total_ms: float

    # Batch composition
    rows: int
    new_rows: int

    # Decisions
    appended: int
    replaced: int
    discarded: int
    skipped: int

    # Reservoir state
    visit_count_before: int
    visit_count_after: int
    occupied: int
    capacity: int

    # Provenance
    random_source: str
    config_hash: str
