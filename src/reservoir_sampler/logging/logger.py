"""Diagnostic logger for per-batch sampling events.

Uses the standard ``logging`` module with the ``"reservoir_sampler"`` logger.
No ``print()`` statements. Supports three verbosity levels and an
in-memory diagnostic mode for post-hoc analysis.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from reservoir_sampler.config import ReservoirConfig
    from reservoir_sampler.logging.types import BatchSamplingRecord

logger = logging.getLogger("reservoir_sampler")


class SamplingLogger:
    """Per-batch diagnostic logger.

    Log levels:
        ``"none"``: No logging output. Records are still stored if
        ``diagnostic_mode=True``.

        ``"summary"``: One line per batch with the decision counts and the
        visit count.

        ``"full"``: Full JSON dump of all record fields.

    Diagnostic mode stores all records in memory for post-hoc analysis via
    ``get_diagnostic_data()`` and ``get_summary_stats()``.
    """

    def __init__(self, config: ReservoirConfig) -> None:
        """Initialize the logger from configuration.

        Args:
            config: Configuration providing ``log_level`` and ``diagnostic_mode``.
        """
        self._log_level = config.log_level
        self._diagnostic_mode = config.diagnostic_mode
        self._records: list[BatchSamplingRecord] = []

    def log_batch(self, record: BatchSamplingRecord) -> None:
        """Log a single processed batch.

        Args:
            record: Immutable record of the batch.
        """
        if self._diagnostic_mode:
            self._records.append(record)

        if self._log_level == "none":
            return

        if self._log_level == "summary":
            logger.info(
                "rows=%d new=%d append=%d replace=%d discard=%d skip=%d "
                "visits=%d->%d occupied=%d/%d source=%s total=%.2fms",
                record.rows,
                record.new_rows,
                record.appended,
                record.replaced,
                record.discarded,
                record.skipped,
                record.visit_count_before,
                record.visit_count_after,
                record.occupied,
                record.capacity,
                record.random_source,
                record.total_ms,
            )
        elif self._log_level == "full":
            logger.info("batch_record: %s", json.dumps(asdict(record), default=str))

    def get_diagnostic_data(self) -> list[BatchSamplingRecord]:
        """Return all stored records (requires ``diagnostic_mode=True``).

        Returns:
            List of all BatchSamplingRecord instances logged so far.
            Empty if diagnostic_mode is False.
        """
        return list(self._records)

    def get_summary_stats(self) -> dict[str, Any]:
        """Compute summary statistics over all stored records.

        Returns:
            Dictionary with aggregate stats, or empty dict if no records.
        """
        if not self._records:
            return {}

        n = len(self._records)
        rows = sum(r.rows for r in self._records)
        kept = sum(r.appended + r.replaced for r in self._records)
        skipped = sum(r.skipped for r in self._records)
        total_times = [r.total_ms for r in self._records]
        return {
            "total_batches": n,
            "total_rows": rows,
            "total_appended": sum(r.appended for r in self._records),
            "total_replaced": sum(r.replaced for r in self._records),
            "total_discarded": sum(r.discarded for r in self._records),
            "total_skipped": skipped,
            "acceptance_rate": kept / rows if rows else 0.0,
            "duplicate_rate": skipped / rows if rows else 0.0,
            "final_visit_count": self._records[-1].visit_count_after,
            "mean_total_ms": sum(total_times) / n,
            "max_total_ms": max(total_times),
        }
