"""High-level reservoir sampler: configuration, random source and logging.

Orchestrates one ``process`` call:
    validate -> reserve -> pre-scan -> Algorithm R over rows -> sanity check -> log.

The sampler itself holds no reservoir data. Callers create a state with
:meth:`ReservoirSampler.new_state` (or restore one) and pass it into every
call::

    sampler = ReservoirSampler(ReservoirConfig(capacity=100, key_tracking=True))
    state = sampler.new_state()
    sampler.process(state, rows, object_ids=ids)
"""

from __future__ import annotations

import hashlib
import inspect
import logging
import time
from typing import TYPE_CHECKING, Any

from reservoir_sampler.config import ReservoirConfig, resolve_config
from reservoir_sampler.exceptions import ConfigurationError
from reservoir_sampler.ingest import BatchIngest
from reservoir_sampler.logging.logger import SamplingLogger
from reservoir_sampler.logging.types import BatchSamplingRecord
from reservoir_sampler.rng.registry import get_random_source
from reservoir_sampler.state import ReservoirState

if TYPE_CHECKING:
    from collections.abc import Mapping

    from reservoir_sampler.ingest import BatchResult
    from reservoir_sampler.rng.base import RandomSource

logger = logging.getLogger("reservoir_sampler")


def _config_hash(config: ReservoirConfig) -> str:
    """Return the first 16 hex characters of the SHA-256 of the config dump."""
    raw = config.model_dump_json().encode("utf-8")
    return hashlib.sha256(raw).hexdigest()[:16]


def _accepts_seed(cls: type) -> bool:
    """Check if a source constructor takes a ``seed`` argument."""
    try:
        sig = inspect.signature(cls)
    except (ValueError, TypeError):
        return False
    return "seed" in sig.parameters


def _build_random_source(config: ReservoirConfig) -> RandomSource:
    """Build the random source named by ``config.random_source_type``.

    Raises:
        ConfigurationError: If no source is registered under that name.
    """
    source_cls = get_random_source(config.random_source_type)

    if _accepts_seed(source_cls):
        return source_cls(seed=config.seed)  # type: ignore[call-arg]
    if config.seed is not None:
        logger.warning(
            "Random source %r is not seedable, ignoring seed %d",
            config.random_source_type,
            config.seed,
        )
    return source_cls()


class ReservoirSampler:
    """Fixed-capacity, key-deduplicating reservoir sampler.

    Args:
        config: Sampler configuration. Defaults to ``ReservoirConfig()``,
            i.e. whatever the environment provides.
        random_source: Random source for replacement draws. Built from
            ``config.random_source_type`` and ``config.seed`` when omitted.

    Raises:
        ConfigurationError: If the capacity is not positive or the random
            source is unknown.
    """

    def __init__(
        self,
        config: ReservoirConfig | None = None,
        random_source: RandomSource | None = None,
    ) -> None:
        self._config = config if config is not None else ReservoirConfig()
        self._ingest = BatchIngest(self._config.capacity, self._config.key_tracking)
        self._random_source = (
            random_source if random_source is not None else _build_random_source(self._config)
        )
        self._logger = SamplingLogger(self._config)
        self._config_hash = _config_hash(self._config)

        logger.info(
            "ReservoirSampler initialized: capacity=%d, key_tracking=%s, random_source=%s",
            self._config.capacity,
            self._config.key_tracking,
            self._random_source.name,
        )

    def new_state(self) -> ReservoirState:
        """Create an empty state sized for this sampler."""
        return ReservoirState.empty(self._config.capacity, self._config.key_tracking)

    def restore_state(self, arrays: Mapping[str, Any]) -> ReservoirState:
        """Rebuild a state from the output of :meth:`ReservoirState.to_arrays`.

        Raises:
            ConfigurationError: If the arrays do not fit this sampler.
        """
        state = ReservoirState.from_arrays(
            capacity=self._config.capacity,
            reservoir=arrays.get("reservoir"),
            visit_count=arrays.get("visit_count", 0),
            slot_owners=arrays.get("slot_owners"),
            position_map=arrays.get("position_map"),
        )
        if state.key_tracking != self._config.key_tracking:
            raise ConfigurationError(
                f"Restored state key tracking is {state.key_tracking}, "
                f"sampler expects {self._config.key_tracking}"
            )
        return state

    def process(
        self,
        state: ReservoirState,
        data: Any,
        object_ids: Any = None,
    ) -> BatchResult:
        """Sample one batch of rows into *state*.

        Args:
            state: State created by :meth:`new_state` or :meth:`restore_state`.
            data: Batch of rows (numpy array, tensor or array-like); the
                first dimension indexes rows.
            object_ids: One int64 key per row. Required with key tracking,
                forbidden without it.

        Returns:
            Per-batch counts and decisions.
        """
        t_start_ns = time.perf_counter_ns()
        result = self._ingest.process(state, data, self._random_source, object_ids)
        total_ms = (time.perf_counter_ns() - t_start_ns) / 1_000_000.0

        self._logger.log_batch(
            BatchSamplingRecord(
                timestamp_ns=t_start_ns,
                total_ms=total_ms,
                rows=result.rows,
                new_rows=result.new_rows,
                appended=result.appended,
                replaced=result.replaced,
                discarded=result.discarded,
                skipped=result.skipped,
                visit_count_before=result.visit_count_before,
                visit_count_after=result.visit_count_after,
                occupied=result.occupied,
                capacity=self._config.capacity,
                random_source=self._random_source.name,
                config_hash=self._config_hash,
            )
        )
        return result

    def apply_overrides(self, overrides: dict[str, Any] | None) -> None:
        """Change diagnostic settings, e.g. ``{"reservoir_log_level": "full"}``.

        Records collected so far in diagnostic mode are discarded.

        Raises:
            ConfigurationError: If a key is unknown or fixed at construction.
        """
        config = resolve_config(self._config, overrides)
        if config is self._config:
            return
        self._config = config
        self._config_hash = _config_hash(config)
        self._logger = SamplingLogger(config)

    @property
    def config(self) -> ReservoirConfig:
        return self._config

    @property
    def capacity(self) -> int:
        return self._config.capacity

    @property
    def key_tracking(self) -> bool:
        return self._config.key_tracking

    @property
    def random_source(self) -> RandomSource:
        """The random source used for replacement draws."""
        return self._random_source

    @property
    def sampling_logger(self) -> SamplingLogger:
        """The diagnostic logger for this sampler."""
        return self._logger

    def close(self) -> None:
        """Release all resources held by the sampler."""
        self._random_source.close()
