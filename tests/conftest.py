"""Shared pytest fixtures for reservoir-sampler tests.

Provides reusable configuration objects and random sources that are
used across multiple test modules.
"""

from __future__ import annotations

import pytest

from reservoir_sampler.config import ReservoirConfig
from reservoir_sampler.rng.numpy_source import NumpyRandomSource
from reservoir_sampler.rng.scripted import ScriptedRandomSource


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep RESERVOIR_* variables from the host out of every test."""
    for name in (
        "RESERVOIR_CAPACITY",
        "RESERVOIR_KEY_TRACKING",
        "RESERVOIR_RANDOM_SOURCE_TYPE",
        "RESERVOIR_SEED",
        "RESERVOIR_LOG_LEVEL",
        "RESERVOIR_DIAGNOSTIC_MODE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def small_config() -> ReservoirConfig:
    """Capacity 4, no key tracking, seeded numpy source, quiet logging."""
    return ReservoirConfig(
        _env_file=None,
        capacity=4,
        seed=1234,
        log_level="none",  # type: ignore[call-arg]
    )


@pytest.fixture
def keyed_config() -> ReservoirConfig:
    """Capacity 4 with key tracking enabled."""
    return ReservoirConfig(
        _env_file=None,
        capacity=4,
        key_tracking=True,
        seed=1234,
        log_level="none",  # type: ignore[call-arg]
    )


@pytest.fixture
def diagnostic_config() -> ReservoirConfig:
    """Capacity 4 with diagnostic mode and full logging enabled."""
    return ReservoirConfig(
        _env_file=None,
        capacity=4,
        seed=1234,
        log_level="full",
        diagnostic_mode=True,  # type: ignore[call-arg]
    )


@pytest.fixture
def seeded_source() -> NumpyRandomSource:
    """Return a NumpyRandomSource with a fixed seed."""
    return NumpyRandomSource(seed=42)


@pytest.fixture
def scripted_source() -> ScriptedRandomSource:
    """Return an empty scripted source: any draw raises."""
    return ScriptedRandomSource([])
