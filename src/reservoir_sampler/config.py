"""Configuration system for reservoir-sampler.

Uses pydantic-settings for declarative, layered configuration:
init kwargs -> environment variables (RESERVOIR_*) -> .env file -> field defaults.

Runtime overrides are applied via resolve_config() which creates a new
config instance without mutating the defaults. Fields that define the
reservoir itself (capacity, key tracking, random source) are fixed once a
sampler is built and cannot be overridden.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from reservoir_sampler.exceptions import ConfigurationError

_OVERRIDE_PREFIX = "reservoir_"

# Fields that can be overridden after construction via resolve_config().
_OVERRIDABLE_FIELDS: frozenset[str] = frozenset(
    {
        "log_level",
        "diagnostic_mode",
    }
)

# All known config field names (populated after class definition).
_ALL_FIELDS: frozenset[str] = frozenset()


class ReservoirConfig(BaseSettings):
    """Configuration for reservoir-sampler.

    Resolution order: init kwargs -> env vars (RESERVOIR_*) -> .env file -> defaults.

    Fields are divided into two groups:
    - **Reservoir definition**: capacity, key tracking and the random
      source. Fixed for the lifetime of a sampler.
    - **Diagnostics**: log level and diagnostic mode, overridable via
      resolve_config() with the ``reservoir_`` prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="RESERVOIR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Reservoir definition (fixed at construction) ---

    capacity: int = Field(
        default=-1,
        description="Number of rows to collect; must be set to a positive value",
    )
    key_tracking: bool = Field(
        default=False,
        description="Deduplicate rows by external object id",
    )
    random_source_type: str = Field(
        default="numpy",
        description="Registered random source: 'numpy', 'system'",
    )
    seed: int | None = Field(
        default=None,
        description="Seed for seedable random sources (None = nondeterministic)",
    )

    # --- Diagnostics (overridable) ---

    log_level: str = Field(
        default="summary",
        description="Logging verbosity: 'none', 'summary', 'full'",
    )
    diagnostic_mode: bool = Field(
        default=False,
        description="Store all batch records in memory for analysis",
    )


_ALL_FIELDS = frozenset(ReservoirConfig.model_fields.keys())


def _strip_prefix(key: str) -> str:
    if key.startswith(_OVERRIDE_PREFIX):
        return key[len(_OVERRIDE_PREFIX) :]
    return key


def validate_overrides(overrides: dict[str, Any]) -> None:
    """Validate all reservoir_* keys in *overrides* without creating a config.

    Args:
        overrides: Dictionary of overrides, keys carrying the ``reservoir_`` prefix.

    Raises:
        ConfigurationError: If any reservoir_* key is unknown or fixed at construction.
    """
    for key in overrides:
        if not key.startswith(_OVERRIDE_PREFIX):
            continue
        field_name = _strip_prefix(key)
        if field_name not in _ALL_FIELDS:
            raise ConfigurationError(
                f"Unknown config field: '{key}' (no field '{field_name}' exists)"
            )
        if field_name not in _OVERRIDABLE_FIELDS:
            raise ConfigurationError(
                f"Field '{field_name}' is fixed when the reservoir is built "
                f"and cannot be overridden"
            )


def resolve_config(
    defaults: ReservoirConfig,
    overrides: dict[str, Any] | None,
) -> ReservoirConfig:
    """Create a new config instance merging defaults with overrides.

    Keys without the ``reservoir_`` prefix are ignored.

    Args:
        defaults: The base configuration.
        overrides: Overrides such as ``{"reservoir_log_level": "full"}``.

    Returns:
        A new ReservoirConfig with overrides applied, or *defaults* itself
        when there is nothing to apply.

    Raises:
        ConfigurationError: If any reservoir_* key is unknown or fixed.
    """
    if not overrides:
        return defaults

    validate_overrides(overrides)

    applied: dict[str, Any] = {
        _strip_prefix(key): value
        for key, value in overrides.items()
        if key.startswith(_OVERRIDE_PREFIX)
    }
    if not applied:
        return defaults

    # model_copy(update=...) skips validation; model_validate coerces types.
    merged = defaults.model_dump()
    merged.update(applied)
    return ReservoirConfig.model_validate(merged)
