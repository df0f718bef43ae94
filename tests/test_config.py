"""Tests for reservoir_sampler.config.

Covers:
- Default values
- Environment variable loading (monkeypatch)
- resolve_config merge logic and prefix handling
- validate_overrides rejects unknown and fixed fields
"""

from __future__ import annotations

import pytest

from reservoir_sampler.config import ReservoirConfig, resolve_config, validate_overrides
from reservoir_sampler.exceptions import ConfigurationError


class TestDefaults:
    def test_reservoir_defaults(self) -> None:
        cfg = ReservoirConfig(_env_file=None)  # type: ignore[call-arg]
        assert cfg.capacity == -1
        assert cfg.key_tracking is False
        assert cfg.random_source_type == "numpy"
        assert cfg.seed is None

    def test_logging_defaults(self) -> None:
        cfg = ReservoirConfig(_env_file=None)  # type: ignore[call-arg]
        assert cfg.log_level == "summary"
        assert cfg.diagnostic_mode is False

    def test_init_kwargs(self) -> None:
        cfg = ReservoirConfig(_env_file=None, capacity=8, key_tracking=True)  # type: ignore[call-arg]
        assert cfg.capacity == 8
        assert cfg.key_tracking is True


class TestEnvironment:
    def test_env_vars_are_read(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESERVOIR_CAPACITY", "16")
        monkeypatch.setenv("RESERVOIR_KEY_TRACKING", "true")
        monkeypatch.setenv("RESERVOIR_SEED", "99")
        monkeypatch.setenv("RESERVOIR_LOG_LEVEL", "full")
        cfg = ReservoirConfig(_env_file=None)  # type: ignore[call-arg]
        assert cfg.capacity == 16
        assert cfg.key_tracking is True
        assert cfg.seed == 99
        assert cfg.log_level == "full"

    def test_init_kwargs_beat_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESERVOIR_CAPACITY", "16")
        cfg = ReservoirConfig(_env_file=None, capacity=3)  # type: ignore[call-arg]
        assert cfg.capacity == 3

    def test_dotenv_file(self, tmp_path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("RESERVOIR_CAPACITY=12\nRESERVOIR_RANDOM_SOURCE_TYPE=system\n")
        cfg = ReservoirConfig(_env_file=str(env_file))  # type: ignore[call-arg]
        assert cfg.capacity == 12
        assert cfg.random_source_type == "system"

    def test_unrelated_env_vars_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESERVOIR_NOT_A_FIELD", "x")
        cfg = ReservoirConfig(_env_file=None)  # type: ignore[call-arg]
        assert not hasattr(cfg, "not_a_field")


class TestResolveConfig:
    def _defaults(self) -> ReservoirConfig:
        return ReservoirConfig(_env_file=None, capacity=4)  # type: ignore[call-arg]

    def test_none_returns_defaults(self) -> None:
        defaults = self._defaults()
        assert resolve_config(defaults, None) is defaults
        assert resolve_config(defaults, {}) is defaults

    def test_unprefixed_keys_ignored(self) -> None:
        defaults = self._defaults()
        assert resolve_config(defaults, {"log_level": "full", "other": 1}) is defaults

    def test_overrides_applied(self) -> None:
        defaults = self._defaults()
        cfg = resolve_config(
            defaults, {"reservoir_log_level": "none", "reservoir_diagnostic_mode": True}
        )
        assert cfg.log_level == "none"
        assert cfg.diagnostic_mode is True
        assert cfg.capacity == 4
        # Defaults untouched.
        assert defaults.log_level == "summary"

    def test_override_values_are_coerced(self) -> None:
        cfg = resolve_config(self._defaults(), {"reservoir_diagnostic_mode": "true"})
        assert cfg.diagnostic_mode is True

    def test_fixed_field_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="capacity"):
            resolve_config(self._defaults(), {"reservoir_capacity": 10})


class TestValidateOverrides:
    @pytest.mark.parametrize(
        "key", ["reservoir_capacity", "reservoir_key_tracking", "reservoir_seed",
                "reservoir_random_source_type"]
    )
    def test_fixed_fields(self, key: str) -> None:
        with pytest.raises(ConfigurationError, match="cannot be overridden"):
            validate_overrides({key: 1})

    def test_unknown_field(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown config field"):
            validate_overrides({"reservoir_bogus": 1})

    def test_valid_keys_pass(self) -> None:
        validate_overrides(
            {"reservoir_log_level": "full", "reservoir_diagnostic_mode": False, "temperature": 1}
        )
