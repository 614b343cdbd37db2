"""
Unit Tests for Simulation Configuration Parsing

Reliability Level: SOVEREIGN TIER
Python 3.8 Compatible

Tests the simulation configuration module:
- Default values when the environment is empty
- Custom values from environment variables
- Malformed numbers fall back to defaults
- Out-of-range values fail with RSIM-005
"""

import pytest
import os
from decimal import Decimal

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from app.logic.date_keys import DEFAULT_TIMEZONE
from services.simulation_config import (
    DEFAULT_TICK_SIZE,
    DEFAULT_TICK_VALUE_CENTS,
    SimulationConfig,
    SimulationConfigurationError,
    get_simulation_config,
    reset_simulation_config,
)


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def clean_environment():
    """Clear RSIM_* variables and the cached instance around each test."""
    original_env = {}
    env_vars = [
        "RSIM_TIMEZONE",
        "RSIM_PROFIT_FACTOR_SENTINEL",
        "RSIM_KELLY_MIN_SAMPLES",
        "RSIM_DEFAULT_TICK_SIZE",
        "RSIM_DEFAULT_TICK_VALUE_CENTS",
    ]

    for var in env_vars:
        original_env[var] = os.environ.get(var)
        if var in os.environ:
            del os.environ[var]

    reset_simulation_config()

    yield

    for var, value in original_env.items():
        if value is not None:
            os.environ[var] = value
        elif var in os.environ:
            del os.environ[var]

    reset_simulation_config()


# =============================================================================
# Test Default Values
# =============================================================================

class TestDefaultValues:
    """Defaults when nothing is configured."""

    def test_defaults(self) -> None:
        config = SimulationConfig.from_environment()
        assert config.timezone == DEFAULT_TIMEZONE
        assert config.profit_factor_sentinel == Decimal("999")
        assert config.kelly_min_samples == 20
        assert config.default_tick_size == DEFAULT_TICK_SIZE
        assert config.default_tick_value_cents == DEFAULT_TICK_VALUE_CENTS

    def test_engine_settings(self) -> None:
        settings = SimulationConfig.from_environment().engine_settings()
        assert settings.timezone == DEFAULT_TIMEZONE
        assert settings.kelly_min_samples == 20


# =============================================================================
# Test Custom Values
# =============================================================================

class TestCustomValues:
    """Values read from the environment."""

    def test_custom_values(self) -> None:
        os.environ["RSIM_TIMEZONE"] = "UTC"
        os.environ["RSIM_PROFIT_FACTOR_SENTINEL"] = "100"
        os.environ["RSIM_KELLY_MIN_SAMPLES"] = "30"
        os.environ["RSIM_DEFAULT_TICK_SIZE"] = "0.5"
        os.environ["RSIM_DEFAULT_TICK_VALUE_CENTS"] = "1000"

        config = SimulationConfig.from_environment()
        assert config.timezone == "UTC"
        assert config.profit_factor_sentinel == Decimal("100")
        assert config.kelly_min_samples == 30
        assert config.default_tick_size == Decimal("0.5")
        assert config.default_tick_value_cents == Decimal("1000")

    def test_to_dict_keeps_decimals_exact(self) -> None:
        os.environ["RSIM_DEFAULT_TICK_SIZE"] = "0.25"
        assert SimulationConfig.from_environment().to_dict()["default_tick_size"] == "0.25"

    def test_whitespace_is_stripped(self) -> None:
        os.environ["RSIM_TIMEZONE"] = "  UTC "
        os.environ["RSIM_KELLY_MIN_SAMPLES"] = " 5 "
        config = SimulationConfig.from_environment()
        assert config.timezone == "UTC"
        assert config.kelly_min_samples == 5


# =============================================================================
# Test Fallbacks and Validation
# =============================================================================

class TestInvalidValues:
    """Malformed and out-of-range values."""

    def test_malformed_int_uses_default(self) -> None:
        os.environ["RSIM_KELLY_MIN_SAMPLES"] = "many"
        assert SimulationConfig.from_environment().kelly_min_samples == 20

    def test_malformed_decimal_uses_default(self) -> None:
        os.environ["RSIM_DEFAULT_TICK_SIZE"] = "one"
        assert SimulationConfig.from_environment().default_tick_size == DEFAULT_TICK_SIZE

    def test_non_finite_decimal_uses_default(self) -> None:
        os.environ["RSIM_PROFIT_FACTOR_SENTINEL"] = "Infinity"
        config = SimulationConfig.from_environment()
        assert config.profit_factor_sentinel == Decimal("999")

    def test_unknown_timezone_fails(self) -> None:
        os.environ["RSIM_TIMEZONE"] = "Mars/Olympus_Mons"
        with pytest.raises(SimulationConfigurationError) as exc_info:
            SimulationConfig.from_environment()
        assert exc_info.value.error_code == "RSIM-005"
        assert "RSIM_TIMEZONE" in str(exc_info.value)

    def test_unknown_timezone_loads_without_validation(self) -> None:
        os.environ["RSIM_TIMEZONE"] = "Mars/Olympus_Mons"
        config = SimulationConfig.from_environment(validate=False)
        assert config.timezone == "Mars/Olympus_Mons"

    def test_all_errors_reported_together(self) -> None:
        os.environ["RSIM_KELLY_MIN_SAMPLES"] = "0"
        os.environ["RSIM_DEFAULT_TICK_VALUE_CENTS"] = "-1"
        with pytest.raises(SimulationConfigurationError) as exc_info:
            SimulationConfig.from_environment()
        message = str(exc_info.value)
        assert message.startswith("[RSIM-005]")
        assert "RSIM_KELLY_MIN_SAMPLES" in message
        assert "RSIM_DEFAULT_TICK_VALUE_CENTS" in message

    def test_non_positive_sentinel_fails(self) -> None:
        with pytest.raises(SimulationConfigurationError):
            SimulationConfig(profit_factor_sentinel=Decimal("0")).validate()


# =============================================================================
# Test Module Instance
# =============================================================================

class TestModuleInstance:
    """Cached process-wide configuration."""

    def test_instance_is_cached(self) -> None:
        assert get_simulation_config() is get_simulation_config()

    def test_reset_rereads_environment(self) -> None:
        first = get_simulation_config()
        os.environ["RSIM_KELLY_MIN_SAMPLES"] = "7"
        assert get_simulation_config() is first

        reset_simulation_config()
        assert get_simulation_config().kelly_min_samples == 7
