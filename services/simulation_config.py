"""
============================================================================
Project Risk Replay v1.0.0
Simulation Configuration - Environment-Driven Engine Settings
============================================================================

Reliability Level: L5 High
Input Constraints: Environment variables (optionally from a .env file)
Side Effects: Reads environment, logs configuration on load

The engine never reads the environment itself. This module turns the
environment into explicit EngineSettings and normalizer defaults.

ENVIRONMENT VARIABLES:
    - RSIM_TIMEZONE: IANA timezone for day/week/month keys
      (default: America/Sao_Paulo)
    - RSIM_PROFIT_FACTOR_SENTINEL: Profit factor reported for loss-free
      streams (default: 999)
    - RSIM_KELLY_MIN_SAMPLES: Decided trades required before Kelly sizing
      activates (default: 20)
    - RSIM_DEFAULT_TICK_SIZE: Tick size for assets without a config
      (default: 1)
    - RSIM_DEFAULT_TICK_VALUE_CENTS: Tick value for assets without a
      config (default: 100)

ERROR CODES:
    - RSIM-005: Configuration invalid

============================================================================
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
import logging
import os

import pytz
from dotenv import load_dotenv

from app.logic.date_keys import DEFAULT_TIMEZONE
from app.logic.simulation_errors import RiskSimulationErrorCode
from app.logic.simulation_models import DEFAULT_KELLY_MIN_SAMPLES, EngineSettings
from app.logic.trade_math import DEFAULT_PROFIT_FACTOR_SENTINEL

# Load environment variables
load_dotenv()

# Configure module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Default Values
# =============================================================================

DEFAULT_TICK_SIZE = Decimal("1")
DEFAULT_TICK_VALUE_CENTS = Decimal("100")


# =============================================================================
# Configuration Validation Exception
# =============================================================================

class SimulationConfigurationError(Exception):
    """
    Raised when the simulation configuration is invalid.

    Reliability Level: L5 High
    """

    def __init__(self, message: str, error_code: str = RiskSimulationErrorCode.CONFIG_INVALID):
        self.error_code = error_code
        self.message = message
        super().__init__(f"[{error_code}] {message}")


# =============================================================================
# Environment Parsing
# =============================================================================

def _read_int(name: str, default: int) -> int:
    raw = os.environ.get(name, str(default))
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning(
            f"[RSIM-CONFIG] Invalid {name} value: {raw}, using default: {default}"
        )
        return default


def _read_decimal(name: str, default: Decimal) -> Decimal:
    raw = os.environ.get(name, str(default))
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        logger.warning(
            f"[RSIM-CONFIG] Invalid {name} value: {raw}, using default: {default}"
        )
        return default
    if not value.is_finite():
        logger.warning(
            f"[RSIM-CONFIG] Non-finite {name} value: {raw}, using default: {default}"
        )
        return default
    return value


# =============================================================================
# SimulationConfig Class
# =============================================================================

@dataclass
class SimulationConfig:
    """
    Risk replay configuration.

    Reliability Level: L5 High
    Input Constraints: timezone must be a known IANA name
    Side Effects: Logs configuration on validate
    """

    timezone: str = DEFAULT_TIMEZONE
    profit_factor_sentinel: Decimal = field(
        default_factory=lambda: DEFAULT_PROFIT_FACTOR_SENTINEL
    )
    kelly_min_samples: int = DEFAULT_KELLY_MIN_SAMPLES
    default_tick_size: Decimal = field(default_factory=lambda: DEFAULT_TICK_SIZE)
    default_tick_value_cents: Decimal = field(
        default_factory=lambda: DEFAULT_TICK_VALUE_CENTS
    )

    def validate(self) -> None:
        """
        Raises:
            SimulationConfigurationError: If any value is out of range
        """
        errors: List[str] = []

        if self.timezone not in pytz.all_timezones_set:
            errors.append(f"RSIM_TIMEZONE is not a known timezone: {self.timezone}")

        if self.profit_factor_sentinel <= 0:
            errors.append(
                f"RSIM_PROFIT_FACTOR_SENTINEL must be positive, got: "
                f"{self.profit_factor_sentinel}"
            )

        if self.kelly_min_samples < 1:
            errors.append(
                f"RSIM_KELLY_MIN_SAMPLES must be at least 1, got: {self.kelly_min_samples}"
            )

        if self.default_tick_size <= 0:
            errors.append(
                f"RSIM_DEFAULT_TICK_SIZE must be positive, got: {self.default_tick_size}"
            )

        if self.default_tick_value_cents <= 0:
            errors.append(
                f"RSIM_DEFAULT_TICK_VALUE_CENTS must be positive, got: "
                f"{self.default_tick_value_cents}"
            )

        if errors:
            error_msg = "Simulation configuration validation failed: " + "; ".join(errors)
            logger.error(f"[{RiskSimulationErrorCode.CONFIG_INVALID}] {error_msg}")
            raise SimulationConfigurationError(error_msg)

        logger.info(
            f"[RSIM-CONFIG] Configuration validated | "
            f"timezone={self.timezone} | "
            f"profit_factor_sentinel={self.profit_factor_sentinel} | "
            f"kelly_min_samples={self.kelly_min_samples}"
        )

    @classmethod
    def from_environment(cls, validate: bool = True) -> "SimulationConfig":
        """
        Load configuration from environment variables.

        Malformed numbers fall back to their defaults with a warning. An
        unknown timezone is only caught by validate().
        """
        config = cls(
            timezone=os.environ.get("RSIM_TIMEZONE", DEFAULT_TIMEZONE).strip(),
            profit_factor_sentinel=_read_decimal(
                "RSIM_PROFIT_FACTOR_SENTINEL", DEFAULT_PROFIT_FACTOR_SENTINEL
            ),
            kelly_min_samples=_read_int("RSIM_KELLY_MIN_SAMPLES", DEFAULT_KELLY_MIN_SAMPLES),
            default_tick_size=_read_decimal("RSIM_DEFAULT_TICK_SIZE", DEFAULT_TICK_SIZE),
            default_tick_value_cents=_read_decimal(
                "RSIM_DEFAULT_TICK_VALUE_CENTS", DEFAULT_TICK_VALUE_CENTS
            ),
        )

        logger.info(
            f"[RSIM-CONFIG] Loading configuration from environment | "
            f"RSIM_TIMEZONE={config.timezone} | "
            f"RSIM_KELLY_MIN_SAMPLES={config.kelly_min_samples}"
        )

        if validate:
            config.validate()

        return config

    def engine_settings(self) -> EngineSettings:
        return EngineSettings(
            timezone=self.timezone,
            profit_factor_sentinel=self.profit_factor_sentinel,
            kelly_min_samples=self.kelly_min_samples,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timezone": self.timezone,
            "profit_factor_sentinel": str(self.profit_factor_sentinel),
            "kelly_min_samples": self.kelly_min_samples,
            "default_tick_size": str(self.default_tick_size),
            "default_tick_value_cents": str(self.default_tick_value_cents),
        }


# =============================================================================
# Module-Level Configuration Instance
# =============================================================================

_config_instance: Optional[SimulationConfig] = None


def get_simulation_config(validate: bool = True) -> SimulationConfig:
    """Lazily load the process-wide configuration from the environment."""
    global _config_instance

    if _config_instance is None:
        _config_instance = SimulationConfig.from_environment(validate=validate)

    return _config_instance


def reset_simulation_config() -> None:
    """Drop the cached configuration so the next access re-reads the environment."""
    global _config_instance
    _config_instance = None
    logger.debug("[RSIM-CONFIG] Configuration instance reset")


__all__ = [
    "SimulationConfig",
    "SimulationConfigurationError",
    "DEFAULT_TICK_SIZE",
    "DEFAULT_TICK_VALUE_CENTS",
    "get_simulation_config",
    "reset_simulation_config",
]
