"""
============================================================================
Project Risk Replay - Services Layer
============================================================================

Environment configuration and journal trade normalization feeding the
replay engine.

Reliability Level: L5 High
============================================================================
"""

from services.simulation_config import (
    SimulationConfig,
    SimulationConfigurationError,
    get_simulation_config,
    reset_simulation_config,
)

from services.trade_normalizer import (
    AssetConfig,
    TradeRecordInput,
    normalize_trade,
    normalize_trades,
    build_preview,
)

__all__ = [
    # Configuration
    "SimulationConfig",
    "SimulationConfigurationError",
    "get_simulation_config",
    "reset_simulation_config",
    # Normalizer
    "AssetConfig",
    "TradeRecordInput",
    "normalize_trade",
    "normalize_trades",
    "build_preview",
]
