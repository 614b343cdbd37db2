"""
============================================================================
Project Risk Replay v1.0.0
Logic Layer - Risk Replay Engine and Money-Management Policies
============================================================================

Reliability Level: L6 Critical (Mission-Critical)

This module contains the core business logic for:
- Tick-based position sizing and P&L (trade_math)
- Decision-tree policy types (decision_tree)
- Ordered skip conditions (skip_conditions)
- Day base risk from the sizing mode (risk_sizing)
- The replay state machine and its strategies (simulation_engine)
- Summary statistics and week/day traces
- Profile projections for replay and Monte Carlo (profile_adapter)

============================================================================
"""

from app.logic.simulation_errors import (
    RiskSimulationError,
    RiskSimulationErrorCode,
)

from app.logic.trade_math import (
    TradeDirection,
    TradeOutcome,
    calculate_tick_position_size,
    calculate_asset_pnl,
    calculate_r_multiple,
    calculate_drawdown,
    determine_outcome,
)

from app.logic.decision_tree import (
    DayPhase,
    DecisionTreeConfig,
    RiskManagementProfile,
)

from app.logic.simulation_models import (
    EngineSettings,
    TradeForSimulation,
    SimpleSimulationParams,
    AdvancedSimulationParams,
    SimulatedTrade,
    SimulatedTradeStatus,
    RiskSimulationResult,
)

from app.logic.simulation_engine import (
    SimulationState,
    SimpleRiskStrategy,
    AdvancedRiskStrategy,
    build_strategy,
    step,
    run_risk_simulation,
)

from app.logic.profile_adapter import (
    MonteCarloProfile,
    build_profile_for_sim,
    build_advanced_params,
)

__all__ = [
    # Errors
    "RiskSimulationError",
    "RiskSimulationErrorCode",
    # Trade math
    "TradeDirection",
    "TradeOutcome",
    "calculate_tick_position_size",
    "calculate_asset_pnl",
    "calculate_r_multiple",
    "calculate_drawdown",
    "determine_outcome",
    # Policy types
    "DayPhase",
    "DecisionTreeConfig",
    "RiskManagementProfile",
    # Models
    "EngineSettings",
    "TradeForSimulation",
    "SimpleSimulationParams",
    "AdvancedSimulationParams",
    "SimulatedTrade",
    "SimulatedTradeStatus",
    "RiskSimulationResult",
    # Engine
    "SimulationState",
    "SimpleRiskStrategy",
    "AdvancedRiskStrategy",
    "build_strategy",
    "step",
    "run_risk_simulation",
    # Profile adapter
    "MonteCarloProfile",
    "build_profile_for_sim",
    "build_advanced_params",
]
