# ============================================================================
# Project Risk Replay v1.0.0
# Pydantic Schemas - Data Validation Layer
# ============================================================================

from app.schemas.risk_profile import DecisionTreeInput, RiskProfileInput
from app.schemas.risk_simulation import (
    AdvancedSimulationParamsInput,
    DateRangeInput,
    SimpleSimulationParamsInput,
    validate_simulation_params,
)
from app.schemas.monte_carlo import (
    MonteCarloParamsInput,
    MonteCarloV2ParamsInput,
    ProfileForSimulationInput,
)

__all__ = [
    "DecisionTreeInput",
    "RiskProfileInput",
    "AdvancedSimulationParamsInput",
    "DateRangeInput",
    "SimpleSimulationParamsInput",
    "validate_simulation_params",
    "MonteCarloParamsInput",
    "MonteCarloV2ParamsInput",
    "ProfileForSimulationInput",
]
