"""
============================================================================
Project Risk Replay v1.0.0
Monte Carlo Schema - Iteration Budgets for Batch Drivers
============================================================================

Reliability Level: L5 High
Input Constraints: camelCase JSON
Side Effects: None (pure validation)

ITERATION BUDGETS:
    flat       numberOfTrades x simulationCount            <= 3,000,000
    day-aware  50 trades/day x tradingDaysPerMonth x sims  <= 10,000,000

The budget error is reported on simulationCount.

============================================================================
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import ConfigDict, Field, PositiveInt, ValidationInfo, field_validator

from app.schemas.common import CamelModel, ExactDecimal

SIMULATION_BUDGET_CAP = 3_000_000
V2_SIMULATION_BUDGET_CAP = 10_000_000
V2_MAX_TRADES_PER_DAY = 50


class MonteCarloParamsInput(CamelModel):
    """Flat Monte Carlo run: independent trades drawn from a win rate and R:R."""
    win_rate: ExactDecimal = Field(..., ge=1, le=99)
    reward_risk_ratio: ExactDecimal = Field(..., ge=Decimal("0.1"), le=20)
    number_of_trades: int = Field(..., ge=10, le=10_000)
    commission_impact_r: ExactDecimal = Field(default=Decimal("0"), ge=0, le=50)
    simulation_count: int = Field(..., ge=100, le=50_000)

    @field_validator("simulation_count")
    @classmethod
    def check_budget(cls, value: int, info: ValidationInfo) -> int:
        trades = info.data.get("number_of_trades")
        if trades is None:
            return value
        total = trades * value
        if total > SIMULATION_BUDGET_CAP:
            max_trades = SIMULATION_BUDGET_CAP // value
            max_simulations = SIMULATION_BUDGET_CAP // trades
            raise ValueError(
                f"Total iterations ({total:,}) exceeds the maximum of "
                f"{SIMULATION_BUDGET_CAP:,}. Reduce trades to {max_trades:,} "
                f"or simulations to {max_simulations:,}."
            )
        return value


class RecoveryStepRiskInput(CamelModel):
    model_config = ConfigDict(extra="ignore")

    risk_cents: PositiveInt


class ProfileForSimulationInput(CamelModel):
    """
    Flat profile as produced by build_profile_for_sim().

    Fields the day-aware engine does not read are ignored.
    """
    model_config = ConfigDict(extra="ignore")

    name: str
    base_risk_cents: PositiveInt
    reward_risk_ratio: ExactDecimal = Field(..., ge=Decimal("0.1"), le=20)
    win_rate: ExactDecimal = Field(..., ge=1, le=99)
    breakeven_rate: ExactDecimal = Field(..., ge=0, le=80)
    daily_target_cents: Optional[PositiveInt] = None
    daily_loss_limit_cents: PositiveInt
    loss_recovery_steps: List[RecoveryStepRiskInput] = Field(
        default_factory=list, max_length=10
    )
    execute_all_regardless: bool
    stop_after_sequence: bool
    compounding_risk_percent: ExactDecimal = Field(..., ge=0, le=100)
    stop_on_first_loss: bool
    weekly_loss_limit_cents: Optional[PositiveInt] = None
    monthly_loss_limit_cents: PositiveInt
    trading_days_per_month: int = Field(..., ge=1, le=31)
    trading_days_per_week: int = Field(..., ge=1, le=7)
    commission_per_trade_cents: ExactDecimal = Field(..., ge=0)


class MonteCarloV2ParamsInput(CamelModel):
    """Day-aware Monte Carlo run over a risk management profile."""
    profile: ProfileForSimulationInput
    simulation_count: int = Field(..., ge=100, le=50_000)
    initial_balance: PositiveInt

    @field_validator("simulation_count")
    @classmethod
    def check_budget(cls, value: int, info: ValidationInfo) -> int:
        profile = info.data.get("profile")
        if profile is None:
            return value
        total = V2_MAX_TRADES_PER_DAY * profile.trading_days_per_month * value
        if total > V2_SIMULATION_BUDGET_CAP:
            raise ValueError(
                f"Estimated iterations ({total:,}) exceeds the cap of "
                f"{V2_SIMULATION_BUDGET_CAP:,}. Reduce simulations or trading days."
            )
        return value
