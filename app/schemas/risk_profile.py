"""
============================================================================
Project Risk Replay v1.0.0
Risk Profile Schema - Pydantic Models for the Decision Tree
============================================================================

Reliability Level: L6 Critical
Input Constraints: camelCase JSON, cents as positive integers
Side Effects: None (pure validation)

Variant payloads are discriminated on "type". Array caps:
    lossRecovery.sequence      <= 10
    drawdownControl.tiers      <= 5
    consecutiveLossRules       <= 5

to_domain() converts each validated schema into the frozen dataclasses
in app.logic.decision_tree.

============================================================================
"""

from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union

from pydantic import Field, PositiveInt

from app.logic.decision_tree import (
    BaseTradeConfig,
    CascadeAction,
    CascadingLimits,
    Compounding,
    ConsecutiveLossAction,
    ConsecutiveLossRule,
    DecisionTreeConfig,
    DrawdownAction,
    DrawdownControl,
    DrawdownTier,
    ExecutionConstraints,
    FixedCents,
    FixedRatioSizing,
    FixedSizing,
    KellyFractionalSizing,
    LimitMode,
    LimitThresholds,
    LossRecoveryConfig,
    LossRecoveryStep,
    PercentOfBalanceSizing,
    PercentOfBase,
    RiskManagementProfile,
    SameAsPrevious,
    SingleTarget,
)
from app.logic.trade_math import ZERO
from app.schemas.common import CamelModel, ExactDecimal

HOURS_PATTERN = r"^\d{2}:\d{2}$"

MAX_RECOVERY_STEPS = 10
MAX_DRAWDOWN_TIERS = 5
MAX_CONSECUTIVE_LOSS_RULES = 5


# ============================================================================
# RISK CALCULATION
# ============================================================================

class PercentOfBaseInput(CamelModel):
    type: Literal["percentOfBase"]
    percent: ExactDecimal = Field(..., ge=1, le=200)

    def to_domain(self) -> PercentOfBase:
        return PercentOfBase(percent=self.percent)


class SameAsPreviousInput(CamelModel):
    type: Literal["sameAsPrevious"]

    def to_domain(self) -> SameAsPrevious:
        return SameAsPrevious()


class FixedCentsInput(CamelModel):
    type: Literal["fixedCents"]
    amount_cents: PositiveInt

    def to_domain(self) -> FixedCents:
        return FixedCents(amount_cents=self.amount_cents)


RiskCalculationInput = Annotated[
    Union[PercentOfBaseInput, SameAsPreviousInput, FixedCentsInput],
    Field(discriminator="type"),
]


class LossRecoveryStepInput(CamelModel):
    risk_calculation: RiskCalculationInput
    max_contracts_override: Optional[PositiveInt] = None

    def to_domain(self) -> LossRecoveryStep:
        return LossRecoveryStep(
            risk_calculation=self.risk_calculation.to_domain(),
            max_contracts_override=self.max_contracts_override,
        )


class LossRecoveryInput(CamelModel):
    sequence: List[LossRecoveryStepInput] = Field(
        default_factory=list, max_length=MAX_RECOVERY_STEPS
    )
    execute_all_regardless: bool = False
    stop_after_sequence: bool = False

    def to_domain(self) -> LossRecoveryConfig:
        return LossRecoveryConfig(
            sequence=tuple(step.to_domain() for step in self.sequence),
            execute_all_regardless=self.execute_all_regardless,
            stop_after_sequence=self.stop_after_sequence,
        )


# ============================================================================
# GAIN MODE
# ============================================================================

class CompoundingInput(CamelModel):
    type: Literal["compounding"]
    reinvestment_percent: ExactDecimal = Field(..., ge=0, le=100)
    stop_on_first_loss: bool = False
    daily_target_cents: Optional[PositiveInt] = None

    def to_domain(self) -> Compounding:
        return Compounding(
            reinvestment_percent=self.reinvestment_percent,
            stop_on_first_loss=self.stop_on_first_loss,
            daily_target_cents=self.daily_target_cents,
        )


class SingleTargetInput(CamelModel):
    type: Literal["singleTarget"]
    daily_target_cents: PositiveInt

    def to_domain(self) -> SingleTarget:
        return SingleTarget(daily_target_cents=self.daily_target_cents)


GainModeInput = Annotated[
    Union[CompoundingInput, SingleTargetInput],
    Field(discriminator="type"),
]


# ============================================================================
# RISK SIZING
# ============================================================================

class FixedSizingInput(CamelModel):
    type: Literal["fixed"]

    def to_domain(self) -> FixedSizing:
        return FixedSizing()


class PercentOfBalanceSizingInput(CamelModel):
    type: Literal["percentOfBalance"]
    risk_percent: ExactDecimal = Field(..., ge=Decimal("0.1"), le=10)

    def to_domain(self) -> PercentOfBalanceSizing:
        return PercentOfBalanceSizing(risk_percent=self.risk_percent)


class FixedRatioSizingInput(CamelModel):
    type: Literal["fixedRatio"]
    delta_cents: PositiveInt
    base_contract_risk_cents: PositiveInt

    def to_domain(self) -> FixedRatioSizing:
        return FixedRatioSizing(
            delta_cents=self.delta_cents,
            base_contract_risk_cents=self.base_contract_risk_cents,
        )


class KellyFractionalSizingInput(CamelModel):
    type: Literal["kellyFractional"]
    divisor: ExactDecimal = Field(..., ge=1, le=10)

    def to_domain(self) -> KellyFractionalSizing:
        return KellyFractionalSizing(divisor=self.divisor)


RiskSizingInput = Annotated[
    Union[
        FixedSizingInput,
        PercentOfBalanceSizingInput,
        FixedRatioSizingInput,
        KellyFractionalSizingInput,
    ],
    Field(discriminator="type"),
]


# ============================================================================
# LIMITS AND CONTROLS
# ============================================================================

class BaseTradeInput(CamelModel):
    risk_cents: PositiveInt
    max_contracts: Optional[PositiveInt] = None
    min_stop_points: Optional[PositiveInt] = None

    def to_domain(self) -> BaseTradeConfig:
        return BaseTradeConfig(
            risk_cents=self.risk_cents,
            max_contracts=self.max_contracts,
            min_stop_points=_as_decimal(self.min_stop_points),
        )


class CascadingLimitsInput(CamelModel):
    weekly_loss_cents: Optional[PositiveInt] = None
    weekly_action: CascadeAction = CascadeAction.STOP_TRADING
    monthly_loss_cents: PositiveInt
    monthly_action: CascadeAction = CascadeAction.STOP_TRADING

    def to_domain(self) -> CascadingLimits:
        return CascadingLimits(
            monthly_loss_cents=self.monthly_loss_cents,
            weekly_loss_cents=self.weekly_loss_cents,
            weekly_action=self.weekly_action,
            monthly_action=self.monthly_action,
        )


class ExecutionConstraintsInput(CamelModel):
    min_stop_points: Optional[PositiveInt] = None
    max_contracts: Optional[PositiveInt] = None
    operating_hours_start: Optional[str] = Field(default=None, pattern=HOURS_PATTERN)
    operating_hours_end: Optional[str] = Field(default=None, pattern=HOURS_PATTERN)

    def to_domain(self) -> ExecutionConstraints:
        return ExecutionConstraints(
            min_stop_points=_as_decimal(self.min_stop_points),
            max_contracts=self.max_contracts,
            operating_hours_start=self.operating_hours_start,
            operating_hours_end=self.operating_hours_end,
        )


class DrawdownTierInput(CamelModel):
    drawdown_percent: ExactDecimal = Field(..., ge=1, le=99)
    action: DrawdownAction
    reduce_percent: ExactDecimal = Field(..., ge=0, le=100)

    def to_domain(self) -> DrawdownTier:
        return DrawdownTier(
            drawdown_percent=self.drawdown_percent,
            action=self.action,
            reduce_percent=self.reduce_percent,
        )


class DrawdownControlInput(CamelModel):
    tiers: List[DrawdownTierInput] = Field(
        default_factory=list, max_length=MAX_DRAWDOWN_TIERS
    )
    recovery_threshold_percent: ExactDecimal = Field(default=ZERO, ge=0, le=100)

    def to_domain(self) -> DrawdownControl:
        return DrawdownControl(
            tiers=tuple(tier.to_domain() for tier in self.tiers),
            recovery_threshold_percent=self.recovery_threshold_percent,
        )


class ConsecutiveLossRuleInput(CamelModel):
    consecutive_days: int = Field(..., ge=1, le=20)
    action: ConsecutiveLossAction
    reduce_percent: ExactDecimal = Field(default=ZERO, ge=0, le=100)

    def to_domain(self) -> ConsecutiveLossRule:
        return ConsecutiveLossRule(
            consecutive_days=self.consecutive_days,
            action=self.action,
            reduce_percent=self.reduce_percent,
        )


class LimitThresholdsInput(CamelModel):
    """Daily/weekly/monthly limits as % of initial balance or as R multiples."""
    daily: ExactDecimal = Field(..., ge=Decimal("0.1"), le=100)
    weekly: Optional[ExactDecimal] = Field(default=None, ge=Decimal("0.1"), le=100)
    monthly: ExactDecimal = Field(..., ge=Decimal("0.1"), le=100)

    def to_domain(self) -> LimitThresholds:
        return LimitThresholds(daily=self.daily, monthly=self.monthly, weekly=self.weekly)


def _as_decimal(value: Optional[int]) -> Optional[Decimal]:
    return None if value is None else Decimal(value)


# ============================================================================
# DECISION TREE AND PROFILE
# ============================================================================

class DecisionTreeInput(CamelModel):
    """
    Full decision tree.

    Sizing, limit mode, drawdown control and losing-day rules are optional;
    omitted values mean fixed sizing, fixed-cents limits and no controls.
    """
    base_trade: BaseTradeInput
    loss_recovery: LossRecoveryInput
    gain_mode: GainModeInput
    cascading_limits: CascadingLimitsInput
    execution_constraints: ExecutionConstraintsInput = Field(
        default_factory=ExecutionConstraintsInput
    )
    risk_sizing: Optional[RiskSizingInput] = None
    limit_mode: Optional[LimitMode] = None
    drawdown_control: Optional[DrawdownControlInput] = None
    consecutive_loss_rules: Optional[List[ConsecutiveLossRuleInput]] = Field(
        default=None, max_length=MAX_CONSECUTIVE_LOSS_RULES
    )
    limits_percent: Optional[LimitThresholdsInput] = None
    limits_r: Optional[LimitThresholdsInput] = None

    def to_domain(self) -> DecisionTreeConfig:
        return DecisionTreeConfig(
            base_trade=self.base_trade.to_domain(),
            loss_recovery=self.loss_recovery.to_domain(),
            gain_mode=self.gain_mode.to_domain(),
            cascading_limits=self.cascading_limits.to_domain(),
            execution_constraints=self.execution_constraints.to_domain(),
            risk_sizing=self.risk_sizing.to_domain() if self.risk_sizing else FixedSizing(),
            limit_mode=self.limit_mode or LimitMode.FIXED_CENTS,
            limits_percent=self.limits_percent.to_domain() if self.limits_percent else None,
            limits_r=self.limits_r.to_domain() if self.limits_r else None,
            drawdown_control=(
                self.drawdown_control.to_domain() if self.drawdown_control else None
            ),
            consecutive_loss_rules=tuple(
                rule.to_domain() for rule in (self.consecutive_loss_rules or ())
            ),
        )


class RiskProfileInput(CamelModel):
    """
    A saved risk management profile.

    Reliability Level: L6 Critical
    Input Constraints: name 1-100 chars, every cents field a positive integer
    Side Effects: None
    """
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=2000)
    base_risk_cents: PositiveInt
    daily_loss_cents: PositiveInt
    weekly_loss_cents: Optional[PositiveInt] = None
    monthly_loss_cents: PositiveInt
    daily_profit_target_cents: Optional[PositiveInt] = None
    decision_tree: DecisionTreeInput

    def to_domain(self) -> RiskManagementProfile:
        return RiskManagementProfile(
            name=self.name,
            base_risk_cents=self.base_risk_cents,
            daily_loss_cents=self.daily_loss_cents,
            monthly_loss_cents=self.monthly_loss_cents,
            decision_tree=self.decision_tree.to_domain(),
            weekly_loss_cents=self.weekly_loss_cents,
            daily_profit_target_cents=self.daily_profit_target_cents,
            description=self.description or "",
        )
