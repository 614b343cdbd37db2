"""
============================================================================
Project Risk Replay v1.0.0
Decision Tree Model - Money-Management Policy Types
============================================================================

Reliability Level: L6 Critical
Input Constraints: Values already validated at the schema boundary
Side Effects: None (pure data)

A DecisionTreeConfig describes the policy under test:
- base trade risk and contract limits
- loss-recovery sequence (after a losing first trade)
- gain mode (after a winning first trade)
- cascading weekly/monthly loss ceilings
- drawdown-control tiers and consecutive-loss rules
- risk-sizing mode and limit mode

Policy variants (RiskCalculation, GainMode, RiskSizing) are tagged unions
of frozen dataclasses. Each variant carries its wire tag in TYPE. Code that
resolves a variant dispatches with isinstance and raises TypeError on an
unknown variant.

============================================================================
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union

from app.logic.simulation_errors import RiskSimulationErrorCode
from app.logic.trade_math import ZERO


def _require_decimal(instance: object, *names: str) -> None:
    """Reject non-Decimal percentages (float or int) on a policy object."""
    for name in names:
        value = getattr(instance, name)
        if value is not None and not isinstance(value, Decimal):
            raise TypeError(
                f"[{RiskSimulationErrorCode.FLOAT_DETECTED}] FLOAT_DETECTED: "
                f"{type(instance).__name__}.{name} must be Decimal, "
                f"got {type(value).__name__}"
            )


# =============================================================================
# Enums
# =============================================================================

class DayPhase(str, Enum):
    """Where the simulation is within the trading day."""
    BASE = "base"
    LOSS_RECOVERY = "loss_recovery"
    GAIN_MODE = "gain_mode"
    NORMAL = "normal"


class CascadeAction(str, Enum):
    STOP_TRADING = "stopTrading"
    REDUCE_RISK = "reduceRisk"


class DrawdownAction(str, Enum):
    REDUCE_RISK = "reduceRisk"
    PAUSE = "pause"


class ConsecutiveLossAction(str, Enum):
    REDUCE_RISK = "reduceRisk"
    STOP_DAY = "stopDay"
    PAUSE_WEEK = "pauseWeek"


class LimitMode(str, Enum):
    """Unit in which a profile expresses its daily/weekly/monthly limits."""
    FIXED_CENTS = "fixedCents"
    PERCENT_OF_INITIAL = "percentOfInitial"
    R_MULTIPLES = "rMultiples"


# =============================================================================
# Risk Calculation (loss-recovery step sizing)
# =============================================================================

@dataclass(frozen=True)
class PercentOfBase:
    TYPE: ClassVar[str] = "percentOfBase"
    percent: Decimal

    def __post_init__(self) -> None:
        _require_decimal(self, "percent")


@dataclass(frozen=True)
class SameAsPrevious:
    TYPE: ClassVar[str] = "sameAsPrevious"


@dataclass(frozen=True)
class FixedCents:
    TYPE: ClassVar[str] = "fixedCents"
    amount_cents: int


RiskCalculation = Union[PercentOfBase, SameAsPrevious, FixedCents]


# =============================================================================
# Loss Recovery
# =============================================================================

@dataclass(frozen=True)
class LossRecoveryStep:
    risk_calculation: RiskCalculation
    max_contracts_override: Optional[int] = None


@dataclass(frozen=True)
class LossRecoveryConfig:
    """
    Ordered recovery steps taken after a losing T1.

    execute_all_regardless keeps walking the sequence after a recovery win.
    stop_after_sequence skips the rest of the day once it is exhausted.
    """
    sequence: Tuple[LossRecoveryStep, ...] = ()
    execute_all_regardless: bool = False
    stop_after_sequence: bool = False


# =============================================================================
# Gain Mode
# =============================================================================

@dataclass(frozen=True)
class SingleTarget:
    """Stop trading for the day once in gain mode."""
    TYPE: ClassVar[str] = "singleTarget"
    daily_target_cents: int


@dataclass(frozen=True)
class Compounding:
    """Reinvest a share of the day's gains into the next trade."""
    TYPE: ClassVar[str] = "compounding"
    reinvestment_percent: Decimal
    stop_on_first_loss: bool = False
    daily_target_cents: Optional[int] = None

    def __post_init__(self) -> None:
        _require_decimal(self, "reinvestment_percent")


GainMode = Union[SingleTarget, Compounding]


# =============================================================================
# Limits and Constraints
# =============================================================================

@dataclass(frozen=True)
class BaseTradeConfig:
    risk_cents: int
    max_contracts: Optional[int] = None
    min_stop_points: Optional[Decimal] = None

    def __post_init__(self) -> None:
        _require_decimal(self, "min_stop_points")


@dataclass(frozen=True)
class CascadingLimits:
    monthly_loss_cents: int
    weekly_loss_cents: Optional[int] = None
    weekly_action: CascadeAction = CascadeAction.STOP_TRADING
    monthly_action: CascadeAction = CascadeAction.STOP_TRADING


@dataclass(frozen=True)
class ExecutionConstraints:
    min_stop_points: Optional[Decimal] = None
    max_contracts: Optional[int] = None
    operating_hours_start: Optional[str] = None
    operating_hours_end: Optional[str] = None

    def __post_init__(self) -> None:
        _require_decimal(self, "min_stop_points")


@dataclass(frozen=True)
class DrawdownTier:
    drawdown_percent: Decimal
    action: DrawdownAction
    reduce_percent: Decimal

    def __post_init__(self) -> None:
        _require_decimal(self, "drawdown_percent", "reduce_percent")


@dataclass(frozen=True)
class DrawdownControl:
    tiers: Tuple[DrawdownTier, ...] = ()
    recovery_threshold_percent: Decimal = ZERO

    def __post_init__(self) -> None:
        _require_decimal(self, "recovery_threshold_percent")


@dataclass(frozen=True)
class ConsecutiveLossRule:
    consecutive_days: int
    action: ConsecutiveLossAction
    reduce_percent: Decimal = ZERO

    def __post_init__(self) -> None:
        _require_decimal(self, "reduce_percent")


@dataclass(frozen=True)
class LimitThresholds:
    """Daily/weekly/monthly limits as percent of balance or as R-multiples."""
    daily: Decimal
    monthly: Decimal
    weekly: Optional[Decimal] = None

    def __post_init__(self) -> None:
        _require_decimal(self, "daily", "monthly", "weekly")


# =============================================================================
# Risk Sizing
# =============================================================================

@dataclass(frozen=True)
class FixedSizing:
    TYPE: ClassVar[str] = "fixed"


@dataclass(frozen=True)
class PercentOfBalanceSizing:
    TYPE: ClassVar[str] = "percentOfBalance"
    risk_percent: Decimal

    def __post_init__(self) -> None:
        _require_decimal(self, "risk_percent")


@dataclass(frozen=True)
class FixedRatioSizing:
    """Ryan Jones fixed ratio: one more contract per delta of accumulated profit."""
    TYPE: ClassVar[str] = "fixedRatio"
    delta_cents: int
    base_contract_risk_cents: int


@dataclass(frozen=True)
class KellyFractionalSizing:
    TYPE: ClassVar[str] = "kellyFractional"
    divisor: Decimal

    def __post_init__(self) -> None:
        _require_decimal(self, "divisor")


RiskSizing = Union[
    FixedSizing, PercentOfBalanceSizing, FixedRatioSizing, KellyFractionalSizing
]


# =============================================================================
# Decision Tree and Profile
# =============================================================================

@dataclass(frozen=True)
class DecisionTreeConfig:
    base_trade: BaseTradeConfig
    loss_recovery: LossRecoveryConfig
    gain_mode: GainMode
    cascading_limits: CascadingLimits
    execution_constraints: ExecutionConstraints = field(default_factory=ExecutionConstraints)
    risk_sizing: RiskSizing = field(default_factory=FixedSizing)
    limit_mode: LimitMode = LimitMode.FIXED_CENTS
    limits_percent: Optional[LimitThresholds] = None
    limits_r: Optional[LimitThresholds] = None
    drawdown_control: Optional[DrawdownControl] = None
    consecutive_loss_rules: Tuple[ConsecutiveLossRule, ...] = ()


@dataclass(frozen=True)
class RiskManagementProfile:
    """A named, stored policy plus its headline cent limits."""
    name: str
    base_risk_cents: int
    daily_loss_cents: int
    monthly_loss_cents: int
    decision_tree: DecisionTreeConfig
    weekly_loss_cents: Optional[int] = None
    daily_profit_target_cents: Optional[int] = None
    description: str = ""
