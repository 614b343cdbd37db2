"""
============================================================================
Project Risk Replay v1.0.0
Simulation Models - Trades, Parameters, Traces and Results
============================================================================

Reliability Level: L6 Critical
Input Constraints: Prices/percentages as Decimal, money as integer cents
Side Effects: None (value objects)

All entities are created fresh per simulation run and never mutated.
RiskSimulationResult is the engine's single output and is JSON-serializable
through to_dict().

NULL CONSISTENCY:
simulated_pnl_cents, simulated_position_size and simulated_r_multiple are
None if and only if the trade status is not EXECUTED.

============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple, Union, Dict, Any

from app.logic.date_keys import DEFAULT_TIMEZONE
from app.logic.decision_tree import DayPhase, DecisionTreeConfig
from app.logic.simulation_errors import RiskSimulationErrorCode
from app.logic.trade_math import (
    ZERO,
    DEFAULT_PROFIT_FACTOR_SENTINEL,
    TradeDirection,
    TradeOutcome,
    percent_of,
)
from app.logic.wire_format import to_wire


DEFAULT_RISK_REDUCTION_FACTOR = Decimal("0.5")
DEFAULT_KELLY_MIN_SAMPLES = 20


# =============================================================================
# Enums
# =============================================================================

class SimulationMode(str, Enum):
    SIMPLE = "simple"
    ADVANCED = "advanced"


class ConsecutiveLossScope(str, Enum):
    """Whether a loss streak carries across days or resets each morning."""
    GLOBAL = "global"
    DAILY = "daily"


class SimulatedTradeStatus(str, Enum):
    """Outcome of replaying one trade: executed, or the reason it was skipped."""
    EXECUTED = "executed"
    SKIPPED_NO_SL = "skipped_no_sl"
    SKIPPED_DAILY_LIMIT = "skipped_daily_limit"
    SKIPPED_DAILY_TARGET = "skipped_daily_target"
    SKIPPED_MAX_TRADES = "skipped_max_trades"
    SKIPPED_CONSECUTIVE_LOSS = "skipped_consecutive_loss"
    SKIPPED_MONTHLY_LIMIT = "skipped_monthly_limit"
    SKIPPED_WEEKLY_LIMIT = "skipped_weekly_limit"
    SKIPPED_RECOVERY_COMPLETE = "skipped_recovery_complete"
    SKIPPED_GAIN_STOP = "skipped_gain_stop"

    @property
    def is_skipped(self) -> bool:
        return self is not SimulatedTradeStatus.EXECUTED

    @property
    def skip_reason(self) -> str:
        """'skipped_daily_limit' -> 'Skipped: daily limit'."""
        return "Skipped: " + self.value.replace("skipped_", "", 1).replace("_", " ")


SKIP_STATUSES = tuple(s for s in SimulatedTradeStatus if s.is_skipped)


# =============================================================================
# Engine Settings
# =============================================================================

@dataclass(frozen=True)
class EngineSettings:
    """
    Explicit knobs the engine needs from its environment.

    The engine never reads ambient configuration; callers build this from
    services.simulation_config or pass the defaults.
    """
    timezone: str = DEFAULT_TIMEZONE
    profit_factor_sentinel: Decimal = DEFAULT_PROFIT_FACTOR_SENTINEL
    kelly_min_samples: int = DEFAULT_KELLY_MIN_SAMPLES


# =============================================================================
# Input Trade
# =============================================================================

@dataclass(frozen=True)
class TradeForSimulation:
    """
    One historical trade in engine-native units.

    Prices and tick size are Decimal, tick value/commission/fees are cents
    per tick or per contract execution, pnl_cents is the original net P&L.
    """
    id: str
    entry_date: datetime
    asset: str
    direction: TradeDirection
    entry_price: Decimal
    exit_price: Decimal
    stop_loss: Optional[Decimal]
    position_size: Decimal
    pnl_cents: int
    tick_size: Decimal
    tick_value_cents: Decimal
    exit_date: Optional[datetime] = None
    outcome: Optional[TradeOutcome] = None
    r_multiple: Optional[Decimal] = None
    commission_per_execution_cents: Decimal = ZERO
    fees_per_execution_cents: Decimal = ZERO
    contracts_executed: Optional[Decimal] = None

    def __post_init__(self) -> None:
        decimal_fields = [
            'entry_price', 'exit_price', 'stop_loss', 'position_size',
            'tick_size', 'tick_value_cents', 'r_multiple',
            'commission_per_execution_cents', 'fees_per_execution_cents',
            'contracts_executed',
        ]
        for field_name in decimal_fields:
            value = getattr(self, field_name)
            if value is not None and not isinstance(value, Decimal):
                raise TypeError(
                    f"[{RiskSimulationErrorCode.FLOAT_DETECTED}] FLOAT_DETECTED: "
                    f"Field '{field_name}' must be Decimal, got {type(value).__name__}"
                )

    @property
    def has_usable_stop(self) -> bool:
        """A stop exists, is non-zero and differs from the entry price."""
        return (
            self.stop_loss is not None
            and self.stop_loss != ZERO
            and self.stop_loss != self.entry_price
        )


# =============================================================================
# Parameters
# =============================================================================

@dataclass(frozen=True)
class ResolvedLimits:
    """Base risk and loss/target ceilings in whole cents."""
    base_risk_cents: int
    daily_loss_cents: int
    daily_profit_target_cents: Optional[int] = None
    weekly_loss_cents: Optional[int] = None
    monthly_loss_cents: Optional[int] = None


def _optional_percent_of(balance_cents: int, percent: Optional[Decimal]) -> Optional[int]:
    if not percent:
        return None
    return percent_of(balance_cents, percent)


@dataclass(frozen=True)
class SimpleSimulationParams:
    """Flat percentage rules, typically taken from a monthly plan."""
    account_balance_cents: int
    risk_per_trade_percent: Decimal
    daily_loss_percent: Decimal
    daily_profit_target_percent: Optional[Decimal] = None
    max_daily_trades: Optional[int] = None
    max_consecutive_losses: Optional[int] = None
    consecutive_loss_scope: ConsecutiveLossScope = ConsecutiveLossScope.GLOBAL
    reduce_risk_after_loss: bool = False
    risk_reduction_factor: Decimal = DEFAULT_RISK_REDUCTION_FACTOR
    increase_risk_after_win: bool = False
    profit_reinvestment_percent: Optional[Decimal] = None
    monthly_loss_percent: Optional[Decimal] = None
    weekly_loss_percent: Optional[Decimal] = None
    mode: SimulationMode = field(default=SimulationMode.SIMPLE, init=False)

    def resolve_limits(self) -> ResolvedLimits:
        balance = self.account_balance_cents
        return ResolvedLimits(
            base_risk_cents=percent_of(balance, self.risk_per_trade_percent),
            daily_loss_cents=percent_of(balance, self.daily_loss_percent),
            daily_profit_target_cents=_optional_percent_of(
                balance, self.daily_profit_target_percent
            ),
            weekly_loss_cents=_optional_percent_of(balance, self.weekly_loss_percent),
            monthly_loss_cents=_optional_percent_of(balance, self.monthly_loss_percent),
        )


@dataclass(frozen=True)
class AdvancedSimulationParams:
    """A full decision tree plus its loss/target ceilings in cents."""
    account_balance_cents: int
    decision_tree: DecisionTreeConfig
    daily_loss_cents: int
    monthly_loss_cents: int
    daily_profit_target_cents: Optional[int] = None
    weekly_loss_cents: Optional[int] = None
    mode: SimulationMode = field(default=SimulationMode.ADVANCED, init=False)

    def resolve_limits(self) -> ResolvedLimits:
        return ResolvedLimits(
            base_risk_cents=self.decision_tree.base_trade.risk_cents,
            daily_loss_cents=self.daily_loss_cents,
            daily_profit_target_cents=self.daily_profit_target_cents,
            weekly_loss_cents=self.weekly_loss_cents,
            monthly_loss_cents=self.monthly_loss_cents,
        )


RiskSimulationParams = Union[SimpleSimulationParams, AdvancedSimulationParams]


# =============================================================================
# Simulated Trade and Equity Curve
# =============================================================================

@dataclass(frozen=True)
class SimulatedTrade:
    """
    One trade's replay outcome and the running state as of this trade.

    adjusted_risk_cents is the resolved risk budget. risk_amount_cents is
    what the sized position actually risks (contracts x risk per contract).
    """
    trade_id: str
    day_key: str
    day_trade_number: int
    status: SimulatedTradeStatus
    asset: str
    direction: TradeDirection
    entry_price: Decimal
    exit_price: Decimal
    stop_loss: Optional[Decimal]
    original_position_size: Decimal
    original_pnl_cents: int
    original_r_multiple: Optional[Decimal]
    simulated_position_size: Optional[int]
    simulated_pnl_cents: Optional[int]
    simulated_r_multiple: Optional[Decimal]
    adjusted_risk_cents: Optional[int]
    risk_amount_cents: Optional[int]
    day_phase: DayPhase
    risk_reason: str
    recovery_step_index: Optional[int]
    equity_after_cents: int
    daily_pnl_cents: int
    consecutive_losses: int
    drawdown_percent: Decimal

    def __post_init__(self) -> None:
        executed = self.status is SimulatedTradeStatus.EXECUTED
        if executed != (self.simulated_pnl_cents is not None):
            raise ValueError(
                f"[{RiskSimulationErrorCode.INVALID_TRADE}] Trade {self.trade_id}: "
                f"status {self.status.value} inconsistent with simulated P&L "
                f"{self.simulated_pnl_cents}"
            )

    @property
    def executed(self) -> bool:
        return self.status is SimulatedTradeStatus.EXECUTED


@dataclass(frozen=True)
class EquityCurvePoint:
    trade_index: int
    day_key: str
    original_equity_cents: int
    simulated_equity_cents: int


# =============================================================================
# Traces
# =============================================================================

@dataclass(frozen=True)
class DayTraceResult:
    total_pnl_cents: int
    executed_count: int
    skipped_count: int
    hit_daily_limit: bool
    hit_daily_target: bool
    final_phase: DayPhase


@dataclass(frozen=True)
class DayTrace:
    day_key: str
    week_key: str
    trades: Tuple[SimulatedTrade, ...]
    day_result: DayTraceResult


@dataclass(frozen=True)
class WeekTrace:
    week_key: str
    week_label: str
    days: Tuple[DayTrace, ...]
    week_pnl_cents: int


# =============================================================================
# Summary and Result
# =============================================================================

@dataclass(frozen=True)
class StreamStats:
    """Performance statistics of one trade stream (original or simulated)."""
    total_pnl_cents: int
    win_rate: Decimal
    profit_factor: Decimal
    max_drawdown_percent: Decimal
    avg_r: Decimal


@dataclass(frozen=True)
class SimulationSummary:
    total_trades: int
    executed_trades: int
    skipped_no_sl: int
    skipped_daily_limit: int
    skipped_daily_target: int
    skipped_max_trades: int
    skipped_consecutive_loss: int
    skipped_monthly_limit: int
    skipped_weekly_limit: int
    skipped_recovery_complete: int
    skipped_gain_stop: int
    original_total_pnl_cents: int
    original_win_rate: Decimal
    original_profit_factor: Decimal
    original_max_drawdown_percent: Decimal
    original_avg_r: Decimal
    simulated_total_pnl_cents: int
    simulated_win_rate: Decimal
    simulated_profit_factor: Decimal
    simulated_max_drawdown_percent: Decimal
    simulated_avg_r: Decimal
    pnl_delta_cents: int
    days_hit_daily_limit: int
    days_hit_daily_target: int

    @property
    def skipped_trades(self) -> int:
        return (
            self.skipped_no_sl
            + self.skipped_daily_limit
            + self.skipped_daily_target
            + self.skipped_max_trades
            + self.skipped_consecutive_loss
            + self.skipped_monthly_limit
            + self.skipped_weekly_limit
            + self.skipped_recovery_complete
            + self.skipped_gain_stop
        )


@dataclass(frozen=True)
class DateRange:
    date_from: str
    date_to: str


@dataclass(frozen=True)
class RiskSimulationResult:
    params: RiskSimulationParams
    summary: SimulationSummary
    trades: Tuple[SimulatedTrade, ...]
    equity_curve: Tuple[EquityCurvePoint, ...]
    weeks: Tuple[WeekTrace, ...]
    date_range: DateRange

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable representation with camelCase keys."""
        return to_wire(self)
