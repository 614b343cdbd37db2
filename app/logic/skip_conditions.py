"""
============================================================================
Project Risk Replay v1.0.0
Skip-Condition Evaluator - Ordered Trade Gating
============================================================================

Reliability Level: L6 Critical
Input Constraints: Running day/week/month P&L in cents
Side Effects: None (pure functions)

PRIORITY ORDER (first match wins):
    1. no usable stop-loss               -> skipped_no_sl
    2. month-to-date loss ceiling        -> skipped_monthly_limit
    3. week-to-date loss ceiling         -> skipped_weekly_limit
    4. daily loss ceiling                -> skipped_daily_limit (day marked)
    5. daily profit target               -> skipped_daily_target (day marked)
    6. daily trade cap (simple)          -> skipped_max_trades
    7. loss streak / losing-day halt     -> skipped_consecutive_loss
    8. recovery sequence exhausted       -> skipped_recovery_complete
    9. single-target gain mode reached   -> skipped_gain_stop

Rules 1-7 run before any risk is derived. Rules 8-9 depend on the day
phase and run inside the advanced risk derivation.

============================================================================
"""

from dataclasses import dataclass
from typing import Optional

from app.logic.decision_tree import (
    DayPhase,
    GainMode,
    LossRecoveryConfig,
    SingleTarget,
)
from app.logic.simulation_models import ResolvedLimits, SimulatedTradeStatus


@dataclass(frozen=True)
class SkipContext:
    """Snapshot of the running state needed to gate one trade."""
    has_usable_stop: bool
    daily_pnl_cents: int
    weekly_pnl_cents: int
    monthly_pnl_cents: int
    daily_limit_hit: bool
    daily_target_hit: bool
    daily_trade_count: int
    consecutive_losses: int


@dataclass(frozen=True)
class TradeGates:
    """Mode-specific gates for rules 6 and 7."""
    max_daily_trades: Optional[int] = None
    max_consecutive_losses: Optional[int] = None
    halted_by_loss_rule: bool = False


@dataclass(frozen=True)
class SkipDecision:
    """Result of gating: the skip status (None to execute) and updated day flags."""
    status: Optional[SimulatedTradeStatus]
    daily_limit_hit: bool
    daily_target_hit: bool

    @property
    def skipped(self) -> bool:
        return self.status is not None


def _at_or_below_loss(pnl_cents: int, ceiling_cents: Optional[int]) -> bool:
    return bool(ceiling_cents) and pnl_cents <= -ceiling_cents


def evaluate_skip_conditions(
    ctx: SkipContext,
    limits: ResolvedLimits,
    gates: TradeGates,
) -> SkipDecision:
    """
    Apply rules 1-7 in priority order.

    Rules 4 and 5 latch: once the day's limit or target is hit, the flag
    stays set and every remaining trade that day is skipped for it.
    """
    limit_hit = ctx.daily_limit_hit
    target_hit = ctx.daily_target_hit

    def decide(status: Optional[SimulatedTradeStatus]) -> SkipDecision:
        return SkipDecision(status, limit_hit, target_hit)

    if not ctx.has_usable_stop:
        return decide(SimulatedTradeStatus.SKIPPED_NO_SL)

    if _at_or_below_loss(ctx.monthly_pnl_cents, limits.monthly_loss_cents):
        return decide(SimulatedTradeStatus.SKIPPED_MONTHLY_LIMIT)

    if _at_or_below_loss(ctx.weekly_pnl_cents, limits.weekly_loss_cents):
        return decide(SimulatedTradeStatus.SKIPPED_WEEKLY_LIMIT)

    if limit_hit or ctx.daily_pnl_cents <= -limits.daily_loss_cents:
        limit_hit = True
        return decide(SimulatedTradeStatus.SKIPPED_DAILY_LIMIT)

    target = limits.daily_profit_target_cents
    if target_hit or (target and ctx.daily_pnl_cents >= target):
        target_hit = True
        return decide(SimulatedTradeStatus.SKIPPED_DAILY_TARGET)

    if gates.max_daily_trades and ctx.daily_trade_count > gates.max_daily_trades:
        return decide(SimulatedTradeStatus.SKIPPED_MAX_TRADES)

    if gates.halted_by_loss_rule or (
        gates.max_consecutive_losses
        and ctx.consecutive_losses >= gates.max_consecutive_losses
    ):
        return decide(SimulatedTradeStatus.SKIPPED_CONSECUTIVE_LOSS)

    return decide(None)


def evaluate_phase_skip(
    phase: DayPhase,
    is_first_trade: bool,
    recovery_index: int,
    loss_recovery: LossRecoveryConfig,
    gain_mode: GainMode,
) -> Optional[SimulatedTradeStatus]:
    """Apply rules 8-9 for the advanced decision tree (never on T1)."""
    if is_first_trade:
        return None
    if phase is DayPhase.LOSS_RECOVERY:
        exhausted = recovery_index >= len(loss_recovery.sequence)
        if exhausted and loss_recovery.stop_after_sequence:
            return SimulatedTradeStatus.SKIPPED_RECOVERY_COMPLETE
    if phase is DayPhase.GAIN_MODE and isinstance(gain_mode, SingleTarget):
        return SimulatedTradeStatus.SKIPPED_GAIN_STOP
    return None
