"""
============================================================================
Project Risk Replay v1.0.0
Profile Adapter - Risk Management Profile to Simulation Inputs
============================================================================

Reliability Level: L5 High
Input Constraints: A validated RiskManagementProfile
Side Effects: None (pure functions, no storage access)

Two projections of the same saved profile:

    build_profile_for_sim   flat Monte Carlo profile with pre-computed
                            absolute recovery-step risks
    build_advanced_params   advanced replay params with the profile's
                            limit mode resolved into cents

============================================================================
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Any, Dict, List, Optional, Tuple

from app.logic.decision_tree import (
    Compounding,
    ConsecutiveLossRule,
    DrawdownTier,
    FixedRatioSizing,
    KellyFractionalSizing,
    LimitMode,
    LimitThresholds,
    PercentOfBalanceSizing,
    RiskManagementProfile,
)
from app.logic.risk_resolver import resolve_risk_calculation
from app.logic.simulation_models import AdvancedSimulationParams
from app.logic.trade_math import ZERO, PRECISION_RATIO, percent_of, round_cents
from app.logic.wire_format import to_wire

logger = logging.getLogger(__name__)


DEFAULT_TRADING_DAYS_PER_MONTH = 22
DEFAULT_TRADING_DAYS_PER_WEEK = 5


@dataclass(frozen=True)
class RecoveryStepRisk:
    """A loss-recovery step resolved to absolute cents."""
    risk_cents: int
    risk_multiplier: Decimal


@dataclass(frozen=True)
class MonteCarloProfile:
    """
    Flat profile consumed by the day-aware Monte Carlo engine.

    Keeps nesting shallow so the simulation loop reads fields directly.
    """
    name: str
    base_risk_cents: int
    reward_risk_ratio: Decimal
    win_rate: Decimal
    breakeven_rate: Decimal
    daily_target_cents: Optional[int]
    daily_loss_limit_cents: int
    loss_recovery_steps: Tuple[RecoveryStepRisk, ...]
    execute_all_regardless: bool
    stop_after_sequence: bool
    compounding_risk_percent: Decimal
    stop_on_first_loss: bool
    weekly_loss_limit_cents: Optional[int]
    monthly_loss_limit_cents: int
    trading_days_per_month: int
    trading_days_per_week: int
    commission_per_trade_cents: Decimal
    risk_sizing_mode: str
    risk_percent: Optional[Decimal]
    fixed_ratio_delta_cents: Optional[int]
    fixed_ratio_base_contract_risk_cents: Optional[int]
    kelly_divisor: Optional[Decimal]
    limit_mode: LimitMode
    daily_loss_percent: Optional[Decimal]
    weekly_loss_percent: Optional[Decimal]
    monthly_loss_percent: Optional[Decimal]
    daily_loss_r: Optional[Decimal]
    weekly_loss_r: Optional[Decimal]
    monthly_loss_r: Optional[Decimal]
    drawdown_tiers: Tuple[DrawdownTier, ...]
    drawdown_recovery_percent: Decimal
    consecutive_loss_rules: Tuple[ConsecutiveLossRule, ...]

    def to_dict(self) -> Dict[str, Any]:
        return to_wire(self)


def _recovery_step_risks(profile: RiskManagementProfile) -> Tuple[RecoveryStepRisk, ...]:
    tree = profile.decision_tree
    base = tree.base_trade.risk_cents
    steps: List[RecoveryStepRisk] = []
    previous = base
    for step in tree.loss_recovery.sequence:
        risk = resolve_risk_calculation(step.risk_calculation, base, previous)
        steps.append(
            RecoveryStepRisk(
                risk_cents=risk,
                risk_multiplier=(Decimal(risk) / Decimal(base)).quantize(
                    PRECISION_RATIO, rounding=ROUND_HALF_EVEN
                ),
            )
        )
        previous = risk
    return tuple(steps)


def build_profile_for_sim(
    profile: RiskManagementProfile,
    win_rate: Decimal,
    reward_risk_ratio: Decimal,
    breakeven_rate: Decimal = ZERO,
    commission_per_trade_cents: Decimal = ZERO,
    trading_days_per_month: int = DEFAULT_TRADING_DAYS_PER_MONTH,
    trading_days_per_week: int = DEFAULT_TRADING_DAYS_PER_WEEK,
) -> MonteCarloProfile:
    """
    Flatten a profile for the Monte Carlo engine.

    Single-target gain mode maps to compounding 0% with stop-on-first-loss,
    so the daily target is the only thing that ends a winning day.
    """
    tree = profile.decision_tree
    gain_mode = tree.gain_mode
    sizing = tree.risk_sizing

    if isinstance(gain_mode, Compounding):
        compounding_percent = gain_mode.reinvestment_percent
        stop_on_first_loss = gain_mode.stop_on_first_loss
    else:
        compounding_percent = ZERO
        stop_on_first_loss = True

    daily_target = gain_mode.daily_target_cents
    if daily_target is None:
        daily_target = profile.daily_profit_target_cents

    limits_percent = tree.limits_percent
    limits_r = tree.limits_r
    drawdown = tree.drawdown_control

    return MonteCarloProfile(
        name=profile.name,
        base_risk_cents=tree.base_trade.risk_cents,
        reward_risk_ratio=reward_risk_ratio,
        win_rate=win_rate,
        breakeven_rate=breakeven_rate,
        daily_target_cents=daily_target,
        daily_loss_limit_cents=profile.daily_loss_cents,
        loss_recovery_steps=_recovery_step_risks(profile),
        execute_all_regardless=tree.loss_recovery.execute_all_regardless,
        stop_after_sequence=tree.loss_recovery.stop_after_sequence,
        compounding_risk_percent=compounding_percent,
        stop_on_first_loss=stop_on_first_loss,
        weekly_loss_limit_cents=profile.weekly_loss_cents,
        monthly_loss_limit_cents=profile.monthly_loss_cents,
        trading_days_per_month=trading_days_per_month,
        trading_days_per_week=trading_days_per_week,
        commission_per_trade_cents=commission_per_trade_cents,
        risk_sizing_mode=sizing.TYPE,
        risk_percent=(
            sizing.risk_percent if isinstance(sizing, PercentOfBalanceSizing) else None
        ),
        fixed_ratio_delta_cents=(
            sizing.delta_cents if isinstance(sizing, FixedRatioSizing) else None
        ),
        fixed_ratio_base_contract_risk_cents=(
            sizing.base_contract_risk_cents if isinstance(sizing, FixedRatioSizing) else None
        ),
        kelly_divisor=(
            sizing.divisor if isinstance(sizing, KellyFractionalSizing) else None
        ),
        limit_mode=tree.limit_mode,
        daily_loss_percent=limits_percent.daily if limits_percent else None,
        weekly_loss_percent=limits_percent.weekly if limits_percent else None,
        monthly_loss_percent=limits_percent.monthly if limits_percent else None,
        daily_loss_r=limits_r.daily if limits_r else None,
        weekly_loss_r=limits_r.weekly if limits_r else None,
        monthly_loss_r=limits_r.monthly if limits_r else None,
        drawdown_tiers=drawdown.tiers if drawdown else (),
        drawdown_recovery_percent=drawdown.recovery_threshold_percent if drawdown else ZERO,
        consecutive_loss_rules=tree.consecutive_loss_rules,
    )


# =============================================================================
# Advanced Replay Params
# =============================================================================

def _limits_from_percent(
    thresholds: LimitThresholds, balance_cents: int
) -> Tuple[int, Optional[int], int]:
    weekly = thresholds.weekly
    return (
        percent_of(balance_cents, thresholds.daily),
        percent_of(balance_cents, weekly) if weekly is not None else None,
        percent_of(balance_cents, thresholds.monthly),
    )


def _limits_from_r(
    thresholds: LimitThresholds, base_risk_cents: int
) -> Tuple[int, Optional[int], int]:
    base = Decimal(base_risk_cents)
    weekly = thresholds.weekly
    return (
        round_cents(base * thresholds.daily),
        round_cents(base * weekly) if weekly is not None else None,
        round_cents(base * thresholds.monthly),
    )


def resolve_profile_limits(
    profile: RiskManagementProfile, account_balance_cents: int
) -> Tuple[int, Optional[int], int]:
    """
    Return (daily, weekly, monthly) loss ceilings in cents for the limit mode.

    A percent or R mode without its thresholds falls back to the profile's
    fixed cents.
    """
    tree = profile.decision_tree
    if tree.limit_mode is LimitMode.PERCENT_OF_INITIAL and tree.limits_percent:
        return _limits_from_percent(tree.limits_percent, account_balance_cents)
    if tree.limit_mode is LimitMode.R_MULTIPLES and tree.limits_r:
        return _limits_from_r(tree.limits_r, tree.base_trade.risk_cents)
    if tree.limit_mode is not LimitMode.FIXED_CENTS:
        logger.warning(
            f"[RSIM-ADAPTER] Limit thresholds missing, using fixed cents | "
            f"profile={profile.name} | limit_mode={tree.limit_mode.value}"
        )
    return (
        profile.daily_loss_cents,
        profile.weekly_loss_cents,
        profile.monthly_loss_cents,
    )


def build_advanced_params(
    profile: RiskManagementProfile, account_balance_cents: int
) -> AdvancedSimulationParams:
    daily, weekly, monthly = resolve_profile_limits(profile, account_balance_cents)
    return AdvancedSimulationParams(
        account_balance_cents=account_balance_cents,
        decision_tree=profile.decision_tree,
        daily_loss_cents=daily,
        monthly_loss_cents=monthly,
        daily_profit_target_cents=profile.daily_profit_target_cents,
        weekly_loss_cents=weekly,
    )
