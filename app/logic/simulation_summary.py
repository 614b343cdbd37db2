"""
============================================================================
Project Risk Replay v1.0.0
Summary Aggregator - Original vs. Simulated Performance
============================================================================

Reliability Level: L6 Critical
Input Constraints: Trade streams in input order, balance in cents
Side Effects: None

Both streams are measured the same way:
- total P&L in cents
- win rate = wins / (wins + losses) * 100, breakevens excluded
- profit factor = gross profit / gross loss (sentinel when loss-free)
- average R over trades that report one
- max drawdown via a running peak walk from the starting balance

============================================================================
"""

from collections import Counter
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Iterable, Optional, Sequence, Tuple

from app.logic.simulation_models import (
    SimulatedTrade,
    SimulatedTradeStatus,
    SimulationSummary,
    StreamStats,
    TradeForSimulation,
)
from app.logic.trade_math import (
    ZERO,
    PRECISION_RATIO,
    calculate_drawdown,
    calculate_profit_factor,
    calculate_win_rate,
)


def compute_stream_stats(
    results: Iterable[Tuple[int, Optional[Decimal]]],
    initial_equity_cents: int,
    profit_factor_sentinel: Decimal,
) -> StreamStats:
    """Statistics over (pnl_cents, r_multiple) pairs in chronological order."""
    gross_profit = 0
    gross_loss = 0
    wins = 0
    losses = 0
    total_r = ZERO
    r_count = 0
    equity = initial_equity_cents
    peak = initial_equity_cents
    max_dd = ZERO

    for pnl, r_multiple in results:
        if pnl > 0:
            gross_profit += pnl
            wins += 1
        elif pnl < 0:
            gross_loss += -pnl
            losses += 1
        if r_multiple is not None:
            total_r += r_multiple
            r_count += 1
        equity += pnl
        peak = max(peak, equity)
        max_dd = max(max_dd, calculate_drawdown(equity, peak))

    avg_r = (
        (total_r / Decimal(r_count)).quantize(PRECISION_RATIO, rounding=ROUND_HALF_EVEN)
        if r_count
        else ZERO
    )
    return StreamStats(
        total_pnl_cents=gross_profit - gross_loss,
        win_rate=calculate_win_rate(wins, wins + losses),
        profit_factor=calculate_profit_factor(
            gross_profit, gross_loss, profit_factor_sentinel
        ),
        max_drawdown_percent=max_dd,
        avg_r=avg_r,
    )


def build_original_stats(
    trades: Sequence[TradeForSimulation],
    initial_equity_cents: int,
    profit_factor_sentinel: Decimal,
) -> StreamStats:
    return compute_stream_stats(
        ((t.pnl_cents, t.r_multiple) for t in trades),
        initial_equity_cents,
        profit_factor_sentinel,
    )


def build_simulated_stats(
    simulated: Sequence[SimulatedTrade],
    initial_equity_cents: int,
    profit_factor_sentinel: Decimal,
) -> StreamStats:
    return compute_stream_stats(
        ((t.simulated_pnl_cents, t.simulated_r_multiple) for t in simulated if t.executed),
        initial_equity_cents,
        profit_factor_sentinel,
    )


def build_summary(
    trades: Sequence[TradeForSimulation],
    simulated: Sequence[SimulatedTrade],
    initial_equity_cents: int,
    days_hit_daily_limit: int,
    days_hit_daily_target: int,
    profit_factor_sentinel: Decimal,
) -> SimulationSummary:
    """Aggregate skip counts and both streams' statistics into one summary."""
    counts = Counter(t.status for t in simulated)
    original = build_original_stats(trades, initial_equity_cents, profit_factor_sentinel)
    sim = build_simulated_stats(simulated, initial_equity_cents, profit_factor_sentinel)

    return SimulationSummary(
        total_trades=len(trades),
        executed_trades=counts[SimulatedTradeStatus.EXECUTED],
        skipped_no_sl=counts[SimulatedTradeStatus.SKIPPED_NO_SL],
        skipped_daily_limit=counts[SimulatedTradeStatus.SKIPPED_DAILY_LIMIT],
        skipped_daily_target=counts[SimulatedTradeStatus.SKIPPED_DAILY_TARGET],
        skipped_max_trades=counts[SimulatedTradeStatus.SKIPPED_MAX_TRADES],
        skipped_consecutive_loss=counts[SimulatedTradeStatus.SKIPPED_CONSECUTIVE_LOSS],
        skipped_monthly_limit=counts[SimulatedTradeStatus.SKIPPED_MONTHLY_LIMIT],
        skipped_weekly_limit=counts[SimulatedTradeStatus.SKIPPED_WEEKLY_LIMIT],
        skipped_recovery_complete=counts[SimulatedTradeStatus.SKIPPED_RECOVERY_COMPLETE],
        skipped_gain_stop=counts[SimulatedTradeStatus.SKIPPED_GAIN_STOP],
        original_total_pnl_cents=original.total_pnl_cents,
        original_win_rate=original.win_rate,
        original_profit_factor=original.profit_factor,
        original_max_drawdown_percent=original.max_drawdown_percent,
        original_avg_r=original.avg_r,
        simulated_total_pnl_cents=sim.total_pnl_cents,
        simulated_win_rate=sim.win_rate,
        simulated_profit_factor=sim.profit_factor,
        simulated_max_drawdown_percent=sim.max_drawdown_percent,
        simulated_avg_r=sim.avg_r,
        pnl_delta_cents=sim.total_pnl_cents - original.total_pnl_cents,
        days_hit_daily_limit=days_hit_daily_limit,
        days_hit_daily_target=days_hit_daily_target,
    )
