"""
============================================================================
Project Risk Replay v1.0.0
Trace Builder - Week / Day Drill-Down of Simulated Trades
============================================================================

Reliability Level: STANDARD
Input Constraints: original and simulated trades in the same order
Side Effects: None

Each day is attached to the week of its first original trade. Weeks are
sorted by key and days are sorted by key within each week.

A day reports hitting its daily limit or target when the latch closed at any
point that day, including on its last executed trade when no later trade was
left to skip. The engine supplies those latches per day key.

============================================================================
"""

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from app.logic.date_keys import day_key, week_key, week_label
from app.logic.decision_tree import DayPhase
from app.logic.simulation_models import (
    DayTrace,
    DayTraceResult,
    SimulatedTrade,
    SimulatedTradeStatus,
    TradeForSimulation,
    WeekTrace,
)


# (daily limit hit, daily target hit) at the close of a day
DayLatches = Tuple[bool, bool]


def build_day_result(
    day_trades: Sequence[SimulatedTrade],
    latches: Optional[DayLatches] = None,
) -> DayTraceResult:
    """
    Aggregate one day.

    Without latches the flags fall back to the day's skip statuses, which
    miss a latch closed by the day's last trade.
    """
    executed = [t for t in day_trades if t.executed]
    limit_hit = any(
        t.status is SimulatedTradeStatus.SKIPPED_DAILY_LIMIT for t in day_trades
    )
    target_hit = any(
        t.status is SimulatedTradeStatus.SKIPPED_DAILY_TARGET for t in day_trades
    )
    if latches is not None:
        limit_hit = limit_hit or latches[0]
        target_hit = target_hit or latches[1]
    return DayTraceResult(
        total_pnl_cents=sum(t.simulated_pnl_cents for t in executed),
        executed_count=len(executed),
        skipped_count=len(day_trades) - len(executed),
        hit_daily_limit=limit_hit,
        hit_daily_target=target_hit,
        final_phase=day_trades[-1].day_phase if day_trades else DayPhase.NORMAL,
    )


def build_week_traces(
    trades: Sequence[TradeForSimulation],
    simulated: Sequence[SimulatedTrade],
    tz_name: str,
    day_latches: Optional[Mapping[str, DayLatches]] = None,
) -> Tuple[WeekTrace, ...]:
    """Group simulated trades into sorted week -> day traces."""
    # First original trade of each day decides the day's week
    first_of_day: Dict[str, TradeForSimulation] = {}
    for trade in trades:
        first_of_day.setdefault(day_key(trade.entry_date, tz_name), trade)

    by_day: Dict[str, List[SimulatedTrade]] = {}
    for sim in simulated:
        by_day.setdefault(sim.day_key, []).append(sim)

    by_week: Dict[str, List[DayTrace]] = {}
    labels: Dict[str, str] = {}
    for key, day_trades in by_day.items():
        first = first_of_day.get(key)
        if first is None:
            continue
        wk = week_key(first.entry_date, tz_name)
        labels.setdefault(wk, week_label(first.entry_date, tz_name))
        by_week.setdefault(wk, []).append(
            DayTrace(
                day_key=key,
                week_key=wk,
                trades=tuple(day_trades),
                day_result=build_day_result(
                    day_trades,
                    day_latches.get(key) if day_latches is not None else None,
                ),
            )
        )

    weeks = []
    for wk in sorted(by_week):
        days = tuple(sorted(by_week[wk], key=lambda d: d.day_key))
        weeks.append(
            WeekTrace(
                week_key=wk,
                week_label=labels[wk],
                days=days,
                week_pnl_cents=sum(d.day_result.total_pnl_cents for d in days),
            )
        )
    return tuple(weeks)
