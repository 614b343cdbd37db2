"""
Unit Tests for Risk Sizing Modes

Reliability Level: SOVEREIGN TIER
Python 3.8 Compatible
"""

import pytest
import os
from decimal import Decimal

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from app.logic.decision_tree import (
    FixedRatioSizing,
    FixedSizing,
    KellyFractionalSizing,
    PercentOfBalanceSizing,
)
from app.logic.risk_sizing import (
    TradeTally,
    fixed_ratio_contracts,
    kelly_fraction,
    resolve_day_base_risk,
)


def tally_of(*pnls: int) -> TradeTally:
    tally = TradeTally()
    for pnl in pnls:
        tally = tally.record(pnl)
    return tally


class TestTradeTally:
    """Executed-history counters."""

    def test_record_win_and_loss(self) -> None:
        tally = tally_of(600, -1000, 400)
        assert tally.wins == 2
        assert tally.losses == 1
        assert tally.gross_profit_cents == 1000
        assert tally.gross_loss_cents == 1000
        assert tally.decided == 3

    def test_breakeven_is_not_counted(self) -> None:
        tally = tally_of(0)
        assert tally == TradeTally()


class TestFixedRatio:
    """Contracts unlocked by accumulated profit."""

    @pytest.mark.parametrize(
        "profit, expected",
        [(-500, 1), (0, 1), (999, 1), (1000, 2), (2999, 2), (3000, 3), (6000, 4)],
    )
    def test_contract_thresholds(self, profit: int, expected: int) -> None:
        assert fixed_ratio_contracts(profit, 1000) == expected

    def test_zero_delta_gives_one_contract(self) -> None:
        assert fixed_ratio_contracts(5000, 0) == 1


class TestKellyFraction:
    """Full Kelly from the win rate and payoff ratio."""

    def test_positive_edge(self) -> None:
        assert kelly_fraction(tally_of(3000, -1000), min_samples=2) == Decimal("0.3333")

    def test_too_few_samples(self) -> None:
        assert kelly_fraction(tally_of(3000, -1000), min_samples=20) is None

    def test_no_losses(self) -> None:
        assert kelly_fraction(tally_of(600, 600), min_samples=1) is None

    def test_negative_edge(self) -> None:
        assert kelly_fraction(tally_of(600, -1000), min_samples=2) is None


class TestResolveDayBaseRisk:
    """Base risk and trace suffix per sizing mode."""

    def test_fixed(self) -> None:
        assert resolve_day_base_risk(
            FixedSizing(), 1000, 150_000, 100_000, TradeTally(), 20
        ) == (1000, "")

    def test_percent_of_balance_follows_equity(self) -> None:
        risk, suffix = resolve_day_base_risk(
            PercentOfBalanceSizing(Decimal("1.5")), 1000, 150_000, 100_000, TradeTally(), 20
        )
        assert risk == 2250
        assert suffix == " [1.5% of balance]"

    def test_percent_of_balance_never_below_one_cent(self) -> None:
        risk, _ = resolve_day_base_risk(
            PercentOfBalanceSizing(Decimal("1")), 1000, 0, 100_000, TradeTally(), 20
        )
        assert risk == 1

    def test_fixed_ratio(self) -> None:
        risk, suffix = resolve_day_base_risk(
            FixedRatioSizing(delta_cents=1000, base_contract_risk_cents=800),
            1000, 101_000, 100_000, TradeTally(), 20,
        )
        assert risk == 1600
        assert suffix == " [fixed ratio: 2 contracts]"

    def test_kelly_inactive_falls_back_to_base(self) -> None:
        assert resolve_day_base_risk(
            KellyFractionalSizing(Decimal("2")), 1000, 100_000, 100_000, TradeTally(), 20
        ) == (1000, " [Kelly inactive]")

    def test_kelly_active(self) -> None:
        risk, suffix = resolve_day_base_risk(
            KellyFractionalSizing(Decimal("2")), 1000, 100_000, 100_000,
            tally_of(3000, -1000), 2,
        )
        assert risk == 16665
        assert suffix == " [Kelly 1/2: f=0.3333]"

    def test_unknown_sizing_raises(self) -> None:
        with pytest.raises(TypeError, match="RSIM-003"):
            resolve_day_base_risk("martingale", 1000, 100_000, 100_000, TradeTally(), 20)
