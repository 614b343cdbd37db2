"""
Unit Tests for Trade Math Primitives

Reliability Level: SOVEREIGN TIER
Python 3.8 Compatible

Tests tick-based sizing, P&L with costs, R-multiple, drawdown, outcome
classification and the aggregate ratios, including every zero guard.
"""

import pytest
import os
from decimal import Decimal

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from app.logic.simulation_errors import RiskSimulationError, RiskSimulationErrorCode
from app.logic.trade_math import (
    DEFAULT_PROFIT_FACTOR_SENTINEL,
    TradeDirection,
    TradeOutcome,
    calculate_asset_pnl,
    calculate_drawdown,
    calculate_profit_factor,
    calculate_r_multiple,
    calculate_tick_position_size,
    calculate_win_rate,
    determine_outcome,
    ensure_decimal,
    format_decimal,
    percent_of,
    round_cents,
)


class TestPositionSizing:
    """Sizing from a risk budget and the stop distance in ticks."""

    def test_one_contract_when_budget_equals_risk_per_contract(self) -> None:
        result = calculate_tick_position_size(
            1000, Decimal("100"), Decimal("90"), Decimal("1"), Decimal("100")
        )
        assert result.contracts == 1
        assert result.ticks_at_risk == Decimal("10")
        assert result.risk_per_contract_cents == 1000
        assert result.actual_risk_cents == 1000

    def test_contracts_floor_budget_over_risk(self) -> None:
        result = calculate_tick_position_size(
            2500, Decimal("100"), Decimal("90"), Decimal("1"), Decimal("100")
        )
        assert result.contracts == 2
        assert result.actual_risk_cents == 2000

    def test_minimum_one_contract_when_budget_is_small(self) -> None:
        result = calculate_tick_position_size(
            500, Decimal("100"), Decimal("90"), Decimal("1"), Decimal("100")
        )
        assert result.contracts == 1
        assert result.actual_risk_cents == 1000

    def test_max_contracts_caps_size(self) -> None:
        result = calculate_tick_position_size(
            5000, Decimal("100"), Decimal("90"), Decimal("1"), Decimal("100"),
            max_contracts=3,
        )
        assert result.contracts == 3
        assert result.actual_risk_cents == 3000

    def test_zero_max_contracts_is_ignored(self) -> None:
        result = calculate_tick_position_size(
            5000, Decimal("100"), Decimal("90"), Decimal("1"), Decimal("100"),
            max_contracts=0,
        )
        assert result.contracts == 5

    def test_stop_at_entry_gives_zero_contracts(self) -> None:
        result = calculate_tick_position_size(
            1000, Decimal("100"), Decimal("100"), Decimal("1"), Decimal("100")
        )
        assert result.contracts == 0
        assert result.actual_risk_cents == 0

    def test_zero_tick_size_gives_zero_contracts(self) -> None:
        result = calculate_tick_position_size(
            1000, Decimal("100"), Decimal("90"), Decimal("0"), Decimal("100")
        )
        assert result.contracts == 0

    def test_index_future_ticks(self) -> None:
        """Mini index: 5-point ticks worth 100 cents, 100-point stop."""
        result = calculate_tick_position_size(
            5000, Decimal("128000"), Decimal("127900"), Decimal("5"), Decimal("100")
        )
        assert result.ticks_at_risk == Decimal("20")
        assert result.risk_per_contract_cents == 2000
        assert result.contracts == 2
        assert result.actual_risk_cents == 4000

    def test_float_price_rejected(self) -> None:
        with pytest.raises(RiskSimulationError) as exc_info:
            calculate_tick_position_size(
                1000, 100.0, Decimal("90"), Decimal("1"), Decimal("100")
            )
        assert exc_info.value.error_code == RiskSimulationErrorCode.FLOAT_DETECTED


class TestAssetPnl:
    """Tick P&L with per-execution costs."""

    def test_long_winner_with_costs(self) -> None:
        result = calculate_asset_pnl(
            entry_price=Decimal("128000"),
            exit_price=Decimal("128100"),
            position_size=Decimal("2"),
            direction=TradeDirection.LONG,
            tick_size=Decimal("5"),
            tick_value_cents=Decimal("100"),
            commission_cents=Decimal("50"),
            fees_cents=Decimal("10"),
        )
        assert result.ticks_gained == Decimal("20")
        assert result.gross_pnl_cents == Decimal("4000")
        assert result.total_costs_cents == Decimal("240")
        assert result.net_pnl_cents == Decimal("3760")

    def test_short_winner(self) -> None:
        result = calculate_asset_pnl(
            Decimal("100"), Decimal("90"), Decimal("1"), TradeDirection.SHORT,
            Decimal("1"), Decimal("100"),
        )
        assert result.net_pnl_cents == Decimal("1000")

    def test_long_loser(self) -> None:
        result = calculate_asset_pnl(
            Decimal("100"), Decimal("89"), Decimal("1"), TradeDirection.LONG,
            Decimal("1"), Decimal("100"),
        )
        assert result.net_pnl_cents == Decimal("-1100")

    def test_explicit_contracts_executed(self) -> None:
        result = calculate_asset_pnl(
            Decimal("100"), Decimal("100"), Decimal("2"), TradeDirection.LONG,
            Decimal("1"), Decimal("100"),
            commission_cents=Decimal("50"), fees_cents=Decimal("10"),
            contracts_executed=Decimal("6"),
        )
        assert result.total_costs_cents == Decimal("360")
        assert result.net_pnl_cents == Decimal("-360")


class TestRatios:
    """R-multiple, drawdown, profit factor and win rate."""

    def test_r_multiple(self) -> None:
        assert calculate_r_multiple(Decimal("-1000"), Decimal("1000")) == Decimal("-1")
        assert calculate_r_multiple(Decimal("600"), Decimal("1000")) == Decimal("0.6")

    def test_r_multiple_zero_risk(self) -> None:
        assert calculate_r_multiple(Decimal("600"), Decimal("0")) == Decimal("0")

    def test_drawdown(self) -> None:
        assert calculate_drawdown(90_000, 100_000) == Decimal("10")
        assert calculate_drawdown(100_000, 100_000) == Decimal("0")

    def test_drawdown_non_positive_peak(self) -> None:
        assert calculate_drawdown(-5, 0) == Decimal("0")

    def test_profit_factor(self) -> None:
        assert calculate_profit_factor(3000, 1000) == Decimal("3")

    def test_profit_factor_sentinel_without_losses(self) -> None:
        assert calculate_profit_factor(500, 0) == DEFAULT_PROFIT_FACTOR_SENTINEL

    def test_profit_factor_zero_without_profit(self) -> None:
        assert calculate_profit_factor(0, 0) == Decimal("0")

    def test_win_rate(self) -> None:
        assert calculate_win_rate(1, 3) == Decimal("33.3333")
        assert calculate_win_rate(0, 0) == Decimal("0")


class TestOutcome:
    """Outcome classification by sign and breakeven band."""

    def test_sign_classification(self) -> None:
        assert determine_outcome(Decimal("1")) is TradeOutcome.WIN
        assert determine_outcome(Decimal("-1")) is TradeOutcome.LOSS
        assert determine_outcome(Decimal("0")) is TradeOutcome.BREAKEVEN

    def test_breakeven_band(self) -> None:
        outcome = determine_outcome(
            Decimal("-120"), ticks_gained=Decimal("1"), breakeven_ticks=Decimal("2")
        )
        assert outcome is TradeOutcome.BREAKEVEN

    def test_outside_breakeven_band(self) -> None:
        outcome = determine_outcome(
            Decimal("500"), ticks_gained=Decimal("5"), breakeven_ticks=Decimal("2")
        )
        assert outcome is TradeOutcome.WIN


class TestDecimalHelpers:
    """Rounding and formatting helpers."""

    def test_round_cents_ties_round_up(self) -> None:
        assert round_cents(Decimal("2.5")) == 3
        assert round_cents(Decimal("3.5")) == 4
        assert round_cents(Decimal("2.4999")) == 2

    def test_round_cents_negative_ties_toward_positive(self) -> None:
        assert round_cents(Decimal("-0.5")) == 0
        assert round_cents(Decimal("-1.5")) == -1
        assert round_cents(Decimal("-1.5001")) == -2

    def test_percent_of(self) -> None:
        assert percent_of(100_000, Decimal("1")) == 1000
        assert percent_of(333, Decimal("50")) == 167

    def test_format_decimal(self) -> None:
        assert format_decimal(Decimal("50")) == "50"
        assert format_decimal(Decimal("75.50")) == "75.5"
        assert format_decimal(Decimal("0.30")) == "0.3"

    def test_ensure_decimal_accepts_int_and_str(self) -> None:
        assert ensure_decimal(5) == Decimal("5")
        assert ensure_decimal("1.25") == Decimal("1.25")

    def test_ensure_decimal_rejects_float(self) -> None:
        with pytest.raises(RiskSimulationError) as exc_info:
            ensure_decimal(0.1, "percent")
        assert exc_info.value.error_code == RiskSimulationErrorCode.FLOAT_DETECTED
        assert "percent" in str(exc_info.value)
