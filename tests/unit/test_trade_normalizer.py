"""
Unit Tests for the Trade Normalizer

Reliability Level: SOVEREIGN TIER
Python 3.8 Compatible

Tests conversion of journal rows into engine trades:
- Tick P&L with asset costs vs. the currency fallback
- Original R-multiple from the stop distance
- Dropped rows, sorting and timezone handling
- Preview counts
"""

import logging
import pytest
import os
from datetime import datetime
from decimal import Decimal

import pytz
from pydantic import ValidationError

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from app.logic.trade_math import TradeDirection, TradeOutcome
from services.trade_normalizer import AssetConfig, build_preview, normalize_trades

MINI_INDEX = AssetConfig(
    tick_size=Decimal("5"),
    tick_value_cents=Decimal("100"),
    commission_cents=Decimal("50"),
    fees_cents=Decimal("10"),
)


def row(trade_id="t1", **overrides):
    payload = {
        "id": trade_id,
        "entryDate": "2024-01-08T13:00:00Z",
        "exitDate": "2024-01-08T13:30:00Z",
        "asset": "XYZ",
        "direction": "long",
        "entryPrice": "100",
        "exitPrice": "106",
        "stopLoss": "90",
        "positionSize": "1",
    }
    payload.update(overrides)
    return payload


class TestNormalizeTrades:
    """Row conversion."""

    def test_asset_config_pnl_and_r(self) -> None:
        trades = normalize_trades(
            [row(asset="win", entryPrice="128000", exitPrice="128100",
                 stopLoss="127900", positionSize="2")],
            {"WIN": MINI_INDEX},
        )
        trade = trades[0]
        # 20 ticks x 100 x 2 contracts - (50 + 10) x 4 executions
        assert trade.pnl_cents == 3760
        assert trade.r_multiple == Decimal("0.94")
        assert trade.outcome is TradeOutcome.WIN
        assert trade.tick_size == Decimal("5")
        assert trade.contracts_executed == Decimal("4")
        assert trade.commission_per_execution_cents == Decimal("50")

    def test_config_lookup_is_case_insensitive(self) -> None:
        trades = normalize_trades([row(asset="WIN")], {"win": MINI_INDEX})
        assert trades[0].tick_size == Decimal("5")

    def test_currency_fallback_without_config(self) -> None:
        trade = normalize_trades([row()])[0]
        assert trade.pnl_cents == 600
        assert trade.r_multiple == Decimal("0.6")
        assert trade.tick_size == Decimal("1")
        assert trade.tick_value_cents == Decimal("100")
        assert trade.commission_per_execution_cents == Decimal("0")

    def test_short_trade(self) -> None:
        trade = normalize_trades([row(direction="short", exitPrice="95", stopLoss="105")])[0]
        assert trade.direction is TradeDirection.SHORT
        assert trade.pnl_cents == 500
        assert trade.r_multiple == Decimal("1")

    def test_zero_stop_means_no_stop(self) -> None:
        trade = normalize_trades([row(stopLoss="0")])[0]
        assert trade.stop_loss is None
        assert trade.r_multiple is None
        assert not trade.has_usable_stop

    def test_breakeven_band_from_config(self) -> None:
        config = AssetConfig(
            tick_size=Decimal("1"), tick_value_cents=Decimal("100"),
            breakeven_ticks=Decimal("2"),
        )
        trade = normalize_trades([row(asset="ABC", exitPrice="101")], {"ABC": config})[0]
        assert trade.pnl_cents == 100
        assert trade.outcome is TradeOutcome.BREAKEVEN

    def test_rows_without_price_are_dropped(self, caplog) -> None:
        rows = [row("kept"), row("no-exit", exitPrice=None), row("no-size", positionSize="0")]
        with caplog.at_level(logging.WARNING, logger="services.trade_normalizer"):
            trades = normalize_trades(rows)
        assert [t.id for t in trades] == ["kept"]
        assert "id=no-exit" in caplog.text
        assert "id=no-size" in caplog.text

    def test_sorted_by_entry_date(self) -> None:
        rows = [
            row("late", entryDate="2024-01-09T13:00:00Z"),
            row("early", entryDate="2024-01-08T13:00:00Z"),
        ]
        assert [t.id for t in normalize_trades(rows)] == ["early", "late"]

    def test_naive_timestamp_is_utc(self) -> None:
        trade = normalize_trades([row(entryDate="2024-01-08T13:00:00")])[0]
        assert trade.entry_date == datetime(2024, 1, 8, 13, 0, tzinfo=pytz.utc)

    def test_float_price_rejected(self) -> None:
        with pytest.raises(ValidationError, match="RSIM-002"):
            normalize_trades([row(entryPrice=100.5)])

    def test_unknown_journal_fields_ignored(self) -> None:
        trades = normalize_trades([row(notes="scalp", emotion="calm")])
        assert len(trades) == 1


class TestBuildPreview:
    """Counts shown before a run."""

    def test_preview(self) -> None:
        trades = normalize_trades([
            row("a", asset="WIN"),
            row("b", asset="WDO", stopLoss=None),
            row("c", asset="WIN", entryDate="2024-01-09T13:00:00Z"),
        ])
        preview = build_preview(trades, "UTC")
        assert preview == {
            "totalTrades": 3,
            "tradesWithSl": 2,
            "tradesWithoutSl": 1,
            "assets": ["WIN", "WDO"],
            "dayCount": 2,
        }

    def test_empty_preview(self) -> None:
        assert build_preview([], "UTC")["dayCount"] == 0
