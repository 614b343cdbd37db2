"""
============================================================================
Project Risk Replay v1.0.0
Trade Normalizer - Journal Records to Engine-Native Trades
============================================================================

Reliability Level: L5 High
Input Constraints: Journal export rows (camelCase dicts), asset tick configs
Side Effects: Logs dropped rows

NORMALIZATION RULES:
- Rows without entry price, exit price or position size are dropped
- Asset configs are looked up by upper-cased symbol
- With an asset config the original P&L is recomputed tick by tick,
  including commission and fees per contract execution
- Without one, P&L is price difference x size in currency units
- The original R-multiple is derived from the stop distance
- contractsExecuted defaults to size x 2 (one entry, one exit)
- Naive timestamps are UTC; output is sorted by entry date

============================================================================
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pytz
from pydantic import ConfigDict, Field

from app.logic.date_keys import day_key
from app.logic.simulation_models import TradeForSimulation
from app.logic.trade_math import (
    ZERO,
    HUNDRED,
    TWO,
    TradeDirection,
    TradeOutcome,
    calculate_asset_pnl,
    calculate_r_multiple,
    determine_outcome,
    round_cents,
)
from app.schemas.common import CamelModel, ExactDecimal
from services.simulation_config import DEFAULT_TICK_SIZE, DEFAULT_TICK_VALUE_CENTS

logger = logging.getLogger(__name__)


# =============================================================================
# Input Schemas
# =============================================================================

class AssetConfig(CamelModel):
    """Tick economics and per-execution costs of one tradable asset."""
    tick_size: ExactDecimal = Field(..., gt=0)
    tick_value_cents: ExactDecimal = Field(..., gt=0)
    commission_cents: ExactDecimal = Field(default=ZERO, ge=0)
    fees_cents: ExactDecimal = Field(default=ZERO, ge=0)
    breakeven_ticks: ExactDecimal = Field(default=ZERO, ge=0)


class TradeRecordInput(CamelModel):
    """One closed trade as exported from the journal."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    entry_date: datetime
    exit_date: Optional[datetime] = None
    asset: str = Field(..., min_length=1)
    direction: TradeDirection
    entry_price: Optional[ExactDecimal] = None
    exit_price: Optional[ExactDecimal] = None
    stop_loss: Optional[ExactDecimal] = None
    position_size: Optional[ExactDecimal] = None
    contracts_executed: Optional[ExactDecimal] = None


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return pytz.utc.localize(moment)
    return moment


# =============================================================================
# Normalization
# =============================================================================

def normalize_trade(
    record: TradeRecordInput,
    config: Optional[AssetConfig],
    default_tick_size: Decimal = DEFAULT_TICK_SIZE,
    default_tick_value_cents: Decimal = DEFAULT_TICK_VALUE_CENTS,
) -> Optional[TradeForSimulation]:
    """Convert one record, or return None when it lacks price or size."""
    entry = record.entry_price
    exit_ = record.exit_price
    size = record.position_size
    if not entry or not exit_ or not size:
        return None

    stop = record.stop_loss or None
    contracts_executed = record.contracts_executed or size * TWO
    tick_size = config.tick_size if config else default_tick_size
    tick_value = config.tick_value_cents if config else default_tick_value_cents
    commission = config.commission_cents if config else ZERO
    fees = config.fees_cents if config else ZERO

    ticks_gained: Optional[Decimal] = None
    if config:
        pnl = calculate_asset_pnl(
            entry_price=entry,
            exit_price=exit_,
            position_size=size,
            direction=record.direction,
            tick_size=tick_size,
            tick_value_cents=tick_value,
            commission_cents=commission,
            fees_cents=fees,
            contracts_executed=contracts_executed,
        )
        pnl_cents = round_cents(pnl.net_pnl_cents)
        ticks_gained = pnl.ticks_gained
    else:
        move = exit_ - entry if record.direction is TradeDirection.LONG else entry - exit_
        pnl_cents = round_cents(move * size * HUNDRED)

    outcome: TradeOutcome = determine_outcome(
        Decimal(pnl_cents),
        ticks_gained=ticks_gained,
        breakeven_ticks=config.breakeven_ticks if config else ZERO,
    )

    r_multiple: Optional[Decimal] = None
    if stop is not None:
        stop_distance = abs(entry - stop)
        if config:
            risk_cents = stop_distance / tick_size * tick_value * size
        else:
            risk_cents = stop_distance * size * HUNDRED
        if risk_cents > ZERO:
            r_multiple = calculate_r_multiple(Decimal(pnl_cents), risk_cents)

    return TradeForSimulation(
        id=record.id,
        entry_date=_as_utc(record.entry_date),
        exit_date=_as_utc(record.exit_date) if record.exit_date else None,
        asset=record.asset,
        direction=record.direction,
        entry_price=entry,
        exit_price=exit_,
        stop_loss=stop,
        position_size=size,
        pnl_cents=pnl_cents,
        tick_size=tick_size,
        tick_value_cents=tick_value,
        outcome=outcome,
        r_multiple=r_multiple,
        commission_per_execution_cents=commission,
        fees_per_execution_cents=fees,
        contracts_executed=contracts_executed,
    )


def normalize_trades(
    rows: Iterable[Mapping[str, Any]],
    asset_configs: Optional[Mapping[str, AssetConfig]] = None,
    default_tick_size: Decimal = DEFAULT_TICK_SIZE,
    default_tick_value_cents: Decimal = DEFAULT_TICK_VALUE_CENTS,
) -> List[TradeForSimulation]:
    """
    Validate and convert journal rows, sorted by entry date.

    Raises:
        pydantic.ValidationError: If a row is structurally invalid
    """
    configs: Dict[str, AssetConfig] = {
        symbol.upper(): config for symbol, config in (asset_configs or {}).items()
    }
    trades: List[TradeForSimulation] = []
    dropped = 0

    for row in rows:
        record = TradeRecordInput.model_validate(row)
        trade = normalize_trade(
            record,
            configs.get(record.asset.upper()),
            default_tick_size,
            default_tick_value_cents,
        )
        if trade is None:
            dropped += 1
            logger.warning(
                f"[RSIM-NORMALIZE] Dropping trade without price or size | id={record.id}"
            )
            continue
        trades.append(trade)

    trades.sort(key=lambda t: t.entry_date)
    logger.info(
        f"[RSIM-NORMALIZE] Trades normalized | kept={len(trades)} | dropped={dropped}"
    )
    return trades


def build_preview(trades: Sequence[TradeForSimulation], tz_name: str) -> Dict[str, Any]:
    """Quick look at a trade set before running a simulation."""
    with_sl = sum(1 for t in trades if t.stop_loss is not None)
    assets: List[str] = []
    for trade in trades:
        if trade.asset not in assets:
            assets.append(trade.asset)
    return {
        "totalTrades": len(trades),
        "tradesWithSl": with_sl,
        "tradesWithoutSl": len(trades) - with_sl,
        "assets": assets,
        "dayCount": len({day_key(t.entry_date, tz_name) for t in trades}),
    }
