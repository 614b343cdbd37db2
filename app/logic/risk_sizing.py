"""
============================================================================
Project Risk Replay v1.0.0
Risk Sizing - Day Base Risk from the Configured Sizing Mode
============================================================================

Reliability Level: L6 Critical
Input Constraints: Equity and balances in cents, sizing already validated
Side Effects: None (pure functions)

SIZING MODES:
    fixed             base trade risk as configured
    percentOfBalance  round(equity * riskPercent / 100)
    fixedRatio        contracts unlocked by profit (Ryan Jones) * contract risk
    kellyFractional   equity * kelly / divisor from the executed history

The result is the base risk for one trading day. It is computed once at
each day boundary so intraday results never resize T1.

============================================================================
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Optional, Tuple

from app.logic.decision_tree import (
    RiskSizing,
    FixedSizing,
    PercentOfBalanceSizing,
    FixedRatioSizing,
    KellyFractionalSizing,
)
from app.logic.simulation_errors import unsupported_variant
from app.logic.trade_math import (
    ZERO,
    ONE,
    TWO,
    PRECISION_RATIO,
    format_decimal,
    floor_int,
    percent_of,
    round_cents,
)

logger = logging.getLogger(__name__)

EIGHT = Decimal("8")


@dataclass(frozen=True)
class TradeTally:
    """Win/loss counts and gross amounts of executed simulated trades."""
    wins: int = 0
    losses: int = 0
    gross_profit_cents: int = 0
    gross_loss_cents: int = 0

    def record(self, pnl_cents: int) -> "TradeTally":
        if pnl_cents > 0:
            return TradeTally(
                self.wins + 1, self.losses,
                self.gross_profit_cents + pnl_cents, self.gross_loss_cents,
            )
        if pnl_cents < 0:
            return TradeTally(
                self.wins, self.losses + 1,
                self.gross_profit_cents, self.gross_loss_cents - pnl_cents,
            )
        return self

    @property
    def decided(self) -> int:
        return self.wins + self.losses


def fixed_ratio_contracts(profit_cents: int, delta_cents: int) -> int:
    """
    Contracts allowed by the fixed ratio method.

    The n-th contract is unlocked once profit reaches delta * n(n-1)/2,
    so n = floor((1 + sqrt(1 + 8 * profit / delta)) / 2), never below 1.
    """
    if profit_cents <= 0 or delta_cents <= 0:
        return 1
    root = (ONE + EIGHT * Decimal(profit_cents) / Decimal(delta_cents)).sqrt()
    return max(1, floor_int((ONE + root) / TWO))


def kelly_fraction(tally: TradeTally, min_samples: int) -> Optional[Decimal]:
    """
    Full Kelly fraction f* = p - q / b from the executed history.

    Returns None while the sample is too small, when one side of the
    history is empty, or when there is no edge (f* <= 0).
    """
    if tally.decided < min_samples or tally.wins == 0 or tally.losses == 0:
        return None
    p = Decimal(tally.wins) / Decimal(tally.decided)
    avg_win = Decimal(tally.gross_profit_cents) / Decimal(tally.wins)
    avg_loss = Decimal(tally.gross_loss_cents) / Decimal(tally.losses)
    payoff = avg_win / avg_loss
    f_star = p - (ONE - p) / payoff
    if f_star <= ZERO:
        return None
    return f_star.quantize(PRECISION_RATIO, rounding=ROUND_HALF_EVEN)


def resolve_day_base_risk(
    sizing: RiskSizing,
    base_risk_cents: int,
    equity_cents: int,
    initial_balance_cents: int,
    tally: TradeTally,
    kelly_min_samples: int,
) -> Tuple[int, str]:
    """
    Return (base risk in cents, reason suffix) for the coming day.

    The suffix is empty for fixed sizing and otherwise names the mode so the
    trade trace shows where the base risk came from.
    """
    if isinstance(sizing, FixedSizing):
        return base_risk_cents, ""

    if isinstance(sizing, PercentOfBalanceSizing):
        risk = max(1, percent_of(equity_cents, sizing.risk_percent))
        return risk, f" [{format_decimal(sizing.risk_percent)}% of balance]"

    if isinstance(sizing, FixedRatioSizing):
        contracts = fixed_ratio_contracts(
            equity_cents - initial_balance_cents, sizing.delta_cents
        )
        return (
            contracts * sizing.base_contract_risk_cents,
            f" [fixed ratio: {contracts} contracts]",
        )

    if isinstance(sizing, KellyFractionalSizing):
        fraction = kelly_fraction(tally, kelly_min_samples)
        if fraction is None:
            return base_risk_cents, " [Kelly inactive]"
        risk = max(1, round_cents(Decimal(equity_cents) * fraction / sizing.divisor))
        logger.debug(
            f"[RSIM-SIZING] Kelly sizing | f_star={fraction} | "
            f"divisor={sizing.divisor} | risk_cents={risk}"
        )
        return risk, f" [Kelly 1/{format_decimal(sizing.divisor)}: f={fraction}]"

    raise unsupported_variant("risk sizing", sizing)
