"""
============================================================================
Project Risk Replay v1.0.0
Risk Calculation Resolver - Loss-Recovery Step Sizing
============================================================================

Reliability Level: L6 Critical
Input Constraints: base and previous risk in whole cents
Side Effects: None

Every variant is total. Clamping to a 1-cent minimum is the caller's job.

============================================================================
"""

from decimal import Decimal

from app.logic.decision_tree import (
    RiskCalculation,
    PercentOfBase,
    SameAsPrevious,
    FixedCents,
)
from app.logic.simulation_errors import unsupported_variant
from app.logic.trade_math import HUNDRED, percent_of, format_decimal


def resolve_risk_calculation(
    calc: RiskCalculation,
    base_risk_cents: int,
    previous_risk_cents: int,
) -> int:
    """
    Resolve one recovery step to an absolute risk amount in cents.

    percentOfBase: round(base * percent / 100)
    sameAsPrevious: the risk used by the previous step (base on the first)
    fixedCents: the literal amount
    """
    if isinstance(calc, PercentOfBase):
        return percent_of(base_risk_cents, calc.percent)
    if isinstance(calc, SameAsPrevious):
        return previous_risk_cents
    if isinstance(calc, FixedCents):
        return calc.amount_cents
    raise unsupported_variant("risk calculation", calc)


def describe_risk_calculation(calc: RiskCalculation) -> str:
    """Human-readable label used in a trade's risk reason."""
    if isinstance(calc, PercentOfBase):
        return f"{format_decimal(calc.percent)}% of base"
    if isinstance(calc, SameAsPrevious):
        return "same as previous"
    if isinstance(calc, FixedCents):
        return f"R${Decimal(calc.amount_cents) / HUNDRED:.2f} fixed"
    raise unsupported_variant("risk calculation", calc)
