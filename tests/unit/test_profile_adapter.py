"""
Unit Tests for the Profile Adapter

Reliability Level: SOVEREIGN TIER
Python 3.8 Compatible

Flattening a saved profile for Monte Carlo and resolving its limit mode
into advanced replay params.
"""

import logging
import os
from decimal import Decimal

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from app.logic.decision_tree import LimitMode
from app.logic.profile_adapter import (
    DEFAULT_TRADING_DAYS_PER_MONTH,
    build_advanced_params,
    build_profile_for_sim,
    resolve_profile_limits,
)
from app.schemas.monte_carlo import ProfileForSimulationInput
from app.schemas.risk_profile import RiskProfileInput

from tests.trade_builders import decision_tree_payload, profile_payload


def load_profile(**overrides):
    return RiskProfileInput.model_validate(profile_payload(**overrides)).to_domain()


def tree_with(**overrides):
    return decision_tree_payload(**overrides)


class TestBuildProfileForSim:
    """Flat Monte Carlo profile."""

    def test_compounding_profile(self) -> None:
        flat = build_profile_for_sim(load_profile(), Decimal("55"), Decimal("2"))
        assert flat.base_risk_cents == 1000
        assert flat.compounding_risk_percent == Decimal("30")
        assert flat.stop_on_first_loss is True
        assert flat.stop_after_sequence is True
        assert flat.daily_loss_limit_cents == 3000
        assert flat.weekly_loss_limit_cents == 5000
        assert flat.monthly_loss_limit_cents == 20000
        assert flat.trading_days_per_month == DEFAULT_TRADING_DAYS_PER_MONTH
        assert flat.risk_sizing_mode == "fixed"
        assert flat.risk_percent is None

    def test_recovery_steps_resolved_in_order(self) -> None:
        tree = tree_with(lossRecovery={
            "sequence": [
                {"riskCalculation": {"type": "percentOfBase", "percent": 50}},
                {"riskCalculation": {"type": "sameAsPrevious"}},
                {"riskCalculation": {"type": "fixedCents", "amountCents": 1500}},
            ],
        })
        flat = build_profile_for_sim(
            load_profile(decisionTree=tree), Decimal("50"), Decimal("1.5")
        )
        assert [s.risk_cents for s in flat.loss_recovery_steps] == [500, 500, 1500]
        assert [s.risk_multiplier for s in flat.loss_recovery_steps] == [
            Decimal("0.5"), Decimal("0.5"), Decimal("1.5"),
        ]

    def test_single_target_maps_to_zero_compounding(self) -> None:
        tree = tree_with(gainMode={"type": "singleTarget", "dailyTargetCents": 2000})
        flat = build_profile_for_sim(
            load_profile(decisionTree=tree), Decimal("50"), Decimal("2")
        )
        assert flat.compounding_risk_percent == Decimal("0")
        assert flat.stop_on_first_loss is True
        assert flat.daily_target_cents == 2000

    def test_daily_target_falls_back_to_profile(self) -> None:
        flat = build_profile_for_sim(
            load_profile(dailyProfitTargetCents=4000), Decimal("50"), Decimal("2")
        )
        assert flat.daily_target_cents == 4000

    def test_sizing_fields(self) -> None:
        tree = tree_with(
            riskSizing={"type": "fixedRatio", "deltaCents": 2000, "baseContractRiskCents": 800}
        )
        flat = build_profile_for_sim(
            load_profile(decisionTree=tree), Decimal("50"), Decimal("2")
        )
        assert flat.risk_sizing_mode == "fixedRatio"
        assert flat.fixed_ratio_delta_cents == 2000
        assert flat.fixed_ratio_base_contract_risk_cents == 800
        assert flat.kelly_divisor is None

    def test_to_dict_validates_as_simulation_profile(self) -> None:
        flat = build_profile_for_sim(load_profile(), Decimal("55"), Decimal("2"))
        payload = flat.to_dict()
        assert payload["lossRecoverySteps"] == [{"riskCents": 500, "riskMultiplier": "0.5000"}]
        assert payload["limitMode"] == "fixedCents"

        parsed = ProfileForSimulationInput.model_validate(payload)
        assert parsed.base_risk_cents == 1000
        assert parsed.loss_recovery_steps[0].risk_cents == 500


class TestResolveProfileLimits:
    """Limit mode to cents."""

    def test_fixed_cents(self) -> None:
        assert resolve_profile_limits(load_profile(), 100_000) == (3000, 5000, 20000)

    def test_percent_of_initial(self) -> None:
        tree = tree_with(
            limitMode="percentOfInitial",
            limitsPercent={"daily": 2, "monthly": 10},
        )
        limits = resolve_profile_limits(load_profile(decisionTree=tree), 200_000)
        assert limits == (4000, None, 20000)

    def test_r_multiples(self) -> None:
        tree = tree_with(
            limitMode="rMultiples",
            limitsR={"daily": 3, "weekly": 5, "monthly": "15"},
        )
        limits = resolve_profile_limits(load_profile(decisionTree=tree), 100_000)
        assert limits == (3000, 5000, 15000)

    def test_missing_thresholds_fall_back(self, caplog) -> None:
        tree = tree_with(limitMode="rMultiples")
        profile = load_profile(decisionTree=tree)
        assert profile.decision_tree.limit_mode is LimitMode.R_MULTIPLES

        with caplog.at_level(logging.WARNING, logger="app.logic.profile_adapter"):
            limits = resolve_profile_limits(profile, 100_000)
        assert limits == (3000, 5000, 20000)
        assert "[RSIM-ADAPTER]" in caplog.text


class TestBuildAdvancedParams:
    """Profile to advanced replay params."""

    def test_params_from_profile(self) -> None:
        params = build_advanced_params(load_profile(dailyProfitTargetCents=2500), 150_000)
        assert params.account_balance_cents == 150_000
        assert params.daily_loss_cents == 3000
        assert params.weekly_loss_cents == 5000
        assert params.monthly_loss_cents == 20000
        assert params.daily_profit_target_cents == 2500
        assert params.decision_tree.base_trade.risk_cents == 1000
        assert params.mode.value == "advanced"
