"""
Unit Tests for the Monte Carlo Schemas

Reliability Level: SOVEREIGN TIER
Python 3.8 Compatible

Iteration budgets for the flat and day-aware batch drivers.
"""

import pytest
import os
from decimal import Decimal

from pydantic import ValidationError

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from app.schemas.monte_carlo import (
    SIMULATION_BUDGET_CAP,
    MonteCarloParamsInput,
    MonteCarloV2ParamsInput,
)


def flat_payload(**overrides):
    payload = {
        "winRate": 55,
        "rewardRiskRatio": "2",
        "numberOfTrades": 1000,
        "simulationCount": 3000,
    }
    payload.update(overrides)
    return payload


def v2_payload(simulation_count: int, trading_days: int = 22):
    return {
        "profile": {
            "name": "Profile",
            "baseRiskCents": 1000,
            "rewardRiskRatio": "2",
            "winRate": "55",
            "breakevenRate": "0",
            "dailyLossLimitCents": 3000,
            "lossRecoverySteps": [{"riskCents": 500, "riskMultiplier": "0.5"}],
            "executeAllRegardless": False,
            "stopAfterSequence": True,
            "compoundingRiskPercent": "30",
            "stopOnFirstLoss": True,
            "monthlyLossLimitCents": 20000,
            "tradingDaysPerMonth": trading_days,
            "tradingDaysPerWeek": 5,
            "commissionPerTradeCents": "0",
            "riskSizingMode": "fixed",
        },
        "simulationCount": simulation_count,
        "initialBalance": 100000,
    }


class TestMonteCarloParams:
    """Flat run budget."""

    def test_budget_at_cap_is_accepted(self) -> None:
        params = MonteCarloParamsInput.model_validate(flat_payload())
        assert params.number_of_trades * params.simulation_count == SIMULATION_BUDGET_CAP
        assert params.commission_impact_r == Decimal("0")

    def test_budget_exceeded_suggests_limits(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            MonteCarloParamsInput.model_validate(flat_payload(simulationCount=5000))
        errors = exc_info.value.errors()
        assert errors[0]["loc"] == ("simulationCount",)
        message = errors[0]["msg"]
        assert "Total iterations (5,000,000) exceeds the maximum of 3,000,000" in message
        assert "Reduce trades to 600 or simulations to 3,000." in message

    def test_float_win_rate_rejected(self) -> None:
        with pytest.raises(ValidationError, match="RSIM-002"):
            MonteCarloParamsInput.model_validate(flat_payload(winRate=55.5))

    def test_win_rate_bounds(self) -> None:
        with pytest.raises(ValidationError):
            MonteCarloParamsInput.model_validate(flat_payload(winRate=100))


class TestMonteCarloV2Params:
    """Day-aware run budget."""

    def test_within_budget(self) -> None:
        params = MonteCarloV2ParamsInput.model_validate(v2_payload(9000))
        assert params.profile.loss_recovery_steps[0].risk_cents == 500
        assert params.profile.trading_days_per_month == 22

    def test_budget_exceeded(self) -> None:
        with pytest.raises(ValidationError, match="Estimated iterations \\(11,000,000\\)"):
            MonteCarloV2ParamsInput.model_validate(v2_payload(10000))

    def test_fewer_days_allow_more_simulations(self) -> None:
        params = MonteCarloV2ParamsInput.model_validate(v2_payload(10000, trading_days=20))
        assert params.simulation_count == 10000

    def test_recovery_steps_capped(self) -> None:
        payload = v2_payload(1000)
        payload["profile"]["lossRecoverySteps"] = [{"riskCents": 500}] * 11
        with pytest.raises(ValidationError):
            MonteCarloV2ParamsInput.model_validate(payload)
