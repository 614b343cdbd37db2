"""
============================================================================
Project Risk Replay v1.0.0
Risk Simulation Schema - Replay Parameters and Date Range
============================================================================

Reliability Level: L6 Critical
Input Constraints: camelCase JSON discriminated on "mode"
Side Effects: None (pure validation)

validate_simulation_params() is the single entry point callers use. It
wraps pydantic's ValidationError into RiskSimulationError (RSIM-001) with
the failing field paths in details.

============================================================================
"""

from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import Field, PositiveInt, TypeAdapter, ValidationError, model_validator

from app.logic.simulation_errors import RiskSimulationError, RiskSimulationErrorCode
from app.logic.simulation_models import (
    DEFAULT_RISK_REDUCTION_FACTOR,
    AdvancedSimulationParams,
    ConsecutiveLossScope,
    RiskSimulationParams,
    SimpleSimulationParams,
)
from app.schemas.common import CamelModel, ExactDecimal
from app.schemas.risk_profile import DecisionTreeInput

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

MIN_PERCENT = Decimal("0.01")


class SimpleSimulationParamsInput(CamelModel):
    """Flat percentage rules."""
    mode: Literal["simple"]
    account_balance_cents: PositiveInt
    risk_per_trade_percent: ExactDecimal = Field(..., ge=MIN_PERCENT, le=100)
    daily_loss_percent: ExactDecimal = Field(..., ge=MIN_PERCENT, le=100)
    daily_profit_target_percent: Optional[ExactDecimal] = Field(
        default=None, ge=MIN_PERCENT, le=100
    )
    max_daily_trades: Optional[int] = Field(default=None, ge=1, le=100)
    max_consecutive_losses: Optional[int] = Field(default=None, ge=1, le=50)
    consecutive_loss_scope: ConsecutiveLossScope = ConsecutiveLossScope.GLOBAL
    reduce_risk_after_loss: bool = False
    risk_reduction_factor: ExactDecimal = Field(
        default=DEFAULT_RISK_REDUCTION_FACTOR, ge=MIN_PERCENT, le=1
    )
    increase_risk_after_win: bool = False
    profit_reinvestment_percent: Optional[ExactDecimal] = Field(default=None, ge=0, le=100)
    monthly_loss_percent: Optional[ExactDecimal] = Field(
        default=None, ge=MIN_PERCENT, le=100
    )
    weekly_loss_percent: Optional[ExactDecimal] = Field(
        default=None, ge=MIN_PERCENT, le=100
    )

    def to_domain(self) -> SimpleSimulationParams:
        return SimpleSimulationParams(
            account_balance_cents=self.account_balance_cents,
            risk_per_trade_percent=self.risk_per_trade_percent,
            daily_loss_percent=self.daily_loss_percent,
            daily_profit_target_percent=self.daily_profit_target_percent,
            max_daily_trades=self.max_daily_trades,
            max_consecutive_losses=self.max_consecutive_losses,
            consecutive_loss_scope=self.consecutive_loss_scope,
            reduce_risk_after_loss=self.reduce_risk_after_loss,
            risk_reduction_factor=self.risk_reduction_factor,
            increase_risk_after_win=self.increase_risk_after_win,
            profit_reinvestment_percent=self.profit_reinvestment_percent,
            monthly_loss_percent=self.monthly_loss_percent,
            weekly_loss_percent=self.weekly_loss_percent,
        )


class AdvancedSimulationParamsInput(CamelModel):
    """A full decision tree with its ceilings in cents."""
    mode: Literal["advanced"]
    account_balance_cents: PositiveInt
    decision_tree: DecisionTreeInput
    daily_loss_cents: PositiveInt
    daily_profit_target_cents: Optional[PositiveInt] = None
    weekly_loss_cents: Optional[PositiveInt] = None
    monthly_loss_cents: PositiveInt

    def to_domain(self) -> AdvancedSimulationParams:
        return AdvancedSimulationParams(
            account_balance_cents=self.account_balance_cents,
            decision_tree=self.decision_tree.to_domain(),
            daily_loss_cents=self.daily_loss_cents,
            monthly_loss_cents=self.monthly_loss_cents,
            daily_profit_target_cents=self.daily_profit_target_cents,
            weekly_loss_cents=self.weekly_loss_cents,
        )


RiskSimulationParamsInput = Annotated[
    Union[SimpleSimulationParamsInput, AdvancedSimulationParamsInput],
    Field(discriminator="mode"),
]

_PARAMS_ADAPTER = TypeAdapter(RiskSimulationParamsInput)


class DateRangeInput(CamelModel):
    """Inclusive replay window of YYYY-MM-DD day keys."""
    date_from: str = Field(..., pattern=DATE_PATTERN)
    date_to: str = Field(..., pattern=DATE_PATTERN)

    @model_validator(mode="after")
    def check_order(self) -> "DateRangeInput":
        if self.date_from > self.date_to:
            raise ValueError(
                f"dateFrom ({self.date_from}) must not be after dateTo ({self.date_to})"
            )
        return self

    def contains(self, day_key: str) -> bool:
        return self.date_from <= day_key <= self.date_to


def _error_details(exc: ValidationError) -> Dict[str, List[Dict[str, str]]]:
    return {
        "errors": [
            {
                "path": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
    }


def validate_simulation_params(
    payload: Mapping[str, Any],
    correlation_id: str = "",
) -> RiskSimulationParams:
    """
    Validate a raw params payload and convert it to engine params.

    Reliability Level: L6 Critical
    Input Constraints: JSON object with "mode" of simple or advanced
    Side Effects: None

    Raises:
        RiskSimulationError: RSIM-001 with field paths in details
    """
    try:
        parsed = _PARAMS_ADAPTER.validate_python(payload)
    except ValidationError as e:
        details = _error_details(e)
        first = details["errors"][0] if details["errors"] else {"path": "", "message": ""}
        raise RiskSimulationError(
            error_code=RiskSimulationErrorCode.INVALID_PARAMS,
            message=(
                f"Invalid simulation params ({e.error_count()} error(s)); "
                f"first: {first['path']}: {first['message']}"
            ),
            correlation_id=correlation_id,
            details=details,
        ) from e
    return parsed.to_domain()
