"""
============================================================================
Project Risk Replay v1.0.0
Schema Base - camelCase Models and the Zero-Float Decimal Type
============================================================================

Reliability Level: L6 Critical
Input Constraints: JSON payloads (camelCase keys, numbers as int/str/Decimal)
Side Effects: None (pure validation)

ZERO-FLOAT MANDATE:
- Percentages and ratios are decimal.Decimal
- A float reaching the boundary is rejected with RSIM-002
- Load JSON with parse_float=Decimal to keep fractional numbers exact

============================================================================
"""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from app.logic.simulation_errors import RiskSimulationErrorCode


def reject_float(value: Any) -> Any:
    """Refuse float input before Decimal coercion can absorb binary drift."""
    if isinstance(value, float):
        raise ValueError(
            f"[{RiskSimulationErrorCode.FLOAT_DETECTED}] received float type. "
            f"All percentages must use Decimal. Received: {value!r}"
        )
    return value


ExactDecimal = Annotated[Decimal, BeforeValidator(reject_float)]


class CamelModel(BaseModel):
    """
    Base for every boundary schema.

    Accepts camelCase (wire) or snake_case (Python) keys and rejects
    unknown fields.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )
