"""
============================================================================
Project Risk Replay v1.0.0
Simulation Errors - Structured Error Codes for the Replay Engine
============================================================================

Reliability Level: L6 Critical
Input Constraints: None
Side Effects: None

Two error tiers exist:
- Boundary validation (RSIM-001): raised before the engine ever runs.
- Numeric integrity (RSIM-002): float detected in a money/percent field.

The engine loop itself has no recoverable error path. Skipped trades are
normal outcomes, never exceptions.

============================================================================
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any


class RiskSimulationErrorCode:
    """Risk simulation error codes for audit logging."""
    INVALID_PARAMS = "RSIM-001"
    FLOAT_DETECTED = "RSIM-002"
    UNSUPPORTED_VARIANT = "RSIM-003"
    INVALID_TRADE = "RSIM-004"
    CONFIG_INVALID = "RSIM-005"
    INPUT_LOAD_FAIL = "RSIM-006"


@dataclass
class RiskSimulationError(Exception):
    """
    Structured simulation error.

    Reliability Level: L6 Critical
    """
    error_code: str
    message: str
    correlation_id: str = ""
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


def unsupported_variant(kind: str, value: Any) -> TypeError:
    """Build the error raised when a tagged-union dispatch falls through."""
    return TypeError(
        f"[{RiskSimulationErrorCode.UNSUPPORTED_VARIANT}] Unsupported {kind}: "
        f"{type(value).__name__}"
    )
