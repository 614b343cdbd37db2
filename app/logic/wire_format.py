"""
============================================================================
Project Risk Replay v1.0.0
Wire Format - JSON-Safe Serialization of Simulation Value Objects
============================================================================

Reliability Level: STANDARD
Input Constraints: frozen dataclasses, enums, Decimals, datetimes
Side Effects: None

Field names become camelCase, Decimals become strings (no float drift),
enums become their values. Tagged-union variants gain a "type" key.

============================================================================
"""

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_wire(value: Any) -> Any:
    """Recursively convert a value object into JSON-serializable primitives."""
    if is_dataclass(value) and not isinstance(value, type):
        out = {}
        tag = getattr(value, "TYPE", None)
        if tag is not None:
            out["type"] = tag
        for f in fields(value):
            out[camel_case(f.name)] = to_wire(getattr(value, f.name))
        return out
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [to_wire(item) for item in value]
    if isinstance(value, dict):
        return {key: to_wire(item) for key, item in value.items()}
    return value
