from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping
import math


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce a loosely typed value (str, int, None, ...) to a finite float.

    Anything unparseable, NaN or infinite becomes ``default``.
    """
    if isinstance(value, bool):
        return float(value)
    try:
        out = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(out) or math.isinf(out):
        return default
    return out


def round_half_up(value: float, places: int = 2) -> float:
    # str() keeps the shortest repr so 0.125 stays 0.125 instead of 0.12499...
    q = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def round_money(value: float) -> float:
    return round_half_up(value, 2)


def safe_div(a: float, b: float) -> float:
    try:
        return float(a) / float(b) if b not in (0, None) else 0.0
    except (TypeError, ValueError, ZeroDivisionError):
        return 0.0


class InvalidInput(ValueError):
    pass


def require_number(payload: Mapping[str, Any], key: str) -> float:
    """Missing/blank -> 0; anything present but non-numeric is rejected."""
    v = payload.get(key)
    if v is None or v == "":
        return 0.0
    out = to_number(v, default=float("nan"))
    if out != out:
        raise InvalidInput(f"{key} must be a number")
    return out
