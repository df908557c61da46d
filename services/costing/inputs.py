from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict

from services.complexity.scorer import ComplexityInput
from services.costing.numeric import InvalidInput, require_number as _num

MINUTES_PER_WORK_MONTH = 9600.0  # 160h * 60
RISK_UNITS = ("per_failure", "monthly", "annual")


@dataclass(frozen=True)
class OperationalInput:
    volume: float          # transactions per month
    aht: float             # average handling time, minutes
    fte_cost: float        # fully loaded monthly cost of one FTE
    error_rate: float = 0.0  # percent of work redone

    @staticmethod
    def from_dict(payload: Dict[str, Any] | None) -> "OperationalInput":
        p = payload or {}
        return OperationalInput(
            volume=_num(p, "volume"),
            aht=_num(p, "aht"),
            fte_cost=_num(p, "fteCost"),
            error_rate=_num(p, "errorRate"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"volume": self.volume, "aht": self.aht, "fteCost": self.fte_cost, "errorRate": self.error_rate}


@dataclass(frozen=True)
class StrategicInput:
    cognitive_level: str = "rule"         # rule|interpretation|creation
    input_variability: str = "never"      # never|occasionally|always
    error_cost: float = 0.0
    error_cost_unit: str = "per_failure"  # per_failure|monthly|annual
    needs_24h: bool = False
    turnover_rate: float = 0.0            # percent per year

    @staticmethod
    def from_dict(payload: Dict[str, Any] | None) -> "StrategicInput":
        p = payload or {}
        return StrategicInput(
            cognitive_level=str(p.get("cognitiveLevel") or "rule"),
            input_variability=str(p.get("inputVariability") or "never"),
            error_cost=_num(p, "errorCost"),
            error_cost_unit=str(p.get("errorCostUnit") or "per_failure"),
            needs_24h=_flag(p.get("needs24h")),
            turnover_rate=_num(p, "turnoverRate"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cognitiveLevel": self.cognitive_level,
            "inputVariability": self.input_variability,
            "errorCost": self.error_cost,
            "errorCostUnit": self.error_cost_unit,
            "needs24h": self.needs_24h,
            "turnoverRate": self.turnover_rate,
        }


def _flag(v: Any) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in ("true", "yes", "1", "on")
    return bool(v)


def validate_inputs(op: OperationalInput, complexity: ComplexityInput, strategic: StrategicInput) -> None:
    """Reject negative quantities at the boundary; costing functions never raise."""
    checks = {
        "volume": op.volume,
        "aht": op.aht,
        "fteCost": op.fte_cost,
        "errorRate": op.error_rate,
        "errorCost": strategic.error_cost,
        "turnoverRate": strategic.turnover_rate,
        "numApplications": complexity.num_applications,
        "numSteps": complexity.num_steps,
    }
    if complexity.rpa_license_cost is not None:
        checks["rpaLicenseCost"] = complexity.rpa_license_cost
    for name, value in checks.items():
        if value < 0:
            raise InvalidInput(f"{name} must be >= 0")
