from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from services.costing.numeric import require_number


class ComplexityLevel(str, Enum):
    VERY_SIMPLE = "VERY_SIMPLE"
    SIMPLE = "SIMPLE"
    MEDIUM = "MEDIUM"
    COMPLEX = "COMPLEX"
    VERY_COMPLEX = "VERY_COMPLEX"

    @property
    def key(self) -> str:
        """Lower snake key used by team shares and baselines ('very_simple', ...)."""
        return self.value.lower()


LEVELS: Tuple[ComplexityLevel, ...] = tuple(ComplexityLevel)

DATA_TYPE_POINTS = {"structured": 1, "text": 2, "ocr": 5}
ENVIRONMENT_POINTS = {"web": 1, "sap": 2, "citrix": 4}
CUSTOM_BUILD_PENALTY = 3


@dataclass(frozen=True)
class ComplexityInput:
    num_applications: int = 0
    data_type: str = "structured"  # structured|text|ocr
    environment: Tuple[str, ...] = ("web",)  # any of web|sap|citrix
    num_steps: int = 0
    use_rpa_license: str = "yes"  # yes|no
    rpa_license_cost: Optional[float] = None  # None -> configured annual license

    @staticmethod
    def from_dict(payload: Dict[str, Any] | None) -> "ComplexityInput":
        """Build from an API payload (camelCase keys), defaulting missing fields."""
        p = payload or {}
        lic = p.get("rpaLicenseCost")
        return ComplexityInput(
            num_applications=int(require_number(p, "numApplications")),
            data_type=str(p.get("dataType") or "structured"),
            environment=_environments(p.get("environment")),
            num_steps=int(require_number(p, "numSteps")),
            use_rpa_license=str(p.get("useRpaLicense") or "yes"),
            rpa_license_cost=None if lic is None or lic == "" else require_number(p, "rpaLicenseCost"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "numApplications": self.num_applications,
            "dataType": self.data_type,
            "environment": list(self.environment),
            "numSteps": self.num_steps,
            "useRpaLicense": self.use_rpa_license,
            "rpaLicenseCost": self.rpa_license_cost,
        }


def _environments(raw: Any) -> Tuple[str, ...]:
    if isinstance(raw, str):
        items: Iterable[Any] = [raw]
    elif isinstance(raw, (list, tuple, set, frozenset)):
        items = raw
    else:
        items = []
    envs = []
    for e in items:
        s = str(e).strip().lower()
        if s and s not in envs:
            envs.append(s)
    return tuple(envs) or ("web",)


@dataclass(frozen=True)
class ComplexityResult:
    total_points: int
    classification: ComplexityLevel


def _application_points(n: int) -> int:
    if n <= 2:
        return 1
    if n <= 4:
        return 2
    return 3


def _step_points(n: int) -> int:
    if n < 20:
        return 1
    if n <= 50:
        return 3
    return 5


def classify(points: int) -> ComplexityLevel:
    if points >= 14:
        return ComplexityLevel.VERY_COMPLEX
    elif points >= 11:
        return ComplexityLevel.COMPLEX
    elif points >= 8:
        return ComplexityLevel.MEDIUM
    elif points >= 6:
        return ComplexityLevel.SIMPLE
    return ComplexityLevel.VERY_SIMPLE


def score(c: ComplexityInput) -> ComplexityResult:
    """Score a process on the complexity matrix.

    Points:
    - applications: <=2 -> 1, <=4 -> 2, more -> 3
    - data type: structured 1, text 2, ocr 5 (unknown counts as structured)
    - environment: web 1, sap 2, citrix 4 (unknown 1), summed over every
      selected environment
    - steps: <20 -> 1, 20..50 -> 3, >50 -> 5
    - +3 when the robot runs without a commercial RPA license (custom build)
    """
    points = _application_points(c.num_applications)
    points += DATA_TYPE_POINTS.get(c.data_type, 1)
    points += sum(ENVIRONMENT_POINTS.get(e, 1) for e in (c.environment or ("web",)))
    points += _step_points(c.num_steps)
    if c.use_rpa_license == "no":
        points += CUSTOM_BUILD_PENALTY
    return ComplexityResult(total_points=points, classification=classify(points))
