from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

from services.complexity.scorer import ComplexityLevel


@dataclass(frozen=True)
class ComplexitySummary:
    score: int
    classification: ComplexityLevel
    total_hours: float


@dataclass(frozen=True)
class StrategicSummary:
    risk_cost: float
    turnover_cost: float
    genai_cost: float
    idp_cost: float
    sla_multiplier: int


@dataclass(frozen=True)
class MaintenanceSummary:
    monthly_cost: float
    annual_cost: float
    fte_cost: float
    capacity_divisor: float
    fallback_used: bool


@dataclass(frozen=True)
class AsIsCosts:
    annual: float       # adjusted: operational + risk + turnover
    operational: float
    risk: float
    turnover: float
    monthly: float


@dataclass(frozen=True)
class ToBeCosts:
    license_cost: float
    infra_cost: float
    maintenance_cost: float
    genai_cost: float
    idp_cost: float
    annual: float


@dataclass(frozen=True)
class ROIMetrics:
    roi_year1: float
    roi_year3: float
    annual_savings: float
    gross_annual_savings: float
    monthly_savings: float
    payback_months: Optional[float]  # None: savings never cover the investment
    accuracy_percentage: float


@dataclass(frozen=True)
class ROIResult:
    complexity: ComplexitySummary
    strategic: StrategicSummary
    maintenance: MaintenanceSummary
    as_is: AsIsCosts
    to_be: ToBeCosts
    development_cost: float
    development_hours: float
    roi: ROIMetrics

    def to_dict(self) -> Dict[str, Any]:
        """Structured record in the shape clients and stored projects use."""
        return {
            "complexity": {
                "score": self.complexity.score,
                "classification": self.complexity.classification.value,
                "hours": {"totalHours": self.complexity.total_hours},
            },
            "strategic": {
                "riskCost": self.strategic.risk_cost,
                "turnoverCost": self.strategic.turnover_cost,
                "genAiCost": self.strategic.genai_cost,
                "idpCost": self.strategic.idp_cost,
                "slaMultiplier": self.strategic.sla_multiplier,
            },
            "maintenance": {
                "monthlyCost": self.maintenance.monthly_cost,
                "annualCost": self.maintenance.annual_cost,
                "fteCost": self.maintenance.fte_cost,
                "capacityDivisor": self.maintenance.capacity_divisor,
                "fallbackUsed": self.maintenance.fallback_used,
            },
            "costs": {
                "asIs": {
                    "annual": self.as_is.annual,
                    "operational": self.as_is.operational,
                    "risk": self.as_is.risk,
                    "turnover": self.as_is.turnover,
                    "monthly": self.as_is.monthly,
                },
                "development": self.development_cost,
                "developmentHours": self.development_hours,
                "toBe": {
                    "licenseCost": self.to_be.license_cost,
                    "infraCost": self.to_be.infra_cost,
                    "maintenanceCost": self.to_be.maintenance_cost,
                    "genAiCost": self.to_be.genai_cost,
                    "idpCost": self.to_be.idp_cost,
                    "totalToBeCost": self.to_be.annual,
                    "annual": self.to_be.annual,
                },
            },
            "roi": {
                "year1": self.roi.roi_year1,
                "year3": self.roi.roi_year3,
                "annualSavings": self.roi.annual_savings,
                "grossAnnualSavings": self.roi.gross_annual_savings,
                "monthlySavings": self.roi.monthly_savings,
                "paybackMonths": self.roi.payback_months,
                "accuracyPercentage": self.roi.accuracy_percentage,
            },
        }
