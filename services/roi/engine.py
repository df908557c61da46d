from __future__ import annotations
from typing import Optional
import logging

from services.complexity.scorer import ComplexityInput, ComplexityResult, score
from services.config.cache import ConfigCache
from services.config.settings import GlobalConfiguration
from services.costing.development import DevelopmentEstimate, estimate
from services.costing.infrastructure import to_be_annual_cost
from services.costing.inputs import OperationalInput, StrategicInput, validate_inputs
from services.costing.numeric import round_half_up, round_money, safe_div
from services.costing.operational import strategic_adjustments
from services.roi.result import (
    AsIsCosts, ComplexitySummary, MaintenanceSummary, ROIMetrics, ROIResult, StrategicSummary, ToBeCosts,
)

logger = logging.getLogger(__name__)


def payback_months(development_cost: float, monthly_savings: float) -> Optional[float]:
    """Months until savings cover CAPEX; None when savings never arrive."""
    if monthly_savings <= 0:
        return None
    return round_half_up(development_cost / monthly_savings, 1)


def calculate_full_roi(operational: OperationalInput, complexity: ComplexityInput,
                       strategic: StrategicInput, config: GlobalConfiguration) -> ROIResult:
    """Full business case for one process against a given configuration.

    Pipeline: complexity -> CAPEX -> AS-IS (+ strategic adjustments) -> TO-BE
    -> savings, ROI (year 1 and 3) and payback. Intermediate values keep full
    precision; money is rounded to cents only in the returned record.
    """
    cx = score(complexity)
    dev = estimate(config.team_composition, cx.classification)
    adj = strategic_adjustments(operational, strategic, config)
    to_be = to_be_annual_cost(operational, complexity, cx.classification, strategic, config, dev.cost)

    accuracy_pct = config.strategic_config.roi_accuracy_percentage or 100.0
    accuracy = accuracy_pct / 100
    gross_savings = adj.adjusted_as_is - to_be.total
    annual_savings = gross_savings * accuracy

    roi_year1 = safe_div(annual_savings, adj.adjusted_as_is) * 100
    if dev.cost > 0:
        roi_year3 = (((annual_savings * 3) - dev.cost) / dev.cost) * 100
    else:
        roi_year3 = roi_year1 * 3
    monthly_savings = annual_savings / 12

    b = to_be.breakdown
    return ROIResult(
        complexity=ComplexitySummary(score=cx.total_points, classification=cx.classification,
                                     total_hours=dev.hours),
        strategic=StrategicSummary(
            risk_cost=round_money(adj.risk_cost),
            turnover_cost=round_money(adj.turnover_cost),
            genai_cost=round_money(b.genai_cost),
            idp_cost=round_money(b.idp_cost),
            sla_multiplier=adj.sla_multiplier,
        ),
        maintenance=MaintenanceSummary(
            monthly_cost=round_money(b.maintenance.annual / 12),
            annual_cost=round_money(b.maintenance.annual),
            fte_cost=round_money(b.maintenance.fte_monthly_cost),
            capacity_divisor=b.maintenance.capacity_divisor,
            fallback_used=b.maintenance.fallback_used,
        ),
        as_is=AsIsCosts(
            annual=round_money(adj.adjusted_as_is),
            operational=round_money(adj.operational),
            risk=round_money(adj.risk_cost),
            turnover=round_money(adj.turnover_cost),
            monthly=round_money(adj.adjusted_as_is / 12),
        ),
        to_be=ToBeCosts(
            license_cost=round_money(b.license_cost),
            infra_cost=round_money(b.infra_cost),
            maintenance_cost=round_money(b.maintenance.annual),
            genai_cost=round_money(b.genai_cost),
            idp_cost=round_money(b.idp_cost),
            annual=round_money(to_be.total),
        ),
        development_cost=dev.cost,
        development_hours=dev.hours,
        roi=ROIMetrics(
            roi_year1=round_money(roi_year1),
            roi_year3=round_money(roi_year3),
            annual_savings=round_money(annual_savings),
            gross_annual_savings=round_money(gross_savings),
            monthly_savings=round_money(monthly_savings),
            payback_months=payback_months(dev.cost, monthly_savings),
            accuracy_percentage=accuracy_pct,
        ),
    )


class ROIEngine:
    """Cache-backed entry point used by the API and project service."""

    def __init__(self, cache: ConfigCache):
        self.cache = cache

    def configuration(self, timeout: float | None = None) -> GlobalConfiguration:
        return self.cache.get(timeout=timeout)

    def calculate_full_roi(self, operational: OperationalInput, complexity: ComplexityInput,
                           strategic: StrategicInput, timeout: float | None = None) -> ROIResult:
        validate_inputs(operational, complexity, strategic)
        config = self.cache.get(timeout=timeout)
        result = calculate_full_roi(operational, complexity, strategic, config)
        logger.debug("ROI calculated: classification=%s roi_year1=%s payback=%s",
                     result.complexity.classification.value, result.roi.roi_year1, result.roi.payback_months)
        return result

    def preview_complexity(self, complexity: ComplexityInput) -> ComplexityResult:
        return score(complexity)

    def preview_development(self, complexity: ComplexityInput, timeout: float | None = None) -> DevelopmentEstimate:
        config = self.cache.get(timeout=timeout)
        return estimate(config.team_composition, score(complexity).classification)
