from __future__ import annotations
from dataclasses import dataclass

from services.complexity.scorer import ComplexityInput, ComplexityLevel
from services.config.settings import GlobalConfiguration, MaintenanceConfig
from services.costing.inputs import OperationalInput, StrategicInput

MAINTENANCE_FALLBACK_RATIO = 0.15  # of development cost, per year


@dataclass(frozen=True)
class MaintenanceCost:
    annual: float
    fte_monthly_cost: float
    capacity_divisor: float
    fallback_used: bool


@dataclass(frozen=True)
class ToBeBreakdown:
    license_cost: float
    infra_cost: float
    maintenance: MaintenanceCost
    genai_cost: float
    idp_cost: float


@dataclass(frozen=True)
class ToBeCost:
    total: float
    breakdown: ToBeBreakdown


def capacity_divisor(mc: MaintenanceConfig, level: ComplexityLevel) -> float:
    """Robots one maintenance FTE can look after at this complexity."""
    if level in (ComplexityLevel.VERY_SIMPLE, ComplexityLevel.SIMPLE):
        return mc.capacity_low
    elif level in (ComplexityLevel.COMPLEX, ComplexityLevel.VERY_COMPLEX):
        return mc.capacity_high
    return mc.capacity_medium


def maintenance_cost(config: GlobalConfiguration, level: ComplexityLevel, development_cost: float) -> MaintenanceCost:
    mc = config.maintenance_config
    divisor = capacity_divisor(mc, level)
    if mc.fte_monthly_cost and divisor:
        annual = (mc.fte_monthly_cost / divisor) * 12
        fallback = False
    else:
        annual = development_cost * MAINTENANCE_FALLBACK_RATIO
        fallback = True
    return MaintenanceCost(annual=annual, fte_monthly_cost=mc.fte_monthly_cost,
                           capacity_divisor=divisor, fallback_used=fallback)


def license_cost(complexity: ComplexityInput, config: GlobalConfiguration) -> float:
    if complexity.use_rpa_license == "no":
        return 0.0
    if complexity.rpa_license_cost is not None:
        return complexity.rpa_license_cost
    return config.infra_costs.rpa_license_annual


def to_be_annual_cost(op: OperationalInput, complexity: ComplexityInput, level: ComplexityLevel,
                      strategic: StrategicInput, config: GlobalConfiguration,
                      development_cost: float) -> ToBeCost:
    """Annual cost of running the automation.

    total = VM + DB + RPA license + maintenance + GenAI tokens + IDP license
    """
    infra = config.infra_costs.virtual_machine_annual + config.infra_costs.database_annual
    lic = license_cost(complexity, config)

    genai = 0.0
    if strategic.cognitive_level == "creation":
        genai = (op.volume * 12) * config.strategic_config.genai_cost_per_transaction

    idp = 0.0
    if strategic.input_variability == "always" or complexity.data_type == "ocr":
        idp = config.strategic_config.idp_license_annual

    maint = maintenance_cost(config, level, development_cost)
    total = infra + lic + maint.annual + genai + idp
    return ToBeCost(
        total=total,
        breakdown=ToBeBreakdown(license_cost=lic, infra_cost=infra, maintenance=maint, genai_cost=genai, idp_cost=idp),
    )
