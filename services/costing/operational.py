from __future__ import annotations
from dataclasses import dataclass

from services.config.settings import GlobalConfiguration
from services.costing.inputs import MINUTES_PER_WORK_MONTH, OperationalInput, StrategicInput
from services.costing.numeric import round_money

SLA_24H_MULTIPLIER = 3  # three shifts of human coverage


@dataclass(frozen=True)
class StrategicAdjustments:
    operational: float     # AS-IS labor cost after the SLA multiplier
    risk_cost: float
    turnover_cost: float
    sla_multiplier: int
    adjusted_as_is: float


def as_is_annual_cost(op: OperationalInput) -> float:
    """Annual cost of doing the work manually, rework included."""
    cost_per_minute = op.fte_cost / MINUTES_PER_WORK_MONTH
    annual = op.volume * op.aht * 12 * cost_per_minute * (1 + op.error_rate / 100)
    return round_money(annual)


def risk_cost(op: OperationalInput, strategic: StrategicInput) -> float:
    unit = strategic.error_cost_unit
    if unit == "per_failure":
        return (op.volume * 12) * (op.error_rate / 100) * strategic.error_cost
    if unit == "monthly":
        return strategic.error_cost * 12
    if unit == "annual":
        return strategic.error_cost
    return 0.0


def turnover_cost(op: OperationalInput, strategic: StrategicInput, config: GlobalConfiguration) -> float:
    if strategic.turnover_rate <= 0:
        return 0.0
    fte_count = (op.volume * op.aht) / MINUTES_PER_WORK_MONTH
    replacement_pct = config.strategic_config.turnover_replacement_cost_percentage / 100
    return op.fte_cost * 12 * replacement_pct * (strategic.turnover_rate / 100) * fte_count


def strategic_adjustments(op: OperationalInput, strategic: StrategicInput,
                          config: GlobalConfiguration) -> StrategicAdjustments:
    """AS-IS cost the automation removes: labor (x3 for 24/7), error risk and attrition."""
    multiplier = SLA_24H_MULTIPLIER if strategic.needs_24h else 1
    operational = as_is_annual_cost(op) * multiplier
    risk = risk_cost(op, strategic)
    turnover = turnover_cost(op, strategic, config)
    return StrategicAdjustments(
        operational=operational,
        risk_cost=risk,
        turnover_cost=turnover,
        sla_multiplier=multiplier,
        adjusted_as_is=operational + risk + turnover,
    )
