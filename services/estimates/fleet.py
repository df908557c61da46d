from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from services.config.settings import DEFAULT_ANNUAL_COST_ESTIMATE
from services.costing.numeric import safe_div, to_number

MINUTES_PER_YEAR_24H = 24 * 60 * 365  # 525600
MINUTES_PER_YEAR_12H = 12 * 60 * 365  # 262800


@dataclass(frozen=True)
class FleetInputs:
    base_annual_cost: float = 70000.0
    robots_24h: float = 33
    robots_12h: float = 18
    markup_margin: float = 100.0  # percent over cost
    growth_per_month: float = 15  # robots added each month

    @staticmethod
    def from_dict(payload: Mapping[str, Any] | None) -> "FleetInputs":
        p = {**DEFAULT_ANNUAL_COST_ESTIMATE, **{k: v for k, v in (payload or {}).items() if v is not None}}
        return FleetInputs(
            base_annual_cost=to_number(p.get("baseAnnualCost")),
            robots_24h=to_number(p.get("robots24h")),
            robots_12h=to_number(p.get("robots12h")),
            markup_margin=to_number(p.get("markupMargin")),
            growth_per_month=to_number(p.get("growthPerMonth")),
        )


def estimate_fleet_cost(i: FleetInputs) -> Dict[str, Any]:
    """Spread the platform's annual cost over robot runtime minutes.

    - cost per minute = base cost / (24h robots * 525600 + 12h robots * 262800)
    - price = cost * (1 + markup/100)
    - growth: fleet size for each of the next 12 months, starting at the
      current fleet and adding ``growth_per_month`` robots per month
    """
    current = i.robots_24h + i.robots_12h
    total_minutes = i.robots_24h * MINUTES_PER_YEAR_24H + i.robots_12h * MINUTES_PER_YEAR_12H
    cost_per_minute = safe_div(i.base_annual_cost, total_minutes)
    multiplier = 1 + i.markup_margin / 100
    price_per_minute = cost_per_minute * multiplier

    cost_24h_year = MINUTES_PER_YEAR_24H * cost_per_minute
    cost_12h_year = MINUTES_PER_YEAR_12H * cost_per_minute
    price_24h_year = MINUTES_PER_YEAR_24H * price_per_minute
    price_12h_year = MINUTES_PER_YEAR_12H * price_per_minute

    fleet_by_month: List[float] = [current + m * i.growth_per_month for m in range(12)]
    bot_months = sum(fleet_by_month)
    avg_cost_per_robot_year = safe_div(i.base_annual_cost, current)
    projected_cost = (avg_cost_per_robot_year / 12) * bot_months

    return {
        "totalCurrentRobots": current,
        "totalMinutesYear": total_minutes,
        "costPerMinute": cost_per_minute,
        "costPerHour": cost_per_minute * 60,
        "pricePerMinute": price_per_minute,
        "pricePerHour": price_per_minute * 60,
        "robot24h": {
            "costYear": cost_24h_year, "costMonth": cost_24h_year / 12,
            "priceYear": price_24h_year, "priceMonth": price_24h_year / 12,
        },
        "robot12h": {
            "costYear": cost_12h_year, "costMonth": cost_12h_year / 12,
            "priceYear": price_12h_year, "priceMonth": price_12h_year / 12,
        },
        "fleetByMonth": fleet_by_month,
        "totalBotMonthsYear": bot_months,
        "avgRobotsYear": bot_months / 12,
        "avgCostPerRobotYear": avg_cost_per_robot_year,
        "avgPricePerRobotYear": avg_cost_per_robot_year * multiplier,
        "projectedAnnualCost": projected_cost,
        "projectedAnnualRevenue": projected_cost * multiplier,
    }
