from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Mapping

from services.complexity.scorer import ComplexityLevel
from services.config.settings import MONTHLY_HOURS_BASE, TeamMember
from services.costing.numeric import round_money, to_number


@dataclass(frozen=True)
class DevelopmentEstimate:
    cost: float
    hours: float


def estimate(team: Iterable[TeamMember], level: ComplexityLevel) -> DevelopmentEstimate:
    """CAPEX of building the automation with the configured squad.

    Each member dedicates ``share * 168h`` to a project of the given level and
    is billed at its hourly rate. An empty squad estimates to zero.
    """
    hours = 0.0
    cost = 0.0
    for m in team:
        shares = m.shares_by_complexity
        share = to_number(shares.get(level.key)) if isinstance(shares, Mapping) else 0.0
        role_hours = share * MONTHLY_HOURS_BASE
        hours += role_hours
        cost += role_hours * to_number(m.hourly_rate)
    return DevelopmentEstimate(cost=round_money(cost), hours=round_money(hours))
