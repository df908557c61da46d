from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List, Sequence
import math

from services.complexity.scorer import ComplexityLevel
from services.config.settings import MONTHLY_HOURS_BASE, TeamMember
from services.costing.numeric import to_number

# Roles are matched by keyword on the lower-cased role name.
REQUIREMENTS_ROLES = ("functional", "analyst", "business", "product")
DEVELOPER_ROLES = ("dev", "rpa", "programmer")
SENIOR_MARKERS = ("senior", "sr")
TEST_ROLES = ("test", "qa", "quality")
HYPERCARE_ROLES = ("hyper", "care", "support", "sustain")

HOURS_PER_DAY = 8
HOURS_PER_WEEK = 40
DAYS_PER_WEEK = 5


@dataclass(frozen=True)
class Phase:
    phase: str
    role: str
    start: int     # working day offset
    duration: int  # working days


def _matches(role: str, keywords: Sequence[str]) -> bool:
    r = role.lower()
    return any(k in r for k in keywords)


def _share(m: TeamMember, level: ComplexityLevel) -> float:
    return to_number(m.shares_by_complexity.get(level.key))


def hours_for_roles(team: Iterable[TeamMember], level: ComplexityLevel, keywords: Sequence[str]) -> float:
    return sum(_share(m, level) * MONTHLY_HOURS_BASE for m in team if _matches(m.role, keywords))


def development_days(team: Sequence[TeamMember], level: ComplexityLevel) -> int:
    """Calendar of the build phase.

    Only non-senior developers count towards parallel capacity; seniors review.
    A squad made only of seniors falls back to all developer hours.
    """
    fte = 0.0
    has_dev = False
    for m in team:
        if not _matches(m.role, DEVELOPER_ROLES):
            continue
        has_dev = True
        if not _matches(m.role, SENIOR_MARKERS):
            fte += _share(m, level)
    if fte == 0 and has_dev:
        fte = hours_for_roles(team, level, DEVELOPER_ROLES) / MONTHLY_HOURS_BASE
    weeks = math.floor(fte * MONTHLY_HOURS_BASE / HOURS_PER_WEEK)
    return max(weeks * DAYS_PER_WEEK, 1)


def _days(hours: float) -> int:
    return max(math.ceil(hours / HOURS_PER_DAY), 1)


def delivery_plan(team: Sequence[TeamMember], level: ComplexityLevel) -> List[Phase]:
    """Sequential delivery phases sized from the squad's allocation at this level."""
    steps = [
        ("Requirements gathering", "Functional analyst", _days(hours_for_roles(team, level, REQUIREMENTS_ROLES))),
        ("Functional sign-off", "Stakeholders", 1),
        ("Development", "Developers", development_days(team, level)),
        ("Testing (UAT/QA)", "Tester", _days(hours_for_roles(team, level, TEST_ROLES))),
        ("Production deployment", "DevOps/Infra", 1),
        ("Hypercare", "Support", _days(hours_for_roles(team, level, HYPERCARE_ROLES))),
    ]
    plan: List[Phase] = []
    day = 0
    for name, role, duration in steps:
        plan.append(Phase(phase=name, role=role, start=day, duration=duration))
        day += duration
    return plan


def total_days(plan: Sequence[Phase]) -> int:
    return sum(p.duration for p in plan)
