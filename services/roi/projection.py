from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional

from services.costing.numeric import round_money
from services.roi.result import ROIResult


@dataclass(frozen=True)
class ProjectionRow:
    month: int
    acc_savings: float
    acc_savings_weighted: float
    acc_costs: float
    net_result: float


@dataclass(frozen=True)
class BreakevenProjection:
    rows: List[ProjectionRow]
    breakeven_month: Optional[int]


def breakeven_projection(result: ROIResult, months: int = 36,
                         opex_exempt_after_year1: bool = False) -> BreakevenProjection:
    """Cumulative AS-IS savings against CAPEX plus running cost, month by month.

    Costs start at the development cost and grow by TO-BE/12 each month (no
    running cost after month 12 when exempt). The weighted savings line applies
    the accuracy deflator; breakeven is judged on the unweighted line.
    """
    monthly_as_is = result.as_is.annual / 12
    monthly_opex = result.to_be.annual / 12
    accuracy = (result.roi.accuracy_percentage or 100.0) / 100

    rows: List[ProjectionRow] = []
    acc_savings = 0.0
    acc_weighted = 0.0
    acc_costs = result.development_cost
    breakeven: Optional[int] = None
    for month in range(1, months + 1):
        acc_savings += monthly_as_is
        acc_weighted += monthly_as_is * accuracy
        acc_costs += 0.0 if (opex_exempt_after_year1 and month > 12) else monthly_opex
        if breakeven is None and acc_savings >= acc_costs:
            breakeven = month
        rows.append(ProjectionRow(
            month=month,
            acc_savings=round_money(acc_savings),
            acc_savings_weighted=round_money(acc_weighted),
            acc_costs=round_money(acc_costs),
            net_result=round_money(acc_savings - acc_costs),
        ))
    return BreakevenProjection(rows=rows, breakeven_month=breakeven)
