from __future__ import annotations

from fractions import Fraction
from typing import Sequence

from .results import RunSummary, TaskResult


def aggregate(
    results: Sequence[TaskResult],
    total_count: int,
    duration_seconds: float,
    *,
    run_index: int = 1,
    scenario_name: str = "",
) -> RunSummary:
    """Reduce settled task results into a :class:`RunSummary`.

    Averages only consider successful tasks. The average total cost is the mean
    of each task's ``resource_used * unit_price``, which differs from the
    product of the two averages whenever gas and price vary together.
    """
    successes = [result for result in results if result.succeeded]
    success_count = len(successes)

    if success_count:
        avg_resource = Fraction(sum(r.resource_used for r in successes), success_count)
        avg_price = Fraction(sum(r.unit_price for r in successes), success_count)
        avg_cost = Fraction(sum(r.total_cost for r in successes), success_count)
    else:
        avg_resource = avg_price = avg_cost = Fraction(0)

    if success_count > 0 and duration_seconds > 0:
        throughput = success_count / duration_seconds
    else:
        throughput = 0.0

    return RunSummary(
        run_index=run_index,
        scenario_name=scenario_name,
        success_count=success_count,
        total_count=total_count,
        duration_seconds=float(duration_seconds),
        throughput=throughput,
        avg_resource_used=avg_resource,
        avg_unit_price=avg_price,
        avg_total_cost=avg_cost,
    )


__all__ = ["aggregate"]
