# tests/test_metrics.py
from __future__ import annotations

from fractions import Fraction

import pytest

from chainbench.benchmarks.metrics import aggregate
from chainbench.benchmarks.results import TaskOutcome, TaskResult


def _mixed() -> list[TaskResult]:
    return [
        TaskResult.success(100, 2, index=0),
        TaskResult.failure(RuntimeError("reverted"), index=1),
        TaskResult.success(10, 20, index=2),
    ]


def test_counts_and_averages_only_successes() -> None:
    summary = aggregate(_mixed(), 3, 2.0, run_index=2, scenario_name="Storage Writes")

    assert summary.run_index == 2
    assert summary.scenario_name == "Storage Writes"
    assert summary.success_count == 2
    assert summary.total_count == 3
    assert summary.throughput == pytest.approx(1.0)
    assert summary.avg_resource_used == 55
    assert summary.avg_unit_price == 11
    assert summary.success_ratio == pytest.approx(2 / 3)


def test_total_cost_is_mean_of_per_task_products() -> None:
    results = [TaskResult.success(100, 2), TaskResult.success(10, 20)]

    summary = aggregate(results, 2, 1.0)

    assert summary.avg_total_cost == 200
    assert summary.avg_total_cost != summary.avg_resource_used * summary.avg_unit_price
    assert summary.avg_resource_used * summary.avg_unit_price == 605


def test_zero_successes_yield_zero_metrics() -> None:
    results = [TaskResult.failure(RuntimeError("x")), TaskResult.failure(TimeoutError())]

    summary = aggregate(results, 2, 12.5)

    assert summary.success_count == 0
    assert summary.throughput == 0.0
    assert summary.avg_resource_used == 0
    assert summary.avg_unit_price == 0
    assert summary.avg_total_cost == 0


def test_zero_duration_yields_zero_throughput() -> None:
    summary = aggregate([TaskResult.success(1, 1)], 1, 0.0)

    assert summary.success_count == 1
    assert summary.throughput == 0.0


def test_aggregation_is_idempotent_and_pure() -> None:
    results = _mixed()
    snapshot = list(results)

    first = aggregate(results, 3, 4.2, run_index=1, scenario_name="ERC20 Transfers")
    second = aggregate(results, 3, 4.2, run_index=1, scenario_name="ERC20 Transfers")

    assert first == second
    assert results == snapshot


def test_averages_keep_full_precision() -> None:
    price = 10**30 + 1
    results = [TaskResult.success(3, price), TaskResult.success(4, price + 1)]

    summary = aggregate(results, 2, 1.0)

    assert summary.avg_unit_price == Fraction(2 * price + 1, 2)
    assert summary.avg_total_cost == Fraction(3 * price + 4 * (price + 1), 2)


def test_empty_results() -> None:
    summary = aggregate([], 0, 0.0)

    assert summary.success_count == 0
    assert summary.total_count == 0
    assert summary.success_ratio == 0.0


def test_task_result_variants_are_exclusive() -> None:
    ok = TaskResult.success(21_000, 7)
    failed = TaskResult.failure(RuntimeError("nope"))

    assert ok.outcome is TaskOutcome.SUCCESS and ok.error is None
    assert ok.total_cost == 147_000
    assert failed.outcome is TaskOutcome.FAILURE and failed.total_cost == 0

    with pytest.raises(ValueError):
        TaskResult(outcome=TaskOutcome.FAILURE)
    with pytest.raises(ValueError):
        TaskResult(outcome=TaskOutcome.SUCCESS, resource_used=1, error=RuntimeError())
    with pytest.raises(ValueError):
        TaskResult(outcome=TaskOutcome.FAILURE, resource_used=5, error=RuntimeError())


def test_summary_row_is_flat() -> None:
    row = aggregate(_mixed(), 3, 2.0, scenario_name="Complex Calls").as_row()

    assert row["scenario"] == "Complex Calls"
    assert row["avg_gas_used"] == 55
    assert row["avg_total_cost"] == 200
    assert row["success_count"] == 2


def test_total_count_may_exceed_settled_results() -> None:
    summary = aggregate([TaskResult.success(1, 1)], 4, 1.0)

    assert summary.success_count == 1
    assert summary.total_count == 4
    assert summary.success_ratio == pytest.approx(0.25)


def test_more_successes_than_tasks_is_rejected() -> None:
    with pytest.raises(ValueError, match="success_count"):
        aggregate([TaskResult.success(1, 1)] * 3, 2, 1.0)


def test_summary_rejects_bad_counts() -> None:
    with pytest.raises(ValueError, match="run_index"):
        aggregate([], 0, 0.0, run_index=0)
    with pytest.raises(ValueError, match="total_count"):
        aggregate([], -1, 0.0)
