from __future__ import annotations

import enum
from dataclasses import dataclass
from fractions import Fraction
from typing import Any


class TaskOutcome(str, enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class TaskResult:
    """Settled outcome of one submitted unit of work.

    Use :meth:`success` or :meth:`failure` rather than the constructor so the
    populated fields always match the outcome.
    """

    outcome: TaskOutcome
    resource_used: int = 0
    unit_price: int = 0
    error: BaseException | None = None
    index: int | None = None

    def __post_init__(self) -> None:
        if self.outcome is TaskOutcome.SUCCESS:
            if self.error is not None:
                raise ValueError("successful TaskResult cannot carry an error")
            if self.resource_used < 0 or self.unit_price < 0:
                raise ValueError("resource_used and unit_price must be >= 0")
        elif self.error is None:
            raise ValueError("failed TaskResult requires an error")
        elif self.resource_used or self.unit_price:
            raise ValueError("failed TaskResult cannot report resource usage")

    @classmethod
    def success(
        cls, resource_used: int, unit_price: int, index: int | None = None
    ) -> "TaskResult":
        return cls(
            outcome=TaskOutcome.SUCCESS,
            resource_used=int(resource_used),
            unit_price=int(unit_price),
            index=index,
        )

    @classmethod
    def failure(cls, error: BaseException, index: int | None = None) -> "TaskResult":
        return cls(outcome=TaskOutcome.FAILURE, error=error, index=index)

    @property
    def succeeded(self) -> bool:
        return self.outcome is TaskOutcome.SUCCESS

    @property
    def total_cost(self) -> int:
        return self.resource_used * self.unit_price


@dataclass(frozen=True)
class RunSummary:
    """Aggregated statistics for one scenario in one run."""

    run_index: int
    scenario_name: str
    success_count: int
    total_count: int
    duration_seconds: float
    throughput: float
    avg_resource_used: Fraction
    avg_unit_price: Fraction
    avg_total_cost: Fraction

    def __post_init__(self) -> None:
        if self.run_index < 1:
            raise ValueError("run_index must be >= 1")
        if self.total_count < 0:
            raise ValueError("total_count must be >= 0")
        if not 0 <= self.success_count <= self.total_count:
            raise ValueError(
                f"success_count {self.success_count} outside [0, {self.total_count}]"
            )

    @property
    def success_ratio(self) -> float:
        if self.total_count <= 0:
            return 0.0
        return self.success_count / self.total_count

    def as_row(self) -> dict[str, Any]:
        return {
            "run": self.run_index,
            "scenario": self.scenario_name,
            "success_count": self.success_count,
            "total_count": self.total_count,
            "success_ratio": self.success_ratio,
            "duration_s": self.duration_seconds,
            "throughput_tps": self.throughput,
            # Floored like the log line; exact values live on the summary.
            "avg_gas_used": int(self.avg_resource_used),
            "avg_gas_price": int(self.avg_unit_price),
            "avg_total_cost": int(self.avg_total_cost),
        }
