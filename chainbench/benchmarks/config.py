from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Sequence

ERC20_TRANSFERS = "ERC20 Transfers"
STORAGE_WRITES = "Storage Writes"
COMPLEX_CALLS = "Complex Calls"

DEFAULT_RUNS = 3
DEFAULT_SCENARIO_PAUSE_MS = 2_000
COMPLEX_CALL_ITERATIONS = 50
# 0.0001 of an 18-decimals token.
ERC20_TRANSFER_AMOUNT = 10**14


@dataclass(frozen=True)
class ScenarioConfig:
    """Static tuning for one workload type."""

    total_tasks: int
    chunk_size: int
    inter_chunk_delay_ms: int
    resource_limit: int

    def __post_init__(self) -> None:
        if self.total_tasks < 1:
            raise ValueError("ScenarioConfig total_tasks must be >= 1")
        if not 1 <= self.chunk_size <= self.total_tasks:
            raise ValueError("ScenarioConfig chunk_size must be in [1, total_tasks]")
        if self.inter_chunk_delay_ms < 0:
            raise ValueError("ScenarioConfig inter_chunk_delay_ms must be >= 0")
        if self.resource_limit < 1:
            raise ValueError("ScenarioConfig resource_limit must be >= 1")

    @property
    def wave_count(self) -> int:
        return math.ceil(self.total_tasks / self.chunk_size)


@dataclass(frozen=True)
class PlannedScenario:
    name: str
    config: ScenarioConfig
    contract: str
    function: str


@dataclass
class BenchmarkPlan:
    """Ordered scenarios plus the run loop settings."""

    scenarios: list[PlannedScenario] = field(default_factory=list)
    runs: int = DEFAULT_RUNS
    scenario_pause_ms: int = DEFAULT_SCENARIO_PAUSE_MS

    def __post_init__(self) -> None:
        if self.runs < 1:
            raise ValueError("BenchmarkPlan runs must be >= 1")
        if self.scenario_pause_ms < 0:
            raise ValueError("BenchmarkPlan scenario_pause_ms must be >= 0")

    def __iter__(self) -> Iterable[PlannedScenario]:
        return iter(self.scenarios)

    def select(self, names: Sequence[str] | None) -> "BenchmarkPlan":
        """Keep only the named scenarios, preserving declared order."""
        if not names:
            return self
        wanted = {name.lower() for name in names}
        unknown = wanted - {s.name.lower() for s in self.scenarios}
        if unknown:
            raise ValueError(f"Unknown scenario(s): {', '.join(sorted(unknown))}")
        return BenchmarkPlan(
            scenarios=[s for s in self.scenarios if s.name.lower() in wanted],
            runs=self.runs,
            scenario_pause_ms=self.scenario_pause_ms,
        )


def default_benchmark_plan(
    runs: int = DEFAULT_RUNS, scenario_pause_ms: int = DEFAULT_SCENARIO_PAUSE_MS
) -> BenchmarkPlan:
    """Return the heavily throttled suite used against public testnets."""

    scenarios = [
        PlannedScenario(
            name=ERC20_TRANSFERS,
            contract="MyERC20",
            function="transfer",
            config=ScenarioConfig(
                total_tasks=15,
                chunk_size=1,
                inter_chunk_delay_ms=2_000,
                resource_limit=300_000,
            ),
        ),
        PlannedScenario(
            name=STORAGE_WRITES,
            contract="StorageManipulator",
            function="writeData",
            config=ScenarioConfig(
                total_tasks=10,
                chunk_size=1,
                inter_chunk_delay_ms=3_000,
                resource_limit=300_000,
            ),
        ),
        PlannedScenario(
            name=COMPLEX_CALLS,
            contract="StorageManipulator",
            function="performComplexCalculation",
            config=ScenarioConfig(
                total_tasks=8,
                chunk_size=1,
                inter_chunk_delay_ms=5_000,
                resource_limit=1_000_000,
            ),
        ),
    ]
    return BenchmarkPlan(scenarios=scenarios, runs=runs, scenario_pause_ms=scenario_pause_ms)
