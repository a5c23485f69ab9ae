"""
Throttled benchmark harness for smart-contract workloads.

Tasks are issued in fixed-size concurrent waves separated by a fixed delay,
failures are recorded per task instead of aborting the run, and each
scenario/run pair is reduced into a :class:`RunSummary`.
"""

from .config import BenchmarkPlan, ScenarioConfig, default_benchmark_plan
from .metrics import aggregate
from .orchestrator import OrchestrationReport, RunOrchestrator, ScenarioOutcome
from .results import RunSummary, TaskOutcome, TaskResult
from .runner import ChunkedTaskRunner
from .scenarios import BenchmarkScenario, Confirmation

__all__ = [
    "BenchmarkPlan",
    "BenchmarkScenario",
    "ChunkedTaskRunner",
    "Confirmation",
    "OrchestrationReport",
    "RunOrchestrator",
    "RunSummary",
    "ScenarioConfig",
    "ScenarioOutcome",
    "TaskOutcome",
    "TaskResult",
    "aggregate",
    "default_benchmark_plan",
]
