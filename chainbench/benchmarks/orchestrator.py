from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Sequence

from ..sink import (
    SummarySink,
    format_run_header,
    format_skip,
    format_suite_footer,
    format_suite_header,
    format_summary,
)
from .errors import ConfigurationMissing
from .results import RunSummary
from .runner import ChunkedTaskRunner
from .scenarios import BenchmarkScenario

LOGGER = logging.getLogger("chainbench.benchmark.orchestrator")


@dataclass(frozen=True)
class ScenarioOutcome:
    run_index: int
    scenario_name: str
    summary: Optional[RunSummary] = None
    skip_reason: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.summary is None


@dataclass
class OrchestrationReport:
    network: str
    runs: int
    outcomes: list[ScenarioOutcome] = field(default_factory=list)

    @property
    def summaries(self) -> list[RunSummary]:
        return [o.summary for o in self.outcomes if o.summary is not None]

    @property
    def skipped(self) -> list[ScenarioOutcome]:
        return [o for o in self.outcomes if o.skipped]


class RunOrchestrator:
    """Run every scenario ``runs`` times, strictly in declared order."""

    def __init__(
        self,
        scenarios: Sequence[BenchmarkScenario],
        runner: ChunkedTaskRunner,
        sink: SummarySink,
        *,
        runs: int,
        scenario_pause_ms: int,
        network_name: str,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if runs < 1:
            raise ValueError("runs must be >= 1")
        if scenario_pause_ms < 0:
            raise ValueError("scenario_pause_ms must be >= 0")
        self._scenarios = list(scenarios)
        self._runner = runner
        self._sink = sink
        self._runs = runs
        self._pause_ms = scenario_pause_ms
        self._network = network_name
        self._sleep = sleep

    async def run(self) -> OrchestrationReport:
        report = OrchestrationReport(network=self._network, runs=self._runs)
        LOGGER.info(
            "Starting %d scenario(s) x %d run(s) on %s",
            len(self._scenarios),
            self._runs,
            self._network,
        )
        self._sink.append(format_suite_header(self._network))

        for run_index in range(1, self._runs + 1):
            LOGGER.info("Executing run %d/%d on %s", run_index, self._runs, self._network)
            self._sink.append(format_run_header(self._network, run_index, self._runs))

            for scenario in self._scenarios:
                report.outcomes.append(await self._run_scenario(scenario, run_index))
                if self._pause_ms > 0:
                    await self._sleep(self._pause_ms / 1000.0)

            LOGGER.info("Finished run %d/%d on %s", run_index, self._runs, self._network)

        self._sink.append(format_suite_footer(self._network))
        return report

    async def _run_scenario(self, scenario: BenchmarkScenario, run_index: int) -> ScenarioOutcome:
        LOGGER.info("  [%s] Running %s benchmark...", self._network, scenario.name)
        try:
            summary = await scenario.execute(self._runner, run_index)
        except ConfigurationMissing as exc:
            reason = str(exc)
            LOGGER.warning("  [%s] Skipping %s: %s", self._network, scenario.name, reason)
            self._sink.append(format_skip(self._network, run_index, scenario.name, reason))
            return ScenarioOutcome(run_index, scenario.name, skip_reason=reason)

        line = format_summary(self._network, summary)
        LOGGER.info("    %s", line)
        self._sink.append(line)
        return ScenarioOutcome(run_index, scenario.name, summary=summary)


__all__ = ["OrchestrationReport", "RunOrchestrator", "ScenarioOutcome"]
