from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol, Sequence

from .config import (
    COMPLEX_CALL_ITERATIONS,
    COMPLEX_CALLS,
    ERC20_TRANSFER_AMOUNT,
    ERC20_TRANSFERS,
    STORAGE_WRITES,
    BenchmarkPlan,
    PlannedScenario,
    ScenarioConfig,
)
from .errors import ConfirmationFailure
from .metrics import aggregate
from .results import RunSummary, TaskResult
from .runner import ChunkedTaskRunner, TaskFactory

LOGGER = logging.getLogger("chainbench.benchmark.scenarios")


@dataclass(frozen=True)
class Confirmation:
    succeeded: bool
    resource_used: int = 0
    unit_price: int = 0


class SubmissionHandle(Protocol):
    async def confirm(self) -> Confirmation: ...


class RemoteOperationBinding(Protocol):
    async def submit(self, args: Sequence[Any], resource_limit: int) -> SubmissionHandle: ...


BindingProvider = Callable[[], RemoteOperationBinding]
ArgsBuilder = Callable[[int, int], tuple]


class BenchmarkScenario:
    """One workload type: a remote operation plus its throttling settings.

    ``binding_provider`` raises :class:`ConfigurationMissing` when the target
    contract is not deployed on the current network; the orchestrator turns
    that into a skip.
    """

    def __init__(
        self,
        name: str,
        config: ScenarioConfig,
        binding_provider: BindingProvider,
        build_args: ArgsBuilder,
    ) -> None:
        self.name = name
        self.config = config
        self._binding_provider = binding_provider
        self._build_args = build_args

    def __repr__(self) -> str:
        return f"BenchmarkScenario({self.name!r}, {self.config!r})"

    def prepare(self) -> RemoteOperationBinding:
        return self._binding_provider()

    def build_args(self, index: int, run_index: int) -> tuple:
        return tuple(self._build_args(index, run_index))

    def task_factory(self, binding: RemoteOperationBinding) -> TaskFactory:
        resource_limit = self.config.resource_limit

        async def run_task(index: int, run_index: int) -> TaskResult:
            try:
                args = self.build_args(index, run_index)
                handle = await binding.submit(args, resource_limit)
                confirmation = await handle.confirm()
            except Exception as exc:  # noqa: BLE001
                LOGGER.debug("%s task %d (run %d) failed: %s", self.name, index, run_index, exc)
                return TaskResult.failure(exc, index=index)

            if not confirmation.succeeded:
                error = ConfirmationFailure(
                    f"{self.name} task {index} (run {run_index}) settled with failure status"
                )
                LOGGER.debug("%s", error)
                return TaskResult.failure(error, index=index)

            return TaskResult.success(
                confirmation.resource_used, confirmation.unit_price, index=index
            )

        return run_task

    async def execute(
        self,
        runner: ChunkedTaskRunner,
        run_index: int,
        clock: Callable[[], float] = time.perf_counter,
    ) -> RunSummary:
        binding = self.prepare()
        factory = self.task_factory(binding)
        config = self.config

        started = clock()
        results = await runner.run(
            config.total_tasks,
            config.chunk_size,
            config.inter_chunk_delay_ms,
            factory,
            run_index,
            progress=self._log_progress,
        )
        duration = clock() - started

        return aggregate(
            results,
            config.total_tasks,
            duration,
            run_index=run_index,
            scenario_name=self.name,
        )

    def _log_progress(self, processed: int, total: int) -> None:
        LOGGER.info("    %s: processed %d/%d", self.name, processed, total)


def erc20_transfer_args(recipient: str, amount: int = ERC20_TRANSFER_AMOUNT) -> ArgsBuilder:
    def build(index: int, run_index: int) -> tuple:
        return (recipient, amount)

    return build


def storage_write_args(total_tasks: int) -> ArgsBuilder:
    def build(index: int, run_index: int) -> tuple:
        # Distinct key per (run, index) so runs never overwrite each other.
        return (index + run_index * total_tasks, f"Run{run_index}Item{index}")

    return build


def complex_call_args(iterations: int = COMPLEX_CALL_ITERATIONS) -> ArgsBuilder:
    def build(index: int, run_index: int) -> tuple:
        return (10 + index + run_index * 5, 20 + index + run_index * 5, iterations)

    return build


def build_default_scenarios(
    plan: BenchmarkPlan,
    client: Any,
    addresses: Mapping[str, str],
    recipient: str | None = None,
) -> list[BenchmarkScenario]:
    """Bind every planned scenario to ``client`` (a ``ContractClient``)."""

    if recipient is None:
        from ..client import random_address

        recipient = random_address()

    scenarios = []
    for planned in plan:
        scenarios.append(
            BenchmarkScenario(
                name=planned.name,
                config=planned.config,
                binding_provider=_binding_provider(client, addresses, planned),
                build_args=_args_builder(planned, recipient),
            )
        )
    return scenarios


def _binding_provider(
    client: Any, addresses: Mapping[str, str], planned: PlannedScenario
) -> BindingProvider:
    def provide() -> RemoteOperationBinding:
        return client.binding(planned.contract, addresses.get(planned.contract), planned.function)

    return provide


def _args_builder(planned: PlannedScenario, recipient: str) -> ArgsBuilder:
    if planned.name == ERC20_TRANSFERS:
        return erc20_transfer_args(recipient)
    if planned.name == STORAGE_WRITES:
        return storage_write_args(planned.config.total_tasks)
    if planned.name == COMPLEX_CALLS:
        return complex_call_args()
    raise ValueError(f"No argument builder for scenario {planned.name!r}")


__all__ = [
    "BenchmarkScenario",
    "Confirmation",
    "RemoteOperationBinding",
    "SubmissionHandle",
    "build_default_scenarios",
    "complex_call_args",
    "erc20_transfer_args",
    "storage_write_args",
]
