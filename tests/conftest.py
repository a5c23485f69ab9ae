from __future__ import annotations

import asyncio
from typing import Any, Callable, Sequence

import pytest

from chainbench.benchmarks.config import ScenarioConfig
from chainbench.benchmarks.errors import ConfigurationMissing, SubmissionFailure
from chainbench.benchmarks.scenarios import BenchmarkScenario, Confirmation


class RecordingSleep:
    """Stand-in for asyncio.sleep that records every requested delay."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


class FakeHandle:
    def __init__(self, confirmation: Confirmation | BaseException) -> None:
        self._confirmation = confirmation

    async def confirm(self) -> Confirmation:
        await asyncio.sleep(0)
        if isinstance(self._confirmation, BaseException):
            raise self._confirmation
        return self._confirmation


class FakeBinding:
    """Binding whose behaviour is decided per call from the call arguments.

    ``decide(args)`` returns a Confirmation, or an exception instance to raise
    from ``confirm()``; ``reject(args)`` returning True makes ``submit`` fail.
    """

    def __init__(
        self,
        decide: Callable[[Sequence[Any]], Confirmation | BaseException] | None = None,
        reject: Callable[[Sequence[Any]], bool] | None = None,
    ) -> None:
        self.calls: list[tuple[tuple, int]] = []
        self._decide = decide or (lambda args: Confirmation(True, 21_000, 2))
        self._reject = reject or (lambda args: False)

    async def submit(self, args: Sequence[Any], resource_limit: int) -> FakeHandle:
        self.calls.append((tuple(args), resource_limit))
        await asyncio.sleep(0)
        if self._reject(args):
            raise SubmissionFailure(f"rejected {tuple(args)!r}")
        return FakeHandle(self._decide(args))


def index_args(index: int, run_index: int) -> tuple:
    return (index, run_index)


def make_scenario(
    name: str,
    binding: FakeBinding | None = None,
    *,
    total_tasks: int = 3,
    chunk_size: int = 1,
    delay_ms: int = 0,
    resource_limit: int = 100_000,
    missing: bool = False,
) -> BenchmarkScenario:
    binding = binding or FakeBinding()

    def provide() -> FakeBinding:
        if missing:
            raise ConfigurationMissing(f"{name} address not configured for testnet.")
        return binding

    return BenchmarkScenario(
        name=name,
        config=ScenarioConfig(
            total_tasks=total_tasks,
            chunk_size=chunk_size,
            inter_chunk_delay_ms=delay_ms,
            resource_limit=resource_limit,
        ),
        binding_provider=provide,
        build_args=index_args,
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
