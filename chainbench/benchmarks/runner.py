from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .results import TaskResult

LOGGER = logging.getLogger("chainbench.benchmark.runner")

TaskFactory = Callable[[int, int], Awaitable[TaskResult]]
ProgressCallback = Callable[[int, int], None]
Sleep = Callable[[float], Awaitable[None]]


class ChunkedTaskRunner:
    """Issue tasks in fixed-size concurrent waves separated by a fixed delay.

    Every task in a wave is scheduled before any of them is awaited, and the
    runner waits for all of them to settle before the next wave. The delay is
    the only throttle: it never adapts to latency or error rate.
    """

    def __init__(self, sleep: Sleep = asyncio.sleep) -> None:
        self._sleep = sleep

    async def run(
        self,
        total_tasks: int,
        chunk_size: int,
        delay_ms: int,
        task_factory: TaskFactory,
        run_index: int,
        progress: Optional[ProgressCallback] = None,
    ) -> list[TaskResult]:
        if total_tasks < 0:
            raise ValueError("total_tasks must be >= 0")
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")

        results: list[TaskResult] = []
        processed = 0

        for start in range(0, total_tasks, chunk_size):
            end = min(start + chunk_size, total_tasks)
            indices = range(start, end)
            settled = await asyncio.gather(
                *(_invoke(task_factory, index, run_index) for index in indices),
                return_exceptions=True,
            )
            for index, outcome in zip(indices, settled):
                results.append(_as_result(index, outcome))

            processed += len(indices)
            if progress is not None:
                _report_progress(progress, processed, total_tasks)

            if end < total_tasks and delay_ms > 0:
                await self._sleep(delay_ms / 1000.0)

        return results


async def _invoke(task_factory: TaskFactory, index: int, run_index: int) -> TaskResult:
    return await task_factory(index, run_index)


def _as_result(index: int, outcome: object) -> TaskResult:
    if isinstance(outcome, TaskResult):
        return outcome
    if isinstance(outcome, BaseException):
        # Task factories should convert their own errors; keep the count anyway.
        LOGGER.warning("Task %d raised instead of returning a result: %r", index, outcome)
        return TaskResult.failure(outcome, index=index)
    return TaskResult.failure(
        TypeError(f"task factory returned {type(outcome).__name__}, expected TaskResult"),
        index=index,
    )


def _report_progress(progress: ProgressCallback, processed: int, total: int) -> None:
    try:
        progress(processed, total)
    except Exception:  # noqa: BLE001
        LOGGER.exception("progress callback failed")


__all__ = ["ChunkedTaskRunner", "TaskFactory", "ProgressCallback"]
