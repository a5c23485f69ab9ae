from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .benchmarks.results import RunSummary

DEFAULT_LOG_PATH = Path("benchmark_results.log")


class SummarySink(Protocol):
    def append(self, text: str) -> None: ...


def configure_logger(log_path: Path) -> logging.Logger:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(f"chainbench.results.{log_path.resolve()}")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))

    for stale in list(logger.handlers):
        stale.close()
        logger.removeHandler(stale)
    logger.addHandler(handler)
    return logger


class ResultLogSink:
    """Append-only text file of benchmark summaries."""

    def __init__(self, log_path: Path = DEFAULT_LOG_PATH) -> None:
        self.path = Path(log_path)
        self._logger = configure_logger(self.path)

    def append(self, text: str) -> None:
        self._logger.info(text)

    def close(self) -> None:
        for handler in list(self._logger.handlers):
            handler.close()
            self._logger.removeHandler(handler)


class MemorySink:
    def __init__(self) -> None:
        self.lines: list[str] = []

    def append(self, text: str) -> None:
        self.lines.append(text)


def format_summary(network: str, summary: RunSummary) -> str:
    return (
        f"Network: {network}, Run {summary.run_index}: {summary.scenario_name} - "
        f"Success: {summary.success_count}/{summary.total_count}, "
        f"Duration: {summary.duration_seconds:.2f}s, "
        f"TPS: {summary.throughput:.2f}, "
        f"Avg Gas: {int(summary.avg_resource_used)}, "
        f"Avg Gas Price: {int(summary.avg_unit_price)}, "
        f"Avg Cost: {int(summary.avg_total_cost)}"
    )


def format_skip(network: str, run_index: int, scenario_name: str, reason: str) -> str:
    return f"Network: {network}, Run {run_index}: Skipping {scenario_name}: {reason}"


def format_fatal(network: str, error: BaseException) -> str:
    return f"FATAL ERROR on {network}: {error}"


def format_suite_header(network: str, started: datetime | None = None) -> str:
    started = started or datetime.now(timezone.utc)
    return f"\n==== Starting All Benchmarks for {network} at {started.isoformat()} ===="


def format_suite_footer(network: str, finished: datetime | None = None) -> str:
    finished = finished or datetime.now(timezone.utc)
    return f"==== Finished All Benchmarks for {network} at {finished.isoformat()} ====\n"


def format_run_header(network: str, run_index: int, runs: int) -> str:
    return f"\n  --- Run {run_index}/{runs} on {network} ---"


__all__ = [
    "DEFAULT_LOG_PATH",
    "MemorySink",
    "ResultLogSink",
    "SummarySink",
    "configure_logger",
    "format_fatal",
    "format_skip",
    "format_summary",
]
