# tests/test_sink.py
from __future__ import annotations

from pathlib import Path

from chainbench.benchmarks.metrics import aggregate
from chainbench.benchmarks.results import TaskResult
from chainbench.sink import ResultLogSink, format_fatal, format_skip, format_summary


def test_log_sink_appends_across_sessions(tmp_path: Path) -> None:
    path = tmp_path / "logs" / "benchmark_results.log"

    first = ResultLogSink(path)
    first.append("line one")
    first.close()
    second = ResultLogSink(path)
    second.append("line two")
    second.close()

    assert path.read_text(encoding="utf-8").splitlines() == ["line one", "line two"]


def test_reopening_a_log_closes_the_previous_handler(tmp_path: Path) -> None:
    path = tmp_path / "benchmark_results.log"

    first = ResultLogSink(path)
    (old_handler,) = first._logger.handlers
    second = ResultLogSink(path)
    second.append("only line")
    second.close()

    assert old_handler.stream is None
    assert path.read_text(encoding="utf-8").splitlines() == ["only line"]


def test_format_summary_line() -> None:
    summary = aggregate(
        [TaskResult.success(100, 2), TaskResult.success(11, 20), TaskResult.failure(RuntimeError())],
        3,
        4.0,
        run_index=2,
        scenario_name="ERC20 Transfers",
    )

    line = format_summary("opSepolia", summary)

    assert line == (
        "Network: opSepolia, Run 2: ERC20 Transfers - Success: 2/3, Duration: 4.00s, "
        "TPS: 0.50, Avg Gas: 55, Avg Gas Price: 11, Avg Cost: 210"
    )


def test_skip_and_fatal_lines_are_distinct_from_summaries() -> None:
    empty = aggregate([], 0, 0.0, run_index=1, scenario_name="Storage Writes")

    skip = format_skip("sepolia", 1, "Storage Writes", "not configured")
    summary = format_summary("sepolia", empty)
    fatal = format_fatal("sepolia", RuntimeError("no addresses"))

    assert skip == "Network: sepolia, Run 1: Skipping Storage Writes: not configured"
    assert "Success: 0/0" in summary
    assert "Skipping" not in summary
    assert fatal == "FATAL ERROR on sepolia: no addresses"
