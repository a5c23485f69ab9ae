from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from .orchestrator import OrchestrationReport

LOGGER = logging.getLogger("chainbench.benchmark.report")

SUMMARY_COLUMNS = [
    "run",
    "scenario",
    "success_count",
    "total_count",
    "success_ratio",
    "duration_s",
    "throughput_tps",
    "avg_gas_used",
    "avg_gas_price",
    "avg_total_cost",
]


def summaries_dataframe(report: OrchestrationReport) -> pd.DataFrame:
    rows = [summary.as_row() for summary in report.summaries]
    if not rows:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def aggregate_by_scenario(df: pd.DataFrame) -> pd.DataFrame:
    """Average each scenario's runs, keeping the first-seen scenario order."""
    if df.empty:
        return pd.DataFrame(
            columns=["scenario", "runs", "throughput_tps", "success_ratio", "avg_gas_used"]
        )
    grouped = df.groupby("scenario", sort=False).agg(
        runs=("run", "count"),
        throughput_tps=("throughput_tps", "mean"),
        success_ratio=("success_ratio", "mean"),
        avg_gas_used=("avg_gas_used", "mean"),
    )
    return grouped.reset_index()


def write_summary_csv(report: OrchestrationReport, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    df = summaries_dataframe(report)
    path = output_dir / f"{report.network}__summaries.csv"
    df.to_csv(path, index=False)
    LOGGER.info("Saved %d run summaries to %s", len(df), path)
    return path


def write_manifest(
    report: OrchestrationReport,
    output_dir: Path,
    artefacts: dict[str, str] | None = None,
) -> Path:
    df = summaries_dataframe(report)
    manifest: dict[str, Any] = {
        "network": report.network,
        "runs": report.runs,
        "scenarios": aggregate_by_scenario(df).to_dict(orient="records"),
        "skipped": [
            {"run": o.run_index, "scenario": o.scenario_name, "reason": o.skip_reason}
            for o in report.skipped
        ],
        "artefacts": artefacts or {},
    }
    path = output_dir / "benchmark_manifest.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, default=str)
    LOGGER.info("Benchmark manifest written to %s", path)
    return path


__all__ = [
    "aggregate_by_scenario",
    "summaries_dataframe",
    "write_manifest",
    "write_summary_csv",
]
