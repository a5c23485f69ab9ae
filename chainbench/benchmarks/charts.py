from __future__ import annotations

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from .report import aggregate_by_scenario

LOGGER = logging.getLogger("chainbench.benchmark.charts")

sns.set_style("whitegrid")
plt.rcParams["figure.dpi"] = 100
plt.rcParams["savefig.dpi"] = 300
plt.rcParams["font.size"] = 10
plt.rcParams["axes.labelsize"] = 11
plt.rcParams["axes.titlesize"] = 13
plt.rcParams["legend.fontsize"] = 9

SCENARIO_COLORS = ["#2E86AB", "#A23B72", "#F18F01", "#C73E1D", "#6A994E"]


def render_summary_charts(df: pd.DataFrame, output_dir: Path, network: str) -> list[Path]:
    """Render the per-run throughput and average gas charts for one network."""
    if df.empty:
        LOGGER.warning("No run summaries available; skipping charts")
        return []

    output_dir.mkdir(parents=True, exist_ok=True)
    paths = [
        _render_throughput_chart(df, output_dir / f"{network}__throughput.png", network),
        _render_gas_chart(df, output_dir / f"{network}__avg_gas.png", network),
    ]
    for path in paths:
        LOGGER.info("Rendering chart %s", path)
    return paths


def _render_throughput_chart(df: pd.DataFrame, chart_path: Path, network: str) -> Path:
    """Line chart of TPS per run, one line per scenario."""
    fig, ax = plt.subplots(figsize=(10, 6))

    scenarios = list(dict.fromkeys(df["scenario"]))
    for position, scenario in enumerate(scenarios):
        rows = df[df["scenario"] == scenario].sort_values("run")
        ax.plot(
            rows["run"],
            rows["throughput_tps"],
            marker="o",
            linewidth=2.5,
            markersize=8,
            label=scenario,
            color=SCENARIO_COLORS[position % len(SCENARIO_COLORS)],
        )

    ax.set_xlabel("Run", fontweight="semibold")
    ax.set_ylabel("Throughput (successful tx/s)", fontweight="semibold")
    ax.set_title(f"Throughput per Run ({network})", fontweight="bold", pad=15)
    ax.set_xticks(sorted(df["run"].unique()))
    ax.grid(True, alpha=0.3, linestyle="--")
    ax.legend(loc="best", frameon=True)

    plt.tight_layout()
    fig.savefig(chart_path, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    return chart_path


def _render_gas_chart(df: pd.DataFrame, chart_path: Path, network: str) -> Path:
    fig, ax = plt.subplots(figsize=(10, 6))

    summary = aggregate_by_scenario(df)
    bars = ax.bar(
        summary["scenario"],
        summary["avg_gas_used"],
        color=SCENARIO_COLORS[: len(summary)],
        alpha=0.8,
        edgecolor="white",
        linewidth=2,
    )
    ax.set_ylabel("Average gas used", fontweight="semibold")
    ax.set_title(f"Average Gas per Scenario ({network})", fontweight="bold", pad=15)
    ax.grid(True, alpha=0.3, axis="y", linestyle="--")

    for bar in bars:
        height = bar.get_height()
        ax.text(
            bar.get_x() + bar.get_width() / 2.0,
            height,
            f"{height:,.0f}",
            ha="center",
            va="bottom",
            fontweight="semibold",
        )

    plt.tight_layout()
    fig.savefig(chart_path, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    return chart_path


__all__ = ["render_summary_charts"]
