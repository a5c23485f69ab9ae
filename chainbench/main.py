from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from .benchmarks.charts import render_summary_charts
from .benchmarks.config import BenchmarkPlan, default_benchmark_plan
from .benchmarks.errors import FatalOrchestrationError
from .benchmarks.orchestrator import OrchestrationReport, RunOrchestrator
from .benchmarks.report import summaries_dataframe, write_manifest, write_summary_csv
from .benchmarks.runner import ChunkedTaskRunner
from .benchmarks.scenarios import build_default_scenarios
from .client import (
    DEFAULT_ADDRESSES_PATH,
    ContractClient,
    create_web3,
    load_deployed_addresses,
    resolve_rpc_url,
)
from .sink import DEFAULT_LOG_PATH, ResultLogSink, SummarySink, format_fatal

LOGGER = logging.getLogger("chainbench.benchmark")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Smart-contract throughput benchmark")
    parser.add_argument(
        "--network", default=os.environ.get("BENCHMARK_NETWORK", "hardhat")
    )
    parser.add_argument(
        "--rpc-url",
        default=os.environ.get("RPC_URL"),
        help="Override the RPC endpoint derived from --network",
    )
    parser.add_argument(
        "--addresses",
        default=os.environ.get("DEPLOYED_ADDRESSES_PATH", str(DEFAULT_ADDRESSES_PATH)),
        help="JSON file mapping network names to deployed contract addresses",
    )
    parser.add_argument(
        "--runs",
        type=int,
        default=int(os.environ.get("BENCHMARK_RUNS", "3")),
        help="Number of times to run every scenario",
    )
    parser.add_argument(
        "--scenario-pause-ms",
        type=int,
        default=int(os.environ.get("BENCHMARK_SCENARIO_PAUSE_MS", "2000")),
        help="Pause after each scenario before the next one starts",
    )
    parser.add_argument(
        "--receipt-timeout",
        type=float,
        default=None,
        help="Seconds to wait for each receipt (default: wait indefinitely)",
    )
    parser.add_argument(
        "--poa",
        action="store_true",
        help="Inject the proof-of-authority extraData middleware",
    )
    parser.add_argument(
        "--only",
        action="append",
        default=[],
        metavar="SCENARIO",
        help="Run only the named scenario (repeatable)",
    )
    parser.add_argument(
        "--output-dir",
        default=os.environ.get("BENCHMARK_OUTPUT_DIR", "benchmarks"),
        help="Directory to store benchmark artefacts (charts and CSV files)",
    )
    parser.add_argument(
        "--log-path",
        default=os.environ.get("BENCHMARK_RESULTS_LOG", str(DEFAULT_LOG_PATH)),
        help="Append-only results log",
    )
    parser.add_argument(
        "--no-charts",
        action="store_true",
        help="Skip chart rendering",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print the planned scenarios without executing them",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("BENCHMARK_LOG_LEVEL", "INFO"),
        help="Logging level",
    )
    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def load_plan(args: argparse.Namespace) -> BenchmarkPlan:
    plan = default_benchmark_plan(runs=args.runs, scenario_pause_ms=args.scenario_pause_ms)
    return plan.select(args.only)


async def run_benchmarks(
    args: argparse.Namespace, plan: BenchmarkPlan, sink: SummarySink
) -> OrchestrationReport:
    addresses = load_deployed_addresses(args.addresses, args.network)
    rpc_url = resolve_rpc_url(args.network, args.rpc_url)
    private_key = os.environ.get("PRIVATE_KEY")
    if not private_key:
        raise FatalOrchestrationError("Please set PRIVATE_KEY in the environment or a .env file")

    web3 = create_web3(rpc_url, private_key, poa=args.poa)
    try:
        client = ContractClient(web3, args.network, receipt_timeout=args.receipt_timeout)
        orchestrator = RunOrchestrator(
            build_default_scenarios(plan, client, addresses),
            ChunkedTaskRunner(),
            sink,
            runs=plan.runs,
            scenario_pause_ms=plan.scenario_pause_ms,
            network_name=args.network,
        )
        return await orchestrator.run()
    finally:
        await web3.provider.disconnect()


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        plan = load_plan(args)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    if args.dry_run:
        _print_plan(plan, args.network)
        return 0

    output_dir = Path(args.output_dir)
    LOGGER.info("Benchmark output directory: %s", output_dir)
    LOGGER.info("Results log: %s", args.log_path)

    sink = ResultLogSink(Path(args.log_path))
    stage = "during benchmarks"
    try:
        report = asyncio.run(run_benchmarks(args, plan, sink))
        stage = "writing artefacts"
        _write_artefacts(report, output_dir, charts=not args.no_charts)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("FATAL ERROR %s on %s", stage, args.network)
        sink.append(format_fatal(args.network, exc))
        return 1
    finally:
        sink.close()

    return 0


def _write_artefacts(report: OrchestrationReport, output_dir: Path, charts: bool) -> None:
    artefacts = {"summaries": str(write_summary_csv(report, output_dir))}
    if charts:
        for path in render_summary_charts(summaries_dataframe(report), output_dir, report.network):
            artefacts[path.stem] = str(path)
    write_manifest(report, output_dir, artefacts)


def _print_plan(plan: BenchmarkPlan, network: str) -> None:
    print(f"Network: {network} (runs={plan.runs}, pause={plan.scenario_pause_ms}ms)")
    for scenario in plan:
        config = scenario.config
        print(
            f"  - {scenario.name}: {scenario.contract}.{scenario.function} "
            f"tasks={config.total_tasks} chunk={config.chunk_size} "
            f"delay={config.inter_chunk_delay_ms}ms gas_limit={config.resource_limit} "
            f"waves={config.wave_count}"
        )


if __name__ == "__main__":
    sys.exit(main())
