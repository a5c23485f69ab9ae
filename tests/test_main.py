# tests/test_main.py
from __future__ import annotations

import json
from pathlib import Path

import pytest

from chainbench.benchmarks.orchestrator import OrchestrationReport
from chainbench.main import main, parse_args


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("BENCHMARK_NETWORK", "RPC_URL", "PRIVATE_KEY", "BENCHMARK_RUNS"):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    args = parse_args([])

    assert args.network == "hardhat"
    assert args.runs == 3
    assert args.scenario_pause_ms == 2000
    assert args.receipt_timeout is None
    assert args.only == []


def test_dry_run_prints_plan(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--dry-run", "--network", "opSepolia", "--runs", "2"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Network: opSepolia (runs=2, pause=2000ms)" in out
    assert "ERC20 Transfers: MyERC20.transfer tasks=15 chunk=1 delay=2000ms" in out
    assert "Complex Calls: StorageManipulator.performComplexCalculation" in out


def test_only_filters_scenarios(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--dry-run", "--only", "storage writes"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Storage Writes" in out
    assert "ERC20 Transfers" not in out


def test_unknown_scenario_is_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--dry-run", "--only", "Flash Loans"]) == 2
    assert "flash loans" in capsys.readouterr().err


def test_missing_network_addresses_is_fatal(tmp_path: Path) -> None:
    addresses = tmp_path / "deployed_addresses.json"
    addresses.write_text(json.dumps({"sepolia": {}}), encoding="utf-8")
    log_path = tmp_path / "benchmark_results.log"

    code = main(["--network", "opSepolia", "--addresses", str(addresses), "--log-path", str(log_path)])

    assert code == 1
    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert lines == [
        f"FATAL ERROR on opSepolia: No deployed addresses found for network 'opSepolia' in {addresses}"
    ]


def test_missing_private_key_is_fatal(tmp_path: Path) -> None:
    addresses = tmp_path / "deployed_addresses.json"
    addresses.write_text(json.dumps({"hardhat": {"MyERC20": "0xabc"}}), encoding="utf-8")
    log_path = tmp_path / "results.log"

    code = main(["--addresses", str(addresses), "--log-path", str(log_path)])

    assert code == 1
    assert "PRIVATE_KEY" in log_path.read_text(encoding="utf-8")
    assert not (tmp_path / "benchmarks").exists()


@pytest.mark.parametrize("flags", [["--runs", "0"], ["--scenario-pause-ms", "-1"]])
def test_bad_run_settings_are_usage_errors(
    flags: list[str], tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    log_path = tmp_path / "results.log"

    assert main([*flags, "--log-path", str(log_path)]) == 2
    assert "BenchmarkPlan" in capsys.readouterr().err
    assert not log_path.exists()


def test_artefact_failure_is_logged_and_fatal(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    async def completed_run(args, plan, sink) -> OrchestrationReport:
        return OrchestrationReport(network=args.network, runs=plan.runs)

    monkeypatch.setattr("chainbench.main.run_benchmarks", completed_run)
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    log_path = tmp_path / "results.log"

    code = main(["--output-dir", str(blocker), "--log-path", str(log_path), "--no-charts"])

    assert code == 1
    assert log_path.read_text(encoding="utf-8").startswith("FATAL ERROR on hardhat:")
    assert "writing artefacts" in caplog.text
