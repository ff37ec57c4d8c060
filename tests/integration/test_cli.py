# PATH: tests/integration/test_cli.py
"""
Integration tests for the run_sim click CLI.
"""

import json
import logging

import pytest
from click.testing import CliRunner

import run_sim

pytestmark = pytest.mark.integration


@pytest.fixture
def runner(monkeypatch):
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    monkeypatch.setattr(run_sim.signal, "signal", lambda *args: None)
    monkeypatch.delenv("FLASHSIM_CONFIG", raising=False)
    monkeypatch.delenv("FLASHSIM_SEED", raising=False)
    monkeypatch.delenv("FLASHSIM_LOG_LEVEL", raising=False)
    monkeypatch.setattr(run_sim, "load_dotenv", lambda: None)

    yield CliRunner()

    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in saved_handlers:
            handler.close()
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)


def test_pools(runner):
    result = runner.invoke(run_sim.cli, ["pools"])
    assert result.exit_code == 0, result.output
    lines = [line for line in result.output.splitlines() if line.strip()]
    assert len(lines) == 9
    assert "Uniswap v3" in lines[0]
    assert lines[-1] == "8 pools"


def test_live_with_ack(runner):
    result = runner.invoke(run_sim.cli, ["live", "--ticks", "5", "--interval-ms", "0", "--seed", "1", "--yes"])
    assert result.exit_code == 0, result.output
    assert "Pre-flight check complete" in result.output
    assert "New block mined" in result.output
    assert "LIVE SESSION SUMMARY" in result.output
    assert "Blocks: 5" in result.output
    assert "Events retained: " in result.output


def test_live_requires_preflight(runner):
    result = runner.invoke(run_sim.cli, ["live", "--ticks", "1", "--interval-ms", "0"], input="y\nn\n")
    assert result.exit_code != 0
    assert "LIVE SESSION SUMMARY" not in result.output


def test_live_preflight_accepted(runner):
    result = runner.invoke(
        run_sim.cli, ["live", "--ticks", "2", "--interval-ms", "0"], input="y\ny\ny\ny\n"
    )
    assert result.exit_code == 0, result.output
    assert "Blocks: 2" in result.output


def test_backtest(runner):
    result = runner.invoke(run_sim.cli, ["backtest", "--ticks", "20", "--seed", "4"])
    assert result.exit_code == 0, result.output
    assert "BACKTEST REPORT" in result.output
    assert "Max drawdown:" in result.output


def test_seed_from_env(runner, monkeypatch):
    monkeypatch.setenv("FLASHSIM_SEED", "4")
    first = runner.invoke(run_sim.cli, ["backtest", "--ticks", "15"])
    second = runner.invoke(run_sim.cli, ["backtest", "--ticks", "15"])
    assert first.exit_code == 0, first.output
    summary = lambda out: out.split("BACKTEST REPORT")[1]
    assert summary(first.output) == summary(second.output)


def test_bad_config(runner, tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("market: [unclosed\n", encoding="utf-8")
    result = runner.invoke(run_sim.cli, ["--config", str(path), "pools"])
    assert result.exit_code != 0
    assert "CONFIG_INVALID" in result.output


def test_bad_log_level_from_env(runner, monkeypatch):
    monkeypatch.setenv("FLASHSIM_LOG_LEVEL", "loud")
    result = runner.invoke(run_sim.cli, ["pools"])
    assert result.exit_code == 2
    assert "FLASHSIM_LOG_LEVEL" in result.output
    assert "LOUD" in result.output
    assert not isinstance(result.exception, AttributeError)


def test_log_level_from_env_any_case(runner, monkeypatch):
    monkeypatch.setenv("FLASHSIM_LOG_LEVEL", "info")
    result = runner.invoke(run_sim.cli, ["pools"])
    assert result.exit_code == 0, result.output
    assert logging.getLogger().level == logging.INFO


def test_log_file_gets_json_events(runner, tmp_path):
    log_path = tmp_path / "sim.log"
    result = runner.invoke(
        run_sim.cli,
        ["--log-file", str(log_path), "-l", "INFO", "backtest", "--ticks", "5", "--seed", "1"],
    )
    assert result.exit_code == 0, result.output

    records = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    mined = [r for r in records if r["message"].startswith("New block mined")]
    assert len(mined) == 5
    assert all("block" in r for r in mined)
    assert any(r["message"].startswith("Backtest complete") for r in records)
    assert records[0]["context"]["service"] == "flashsim"
