#!/usr/bin/env python3
"""
run_sim.py - CLI entrypoint for the flash-loan arbitrage simulator.

Usage:
    python run_sim.py live --ticks 200 --interval-ms 0 --seed 7 --yes
    python run_sim.py backtest --ticks 500 --seed 7
    python run_sim.py pools

Environment (.env supported):
    FLASHSIM_CONFIG     path to a simulation.yaml
    FLASHSIM_SEED       RNG seed
    FLASHSIM_LOG_LEVEL  DEBUG / INFO / WARNING / ERROR
"""

import os
import signal
import sys
import time
from pathlib import Path

import click
from dotenv import load_dotenv

from core.constants import Severity
from core.exceptions import SimulatorError
from core.format_money import format_money, format_pct, format_usd
from core.logging import get_logger, set_global_context, setup_logging
from core.models import LogEntry
from execution.engine import SimulationEngine
from strategy.config import SimulationConfig, load_simulation_config

logger = get_logger("flashsim.cli")

PRE_FLIGHT_STATEMENTS = [
    "I understand this is a simulation and no real funds are at risk.",
    "I understand a real bot would need a professional security audit.",
    "I understand a real bot needs secure, private infrastructure.",
    "I understand real arbitrage carries market and execution risk.",
]

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

SEVERITY_COLORS = {
    Severity.INFO: None,
    Severity.SUCCESS: "green",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}

# Graceful shutdown flag
_shutdown_requested = False


def handle_shutdown(signum: int, frame: object) -> None:
    global _shutdown_requested
    _shutdown_requested = True
    logger.info("Shutdown requested", extra={"context": {"signal": signum}})


def print_entry(entry: LogEntry) -> None:
    line = f"[{entry.timestamp:%H:%M:%S}] #{entry.block} {entry.message}"
    click.echo(click.style(line, fg=SEVERITY_COLORS[entry.severity]))


def load_config(config_path: str | None) -> SimulationConfig:
    path = config_path or os.getenv("FLASHSIM_CONFIG")
    return load_simulation_config(Path(path) if path else None)


def resolve_seed(seed: int | None) -> int | None:
    if seed is not None:
        return seed
    env_seed = os.getenv("FLASHSIM_SEED")
    return int(env_seed) if env_seed else None


@click.group()
@click.option("--config", "config_path", default=None, help="Path to simulation.yaml")
@click.option(
    "--log-level",
    "-l",
    default=None,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Log level (default: FLASHSIM_LOG_LEVEL or WARNING)",
)
@click.option("--json-logs/--no-json-logs", default=False, help="Use JSON log format")
@click.option("--log-file", default=None, help="Also write JSON logs to this file")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    log_level: str | None,
    json_logs: bool,
    log_file: str | None,
) -> None:
    """FLASHSIM - flash-loan arbitrage simulator."""
    load_dotenv()
    level = (log_level or os.getenv("FLASHSIM_LOG_LEVEL") or "WARNING").upper()
    if level not in LOG_LEVELS:
        raise click.BadParameter(
            f"{level!r} is not one of {', '.join(LOG_LEVELS)}.",
            param_hint="FLASHSIM_LOG_LEVEL",
        )
    setup_logging(
        level=level,
        json_output=json_logs,
        log_file=log_file,
    )
    set_global_context(service="flashsim", version="0.1.0")

    try:
        ctx.obj = load_config(config_path)
    except SimulatorError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.option("--ticks", "-n", default=None, type=int, help="Number of blocks to run (default: until halted)")
@click.option("--interval-ms", "-i", default=None, type=int, help="Wall-clock delay between ticks")
@click.option("--seed", "-s", default=None, type=int, help="RNG seed")
@click.option("--yes", "-y", is_flag=True, help="Acknowledge the pre-flight checklist")
@click.pass_obj
def live(config: SimulationConfig, ticks: int | None, interval_ms: int | None, seed: int | None, yes: bool) -> None:
    """Run the live simulation."""
    if not yes:
        click.echo("Pre-flight checklist:")
        for statement in PRE_FLIGHT_STATEMENTS:
            click.confirm(f"  {statement}", abort=True)

    signal.signal(signal.SIGINT, handle_shutdown)
    signal.signal(signal.SIGTERM, handle_shutdown)

    engine = SimulationEngine(config, seed=resolve_seed(seed))
    engine.events.subscribe(print_entry)
    engine.start_live()

    delay_ms = config.timing.tick_interval_ms if interval_ms is None else interval_ms
    count = 0
    while engine.is_live and not _shutdown_requested:
        if ticks is not None and count >= ticks:
            break
        engine.tick()
        count += 1
        if delay_ms > 0:
            time.sleep(delay_ms / 1000)

    if engine.is_live:
        engine.stop_live()

    summary = engine.ledger.get_summary()
    logger.info("Live session complete", extra={"context": summary})

    click.echo("\n" + "=" * 60)
    click.echo("LIVE SESSION SUMMARY")
    click.echo("=" * 60)
    click.echo(f"Blocks: {count}")
    click.echo(f"Trades: {summary['trade_count']} ({summary['success_count']} won, {summary['failure_count']} lost)")
    click.echo(f"Total profit: {format_usd(engine.total_profit)}")
    click.echo(f"Win rate: {format_pct(engine.ledger.win_rate)}")
    click.echo(f"Gas tank: {format_money(engine.gas_tank_eth, 4)} ETH")
    click.echo(f"Events retained: {len(engine.events)}")
    click.echo(f"Checklist: {engine.checklist.completed}/{len(summary['checklist'])}")
    for flag, done in summary["checklist"].items():
        click.echo(f"  [{'x' if done else ' '}] {flag}")
    click.echo("=" * 60)


@cli.command()
@click.option("--ticks", "-n", default=200, type=int, help="Number of blocks to simulate")
@click.option("--seed", "-s", default=None, type=int, help="RNG seed")
@click.pass_obj
def backtest(config: SimulationConfig, ticks: int, seed: int | None) -> None:
    """Run an isolated backtest and print the report."""
    engine = SimulationEngine(config, seed=resolve_seed(seed))
    engine.events.subscribe(print_entry)
    try:
        report = engine.run_backtest(ticks, seed=resolve_seed(seed))
    except (SimulatorError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    click.echo("\n" + "=" * 60)
    click.echo("BACKTEST REPORT")
    click.echo("=" * 60)
    click.echo(f"Blocks simulated: {report.ticks}")
    click.echo(f"Total profit: {format_usd(report.total_profit)}")
    click.echo(f"Win rate: {format_pct(report.win_rate)}")
    click.echo(f"Max drawdown: {format_money(report.max_drawdown, 1)}%")
    click.echo(f"Profitable trades: {report.profitable_trades}")
    click.echo(f"Failed trades: {report.failed_trades}")
    click.echo("=" * 60)


@cli.command()
@click.pass_obj
def pools(config: SimulationConfig) -> None:
    """Show the configured liquidity pools."""
    engine = SimulationEngine(config)
    for pool in engine.pools:
        click.echo(
            f"{pool.id:>3}  {pool.dex:<12} {pool.token_pair:<10} "
            f"{format_money(pool.reserve_a, 2):>20} / {format_money(pool.reserve_b, 2):<20} "
            f"price {format_money(pool.price, 6)}"
        )
    click.echo(f"{len(engine.pools)} pools")


if __name__ == "__main__":
    try:
        cli()
    except KeyboardInterrupt:
        sys.exit(130)
