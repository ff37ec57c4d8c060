"""
execution/engine.py - Tick-driven simulation engine.

TICK CONTRACT:
==============
One tick is atomic and runs these steps in order:
  1. advance every pool and the congestion scalar
  2. advance the block counter and the logical clock
  3. if a transaction is pending: resolve it if due, else wait.
     No scan happens on such a tick.
  4. else if the gas tank is below the operating threshold: halt
     (error event, status -> STOPPED). No scan.
  5. else scan; submit if the opportunity clears the profit threshold

Nothing else mutates engine state between ticks except operator
commands (start_live, stop_live, kill_switch, request_faucet,
run_backtest), which run to completion on the caller's thread.
==============
"""

from decimal import Decimal
from enum import Enum
from random import Random
from typing import Any, Dict, Optional

from core.constants import BotStatus, ChecklistFlag
from core.exceptions import CommandRejected
from core.format_money import format_money, format_pct, format_usd
from core.logging import get_logger
from core.time import LogicalClock
from execution.kill_switch import HaltReason, KillSwitch
from execution.lifecycle import GasTank, TransactionLifecycle
from execution.state_machine import StatusMachine
from market.mutator import advance_pools, next_congestion
from market.pools import PoolStore
from monitoring.events import EventLog
from monitoring.ledger import Ledger
from monitoring.report import BacktestReport
from strategy.config import SimulationConfig
from strategy.scanner import scan

logger = get_logger(__name__)


class TickOutcome(str, Enum):
    """What a single tick did."""
    IDLE = "idle"                      # not running
    WAITING = "waiting"                # pending transaction not yet due
    RESOLVED = "resolved"              # pending transaction settled
    HALTED = "halted"                  # gas exhaustion
    NO_OPPORTUNITY = "no_opportunity"  # nothing cleared the threshold
    SKIPPED = "skipped"                # gas fee exceeds remaining tank
    SUBMITTED = "submitted"


class SimulationEngine:
    """
    Owns all simulation state and exposes the operator commands.

    Randomness comes only from the injected rng, so two engines built
    with the same seed and config produce identical runs.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        rng: Optional[Random] = None,
        seed: Optional[int] = None,
        events: Optional[EventLog] = None,
    ):
        self.config = config or SimulationConfig()
        self.rng = rng if rng is not None else Random(seed)
        self.events = events or EventLog(self.config.retention.max_log_entries)
        self.status_machine = StatusMachine()
        self.kill = KillSwitch()
        self.block = self.config.market.initial_block
        self.gas_tank = GasTank(
            balance_eth=self.config.gas_tank.initial_eth,
            eth_price_usd=self.config.market.eth_price_usd,
        )
        self._reset_session()

    def _reset_session(self) -> None:
        market = self.config.market
        self.pools = PoolStore.from_seeds(self.config.pools, market.price_history_length)
        self.congestion: Decimal = market.congestion.initial
        self.clock = LogicalClock(self.config.timing.tick_interval_ms)
        self.ledger = Ledger(
            max_trades=self.config.retention.max_trades,
            alert_streak=self.config.thresholds.alert_failure_streak,
        )
        self.lifecycle = TransactionLifecycle(
            self.config, self.ledger, self.events, self.gas_tank, self.rng
        )

    # ------------------------------------------------------------------
    # Queryable state
    # ------------------------------------------------------------------

    @property
    def status(self) -> BotStatus:
        return self.status_machine.status

    @property
    def is_live(self) -> bool:
        return self.status_machine.is_live

    @property
    def is_running(self) -> bool:
        return self.status in (BotStatus.LIVE, BotStatus.BACKTESTING)

    @property
    def pending(self):
        return self.lifecycle.pending

    @property
    def total_profit(self) -> Decimal:
        return self.ledger.total_profit

    @property
    def gas_tank_eth(self) -> Decimal:
        return self.gas_tank.balance_eth

    @property
    def checklist(self):
        return self.ledger.checklist

    @property
    def trades(self):
        return self.ledger.trades

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self) -> TickOutcome:
        """Run one atomic tick. Does nothing unless live or backtesting."""
        if not self.is_running:
            return TickOutcome.IDLE

        self.pools.replace_all(advance_pools(self.pools, self.rng, self.config.market))
        self.congestion = next_congestion(self.congestion, self.rng, self.config.market.congestion)

        self.block += 1
        self.clock.advance()
        self.events.info(
            f"New block mined: {self.block}. Congestion: {format_pct(self.congestion, 0)}.",
            block=self.block,
        )

        if self.lifecycle.has_pending:
            if self.clock.is_due(self.lifecycle.pending.resolve_at_ms):
                self.lifecycle.resolve(self.pools.pools, block=self.block)
                return TickOutcome.RESOLVED
            return TickOutcome.WAITING

        if self.gas_tank.balance_usd < self.config.gas_tank.min_operating_usd:
            self.events.error(
                f"Gas tank balance critically low ({format_money(self.gas_tank.balance_eth, 4)} ETH, "
                f"{format_usd(self.gas_tank.balance_usd)}). Simulation halted.",
                block=self.block,
            )
            self._halt(HaltReason.GAS_EXHAUSTED, "Gas tank below operating threshold")
            return TickOutcome.HALTED

        opportunity = scan(self.pools.pools, self.congestion, self.config)
        if not self.lifecycle.qualifies(opportunity):
            return TickOutcome.NO_OPPORTUNITY

        if not self.gas_tank.can_afford(opportunity.gas_fee):
            self.events.warning(
                f"Skipping opportunity: gas fee {format_usd(opportunity.gas_fee)} exceeds "
                f"gas tank ({format_usd(self.gas_tank.balance_usd)}).",
                block=self.block,
            )
            return TickOutcome.SKIPPED

        self.lifecycle.submit(opportunity, self.clock.now_ms, block=self.block)
        return TickOutcome.SUBMITTED

    def run(self, ticks: int) -> int:
        """Run up to `ticks` ticks, stopping early on a halt. Returns ticks run."""
        executed = 0
        for _ in range(ticks):
            if not self.is_running:
                break
            self.tick()
            executed += 1
        return executed

    def _halt(self, reason: HaltReason, details: str) -> None:
        discarded = self.lifecycle.cancel()
        self.status_machine.transition_to(BotStatus.STOPPED, reason=reason.value)
        if reason == HaltReason.MANUAL:
            self.kill.manual_trigger(block=self.block, details=details)
        else:
            self.kill.record_halt(reason, block=self.block, details=details)
        logger.info(
            "Simulation halted",
            extra={
                "context": {
                    "reason": reason.value,
                    "block": self.block,
                    "discarded_tx": discarded.tx_hash if discarded else None,
                }
            },
        )

    # ------------------------------------------------------------------
    # Operator commands
    # ------------------------------------------------------------------

    def start_live(self) -> bool:
        """
        Reset the session and go live.

        Returns False (no-op) if already live.

        Raises:
            CommandRejected: a backtest is running
        """
        if self.is_live:
            self.events.warning("Simulation is already live.", block=self.block)
            return False
        if self.status == BotStatus.BACKTESTING:
            raise CommandRejected("Cannot start live simulation during a backtest")

        self.events.clear()
        self._reset_session()
        self.kill.release()
        self.status_machine.transition_to(BotStatus.LIVE, reason="start-live")
        self.events.info("Pre-flight check complete. Starting live simulation...", block=self.block)
        self.events.success("Subscribed to new block headers via WebSocket.", block=self.block)
        return True

    def stop_live(self) -> bool:
        """Stop ticking and discard any pending transaction. No-op unless live."""
        if not self.is_live:
            self.events.warning("Simulation is already stopped.", block=self.block)
            return False
        self.events.info("Live simulation stopped by user.", block=self.block)
        self._halt(HaltReason.OPERATOR_STOP, "Stopped by operator")
        return True

    def kill_switch(self) -> bool:
        """Immediate stop plus the kill-switch proof flag. No-op unless live."""
        if not self.is_live:
            self.events.warning("Kill switch ignored: simulation is not live.", block=self.block)
            return False
        self.events.error("KILL SWITCH ENGAGED! Simulation halted immediately by user.", block=self.block)
        self._halt(HaltReason.MANUAL, "Manually triggered")
        self.ledger.mark(ChecklistFlag.KILL_SWITCH)
        return True

    def request_faucet(self) -> Decimal:
        """
        Credit the faucet amount to the gas tank; returns the new balance.

        Raises:
            CommandRejected: simulation is live
        """
        if self.is_live:
            raise CommandRejected("Faucet is disabled while the simulation is live")
        amount = self.config.gas_tank.faucet_eth
        self.gas_tank.credit_eth(amount)
        self.events.success(
            f"Received {format_money(amount, 1)} ETH from simulated faucet.",
            block=self.block,
        )
        return self.gas_tank.balance_eth

    def run_backtest(self, ticks: int, seed: Optional[int] = None) -> BacktestReport:
        """
        Run `ticks` ticks on an isolated copy of the simulation.

        The live session state (pools, ledger, gas tank) is untouched.

        Raises:
            CommandRejected: simulation is live or already backtesting
            ValueError: ticks is not positive
        """
        if self.status != BotStatus.STOPPED:
            raise CommandRejected(
                f"Backtest requires a stopped simulation (status: {self.status.value})",
                details={"status": self.status.value},
            )
        if ticks <= 0:
            raise ValueError(f"ticks must be positive, got {ticks}")

        self.status_machine.transition_to(BotStatus.BACKTESTING, reason="run-backtest")
        self.events.info(f"Starting backtest over {ticks} blocks...", block=self.block)
        try:
            sandbox = SimulationEngine(
                config=self.config,
                rng=Random(seed if seed is not None else self.rng.getrandbits(32)),
                events=EventLog(self.config.retention.max_log_entries, logger_name="flashsim.backtest"),
            )
            sandbox.block = self.block
            sandbox.status_machine.transition_to(BotStatus.BACKTESTING, reason="sandbox")
            executed = sandbox.run(ticks)
            report = BacktestReport.from_ledger(ticks=executed, ledger=sandbox.ledger)
        finally:
            self.status_machine.transition_to(BotStatus.STOPPED, reason="backtest complete")

        self.events.success(report.summary_line(), block=self.block)
        return report

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        """JSON-serialisable view of the current state."""
        pending = self.lifecycle.pending
        return {
            "status": self.status.value,
            "block": self.block,
            "clock_ms": self.clock.now_ms,
            "congestion": str(self.congestion),
            "gas_tank_eth": str(self.gas_tank.balance_eth),
            "gas_tank_usd": str(self.gas_tank.balance_usd),
            "total_profit": str(self.ledger.total_profit),
            "pending_tx": pending.tx_hash if pending else None,
            "trades": [t.to_dict() for t in self.ledger.trades],
            "checklist": self.ledger.checklist.to_dict(),
            "pools": self.pools.to_list(),
            "stats": self.ledger.get_summary(),
            "profit_curve": [str(p) for p in self.ledger.profit_curve],
            "status_history": self.status_machine.to_dict()["history"],
            "events": self.events.to_list(),
            "kill_switch": self.kill.get_status(),
        }
