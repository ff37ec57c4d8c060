"""
execution/lifecycle.py - Pending transaction lifecycle.

LIFECYCLE CONTRACT:
===================
None -> Pending -> {Success | Failed}

Submission (None -> Pending):
  - at most one pending transaction exists (single in-flight slot)
  - opportunity net profit must exceed min_net_profit_usd
  - the gas fee is debited from the gas tank at submission
  - resolve time = now + resolve_delay_ms on the logical clock

Resolution (Pending -> terminal), once the resolve time is reached:
  0. the pending slot is cleared before anything else
  1. front-run draw < front_run_probability
       -> Failed("front-run"), net = -gas_fee
  2. otherwise gross is recomputed on the CURRENT pools for the same
     route and notional; net = gross - gas_fee - loan_fee (fees fixed
     at submission)
  3. net < slippage_retention * estimated_net  -> Failed("slippage")
  4. success iff net > min_net_profit_usd and no failure so far;
     any other outcome is Failed("unprofitable")

A Failed trade records net = -gas_fee (the sunk cost).
===================
"""

from dataclasses import dataclass
from decimal import Decimal
from random import Random
from typing import Optional, Sequence

from core.constants import (
    FAILURE_DESCRIPTIONS,
    TRIANGULAR_LABEL,
    PAIR_WETH_USDC,
    ZERO,
    ChecklistFlag,
    FailureReason,
    RouteKind,
    TradeStatus,
)
from core.exceptions import SinglePendingViolation
from core.format_money import format_money, format_usd
from core.logging import get_logger
from core.math import safe_decimal
from core.models import LiquidityPool, Opportunity, PendingTransaction, Trade
from execution.state_machine import settle_trade
from monitoring.events import EventLog
from monitoring.ledger import Ledger
from strategy.config import SimulationConfig
from strategy.scanner import evaluate_route

logger = get_logger(__name__)


@dataclass
class GasTank:
    """ETH balance that pays per-transaction gas."""
    balance_eth: Decimal
    eth_price_usd: Decimal

    @property
    def balance_usd(self) -> Decimal:
        return self.balance_eth * self.eth_price_usd

    def can_afford(self, fee_usd: Decimal) -> bool:
        return self.balance_usd >= fee_usd

    def debit_usd(self, fee_usd: Decimal) -> Decimal:
        """Debit a USD fee; returns the ETH amount taken."""
        amount_eth = fee_usd / self.eth_price_usd
        self.balance_eth -= amount_eth
        return amount_eth

    def credit_eth(self, amount_eth: Decimal) -> None:
        self.balance_eth += amount_eth


def new_tx_hash(rng: Random) -> str:
    """Synthetic 40-bit transaction hash, e.g. 0x3fa9c01b2e."""
    return f"0x{rng.getrandbits(40):010x}"


def describe_token_flow(opportunity: Opportunity, config: SimulationConfig) -> list[str]:
    dexes = opportunity.dexes
    if opportunity.kind == RouteKind.SPATIAL:
        return [
            f"Flash Loan: {format_usd(opportunity.loan_amount_usd)} USDC",
            f"Buy WETH on {dexes[0]}",
            f"Sell WETH on {dexes[1]}",
            "Repay Loan + Fee",
        ]
    start_weth = config.thresholds.triangular_start_weth
    return [
        f"Flash Loan: {format_money(start_weth, 2)} WETH ({format_usd(opportunity.loan_amount_usd)})",
        f"Swap WETH for USDC on {dexes[0]}",
        f"Swap USDC for DAI on {dexes[1]}",
        f"Swap DAI for WETH on {dexes[2]}",
        "Repay Loan + Fee",
    ]


class TransactionLifecycle:
    """
    Owns the single in-flight transaction slot.

    Reads pools, writes the ledger and the gas tank, narrates to the
    event log. Never raises for modeled trade outcomes.
    """

    def __init__(
        self,
        config: SimulationConfig,
        ledger: Ledger,
        events: EventLog,
        gas_tank: GasTank,
        rng: Random,
    ):
        self.config = config
        self.ledger = ledger
        self.events = events
        self.gas_tank = gas_tank
        self.rng = rng
        self._pending: Optional[PendingTransaction] = None
        self._pending_trade: Optional[Trade] = None

    @property
    def pending(self) -> Optional[PendingTransaction]:
        return self._pending

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def qualifies(self, opportunity: Optional[Opportunity]) -> bool:
        """True if the opportunity clears the submission profit threshold."""
        return (
            opportunity is not None
            and opportunity.net_profit > self.config.thresholds.min_net_profit_usd
        )

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, opportunity: Opportunity, now_ms: int, block: int = 0) -> Trade:
        """
        Submit an opportunity as the pending transaction.

        Raises:
            SinglePendingViolation: a transaction is already in flight
        """
        if self._pending is not None:
            raise SinglePendingViolation(
                f"Transaction {self._pending.tx_hash} is still pending",
                details={"pending": self._pending.tx_hash},
            )

        tx_hash = new_tx_hash(self.rng)
        pending = PendingTransaction(
            tx_hash=tx_hash,
            resolve_at_ms=now_ms + self.config.timing.resolve_delay_ms,
            route=opportunity.route,
            amount_usd=opportunity.loan_amount_usd,
            gas_fee=opportunity.gas_fee,
            loan_fee=opportunity.loan_fee,
            estimated_gross_profit=opportunity.gross_profit,
            estimated_net_profit=opportunity.net_profit,
            submitted_block=block,
        )
        trade = Trade(
            trade_id=tx_hash,
            kind=opportunity.kind,
            token_pair=PAIR_WETH_USDC if opportunity.kind == RouteKind.SPATIAL else TRIANGULAR_LABEL,
            dexes=list(opportunity.dexes),
            amount=opportunity.loan_amount_usd,
            gas_fee=opportunity.gas_fee,
            loan_fee=opportunity.loan_fee,
            token_flow=describe_token_flow(opportunity, self.config),
            block=block,
        )

        self.gas_tank.debit_usd(opportunity.gas_fee)
        self.ledger.add_pending(trade)
        self._pending = pending
        self._pending_trade = trade

        self.ledger.mark(ChecklistFlag.PROFITABLE_TRADE)
        self.ledger.mark(ChecklistFlag.CALCULATES_NET_PROFIT)
        if opportunity.kind == RouteKind.TRIANGULAR:
            self.ledger.mark(ChecklistFlag.TRIANGULAR_ARBITRAGE)

        self.events.info(
            f"Opportunity found! Submitting {opportunity.kind.value} transaction "
            f"{tx_hash[:10]}... (Pending). Est. net: {format_usd(opportunity.net_profit)}",
            block=block,
        )
        logger.debug(
            "Submitted",
            extra={"context": {"tx_hash": tx_hash, **opportunity.to_dict()}},
        )
        return trade

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, pools: Sequence[LiquidityPool], block: int = 0) -> Trade:
        """
        Settle the pending transaction against the given (current) pools.

        Raises:
            SinglePendingViolation: there is nothing pending
        """
        if self._pending is None or self._pending_trade is None:
            raise SinglePendingViolation("No pending transaction to resolve")

        tx, trade = self._pending, self._pending_trade
        self._pending = None
        self._pending_trade = None

        thresholds = self.config.thresholds
        failure: Optional[FailureReason] = None
        gross = ZERO
        slippage_cost = ZERO

        if safe_decimal(self.rng.random()) < thresholds.front_run_probability:
            failure = FailureReason.FRONT_RUN
            net = -tx.gas_fee
            self.ledger.mark(ChecklistFlag.HANDLES_FRONT_RUNNING)
        else:
            gross = evaluate_route(tx.route, pools, self.config)
            net = gross - tx.gas_fee - tx.loan_fee
            slippage_cost = max(ZERO, tx.estimated_gross_profit - gross)
            if net < tx.estimated_net_profit * thresholds.slippage_retention:
                failure = FailureReason.SLIPPAGE
                self.ledger.mark(ChecklistFlag.HANDLES_PRICE_SLIPPAGE)

        if failure is None and net > thresholds.min_net_profit_usd:
            settle_trade(trade, TradeStatus.SUCCESS, net, gross, slippage_cost)
            self.ledger.record_success(trade)
            self.events.success(
                f"Trade {tx.tx_hash[:10]}... SUCCESS. Net Profit: {format_usd(net)}",
                block=block,
            )
            return trade

        if failure is None:
            failure = FailureReason.UNPROFITABLE
        settle_trade(trade, TradeStatus.FAILED, -tx.gas_fee, gross, slippage_cost, failure)
        alert = self.ledger.record_failure(trade)
        self.events.error(
            f"Trade {tx.tx_hash[:10]}... FAILED. Reason: {FAILURE_DESCRIPTIONS[failure]}. "
            f"Lost {format_usd(tx.gas_fee)} gas.",
            block=block,
        )
        if alert:
            self.events.error(
                f"CRITICAL ALERT (Simulated): {self.ledger.consecutive_failures} "
                "consecutive transactions failed.",
                block=block,
            )
        return trade

    def cancel(self) -> Optional[PendingTransaction]:
        """Discard the pending transaction without scoring it."""
        tx = self._pending
        self._pending = None
        self._pending_trade = None
        return tx
