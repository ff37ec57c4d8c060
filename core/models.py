"""
Core data models for FLASHSIM.

POOL CONTRACT
=============
- reserve_a > 0 and reserve_b > 0 at all times (enforced on construction)
- price = reserve_b / reserve_a (token B per 1 token A)
- price_history is a fixed-length tuple, oldest first
- pools are immutable; the market mutator returns new instances

ROUTE CONTRACT
==============
Routes are a closed set of two shapes, each naming pools by id:
- SpatialRoute(buy_pool_id, sell_pool_id)   two WETH/USDC pools
- TriangularRoute(weth_usdc_id, usdc_dai_id, dai_weth_id)
Evaluation always resolves the ids against the *current* pool set.

TRADE CONTRACT
==============
A Trade is created in Pending and settled exactly once to Success or
Failed (see execution.state_machine). After settlement it is immutable.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

from core.constants import (
    BOT_ADDRESS,
    FAILURE_DESCRIPTIONS,
    LOAN_PROVIDER_ADDRESS,
    ZERO,
    ChecklistFlag,
    ErrorCode,
    FailureReason,
    RouteKind,
    Severity,
    TradeStatus,
)
from core.exceptions import PoolError
from core.time import now_utc


# ============================================================================
# POOLS
# ============================================================================

@dataclass(frozen=True)
class LiquidityPool:
    """Constant-product liquidity pool on a mock DEX."""
    id: str
    dex: str
    token_pair: str
    token_a: str
    token_b: str
    reserve_a: Decimal
    reserve_b: Decimal
    price_history: Tuple[Decimal, ...] = ()

    def __post_init__(self):
        if self.reserve_a <= 0 or self.reserve_b <= 0:
            raise PoolError(
                f"Pool {self.id} ({self.dex} {self.token_pair}) has non-positive reserves",
                code=ErrorCode.POOL_INVALID_RESERVES,
                details={"reserve_a": str(self.reserve_a), "reserve_b": str(self.reserve_b)},
            )

    @property
    def price(self) -> Decimal:
        return self.reserve_b / self.reserve_a

    @property
    def product(self) -> Decimal:
        return self.reserve_a * self.reserve_b

    def with_reserves(self, reserve_a: Decimal, reserve_b: Decimal) -> "LiquidityPool":
        """New pool with updated reserves; history rolls by one entry."""
        new_price = reserve_b / reserve_a
        if self.price_history:
            history = self.price_history[1:] + (new_price,)
        else:
            history = (new_price,)
        return replace(self, reserve_a=reserve_a, reserve_b=reserve_b, price_history=history)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "dex": self.dex,
            "token_pair": self.token_pair,
            "token_a": self.token_a,
            "token_b": self.token_b,
            "reserve_a": str(self.reserve_a),
            "reserve_b": str(self.reserve_b),
            "price": str(self.price),
            "price_history": [str(p) for p in self.price_history],
        }


# ============================================================================
# ROUTES
# ============================================================================

@dataclass(frozen=True)
class SpatialRoute:
    """Buy WETH on the cheap pool, sell it on the expensive one."""
    buy_pool_id: str
    sell_pool_id: str

    kind = RouteKind.SPATIAL

    @property
    def pool_ids(self) -> Tuple[str, ...]:
        return (self.buy_pool_id, self.sell_pool_id)


@dataclass(frozen=True)
class TriangularRoute:
    """WETH -> USDC -> DAI -> WETH."""
    weth_usdc_pool_id: str
    usdc_dai_pool_id: str
    dai_weth_pool_id: str

    kind = RouteKind.TRIANGULAR

    @property
    def pool_ids(self) -> Tuple[str, ...]:
        return (self.weth_usdc_pool_id, self.usdc_dai_pool_id, self.dai_weth_pool_id)


Route = Union[SpatialRoute, TriangularRoute]


@dataclass(frozen=True)
class Opportunity:
    """Best route found by a scan, with its profit estimate in USD."""
    route: Route
    loan_amount_usd: Decimal
    gross_profit: Decimal
    gas_fee: Decimal
    loan_fee: Decimal
    dexes: Tuple[str, ...] = ()

    @property
    def kind(self) -> RouteKind:
        return self.route.kind

    @property
    def net_profit(self) -> Decimal:
        return self.gross_profit - self.gas_fee - self.loan_fee

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "pool_ids": list(self.route.pool_ids),
            "dexes": list(self.dexes),
            "loan_amount_usd": str(self.loan_amount_usd),
            "gross_profit": str(self.gross_profit),
            "gas_fee": str(self.gas_fee),
            "loan_fee": str(self.loan_fee),
            "net_profit": str(self.net_profit),
        }


# ============================================================================
# PENDING TRANSACTION
# ============================================================================

@dataclass(frozen=True)
class PendingTransaction:
    """The single in-flight transaction. Fees are fixed at submission."""
    tx_hash: str
    resolve_at_ms: int
    route: Route
    amount_usd: Decimal
    gas_fee: Decimal
    loan_fee: Decimal
    estimated_gross_profit: Decimal
    estimated_net_profit: Decimal
    submitted_block: int = 0

    @property
    def kind(self) -> RouteKind:
        return self.route.kind


# ============================================================================
# TRADE
# ============================================================================

@dataclass
class Trade:
    """Ledger record for one submitted transaction."""
    trade_id: str
    kind: RouteKind
    token_pair: str
    dexes: List[str]
    amount: Decimal
    gas_fee: Decimal
    loan_fee: Decimal
    token_flow: List[str] = field(default_factory=list)
    status: TradeStatus = TradeStatus.PENDING
    gross_profit: Decimal = ZERO
    slippage_cost: Decimal = ZERO
    net_profit: Decimal = ZERO
    failure_reason: Optional[FailureReason] = None
    timestamp: datetime = field(default_factory=now_utc)
    settled_at: Optional[datetime] = None
    block: int = 0
    from_address: str = BOT_ADDRESS
    to_address: str = LOAN_PROVIDER_ADDRESS

    @property
    def is_settled(self) -> bool:
        return self.status != TradeStatus.PENDING

    @property
    def failure_description(self) -> Optional[str]:
        if self.failure_reason is None:
            return None
        return FAILURE_DESCRIPTIONS[self.failure_reason]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trade_id": self.trade_id,
            "kind": self.kind.value,
            "timestamp": self.timestamp.isoformat(),
            "settled_at": self.settled_at.isoformat() if self.settled_at else None,
            "block": self.block,
            "token_pair": self.token_pair,
            "dexes": list(self.dexes),
            "amount": str(self.amount),
            "status": self.status.value,
            "gross_profit": str(self.gross_profit),
            "gas_fee": str(self.gas_fee),
            "slippage_cost": str(self.slippage_cost),
            "loan_fee": str(self.loan_fee),
            "net_profit": str(self.net_profit),
            "failure_reason": self.failure_reason.value if self.failure_reason else None,
            "failure_description": self.failure_description,
            "from_address": self.from_address,
            "to_address": self.to_address,
            "token_flow": list(self.token_flow),
        }


# ============================================================================
# CHECKLIST
# ============================================================================

@dataclass
class ChecklistState:
    """
    Deployment-readiness proof flags.

    Monotonic: mark() only ever moves a flag from False to True.
    """
    profitable_trade: bool = False
    triangular_arbitrage: bool = False
    calculates_net_profit: bool = False
    reverts_unprofitable: bool = False
    handles_front_running: bool = False
    handles_price_slippage: bool = False
    kill_switch: bool = False
    sends_alerts: bool = False

    def mark(self, flag: ChecklistFlag) -> bool:
        """Set a flag. Returns True if it was newly set."""
        if getattr(self, flag.value):
            return False
        setattr(self, flag.value, True)
        return True

    def is_set(self, flag: ChecklistFlag) -> bool:
        return getattr(self, flag.value)

    @property
    def completed(self) -> int:
        return sum(1 for flag in ChecklistFlag if self.is_set(flag))

    def to_dict(self) -> Dict[str, bool]:
        return {flag.value: self.is_set(flag) for flag in ChecklistFlag}


# ============================================================================
# LOG ENTRY
# ============================================================================

@dataclass(frozen=True)
class LogEntry:
    """One operator-facing narration line."""
    entry_id: int
    message: str
    severity: Severity
    block: int = 0
    timestamp: datetime = field(default_factory=now_utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.entry_id,
            "timestamp": self.timestamp.isoformat(),
            "block": self.block,
            "message": self.message,
            "severity": self.severity.value,
        }
