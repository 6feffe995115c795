"""Typed models used by the swap subsystem.

Every value here is request-scoped: created for one swap, never cached,
never shared between concurrent swaps.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple

from .constants import DEFAULT_DECIMALS


class OrderSide(str, Enum):
    """Side of the order relative to the market's base asset."""
    BUY = "buy"      # Spend quote, receive base
    SELL = "sell"    # Spend base, receive quote


class TimeInForce(str, Enum):
    IMMEDIATE_OR_CANCEL = "IOC"


class SwapStage(str, Enum):
    """States of a single swap run."""
    START = "start"
    NORMALIZED = "normalized"
    MARKET_FOUND = "market_found"
    BOOK_FETCHED = "book_fetched"
    PRICED = "priced"
    SUBMITTED = "submitted"
    SIMULATED = "simulated"
    DONE = "done"


@dataclass(frozen=True)
class AssetInfo:
    """One side of a market."""
    denom: str
    decimals: int = DEFAULT_DECIMALS
    symbol: Optional[str] = None


@dataclass(frozen=True)
class Market:
    """A tradable spot pair."""
    market_id: str
    base: AssetInfo
    quote: AssetInfo
    ticker: Optional[str] = None

    @property
    def denoms(self) -> FrozenSet[str]:
        return frozenset((self.base.denom, self.quote.denom))


@dataclass(frozen=True)
class PriceLevel:
    price: Decimal
    quantity: Decimal


@dataclass(frozen=True)
class OrderBookSnapshot:
    """Bids sorted by descending price, asks by ascending price."""
    bids: Tuple[PriceLevel, ...] = ()
    asks: Tuple[PriceLevel, ...] = ()

    @property
    def best_bid(self) -> Optional[PriceLevel]:
        return self.bids[0] if self.bids else None

    @property
    def best_ask(self) -> Optional[PriceLevel]:
        return self.asks[0] if self.asks else None


@dataclass(frozen=True)
class MarketMatch:
    """A resolved market plus the side we trade on it."""
    market: Market
    side: OrderSide


@dataclass(frozen=True)
class TradeIntent:
    market: Market
    side: OrderSide
    amount: Decimal                  # Human units of the asset being spent
    slippage_percent: Decimal


@dataclass(frozen=True)
class OrderUnits:
    """Exchange-native order quantity and price as exact decimal strings."""
    quantity: str
    price: str


@dataclass(frozen=True)
class PricedOrder:
    market_id: str
    side: OrderSide
    price: str
    quantity: str
    time_in_force: TimeInForce = TimeInForce.IMMEDIATE_OR_CANCEL


@dataclass(frozen=True)
class SwapResult:
    """Terminal output of a swap request."""

    from_denom: str
    to_denom: str
    input_amount: Decimal
    estimated_output_amount: Decimal
    execution_price: Decimal
    tx_hash: Optional[str]
    market_id: str
    order_side: OrderSide
    is_simulated: bool
    fallback_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fromDenom": self.from_denom,
            "toDenom": self.to_denom,
            "inputAmount": str(self.input_amount),
            "estimatedOutputAmount": str(self.estimated_output_amount),
            "executionPrice": str(self.execution_price),
            "txHash": self.tx_hash,
            "marketId": self.market_id,
            "orderSide": self.order_side.value,
            "isSimulated": self.is_simulated,
            "fallbackReason": self.fallback_reason,
        }
