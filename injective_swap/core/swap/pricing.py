"""Execution price from an order book snapshot."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from .models import OrderBookSnapshot, OrderSide
from .units import order_context

HUNDRED = Decimal(100)


def slippage_fraction(slippage_percent: Decimal) -> Decimal:
    with order_context():
        return Decimal(slippage_percent) / HUNDRED


def price_from_book(
    book: OrderBookSnapshot,
    side: OrderSide,
    slippage_percent: Decimal,
) -> Optional[Decimal]:
    """Return the worst price we accept for a market order, or ``None``.

    A buy crosses the best (lowest) ask and tolerates paying up to
    ``slippage_percent`` more; a sell crosses the best (highest) bid and
    tolerates receiving up to ``slippage_percent`` less. ``None`` means the
    side of the book we would trade against is empty.
    """
    fraction = slippage_fraction(slippage_percent)

    with order_context():
        if side is OrderSide.BUY:
            best = book.best_ask
            if best is None:
                return None
            return best.price * (1 + fraction)

        best = book.best_bid
        if best is None:
            return None
        return best.price * (1 - fraction)
