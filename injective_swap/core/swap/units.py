"""Conversion between human amounts and exchange-native order units.

Order book prices and order quantities on Injective spot markets are in
chain units: quantity is scaled by 10**base_decimals and price by
10**(quote_decimals - base_decimals). All arithmetic is Decimal, evaluated
in a wide local context so 18-decimal assets never lose digits.
"""

from __future__ import annotations

from decimal import Context, Decimal, localcontext
from typing import ContextManager

from .models import OrderSide, OrderUnits

ORDER_PRECISION = 60


def order_context() -> ContextManager[Context]:
    return localcontext(Context(prec=ORDER_PRECISION))


def decimal_to_str(value: Decimal) -> str:
    """Plain decimal string, no exponent, no trailing zeros."""
    normalized = value.normalize(Context(prec=ORDER_PRECISION))
    if normalized == 0:
        return '0'
    return format(normalized, 'f')


def scale(decimals: int) -> Decimal:
    return Decimal(10) ** decimals


def to_order_units(
    side: OrderSide,
    amount: Decimal,
    base_decimals: int,
    quote_decimals: int,
    execution_price: Decimal,
) -> OrderUnits:
    """Compute order quantity and price strings for a market order.

    For a buy, ``amount`` is the quote amount to spend and the quantity is
    how much base that buys at ``execution_price``. For a sell, ``amount`` is
    the base amount to sell. Raises ``ValueError`` when the order is priced
    at zero or less, on either side.
    """
    with order_context():
        amount = Decimal(amount)
        price = Decimal(execution_price)
        if price <= 0:
            raise ValueError(f"Cannot place a {side.value.lower()} order at non-positive price {price}")
        if side is OrderSide.BUY:
            quote_amount = amount * scale(quote_decimals)
            quantity = quote_amount / price * scale(base_decimals - quote_decimals)
        else:
            quantity = amount * scale(base_decimals)

    return OrderUnits(quantity=decimal_to_str(quantity), price=decimal_to_str(price))


def estimated_output(
    side: OrderSide,
    quantity: Decimal,
    price: Decimal,
    base_decimals: int,
    quote_decimals: int,
) -> Decimal:
    """Human amount received: base for a buy, quote for a sell."""
    with order_context():
        if side is OrderSide.BUY:
            return Decimal(quantity) / scale(base_decimals)
        return Decimal(quantity) * Decimal(price) / scale(quote_decimals)


def human_price(price: Decimal, base_decimals: int, quote_decimals: int) -> Decimal:
    """Chain price converted to quote-per-base in human units."""
    with order_context():
        return Decimal(price) / scale(quote_decimals - base_decimals)
