"""Spot market order message construction.

Two message layouts are supported, matching the two generations of the
exchange SDK. The layout is chosen once, when the swap manager is built,
via ``get_order_message_builder``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from bech32 import bech32_decode, convertbits

from .constants import (
    ADDRESS_HRP,
    DEFAULT_SUBACCOUNT_NONCE_HEX,
    LEGACY_ORDER_SIDE_CODES,
    LEGACY_TIME_IN_FORCE_IOC,
    MSG_CREATE_SPOT_MARKET_ORDER_TYPE_URL,
)
from .models import PricedOrder


def default_subaccount_id(address: str) -> str:
    """Default (nonce 0) subaccount id of an ``inj1...`` address."""
    hrp, data = bech32_decode(address)
    if hrp != ADDRESS_HRP or data is None:
        raise ValueError(f"Not an Injective account address: {address!r}")
    raw = convertbits(data, 5, 8, False)
    if raw is None or len(raw) != 20:
        raise ValueError(f"Unexpected address payload length for {address!r}")
    return '0x' + bytes(raw).hex() + DEFAULT_SUBACCOUNT_NONCE_HEX


class OrderMessageBuilder(ABC):
    """Builds a MsgCreateSpotMarketOrder payload for one SDK generation."""

    format_name: str

    @abstractmethod
    def build(self, order: PricedOrder, sender: str) -> Dict[str, Any]:
        """Return the message for ``order`` placed by ``sender``."""


class ProtoOrderMessageBuilder(OrderMessageBuilder):
    """Proto-JSON layout (``@type`` plus nested snake_case order)."""

    format_name = 'proto'

    def build(self, order: PricedOrder, sender: str) -> Dict[str, Any]:
        return {
            '@type': MSG_CREATE_SPOT_MARKET_ORDER_TYPE_URL,
            'sender': sender,
            'order': {
                'market_id': order.market_id,
                'order_info': {
                    'subaccount_id': default_subaccount_id(sender),
                    'fee_recipient': sender,
                    'price': order.price,
                    'quantity': order.quantity,
                    'cid': '',
                },
                'order_type': order.side.value.upper(),
                'trigger_price': '0',
            },
        }


class LegacyOrderMessageBuilder(OrderMessageBuilder):
    """Flat camelCase layout with numeric enums."""

    format_name = 'legacy'

    def build(self, order: PricedOrder, sender: str) -> Dict[str, Any]:
        return {
            'sender': sender,
            'marketId': order.market_id,
            'subaccountId': default_subaccount_id(sender),
            'feeRecipient': sender,
            'orderType': 'market',
            'orderSide': LEGACY_ORDER_SIDE_CODES[order.side.value],
            'price': order.price,
            'quantity': order.quantity,
            'timeInForce': LEGACY_TIME_IN_FORCE_IOC,
            'triggerPrice': '0',
        }


_BUILDERS = {
    ProtoOrderMessageBuilder.format_name: ProtoOrderMessageBuilder,
    LegacyOrderMessageBuilder.format_name: LegacyOrderMessageBuilder,
}


def get_order_message_builder(format_name: str) -> OrderMessageBuilder:
    """Return the builder for ``format_name`` (``proto`` or ``legacy``)."""
    builder_cls = _BUILDERS.get((format_name or '').strip().lower())
    if builder_cls is None:
        raise ValueError(
            f"Unknown order message format {format_name!r}; expected one of {sorted(_BUILDERS)}"
        )
    return builder_cls()
