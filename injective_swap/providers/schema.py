"""
Mapping of indexer responses onto the canonical swap models.

The indexer has shipped several response layouts for the same data (bare
lists or wrapped ones, ``buys``/``bids``, ``baseToken``/``baseDenom``, and
so on). All of that tolerance lives here so the swap logic only ever sees
``Market`` and ``OrderBookSnapshot``.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.recovery.errors import BookUnavailableError
from ..core.swap.constants import DEFAULT_DECIMALS
from ..core.swap.models import AssetInfo, Market, OrderBookSnapshot, PriceLevel

logger = logging.getLogger(__name__)

MARKET_LIST_KEYS: Tuple[str, ...] = ('markets', 'data')
MARKET_ID_KEYS: Tuple[str, ...] = ('marketId', 'market_id', 'id')
BID_KEYS: Tuple[str, ...] = ('buys', 'bids')
ASK_KEYS: Tuple[str, ...] = ('sells', 'asks')


def _first_present(source: Dict[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = source.get(key)
        if value is not None and value != '':
            return value
    return None


def _first_list(source: Dict[str, Any], keys: Iterable[str]) -> Optional[List[Any]]:
    for key in keys:
        value = source.get(key)
        if isinstance(value, list):
            return value
    return None


def _parse_decimals(meta: Dict[str, Any], default_decimals: int) -> int:
    raw = meta.get('decimals')
    if raw is None:
        raw = meta.get('decimal')
    if raw is None:
        return default_decimals
    try:
        decimals = int(raw)
    except (TypeError, ValueError):
        return default_decimals
    return decimals if decimals >= 0 else default_decimals


def _parse_asset(entry: Dict[str, Any], side: str, default_decimals: int) -> Optional[AssetInfo]:
    token = _first_present(entry, (f'{side}Token', f'{side}Denom', f'{side}Asset', f'{side}_denom'))
    if isinstance(token, str):
        denom = token
        meta = entry.get(f'{side}TokenMeta') or entry.get(f'{side}_token_meta') or {}
    elif isinstance(token, dict):
        denom = token.get('denom')
        meta = token
    else:
        return None

    if not isinstance(denom, str) or not denom:
        return None
    if not isinstance(meta, dict):
        meta = {}

    symbol = meta.get('symbol')
    return AssetInfo(
        denom=denom,
        decimals=_parse_decimals(meta, default_decimals),
        symbol=symbol if isinstance(symbol, str) else None,
    )


def parse_market(entry: Any, default_decimals: int = DEFAULT_DECIMALS) -> Optional[Market]:
    """Map one market record, or return ``None`` when it cannot be used."""
    if not isinstance(entry, dict):
        return None

    market_id = _first_present(entry, MARKET_ID_KEYS)
    base = _parse_asset(entry, 'base', default_decimals)
    quote = _parse_asset(entry, 'quote', default_decimals)
    if not market_id or base is None or quote is None:
        return None

    ticker = entry.get('ticker')
    return Market(
        market_id=str(market_id),
        base=base,
        quote=quote,
        ticker=ticker if isinstance(ticker, str) else None,
    )


def parse_markets(raw: Any, default_decimals: int = DEFAULT_DECIMALS) -> List[Market]:
    """Map a market listing response, keeping listing order.

    Unknown response layouts yield an empty list; records that cannot be
    decoded are skipped.
    """
    if isinstance(raw, list):
        entries: Sequence[Any] = raw
    elif isinstance(raw, dict):
        entries = _first_list(raw, MARKET_LIST_KEYS) or []
    else:
        entries = []

    markets: List[Market] = []
    skipped = 0
    for entry in entries:
        market = parse_market(entry, default_decimals)
        if market is None:
            skipped += 1
            continue
        markets.append(market)

    if skipped:
        logger.debug(f"Skipped {skipped} undecodable market records")
    return markets


def _parse_level(entry: Any) -> PriceLevel:
    if isinstance(entry, dict):
        price_raw = _first_present(entry, ('price', 'p'))
        quantity_raw = _first_present(entry, ('quantity', 'q'))
    elif isinstance(entry, (list, tuple)) and entry:
        price_raw = entry[0]
        quantity_raw = entry[1] if len(entry) > 1 else None
    else:
        raise BookUnavailableError(f"Malformed order book level: {entry!r}")

    try:
        price = Decimal(str(price_raw))
        quantity = Decimal(str(quantity_raw)) if quantity_raw is not None else Decimal(0)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise BookUnavailableError(f"Malformed order book level: {entry!r}", cause=exc) from exc

    if not price.is_finite() or price <= 0 or not quantity.is_finite():
        raise BookUnavailableError(f"Invalid order book price level: {entry!r}")
    return PriceLevel(price=price, quantity=quantity)


def parse_orderbook(raw: Any) -> OrderBookSnapshot:
    """Map an order book response; raises ``BookUnavailableError`` when malformed."""
    if not isinstance(raw, dict):
        raise BookUnavailableError("Order book response is not an object")

    book = raw.get('orderbook') if isinstance(raw.get('orderbook'), dict) else raw
    bids = [_parse_level(entry) for entry in (_first_list(book, BID_KEYS) or [])]
    asks = [_parse_level(entry) for entry in (_first_list(book, ASK_KEYS) or [])]

    return OrderBookSnapshot(
        bids=tuple(sorted(bids, key=lambda level: level.price, reverse=True)),
        asks=tuple(sorted(asks, key=lambda level: level.price)),
    )
