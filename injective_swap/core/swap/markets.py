"""Market resolution for a denomination pair."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .denoms import normalize_denom
from .models import Market, MarketMatch, OrderSide

logger = logging.getLogger(__name__)


def find_market(
    markets: Iterable[Market],
    from_denom: str,
    to_denom: str,
) -> Optional[MarketMatch]:
    """Find the market trading ``from_denom`` against ``to_denom``.

    Markets are scanned in listing order and the first one whose base/quote
    pair equals the requested pair (in either orientation) wins, even when
    the listing carries several markets for the same pair. Returns ``None``
    when nothing matches.
    """
    normalized_from = normalize_denom(from_denom)
    normalized_to = normalize_denom(to_denom)
    wanted = frozenset((normalized_from, normalized_to))

    for market in markets:
        if market.denoms != wanted:
            continue
        # Receiving the base asset means buying it with the quote asset.
        side = OrderSide.BUY if market.base.denom == normalized_to else OrderSide.SELL
        logger.debug(f"Matched market {market.market_id} ({side.value}) for {normalized_from}/{normalized_to}")
        return MarketMatch(market=market, side=side)

    return None
