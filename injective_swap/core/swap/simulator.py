"""Synthetic swap results used whenever the real path cannot complete."""

from __future__ import annotations

import logging
import random
from decimal import Decimal
from typing import Optional

from .constants import SIMULATED_MARKET_ID, SIMULATED_TX_PREFIX
from .models import OrderSide, SwapResult
from .pricing import slippage_fraction
from .units import order_context

PRICE_QUANTUM = Decimal('0.000001')


class SwapSimulator:
    """Produces clearly flagged swap results without touching the network.

    Output is a pure function of the inputs and the injected ``rng``; pass a
    seeded ``random.Random`` for reproducible results.
    """

    def __init__(self, rng: Optional[random.Random] = None, *, logger: Optional[logging.Logger] = None) -> None:
        self._rng = rng or random.Random()
        self._logger = logger or logging.getLogger(__name__)

    def simulate(
        self,
        from_denom: str,
        to_denom: str,
        amount: Decimal,
        slippage_percent: Decimal,
        *,
        order_side: OrderSide = OrderSide.BUY,
        reason: Optional[str] = None,
    ) -> SwapResult:
        self._logger.warning(
            f"SIMULATING SWAP: {amount} {from_denom} to {to_denom} with {slippage_percent}% slippage"
            + (f" ({reason})" if reason else "")
        )

        price = Decimal(str(self._rng.uniform(1, 11))).quantize(PRICE_QUANTUM)
        with order_context():
            estimated = Decimal(amount) * price * (1 - slippage_fraction(slippage_percent))

        return SwapResult(
            from_denom=from_denom,
            to_denom=to_denom,
            input_amount=Decimal(amount),
            estimated_output_amount=estimated,
            execution_price=price,
            tx_hash=self._synthetic_tx_hash(),
            market_id=SIMULATED_MARKET_ID,
            order_side=order_side,
            is_simulated=True,
            fallback_reason=reason,
        )

    def _synthetic_tx_hash(self) -> str:
        return SIMULATED_TX_PREFIX + ''.join(self._rng.choice('0123456789abcdef') for _ in range(64))
