"""SwapManager orchestrates Injective spot-market swaps."""

from __future__ import annotations

import asyncio
import logging
import random
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

import structlog
from pydantic import ValidationError

from ...config import settings
from ...providers.base import Broadcaster, BroadcastReceipt, MarketDataProvider, WalletProvider
from ...providers.injective_indexer import InjectiveIndexerProvider
from ...providers.lcd_broadcaster import LcdBroadcaster
from ...types.requests import SwapTokenRequest
from ..recovery.errors import (
    BookUnavailableError,
    BroadcastFailedError,
    MarketUnavailableError,
    OrderConstructionError,
    ServiceTimeoutError,
    SwapStageError,
    SwapValidationError,
    classify_error,
)
from .denoms import normalize_denom
from .markets import find_market
from .messages import OrderMessageBuilder, get_order_message_builder
from .models import (
    OrderBookSnapshot,
    OrderSide,
    PricedOrder,
    SwapResult,
    SwapStage,
    TradeIntent,
)
from .pricing import price_from_book
from .simulator import SwapSimulator
from .units import estimated_output, human_price, to_order_units

T = TypeVar("T")

_slog = structlog.stdlib.get_logger("swap.manager")

# Error type an unexpected exception is filed under, per failing stage.
_STAGE_ERRORS: Dict[SwapStage, Type[SwapStageError]] = {
    SwapStage.START: MarketUnavailableError,
    SwapStage.NORMALIZED: MarketUnavailableError,
    SwapStage.MARKET_FOUND: BookUnavailableError,
    SwapStage.BOOK_FETCHED: BookUnavailableError,
    SwapStage.PRICED: BroadcastFailedError,
}


@dataclass
class SwapRun:
    """State of one swap request as it moves through the stages."""

    request: SwapTokenRequest
    swap_id: str
    stage: SwapStage = SwapStage.START
    from_normalized: Optional[str] = None
    to_normalized: Optional[str] = None
    intent: Optional[TradeIntent] = None
    book: Optional[OrderBookSnapshot] = None
    execution_price: Optional[Decimal] = None
    order: Optional[PricedOrder] = None
    receipt: Optional[BroadcastReceipt] = None
    failure: Optional[SwapStageError] = None
    result: Optional[SwapResult] = None


def _require(value: Optional[T], what: str, run: SwapRun) -> T:
    if value is None:
        raise RuntimeError(f"Swap {run.swap_id} reached stage {run.stage.value} without a {what}")
    return value


class SwapManager:
    """Runs a swap through discovery, pricing and submission.

    Stages: START -> NORMALIZED -> MARKET_FOUND -> BOOK_FETCHED -> PRICED ->
    SUBMITTED -> DONE. A failure in any stage before SUBMITTED moves the run
    to SIMULATED, which produces a flagged synthetic result. Once the
    broadcaster returns a transaction hash the result is always real.

    The manager holds no per-request state, so one instance can serve
    concurrent swaps. It does not serialize broadcasts: when several swaps
    share one wallet, the wallet or broadcaster must order signatures so
    account sequence numbers do not collide.
    """

    def __init__(
        self,
        *,
        market_data: MarketDataProvider,
        broadcaster: Optional[Broadcaster] = None,
        wallet: Optional[WalletProvider] = None,
        simulator: Optional[SwapSimulator] = None,
        message_builder: Optional[OrderMessageBuilder] = None,
        market_list_timeout_s: Optional[float] = None,
        orderbook_timeout_s: Optional[float] = None,
        broadcast_timeout_s: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._market_data = market_data
        self._broadcaster = broadcaster
        self._wallet = wallet
        self._simulator = simulator or SwapSimulator()
        self._message_builder = message_builder or get_order_message_builder(settings.order_message_format)
        self._market_list_timeout_s = market_list_timeout_s or settings.market_list_timeout_seconds
        self._orderbook_timeout_s = orderbook_timeout_s or settings.orderbook_timeout_seconds
        self._broadcast_timeout_s = broadcast_timeout_s or settings.broadcast_timeout_seconds

        self._handlers: Dict[SwapStage, Callable[[SwapRun], Awaitable[SwapStage]]] = {
            SwapStage.START: self._normalize,
            SwapStage.NORMALIZED: self._resolve_market,
            SwapStage.MARKET_FOUND: self._fetch_orderbook,
            SwapStage.BOOK_FETCHED: self._price,
            SwapStage.PRICED: self._submit,
            SwapStage.SUBMITTED: self._finish,
            SwapStage.SIMULATED: self._simulate,
        }

    async def swap(
        self,
        from_denom: str,
        to_denom: str,
        amount: Any,
        slippage: Any = None,
    ) -> SwapResult:
        """Swap ``amount`` of ``from_denom`` into ``to_denom``.

        Raises ``SwapValidationError`` for malformed input. Every other
        failure is absorbed into a simulated result.
        """
        request = self._validate(from_denom, to_denom, amount, slippage)
        run = SwapRun(request=request, swap_id=uuid.uuid4().hex[:12])

        with structlog.contextvars.bound_contextvars(swap_id=run.swap_id):
            self._logger.info(
                f"Preparing to swap {request.amount} {request.from_denom} to {request.to_denom}"
            )
            return await self._run(run)

    def _validate(self, from_denom: Any, to_denom: Any, amount: Any, slippage: Any) -> SwapTokenRequest:
        if slippage is None:
            slippage = settings.default_slippage_percent
        try:
            return SwapTokenRequest(
                from_denom=from_denom,
                to_denom=to_denom,
                amount=amount,
                slippage=slippage,
            )
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            raise SwapValidationError(
                f"Invalid swap request: {problems}",
                errors=exc.errors(include_url=False),
            ) from exc

    async def _run(self, run: SwapRun) -> SwapResult:
        while run.stage is not SwapStage.DONE:
            handler = self._handlers[run.stage]
            if run.stage in (SwapStage.SUBMITTED, SwapStage.SIMULATED):
                # No escape edge from here: the outcome is already decided.
                run.stage = await handler(run)
                continue
            try:
                next_stage = await handler(run)
            except SwapStageError as exc:
                next_stage = self._degrade(run, exc)
            except Exception as exc:
                wrapper = _STAGE_ERRORS[run.stage]
                next_stage = self._degrade(run, wrapper(f"{type(exc).__name__}: {exc}", cause=exc))
            else:
                _slog.debug("swap_stage_completed", stage=run.stage.value, next_stage=next_stage.value)
            run.stage = next_stage

        return _require(run.result, "result", run)

    def _degrade(self, run: SwapRun, error: SwapStageError) -> SwapStage:
        context = classify_error(error.cause) if error.cause is not None else error.context
        _slog.warning(
            "swap_degraded_to_simulation",
            failed_stage=run.stage.value,
            error_stage=error.stage,
            category=context.category.value,
            error=error.message,
        )
        run.failure = error
        return SwapStage.SIMULATED

    async def _call_with_timeout(self, awaitable: Awaitable[T], timeout_s: float, operation: str) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout_s)
        except asyncio.TimeoutError as exc:
            raise ServiceTimeoutError(f"{operation} exceeded {timeout_s}s", operation=operation) from exc

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _normalize(self, run: SwapRun) -> SwapStage:
        run.from_normalized = normalize_denom(run.request.from_denom)
        run.to_normalized = normalize_denom(run.request.to_denom)
        return SwapStage.NORMALIZED

    async def _resolve_market(self, run: SwapRun) -> SwapStage:
        try:
            markets = await self._call_with_timeout(
                self._market_data.list_markets(),
                self._market_list_timeout_s,
                "list spot markets",
            )
        except Exception as exc:
            raise MarketUnavailableError(f"Error fetching markets: {exc}", cause=exc) from exc

        if not markets:
            raise MarketUnavailableError("No markets available on Injective")

        self._logger.info(f"Looking for market with {run.from_normalized} and {run.to_normalized}")
        match = find_market(markets, run.from_normalized or "", run.to_normalized or "")
        if match is None:
            raise MarketUnavailableError(
                f"No market found for token pair {run.request.from_denom}/{run.request.to_denom}"
            )

        run.intent = TradeIntent(
            market=match.market,
            side=match.side,
            amount=run.request.amount,
            slippage_percent=run.request.slippage,
        )
        self._logger.info(f"Found market: {match.market.market_id} ({match.side.value})")
        return SwapStage.MARKET_FOUND

    async def _fetch_orderbook(self, run: SwapRun) -> SwapStage:
        intent = _require(run.intent, "trade intent", run)
        market_id = intent.market.market_id
        try:
            run.book = await self._call_with_timeout(
                self._market_data.fetch_orderbook(market_id),
                self._orderbook_timeout_s,
                f"fetch order book {market_id}",
            )
        except BookUnavailableError:
            raise
        except Exception as exc:
            raise BookUnavailableError(f"Error fetching orderbook: {exc}", cause=exc) from exc
        return SwapStage.BOOK_FETCHED

    async def _price(self, run: SwapRun) -> SwapStage:
        intent = _require(run.intent, "trade intent", run)
        book = _require(run.book, "order book", run)
        price = price_from_book(book, intent.side, intent.slippage_percent)
        if price is None:
            empty_side = "sell" if intent.side is OrderSide.BUY else "buy"
            raise BookUnavailableError(f"No {empty_side} orders in the orderbook")

        run.execution_price = price
        self._logger.info(f"Using price: {price} with {run.request.slippage}% slippage")
        return SwapStage.PRICED

    async def _submit(self, run: SwapRun) -> SwapStage:
        intent = _require(run.intent, "trade intent", run)
        execution_price = _require(run.execution_price, "execution price", run)
        if self._wallet is None or self._broadcaster is None:
            raise OrderConstructionError("No wallet configured to sign the order")

        market = intent.market
        try:
            units = to_order_units(
                intent.side,
                intent.amount,
                market.base.decimals,
                market.quote.decimals,
                execution_price,
            )
            order = PricedOrder(
                market_id=market.market_id,
                side=intent.side,
                price=units.price,
                quantity=units.quantity,
            )
            message = self._message_builder.build(order, self._wallet.address())
        except Exception as exc:
            raise OrderConstructionError(f"Error creating market order message: {exc}", cause=exc) from exc

        run.order = order
        self._logger.info(f"Order quantity: {order.quantity}; broadcasting transaction...")

        try:
            receipt = await self._call_with_timeout(
                self._broadcaster.submit(message, self._wallet),
                self._broadcast_timeout_s,
                "broadcast order",
            )
        except BroadcastFailedError:
            raise
        except Exception as exc:
            raise BroadcastFailedError(f"Error broadcasting transaction: {exc}", cause=exc) from exc

        if not receipt or not receipt.tx_hash:
            raise BroadcastFailedError("Broadcaster returned no transaction hash")

        run.receipt = receipt
        self._logger.info(f"Transaction successful: {receipt.tx_hash}")
        return SwapStage.SUBMITTED

    async def _finish(self, run: SwapRun) -> SwapStage:
        intent = _require(run.intent, "trade intent", run)
        order = _require(run.order, "priced order", run)
        receipt = _require(run.receipt, "broadcast receipt", run)
        market = intent.market
        quantity = Decimal(order.quantity)
        price = Decimal(order.price)

        run.result = SwapResult(
            from_denom=run.request.from_denom,
            to_denom=run.request.to_denom,
            input_amount=run.request.amount,
            estimated_output_amount=estimated_output(
                intent.side, quantity, price, market.base.decimals, market.quote.decimals
            ),
            execution_price=human_price(price, market.base.decimals, market.quote.decimals),
            tx_hash=receipt.tx_hash,
            market_id=market.market_id,
            order_side=intent.side,
            is_simulated=False,
        )
        _slog.info(
            "swap_submitted",
            market_id=market.market_id,
            side=intent.side.value,
            execution_price=run.result.execution_price,
            estimated_output=run.result.estimated_output_amount,
            tx_hash=receipt.tx_hash,
        )
        return SwapStage.DONE

    async def _simulate(self, run: SwapRun) -> SwapStage:
        run.result = self._simulator.simulate(
            run.request.from_denom,
            run.request.to_denom,
            run.request.amount,
            run.request.slippage,
            order_side=run.intent.side if run.intent else OrderSide.BUY,
            reason=run.failure.message if run.failure else None,
        )
        return SwapStage.DONE


def create_swap_manager(
    *,
    wallet: Optional[WalletProvider] = None,
    market_data: Optional[MarketDataProvider] = None,
    broadcaster: Optional[Broadcaster] = None,
) -> SwapManager:
    """Build a SwapManager wired to the configured Injective network."""
    rng = random.Random(settings.simulation_seed) if settings.simulation_seed is not None else None
    return SwapManager(
        market_data=market_data or InjectiveIndexerProvider(),
        broadcaster=broadcaster or LcdBroadcaster(),
        wallet=wallet,
        simulator=SwapSimulator(rng),
    )
