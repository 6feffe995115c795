"""Async client for the Injective indexer's spot exchange REST gateway."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..core.recovery.errors import NetworkError, NotAvailableError, RateLimitError, ServiceTimeoutError
from ..core.recovery.strategies import RetryConfig, RetryStrategy
from ..core.swap.models import Market, OrderBookSnapshot
from .base import MarketDataProvider
from .schema import parse_markets, parse_orderbook

logger = logging.getLogger(__name__)


def _retry_after_seconds(response: httpx.Response, default: float = 1.0) -> float:
    # Only the delta-seconds form; HTTP-date values fall back to the default
    try:
        return max(float(response.headers.get("retry-after", default)), 0.0)
    except ValueError:
        return default


class InjectiveIndexerProvider(MarketDataProvider):
    """
    Spot market data from the Injective indexer.

    Provides:
    - Spot market listing (``/api/exchange/spot/v1/markets``)
    - Order book snapshots (``/api/exchange/spot/v2/orderbook/{marketId}``)

    No API key required. Transport failures are retried a bounded number of
    times (honouring ``Retry-After`` on HTTP 429) and then surface as
    NetworkError / RateLimitError / ServiceTimeoutError / NotAvailableError.
    """

    name = "injective_indexer"

    MARKETS_PATH = "/api/exchange/spot/v1/markets"
    ORDERBOOK_PATH = "/api/exchange/spot/v2/orderbook/{market_id}"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        max_attempts: Optional[int] = None,
        default_decimals: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.resolved_indexer_url).rstrip("/")
        self.timeout_s = timeout_s if timeout_s is not None else settings.request_timeout_seconds
        self.default_decimals = (
            default_decimals if default_decimals is not None else settings.default_decimals
        )
        self._transport = transport
        self._retry = RetryStrategy(
            RetryConfig(max_attempts=max_attempts or settings.market_data_max_attempts),
            logger=logger,
            retry_on=(NetworkError, RateLimitError, ServiceTimeoutError),
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "accept": "application/json",
            "user-agent": "injective-swap/0.1",
        }

    async def ready(self) -> bool:
        return bool(self.base_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "No indexer URL configured"}

        try:
            async with self._client() as client:
                response = await client.get(self.MARKETS_PATH, params={"marketStatus": "active"})
                response.raise_for_status()
                return {
                    "status": "healthy",
                    "latency_ms": int(response.elapsed.total_seconds() * 1000),
                }
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            headers=self._headers(),
            transport=self._transport,
        )

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        async def attempt() -> Any:
            try:
                async with self._client() as client:
                    response = await client.get(path, params=params)
                    response.raise_for_status()
                    return response.json()
            except httpx.TimeoutException as exc:
                raise ServiceTimeoutError(f"Indexer request {path} timed out", operation=path, provider=self.name) from exc
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                if status == 429:
                    raise RateLimitError(
                        f"Indexer rate limited {path}",
                        retry_after=_retry_after_seconds(exc.response),
                        provider=self.name,
                    ) from exc
                raise NotAvailableError(
                    f"Indexer returned HTTP {status} for {path}",
                    provider=self.name,
                    status_code=status,
                ) from exc
            except httpx.RequestError as exc:
                raise NetworkError(f"Indexer request {path} failed: {exc}", provider=self.name) from exc
            except ValueError as exc:
                raise NotAvailableError(f"Indexer returned invalid JSON for {path}", provider=self.name) from exc

        return await self._retry.execute(attempt, operation_name=f"GET {path}")

    async def list_markets(self) -> List[Market]:
        raw = await self._get_json(self.MARKETS_PATH, params={"marketStatus": "active"})
        markets = parse_markets(raw, self.default_decimals)
        logger.info(f"Fetched {len(markets)} spot markets from {self.base_url}")
        return markets

    async def fetch_orderbook(self, market_id: str) -> OrderBookSnapshot:
        raw = await self._get_json(self.ORDERBOOK_PATH.format(market_id=market_id))
        return parse_orderbook(raw)
