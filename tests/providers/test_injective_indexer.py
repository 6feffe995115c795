"""
Tests for the Injective indexer provider.

HTTP is served by httpx.MockTransport; no network access.
"""

from decimal import Decimal

import pytest
import httpx
from unittest.mock import AsyncMock, patch

from injective_swap.core.recovery import NetworkError, NotAvailableError, RateLimitError, ServiceTimeoutError
from injective_swap.providers.injective_indexer import InjectiveIndexerProvider

BASE_URL = "https://indexer.test"
USDT = "peggy0xdAC17F958D2ee523a2206206994597C13D831ec7"

MARKETS_RESPONSE = {
    "markets": [
        {
            "marketId": "0xinjusdt",
            "marketStatus": "active",
            "ticker": "INJ/USDT",
            "baseDenom": "inj",
            "baseTokenMeta": {"symbol": "INJ", "decimals": 18},
            "quoteDenom": USDT,
            "quoteTokenMeta": {"symbol": "USDT", "decimals": 6},
        }
    ]
}

ORDERBOOK_RESPONSE = {
    "orderbook": {
        "buys": [{"price": "0.000000000021", "quantity": "1000000000000000000"}],
        "sells": [{"price": "0.000000000023", "quantity": "2000000000000000000"}],
    }
}


def _provider(handler, **kwargs) -> InjectiveIndexerProvider:
    return InjectiveIndexerProvider(
        base_url=BASE_URL,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


# =============================================================================
# Happy Path
# =============================================================================

class TestInjectiveIndexerProvider:
    """Tests for market and order book fetching."""

    @pytest.mark.asyncio
    async def test_list_markets(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=MARKETS_RESPONSE)

        markets = await _provider(handler).list_markets()

        assert len(markets) == 1
        assert markets[0].market_id == "0xinjusdt"
        assert markets[0].quote.decimals == 6
        assert seen[0].url.path == "/api/exchange/spot/v1/markets"
        assert seen[0].url.params["marketStatus"] == "active"

    @pytest.mark.asyncio
    async def test_fetch_orderbook(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=ORDERBOOK_RESPONSE)

        book = await _provider(handler).fetch_orderbook("0xinjusdt")

        assert seen[0].url.path == "/api/exchange/spot/v2/orderbook/0xinjusdt"
        assert book.best_ask.price == Decimal("0.000000000023")

    @pytest.mark.asyncio
    async def test_health_check(self):
        provider = _provider(lambda request: httpx.Response(200, json=MARKETS_RESPONSE))

        health = await provider.health_check()

        assert health["status"] == "healthy"


# =============================================================================
# Failure Mapping
# =============================================================================

class TestInjectiveIndexerFailures:
    """Transport failures surface as typed recoverable errors."""

    @pytest.mark.asyncio
    async def test_http_error_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503, text="unavailable")

        with pytest.raises(NotAvailableError) as exc_info:
            await _provider(handler, max_attempts=3).list_markets()

        assert exc_info.value.context.details["status_code"] == 503
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_connect_error_retried_then_raised(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        with patch("injective_swap.core.recovery.strategies.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(NetworkError):
                await _provider(handler, max_attempts=2).list_markets()

        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_connect_error_then_success(self):
        responses = iter([None, MARKETS_RESPONSE])

        def handler(request: httpx.Request) -> httpx.Response:
            body = next(responses)
            if body is None:
                raise httpx.ConnectError("connection reset", request=request)
            return httpx.Response(200, json=body)

        with patch("injective_swap.core.recovery.strategies.asyncio.sleep", new=AsyncMock()):
            markets = await _provider(handler, max_attempts=2).list_markets()

        assert markets[0].market_id == "0xinjusdt"

    @pytest.mark.asyncio
    async def test_rate_limit_waits_for_retry_after(self):
        responses = iter([
            httpx.Response(429, headers={"Retry-After": "3"}),
            httpx.Response(200, json=MARKETS_RESPONSE),
        ])

        with patch("injective_swap.core.recovery.strategies.asyncio.sleep", new=AsyncMock()) as sleep:
            markets = await _provider(lambda request: next(responses), max_attempts=2).list_markets()

        assert markets[0].market_id == "0xinjusdt"
        sleep.assert_awaited_once_with(3.0)

    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self):
        provider = _provider(
            lambda request: httpx.Response(429, headers={"Retry-After": "Wed, 21 Oct 2026 07:28:00 GMT"}),
            max_attempts=1,
        )

        with pytest.raises(RateLimitError) as exc_info:
            await provider.fetch_orderbook("0xinjusdt")

        assert exc_info.value.retry_after == 1.0

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(ServiceTimeoutError):
            await _provider(handler, max_attempts=1).fetch_orderbook("0xinjusdt")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        provider = _provider(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(NotAvailableError):
            await provider.list_markets()

    @pytest.mark.asyncio
    async def test_health_check_reports_error(self):
        provider = _provider(lambda request: httpx.Response(500))

        health = await provider.health_check()

        assert health["status"] == "error"
