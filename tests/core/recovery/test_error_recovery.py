"""
Tests for the Error Recovery System

Tests for error classification and the transport retry strategy.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, patch

from injective_swap.core.recovery import (
    # Errors
    RecoverableError,
    UnrecoverableError,
    RateLimitError,
    NetworkError,
    ServiceTimeoutError,
    NotAvailableError,
    MarketUnavailableError,
    BookUnavailableError,
    OrderConstructionError,
    BroadcastFailedError,
    SwapValidationError,
    classify_error,
    # Strategies
    RetryConfig,
    RetryStrategy,
)
from injective_swap.core.recovery.errors import ErrorCategory


# =============================================================================
# Error Classification Tests
# =============================================================================

class TestErrorClassification:
    """Tests for error classification."""

    def test_recoverable_error_is_recoverable(self):
        """Test that RecoverableError is classified as recoverable."""
        error = RecoverableError("Test error")
        assert error.context.recoverable is True

    def test_unrecoverable_error_is_not_recoverable(self):
        """Test that UnrecoverableError is classified as not recoverable."""
        error = UnrecoverableError("Test error")
        assert error.context.recoverable is False

    def test_network_error(self):
        """Test NetworkError properties."""
        error = NetworkError(provider="injective_indexer")

        assert error.category == ErrorCategory.NETWORK
        assert error.retry_after == 1.0
        assert error.context.provider == "injective_indexer"
        assert error.context.recoverable is True

    def test_rate_limit_error(self):
        """Test RateLimitError carries the server-suggested delay."""
        error = RateLimitError(retry_after=3.0, provider="injective_indexer")

        assert error.category == ErrorCategory.RATE_LIMIT
        assert error.retry_after == 3.0
        assert error.context.retry_after_seconds == 3.0
        assert error.context.recoverable is True

    def test_service_timeout_error(self):
        """Test ServiceTimeoutError keeps the operation name."""
        error = ServiceTimeoutError("slow", operation="list spot markets")

        assert error.category == ErrorCategory.TIMEOUT
        assert error.context.details["operation"] == "list spot markets"

    def test_not_available_error(self):
        """Test NotAvailableError records the HTTP status."""
        error = NotAvailableError("bad gateway", provider="injective_indexer", status_code=502)

        assert error.category == ErrorCategory.NOT_AVAILABLE
        assert error.context.details["status_code"] == 502

    @pytest.mark.parametrize(
        "error_cls,stage,category",
        [
            (MarketUnavailableError, "market", ErrorCategory.MARKET),
            (BookUnavailableError, "order_book", ErrorCategory.ORDER_BOOK),
            (OrderConstructionError, "order_construction", ErrorCategory.ORDER_CONSTRUCTION),
            (BroadcastFailedError, "broadcast", ErrorCategory.BROADCAST),
        ],
    )
    def test_stage_errors(self, error_cls, stage, category):
        """Test each stage error carries its stage and category."""
        error = error_cls("failed")

        assert isinstance(error, RecoverableError)
        assert error.category == category
        assert error.context.stage == stage
        assert error.cause is None

    def test_stage_error_keeps_cause(self):
        """Test stage errors keep the underlying exception."""
        cause = ConnectionError("refused")
        error = MarketUnavailableError("Error fetching markets", cause=cause)

        assert error.cause is cause
        assert error.context.details["cause"] == "ConnectionError: refused"

    def test_validation_error(self):
        """Test SwapValidationError is unrecoverable and keeps field errors."""
        error = SwapValidationError("bad amount", errors=[{"loc": ("amount",), "msg": "must be > 0"}])

        assert isinstance(error, UnrecoverableError)
        assert error.category == ErrorCategory.VALIDATION
        assert error.errors[0]["loc"] == ("amount",)

    def test_classify_typed_error_uses_own_context(self):
        """Test classify_error returns the context of typed errors."""
        error = BroadcastFailedError("rejected")
        assert classify_error(error) is error.context

    def test_classify_asyncio_timeout(self):
        """Test asyncio timeouts are classified as TIMEOUT."""
        context = classify_error(asyncio.TimeoutError())

        assert context.category == ErrorCategory.TIMEOUT
        assert context.recoverable is True

    def test_classify_generic_exception(self):
        """Test classification of generic exceptions by message."""
        network_error = Exception("Connection refused")
        context = classify_error(network_error)
        assert context.category == ErrorCategory.NETWORK

        timeout_error = Exception("Request timed out")
        context = classify_error(timeout_error)
        assert context.category == ErrorCategory.TIMEOUT

        unknown_error = Exception("Something weird happened")
        context = classify_error(unknown_error)
        assert context.category == ErrorCategory.UNKNOWN
        assert context.recoverable is True


# =============================================================================
# Retry Strategy Tests
# =============================================================================

class TestRetryStrategy:
    """Tests for retry strategy."""

    @pytest.mark.asyncio
    async def test_success_on_first_try(self):
        """Test operation succeeds on first attempt."""
        strategy = RetryStrategy(RetryConfig(max_attempts=3))
        operation = AsyncMock(return_value="success")

        result = await strategy.execute(operation)

        assert result == "success"
        assert operation.call_count == 1

    @pytest.mark.asyncio
    async def test_success_after_retries(self):
        """Test operation succeeds after transient failures."""
        strategy = RetryStrategy(RetryConfig(max_attempts=3, initial_delay_seconds=0, jitter=False))
        operation = AsyncMock(side_effect=[
            ServiceTimeoutError("fail 1"),
            ServiceTimeoutError("fail 2"),
            "success",
        ])

        result = await strategy.execute(operation)

        assert result == "success"
        assert operation.call_count == 3

    @pytest.mark.asyncio
    async def test_all_attempts_fail(self):
        """Test the last error is raised when all attempts fail."""
        strategy = RetryStrategy(RetryConfig(max_attempts=2, initial_delay_seconds=0, jitter=False))
        operation = AsyncMock(side_effect=ServiceTimeoutError("always fails"))

        with pytest.raises(ServiceTimeoutError):
            await strategy.execute(operation)

        assert operation.call_count == 2

    @pytest.mark.asyncio
    async def test_no_retry_on_unrecoverable(self):
        """Test no retry for unrecoverable errors."""
        strategy = RetryStrategy(RetryConfig(max_attempts=3))
        operation = AsyncMock(side_effect=SwapValidationError("bad request"))

        with pytest.raises(SwapValidationError):
            await strategy.execute(operation)

        assert operation.call_count == 1

    @pytest.mark.asyncio
    async def test_retry_on_limits_retried_types(self):
        """Test only errors listed in retry_on are retried."""
        strategy = RetryStrategy(
            RetryConfig(max_attempts=3, initial_delay_seconds=0, jitter=False),
            retry_on=(ServiceTimeoutError,),
        )
        operation = AsyncMock(side_effect=NotAvailableError("HTTP 404", status_code=404))

        with pytest.raises(NotAvailableError):
            await strategy.execute(operation)

        assert operation.call_count == 1

    @pytest.mark.asyncio
    async def test_retry_after_is_capped(self):
        """Test the server-suggested delay is honoured up to max_delay."""
        strategy = RetryStrategy(RetryConfig(max_attempts=2, max_delay_seconds=0.25))
        operation = AsyncMock(side_effect=[NetworkError("down"), "ok"])

        with patch("injective_swap.core.recovery.strategies.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await strategy.execute(operation)

        assert result == "ok"
        sleep.assert_awaited_once_with(0.25)

    def test_delay_calculation(self):
        """Test exponential delay calculation."""
        config = RetryConfig(
            initial_delay_seconds=1.0,
            exponential_base=2.0,
            max_delay_seconds=60.0,
            jitter=False,
        )

        assert config.get_delay(0) == 1.0
        assert config.get_delay(1) == 2.0
        assert config.get_delay(2) == 4.0
        assert config.get_delay(10) == 60.0  # Capped at max
