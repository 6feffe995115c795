"""
Error Recovery Module

Provides error classification and transport-level retry for the swap path
and the external services it talks to.
"""

from .errors import (
    RecoverableError,
    UnrecoverableError,
    RateLimitError,
    NetworkError,
    ServiceTimeoutError,
    NotAvailableError,
    SwapStageError,
    MarketUnavailableError,
    BookUnavailableError,
    OrderConstructionError,
    BroadcastFailedError,
    SwapValidationError,
    classify_error,
)
from .strategies import RetryConfig, RetryStrategy

__all__ = [
    # Errors
    "RecoverableError",
    "UnrecoverableError",
    "RateLimitError",
    "NetworkError",
    "ServiceTimeoutError",
    "NotAvailableError",
    "SwapStageError",
    "MarketUnavailableError",
    "BookUnavailableError",
    "OrderConstructionError",
    "BroadcastFailedError",
    "SwapValidationError",
    "classify_error",
    # Strategies
    "RetryConfig",
    "RetryStrategy",
]
