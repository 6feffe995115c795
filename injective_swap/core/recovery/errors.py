"""
Error Classification

Defines error types for the swap path and its external collaborators.
Errors are classified as recoverable (the swap degrades to a simulated
result) or unrecoverable (surfaced to the caller as-is).
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """Categories of errors for recovery decisions."""

    NETWORK = "network"           # Network/connectivity issues
    RATE_LIMIT = "rate_limit"     # Remote service asked us to slow down
    TIMEOUT = "timeout"           # Operation timed out
    NOT_AVAILABLE = "not_available"  # Remote service answered with an error
    MARKET = "market"             # No tradable market for the pair
    ORDER_BOOK = "order_book"     # Order book missing, empty or malformed
    ORDER_CONSTRUCTION = "order_construction"  # Order message could not be built
    BROADCAST = "broadcast"       # Submission rejected or failed
    VALIDATION = "validation"     # Input validation error
    UNKNOWN = "unknown"           # Unclassified error


@dataclass
class ErrorContext:
    """Additional context about an error."""

    category: ErrorCategory = ErrorCategory.UNKNOWN
    recoverable: bool = True
    retry_after_seconds: Optional[float] = None
    suggested_action: Optional[str] = None
    provider: Optional[str] = None
    stage: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class RecoverableError(Exception):
    """
    Base class for errors that the swap path can absorb.

    These errors are typically transient or environmental:
    - Network issues
    - Timeouts
    - Missing markets or empty order books
    - Rejected broadcasts
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        retry_after: Optional[float] = None,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.retry_after = retry_after
        self.context = context or ErrorContext(category=category, recoverable=True)


class UnrecoverableError(Exception):
    """
    Base class for errors that must reach the caller unchanged.

    These errors require the caller to change its request:
    - Invalid amounts
    - Slippage outside [0, 100]
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.context = context or ErrorContext(category=category, recoverable=False)


# Failures raised by external services
class RateLimitError(RecoverableError):
    """Remote service answered HTTP 429."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: float = 1.0,
        provider: Optional[str] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.RATE_LIMIT,
            retry_after=retry_after,
            context=ErrorContext(
                category=ErrorCategory.RATE_LIMIT,
                recoverable=True,
                retry_after_seconds=retry_after,
                provider=provider,
                suggested_action=f"Wait {retry_after}s before retrying",
            ),
        )


class NetworkError(RecoverableError):
    """Network connectivity error."""

    def __init__(
        self,
        message: str = "Network error",
        provider: Optional[str] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.NETWORK,
            retry_after=1.0,
            context=ErrorContext(
                category=ErrorCategory.NETWORK,
                recoverable=True,
                retry_after_seconds=1.0,
                provider=provider,
                suggested_action="Retry with exponential backoff",
            ),
        )


class ServiceTimeoutError(RecoverableError):
    """Remote call did not answer in time."""

    def __init__(
        self,
        message: str = "Operation timed out",
        operation: Optional[str] = None,
        provider: Optional[str] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.TIMEOUT,
            context=ErrorContext(
                category=ErrorCategory.TIMEOUT,
                recoverable=True,
                provider=provider,
                suggested_action="Retry with longer timeout",
                details={"operation": operation} if operation else {},
            ),
        )


class NotAvailableError(RecoverableError):
    """Remote service answered, but could not serve the request."""

    def __init__(
        self,
        message: str = "Service not available",
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.NOT_AVAILABLE,
            context=ErrorContext(
                category=ErrorCategory.NOT_AVAILABLE,
                recoverable=True,
                provider=provider,
                details={"status_code": status_code} if status_code is not None else {},
            ),
        )


# Swap stage failures. Each one moves the orchestrator to the simulated state.
class SwapStageError(RecoverableError):
    """A stage of the swap path could not complete."""

    stage: str = "unknown"
    stage_category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        details: Dict[str, Any] = {}
        if cause is not None:
            details["cause"] = f"{type(cause).__name__}: {cause}"
        super().__init__(
            message,
            category=self.stage_category,
            context=ErrorContext(
                category=self.stage_category,
                recoverable=True,
                stage=self.stage,
                suggested_action="Result degraded to simulation",
                details=details,
            ),
        )
        self.cause = cause


class MarketUnavailableError(SwapStageError):
    """Market list could not be fetched, was empty, or had no match."""

    stage = "market"
    stage_category = ErrorCategory.MARKET


class BookUnavailableError(SwapStageError):
    """Order book could not be fetched, was malformed, or the needed side was empty."""

    stage = "order_book"
    stage_category = ErrorCategory.ORDER_BOOK


class OrderConstructionError(SwapStageError):
    """The market order message could not be built."""

    stage = "order_construction"
    stage_category = ErrorCategory.ORDER_CONSTRUCTION


class BroadcastFailedError(SwapStageError):
    """The broadcaster rejected the order or did not answer in time."""

    stage = "broadcast"
    stage_category = ErrorCategory.BROADCAST


class SwapValidationError(UnrecoverableError):
    """Swap request failed validation before any stage started."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(
            message,
            category=ErrorCategory.VALIDATION,
            context=ErrorContext(
                category=ErrorCategory.VALIDATION,
                recoverable=False,
                suggested_action="Fix the request parameters",
                details={"errors": errors or []},
            ),
        )
        self.errors = errors or []


def classify_error(error: BaseException) -> ErrorContext:
    """
    Classify an exception and return its error context.

    Typed errors carry their own context; anything else is classified from
    its type and message.
    """
    if isinstance(error, (RecoverableError, UnrecoverableError)):
        return error.context

    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return ErrorContext(
            category=ErrorCategory.TIMEOUT,
            recoverable=True,
            suggested_action="Retry with longer timeout",
        )

    message = str(error).lower()

    network_patterns = [
        "connection",
        "network",
        "unreachable",
        "refused",
        "dns",
        "socket",
        "ssl",
    ]
    if any(p in message for p in network_patterns):
        return ErrorContext(
            category=ErrorCategory.NETWORK,
            recoverable=True,
            retry_after_seconds=1.0,
            suggested_action="Check network connectivity",
        )

    timeout_patterns = ["timeout", "timed out", "deadline"]
    if any(p in message for p in timeout_patterns):
        return ErrorContext(
            category=ErrorCategory.TIMEOUT,
            recoverable=True,
            suggested_action="Retry with longer timeout",
        )

    # Default to unknown but recoverable
    return ErrorContext(
        category=ErrorCategory.UNKNOWN,
        recoverable=True,
        suggested_action="Retry operation",
    )
