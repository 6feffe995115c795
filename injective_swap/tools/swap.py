from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..config import settings
from ..core.recovery.errors import SwapValidationError
from ..core.swap.manager import SwapManager, create_swap_manager
from ..core.swap.models import SwapResult
from ..types import Source, ToolEnvelope


def _fmt(value: Decimal) -> str:
    return f"{value:.6f}"


def format_swap_message(result: SwapResult) -> str:
    """Render a swap result the way the agent reports it to the user."""
    if result.is_simulated:
        return (
            f"✅ SIMULATED SWAP ONLY: {result.input_amount} {result.from_denom} to approximately "
            f"{_fmt(result.estimated_output_amount)} {result.to_denom} at price {_fmt(result.execution_price)}\n\n"
            "Note: This is a simulated result. No real transaction was submitted to the blockchain."
        )

    return (
        f"✅ Successfully swapped {result.input_amount} {result.from_denom} to approximately "
        f"{_fmt(result.estimated_output_amount)} {result.to_denom}\n\n"
        "Details:\n"
        f"- Price: {_fmt(result.execution_price)}\n"
        f"- Market ID: {result.market_id}\n"
        f"- Order Side: {result.order_side.value}\n"
        f"- Transaction Hash: {result.tx_hash}"
    )


async def swap_token(
    from_denom: str,
    to_denom: str,
    amount: Any,
    slippage: Any = 1,
    *,
    manager: Optional[SwapManager] = None,
) -> ToolEnvelope:
    """Swap tokens on an Injective spot market and wrap the outcome for the agent."""

    start_time = datetime.now()
    sources: List[Source] = []
    warnings: List[str] = []
    manager = manager or create_swap_manager()

    try:
        result = await manager.swap(from_denom, to_denom, amount, slippage)
    except SwapValidationError as e:
        return ToolEnvelope(
            data={"success": False, "result": None, "message": f"❌ {e.message}"},
            sources=sources,
            fetched_at=start_time,
            warnings=[e.message],
        )

    if result.is_simulated:
        warnings.append(f"Simulated result: {result.fallback_reason or 'swap could not be executed'}")
    else:
        sources.append(Source(name="injective_indexer", url=settings.resolved_indexer_url))
        sources.append(Source(name="lcd", url=settings.resolved_lcd_url))

    data: Dict[str, Any] = {
        "success": True,
        "result": result.to_dict(),
        "message": format_swap_message(result),
    }
    return ToolEnvelope(
        data=data,
        sources=sources,
        fetched_at=start_time,
        latency_ms=int((datetime.now() - start_time).total_seconds() * 1000),
        warnings=warnings,
    )
