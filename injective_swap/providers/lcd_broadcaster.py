"""Broadcast signed transactions through the chain's LCD REST endpoint."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import settings
from ..core.recovery.errors import BroadcastFailedError, NetworkError
from ..core.recovery.strategies import RetryConfig, RetryStrategy
from .base import Broadcaster, BroadcastReceipt, WalletProvider

logger = logging.getLogger(__name__)


class LcdBroadcaster(Broadcaster):
    """Thin wrapper around ``POST /cosmos/tx/v1beta1/txs``.

    The wallet signs the order message; this class only moves bytes. A
    request that never reached the node (connection failure) is retried;
    anything that may have been delivered is not, so one order is never
    submitted twice.
    """

    name = "lcd"
    BROADCAST_PATH = "/cosmos/tx/v1beta1/txs"
    BROADCAST_MODE = "BROADCAST_MODE_SYNC"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        max_attempts: int = 2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.resolved_lcd_url).rstrip("/")
        self.timeout_s = timeout_s if timeout_s is not None else settings.request_timeout_seconds
        self._transport = transport
        self._retry = RetryStrategy(
            RetryConfig(max_attempts=max_attempts),
            logger=logger,
            retry_on=(NetworkError,),
        )

    async def submit(self, order_message: Dict[str, Any], wallet: WalletProvider) -> BroadcastReceipt:
        signed = await wallet.sign_and_authorize(order_message)
        payload = {"tx_bytes": signed.tx_bytes, "mode": self.BROADCAST_MODE}

        async def attempt() -> Dict[str, Any]:
            try:
                async with httpx.AsyncClient(
                    base_url=self.base_url,
                    timeout=self.timeout_s,
                    transport=self._transport,
                ) as client:
                    response = await client.post(self.BROADCAST_PATH, json=payload)
                    response.raise_for_status()
                    return response.json()
            except httpx.ConnectError as exc:
                raise NetworkError(f"Could not reach LCD at {self.base_url}: {exc}", provider=self.name) from exc
            except httpx.TimeoutException as exc:
                raise BroadcastFailedError("Broadcast timed out; transaction state unknown", cause=exc) from exc
            except httpx.HTTPStatusError as exc:
                detail = (exc.response.text or "").strip()
                raise BroadcastFailedError(
                    f"LCD rejected broadcast with HTTP {exc.response.status_code}: {detail}",
                    cause=exc,
                ) from exc
            except httpx.RequestError as exc:
                raise BroadcastFailedError(f"Broadcast request failed: {exc}", cause=exc) from exc
            except ValueError as exc:
                raise BroadcastFailedError("LCD returned invalid JSON", cause=exc) from exc

        try:
            body = await self._retry.execute(attempt, operation_name="broadcast")
        except NetworkError as exc:
            raise BroadcastFailedError(str(exc), cause=exc) from exc

        tx_response = body.get("tx_response") if isinstance(body, dict) else None
        if not isinstance(tx_response, dict):
            raise BroadcastFailedError("LCD response carried no tx_response")

        code = int(tx_response.get("code") or 0)
        tx_hash = tx_response.get("txhash")
        raw_log = tx_response.get("raw_log")
        if code != 0:
            raise BroadcastFailedError(f"Transaction rejected with code {code}: {raw_log}")
        if not tx_hash:
            raise BroadcastFailedError("LCD accepted the transaction but returned no hash")

        logger.info(f"Broadcast accepted: {tx_hash}")
        return BroadcastReceipt(tx_hash=str(tx_hash), code=code, raw_log=raw_log)
