from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..core.swap.models import Market, OrderBookSnapshot


@dataclass(frozen=True)
class SignedMessage:
    """A message wrapped into a signed transaction, ready to broadcast."""
    tx_bytes: str                      # Base64 encoded TxRaw
    signer: str


@dataclass(frozen=True)
class BroadcastReceipt:
    tx_hash: str
    code: int = 0
    raw_log: Optional[str] = None


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: float = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class MarketDataProvider(Provider):
    """Provider for spot market listings and order books.

    Implementations return canonical models and raise the typed errors from
    ``core.recovery`` (NotAvailableError, ServiceTimeoutError, NetworkError)
    instead of transport exceptions.
    """

    @abstractmethod
    async def list_markets(self) -> List[Market]:
        """Get all spot markets, in listing order"""
        pass

    @abstractmethod
    async def fetch_orderbook(self, market_id: str) -> OrderBookSnapshot:
        """Get the current order book of a market"""
        pass


class WalletProvider(ABC):
    """Identity used to place orders. Key storage lives outside this package.

    Implementations that may be used by concurrent swaps are responsible for
    serializing signatures so account sequence numbers do not race.
    """

    @abstractmethod
    def address(self) -> str:
        """Bech32 account address (inj1...)"""
        pass

    @abstractmethod
    async def sign_and_authorize(self, message: Dict[str, Any]) -> SignedMessage:
        """Wrap ``message`` in a transaction and sign it"""
        pass


class Broadcaster(ABC):
    """Submits signed order messages to the chain."""

    @abstractmethod
    async def submit(self, order_message: Dict[str, Any], wallet: WalletProvider) -> BroadcastReceipt:
        """Sign ``order_message`` with ``wallet`` and broadcast it"""
        pass
