import os

from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]

# Public Injective endpoints keyed by network name.
NETWORK_ENDPOINTS: Dict[str, Dict[str, str]] = {
    "mainnet": {
        "indexer": "https://sentry.exchange.grpc-web.injective.network",
        "lcd": "https://sentry.lcd.injective.network",
    },
    "testnet": {
        "indexer": "https://testnet.sentry.exchange.grpc-web.injective.network",
        "lcd": "https://testnet.sentry.lcd.injective.network",
    },
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Pick up the bare NETWORK variable used by older deployments."""

        super().model_post_init(__context)

        if "injective_network" not in self.model_fields_set:
            fallback = os.getenv("NETWORK")
            if fallback and fallback.lower() in NETWORK_ENDPOINTS:
                object.__setattr__(self, "injective_network", fallback.lower())

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: Optional[bool] = Field(
        default=None,
        description="Force JSON (true) or console (false) logs; unset = JSON unless DEBUG",
    )

    # Network
    injective_network: str = Field(
        default="testnet",
        description="Injective network to trade on (testnet or mainnet)",
        validation_alias=AliasChoices("injective_network", "INJECTIVE_NETWORK"),
    )
    indexer_base_url: str = Field(
        default="",
        description="Override the indexer REST gateway derived from the network",
    )
    lcd_base_url: str = Field(
        default="",
        description="Override the LCD endpoint derived from the network",
    )

    # Assets
    default_decimals: int = Field(
        default=18,
        ge=0,
        description="Decimals assumed when a market's asset record omits them",
    )
    default_slippage_percent: Decimal = Field(
        default=Decimal("1"),
        ge=0,
        le=100,
        description="Slippage tolerance used when the caller does not pass one",
    )

    # Timeouts
    request_timeout_seconds: float = Field(default=10.0, gt=0, description="HTTP timeout for a single request")
    market_list_timeout_seconds: float = Field(default=15.0, gt=0, description="Stage timeout for listing markets")
    orderbook_timeout_seconds: float = Field(default=10.0, gt=0, description="Stage timeout for the order book fetch")
    broadcast_timeout_seconds: float = Field(default=30.0, gt=0, description="Stage timeout for order submission")

    # Transport retries for idempotent reads
    market_data_max_attempts: int = Field(default=2, ge=1, description="Attempts per market data request")

    # Order message construction, chosen once at startup
    order_message_format: str = Field(
        default="proto",
        description="Order message layout: proto or legacy",
    )

    # Simulation
    simulation_seed: Optional[int] = Field(
        default=None,
        description="Seed for simulated results (unset = non-deterministic)",
    )

    @property
    def network_endpoints(self) -> Dict[str, str]:
        return NETWORK_ENDPOINTS.get(self.injective_network.lower(), NETWORK_ENDPOINTS["testnet"])

    @property
    def resolved_indexer_url(self) -> str:
        return (self.indexer_base_url or self.network_endpoints["indexer"]).rstrip("/")

    @property
    def resolved_lcd_url(self) -> str:
        return (self.lcd_base_url or self.network_endpoints["lcd"]).rstrip("/")


# Global settings instance
settings = Settings()
