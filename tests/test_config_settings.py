from decimal import Decimal

from injective_swap.config import NETWORK_ENDPOINTS, Settings


def test_defaults_target_testnet(monkeypatch):
    """Without configuration the swap runs against testnet endpoints."""

    for name in ("INJECTIVE_NETWORK", "NETWORK", "INDEXER_BASE_URL", "LCD_BASE_URL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.injective_network == "testnet"
    assert settings.network_endpoints == NETWORK_ENDPOINTS["testnet"]
    assert set(settings.network_endpoints) == {"indexer", "lcd"}
    assert settings.resolved_indexer_url == "https://testnet.sentry.exchange.grpc-web.injective.network"
    assert settings.default_slippage_percent == Decimal("1")
    assert settings.order_message_format == "proto"


def test_mainnet_from_env(monkeypatch):
    monkeypatch.delenv("INDEXER_BASE_URL", raising=False)
    monkeypatch.delenv("LCD_BASE_URL", raising=False)
    monkeypatch.setenv("INJECTIVE_NETWORK", "mainnet")

    settings = Settings(_env_file=None)

    assert settings.resolved_indexer_url == "https://sentry.exchange.grpc-web.injective.network"
    assert settings.resolved_lcd_url == "https://sentry.lcd.injective.network"


def test_legacy_network_variable(monkeypatch):
    """The bare NETWORK variable is honoured when INJECTIVE_NETWORK is unset."""

    monkeypatch.delenv("INJECTIVE_NETWORK", raising=False)
    monkeypatch.setenv("NETWORK", "mainnet")

    settings = Settings(_env_file=None)

    assert settings.injective_network == "mainnet"


def test_explicit_network_wins_over_legacy(monkeypatch):
    monkeypatch.setenv("INJECTIVE_NETWORK", "testnet")
    monkeypatch.setenv("NETWORK", "mainnet")

    settings = Settings(_env_file=None)

    assert settings.injective_network == "testnet"


def test_endpoint_overrides(monkeypatch):
    monkeypatch.setenv("INDEXER_BASE_URL", "http://localhost:4444/")
    monkeypatch.setenv("LCD_BASE_URL", "http://localhost:10337")

    settings = Settings(_env_file=None)

    assert settings.resolved_indexer_url == "http://localhost:4444"
    assert settings.resolved_lcd_url == "http://localhost:10337"


def test_simulation_seed(monkeypatch):
    monkeypatch.setenv("SIMULATION_SEED", "42")

    settings = Settings(_env_file=None)

    assert settings.simulation_seed == 42
