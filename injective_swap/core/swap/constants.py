"""Constants for Injective spot swap orchestration."""

from __future__ import annotations

from typing import Tuple

# Canonical lowercase form of the chain's native asset.
NATIVE_DENOM = 'inj'

# Denoms with these prefixes are already canonical.
STRUCTURED_DENOM_PREFIXES: Tuple[str, ...] = (
    'factory/',
    'ibc/',
)

# Assumed when a market's asset record carries no decimals.
DEFAULT_DECIMALS = 18

# Bech32 human-readable part of Injective account addresses.
ADDRESS_HRP = 'inj'

# Subaccount id = 20-byte account address (hex) + 12-byte nonce (hex).
DEFAULT_SUBACCOUNT_NONCE_HEX = '0' * 24

MSG_CREATE_SPOT_MARKET_ORDER_TYPE_URL = '/injective.exchange.v1beta1.MsgCreateSpotMarketOrder'

# Legacy SDK enum values.
LEGACY_ORDER_SIDE_CODES = {'buy': 1, 'sell': 2}
LEGACY_TIME_IN_FORCE_IOC = 3

SIMULATED_MARKET_ID = 'mock'
SIMULATED_TX_PREFIX = 'SIMULATED-'

__all__ = [
    'NATIVE_DENOM',
    'STRUCTURED_DENOM_PREFIXES',
    'DEFAULT_DECIMALS',
    'ADDRESS_HRP',
    'DEFAULT_SUBACCOUNT_NONCE_HEX',
    'MSG_CREATE_SPOT_MARKET_ORDER_TYPE_URL',
    'LEGACY_ORDER_SIDE_CODES',
    'LEGACY_TIME_IN_FORCE_IOC',
    'SIMULATED_MARKET_ID',
    'SIMULATED_TX_PREFIX',
]
