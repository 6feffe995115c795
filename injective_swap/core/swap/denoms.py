"""Denomination normalization."""

from __future__ import annotations

from .constants import NATIVE_DENOM, STRUCTURED_DENOM_PREFIXES


def normalize_denom(denom: str) -> str:
    """Return the network's comparison form of ``denom``.

    ``factory/<creator>/<subdenom>`` and ``ibc/<hash>`` denoms are already
    canonical and come back untouched, as does anything unrecognized. The
    native symbol is matched case-insensitively and lowercased.
    """
    if denom.startswith(STRUCTURED_DENOM_PREFIXES):
        return denom
    if denom.lower() == NATIVE_DENOM:
        return NATIVE_DENOM
    return denom
