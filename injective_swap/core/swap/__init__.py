"""Swap path: denom normalization, market resolution, pricing, unit conversion and orchestration."""
