"""Token swaps on Injective spot markets with a labelled simulation fallback."""

__version__ = "0.1.0"
