"""External collaborators: market data, wallet and broadcast capabilities."""
