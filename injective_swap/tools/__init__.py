from .swap import format_swap_message, swap_token

__all__ = ["format_swap_message", "swap_token"]
