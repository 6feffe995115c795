from .envelope import ToolEnvelope, Source
from .requests import SwapTokenRequest

__all__ = [
    "ToolEnvelope",
    "Source",
    "SwapTokenRequest",
]
