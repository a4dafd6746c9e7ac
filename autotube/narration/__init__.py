"""
Narration
=========

Text-to-speech backends and the primary/fallback strategy that drives them.
"""

from .base import (
    BaseNarrationProvider,
    NarrationOptions,
    NarrationResult,
    Voice,
    CHARS_PER_MINUTE,
    estimate_duration,
)
from .factory import register_provider, get_provider, list_providers
from .edge import EdgeNarrationProvider
from .elevenlabs import ElevenLabsNarrationProvider
from .strategy import NarrationStrategy, CostEstimate, CostComparison

__all__ = [
    "BaseNarrationProvider",
    "NarrationOptions",
    "NarrationResult",
    "Voice",
    "CHARS_PER_MINUTE",
    "estimate_duration",
    "register_provider",
    "get_provider",
    "list_providers",
    "EdgeNarrationProvider",
    "ElevenLabsNarrationProvider",
    "NarrationStrategy",
    "CostEstimate",
    "CostComparison",
]
