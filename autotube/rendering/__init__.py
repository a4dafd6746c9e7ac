"""
Rendering
=========

Video rendering and publishing collaborators.
"""

from .base import (
    RenderStatus,
    PrivacyStatus,
    RenderRequest,
    VideoResult,
    PublishRequest,
    PublishResult,
    VideoRenderer,
    Publisher,
)
from .creatomate import CreatomateRenderer

__all__ = [
    "RenderStatus",
    "PrivacyStatus",
    "RenderRequest",
    "VideoResult",
    "PublishRequest",
    "PublishResult",
    "VideoRenderer",
    "Publisher",
    "CreatomateRenderer",
]
