"""
Rendering & Publishing Contracts
================================

Abstract collaborators the orchestrator hands finished narration to.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any

from ..content.category import Category, ContentFormat

logger = logging.getLogger(__name__)


class RenderStatus(Enum):
    """Status reported by a rendering service."""
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class PrivacyStatus(Enum):
    PUBLIC = "public"
    UNLISTED = "unlisted"
    PRIVATE = "private"


@dataclass
class RenderRequest:
    """Everything a renderer needs to assemble one video."""

    category: Category
    format_hint: ContentFormat
    title: str
    script: str
    narration_text: str
    audio_url: Optional[str] = None
    visual_prompts: List[str] = field(default_factory=list)
    image_urls: List[str] = field(default_factory=list)
    duration_seconds: Optional[int] = None
    language: str = "ko"


@dataclass(frozen=True)
class VideoResult:
    """Output of rendering. Immutable once returned."""

    render_id: str
    status: str
    url: Optional[str] = None
    cost_usd: Optional[float] = None
    duration_seconds: Optional[float] = None
    error: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.status == RenderStatus.COMPLETED.value and bool(self.url)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "render_id": self.render_id,
            "status": self.status,
            "url": self.url,
            "cost_usd": self.cost_usd,
            "duration_seconds": self.duration_seconds,
            "error": self.error,
        }


@dataclass
class PublishRequest:
    """Upload request for a rendered video."""

    project_id: str
    job_id: str
    title: str
    description: str = ""
    tags: List[str] = field(default_factory=list)
    privacy_status: PrivacyStatus = PrivacyStatus.PUBLIC
    video_url: Optional[str] = None


@dataclass(frozen=True)
class PublishResult:
    video_id: str
    video_url: str


class VideoRenderer(ABC):
    """Turns narration audio and script text into a video."""

    @abstractmethod
    async def render(self, request: RenderRequest) -> VideoResult:
        """
        Render a video.

        Raises:
            RenderError: If the render could not be produced
        """
        pass

    async def close(self) -> None:
        """Release network resources."""


class Publisher(ABC):
    """Uploads a rendered video to a connected channel."""

    @abstractmethod
    async def upload(self, request: PublishRequest) -> PublishResult:
        """
        Upload a video.

        Raises:
            PublishError: If the upload failed
        """
        pass

    async def close(self) -> None:
        """Release network resources."""
