"""
Content Job Models
==================

The content job is the unit of orchestration: one request to turn a topic
into a rendered (and optionally published) video.
"""

import uuid
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Union

from .category import Category, ContentFormat, Tone
from .claim import Claim
from ..safety.report import SafetyReport

logger = logging.getLogger(__name__)


class JobStatus(Enum):
    """
    Pipeline state.

    PENDING -> SCRIPT_GENERATING -> NARRATION_PROCESSING -> VIDEO_RENDERING
    -> [UPLOADING] -> COMPLETED, with FAILED reachable from every
    non-terminal state.
    """

    PENDING = "pending"
    SCRIPT_GENERATING = "script_generating"
    NARRATION_PROCESSING = "narration_processing"
    VIDEO_RENDERING = "video_rendering"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass(frozen=True)
class Completed:
    """Terminal success. ``error`` is set when publishing failed after a good render."""

    error: Optional[str] = None


@dataclass(frozen=True)
class Failed:
    """Terminal failure."""

    error: str


JobOutcome = Union[Completed, Failed]


@dataclass
class ContentConfig:
    """What to generate."""

    topic: str
    category: Category = Category.GENERAL
    tone: Tone = Tone.FRIENDLY
    format: ContentFormat = ContentFormat.SHORTS
    language: str = "ko"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "category": self.category.value,
            "tone": self.tone.value,
            "format": self.format.value,
            "language": self.language,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentConfig":
        tone = data.get("tone") or Tone.FRIENDLY.value
        return cls(
            topic=data.get("topic", ""),
            category=Category.from_value(data.get("category")),
            tone=tone if isinstance(tone, Tone) else Tone(tone),
            format=ContentFormat.from_value(data.get("format")),
            language=data.get("language") or "ko",
        )


@dataclass
class NarrationMetadata:
    """Narration details recorded on the job once synthesis succeeds."""

    provider: str
    audio_url: str
    audio_path: str
    duration_seconds: int
    character_count: int
    cost_usd: float
    voice_id: str
    voice_settings: Dict[str, Any] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_result(cls, result: Any) -> "NarrationMetadata":
        """Build from a NarrationResult."""
        return cls(
            provider=result.provider,
            audio_url=result.audio_url,
            audio_path=result.audio_path,
            duration_seconds=result.duration_seconds,
            character_count=result.character_count,
            cost_usd=result.cost_usd,
            voice_id=result.voice_id,
            voice_settings=dict(result.voice_settings),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "audio_url": self.audio_url,
            "audio_path": self.audio_path,
            "duration_seconds": self.duration_seconds,
            "character_count": self.character_count,
            "cost_usd": self.cost_usd,
            "voice_id": self.voice_id,
            "voice_settings": self.voice_settings,
            "generated_at": self.generated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NarrationMetadata":
        data = dict(data)
        data["generated_at"] = datetime.fromisoformat(data["generated_at"])
        return cls(**data)


@dataclass
class VideoMetadata:
    """Render details recorded on the job once rendering succeeds."""

    render_id: str
    status: str
    url: Optional[str] = None
    cost_usd: Optional[float] = None
    generated_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_result(cls, result: Any) -> "VideoMetadata":
        """Build from a VideoResult."""
        return cls(
            render_id=result.render_id,
            status=result.status,
            url=result.url,
            cost_usd=result.cost_usd,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "render_id": self.render_id,
            "status": self.status,
            "url": self.url,
            "cost_usd": self.cost_usd,
            "generated_at": self.generated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VideoMetadata":
        data = dict(data)
        data["generated_at"] = datetime.fromisoformat(data["generated_at"])
        return cls(**data)


@dataclass
class PublishMetadata:
    """Publishing details recorded after a successful upload."""

    video_id: str
    video_url: str
    uploaded_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "video_id": self.video_id,
            "video_url": self.video_url,
            "uploaded_at": self.uploaded_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PublishMetadata":
        return cls(
            video_id=data["video_id"],
            video_url=data["video_url"],
            uploaded_at=datetime.fromisoformat(data["uploaded_at"]),
        )


@dataclass
class ProjectAutomation:
    """Automation settings of the project a job belongs to."""

    project_id: str
    is_enabled: bool = False
    auto_publish: bool = False
    channel_id: Optional[str] = None

    @property
    def can_publish(self) -> bool:
        """Automatic publishing is on and a channel is connected."""
        return bool(self.auto_publish and self.channel_id)


@dataclass
class ContentJob:
    """
    A single content generation job.

    Generated artifacts stay None until the stage that produces them
    succeeds. A failed job keeps whatever was produced before the failing
    stage so it can be inspected or resumed.
    """

    # Identity
    project_id: str
    config: ContentConfig
    job_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    status: JobStatus = JobStatus.PENDING
    error: Optional[str] = None

    # Generated artifacts
    title: Optional[str] = None
    script: Optional[str] = None
    narration_text: Optional[str] = None
    visual_prompts: Optional[List[str]] = None
    claims: Optional[List[Claim]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    # Stage results
    safety_report: Optional[SafetyReport] = None
    narration: Optional[NarrationMetadata] = None
    video: Optional[VideoMetadata] = None
    publish: Optional[PublishMetadata] = None

    # Timestamps
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    published_at: Optional[datetime] = None

    @property
    def video_url(self) -> Optional[str]:
        return self.video.url if self.video else None

    @property
    def outcome(self) -> Optional[JobOutcome]:
        """Terminal outcome, or None while the job is still running."""
        if self.status is JobStatus.COMPLETED:
            return Completed(error=self.error)
        if self.status is JobStatus.FAILED:
            return Failed(error=self.error or "Unknown error")
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "job_id": self.job_id,
            "project_id": self.project_id,
            "config": self.config.to_dict(),
            "status": self.status.value,
            "error": self.error,
            "title": self.title,
            "script": self.script,
            "narration_text": self.narration_text,
            "visual_prompts": self.visual_prompts,
            "claims": [c.to_dict() for c in self.claims] if self.claims is not None else None,
            "metadata": self.metadata,
            "safety_report": self.safety_report.to_dict() if self.safety_report else None,
            "narration": self.narration.to_dict() if self.narration else None,
            "video": self.video.to_dict() if self.video else None,
            "publish": self.publish.to_dict() if self.publish else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "published_at": self.published_at.isoformat() if self.published_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentJob":
        """Create from dictionary."""
        claims = data.get("claims")
        return cls(
            job_id=data["job_id"],
            project_id=data["project_id"],
            config=ContentConfig.from_dict(data["config"]),
            status=JobStatus(data["status"]),
            error=data.get("error"),
            title=data.get("title"),
            script=data.get("script"),
            narration_text=data.get("narration_text"),
            visual_prompts=data.get("visual_prompts"),
            claims=[Claim.from_dict(c) for c in claims] if claims is not None else None,
            metadata=data.get("metadata") or {},
            safety_report=SafetyReport.from_dict(data["safety_report"]) if data.get("safety_report") else None,
            narration=NarrationMetadata.from_dict(data["narration"]) if data.get("narration") else None,
            video=VideoMetadata.from_dict(data["video"]) if data.get("video") else None,
            publish=PublishMetadata.from_dict(data["publish"]) if data.get("publish") else None,
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
            published_at=datetime.fromisoformat(data["published_at"]) if data.get("published_at") else None,
        )
