"""
Base Narration Provider
=======================

Abstract base class for text-to-speech backends.

Backends are deliberately retry-free: a single ``synthesize`` call makes a
single vendor attempt. Retries and fallback belong to ``NarrationStrategy``.
"""

import math
import time
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Dict, Any, Tuple

from ..content.category import Category, ContentFormat
from ..core.config import StorageConfig
from ..core.exceptions import ValidationError
from ..core.security import PathValidator, file_stem

logger = logging.getLogger(__name__)

# ~750 chars/min (12.5 chars/sec) of Korean narration
CHARS_PER_MINUTE = 750


def estimate_duration(text: str) -> int:
    """
    Estimate narration length in seconds from the input length.

    Both backends use this rule so cost and duration stay comparable
    across providers.
    """
    return math.ceil(len(text) / CHARS_PER_MINUTE * 60)


@dataclass(frozen=True)
class Voice:
    """A voice offered by a backend."""

    voice_id: str
    name: str
    language: str = "ko-KR"
    gender: str = "neutral"
    provider: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "voice_id": self.voice_id,
            "name": self.name,
            "language": self.language,
            "gender": self.gender,
            "provider": self.provider,
        }


@dataclass(frozen=True)
class NarrationOptions:
    """Per-request overrides. Unset fields fall back to the category defaults."""

    voice_id: Optional[str] = None
    voice_settings: Optional[Dict[str, Any]] = None
    output_format: str = "mp3"


@dataclass(frozen=True)
class NarrationResult:
    """Result of one successful synthesis."""

    audio_url: str
    audio_path: str
    duration_seconds: int
    character_count: int
    cost_usd: float
    voice_id: str
    voice_settings: Dict[str, Any] = field(default_factory=dict)
    provider: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "audio_url": self.audio_url,
            "audio_path": self.audio_path,
            "duration_seconds": self.duration_seconds,
            "character_count": self.character_count,
            "cost_usd": self.cost_usd,
            "voice_id": self.voice_id,
            "voice_settings": dict(self.voice_settings),
            "provider": self.provider,
        }


class BaseNarrationProvider(ABC):
    """
    Abstract base class for narration backends.

    All backend implementations must inherit from this class
    and implement the required abstract methods.
    """

    def __init__(
        self,
        storage: Optional[StorageConfig] = None,
        timeout: int = 60,
    ):
        """
        Initialize the provider.

        Args:
            storage: Where audio files are written and how they are addressed
            timeout: Request timeout in seconds
        """
        self.storage = storage or StorageConfig()
        self.timeout = timeout
        self._path_validator = PathValidator(self.storage.audio_path)

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @property
    @abstractmethod
    def max_characters(self) -> int:
        """Maximum input length accepted in one request."""
        pass

    @property
    def is_free(self) -> bool:
        return False

    @abstractmethod
    async def synthesize(
        self,
        text: str,
        category: Category,
        format_hint: Optional[ContentFormat] = None,
        job_id: str = "",
        options: Optional[NarrationOptions] = None,
    ) -> NarrationResult:
        """
        Synthesize narration audio.

        Args:
            text: Narration text
            category: Content category (drives voice selection)
            format_hint: Target video format
            job_id: Owning job, used to name the audio file
            options: Voice overrides

        Returns:
            NarrationResult describing the written audio file
        """
        pass

    @abstractmethod
    def recommended_voice(self, category: Category) -> Voice:
        """Default voice for a category."""
        pass

    @abstractmethod
    def voice_settings(self, category: Category) -> Dict[str, Any]:
        """Default voice settings for a category."""
        pass

    @abstractmethod
    def estimate_cost(self, text: str) -> float:
        """Projected USD cost of synthesizing ``text``."""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Report backend availability (``status`` plus optional ``quota``)."""
        pass

    @abstractmethod
    async def available_voices(self, language: Optional[str] = None) -> List[Voice]:
        """List voices this backend can use."""
        pass

    def validate(self, text: str) -> None:
        """
        Reject input the backend cannot synthesize.

        Raises:
            ValidationError: If text is empty or exceeds ``max_characters``
        """
        if not text or not text.strip():
            raise ValidationError("Text cannot be empty", field="text", constraint="non_empty")

        if len(text) > self.max_characters:
            raise ValidationError(
                f"Text exceeds maximum length of {self.max_characters} characters",
                field="text",
                value=len(text),
                constraint=f"max_length={self.max_characters}",
            )

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def _allocate_output(self, job_id: str, extension: str = "mp3") -> Tuple[Path, str]:
        """
        Reserve a file path under the audio storage root.

        Returns:
            (absolute path, public URL)
        """
        filename = f"{file_stem(job_id)}_{int(time.time() * 1000)}.{extension}"
        audio_path = self._path_validator.validate_audio(filename)
        audio_path.parent.mkdir(parents=True, exist_ok=True)

        url_prefix = self.storage.audio_url_prefix.rstrip("/")
        return audio_path, f"{url_prefix}/{filename}"

    def _build_result(
        self,
        text: str,
        audio_path: Path,
        audio_url: str,
        voice_id: str,
        voice_settings: Dict[str, Any],
    ) -> NarrationResult:
        return NarrationResult(
            audio_url=audio_url,
            audio_path=str(audio_path),
            duration_seconds=estimate_duration(text),
            character_count=len(text),
            cost_usd=self.estimate_cost(text),
            voice_id=voice_id,
            voice_settings=dict(voice_settings),
            provider=self.provider_name,
        )

    async def close(self) -> None:
        """Release network resources. No-op for backends without a client."""

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
