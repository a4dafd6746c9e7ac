import pytest
from typing import Optional, List, Dict, Any

from autotube.content.category import Category, ContentFormat
from autotube.content.claim import Claim
from autotube.core.config import NarrationConfig, StorageConfig, reset_config
from autotube.core.exceptions import ProviderError, RenderError
from autotube.narration.base import (
    BaseNarrationProvider,
    NarrationOptions,
    NarrationResult,
    Voice,
    estimate_duration,
)
from autotube.narration.strategy import NarrationStrategy
from autotube.rendering.base import (
    VideoRenderer,
    Publisher,
    RenderRequest,
    VideoResult,
    PublishRequest,
    PublishResult,
)
from autotube.scripting.base import ScriptGenerator, GeneratedScript
from autotube.workflow.store import InMemoryJobStore


class FakeNarrationProvider(BaseNarrationProvider):
    """
    Scripted narration backend.

    ``failures`` is how many calls fail before one succeeds; -1 fails forever.
    """

    def __init__(
        self,
        name: str = "edge",
        free: bool = True,
        failures: int = 0,
        error: Optional[Exception] = None,
        max_characters: int = 10000,
        health_status: str = "healthy",
        storage: Optional[StorageConfig] = None,
    ):
        super().__init__(storage=storage)
        self._name = name
        self._free = free
        self._max_characters = max_characters
        self.failures = failures
        self.error = error or ProviderError(f"{name} synthesis failed", provider=name)
        self.health_status = health_status
        self.calls = 0
        self.closed = False

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def max_characters(self) -> int:
        return self._max_characters

    @property
    def is_free(self) -> bool:
        return self._free

    async def synthesize(
        self,
        text: str,
        category: Category,
        format_hint: Optional[ContentFormat] = None,
        job_id: str = "",
        options: Optional[NarrationOptions] = None,
    ) -> NarrationResult:
        self.calls += 1
        if self.failures < 0 or self.calls <= self.failures:
            raise self.error

        return NarrationResult(
            audio_url=f"/storage/audio/{job_id}_{self._name}.mp3",
            audio_path=f"/tmp/{job_id}_{self._name}.mp3",
            duration_seconds=estimate_duration(text),
            character_count=len(text),
            cost_usd=self.estimate_cost(text),
            voice_id=f"{self._name}-voice",
            voice_settings={"rate": "+0%"},
            provider=self._name,
        )

    def recommended_voice(self, category: Category) -> Voice:
        return Voice(f"{self._name}-voice", "Test Voice", provider=self._name)

    def voice_settings(self, category: Category) -> Dict[str, Any]:
        return {"rate": "+0%"}

    def estimate_cost(self, text: str) -> float:
        return 0.0 if self._free else len(text) * 0.0003

    async def health_check(self) -> Dict[str, Any]:
        return {"status": self.health_status}

    async def available_voices(self, language: Optional[str] = None) -> List[Voice]:
        return [self.recommended_voice(Category.GENERAL)]

    async def close(self) -> None:
        self.closed = True


class FakeScriptGenerator(ScriptGenerator):
    def __init__(self, script: Optional[GeneratedScript] = None, error: Optional[Exception] = None):
        self.script = script or make_script()
        self.error = error
        self.calls = 0

    async def generate(self, config) -> GeneratedScript:
        self.calls += 1
        if self.error:
            raise self.error
        return self.script


class FakeRenderer(VideoRenderer):
    def __init__(self, result: Optional[VideoResult] = None, error: Optional[Exception] = None):
        self.result = result or VideoResult(
            render_id="render_1",
            status="completed",
            url="https://cdn.example.com/render_1.mp4",
            cost_usd=0.05,
        )
        self.error = error
        self.requests: List[RenderRequest] = []

    async def render(self, request: RenderRequest) -> VideoResult:
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.result


class FakePublisher(Publisher):
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.requests: List[PublishRequest] = []

    async def upload(self, request: PublishRequest) -> PublishResult:
        self.requests.append(request)
        if self.error:
            raise self.error
        return PublishResult(video_id="yt_123", video_url="https://youtube.com/shorts/yt_123")


class RecordingJobStore(InMemoryJobStore):
    """In-memory store that remembers every status it was asked to write."""

    def __init__(self):
        super().__init__()
        self.statuses = []

    async def update(self, job_id: str, **fields):
        if "status" in fields:
            self.statuses.append(fields["status"])
        return await super().update(job_id, **fields)


def make_script(
    title: str = "Three morning habits",
    script: str = "Start your day with water. Take a short walk. Write down one goal.",
    narration_text: str = "Start your day with water. Take a short walk. Write down one goal.",
    claims: Optional[List[Claim]] = None,
) -> GeneratedScript:
    return GeneratedScript(
        title=title,
        script=script,
        narration_text=narration_text,
        visual_prompts=["glass of water on a sunny table", "person walking in a park"],
        claims=claims if claims is not None else [Claim("Water helps you wake up", 90)],
        metadata={"description": "Morning routine tips", "tags": ["morning"]},
    )


def make_render_failure() -> RenderError:
    return RenderError("Render failed: template error", render_id="render_1", provider="creatomate")


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Keep tests independent of the developer's environment and config files."""
    for name in (
        "TTS_PROVIDER",
        "ELEVENLABS_API_KEY",
        "CREATOMATE_API_KEY",
        "GEMINI_API_KEY",
        "STORAGE_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def no_delay_config():
    return NarrationConfig(primary_provider="edge", retry_delay=0)


@pytest.fixture
def store():
    return RecordingJobStore()


@pytest.fixture
def primary():
    return FakeNarrationProvider("edge", free=True)


@pytest.fixture
def secondary():
    return FakeNarrationProvider("elevenlabs", free=False)


@pytest.fixture
def strategy(primary, secondary, no_delay_config, store):
    return NarrationStrategy(primary, secondary, config=no_delay_config, store=store)
