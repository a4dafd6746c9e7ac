"""
Autotube
========

Content generation pipeline for short-form video channels.

A job goes from topic to published video through:
- Script generation (Gemini)
- A layered content-safety gate with YMYL rules for health and finance
- Narration with a free primary backend (Edge TTS) and a paid fallback (ElevenLabs)
- Template video rendering (Creatomate)
- Optional publishing to a connected channel

Quick Start:
    from autotube import (
        PipelineOrchestrator, InMemoryJobStore, NarrationStrategy,
        GeminiScriptGenerator, CreatomateRenderer, ContentConfig, Category,
    )

    store = InMemoryJobStore()
    orchestrator = PipelineOrchestrator(
        store=store,
        script_generator=GeminiScriptGenerator(),
        narration=NarrationStrategy.from_config(store=store),
        renderer=CreatomateRenderer(),
    )

    job = await orchestrator.submit(
        "project_1",
        ContentConfig(topic="무릎 관절 건강", category=Category.HEALTH),
    )
    job = await orchestrator.wait_for(job.job_id)
    print(job.status, job.video_url)
"""

__version__ = "0.1.0"

# =============================================================================
# Content Model
# =============================================================================

from .content import (
    Category,
    ContentFormat,
    Tone,
    Claim,
    JobStatus,
    ContentConfig,
    ContentJob,
    ProjectAutomation,
    Completed,
    Failed,
)

# =============================================================================
# Pipeline Components
# =============================================================================

from .safety import SafetyScoringEngine, SafetyReport, SafetyIssue
from .narration import (
    NarrationStrategy,
    NarrationResult,
    NarrationOptions,
    EdgeNarrationProvider,
    ElevenLabsNarrationProvider,
    get_provider,
    list_providers,
)
from .rendering import (
    VideoRenderer,
    Publisher,
    RenderRequest,
    VideoResult,
    PublishRequest,
    PublishResult,
    CreatomateRenderer,
)
from .scripting import ScriptGenerator, GeneratedScript, GeminiScriptGenerator
from .workflow import JobStore, InMemoryJobStore, SqliteJobStore, PipelineOrchestrator

# =============================================================================
# Core Utilities
# =============================================================================

from .core.config import Config, get_config, set_config
from .core.exceptions import (
    AutotubeError,
    ConfigurationError,
    ValidationError,
    ProviderError,
    NarrationError,
    RenderError,
    PublishError,
    ScriptGenerationError,
    PolicyRejectionError,
)

__all__ = [
    "__version__",

    # Content
    "Category",
    "ContentFormat",
    "Tone",
    "Claim",
    "JobStatus",
    "ContentConfig",
    "ContentJob",
    "ProjectAutomation",
    "Completed",
    "Failed",

    # Safety
    "SafetyScoringEngine",
    "SafetyReport",
    "SafetyIssue",

    # Narration
    "NarrationStrategy",
    "NarrationResult",
    "NarrationOptions",
    "EdgeNarrationProvider",
    "ElevenLabsNarrationProvider",
    "get_provider",
    "list_providers",

    # Rendering & Publishing
    "VideoRenderer",
    "Publisher",
    "RenderRequest",
    "VideoResult",
    "PublishRequest",
    "PublishResult",
    "CreatomateRenderer",

    # Scripting
    "ScriptGenerator",
    "GeneratedScript",
    "GeminiScriptGenerator",

    # Workflow
    "JobStore",
    "InMemoryJobStore",
    "SqliteJobStore",
    "PipelineOrchestrator",

    # Core
    "Config",
    "get_config",
    "set_config",
    "AutotubeError",
    "ConfigurationError",
    "ValidationError",
    "ProviderError",
    "NarrationError",
    "RenderError",
    "PublishError",
    "ScriptGenerationError",
    "PolicyRejectionError",
]
