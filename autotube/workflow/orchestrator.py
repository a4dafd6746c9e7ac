"""
Pipeline Orchestrator
=====================

Drives one content job from topic to rendered (and optionally published)
video:

    PENDING -> SCRIPT_GENERATING -> (safety gate) -> NARRATION_PROCESSING
            -> VIDEO_RENDERING -> [UPLOADING] -> COMPLETED

FAILED is reachable from every non-terminal state. Each status write is
awaited before the next stage starts, so an observer never sees a stale
status while later work is underway.
"""

import re
import asyncio
import logging
from datetime import datetime
from typing import Optional, List, Dict

from ..content.job import (
    ContentConfig,
    ContentJob,
    JobStatus,
    NarrationMetadata,
    VideoMetadata,
    PublishMetadata,
)
from ..core.exceptions import PolicyRejectionError
from ..narration.strategy import NarrationStrategy
from ..rendering.base import (
    VideoRenderer,
    Publisher,
    RenderRequest,
    PublishRequest,
    PrivacyStatus,
)
from ..safety.engine import SafetyScoringEngine
from ..scripting.base import ScriptGenerator, GeneratedScript
from .store import JobStore

logger = logging.getLogger(__name__)

DESCRIPTION_EXCERPT_LENGTH = 200
WORDS_PER_PROMPT_TAG = 3
MAX_TAGS = 15
COMMON_TAGS = ("shorts", "ai", "autotube")


class PipelineOrchestrator:
    """
    Runs content jobs through the generation pipeline.

    Usage:
        orchestrator = PipelineOrchestrator(
            store=InMemoryJobStore(),
            script_generator=GeminiScriptGenerator(),
            narration=NarrationStrategy.from_config(store=store),
            renderer=CreatomateRenderer(),
        )
        job = await orchestrator.submit("project_1", ContentConfig(topic="..."))
        job = await orchestrator.wait_for(job.job_id)
    """

    def __init__(
        self,
        store: JobStore,
        script_generator: ScriptGenerator,
        narration: NarrationStrategy,
        renderer: VideoRenderer,
        safety_engine: Optional[SafetyScoringEngine] = None,
        publisher: Optional[Publisher] = None,
        privacy_status: PrivacyStatus = PrivacyStatus.PUBLIC,
    ):
        """
        Initialize the orchestrator.

        Args:
            store: Job persistence
            script_generator: Produces title, script and narration text
            narration: Primary/fallback narration strategy
            renderer: Video renderer
            safety_engine: Safety gate (default thresholds when omitted)
            publisher: Channel uploader; publishing is skipped when None
            privacy_status: Visibility of published videos
        """
        self.store = store
        self.script_generator = script_generator
        self.narration = narration
        self.renderer = renderer
        self.safety_engine = safety_engine or SafetyScoringEngine()
        self.publisher = publisher
        self.privacy_status = privacy_status

        self._tasks: Dict[str, asyncio.Task] = {}

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    async def submit(self, project_id: str, config: ContentConfig) -> ContentJob:
        """
        Create a job and start processing it in the background.

        Returns:
            The job as persisted at creation (status PENDING)
        """
        job = await self.store.create(ContentJob(project_id=project_id, config=config))
        logger.info(f"Content job {job.job_id} created for project {project_id}: {config.topic}")

        task = asyncio.create_task(self.run(job.job_id))
        self._tasks[job.job_id] = task
        task.add_done_callback(lambda _, job_id=job.job_id: self._tasks.pop(job_id, None))

        return job

    async def wait_for(self, job_id: str) -> ContentJob:
        """Wait for a submitted job's pipeline to finish and return its final state."""
        task = self._tasks.get(job_id)
        if task is not None:
            await task
        return await self.store.get(job_id)

    async def join(self) -> None:
        """Wait for every submitted job."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    async def run(self, job_id: str) -> ContentJob:
        """
        Process a PENDING job to a terminal state.

        A job past PENDING is already being (or has been) processed and is
        returned untouched.
        """
        job = await self.store.get(job_id)
        if job.status is not JobStatus.PENDING:
            logger.warning(f"Job {job_id} is already {job.status.value}, not starting it again")
            return job

        try:
            return await self._process(job)
        except Exception as e:
            logger.exception(f"Content generation failed for job {job_id}")
            return await self._fail(job_id, f"Content generation failed: {e}")

    async def _process(self, job: ContentJob) -> ContentJob:
        job_id = job.job_id
        config = job.config

        # Script generation
        await self._set_status(job_id, JobStatus.SCRIPT_GENERATING)

        precheck = self.safety_engine.precheck(config.topic, config.category)
        if not precheck.allowed:
            return await self._reject(job_id, PolicyRejectionError(precheck.reason, reasons=[precheck.reason]))

        try:
            generated = await self.script_generator.generate(config)
        except Exception as e:
            logger.error(f"Script generation failed for job {job_id}: {e}")
            return await self._fail(job_id, str(e) or e.__class__.__name__)

        # Safety gate
        report = self.safety_engine.evaluate(generated.safety_content(), config.category)
        if not report.passed:
            logger.warning(f"Job {job_id} blocked by safety gate (score={report.score})")
            rejection = PolicyRejectionError(
                "Safety check failed: " + report.failure_reason(),
                reasons=[issue.description for issue in report.issues],
            )
            return await self._reject(job_id, rejection, safety_report=report)

        await self.store.update(
            job_id,
            status=JobStatus.NARRATION_PROCESSING,
            title=generated.title,
            script=generated.script,
            narration_text=generated.narration_text,
            visual_prompts=list(generated.visual_prompts),
            claims=list(generated.claims),
            metadata=dict(generated.metadata),
            safety_report=report,
        )
        logger.info(f"Job {job_id} passed safety gate (score={report.score}), generating narration")

        # Narration
        try:
            narration = await self.narration.generate(
                generated.narration_text,
                config.category,
                config.format,
                job_id,
            )
        except Exception as e:
            logger.error(f"Narration failed for job {job_id}: {e}")
            return await self._fail(job_id, str(e) or e.__class__.__name__)

        # Rendering
        await self.store.update(
            job_id,
            status=JobStatus.VIDEO_RENDERING,
            narration=NarrationMetadata.from_result(narration),
        )

        try:
            video = await self.renderer.render(RenderRequest(
                category=config.category,
                format_hint=config.format,
                title=generated.title,
                script=generated.script,
                narration_text=generated.narration_text,
                audio_url=narration.audio_url,
                visual_prompts=list(generated.visual_prompts),
                duration_seconds=narration.duration_seconds,
                language=config.language,
            ))
        except Exception as e:
            logger.error(f"Video rendering failed for job {job_id}: {e}")
            return await self._fail(job_id, str(e) or e.__class__.__name__)

        if not video.is_complete:
            return await self._fail(
                job_id,
                video.error or f"Render {video.render_id} ended with status {video.status}",
            )

        job = await self.store.update(job_id, video=VideoMetadata.from_result(video))
        logger.info(f"Job {job_id} rendered: {video.url}")

        # Publishing
        automation = await self.store.get_automation(job.project_id)
        if self.publisher is None or not automation.can_publish:
            return await self._complete(job_id)

        await self._set_status(job_id, JobStatus.UPLOADING)

        try:
            published = await self.publisher.upload(PublishRequest(
                project_id=job.project_id,
                job_id=job_id,
                title=generated.title,
                description=self.build_description(generated, config),
                tags=self.extract_tags(generated),
                privacy_status=self.privacy_status,
                video_url=video.url,
            ))
        except Exception as e:
            # Rendering succeeded, so the job still completes
            logger.error(f"Publishing failed for job {job_id}: {e}")
            return await self._complete(job_id, error=f"Publish failed: {e}")

        now = datetime.now()
        return await self._complete(
            job_id,
            publish=PublishMetadata(
                video_id=published.video_id,
                video_url=published.video_url,
                uploaded_at=now,
            ),
            published_at=now,
        )

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    async def _set_status(self, job_id: str, status: JobStatus) -> ContentJob:
        logger.info(f"Job {job_id} -> {status.value}")
        return await self.store.update(job_id, status=status)

    async def _fail(self, job_id: str, error: str, **fields) -> ContentJob:
        logger.error(f"Job {job_id} failed: {error}")
        return await self.store.update(
            job_id,
            status=JobStatus.FAILED,
            error=error or "Unknown error",
            **fields,
        )

    async def _reject(self, job_id: str, rejection: PolicyRejectionError, **fields) -> ContentJob:
        """Fail a job stopped by a content rule, keeping the structured rejection."""
        job = await self.store.get(job_id)
        metadata = dict(job.metadata)
        metadata["rejection"] = rejection.to_dict()
        return await self._fail(job_id, rejection.message, metadata=metadata, **fields)

    async def _complete(self, job_id: str, error: Optional[str] = None, **fields) -> ContentJob:
        logger.info(f"Job {job_id} completed" + (f" with error: {error}" if error else ""))
        return await self.store.update(job_id, status=JobStatus.COMPLETED, error=error, **fields)

    # -------------------------------------------------------------------------
    # Publish Metadata
    # -------------------------------------------------------------------------

    @staticmethod
    def build_description(generated: GeneratedScript, config: ContentConfig) -> str:
        """Script excerpt followed by the shorts and category hashtags."""
        hashtag = re.sub(r"[^a-z0-9]", "", config.category.label.lower()) or "content"
        return "\n".join([
            generated.script[:DESCRIPTION_EXCERPT_LENGTH] + "...",
            "",
            f"#shorts #{hashtag}",
        ])

    @staticmethod
    def extract_tags(generated: GeneratedScript) -> List[str]:
        """Leading words of each visual prompt plus common tags, deduplicated."""
        tags: List[str] = []
        for prompt in generated.visual_prompts:
            tags.extend(prompt.split()[:WORDS_PER_PROMPT_TAG])
        tags.extend(COMMON_TAGS)

        return list(dict.fromkeys(tags))[:MAX_TAGS]

    async def close(self) -> None:
        """Wait for running jobs, then release collaborators."""
        await self.join()
        await self.script_generator.close()
        await self.narration.close()
        await self.renderer.close()
        if self.publisher is not None:
            await self.publisher.close()
        await self.store.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
