"""
Narration Strategy
==================

Primary/secondary narration with retries and a single fallback.

The primary backend gets the whole retry budget (3 attempts by default,
sleeping 1s then 2s between them). Once that is exhausted the secondary
backend is tried exactly once with the same input. If it also fails, the
raised NarrationError names the primary provider and is chained to the
primary's last error.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any, List, TYPE_CHECKING

import aiofiles.os

from ..content.category import Category, ContentFormat
from ..content.job import NarrationMetadata
from ..core.config import Config, NarrationConfig, get_config
from ..core.exceptions import NarrationError, ValidationError
from .base import BaseNarrationProvider, NarrationOptions, NarrationResult, Voice
from .factory import get_provider

if TYPE_CHECKING:
    from ..workflow.store import JobStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CostEstimate:
    """Projected spend on the primary backend."""

    provider: str
    cost: float


@dataclass(frozen=True)
class CostComparison:
    """Free vs paid backend cost for the same text."""

    free: float
    paid: float
    savings: float
    savings_percent: float


class NarrationStrategy:
    """
    Selects between two narration backends.

    Usage:
        strategy = NarrationStrategy.from_config(store=store)
        result = await strategy.generate(text, Category.HEALTH, ContentFormat.SHORTS, job_id)
    """

    def __init__(
        self,
        primary: BaseNarrationProvider,
        secondary: BaseNarrationProvider,
        config: Optional[NarrationConfig] = None,
        store: Optional["JobStore"] = None,
    ):
        """
        Initialize the strategy.

        Args:
            primary: Preferred backend, owns the retry budget
            secondary: Fallback backend, tried once
            config: Retry settings
            store: Job store used for best-effort cost tracking
        """
        self.primary = primary
        self.secondary = secondary
        self.config = config or NarrationConfig()
        self.store = store

        logger.info(
            f"Narration provider: {primary.provider_name} (primary), "
            f"{secondary.provider_name} (fallback)"
        )

    @classmethod
    def from_config(
        cls,
        config: Optional[Config] = None,
        store: Optional["JobStore"] = None,
    ) -> "NarrationStrategy":
        """Build both backends from configuration."""
        config = config or get_config()
        narration = config.narration

        def build(name: str) -> BaseNarrationProvider:
            if name == "elevenlabs":
                return get_provider(
                    name,
                    api_key=narration.elevenlabs_api_key,
                    model=narration.elevenlabs_model,
                    storage=config.storage,
                    timeout=narration.timeout,
                )
            return get_provider(name, storage=config.storage, timeout=narration.timeout)

        return cls(
            primary=build(narration.primary_provider),
            secondary=build(narration.secondary_provider),
            config=narration,
            store=store,
        )

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    async def generate(
        self,
        text: str,
        category: Category,
        format_hint: Optional[ContentFormat] = None,
        job_id: str = "",
        options: Optional[NarrationOptions] = None,
    ) -> NarrationResult:
        """
        Synthesize narration, retrying the primary and falling back once.

        Raises:
            ValidationError: Input rejected by the primary (never retried)
            NarrationError: Both backends failed
        """
        self.primary.validate(text)

        category = Category.from_value(category)
        max_attempts = self.config.max_attempts
        last_error: Optional[Exception] = None

        for attempt in range(1, max_attempts + 1):
            try:
                result = await self.primary.synthesize(text, category, format_hint, job_id, options)
            except ValidationError:
                raise
            except Exception as e:
                last_error = e
                logger.warning(
                    f"[{self.primary.provider_name}] Attempt {attempt}/{max_attempts} "
                    f"failed for job {job_id}: {e}"
                )
                if attempt < max_attempts:
                    delay = self.config.retry_delay * (self.config.retry_multiplier ** (attempt - 1))
                    logger.debug(f"Retrying in {delay}s...")
                    await asyncio.sleep(delay)
                continue

            await self._track_cost(job_id, result)
            return result

        logger.info(f"Trying fallback narration provider: {self.secondary.provider_name}")

        try:
            result = await self.secondary.synthesize(text, category, format_hint, job_id, options)
        except Exception as fallback_error:
            logger.error(
                f"Fallback narration provider ({self.secondary.provider_name}) "
                f"also failed for job {job_id}: {fallback_error}"
            )
            raise NarrationError(
                f"Narration failed after {max_attempts} {self.primary.provider_name} "
                f"attempts: {last_error}",
                provider=self.primary.provider_name,
                details={
                    "attempts": max_attempts,
                    "fallback_provider": self.secondary.provider_name,
                    "fallback_error": str(fallback_error),
                },
            ) from last_error

        await self._track_cost(job_id, result)
        return result

    async def _track_cost(self, job_id: str, result: NarrationResult) -> None:
        """Attach narration cost to the job. Failures never propagate."""
        if self.store is None or not job_id:
            return

        try:
            await self.store.update(job_id, narration=NarrationMetadata.from_result(result))
            logger.debug(
                f"Narration cost tracked: {result.provider}, ${result.cost_usd:.4f}, "
                f"{result.character_count} chars"
            )
        except Exception as e:
            logger.warning(f"Failed to track narration cost for job {job_id}: {e}")

    # -------------------------------------------------------------------------
    # Cost & Voices
    # -------------------------------------------------------------------------

    def estimate_cost(self, text: str) -> CostEstimate:
        """Projected cost on the primary backend, without generating anything."""
        return CostEstimate(
            provider=self.primary.provider_name,
            cost=self.primary.estimate_cost(text),
        )

    def compare_costs(self, text: str) -> CostComparison:
        """Compare the free backend against the paid one for ``text``."""
        if self.primary.is_free or not self.secondary.is_free:
            free_provider, paid_provider = self.primary, self.secondary
        else:
            free_provider, paid_provider = self.secondary, self.primary

        free = free_provider.estimate_cost(text)
        paid = paid_provider.estimate_cost(text)
        savings = paid - free
        savings_percent = (savings / paid) * 100 if paid > 0 else 100.0

        return CostComparison(free=free, paid=paid, savings=savings, savings_percent=savings_percent)

    async def available_voices(self, language: Optional[str] = None) -> List[Voice]:
        return await self.primary.available_voices(language)

    def voice_settings(self, category: Category) -> Dict[str, Any]:
        return self.primary.voice_settings(Category.from_value(category))

    # -------------------------------------------------------------------------
    # Audio Files
    # -------------------------------------------------------------------------

    async def delete_audio_file(self, audio_path: str) -> None:
        """Remove a generated audio file, logging instead of raising on failure."""
        try:
            await aiofiles.os.remove(audio_path)
            logger.debug(f"Audio file deleted: {audio_path}")
        except OSError as e:
            logger.warning(f"Failed to delete audio file {audio_path}: {e}")

    async def audio_stats(self, audio_path: str) -> Dict[str, Any]:
        """Size and modification time of a generated audio file."""
        stats = await aiofiles.os.stat(audio_path)
        return {"size": stats.st_size, "modified": stats.st_mtime}

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    async def health_check(self) -> Dict[str, Any]:
        """
        Report both backends.

        ``healthy`` when the primary is up, ``degraded`` when only the
        fallback is, ``unhealthy`` when neither is.
        """
        primary_health = await self.primary.health_check()
        secondary_health = await self.secondary.health_check()

        if primary_health.get("status") == "healthy":
            status = "healthy"
        elif secondary_health.get("status") == "healthy":
            status = "degraded"
        else:
            status = "unhealthy"

        return {
            "status": status,
            "provider": self.primary.provider_name,
            "primary": primary_health,
            "fallback": secondary_health,
        }

    async def close(self) -> None:
        await self.primary.close()
        await self.secondary.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
