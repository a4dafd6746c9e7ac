"""
ElevenLabs Provider
===================

Paid, higher-quality narration via the ElevenLabs REST API.

- Cost: $0.30 per 1,000 characters
- Max input: 5,000 characters per request
- Model: eleven_multilingual_v2 (Korean capable)
"""

import os
import asyncio
import logging
from typing import Optional, List, Dict, Any

import aiofiles
import httpx

from ..content.category import Category, ContentFormat
from ..core.config import StorageConfig
from ..core.exceptions import ProviderError, RateLimitError, TimeoutError
from ..core.security import redact_api_key
from .base import BaseNarrationProvider, NarrationOptions, NarrationResult, Voice
from .factory import register_provider

logger = logging.getLogger(__name__)

# USD
COST_PER_CHARACTER = 0.30 / 1000
COST_TARGET_PER_CONTENT = 0.015

DEFAULT_VOICE_SETTINGS = {
    "stability": 0.7,
    "similarity_boost": 0.8,
    "style": 0.3,
    "use_speaker_boost": True,
}


@register_provider("elevenlabs")
class ElevenLabsNarrationProvider(BaseNarrationProvider):
    """
    ElevenLabs backend.

    Usage:
        async with ElevenLabsNarrationProvider(api_key="...") as provider:
            result = await provider.synthesize(text, Category.FINANCE, job_id="job_1")
    """

    env_key_name = "ELEVENLABS_API_KEY"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = "https://api.elevenlabs.io/v1",
        model: str = "eleven_multilingual_v2",
        storage: Optional[StorageConfig] = None,
        timeout: int = 60,
    ):
        """
        Initialize the provider.

        Args:
            api_key: API key (or read from ELEVENLABS_API_KEY)
            base_url: Base URL for the API
            model: ElevenLabs model id
            storage: Audio storage settings
            timeout: Request timeout in seconds
        """
        super().__init__(storage=storage, timeout=timeout)
        self.api_key = api_key or os.getenv(self.env_key_name)
        self.base_url = base_url.rstrip("/")
        self.model = model

        self._client: Optional[httpx.AsyncClient] = None
        self._client_lock = asyncio.Lock()

        if not self.api_key:
            logger.warning(
                f"No API key found for {self.provider_name}. "
                f"Set {self.env_key_name} environment variable or pass api_key parameter."
            )

    @property
    def provider_name(self) -> str:
        return "elevenlabs"

    @property
    def max_characters(self) -> int:
        return 5000

    async def synthesize(
        self,
        text: str,
        category: Category,
        format_hint: Optional[ContentFormat] = None,
        job_id: str = "",
        options: Optional[NarrationOptions] = None,
    ) -> NarrationResult:
        self.validate(text)

        if not self.api_key:
            raise ProviderError(
                "ElevenLabs API key not configured",
                provider=self.provider_name,
                recoverable=False,
            )

        category = Category.from_value(category)
        options = options or NarrationOptions()
        voice_id = options.voice_id or self.recommended_voice(category).voice_id
        settings = {**DEFAULT_VOICE_SETTINGS, **(options.voice_settings or self.voice_settings(category))}

        logger.info(f"[ElevenLabs] Generating TTS for job {job_id} ({len(text)} chars, voice={voice_id})")

        payload = {
            "text": text,
            "model_id": self.model,
            "voice_settings": {
                "stability": settings["stability"],
                "similarity_boost": settings["similarity_boost"],
                "style": settings["style"],
                "use_speaker_boost": settings["use_speaker_boost"],
            },
        }

        client = await self._get_client()
        try:
            response = await client.post(
                f"{self.base_url}/text-to-speech/{voice_id}",
                json=payload,
                headers={"Accept": "audio/mpeg"},
            )
        except httpx.TimeoutException as e:
            raise TimeoutError(
                "ElevenLabs request timed out",
                operation="text_to_speech",
                timeout_seconds=self.timeout,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"ElevenLabs request failed: {redact_api_key(str(e))}",
                provider=self.provider_name,
            ) from e

        self._raise_for_status(response)

        audio_path, audio_url = self._allocate_output(job_id)
        async with aiofiles.open(audio_path, "wb") as f:
            await f.write(response.content)

        result = self._build_result(text, audio_path, audio_url, voice_id, settings)
        logger.info(
            f"[ElevenLabs] Generation successful: {result.duration_seconds}s, "
            f"${result.cost_usd:.4f} USD"
        )
        return result

    def recommended_voice(self, category: Category) -> Voice:
        voice_id = Category.from_value(category).profile.elevenlabs_voice
        return Voice(voice_id, voice_id, "ko-KR", "neutral", self.provider_name)

    def voice_settings(self, category: Category) -> Dict[str, Any]:
        settings = dict(DEFAULT_VOICE_SETTINGS)
        settings.update(dict(Category.from_value(category).profile.elevenlabs_settings))
        return settings

    def estimate_cost(self, text: str) -> float:
        cost = len(text) * COST_PER_CHARACTER
        if cost > COST_TARGET_PER_CONTENT:
            logger.warning(f"TTS cost ${cost:.4f} exceeds target ${COST_TARGET_PER_CONTENT}")
        return cost

    async def health_check(self) -> Dict[str, Any]:
        if not self.api_key:
            return {"status": "unhealthy", "error": "API key not configured"}

        try:
            client = await self._get_client()
            response = await client.get(f"{self.base_url}/user")
            if response.status_code != 200:
                return {"status": "unhealthy", "error": f"HTTP {response.status_code}"}

            subscription = response.json().get("subscription", {})
            used = subscription.get("character_count", 0)
            limit = subscription.get("character_limit", 0)
            return {
                "status": "healthy",
                "quota": {
                    "used": used,
                    "limit": limit,
                    "remaining": max(limit - used, 0),
                },
            }
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"ElevenLabs health check failed: {redact_api_key(str(e))}")
            return {"status": "unhealthy", "error": str(e)}

    async def available_voices(self, language: Optional[str] = None) -> List[Voice]:
        if not self.api_key:
            return []

        try:
            client = await self._get_client()
            response = await client.get(f"{self.base_url}/voices")
            self._raise_for_status(response)
            voices = response.json().get("voices", [])
        except (ProviderError, httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch ElevenLabs voices: {e}")
            return []

        result = []
        for v in voices:
            labels = v.get("labels") or {}
            voice = Voice(
                voice_id=v.get("voice_id", ""),
                name=v.get("name", ""),
                language=labels.get("language", "en"),
                gender=labels.get("gender", "neutral"),
                provider=self.provider_name,
            )
            if language and not voice.language.startswith(language):
                continue
            result.append(voice)
        return result

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.timeout),
                    headers={
                        "xi-api-key": self.api_key or "",
                        "Content-Type": "application/json",
                    },
                )
            return self._client

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code == 200:
            return

        body = response.text
        if response.status_code == 429:
            retry_after = response.headers.get("retry-after")
            raise RateLimitError(
                "ElevenLabs rate limit exceeded",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                provider=self.provider_name,
                response_body=body,
            )

        raise ProviderError(
            f"ElevenLabs API error ({response.status_code}): {body[:200]}",
            provider=self.provider_name,
            status_code=response.status_code,
            response_body=body,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
