"""
Edge TTS Provider
=================

Free Microsoft Edge neural voices via the ``edge-tts`` package.

- Cost: always $0.00
- Max input: 10,000 characters per request
- Korean voices: ko-KR-SunHiNeural, ko-KR-InJoonNeural, ...
"""

import logging
from typing import Optional, List, Dict, Any

import edge_tts

from ..content.category import Category, ContentFormat
from ..core.exceptions import ProviderError
from .base import BaseNarrationProvider, NarrationOptions, NarrationResult, Voice
from .factory import register_provider

logger = logging.getLogger(__name__)


KOREAN_VOICES = [
    Voice("ko-KR-SunHiNeural", "SunHi (여성, 따뜻함)", "ko-KR", "female", "edge"),
    Voice("ko-KR-InJoonNeural", "InJoon (남성, 전문적)", "ko-KR", "male", "edge"),
    Voice("ko-KR-BongJinNeural", "BongJin (남성, 캐주얼)", "ko-KR", "male", "edge"),
    Voice("ko-KR-GookMinNeural", "GookMin (남성, 뉴스)", "ko-KR", "male", "edge"),
    Voice("ko-KR-JiMinNeural", "JiMin (여성, 밝음)", "ko-KR", "female", "edge"),
    Voice("ko-KR-SeoHyeonNeural", "SeoHyeon (여성, 차분)", "ko-KR", "female", "edge"),
    Voice("ko-KR-SoonBokNeural", "SoonBok (여성, 성숙)", "ko-KR", "female", "edge"),
    Voice("ko-KR-YuJinNeural", "YuJin (여성, 젊음)", "ko-KR", "female", "edge"),
]


@register_provider("edge")
class EdgeNarrationProvider(BaseNarrationProvider):
    """
    Edge TTS backend.

    Usage:
        provider = EdgeNarrationProvider()
        result = await provider.synthesize("안녕하세요", Category.HEALTH, job_id="job_1")
        print(result.audio_url)
    """

    @property
    def provider_name(self) -> str:
        return "edge"

    @property
    def max_characters(self) -> int:
        return 10000

    @property
    def is_free(self) -> bool:
        return True

    async def synthesize(
        self,
        text: str,
        category: Category,
        format_hint: Optional[ContentFormat] = None,
        job_id: str = "",
        options: Optional[NarrationOptions] = None,
    ) -> NarrationResult:
        self.validate(text)

        category = Category.from_value(category)
        options = options or NarrationOptions()
        voice_id = options.voice_id or self.recommended_voice(category).voice_id
        settings = dict(options.voice_settings) if options.voice_settings else self.voice_settings(category)

        audio_path, audio_url = self._allocate_output(job_id)

        logger.info(f"[Edge TTS] Generating audio for job {job_id} ({len(text)} chars, voice={voice_id})")

        communicate = edge_tts.Communicate(
            text,
            voice_id,
            rate=settings.get("rate", "+0%"),
            pitch=settings.get("pitch", "+0Hz"),
            volume=settings.get("volume", "+0%"),
        )

        try:
            await communicate.save(str(audio_path))
        except Exception as e:
            raise ProviderError(
                f"Edge TTS synthesis failed: {e}",
                provider=self.provider_name,
            ) from e

        result = self._build_result(text, audio_path, audio_url, voice_id, settings)
        logger.info(f"[Edge TTS] Generation successful: {result.duration_seconds}s, $0.0000 USD")
        return result

    def recommended_voice(self, category: Category) -> Voice:
        voice_id = Category.from_value(category).profile.edge_voice
        for voice in KOREAN_VOICES:
            if voice.voice_id == voice_id:
                return voice
        return Voice(voice_id, voice_id, "ko-KR", "neutral", "edge")

    def voice_settings(self, category: Category) -> Dict[str, Any]:
        profile = Category.from_value(category).profile
        return {
            "rate": profile.edge_rate,
            "pitch": profile.edge_pitch,
            "volume": profile.edge_volume,
        }

    def estimate_cost(self, text: str) -> float:
        return 0.0

    async def health_check(self) -> Dict[str, Any]:
        return {
            "status": "healthy",
            "quota": {
                "type": "unlimited",
                "cost": 0,
                "message": "Edge TTS is free with no usage limits",
            },
        }

    async def available_voices(self, language: Optional[str] = None) -> List[Voice]:
        if language and language not in ("ko", "ko-KR"):
            return []
        return list(KOREAN_VOICES)
