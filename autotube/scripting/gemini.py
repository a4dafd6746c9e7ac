"""
Gemini Script Generator
=======================

Generates Hook-Body-CTA video scripts with Gemini through the
Generative Language REST API, in JSON response mode.
"""

import os
import json
import asyncio
import logging
from typing import Optional, List, Dict, Any

import httpx

from ..content.category import Category, ContentFormat
from ..content.claim import Claim
from ..content.job import ContentConfig
from ..core.config import ScriptConfig
from ..core.exceptions import ProviderError, ScriptGenerationError, RateLimitError
from ..core.security import sanitize_prompt, redact_api_key
from .base import ScriptGenerator, GeneratedScript

logger = logging.getLogger(__name__)


RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING", "description": "Video title (engaging and SEO-friendly)"},
        "script": {"type": "STRING", "description": "Full script with Hook-Body-CTA structure"},
        "voiceoverText": {"type": "STRING", "description": "Clean narration text for TTS"},
        "imagePrompts": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "English image prompt for each scene",
        },
        "criticalClaims": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "text": {"type": "STRING"},
                    "confidence": {"type": "NUMBER"},
                    "source": {"type": "STRING"},
                },
                "required": ["text", "confidence"],
            },
        },
        "metadata": {
            "type": "OBJECT",
            "properties": {
                "description": {"type": "STRING"},
                "tags": {"type": "ARRAY", "items": {"type": "STRING"}},
            },
            "required": ["description", "tags"],
        },
    },
    "required": ["title", "script", "voiceoverText", "imagePrompts", "criticalClaims", "metadata"],
}

KOREAN_INSTRUCTIONS = {
    Category.HEALTH: (
        "- 60대 이상 시청자를 위한 쉬운 언어 사용\n"
        "- 의학 전문용어 대신 일상 용어 사용\n"
        "- 실천 가능한 건강 팁 제공\n"
        "- 과장된 효과 주장 금지\n"
        "- 반드시 의료 전문가 상담 권고 포함"
    ),
    Category.FINANCE: (
        "- 투자 리스크 명확히 고지\n"
        "- 과거 수익률이 미래를 보장하지 않음 언급\n"
        "- 객관적 데이터 기반 분석\n"
        "- 특정 종목 추천 자제"
    ),
    Category.TECH: (
        "- 최신 트렌드 반영\n"
        "- 기술 개념을 쉽게 설명\n"
        "- 실제 사용 경험 기반\n"
        "- 장단점 균형있게 제시"
    ),
    Category.HISTORY: (
        "- 스토리텔링 기법 활용\n"
        "- 역사적 사실 정확성 유지\n"
        "- 흥미로운 일화 포함\n"
        "- 현재와의 연결점 제시"
    ),
    Category.COMMERCE: (
        "- 솔직한 장단점 분석\n"
        "- 실제 사용 경험 기반\n"
        "- 가성비 평가 포함\n"
        "- 제휴 관계 투명하게 공개"
    ),
}


class GeminiScriptGenerator(ScriptGenerator):
    """
    Script generator backed by Gemini.

    Usage:
        async with GeminiScriptGenerator(ScriptConfig(api_key="...")) as generator:
            script = await generator.generate(ContentConfig(topic="무릎 건강", category=Category.HEALTH))
    """

    env_key_name = "GEMINI_API_KEY"

    def __init__(self, config: Optional[ScriptConfig] = None):
        self.config = config or ScriptConfig()
        self.api_key = self.config.api_key or os.getenv(self.env_key_name)
        self._client: Optional[httpx.AsyncClient] = None

        if not self.api_key:
            logger.warning(f"{self.env_key_name} is not set. Script generation will not function.")

    async def generate(self, config: ContentConfig) -> GeneratedScript:
        if not self.api_key:
            raise ScriptGenerationError(
                f"{self.env_key_name} is not configured",
                provider="gemini",
                recoverable=False,
            )

        system_prompt = self.build_system_prompt(config)
        user_prompt = self.build_user_prompt(config)

        last_error: Optional[Exception] = None
        for attempt in range(1, self.config.max_retries + 1):
            try:
                logger.info(f"Gemini API call attempt {attempt}/{self.config.max_retries}")
                return await self._call_api(system_prompt, user_prompt)
            except ProviderError as e:
                last_error = e
                logger.warning(f"Attempt {attempt} failed: {e}")
                if not e.recoverable:
                    break
                if attempt < self.config.max_retries:
                    delay = self.config.retry_delay * (2 ** (attempt - 1))
                    logger.info(f"Retrying in {delay}s...")
                    await asyncio.sleep(delay)

        raise last_error

    # -------------------------------------------------------------------------
    # Prompts
    # -------------------------------------------------------------------------

    def build_system_prompt(self, config: ContentConfig) -> str:
        category = config.category
        profile = category.profile

        if config.language == "ko":
            instructions = KOREAN_INSTRUCTIONS.get(category, "")
            audience = f"대상 시청자: {profile.target_audience}\n" if profile.target_audience else ""
            style = f" 이미지 스타일: {profile.image_style}" if profile.image_style else ""
            return (
                f"당신은 {profile.label} 분야의 전문 유튜브 콘텐츠 작가입니다.\n"
                f"{instructions}\n\n"
                f"톤: {config.tone.value}\n"
                f"형식: {config.format.value}\n"
                f"언어: {config.language}\n"
                f"{audience}\n"
                "1. Hook (첫 3-5초): 시청자의 주목을 끄는 강력한 질문이나 문제 제기\n"
                "2. Body (메인 콘텐츠): 명확한 정보 전달, 구체적인 예시 포함\n"
                "3. CTA (마무리): 구독/좋아요/댓글 유도\n\n"
                "- 모든 주장은 검증 가능해야 합니다\n"
                "- 과장되거나 허위 정보를 포함하지 마세요\n"
                "- 의료/금융 정보는 반드시 전문가 상담 권고를 포함하세요\n"
                "- 시청자에게 실질적인 가치를 제공하세요\n\n"
                "스크립트의 각 장면마다 영어로 작성된 이미지 프롬프트를 제공하세요 "
                f"(AI 이미지 생성 도구에 사용).{style}"
            )

        instructions = "\n".join(f"- {g}" for g in profile.script_guidelines)
        if category.is_sensitive:
            instructions += "\n- Must include professional consultation advice"
        audience = f"Target audience: {profile.target_audience}\n" if profile.target_audience else ""
        style = f" Image style: {profile.image_style}" if profile.image_style else ""
        return (
            f"You are a professional YouTube content writer specializing in {profile.label}.\n"
            f"{instructions}\n\n"
            f"Tone: {config.tone.value}\n"
            f"Format: {config.format.value}\n"
            f"Language: {config.language}\n"
            f"{audience}\n"
            "1. Hook (first 3-5 seconds): A powerful question or problem statement to grab attention\n"
            "2. Body (main content): Clear information delivery with specific examples\n"
            "3. CTA (closing): Encourage subscription/likes/comments\n\n"
            "- All claims must be verifiable\n"
            "- Avoid exaggerated or false information\n"
            "- Medical/financial information must include professional consultation advice\n"
            "- Provide real value to viewers\n\n"
            f"Provide image prompts in English for each scene (for AI image generation tools).{style}"
        )

    def build_user_prompt(self, config: ContentConfig) -> str:
        topic = sanitize_prompt(config.topic)
        is_shorts = config.format is ContentFormat.SHORTS

        if config.language == "ko":
            duration = "60초 이내" if is_shorts else "5분 이상"
            format_type = "숏폼" if is_shorts else "롱폼"
            return (
                f"주제: {topic}\n\n"
                f"위 주제에 대한 {duration} {format_type} 영상 스크립트를 생성해주세요.\n"
                "스크립트는 반드시 Hook-Body-CTA 구조로 작성하고, "
                "각 장면마다 시각적 이미지 프롬프트를 제공해주세요."
            )

        length = "60-second short-form" if is_shorts else "5+ minute long-form"
        return (
            f"Topic: {topic}\n\n"
            f"Generate a {length} video script for this topic.\n"
            "The script must follow the Hook-Body-CTA structure and provide "
            "visual image prompts for each scene."
        )

    # -------------------------------------------------------------------------
    # API
    # -------------------------------------------------------------------------

    async def _call_api(self, system_prompt: str, user_prompt: str) -> GeneratedScript:
        endpoint = f"{self.config.base_url}/models/{self.config.model}:generateContent"
        payload = {
            "contents": [{
                "role": "user",
                "parts": [{"text": f"{system_prompt}\n\n---\n\n{user_prompt}"}],
            }],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
                "temperature": self.config.temperature,
                "topP": 0.95,
                "maxOutputTokens": 8192,
            },
        }

        client = await self._get_client()
        try:
            response = await client.post(endpoint, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            raise ScriptGenerationError(
                f"Gemini request failed: {redact_api_key(str(e))}",
                provider="gemini",
            ) from e

        if response.status_code == 429:
            raise RateLimitError("Gemini quota exceeded", provider="gemini", response_body=response.text)
        if response.status_code != 200:
            raise ScriptGenerationError(
                f"Gemini API error ({response.status_code})",
                provider="gemini",
                status_code=response.status_code,
                response_body=response.text,
            )

        data = response.json()
        metrics = self._cost_metrics(data.get("usageMetadata") or {})
        logger.info(f"Gemini API call completed. Cost: ${metrics['estimated_cost']:.6f}")
        logger.debug(
            f"Token usage - Input: {metrics['input_tokens']}, "
            f"Output: {metrics['output_tokens']}, Total: {metrics['total_tokens']}"
        )

        script = self.parse_response(self._extract_text(data))
        script.metadata["cost_metrics"] = metrics
        return script

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        text = ""
        for candidate in data.get("candidates") or []:
            for part in (candidate.get("content") or {}).get("parts") or []:
                text += part.get("text") or ""
        return text

    def _cost_metrics(self, usage: Dict[str, Any]) -> Dict[str, Any]:
        input_tokens = usage.get("promptTokenCount", 0)
        output_tokens = usage.get("candidatesTokenCount", 0)
        return {
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": usage.get("totalTokenCount", input_tokens + output_tokens),
            "estimated_cost": (
                input_tokens / 1_000_000 * self.config.input_cost_per_million
                + output_tokens / 1_000_000 * self.config.output_cost_per_million
            ),
        }

    @staticmethod
    def parse_response(text: str) -> GeneratedScript:
        """
        Parse Gemini's JSON output into a GeneratedScript.

        Raises:
            ScriptGenerationError: If the JSON is invalid or required fields are missing
        """
        try:
            content = json.loads(text or "{}")
        except json.JSONDecodeError as e:
            raise ScriptGenerationError(
                "Invalid JSON response from Gemini API",
                provider="gemini",
                response_body=text,
            ) from e

        if not isinstance(content, dict):
            raise ScriptGenerationError("Invalid JSON response from Gemini API", provider="gemini")

        narration = content.get("voiceoverText") or content.get("narration_text")
        if not content.get("title") or not content.get("script") or not narration:
            raise ScriptGenerationError("Incomplete response from Gemini API", provider="gemini")

        claims: List[Claim] = [
            Claim.from_dict(c)
            for c in (content.get("criticalClaims") or content.get("claims") or [])
            if isinstance(c, dict)
        ]
        metadata = content.get("metadata") or {}

        return GeneratedScript(
            title=content["title"],
            script=content["script"],
            narration_text=narration,
            visual_prompts=list(content.get("imagePrompts") or content.get("visual_prompts") or []),
            claims=claims,
            metadata={
                "description": metadata.get("description", ""),
                "tags": list(metadata.get("tags") or []),
            },
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
