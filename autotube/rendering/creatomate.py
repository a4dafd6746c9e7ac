"""
Creatomate Renderer
===================

Template-based video rendering through the Creatomate REST API.

Flow:
1. Build a template from the request (background, subtitles, audio, watermark)
2. POST /renders
3. Poll GET /renders/{id} until completed, failed, or out of attempts
"""

import os
import re
import asyncio
import logging
from typing import Optional, List, Dict, Any

import httpx

from ..content.category import Category
from ..core.config import RenderingConfig
from ..core.exceptions import RenderError
from ..core.security import redact_api_key
from .base import VideoRenderer, RenderRequest, VideoResult, RenderStatus

logger = logging.getLogger(__name__)

FONT_FAMILY = "Noto Sans KR"
FRAME_RATE = 30

# Spoken words per minute used when no narration duration is known
WORDS_PER_MINUTE = 150
MIN_DURATION_SECONDS = 10

SENIOR_WORDS_PER_SUBTITLE = 3


class CreatomateRenderer(VideoRenderer):
    """
    Renders videos with Creatomate.

    Usage:
        async with CreatomateRenderer(RenderingConfig(api_key="...")) as renderer:
            result = await renderer.render(request)
            print(result.url)
    """

    env_key_name = "CREATOMATE_API_KEY"

    def __init__(self, config: Optional[RenderingConfig] = None):
        """
        Initialize the renderer.

        Args:
            config: Rendering settings (API key falls back to CREATOMATE_API_KEY)
        """
        self.config = config or RenderingConfig()
        self.api_key = self.config.api_key or os.getenv(self.env_key_name)
        self._client: Optional[httpx.AsyncClient] = None

        if not self.api_key:
            logger.warning(f"{self.env_key_name} not configured. Video rendering will be disabled.")

    async def render(self, request: RenderRequest) -> VideoResult:
        self._validate_api_key()

        logger.info(
            f"Starting video render: format={request.format_hint.value}, "
            f"category={request.category.value}"
        )

        payload = self.build_render_request(request)
        client = await self._get_client()

        try:
            response = await client.post("/renders", json=[payload])
            response.raise_for_status()
            renders = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RenderError(
                f"Failed to create render job: {redact_api_key(str(e))}",
                provider="creatomate",
            ) from e

        render = renders[0] if isinstance(renders, list) and renders else None
        if not render or not render.get("id"):
            raise RenderError("Failed to create render job", provider="creatomate")

        render_id = render["id"]
        logger.info(f"Render job created: {render_id}")

        result = await self._poll_render_status(render_id)
        if result.status == RenderStatus.FAILED.value:
            raise RenderError(
                f"Render failed: {result.error or 'unknown error'}",
                render_id=render_id,
                provider="creatomate",
            )

        logger.info(f"Render completed: {render_id}, url={result.url}")
        return VideoResult(
            render_id=result.render_id,
            status=result.status,
            url=result.url,
            cost_usd=result.cost_usd,
            duration_seconds=payload["template"]["duration"],
        )

    async def get_render_status(self, render_id: str) -> VideoResult:
        """Fetch the current state of a render."""
        self._validate_api_key()
        client = await self._get_client()

        try:
            response = await client.get(f"/renders/{render_id}")
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RenderError(
                f"Failed to get render status: {e}",
                render_id=render_id,
                provider="creatomate",
            ) from e

        return self._parse_render(render_id, data)

    async def cancel_render(self, render_id: str) -> None:
        """Cancel a queued or running render."""
        self._validate_api_key()
        client = await self._get_client()

        try:
            response = await client.delete(f"/renders/{render_id}")
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise RenderError(
                f"Failed to cancel render: {e}",
                render_id=render_id,
                provider="creatomate",
            ) from e

        logger.info(f"Render cancelled: {render_id}")

    # -------------------------------------------------------------------------
    # Template Building
    # -------------------------------------------------------------------------

    def build_render_request(self, request: RenderRequest) -> Dict[str, Any]:
        """Build the Creatomate render payload for a request."""
        is_shorts = request.format_hint.is_shorts
        width, height = (1080, 1920) if is_shorts else (1920, 1080)
        duration = request.duration_seconds or self.estimate_duration(request.narration_text)

        elements: List[Dict[str, Any]] = []
        elements.extend(self._background_elements(request, duration))

        if request.category is Category.HEALTH:
            elements.extend(self._senior_friendly_subtitles(request.narration_text, duration))
        else:
            elements.extend(self._standard_subtitles(request.narration_text, duration))

        if request.audio_url:
            elements.append({
                "type": "audio",
                "track": 4,
                "time": 0,
                "duration": duration,
                "source": request.audio_url,
                "volume": 1.0,
            })

        elements.append(self._watermark_element(duration, is_shorts))

        return {
            "template": {
                "width": width,
                "height": height,
                "frame_rate": FRAME_RATE,
                "duration": duration,
                "elements": elements,
            },
            "output_format": "mp4",
            "frame_rate": FRAME_RATE,
            "resolution": f"{width}x{height}",
        }

    @staticmethod
    def estimate_duration(text: str) -> float:
        """Estimate video length from the word count, never under 10 seconds."""
        words = len((text or "").split())
        return max(words / WORDS_PER_MINUTE * 60, MIN_DURATION_SECONDS)

    def _background_elements(self, request: RenderRequest, duration: float) -> List[Dict[str, Any]]:
        if not request.image_urls:
            return [{
                "type": "shape",
                "track": 1,
                "time": 0,
                "duration": duration,
                "width": "100%",
                "height": "100%",
                "fill_color": request.category.profile.background_color,
            }]

        segment = duration / len(request.image_urls)
        return [
            {
                "type": "image",
                "track": 1,
                "time": index * segment,
                "duration": segment,
                "source": url,
                "width": "100%",
                "height": "100%",
                "fit": "cover",
                "animations": [
                    {"time": "start", "duration": 0.5, "easing": "ease-in-out", "opacity": [0, 1]},
                    {"time": "end", "duration": 0.5, "easing": "ease-in-out", "opacity": [1, 0]},
                ],
            }
            for index, url in enumerate(request.image_urls)
        ]

    def _senior_friendly_subtitles(self, text: str, duration: float) -> List[Dict[str, Any]]:
        """Three words at a time, large and centred."""
        words = text.split()
        if not words:
            return []

        chunks = [
            " ".join(words[i:i + SENIOR_WORDS_PER_SUBTITLE])
            for i in range(0, len(words), SENIOR_WORDS_PER_SUBTITLE)
        ]
        segment = duration / len(chunks)

        return [
            {
                "type": "text",
                "track": 3,
                "time": index * segment,
                "duration": segment,
                "text": chunk,
                "font_family": FONT_FAMILY,
                "font_weight": "700",
                "font_size": "80px",
                "color": "#FFFFFF",
                "stroke_color": "#000000",
                "stroke_width": "8px",
                "x": "50%",
                "y": "50%",
                "width": "90%",
                "align": "center",
                "x_alignment": "50%",
                "y_alignment": "50%",
                "animations": [
                    {"time": "start", "duration": 0.3, "easing": "ease-out", "scale": [0.8, 1]},
                ],
            }
            for index, chunk in enumerate(chunks)
        ]

    def _standard_subtitles(self, text: str, duration: float) -> List[Dict[str, Any]]:
        """One sentence per subtitle along the bottom."""
        sentences = [s.strip() for s in re.split(r"[.!?]+", text or "") if s.strip()]
        if not sentences:
            return []

        segment = duration / len(sentences)
        return [
            {
                "type": "text",
                "track": 3,
                "time": index * segment,
                "duration": segment,
                "text": sentence,
                "font_family": FONT_FAMILY,
                "font_weight": "600",
                "font_size": "48px",
                "color": "#FFFFFF",
                "stroke_color": "#000000",
                "stroke_width": "4px",
                "x": "50%",
                "y": "85%",
                "width": "90%",
                "align": "center",
                "x_alignment": "50%",
                "y_alignment": "50%",
            }
            for index, sentence in enumerate(sentences)
        ]

    def _watermark_element(self, duration: float, is_shorts: bool) -> Dict[str, Any]:
        return {
            "type": "text",
            "track": 5,
            "time": 0,
            "duration": duration,
            "text": self.config.watermark,
            "font_family": FONT_FAMILY,
            "font_weight": "500",
            "font_size": "24px" if is_shorts else "28px",
            "color": "#FFFFFF",
            "opacity": 0.7,
            "x": "95%",
            "y": "5%",
            "x_alignment": "100%",
            "y_alignment": "0%",
        }

    # -------------------------------------------------------------------------
    # Polling
    # -------------------------------------------------------------------------

    async def _poll_render_status(self, render_id: str) -> VideoResult:
        max_attempts = self.config.max_poll_attempts
        client = await self._get_client()

        for attempt in range(1, max_attempts + 1):
            await asyncio.sleep(self.config.poll_interval)

            try:
                response = await client.get(f"/renders/{render_id}")
                response.raise_for_status()
                data = response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Poll attempt {attempt} failed: {e}")
                continue

            status = data.get("status")
            logger.debug(f"Poll attempt {attempt}/{max_attempts}: status={status}")

            if status in (RenderStatus.COMPLETED.value, RenderStatus.FAILED.value):
                return self._parse_render(render_id, data)

        raise RenderError(
            "Render timeout - exceeded maximum poll attempts",
            render_id=render_id,
            provider="creatomate",
        )

    @staticmethod
    def _parse_render(render_id: str, data: Dict[str, Any]) -> VideoResult:
        status = data.get("status", "unknown")
        return VideoResult(
            render_id=render_id,
            status=status,
            url=data.get("url"),
            cost_usd=data.get("actual_cost") or data.get("estimated_cost"),
            error=(data.get("error_message") or "Render failed") if status == RenderStatus.FAILED.value else None,
        )

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    def _validate_api_key(self) -> None:
        if not self.api_key:
            raise RenderError(
                "Video rendering is not configured. Set CREATOMATE_API_KEY environment variable.",
                provider="creatomate",
                recoverable=False,
            )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout),
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
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
