"""
Content Categories
==================

Closed set of content categories. Each category carries the data that
drives voice selection, safety policy, disclaimers and rendering style.
Unrecognised names resolve to ``Category.GENERAL``.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryProfile:
    """Per-category configuration."""

    label: str
    sensitive: bool = False

    # Edge TTS voice and prosody
    edge_voice: str = "ko-KR-SunHiNeural"
    edge_rate: str = "+0%"
    edge_pitch: str = "+0Hz"
    edge_volume: str = "+0%"

    # ElevenLabs voice and settings
    elevenlabs_voice: str = "EXAVITQu4vr4xnSDxMaL"
    elevenlabs_settings: Tuple[Tuple[str, float], ...] = (
        ("stability", 0.7),
        ("similarity_boost", 0.8),
        ("style", 0.3),
    )

    disclaimer: Optional[str] = None
    background_color: str = "#1E1E1E"
    image_style: str = ""
    target_audience: str = ""
    script_guidelines: Tuple[str, ...] = field(default_factory=tuple)


HEALTH_DISCLAIMER = """\
⚠️ 의료 면책 조항
이 영상은 일반적인 건강 정보 제공 목적으로만 제작되었습니다.
• 전문 의료 상담을 대체하지 않습니다
• 개인의 건강 상태에 따라 적용이 다를 수 있습니다
• 증상이 있으시면 반드시 의료 전문가와 상담하세요
• 약물 복용 전 담당 의사와 상의하세요"""

FINANCE_DISCLAIMER = """\
⚠️ 투자 면책 조항
이 영상은 교육 및 정보 제공 목적으로만 제작되었습니다.
• 투자 권유나 추천이 아닙니다
• 과거 수익률이 미래 수익을 보장하지 않습니다
• 투자 결정 전 반드시 전문가와 상담하세요
• 투자에 따른 손실 책임은 본인에게 있습니다"""


class Category(Enum):
    """Content category (vertical)."""

    HEALTH = "health"
    FINANCE = "finance"
    TECH = "tech"
    HISTORY = "history"
    COMMERCE = "commerce"

    # Fallback for unrecognised category names
    GENERAL = "general"

    @classmethod
    def from_value(cls, value: Any) -> "Category":
        """
        Resolve a category from its key, its display label, or a Category.

        Unknown values fall back to GENERAL.
        """
        if isinstance(value, cls):
            return value
        if not value:
            return cls.GENERAL

        needle = str(value).strip().lower()
        for category in cls:
            if needle == category.value or needle == category.profile.label.lower():
                return category

        logger.debug(f"Unknown category '{value}', using general")
        return cls.GENERAL

    @property
    def profile(self) -> CategoryProfile:
        """Configuration attached to this category."""
        return _PROFILES[self]

    @property
    def label(self) -> str:
        return self.profile.label

    @property
    def is_sensitive(self) -> bool:
        """Whether this is a YMYL (Your Money or Your Life) category."""
        return self.profile.sensitive

    @property
    def disclaimer(self) -> Optional[str]:
        return self.profile.disclaimer


class ContentFormat(Enum):
    """Output video format."""

    SHORTS = "Shorts"
    LONG_FORM = "Long-form"

    @classmethod
    def from_value(cls, value: Any) -> "ContentFormat":
        if isinstance(value, cls):
            return value
        needle = str(value or "").strip().lower().replace("_", "-")
        for fmt in cls:
            if needle == fmt.value.lower():
                return fmt
        if needle in ("long", "longform"):
            return cls.LONG_FORM
        return cls.SHORTS

    @property
    def is_shorts(self) -> bool:
        return self is ContentFormat.SHORTS


class Tone(Enum):
    """Narration tone requested for the script."""

    PROFESSIONAL = "Professional"
    FRIENDLY = "Friendly"
    MYSTERIOUS = "Mysterious"
    URGENT = "Urgent"


_PROFILES: Dict[Category, CategoryProfile] = {
    Category.HEALTH: CategoryProfile(
        label="Senior Health",
        sensitive=True,
        edge_voice="ko-KR-SunHiNeural",
        edge_rate="-5%",  # slower for clarity
        edge_volume="+5%",
        elevenlabs_voice="EXAVITQu4vr4xnSDxMaL",
        elevenlabs_settings=(("stability", 0.7), ("similarity_boost", 0.8), ("style", 0.3)),
        disclaimer=HEALTH_DISCLAIMER,
        background_color="#4A90A4",
        image_style="warm, friendly, high contrast, large text, simple composition",
        target_audience="60+ Korean seniors",
        script_guidelines=(
            "Use simple, clear language",
            "Avoid medical jargon",
            "Include practical tips",
            "Speak slowly and clearly",
        ),
    ),
    Category.FINANCE: CategoryProfile(
        label="Finance & Investing",
        sensitive=True,
        edge_voice="ko-KR-InJoonNeural",
        elevenlabs_voice="pNInz6obpgDQGcFmaJgB",
        elevenlabs_settings=(("stability", 0.8), ("similarity_boost", 0.7), ("style", 0.2)),
        disclaimer=FINANCE_DISCLAIMER,
        background_color="#1E3A5F",
        image_style="professional, clean, data visualization, charts",
        target_audience="30-50 Korean investors",
        script_guidelines=(
            "Use credible data sources",
            "Explain complex terms",
            "Include risk disclaimers",
            "Be objective and balanced",
        ),
    ),
    Category.TECH: CategoryProfile(
        label="Tech & AI Reviews",
        edge_voice="ko-KR-InJoonNeural",
        edge_rate="+5%",
        elevenlabs_voice="onwK4e9ZLuTAKqWW03F9",
        elevenlabs_settings=(("stability", 0.6), ("similarity_boost", 0.75), ("style", 0.4)),
        background_color="#0D1117",
        image_style="modern, sleek, futuristic, tech-focused",
        target_audience="20-40 tech enthusiasts",
        script_guidelines=(
            "Stay current with trends",
            "Explain technical concepts clearly",
            "Include hands-on examples",
        ),
    ),
    Category.HISTORY: CategoryProfile(
        label="History & Storytelling",
        edge_voice="ko-KR-SunHiNeural",
        edge_rate="-5%",  # storytelling pace
        elevenlabs_voice="N2lVS1w4EtoT3dr4eOWO",
        elevenlabs_settings=(("stability", 0.75), ("similarity_boost", 0.8), ("style", 0.5)),
        background_color="#2F2F2F",
        image_style="cinematic, dramatic, historical artwork, vintage tones",
        target_audience="History enthusiasts, all ages",
        script_guidelines=(
            "Create narrative tension",
            "Use vivid descriptions",
            "Connect to present day",
        ),
    ),
    Category.COMMERCE: CategoryProfile(
        label="Product Reviews",
        edge_voice="ko-KR-SunHiNeural",
        edge_rate="+5%",
        edge_volume="+5%",
        elevenlabs_voice="ThT5KcBeYPX3keUQqHPh",
        elevenlabs_settings=(("stability", 0.65), ("similarity_boost", 0.75), ("style", 0.35)),
        background_color="#2C3E50",
        image_style="product photography, clean backgrounds, lifestyle context",
        target_audience="25-45 online shoppers",
        script_guidelines=(
            "Be honest about pros and cons",
            "Include real usage scenarios",
            "Disclose affiliate relationships",
        ),
    ),
    Category.GENERAL: CategoryProfile(label="General"),
}
