"""
Security Utilities
==================

Path validation, input sanitization, and secret redaction.
"""

import re
import logging
from pathlib import Path
from typing import Optional, Union, Set

from .exceptions import ValidationError

logger = logging.getLogger(__name__)


class PathValidator:
    """
    Keeps generated artifacts inside a storage root.

    Usage:
        validator = PathValidator(base_path="./storage/audio")
        safe_path = validator.validate_audio("job_1.mp3")  # OK
        safe_path = validator.validate("../../etc/passwd")  # Raises ValidationError
    """

    DANGEROUS_PATTERNS = [
        r"\.\./",
        r"\.\.\\",
        r"^~",
        r"\x00",
        r"%2e%2e",
        r"%252e",
    ]

    ALLOWED_AUDIO_EXTENSIONS = {".mp3", ".wav", ".ogg"}

    def __init__(
        self,
        base_path: Union[str, Path],
        allowed_extensions: Optional[Set[str]] = None,
    ):
        """
        Initialize the path validator.

        Args:
            base_path: The base directory that all paths must be within
            allowed_extensions: Set of allowed file extensions (None = all allowed)
        """
        self.base_path = Path(base_path).resolve()
        self.allowed_extensions = allowed_extensions
        self._compiled_patterns = [re.compile(p, re.IGNORECASE) for p in self.DANGEROUS_PATTERNS]

    def validate(self, path: Union[str, Path]) -> Path:
        """
        Validate a path and return the resolved safe path.

        Raises:
            ValidationError: If the path escapes the base directory
        """
        path_str = str(path)

        for pattern in self._compiled_patterns:
            if pattern.search(path_str):
                logger.warning(f"Blocked dangerous path pattern: {pattern.pattern}")
                raise ValidationError(
                    "Path contains dangerous pattern",
                    field="path",
                    constraint="path_traversal",
                )

        candidate = Path(path)
        resolved = candidate.resolve() if candidate.is_absolute() else (self.base_path / candidate).resolve()

        try:
            resolved.relative_to(self.base_path)
        except ValueError:
            logger.warning(f"Blocked path outside base directory: {resolved}")
            raise ValidationError(
                "Path is outside allowed directory",
                field="path",
                constraint="path_traversal",
            )

        if self.allowed_extensions and resolved.suffix.lower() not in self.allowed_extensions:
            raise ValidationError(
                f"File extension not allowed: {resolved.suffix}",
                field="path",
                constraint="invalid_extension",
            )

        return resolved

    def validate_audio(self, path: Union[str, Path]) -> Path:
        """Validate an audio file path."""
        resolved = self.validate(path)
        if resolved.suffix.lower() not in self.ALLOWED_AUDIO_EXTENSIONS:
            raise ValidationError(
                f"Not a valid audio extension: {resolved.suffix}",
                field="path",
                constraint="invalid_extension",
            )
        return resolved


def file_stem(name: str, max_length: int = 64) -> str:
    """Filesystem-safe stem built from a job id."""
    stem = re.sub(r"[^A-Za-z0-9_-]+", "_", name or "").strip("_")
    return stem[:max_length] or "narration"


def sanitize_prompt(prompt: str, max_length: int = 2000) -> str:
    """
    Sanitize a user-supplied topic before it is placed in an LLM prompt.

    Args:
        prompt: User-provided text
        max_length: Maximum allowed length

    Returns:
        Sanitized prompt string
    """
    if not prompt:
        return ""

    sanitized = "".join(char for char in prompt if char.isprintable() or char in "\n\t")

    injection_patterns = [
        r"ignore previous instructions",
        r"disregard above",
        r"system prompt",
        r"\[INST\]",
        r"\[/INST\]",
        r"<\|im_start\|>",
        r"<\|im_end\|>",
    ]

    for pattern in injection_patterns:
        sanitized = re.sub(pattern, "", sanitized, flags=re.IGNORECASE)

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length]
        logger.warning(f"Prompt truncated from {len(prompt)} to {max_length} characters")

    return sanitized.strip()


def redact_api_key(text: str) -> str:
    """
    Redact API keys and sensitive tokens from text before logging it.

    Args:
        text: Text that might contain API keys

    Returns:
        Text with API keys redacted
    """
    if not text:
        return text

    patterns = [
        (r"Bearer\s+[A-Za-z0-9_\-\.]+", "Bearer ***REDACTED***"),
        # Google API keys (Gemini)
        (r"AIza[A-Za-z0-9_\-]{35}", "AIza***REDACTED***"),
        (r"key=[A-Za-z0-9_\-]+", "key=***REDACTED***"),
        (r"xi-api-key['\"]?\s*[:=]\s*['\"]?[A-Za-z0-9_\-]+", "xi-api-key: ***REDACTED***"),
        (r"api[_-]?key['\"]?\s*[:=]\s*['\"]?[A-Za-z0-9_\-]+", "api_key: ***REDACTED***"),
        (r"(ELEVENLABS_API_KEY|CREATOMATE_API_KEY|GEMINI_API_KEY)=[^\s]+", r"\1=***REDACTED***"),
    ]

    result = text
    for pattern, replacement in patterns:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)

    return result
