"""
Configuration System
====================

Centralized, validated configuration management with typed dataclasses.
"""

import os
import re
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any, Union
import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class SafetyConfig:
    """Safety gate thresholds (scores are 0-100)."""

    reject_threshold: int = 40
    review_threshold: int = 60
    auto_approve_threshold: int = 85
    sensitive_min_confidence: int = 70
    general_min_confidence: int = 50
    critical_confidence: int = 40

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate threshold ordering and bounds."""
        for name in (
            "reject_threshold",
            "review_threshold",
            "auto_approve_threshold",
            "sensitive_min_confidence",
            "general_min_confidence",
            "critical_confidence",
        ):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ConfigurationError(
                    f"{name} must be 0-100, got {value}",
                    config_key=f"safety.{name}",
                )
        if not self.reject_threshold < self.review_threshold < self.auto_approve_threshold:
            raise ConfigurationError(
                "Thresholds must satisfy reject < review < auto_approve, got "
                f"{self.reject_threshold} / {self.review_threshold} / {self.auto_approve_threshold}",
                config_key="safety",
            )
        if self.general_min_confidence > self.sensitive_min_confidence:
            raise ConfigurationError(
                "general_min_confidence cannot exceed sensitive_min_confidence",
                config_key="safety.general_min_confidence",
            )


@dataclass
class NarrationConfig:
    """Narration provider selection and retry settings."""

    primary_provider: str = "edge"
    max_attempts: int = 3
    retry_delay: float = 1.0
    retry_multiplier: float = 2.0
    elevenlabs_api_key: Optional[str] = None
    elevenlabs_model: str = "eleven_multilingual_v2"
    timeout: int = 60

    VALID_PROVIDERS = {"edge", "elevenlabs"}

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate configuration values."""
        if self.primary_provider not in self.VALID_PROVIDERS:
            raise ConfigurationError(
                f"Invalid narration provider: {self.primary_provider}",
                config_key="narration.primary_provider",
            )
        if not 1 <= self.max_attempts <= 10:
            raise ConfigurationError(
                f"max_attempts must be 1-10, got {self.max_attempts}",
                config_key="narration.max_attempts",
            )
        if self.retry_delay < 0:
            raise ConfigurationError(
                f"retry_delay cannot be negative, got {self.retry_delay}",
                config_key="narration.retry_delay",
            )

    @property
    def secondary_provider(self) -> str:
        """The backend that is not primary."""
        return "elevenlabs" if self.primary_provider == "edge" else "edge"


@dataclass
class RenderingConfig:
    """Video rendering (Creatomate) settings."""

    api_key: Optional[str] = None
    base_url: str = "https://api.creatomate.com/v1"
    timeout: int = 30
    poll_interval: float = 5.0
    max_poll_attempts: int = 60
    watermark: str = "autotube"

    def __post_init__(self):
        if self.max_poll_attempts < 1:
            raise ConfigurationError(
                f"max_poll_attempts must be positive, got {self.max_poll_attempts}",
                config_key="rendering.max_poll_attempts",
            )


@dataclass
class ScriptConfig:
    """Script generation (Gemini) settings."""

    api_key: Optional[str] = None
    model: str = "gemini-2.0-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: int = 60
    temperature: float = 0.7
    max_retries: int = 3
    retry_delay: float = 1.0

    # USD per 1M tokens
    input_cost_per_million: float = 0.075
    output_cost_per_million: float = 0.30


@dataclass
class StorageConfig:
    """Local storage settings."""

    audio_path: str = "./storage/audio"
    audio_url_prefix: str = "/storage/audio"
    database_path: str = "./storage/jobs.db"


# =============================================================================
# Main Configuration Class
# =============================================================================


@dataclass
class Config:
    """
    Main configuration container with validation and loading.

    Provides a unified interface to all configuration settings with:
    - Type-safe access to configuration values
    - Validation on load and modification
    - Environment variable interpolation
    - Sensible defaults for all values
    """

    safety: SafetyConfig = field(default_factory=SafetyConfig)
    narration: NarrationConfig = field(default_factory=NarrationConfig)
    rendering: RenderingConfig = field(default_factory=RenderingConfig)
    script: ScriptConfig = field(default_factory=ScriptConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    _raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    SECTIONS = ("safety", "narration", "rendering", "script", "storage")

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "Config":
        """
        Load configuration from file with environment variable interpolation.

        Args:
            path: Path to a YAML config file

        Returns:
            Validated Config instance
        """
        search_paths = [
            Path("./config/autotube.yaml"),
            Path("./autotube.yaml"),
            Path.home() / ".autotube" / "config.yaml",
        ]

        if path:
            search_paths.insert(0, Path(path))

        config_data = {}

        for search_path in search_paths:
            if search_path.exists():
                logger.info(f"Loading config from: {search_path}")
                try:
                    with open(search_path, "r") as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except yaml.YAMLError as e:
                    raise ConfigurationError(
                        f"Invalid YAML in config file: {e}",
                        config_key=str(search_path),
                    )
        else:
            logger.info("No config file found, using defaults")

        config_data = cls._interpolate_env_vars(config_data)
        cls._apply_env_defaults(config_data)

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create Config from dictionary with validation."""
        try:
            return cls(
                safety=SafetyConfig(**data.get("safety", {})),
                narration=NarrationConfig(**data.get("narration", {})),
                rendering=RenderingConfig(**data.get("rendering", {})),
                script=ScriptConfig(**data.get("script", {})),
                storage=StorageConfig(**data.get("storage", {})),
                _raw=data,
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    @staticmethod
    def _interpolate_env_vars(data: Any) -> Any:
        """Recursively interpolate ${VAR} patterns with environment variables."""
        if isinstance(data, str):
            # Handle ${VAR} and ${VAR:-default} patterns
            pattern = r"\$\{([^}:]+)(?::-([^}]*))?\}"

            def replace(match):
                var_name = match.group(1)
                default = match.group(2) or ""
                return os.environ.get(var_name, default)

            return re.sub(pattern, replace, data)
        elif isinstance(data, dict):
            return {k: Config._interpolate_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [Config._interpolate_env_vars(item) for item in data]
        return data

    @staticmethod
    def _apply_env_defaults(data: Dict[str, Any]) -> None:
        """Fill unset keys from the well-known environment variables."""
        env_map = {
            ("narration", "primary_provider"): "TTS_PROVIDER",
            ("narration", "elevenlabs_api_key"): "ELEVENLABS_API_KEY",
            ("rendering", "api_key"): "CREATOMATE_API_KEY",
            ("script", "api_key"): "GEMINI_API_KEY",
            ("storage", "audio_path"): "STORAGE_PATH",
        }
        for (section, key), env_name in env_map.items():
            value = os.environ.get(env_name)
            if value and not data.get(section, {}).get(key):
                data.setdefault(section, {})[key] = value

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {section: asdict(getattr(self, section)) for section in self.SECTIONS}


# =============================================================================
# Convenience Functions
# =============================================================================


_global_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance (lazily loaded)."""
    global _global_config
    if _global_config is None:
        _global_config = Config.load()
    return _global_config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset global configuration to None (forces reload on next access)."""
    global _global_config
    _global_config = None


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
