"""
Core Module
===========

Configuration, exceptions, and security helpers shared by every stage.
"""

from .config import (
    Config,
    SafetyConfig,
    NarrationConfig,
    RenderingConfig,
    ScriptConfig,
    StorageConfig,
    get_config,
    set_config,
    reset_config,
    configure_logging,
)
from .exceptions import (
    AutotubeError,
    ConfigurationError,
    ValidationError,
    ProviderError,
    RateLimitError,
    ScriptGenerationError,
    NarrationError,
    RenderError,
    PublishError,
    PolicyRejectionError,
    ResourceNotFoundError,
)
from .security import PathValidator, file_stem, sanitize_prompt, redact_api_key

__all__ = [
    # Configuration
    "Config",
    "SafetyConfig",
    "NarrationConfig",
    "RenderingConfig",
    "ScriptConfig",
    "StorageConfig",
    "get_config",
    "set_config",
    "reset_config",
    "configure_logging",
    # Exceptions
    "AutotubeError",
    "ConfigurationError",
    "ValidationError",
    "ProviderError",
    "RateLimitError",
    "ScriptGenerationError",
    "NarrationError",
    "RenderError",
    "PublishError",
    "PolicyRejectionError",
    "ResourceNotFoundError",
    # Security
    "PathValidator",
    "file_stem",
    "sanitize_prompt",
    "redact_api_key",
]
