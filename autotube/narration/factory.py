"""
Provider Factory
================

Factory for creating narration backend instances.
"""

import logging
from typing import List, Dict, Type

from .base import BaseNarrationProvider

logger = logging.getLogger(__name__)

# Registry of available providers
_PROVIDERS: Dict[str, Type[BaseNarrationProvider]] = {}


def register_provider(name: str):
    """Decorator to register a provider class."""
    def decorator(cls: Type[BaseNarrationProvider]):
        _PROVIDERS[name.lower()] = cls
        return cls
    return decorator


def get_provider(name: str, **kwargs) -> BaseNarrationProvider:
    """
    Get a narration backend instance.

    Args:
        name: Provider name ('edge' or 'elevenlabs')
        **kwargs: Provider-specific arguments (storage, api_key, ...)

    Returns:
        Configured provider instance

    Raises:
        ValueError: If provider name is not recognized
    """
    name_lower = name.lower()

    if name_lower not in _PROVIDERS:
        # Importing the module registers the class
        if name_lower == "edge":
            from . import edge  # noqa: F401
        elif name_lower == "elevenlabs":
            from . import elevenlabs  # noqa: F401
        else:
            raise ValueError(f"Unknown narration provider: {name}")

    provider_class = _PROVIDERS.get(name_lower)
    if provider_class is None:
        raise ValueError(f"Narration provider '{name}' not registered")

    logger.debug(f"Creating narration provider: {name_lower}")
    return provider_class(**kwargs)


def list_providers() -> List[str]:
    """
    List all available provider names.

    Returns:
        List of provider names
    """
    from . import edge, elevenlabs  # noqa: F401

    return list(_PROVIDERS.keys())
