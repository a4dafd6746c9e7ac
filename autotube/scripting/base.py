"""
Script Generation Contract
==========================
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Dict, Any

from ..content.claim import Claim
from ..content.job import ContentConfig


@dataclass
class GeneratedScript:
    """Output of a script generator."""

    title: str
    script: str
    narration_text: str
    visual_prompts: List[str] = field(default_factory=list)
    claims: List[Claim] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def safety_content(self) -> Dict[str, Any]:
        """The fields the safety engine scores."""
        return {
            "title": self.title,
            "script": self.script,
            "narration_text": self.narration_text,
            "claims": self.claims,
        }


class ScriptGenerator(ABC):
    """Produces a script for a content request."""

    @abstractmethod
    async def generate(self, config: ContentConfig) -> GeneratedScript:
        """
        Generate a script.

        Raises:
            ScriptGenerationError: On malformed upstream responses or quota/auth errors
        """
        pass

    async def close(self) -> None:
        """Release network resources."""
