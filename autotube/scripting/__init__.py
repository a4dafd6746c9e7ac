"""
Scripting
=========

Script generation collaborators.
"""

from .base import ScriptGenerator, GeneratedScript
from .gemini import GeminiScriptGenerator

__all__ = [
    "ScriptGenerator",
    "GeneratedScript",
    "GeminiScriptGenerator",
]
