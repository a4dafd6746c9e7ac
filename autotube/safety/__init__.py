"""
Safety
======

Content-safety scoring gate between script generation and narration.
"""

from .report import SafetyReport, SafetyIssue, IssueKind, IssueSeverity
from .engine import (
    SafetyScoringEngine,
    TopicPrecheck,
    UNIVERSAL_FORBIDDEN_TERMS,
    CATEGORY_FORBIDDEN_TERMS,
    CONSULT_PROFESSIONAL_PHRASES,
)

__all__ = [
    "SafetyReport",
    "SafetyIssue",
    "IssueKind",
    "IssueSeverity",
    "SafetyScoringEngine",
    "TopicPrecheck",
    "UNIVERSAL_FORBIDDEN_TERMS",
    "CATEGORY_FORBIDDEN_TERMS",
    "CONSULT_PROFESSIONAL_PHRASES",
]
