"""
Content Models
==============

Categories, claims, and the content job record.
"""

from .category import Category, CategoryProfile, ContentFormat, Tone
from .claim import Claim
from .job import (
    JobStatus,
    ContentConfig,
    ContentJob,
    NarrationMetadata,
    VideoMetadata,
    PublishMetadata,
    ProjectAutomation,
    Completed,
    Failed,
    JobOutcome,
)

__all__ = [
    "Category",
    "CategoryProfile",
    "ContentFormat",
    "Tone",
    "Claim",
    "JobStatus",
    "ContentConfig",
    "ContentJob",
    "NarrationMetadata",
    "VideoMetadata",
    "PublishMetadata",
    "ProjectAutomation",
    "Completed",
    "Failed",
    "JobOutcome",
]
