"""
Workflow
========

Job persistence and the pipeline orchestrator.
"""

from .store import JobStore, InMemoryJobStore, SqliteJobStore
from .orchestrator import PipelineOrchestrator

__all__ = [
    "JobStore",
    "InMemoryJobStore",
    "SqliteJobStore",
    "PipelineOrchestrator",
]
