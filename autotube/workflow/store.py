"""
Job Store
=========

Persistence for content jobs and project automation settings.

Two implementations:
- InMemoryJobStore: process-local, used by tests and one-off runs
- SqliteJobStore: jobs serialized as JSON rows in a local SQLite file

Both return copies, so a caller holding a ContentJob never sees it change
underneath them; re-read the store to observe progress.
"""

import copy
import json
import asyncio
import sqlite3
import threading
import logging
import dataclasses
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Dict, Any, Union

from ..content.job import ContentJob, JobStatus, ProjectAutomation
from ..core.exceptions import ResourceNotFoundError, ValidationError

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = {"job_id", "project_id", "created_at"}
_JOB_FIELDS = {f.name for f in dataclasses.fields(ContentJob)}


def _apply_updates(job: ContentJob, fields: Dict[str, Any]) -> ContentJob:
    unknown = set(fields) - _JOB_FIELDS
    if unknown:
        raise ValidationError(
            f"Unknown job fields: {', '.join(sorted(unknown))}",
            field="fields",
            constraint="known_fields",
        )
    frozen = set(fields) & _IMMUTABLE_FIELDS
    if frozen:
        raise ValidationError(
            f"Job fields cannot be changed: {', '.join(sorted(frozen))}",
            field="fields",
            constraint="immutable",
        )

    fields.setdefault("updated_at", datetime.now())
    return dataclasses.replace(job, **fields)


class JobStore(ABC):
    """Key-value persistence for jobs and project automation."""

    @abstractmethod
    async def create(self, job: ContentJob) -> ContentJob:
        """Persist a new job."""
        pass

    @abstractmethod
    async def get(self, job_id: str) -> ContentJob:
        """
        Load a job.

        Raises:
            ResourceNotFoundError: If the job does not exist
        """
        pass

    @abstractmethod
    async def update(self, job_id: str, **fields) -> ContentJob:
        """
        Update fields of a job and bump ``updated_at``.

        Raises:
            ResourceNotFoundError: If the job does not exist
            ValidationError: On unknown or immutable fields
        """
        pass

    @abstractmethod
    async def list_jobs(
        self,
        project_id: Optional[str] = None,
        status: Optional[JobStatus] = None,
    ) -> List[ContentJob]:
        pass

    @abstractmethod
    async def get_automation(self, project_id: str) -> ProjectAutomation:
        """Automation settings for a project; disabled defaults when unknown."""
        pass

    @abstractmethod
    async def set_automation(self, automation: ProjectAutomation) -> None:
        pass

    async def close(self) -> None:
        """Release resources."""


class InMemoryJobStore(JobStore):
    """Dictionary-backed store."""

    def __init__(self):
        self._jobs: Dict[str, ContentJob] = {}
        self._automations: Dict[str, ProjectAutomation] = {}

    async def create(self, job: ContentJob) -> ContentJob:
        if job.job_id in self._jobs:
            raise ValidationError(f"Job already exists: {job.job_id}", field="job_id")
        self._jobs[job.job_id] = copy.deepcopy(job)
        return copy.deepcopy(job)

    async def get(self, job_id: str) -> ContentJob:
        return copy.deepcopy(self._load(job_id))

    async def update(self, job_id: str, **fields) -> ContentJob:
        job = _apply_updates(self._load(job_id), fields)
        self._jobs[job_id] = job
        return copy.deepcopy(job)

    async def list_jobs(
        self,
        project_id: Optional[str] = None,
        status: Optional[JobStatus] = None,
    ) -> List[ContentJob]:
        jobs = [
            job for job in self._jobs.values()
            if (project_id is None or job.project_id == project_id)
            and (status is None or job.status is status)
        ]
        jobs.sort(key=lambda j: j.created_at, reverse=True)
        return [copy.deepcopy(job) for job in jobs]

    async def get_automation(self, project_id: str) -> ProjectAutomation:
        automation = self._automations.get(project_id)
        return copy.copy(automation) if automation else ProjectAutomation(project_id=project_id)

    async def set_automation(self, automation: ProjectAutomation) -> None:
        self._automations[automation.project_id] = copy.copy(automation)

    def _load(self, job_id: str) -> ContentJob:
        job = self._jobs.get(job_id)
        if job is None:
            raise ResourceNotFoundError(
                f"Content job not found: {job_id}",
                resource_type="content_job",
                resource_id=job_id,
            )
        return job


class SqliteJobStore(JobStore):
    """
    SQLite-backed store.

    Each job is stored as one JSON document plus indexed status columns.
    sqlite3 calls block, so every operation runs in a worker thread via
    ``asyncio.to_thread``. A read and the write that follows it run together
    under ``_write_lock`` so concurrent jobs never drop each other's fields.
    """

    def __init__(self, db_path: Union[str, Path] = "storage/jobs.db"):
        """
        Initialize the store.

        Args:
            db_path: Path to SQLite database
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.Lock()
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the SQLite database."""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS content_jobs (
                job_id TEXT PRIMARY KEY,
                project_id TEXT NOT NULL,
                status TEXT NOT NULL,
                data TEXT NOT NULL,
                created_at TEXT,
                updated_at TEXT
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS project_automation (
                project_id TEXT PRIMARY KEY,
                is_enabled INTEGER NOT NULL DEFAULT 0,
                auto_publish INTEGER NOT NULL DEFAULT 0,
                channel_id TEXT
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_jobs_project
            ON content_jobs(project_id)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_jobs_status
            ON content_jobs(status)
        """)

        conn.commit()
        conn.close()

        logger.info(f"Initialized job store database at {self.db_path}")

    # -------------------------------------------------------------------------
    # Jobs
    # -------------------------------------------------------------------------

    async def create(self, job: ContentJob) -> ContentJob:
        return await asyncio.to_thread(self._create, job)

    async def get(self, job_id: str) -> ContentJob:
        return await asyncio.to_thread(self._get, job_id)

    async def update(self, job_id: str, **fields) -> ContentJob:
        return await asyncio.to_thread(self._update, job_id, fields)

    async def list_jobs(
        self,
        project_id: Optional[str] = None,
        status: Optional[JobStatus] = None,
    ) -> List[ContentJob]:
        return await asyncio.to_thread(self._list_jobs, project_id, status)

    def _create(self, job: ContentJob) -> ContentJob:
        with self._write_lock:
            conn = sqlite3.connect(self.db_path)
            try:
                conn.execute(
                    """
                    INSERT INTO content_jobs (job_id, project_id, status, data, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    self._row(job),
                )
                conn.commit()
            except sqlite3.IntegrityError as e:
                raise ValidationError(f"Job already exists: {job.job_id}", field="job_id") from e
            finally:
                conn.close()

        return self._get(job.job_id)

    def _get(self, job_id: str) -> ContentJob:
        conn = sqlite3.connect(self.db_path)
        try:
            row = conn.execute(
                "SELECT data FROM content_jobs WHERE job_id = ?", (job_id,)
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            raise ResourceNotFoundError(
                f"Content job not found: {job_id}",
                resource_type="content_job",
                resource_id=job_id,
            )
        return ContentJob.from_dict(json.loads(row[0]))

    def _update(self, job_id: str, fields: Dict[str, Any]) -> ContentJob:
        with self._write_lock:
            job = _apply_updates(self._get(job_id), fields)

            conn = sqlite3.connect(self.db_path)
            try:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO content_jobs
                        (job_id, project_id, status, data, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    self._row(job),
                )
                conn.commit()
            finally:
                conn.close()

        return job

    def _list_jobs(self, project_id: Optional[str], status: Optional[JobStatus]) -> List[ContentJob]:
        query = "SELECT data FROM content_jobs WHERE 1=1"
        params: List[Any] = []
        if project_id is not None:
            query += " AND project_id = ?"
            params.append(project_id)
        if status is not None:
            query += " AND status = ?"
            params.append(status.value)
        query += " ORDER BY created_at DESC"

        conn = sqlite3.connect(self.db_path)
        try:
            rows = conn.execute(query, params).fetchall()
        finally:
            conn.close()

        return [ContentJob.from_dict(json.loads(row[0])) for row in rows]

    # -------------------------------------------------------------------------
    # Project Automation
    # -------------------------------------------------------------------------

    async def get_automation(self, project_id: str) -> ProjectAutomation:
        return await asyncio.to_thread(self._get_automation, project_id)

    async def set_automation(self, automation: ProjectAutomation) -> None:
        await asyncio.to_thread(self._set_automation, automation)

    def _get_automation(self, project_id: str) -> ProjectAutomation:
        conn = sqlite3.connect(self.db_path)
        try:
            row = conn.execute(
                "SELECT is_enabled, auto_publish, channel_id FROM project_automation WHERE project_id = ?",
                (project_id,),
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return ProjectAutomation(project_id=project_id)
        return ProjectAutomation(
            project_id=project_id,
            is_enabled=bool(row[0]),
            auto_publish=bool(row[1]),
            channel_id=row[2],
        )

    def _set_automation(self, automation: ProjectAutomation) -> None:
        with self._write_lock:
            conn = sqlite3.connect(self.db_path)
            try:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO project_automation
                        (project_id, is_enabled, auto_publish, channel_id)
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        automation.project_id,
                        int(automation.is_enabled),
                        int(automation.auto_publish),
                        automation.channel_id,
                    ),
                )
                conn.commit()
            finally:
                conn.close()

    @staticmethod
    def _row(job: ContentJob) -> tuple:
        return (
            job.job_id,
            job.project_id,
            job.status.value,
            json.dumps(job.to_dict(), ensure_ascii=False),
            job.created_at.isoformat(),
            job.updated_at.isoformat(),
        )
