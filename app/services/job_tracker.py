"""
app/services/job_tracker.py

Lifecycle state machine for summary jobs.

    processing ──► completed
        │
        └────────► failed

Both end states are terminal. The tracker only decides which values are
written; persistence belongs to the injected job store, and committing the
surrounding transaction belongs to the caller.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Mapping, Protocol

from app.domain.sales_summary import ArtifactReference, JobRecord, SummaryResult
from db.models.summary_job import SummaryJobStatus

logger = logging.getLogger(__name__)

MAX_ERROR_MESSAGE_LENGTH = 2000
PROGRESS_STARTED = 0
PROGRESS_DONE = 100


class JobStore(Protocol):
    def create(self, job_id: uuid.UUID, fields: Mapping[str, Any] | None = None) -> JobRecord:
        ...

    def update(self, job_id: uuid.UUID, fields: Mapping[str, Any]) -> JobRecord | None:
        ...

    def get(self, job_id: uuid.UUID) -> JobRecord | None:
        ...


class JobNotFoundError(LookupError):
    """Raised when a transition targets a job the store does not hold."""


class JobTransitionError(RuntimeError):
    """Raised when a job is asked to leave a terminal state."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobTracker:
    """
    Records submission, success and failure of one summary job at a time.
    """

    def __init__(self, store: JobStore, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock

    def start(self, job_id: uuid.UUID | None = None) -> JobRecord:
        job = self._store.create(
            job_id or uuid.uuid4(),
            {"status": SummaryJobStatus.PROCESSING, "progress": PROGRESS_STARTED},
        )
        logger.info("Summary job created id=%s", job.id)
        return job

    def complete(
        self,
        job_id: uuid.UUID,
        *,
        result: SummaryResult,
        reference: ArtifactReference,
        download_url: str | None = None,
    ) -> JobRecord:
        self._require_processing(job_id)
        job = self._write(
            job_id,
            {
                "status": SummaryJobStatus.COMPLETED,
                "completed_at": self._clock(),
                "progress": PROGRESS_DONE,
                "input_row_count": result.input_row_count,
                "valid_row_count": result.valid_row_count,
                "output_row_count": result.output_row_count,
                "total_quantity": result.total_quantity,
                "output_reference": reference.storage_path,
                "download_url": reference.url or download_url,
                "error_message": None,
            },
        )
        logger.info(
            "Summary job completed id=%s input_rows=%d output_rows=%d total=%d",
            job_id,
            result.input_row_count,
            result.output_row_count,
            result.total_quantity,
        )
        return job

    def fail(self, job_id: uuid.UUID, *, error_message: str) -> JobRecord:
        self._require_processing(job_id)
        job = self._write(
            job_id,
            {
                "status": SummaryJobStatus.FAILED,
                "completed_at": self._clock(),
                "error_message": error_message[:MAX_ERROR_MESSAGE_LENGTH],
            },
        )
        logger.warning("Summary job failed id=%s error=%s", job_id, error_message)
        return job

    def _require_processing(self, job_id: uuid.UUID) -> JobRecord:
        job = self._store.get(job_id)
        if job is None:
            raise JobNotFoundError(f"Summary job not found: {job_id}")
        if job.status in SummaryJobStatus.TERMINAL:
            raise JobTransitionError(
                f"Summary job {job_id} is already {job.status}; no further transitions allowed."
            )
        return job

    def _write(self, job_id: uuid.UUID, fields: Mapping[str, Any]) -> JobRecord:
        job = self._store.update(job_id, fields)
        if job is None:
            raise JobNotFoundError(f"Summary job not found: {job_id}")
        return job
