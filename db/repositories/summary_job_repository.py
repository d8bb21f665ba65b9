"""
Repository for summary job records.

Implements the job store interface consumed by JobTracker. Writes are flushed
but never committed; the caller owns the transaction.
"""

from __future__ import annotations

import uuid
from typing import Any, Mapping

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.sales_summary import JobRecord
from db.models.summary_job import SummaryJob, SummaryJobStatus
from db.repositories.errors import JobPersistenceError

_WRITABLE_FIELDS = frozenset(
    {
        "status",
        "completed_at",
        "progress",
        "input_row_count",
        "valid_row_count",
        "output_row_count",
        "total_quantity",
        "output_reference",
        "download_url",
        "error_message",
    }
)


class SummaryJobRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, job_id: uuid.UUID, fields: Mapping[str, Any] | None = None) -> JobRecord:
        values = {"status": SummaryJobStatus.PROCESSING, **_checked(fields or {})}
        job = SummaryJob(id=job_id, **values)
        try:
            self._session.add(job)
            self._session.flush()
            self._session.refresh(job)
        except SQLAlchemyError as exc:
            raise JobPersistenceError(f"Failed to create summary job {job_id}.") from exc
        return to_job_record(job)

    def update(self, job_id: uuid.UUID, fields: Mapping[str, Any]) -> JobRecord | None:
        try:
            job = self._session.get(SummaryJob, job_id)
            if job is None:
                return None
            for name, value in _checked(fields).items():
                setattr(job, name, value)
            self._session.flush()
            self._session.refresh(job)
        except SQLAlchemyError as exc:
            raise JobPersistenceError(f"Failed to update summary job {job_id}.") from exc
        return to_job_record(job)

    def get(self, job_id: uuid.UUID) -> JobRecord | None:
        try:
            job = self._session.get(SummaryJob, job_id)
        except SQLAlchemyError as exc:
            raise JobPersistenceError(f"Failed to load summary job {job_id}.") from exc
        return to_job_record(job) if job is not None else None

    def list_jobs(self, *, limit: int = 50, status: str | None = None) -> list[JobRecord]:
        stmt: Select[tuple[SummaryJob]] = select(SummaryJob)
        if status:
            stmt = stmt.where(SummaryJob.status == status)
        stmt = stmt.order_by(SummaryJob.created_at.desc()).limit(max(1, limit))

        try:
            jobs = self._session.scalars(stmt).all()
        except SQLAlchemyError as exc:
            raise JobPersistenceError("Failed to list summary jobs.") from exc
        return [to_job_record(job) for job in jobs]


def to_job_record(job: SummaryJob) -> JobRecord:
    return JobRecord(
        id=job.id,
        status=job.status,
        created_at=job.created_at,
        completed_at=job.completed_at,
        progress=job.progress,
        input_row_count=job.input_row_count,
        valid_row_count=job.valid_row_count,
        output_row_count=job.output_row_count,
        total_quantity=job.total_quantity,
        output_reference=job.output_reference,
        download_url=job.download_url,
        error_message=job.error_message,
    )


def _checked(fields: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(fields) - _WRITABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown summary job fields: {sorted(unknown)}")
    return dict(fields)
