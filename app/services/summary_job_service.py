"""
Summary job service: job creation, pipeline execution, artifact persistence
and job status transitions.

Two entry points share the same execution path:

    run_inline          runs the pipeline inside the request and returns
                        the summary (HTTP ``POST /upload``).
    trigger_background  records the job, hands the work to a task executor
                        and returns immediately (HTTP ``POST /jobs``).

Any failure after the job exists marks it ``failed`` with the error message.
A failure before the job exists writes nothing.
"""

from __future__ import annotations

import logging
import os
import tempfile
import uuid
from collections.abc import Callable
from functools import lru_cache
from typing import Any, Protocol

from fastapi import BackgroundTasks, UploadFile
from sqlalchemy.orm import Session, sessionmaker

from app.config import get_summary_settings
from app.domain.sales_summary import JobOutcome, JobRecord, SummaryResult
from app.pipeline.row_parser import open_csv_lines
from app.pipeline.summary_pipeline import SummaryPipeline, get_summary_pipeline
from app.services.job_tracker import JobTracker
from db.repositories.artifact_storage import ArtifactStore, LocalArtifactStore
from db.repositories.summary_job_repository import SummaryJobRepository

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class SummaryJobFailedError(RuntimeError):
    """
    Raised by the inline path after the job has been marked failed.
    """

    def __init__(self, *, job_id: uuid.UUID, message: str) -> None:
        super().__init__(message)
        self.job_id = job_id


class UploadTooLargeError(ValueError):
    """
    Raised when an uploaded file exceeds the configured byte limit.
    """


# ---------------------------------------------------------------------------
# Task execution
# ---------------------------------------------------------------------------


class TaskExecutor(Protocol):
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        ...


class BackgroundTaskExecutor:
    def __init__(self, background_tasks: BackgroundTasks) -> None:
        self._background_tasks = background_tasks

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        self._background_tasks.add_task(task, *args, **kwargs)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class SummaryJobService:
    """
    Wraps the summary pipeline with job tracking and artifact storage.
    """

    def __init__(
        self,
        *,
        pipeline: SummaryPipeline | None = None,
        artifact_store: ArtifactStore | None = None,
        session_factory: sessionmaker[Session] | Callable[[], Session] | None = None,
        artifact_file_name: str = "department-totals.csv",
        public_base_url: str | None = None,
        max_upload_bytes: int = 50 * 1024 * 1024,
    ) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory

        self._pipeline = pipeline or get_summary_pipeline()
        self._artifact_store = artifact_store or LocalArtifactStore()
        self._artifact_file_name = artifact_file_name
        self._public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self._max_upload_bytes = max(1, max_upload_bytes)

    def run_inline(self, *, db: Session, text: str) -> JobOutcome:
        """
        Create a job, summarize ``text`` and store the artifact in one call.

        Raises:
            SummaryJobFailedError: any stage failed; the job is marked failed
                                   and the original error is chained.
        """

        tracker = JobTracker(SummaryJobRepository(db))
        try:
            job = tracker.start()
            db.commit()
        except Exception:
            db.rollback()
            raise

        try:
            outcome = self._execute(tracker=tracker, job_id=job.id, read=lambda: self._pipeline.run(text))
            db.commit()
        except Exception as exc:
            self._mark_job_failed(db=db, job_id=job.id, exc=exc)
            raise SummaryJobFailedError(job_id=job.id, message=str(exc)) from exc

        return outcome

    def trigger_background(
        self,
        *,
        db: Session,
        executor: TaskExecutor,
        upload_file: UploadFile,
    ) -> JobRecord:
        """
        Record a processing job for an uploaded file and schedule its run.
        """

        temp_file_path = self._persist_temp_upload(upload_file)

        tracker = JobTracker(SummaryJobRepository(db))
        try:
            job = tracker.start()
            db.commit()
        except Exception:
            db.rollback()
            self._delete_file_quietly(temp_file_path)
            raise

        try:
            executor.submit(self._run_job, job.id, temp_file_path)
        except Exception:
            self._delete_file_quietly(temp_file_path)
            tracker.fail(job.id, error_message="Failed to schedule summary job.")
            db.commit()
            raise

        return job

    def get_job(self, *, db: Session, job_id: uuid.UUID) -> JobRecord | None:
        return SummaryJobRepository(db).get(job_id)

    def list_jobs(self, *, db: Session, limit: int = 50, status: str | None = None) -> list[JobRecord]:
        return SummaryJobRepository(db).list_jobs(limit=limit, status=status)

    def read_artifact(self, job: JobRecord) -> bytes:
        if not job.output_reference:
            raise LookupError(f"Summary job {job.id} has no stored artifact.")
        return self._artifact_store.retrieve(job.output_reference)

    def artifact_path(self, job_id: uuid.UUID) -> str:
        return f"results/{job_id}/{self._artifact_file_name}"

    def download_url(self, job_id: uuid.UUID) -> str | None:
        if self._public_base_url is None:
            return None
        return f"{self._public_base_url}/download/{job_id}"

    # ------------------------------------------------------------------
    # Execution internals
    # ------------------------------------------------------------------

    def _execute(
        self,
        *,
        tracker: JobTracker,
        job_id: uuid.UUID,
        read: Callable[[], SummaryResult],
    ) -> JobOutcome:
        result = read()
        reference = self._artifact_store.store(
            result.csv_text.encode("utf-8"),
            self.artifact_path(job_id),
        )
        completed = tracker.complete(
            job_id,
            result=result,
            reference=reference,
            download_url=self.download_url(job_id),
        )
        return JobOutcome(job=completed, result=result, reference=reference)

    def _run_job(self, job_id: uuid.UUID, temp_file_path: str) -> None:
        with self._session_factory() as db:
            tracker = JobTracker(SummaryJobRepository(db))
            try:
                with open_csv_lines(temp_file_path) as handle:
                    self._execute(
                        tracker=tracker,
                        job_id=job_id,
                        read=lambda: self._pipeline.run_lines(handle),
                    )
                db.commit()
            except Exception as exc:
                self._mark_job_failed(db=db, job_id=job_id, exc=exc)
            finally:
                self._delete_file_quietly(temp_file_path)

    def _mark_job_failed(self, *, db: Session, job_id: uuid.UUID, exc: Exception) -> None:
        logger.exception("Summary job failed id=%s error=%s", job_id, exc)
        try:
            db.rollback()
            JobTracker(SummaryJobRepository(db)).fail(job_id, error_message=str(exc))
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Failed to persist failed summary job state id=%s", job_id)

    def _persist_temp_upload(self, upload_file: UploadFile) -> str:
        upload_file.file.seek(0)
        size = 0

        with tempfile.NamedTemporaryFile(delete=False, prefix="summary_job_", suffix=".csv") as temp_file:
            temp_path = temp_file.name
            while True:
                chunk = upload_file.file.read(1024 * 1024)
                if not chunk:
                    break
                size += len(chunk)
                if size > self._max_upload_bytes:
                    break
                temp_file.write(chunk)

        if size > self._max_upload_bytes:
            self._delete_file_quietly(temp_path)
            raise UploadTooLargeError(f"CSV upload exceeds {self._max_upload_bytes} bytes.")
        return temp_path

    def _delete_file_quietly(self, file_path: str) -> None:
        try:
            os.remove(file_path)
        except OSError:
            return


@lru_cache(maxsize=1)
def get_summary_job_service() -> SummaryJobService:
    """
    Build and cache the summary job service with env-driven settings.
    """

    settings = get_summary_settings()
    return SummaryJobService(
        artifact_store=LocalArtifactStore(settings.artifact_root),
        artifact_file_name=settings.artifact_file_name,
        public_base_url=settings.public_base_url,
        max_upload_bytes=settings.max_upload_bytes,
    )
