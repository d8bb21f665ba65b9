"""
tests/test_summary_job_service.py

Inline and background job paths against SQLite and a temp artifact root.
"""

from __future__ import annotations

import io
import os
import uuid
from pathlib import Path
from typing import Any, Callable

import pytest
from fastapi import UploadFile
from sqlalchemy.orm import Session, sessionmaker

from app.domain.sales_summary import ArtifactReference
from app.pipeline.errors import NoHeadersError
from app.pipeline.summary_pipeline import SummaryPipeline
from app.services.summary_job_service import SummaryJobFailedError, SummaryJobService, UploadTooLargeError
from db.models.summary_job import SummaryJobStatus
from db.repositories.artifact_storage import LocalArtifactStore
from db.repositories.errors import ArtifactStorageError

SALES_CSV = "Department Name,Number of Sales\nShoes,10\nShoes,5\nHats,20"


class ImmediateExecutor:
    def __init__(self) -> None:
        self.submitted: list[tuple[Callable[..., None], tuple[Any, ...]]] = []

    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        self.submitted.append((task, args))
        task(*args, **kwargs)


class RejectingExecutor:
    def submit(self, task: Callable[..., None], *args: Any, **kwargs: Any) -> None:
        raise RuntimeError("queue full")


class BrokenArtifactStore:
    def store(self, content: bytes, destination_path: str) -> ArtifactReference:
        raise ArtifactStorageError("Failed to write summary artifact to storage.")

    def retrieve(self, storage_path: str) -> bytes:
        raise ArtifactStorageError("unavailable")


def _upload(text: str | bytes, name: str = "sales.csv") -> UploadFile:
    content = text.encode("utf-8") if isinstance(text, str) else text
    return UploadFile(file=io.BytesIO(content), filename=name)


@pytest.fixture()
def service(tmp_path: Path, session_factory: sessionmaker[Session]) -> SummaryJobService:
    return SummaryJobService(
        pipeline=SummaryPipeline(),
        artifact_store=LocalArtifactStore(tmp_path),
        session_factory=session_factory,
    )


class TestRunInline:
    def test_completes_job_and_stores_artifact(
        self,
        service: SummaryJobService,
        db: Session,
        tmp_path: Path,
    ) -> None:
        outcome = service.run_inline(db=db, text=SALES_CSV)

        job = service.get_job(db=db, job_id=outcome.job.id)
        assert job is not None
        assert job.status == SummaryJobStatus.COMPLETED
        assert job.input_row_count == 3
        assert job.output_row_count == 2
        assert job.total_quantity == 35
        assert job.completed_at is not None
        assert job.output_reference == f"results/{job.id}/department-totals.csv"
        assert (tmp_path / job.output_reference).read_text() == (
            "Department Name,Total Number of Sales\nHats,20\nShoes,15\n"
        )
        assert service.read_artifact(job) == outcome.result.csv_text.encode("utf-8")

    def test_pipeline_failure_marks_job_failed(self, service: SummaryJobService, db: Session) -> None:
        with pytest.raises(SummaryJobFailedError) as ctx:
            service.run_inline(db=db, text=",,\n1,2,3")

        assert isinstance(ctx.value.__cause__, NoHeadersError)
        job = service.get_job(db=db, job_id=ctx.value.job_id)
        assert job is not None
        assert job.status == SummaryJobStatus.FAILED
        assert job.error_message == "No valid headers found"
        assert job.output_reference is None

    def test_artifact_failure_marks_job_failed(
        self,
        db: Session,
        session_factory: sessionmaker[Session],
    ) -> None:
        service = SummaryJobService(
            pipeline=SummaryPipeline(),
            artifact_store=BrokenArtifactStore(),
            session_factory=session_factory,
        )

        with pytest.raises(SummaryJobFailedError) as ctx:
            service.run_inline(db=db, text=SALES_CSV)

        job = service.get_job(db=db, job_id=ctx.value.job_id)
        assert job is not None
        assert job.status == SummaryJobStatus.FAILED
        assert job.error_message == "Failed to write summary artifact to storage."
        assert job.total_quantity is None

    def test_download_url_uses_public_base_url(
        self,
        tmp_path: Path,
        db: Session,
        session_factory: sessionmaker[Session],
    ) -> None:
        service = SummaryJobService(
            pipeline=SummaryPipeline(),
            artifact_store=LocalArtifactStore(tmp_path),
            session_factory=session_factory,
            public_base_url="https://api.example.com/",
        )

        outcome = service.run_inline(db=db, text=SALES_CSV)

        assert outcome.job.download_url == f"https://api.example.com/download/{outcome.job.id}"


class TestTriggerBackground:
    def test_runs_job_through_executor(self, service: SummaryJobService, db: Session) -> None:
        executor = ImmediateExecutor()

        job = service.trigger_background(db=db, executor=executor, upload_file=_upload(SALES_CSV))

        assert job.status == SummaryJobStatus.PROCESSING
        assert len(executor.submitted) == 1
        db.expire_all()
        finished = service.get_job(db=db, job_id=job.id)
        assert finished is not None
        assert finished.status == SummaryJobStatus.COMPLETED
        assert finished.total_quantity == 35
        temp_path = executor.submitted[0][1][1]
        assert not os.path.exists(temp_path)

    def test_utf8_bom_is_ignored(self, service: SummaryJobService, db: Session) -> None:
        upload = _upload(b"\xef\xbb\xbf" + SALES_CSV.encode("utf-8"))

        job = service.trigger_background(db=db, executor=ImmediateExecutor(), upload_file=upload)

        db.expire_all()
        finished = service.get_job(db=db, job_id=job.id)
        assert finished is not None
        assert finished.output_row_count == 2

    @pytest.mark.parametrize(
        "text",
        [
            "Department Name,Number of Sales\rShoes,10\rHats,5\r",
            "Department Name,Number of Sales\r\nShoes,10\r\nShoes\rBoots,3\r\n",
        ],
    )
    def test_line_breaks_match_inline_path(self, service: SummaryJobService, db: Session, text: str) -> None:
        inline = service.run_inline(db=db, text=text).job

        job = service.trigger_background(db=db, executor=ImmediateExecutor(), upload_file=_upload(text))

        db.expire_all()
        background = service.get_job(db=db, job_id=job.id)
        assert background is not None
        assert background.status == SummaryJobStatus.COMPLETED
        assert (background.input_row_count, background.output_row_count, background.total_quantity) == (
            inline.input_row_count,
            inline.output_row_count,
            inline.total_quantity,
        )
        assert service.read_artifact(background) == service.read_artifact(inline)

    def test_undecodable_upload_fails_job(self, service: SummaryJobService, db: Session) -> None:
        upload = _upload(b"Department Name,Number of Sales\n\xff\xfe,1\n")

        job = service.trigger_background(db=db, executor=ImmediateExecutor(), upload_file=upload)

        db.expire_all()
        failed = service.get_job(db=db, job_id=job.id)
        assert failed is not None
        assert failed.status == SummaryJobStatus.FAILED
        assert (failed.error_message or "").startswith("CSV parsing failed")

    def test_empty_upload_fails_job(self, service: SummaryJobService, db: Session) -> None:
        job = service.trigger_background(db=db, executor=ImmediateExecutor(), upload_file=_upload("\n\n"))

        db.expire_all()
        failed = service.get_job(db=db, job_id=job.id)
        assert failed is not None
        assert failed.status == SummaryJobStatus.FAILED
        assert failed.error_message == "Empty CSV data"

    def test_scheduling_failure_marks_job_failed(self, service: SummaryJobService, db: Session) -> None:
        with pytest.raises(RuntimeError, match="queue full"):
            service.trigger_background(db=db, executor=RejectingExecutor(), upload_file=_upload(SALES_CSV))

        jobs = service.list_jobs(db=db)
        assert len(jobs) == 1
        assert jobs[0].status == SummaryJobStatus.FAILED
        assert jobs[0].error_message == "Failed to schedule summary job."

    def test_oversized_upload_creates_no_job(
        self,
        tmp_path: Path,
        db: Session,
        session_factory: sessionmaker[Session],
    ) -> None:
        service = SummaryJobService(
            pipeline=SummaryPipeline(),
            artifact_store=LocalArtifactStore(tmp_path),
            session_factory=session_factory,
            max_upload_bytes=10,
        )

        with pytest.raises(UploadTooLargeError):
            service.trigger_background(db=db, executor=ImmediateExecutor(), upload_file=_upload(SALES_CSV))

        assert service.list_jobs(db=db) == []


def test_unknown_job_lookup(service: SummaryJobService, db: Session) -> None:
    assert service.get_job(db=db, job_id=uuid.uuid4()) is None
