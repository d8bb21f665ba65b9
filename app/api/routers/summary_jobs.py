"""
app/api/routers/summary_jobs.py

Summary upload, job status and artifact download endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.orm import Session

from app.api.dependencies import get_csv_text_body, get_csv_upload
from app.config import get_app_settings, get_summary_settings
from app.domain.sales_summary import JobRecord
from app.pipeline.errors import EmptyInputError, NoHeadersError
from app.schemas.summary_jobs import (
    DepartmentTotalResponse,
    JobSummaryResponse,
    SummaryJobAcceptedResponse,
    SummaryJobListResponse,
    SummaryJobStatusResponse,
    SummaryUploadResponse,
)
from app.services.summary_job_service import (
    BackgroundTaskExecutor,
    SummaryJobFailedError,
    SummaryJobService,
    UploadTooLargeError,
    get_summary_job_service,
)
from db.models.summary_job import SummaryJobStatus
from db.repositories.errors import ArtifactStorageError
from db.session import get_db

router = APIRouter(tags=["summary-jobs"])

_CLIENT_ERRORS = (EmptyInputError, NoHeadersError)


@router.post("/upload", response_model=SummaryUploadResponse)
def upload_csv_text(
    request: Request,
    text: str = Depends(get_csv_text_body),
    db: Session = Depends(get_db),
    service: SummaryJobService = Depends(get_summary_job_service),
) -> SummaryUploadResponse:
    """
    Summarize a raw CSV request body and store the result artifact.
    """

    try:
        outcome = service.run_inline(db=db, text=text)
    except SummaryJobFailedError as exc:
        status_code = (
            status.HTTP_400_BAD_REQUEST
            if isinstance(exc.__cause__, _CLIENT_ERRORS)
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        raise HTTPException(
            status_code=status_code,
            detail={"error": "Processing failed", "message": str(exc), "job_id": str(exc.job_id)},
        ) from exc

    job = outcome.job
    return SummaryUploadResponse(
        job_id=job.id,
        download_url=_download_url(request, job),
        summary=_to_summary(job),
        results=[
            DepartmentTotalResponse(department=entry.key, total_sales=entry.total)
            for entry in outcome.result.entries
        ],
        environment=get_app_settings().environment,
    )


@router.post(
    "/jobs",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=SummaryJobAcceptedResponse,
)
def trigger_summary_job(
    background_tasks: BackgroundTasks,
    file: UploadFile = Depends(get_csv_upload),
    db: Session = Depends(get_db),
    service: SummaryJobService = Depends(get_summary_job_service),
) -> SummaryJobAcceptedResponse:
    try:
        job = service.trigger_background(
            db=db,
            executor=BackgroundTaskExecutor(background_tasks),
            upload_file=file,
        )
    except UploadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(exc),
        ) from exc
    finally:
        file.file.close()

    return SummaryJobAcceptedResponse(job_id=job.id, status=job.status, created_at=job.created_at)


@router.get("/job/{job_id}", response_model=SummaryJobStatusResponse)
def get_summary_job(
    job_id: UUID,
    request: Request,
    db: Session = Depends(get_db),
    service: SummaryJobService = Depends(get_summary_job_service),
) -> SummaryJobStatusResponse:
    job = service.get_job(db=db, job_id=job_id)
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return _to_status_response(request, job)


@router.get("/jobs", response_model=SummaryJobListResponse)
def list_summary_jobs(
    request: Request,
    limit: int | None = Query(default=None, ge=1, le=500, description="Max jobs returned, newest first"),
    status_filter: str | None = Query(default=None, alias="status", description="Optional status filter"),
    db: Session = Depends(get_db),
    service: SummaryJobService = Depends(get_summary_job_service),
) -> SummaryJobListResponse:
    jobs = service.list_jobs(
        db=db,
        limit=limit or get_summary_settings().jobs_list_limit,
        status=status_filter,
    )
    return SummaryJobListResponse(
        total=len(jobs),
        jobs=[_to_status_response(request, job) for job in jobs],
    )


@router.get("/download/{job_id}", name="download_summary")
def download_summary(
    job_id: UUID,
    db: Session = Depends(get_db),
    service: SummaryJobService = Depends(get_summary_job_service),
) -> Response:
    job = service.get_job(db=db, job_id=job_id)
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    if job.status != SummaryJobStatus.COMPLETED:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Job not completed")

    if job.download_url and not _is_self_link(job):
        return RedirectResponse(job.download_url)

    try:
        content = service.read_artifact(job)
    except (ArtifactStorageError, LookupError) as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Download not available",
        ) from exc

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="department-totals-{job_id}.csv"'},
    )


def _is_self_link(job: JobRecord) -> bool:
    return job.download_url is not None and job.download_url.rstrip("/").endswith(f"/download/{job.id}")


def _download_url(request: Request, job: JobRecord) -> str:
    if job.download_url:
        return job.download_url
    return str(request.url_for("download_summary", job_id=str(job.id)))


def _to_summary(job: JobRecord) -> JobSummaryResponse:
    return JobSummaryResponse(
        input_rows=job.input_row_count,
        valid_rows=job.valid_row_count,
        output_rows=job.output_row_count,
        total_sales=job.total_quantity,
        unique_departments=job.output_row_count,
    )


def _to_status_response(request: Request, job: JobRecord) -> SummaryJobStatusResponse:
    download_url = None
    if job.status == SummaryJobStatus.COMPLETED:
        download_url = _download_url(request, job)
    return SummaryJobStatusResponse(
        id=job.id,
        status=job.status,
        progress=job.progress,
        created_at=job.created_at,
        completed_at=job.completed_at,
        summary=_to_summary(job),
        download_url=download_url,
        error_message=job.error_message,
        environment=get_app_settings().environment,
    )
