"""
Schemas for summary upload, job status and listing endpoints.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class DepartmentTotalResponse(BaseModel):
    department: str
    total_sales: int


class JobSummaryResponse(BaseModel):
    input_rows: int | None = None
    valid_rows: int | None = None
    output_rows: int | None = None
    total_sales: int | None = None
    unique_departments: int | None = None


class SummaryUploadResponse(BaseModel):
    message: str = "CSV processed successfully"
    job_id: UUID
    download_url: str
    summary: JobSummaryResponse
    results: list[DepartmentTotalResponse] = Field(default_factory=list)
    environment: str


class SummaryJobAcceptedResponse(BaseModel):
    job_id: UUID
    status: str
    created_at: datetime | None = None


class SummaryJobStatusResponse(BaseModel):
    id: UUID
    status: str
    progress: int = Field(default=0, ge=0, le=100)
    created_at: datetime | None = None
    completed_at: datetime | None = None
    summary: JobSummaryResponse
    download_url: str | None = None
    error_message: str | None = None
    environment: str


class SummaryJobListResponse(BaseModel):
    total: int = Field(..., ge=0)
    jobs: list[SummaryJobStatusResponse] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str = "OK"
    timestamp: datetime
    message: str = "CSV summary API is running"
    environment: str
