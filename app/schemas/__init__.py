"""
Response models for the summary HTTP API.
"""

from app.schemas.summary_jobs import (
    DepartmentTotalResponse,
    HealthResponse,
    JobSummaryResponse,
    SummaryJobAcceptedResponse,
    SummaryJobListResponse,
    SummaryJobStatusResponse,
    SummaryUploadResponse,
)

__all__ = [
    "DepartmentTotalResponse",
    "HealthResponse",
    "JobSummaryResponse",
    "SummaryJobAcceptedResponse",
    "SummaryJobListResponse",
    "SummaryJobStatusResponse",
    "SummaryUploadResponse",
]
