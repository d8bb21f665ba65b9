"""
Summary job services: the job lifecycle tracker and the service that runs
submissions inline or in the background.
"""

from app.services.job_tracker import JobNotFoundError, JobStore, JobTracker, JobTransitionError
from app.services.summary_job_service import (
    BackgroundTaskExecutor,
    SummaryJobFailedError,
    SummaryJobService,
    get_summary_job_service,
)

__all__ = [
    "JobNotFoundError",
    "JobStore",
    "JobTracker",
    "JobTransitionError",
    "BackgroundTaskExecutor",
    "SummaryJobFailedError",
    "SummaryJobService",
    "get_summary_job_service",
]
