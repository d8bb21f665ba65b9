"""
Model package exports.

Import every SQLAlchemy model here so metadata registration and Alembic
autogeneration see them.
"""

from db.models.summary_job import SummaryJob, SummaryJobStatus

__all__ = [
    "SummaryJob",
    "SummaryJobStatus",
]
