"""
db/models/summary_job.py

Summary job model backing the asynchronous job status lookups.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class SummaryJobStatus:
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    TERMINAL = frozenset({COMPLETED, FAILED})


class SummaryJob(Base, TimestampMixin):
    __tablename__ = "summary_jobs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=SummaryJobStatus.PROCESSING,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    input_row_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    valid_row_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    output_row_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_quantity: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    output_reference: Mapped[str | None] = mapped_column(
        String(512),
        nullable=True,
        comment="Artifact store path of the summary CSV",
    )
    download_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_summary_jobs_status", "status"),
        Index("ix_summary_jobs_created_at", "created_at"),
    )
