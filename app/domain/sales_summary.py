"""
app/domain/sales_summary.py

Domain models used by the sales summary pipeline and job tracking.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping

RawRecord = Mapping[str, str]
"""Read-only column name to raw cell text mapping for one input line."""


@dataclass(frozen=True)
class ParsedTable:
    """
    Header names and records produced by one full parse.
    """

    headers: tuple[str, ...]
    records: tuple[RawRecord, ...] = ()


@dataclass(frozen=True)
class NormalizedEntry:
    """
    One input row reduced to its grouping key and integer quantity.
    """

    key: str
    quantity: int


@dataclass(frozen=True)
class AggregateEntry:
    """
    Total quantity accumulated for one distinct key.
    """

    key: str
    total: int


@dataclass(frozen=True)
class SummaryResult:
    """
    Output of one pipeline run over a submitted CSV text.
    """

    entries: list[AggregateEntry]
    input_row_count: int
    valid_row_count: int
    csv_text: str

    @property
    def output_row_count(self) -> int:
        return len(self.entries)

    @property
    def total_quantity(self) -> int:
        return sum(entry.total for entry in self.entries)


@dataclass(frozen=True)
class ArtifactReference:
    """
    Location of a stored output artifact.

    ``url`` is set only by backends that can hand out a direct download link.
    """

    storage_path: str
    url: str | None = None


@dataclass(frozen=True)
class JobRecord:
    """
    Snapshot of one summary job as held by the job store.
    """

    id: uuid.UUID
    status: str
    created_at: datetime | None = None
    completed_at: datetime | None = None
    progress: int = 0
    input_row_count: int | None = None
    valid_row_count: int | None = None
    output_row_count: int | None = None
    total_quantity: int | None = None
    output_reference: str | None = None
    download_url: str | None = None
    error_message: str | None = None


@dataclass(frozen=True)
class JobOutcome:
    """
    Result handed back to callers of the inline summary path.
    """

    job: JobRecord
    result: SummaryResult
    reference: ArtifactReference
