"""
Domain transport types shared by the pipeline, the job services and the
persistence layer.
"""

from app.domain.sales_summary import (
    AggregateEntry,
    ArtifactReference,
    JobOutcome,
    JobRecord,
    NormalizedEntry,
    ParsedTable,
    RawRecord,
    SummaryResult,
)

__all__ = [
    "AggregateEntry",
    "ArtifactReference",
    "JobOutcome",
    "JobRecord",
    "NormalizedEntry",
    "ParsedTable",
    "RawRecord",
    "SummaryResult",
]
