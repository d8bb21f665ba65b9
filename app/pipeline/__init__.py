"""
CSV summary pipeline: row parsing, field normalization, per-key
aggregation, table serialization and the pipeline error types.
"""

from app.pipeline.aggregator import Aggregator, aggregate
from app.pipeline.errors import (
    EmptyInputError,
    NoHeadersError,
    ParseError,
    SerializationError,
    SummaryPipelineError,
)
from app.pipeline.field_normalizer import normalize_key, normalize_quantity, normalize_record
from app.pipeline.row_parser import RowParser, open_csv_lines, parse
from app.pipeline.summary_pipeline import SummaryPipeline, get_summary_pipeline
from app.pipeline.table_serializer import serialize

__all__ = [
    "Aggregator",
    "aggregate",
    "EmptyInputError",
    "NoHeadersError",
    "ParseError",
    "SerializationError",
    "SummaryPipelineError",
    "normalize_key",
    "normalize_quantity",
    "normalize_record",
    "RowParser",
    "open_csv_lines",
    "parse",
    "SummaryPipeline",
    "get_summary_pipeline",
    "serialize",
]
