"""
app/pipeline/summary_pipeline.py

Parse -> normalize -> aggregate -> serialize for one CSV submission.

The pipeline holds no state between runs; every call to ``run`` builds its own
Aggregator, so one instance can serve concurrent submissions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from functools import lru_cache

from app.config import get_summary_settings
from app.domain.sales_summary import RawRecord, SummaryResult
from app.pipeline.aggregator import Aggregator
from app.pipeline.field_normalizer import normalize_record
from app.pipeline.row_parser import RowParser
from app.pipeline.table_serializer import DEFAULT_KEY_LABEL, DEFAULT_TOTAL_LABEL, serialize

logger = logging.getLogger(__name__)

DEFAULT_KEY_COLUMN = "Department Name"
DEFAULT_QUANTITY_COLUMN = "Number of Sales"


class SummaryPipeline:
    """
    Builds the per-key sales summary for a submitted CSV text.
    """

    def __init__(
        self,
        *,
        key_column: str = DEFAULT_KEY_COLUMN,
        quantity_column: str = DEFAULT_QUANTITY_COLUMN,
        output_key_label: str = DEFAULT_KEY_LABEL,
        output_total_label: str = DEFAULT_TOTAL_LABEL,
        parser: RowParser | None = None,
    ) -> None:
        self._key_column = key_column
        self._quantity_column = quantity_column
        self._output_key_label = output_key_label
        self._output_total_label = output_total_label
        self._parser = parser or RowParser()

    def run(self, text: str | None) -> SummaryResult:
        """
        Summarize a complete CSV text.

        Pipeline errors (EmptyInputError, NoHeadersError, ParseError,
        SerializationError) propagate unchanged.
        """

        table = self._parser.parse(text)
        return self._summarize(table.records)

    def run_lines(self, lines: Iterable[str]) -> SummaryResult:
        """
        Summarize CSV text delivered as an iterable of lines.
        """

        return self._summarize(self._parser.iter_records(lines))

    def _summarize(self, records: Iterable[RawRecord]) -> SummaryResult:
        aggregator = Aggregator()
        input_rows = 0
        valid_rows = 0

        for record in records:
            input_rows += 1
            entry = normalize_record(
                record,
                key_column=self._key_column,
                quantity_column=self._quantity_column,
            )
            if entry is None:
                continue
            valid_rows += 1
            aggregator.add(entry)

        entries = aggregator.finalize()
        csv_text = serialize(
            entries,
            key_label=self._output_key_label,
            total_label=self._output_total_label,
        )

        logger.info(
            "Processing summary: %d total rows, %d valid rows, %d distinct keys",
            input_rows,
            valid_rows,
            len(entries),
        )
        return SummaryResult(
            entries=entries,
            input_row_count=input_rows,
            valid_row_count=valid_rows,
            csv_text=csv_text,
        )


@lru_cache(maxsize=1)
def get_summary_pipeline() -> SummaryPipeline:
    """
    Build and cache the pipeline with env-driven column settings.
    """

    settings = get_summary_settings()
    return SummaryPipeline(
        key_column=settings.key_column,
        quantity_column=settings.quantity_column,
        output_key_label=settings.output_key_label,
        output_total_label=settings.output_total_label,
    )
