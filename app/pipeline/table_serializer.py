"""
app/pipeline/table_serializer.py

Renders aggregated totals as a two-column CSV table.

Cells are joined with a bare delimiter and never quoted, mirroring RowParser,
so the output reads back to the same (key, total) pairs. A cell holding the
delimiter or a line feed cannot be represented and raises SerializationError.
A carriage return inside a key is kept as is; RowParser only breaks lines on
line feeds.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from app.domain.sales_summary import AggregateEntry
from app.pipeline.errors import SerializationError

DELIMITER = ","
LINE_TERMINATOR = "\n"
DEFAULT_KEY_LABEL = "Department Name"
DEFAULT_TOTAL_LABEL = "Total Number of Sales"


def serialize(
    entries: Iterable[AggregateEntry],
    *,
    key_label: str = DEFAULT_KEY_LABEL,
    total_label: str = DEFAULT_TOTAL_LABEL,
) -> str:
    """
    Write a header row and one row per entry, keeping the given order.
    """

    return "".join(_rows(entries, key_label=key_label, total_label=total_label))


def _rows(entries: Iterable[AggregateEntry], *, key_label: str, total_label: str) -> Iterator[str]:
    yield _format_row(key_label, total_label)
    for entry in entries:
        try:
            total = str(int(entry.total))
        except ValueError as exc:
            raise SerializationError(f"Unable to serialize total for {entry.key!r}: {exc}") from exc
        yield _format_row(entry.key, total)


def _format_row(*cells: str) -> str:
    for cell in cells:
        if DELIMITER in cell or LINE_TERMINATOR in cell:
            raise SerializationError(f"Unable to serialize summary row: cell {cell!r} contains a separator")
    return DELIMITER.join(cells) + LINE_TERMINATOR
