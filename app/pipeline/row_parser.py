"""
app/pipeline/row_parser.py

Tolerant header-delimited CSV row parsing.

The parser splits on a bare delimiter and does not interpret quotes, so a
quoted cell containing the delimiter is split into two cells. Short rows are
padded with empty strings and surplus cells are dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import MappingProxyType
from typing import TextIO

from app.domain.sales_summary import ParsedTable, RawRecord
from app.pipeline.errors import EmptyInputError, NoHeadersError, ParseError

logger = logging.getLogger(__name__)

DELIMITER = ","
LINE_TERMINATOR = "\n"
FILE_ENCODING = "utf-8-sig"
PLACEHOLDER_HEADER_TEMPLATE = "column_{index}"


class RowParser:
    """
    Turns CSV text into read-only records keyed by header name.
    """

    def __init__(self, *, delimiter: str = DELIMITER) -> None:
        self._delimiter = delimiter

    def parse(self, text: str | None) -> ParsedTable:
        """
        Parse a complete CSV text into headers and records.

        Raises:
            EmptyInputError: text is empty, whitespace or line breaks only.
            NoHeadersError:  every header cell is empty after trimming.
        """

        if not text or not text.strip():
            raise EmptyInputError("Empty CSV data")

        lines = text.strip().split(LINE_TERMINATOR)
        headers = self.parse_headers(lines[0])
        records = tuple(self._records_from(headers, lines[1:]))

        logger.info("Processed %d records", len(records))
        return ParsedTable(headers=headers, records=records)

    def iter_records(self, lines: Iterable[str]) -> Iterator[RawRecord]:
        """
        Lazily parse records from an iterable of lines.

        The first non-blank line is the header. Failures raised by the line
        source itself surface as ParseError.
        """

        source = iter(lines)
        headers: tuple[str, ...] | None = None
        produced = 0

        while True:
            try:
                line = next(source)
            except StopIteration:
                break
            except Exception as exc:
                raise ParseError(f"CSV parsing failed: {exc}") from exc

            if headers is None:
                if not line.strip():
                    continue
                headers = self.parse_headers(line)
                continue

            record = self.parse_line(headers, line)
            if record is None:
                continue
            produced += 1
            yield record

        if headers is None:
            raise EmptyInputError("Empty CSV data")
        logger.info("Processed %d records", produced)

    def parse_headers(self, line: str) -> tuple[str, ...]:
        cells = [cell.strip() for cell in line.split(self._delimiter)]
        if not any(cells):
            raise NoHeadersError("No valid headers found")
        return tuple(
            cell or PLACEHOLDER_HEADER_TEMPLATE.format(index=index)
            for index, cell in enumerate(cells, start=1)
        )

    def parse_line(self, headers: tuple[str, ...], line: str) -> RawRecord | None:
        """
        Build one record from a data line, or None for a blank line.
        """

        stripped = line.strip()
        if not stripped:
            return None

        values = stripped.split(self._delimiter)
        row: dict[str, str] = {}
        for index, header in enumerate(headers):
            row[header] = values[index].strip() if index < len(values) else ""
        return MappingProxyType(row)

    def _records_from(self, headers: tuple[str, ...], lines: Iterable[str]) -> Iterator[RawRecord]:
        for line in lines:
            record = self.parse_line(headers, line)
            if record is not None:
                yield record


def parse(text: str | None) -> ParsedTable:
    """
    Parse CSV text with the default comma delimiter.
    """

    return RowParser().parse(text)


def open_csv_lines(path: str | Path) -> TextIO:
    """
    Open a CSV file for RowParser.iter_records.

    Lines break on line feeds only, as in RowParser.parse, so a lone
    carriage return stays inside its cell. A UTF-8 BOM is dropped.
    """

    return open(path, encoding=FILE_ENCODING, newline=LINE_TERMINATOR)
