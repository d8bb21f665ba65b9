"""
app/pipeline/field_normalizer.py

Key trimming and lenient integer parsing for raw CSV cells.
"""

from __future__ import annotations

import re
from typing import Mapping

from app.domain.sales_summary import NormalizedEntry

_SYMBOLS_PATTERN = re.compile(r"[\"'$,]")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_LEADING_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def normalize_quantity(raw: str | None) -> int:
    """
    Convert a raw numeric cell into an integer quantity.

    Currency and quote symbols plus all whitespace are stripped, then the
    leading base-10 integer is read ("19.99" gives 19). Anything that does
    not start with an integer, or whose digit run is too long to convert,
    gives 0; this function never raises.
    """

    text = "0" if raw is None else str(raw)
    cleaned = _WHITESPACE_PATTERN.sub("", _SYMBOLS_PATTERN.sub("", text))
    match = _LEADING_INTEGER_PATTERN.match(cleaned)
    if match is None:
        return 0
    try:
        return int(match.group(0))
    except ValueError:
        return 0


def normalize_key(raw: str | None) -> str:
    if raw is None:
        return ""
    return str(raw).strip()


def normalize_record(
    record: Mapping[str, str],
    *,
    key_column: str,
    quantity_column: str,
) -> NormalizedEntry | None:
    """
    Reduce one raw record to a NormalizedEntry, or None when its key is empty.
    """

    key = normalize_key(record.get(key_column))
    if not key:
        return None
    return NormalizedEntry(key=key, quantity=normalize_quantity(record.get(quantity_column)))
