"""
app/pipeline/aggregator.py

Per-key quantity accumulation with a deterministic final ordering.

Totals are kept in an insertion-ordered dict and sorted with the stable
built-in sort, so keys with equal totals stay in first-seen order.
"""

from __future__ import annotations

from collections.abc import Iterable

from app.domain.sales_summary import AggregateEntry, NormalizedEntry


class Aggregator:
    """
    Accumulates quantities for one pipeline run.

    An instance belongs to a single submission and must not be shared.
    """

    def __init__(self) -> None:
        self._totals: dict[str, int] = {}

    def add(self, entry: NormalizedEntry) -> None:
        if not entry.key:
            return
        self._totals[entry.key] = self._totals.get(entry.key, 0) + entry.quantity

    def extend(self, entries: Iterable[NormalizedEntry]) -> None:
        for entry in entries:
            self.add(entry)

    def finalize(self) -> list[AggregateEntry]:
        """
        Return one entry per key, sorted by total descending.
        """

        ordered = sorted(self._totals.items(), key=lambda item: item[1], reverse=True)
        return [AggregateEntry(key=key, total=total) for key, total in ordered]

    @property
    def total_quantity(self) -> int:
        return sum(self._totals.values())

    def __len__(self) -> int:
        return len(self._totals)


def aggregate(entries: Iterable[NormalizedEntry]) -> list[AggregateEntry]:
    aggregator = Aggregator()
    aggregator.extend(entries)
    return aggregator.finalize()
