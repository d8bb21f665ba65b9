"""
tests/test_aggregator.py

Per-key accumulation and deterministic ordering.
"""

from __future__ import annotations

import pytest

from app.domain.sales_summary import AggregateEntry, NormalizedEntry
from app.pipeline.aggregator import Aggregator, aggregate


def _entries(*pairs: tuple[str, int]) -> list[NormalizedEntry]:
    return [NormalizedEntry(key=key, quantity=quantity) for key, quantity in pairs]


def test_sums_quantities_per_key() -> None:
    result = aggregate(_entries(("Shoes", 10), ("Shoes", 5), ("Hats", 20)))

    assert result == [AggregateEntry("Hats", 20), AggregateEntry("Shoes", 15)]


def test_sorts_by_total_descending() -> None:
    result = aggregate(_entries(("a", 1), ("b", 3), ("c", 2)))

    assert [entry.key for entry in result] == ["b", "c", "a"]


def test_ties_keep_first_seen_order() -> None:
    # B and C end tied; B was seen first.
    result = aggregate(_entries(("A", 1), ("B", 4), ("A", 9), ("C", 4)))

    assert [entry.key for entry in result] == ["A", "B", "C"]


def test_ties_do_not_fall_back_to_lexical_order() -> None:
    result = aggregate(_entries(("zeta", 5), ("alpha", 5), ("mid", 5)))

    assert [entry.key for entry in result] == ["zeta", "alpha", "mid"]


def test_empty_keys_are_ignored() -> None:
    aggregator = Aggregator()
    aggregator.extend(_entries(("", 100), ("Shoes", 1)))

    assert aggregator.finalize() == [AggregateEntry("Shoes", 1)]
    assert aggregator.total_quantity == 1
    assert len(aggregator) == 1


def test_empty_input_gives_empty_result() -> None:
    assert aggregate([]) == []


@pytest.mark.parametrize(
    "pairs",
    [
        [("a", 1), ("b", 2), ("a", 3)],
        [("x", -5), ("y", 5), ("x", 10)],
        [("solo", 0)],
    ],
)
def test_total_is_preserved(pairs: list[tuple[str, int]]) -> None:
    entries = _entries(*pairs)

    result = aggregate(entries)

    assert sum(entry.total for entry in result) == sum(entry.quantity for entry in entries)
    assert len(result) == len({key for key, _ in pairs})


def test_instances_do_not_share_state() -> None:
    first = Aggregator()
    second = Aggregator()
    first.add(NormalizedEntry("Shoes", 3))

    assert second.finalize() == []
