"""
Score aggregation over assessment records.

A record is any mapping of item keys to raw values. Missing keys, absent
records and malformed values all contribute zero; nothing here raises on
record content.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Union

from .items import CHART_GROUPS, items_for
from .models import (
    DISCIPLINE_MAXIMA,
    NO_RANK,
    OVERALL_COMPONENTS,
    TOTAL_FIELDS,
    Discipline,
    ItemDefinition,
    Rank,
)
from .ranking import classify_duration, parse_duration
from .values import clamp, coerce_number, numeric_or_none

Record = Mapping[str, Any]
# exact category id ("14" / 14), numeric range (start, end) with None open, or None for all
CategorySelector = Union[
    str, int, tuple[Union[int, None], Union[int, None]], list[Union[int, None]], None
]

__all__ = [
    "Record",
    "CategorySelector",
    "coerce_number",
    "item_score",
    "category_sum",
    "discipline_total",
    "discipline_score",
    "overall_total",
    "item_percentage",
    "discipline_percentage",
    "group_totals",
]


def item_score(record: Record | None, item: ItemDefinition) -> float:
    """
    Points earned on one checkpoint.

    Score items are clamped into ``[0, allocation]``. Time items are ranked
    against their timetable and earn ``allocation * points / 4``.
    """
    if not record:
        return 0.0
    raw = record.get(item.key)
    if item.timetable is not None:
        label = classify_duration(parse_duration(raw), item.timetable)
        if label == NO_RANK:
            return 0.0
        return item.allocation * Rank(label).points / 4
    return clamp(coerce_number(raw), 0.0, float(item.allocation))


def _matches(item: ItemDefinition, selector: CategorySelector) -> bool:
    if selector is None:
        return True
    if isinstance(selector, (tuple, list)):
        start, end = selector
        number = item.category_number
        return (start is None or number >= start) and (end is None or number <= end)
    return item.category == str(selector).strip()


def category_sum(
    record: Record | None, items: Iterable[ItemDefinition], selector: CategorySelector
) -> float:
    """
    Sum item scores for the items a selector addresses.

    Example:
        >>> category_sum({"color_14_1": 10, "color_14_2": 20}, ONE_COLOR_ITEMS, "14")
        30.0
        >>> category_sum(None, CARE_ITEMS, (1, 3))
        0.0
    """
    if not record:
        return 0.0
    return float(sum(item_score(record, item) for item in items if _matches(item, selector)))


def discipline_total(record: Record | None, items: Sequence[ItemDefinition]) -> float:
    """Stored total when the record carries a usable one, otherwise the sum of all items."""
    if not record or not items:
        return 0.0
    stored = numeric_or_none(record.get(TOTAL_FIELDS[items[0].discipline]))
    if stored is not None:
        return max(stored, 0.0)
    return category_sum(record, items, (None, None))


def discipline_score(record: Record | None, discipline: Discipline | str) -> float:
    discipline = Discipline.parse(discipline)
    if discipline is Discipline.TOTAL:
        return overall_total(record)
    return discipline_total(record, items_for(discipline))


def overall_total(record: Record | None) -> float:
    """Stored ``total_score`` if numeric, else care + one-color + time."""
    if not record:
        return 0.0
    stored = numeric_or_none(record.get(TOTAL_FIELDS[Discipline.TOTAL]))
    if stored is not None:
        return max(stored, 0.0)
    return float(sum(discipline_score(record, d) for d in OVERALL_COMPONENTS))


def item_percentage(record: Record | None, item: ItemDefinition) -> float:
    """Share of the allocation earned, always within [0, 100]."""
    if not record or item.allocation <= 0 or record.get(item.key) is None:
        return 0.0
    return item_score(record, item) / item.allocation * 100


def discipline_percentage(total: object, discipline: Discipline | str) -> float:
    maximum = DISCIPLINE_MAXIMA[Discipline.parse(discipline)]
    return clamp(coerce_number(total) / maximum * 100, 0.0, 100.0)


def group_totals(record: Record | None, discipline: Discipline | str) -> dict[str, float]:
    """Per chart-group sums, keyed by group label in display order."""
    discipline = Discipline.parse(discipline)
    items = items_for(discipline)
    return {
        group.label: category_sum(record, items, (group.first_category, group.last_category))
        for group in CHART_GROUPS.get(discipline, ())
    }
