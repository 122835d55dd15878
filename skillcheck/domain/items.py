"""
Canonical checkpoint tables, one per discipline.

Every consumer (scoring, reports, CSV import, exports) reads these tables;
record keys are always derived with ``ItemDefinition.key``. The tables are
validated once when the module is imported.
"""

from __future__ import annotations

from collections import Counter

from ..infrastructure.exceptions import ConfigurationError
from .models import (
    DISCIPLINE_MAXIMA,
    SCORED_DISCIPLINES,
    ChartGroup,
    Discipline,
    ItemDefinition,
    Timetable,
)

MIN_ALLOCATION = 10
MAX_ALLOCATION = 30


def _item(
    discipline: Discipline,
    item_id: str,
    label: str,
    allocation: int,
    required: bool = False,
    timetable: tuple[float | None, float | None, float | None] | None = None,
) -> ItemDefinition:
    category, _, sub_index = item_id.partition("-")
    return ItemDefinition(
        id=item_id,
        label=label,
        category=category,
        sub_index=int(sub_index),
        allocation=allocation,
        discipline=discipline,
        required=required,
        timetable=Timetable(*timetable) if timetable is not None else None,
    )


_C = Discipline.CARE
CARE_ITEMS: tuple[ItemDefinition, ...] = (
    _item(_C, "1-1", "Too much scrap", 10),
    _item(_C, "1-2", "Insufficient cut", 20),
    _item(_C, "2-1", "Remaining gel", 20),
    _item(_C, "3-1", "Root step", 10),
    _item(_C, "3-2", "Surface unevenness", 10),
    _item(_C, "3-3", "Side shaving", 20),
    _item(_C, "3-4", "Thickness", 10),
    _item(_C, "4-1", "Rattling", 20, required=True),
    _item(_C, "4-2", "Balance", 10),
    _item(_C, "4-3", "Unity of form", 30, required=True),
    _item(_C, "5-1", "Side drop", 10),
    _item(_C, "5-2", "Side rise", 10),
    _item(_C, "5-3", "Remaining corner", 20),
    _item(_C, "6-1", "Center", 10),
    _item(_C, "6-2", "Symmetry", 20),
    _item(_C, "7-1", "Loose cuticle (right corner)", 20),
    _item(_C, "8-1", "Loose cuticle (left corner)", 20),
    _item(_C, "9-1", "Loose cuticle (right side)", 20, required=True),
    _item(_C, "10-1", "Loose cuticle (left side)", 20, required=True),
    _item(_C, "11-1", "Small nail", 10),
    _item(_C, "11-2", "Hard skin", 10),
    _item(_C, "12-1", "Loose cuticle (cuticle line)", 20, required=True),
    _item(_C, "12-2", "Rattling", 10),
    _item(_C, "13-1", "Rattling", 20),
    _item(_C, "13-2", "Cut too much", 20),
    _item(_C, "13-3", "Hangnail", 10),
)

_O = Discipline.ONE_COLOR
ONE_COLOR_ITEMS: tuple[ItemDefinition, ...] = (
    _item(_O, "14-1", "Base: cuticle line", 10),
    _item(_O, "14-2", "Base: corner and side", 20),
    _item(_O, "14-3", "Color/top: cuticle line", 20),
    _item(_O, "14-4", "Color/top: corner and side", 10),
    _item(_O, "15-1", "Gap / missed coat", 20),
    _item(_O, "15-2", "Rattling", 10),
    _item(_O, "16-1", "Gap / missed coat", 10),
    _item(_O, "16-2", "Rattling", 20),
    _item(_O, "17-1", "Gap / missed coat", 10),
    _item(_O, "17-2", "Rattling", 20),
    _item(_O, "18-1", "Position", 20),
    _item(_O, "18-2", "Arch rattling", 30),
    _item(_O, "19-1", "Cuticle area", 10),
    _item(_O, "19-2", "Corner", 20),
    _item(_O, "19-3", "Yellow line", 20),
    _item(_O, "19-4", "Tip", 20),
    _item(_O, "19-5", "Side", 20),
    _item(_O, "20-1", "Gap / missed coat", 20),
    _item(_O, "20-2", "Rattling", 30),
    _item(_O, "21-1", "Gap / missed coat", 30),
    _item(_O, "21-2", "Rattling", 10),
    _item(_O, "22-1", "Gap / missed coat", 10),
    _item(_O, "22-2", "Rattling", 20),
    _item(_O, "23-1", "Gap / missed coat", 20),
    _item(_O, "23-2", "Rattling", 20),
    _item(_O, "24-1", "Gap / missed coat", 20),
    _item(_O, "24-2", "Rattling", 10),
    _item(_O, "25-1", "Missed coat", 10),
    _item(_O, "25-2", "Rattling", 10),
    _item(_O, "25-3", "Underflow", 20),
    _item(_O, "26-1", "Position", 10),
    _item(_O, "26-2", "Arch rattling", 20),
    _item(_O, "27-1", "Cuticle area", 20),
    _item(_O, "27-2", "Corner", 20),
    _item(_O, "27-3", "Yellow line", 10),
    _item(_O, "27-4", "Tip", 10),
)

_G = Discipline.GRADATION
GRADATION_ITEMS: tuple[ItemDefinition, ...] = (
    _item(_G, "28-1", "Vertical streaks", 10),
    _item(_G, "28-2", "Brush marks", 10),
    _item(_G, "28-3", "Left/right difference", 10),
    _item(_G, "28-4", "Color pooling", 10),
    _item(_G, "29-1", "Mid translucency", 10),
    _item(_G, "29-2", "Tip color", 10),
    _item(_G, "30-1", "Overflow", 10),
    _item(_G, "30-2", "Missed coat", 10),
    _item(_G, "30-3", "Rattling", 10),
    _item(_G, "31-1", "Position", 10),
    _item(_G, "31-2", "Arch rattling", 10),
    _item(_G, "32-1", "Cuticle area", 10),
    _item(_G, "32-2", "Corner", 10),
    _item(_G, "32-3", "Yellow line", 10),
    _item(_G, "32-4", "Tip", 10),
    _item(_G, "32-5", "Side", 10),
    _item(_G, "32-6", "Side straight", 10),
)

_T = Discipline.TIME
TIME_ITEMS: tuple[ItemDefinition, ...] = (
    _item(_T, "33-1", "Preparation (care) time", 30, timetable=(22, 23, 24)),
    _item(_T, "34-1", "Off time", 20, timetable=(13, 14, 15)),
    _item(_T, "35-1", "Fill-in time", 20, timetable=(8, 9, 10)),
    _item(_T, "36-1", "One-color base", 20, timetable=(6, 7, None)),
    _item(_T, "36-2", "One-color color", 20, timetable=(10, None, 11)),
    _item(_T, "36-3", "One-color top", 20, timetable=(5, None, None)),
    _item(_T, "36-4", "One-color total", 30, timetable=(21, 22, 23)),
    _item(_T, "37-1", "Gradation base", 20, timetable=(6, 7, None)),
    _item(_T, "37-2", "Gradation color", 20, timetable=(10, None, 11)),
    _item(_T, "37-3", "Gradation top", 20, timetable=(5, None, None)),
    _item(_T, "37-4", "Gradation total", 30, timetable=(21, 22, 23)),
    _item(_T, "38-1", "Grand total incl. fill-in", 30, timetable=(85, 90, 95)),
    _item(_T, "38-2", "Grand total excl. fill-in", 20, timetable=(77, 81, 85)),
)

ITEM_TABLES: dict[Discipline, tuple[ItemDefinition, ...]] = {
    Discipline.CARE: CARE_ITEMS,
    Discipline.ONE_COLOR: ONE_COLOR_ITEMS,
    Discipline.GRADATION: GRADATION_ITEMS,
    Discipline.TIME: TIME_ITEMS,
}

CATEGORY_LABELS: dict[str, str] = {
    "1": "Filing: length",
    "2": "Filing: gel removal",
    "3": "Filing: surface",
    "4": "Shape: overall",
    "5": "Shape: sides",
    "6": "Shape: center line",
    "7": "Cuticle: right corner",
    "8": "Cuticle: left corner",
    "9": "Cuticle: right side",
    "10": "Cuticle: left side",
    "11": "Cuticle: nail fold",
    "12": "Cuticle: cuticle line",
    "13": "Cuticle: nipper work",
    "14": "Base: edges",
    "15": "Base: thumb",
    "16": "Base: index finger",
    "17": "Base: middle finger",
    "18": "Base: arch",
    "19": "Base: finish lines",
    "20": "Color: thumb",
    "21": "Color: index finger",
    "22": "Color: middle finger",
    "23": "Color: ring finger",
    "24": "Color: little finger",
    "25": "Top: coating",
    "26": "Top: arch",
    "27": "Top: finish lines",
    "28": "Gradation: blending",
    "29": "Gradation: color",
    "30": "Gradation: coating",
    "31": "Gradation: arch",
    "32": "Gradation: finish lines",
    "33": "Preparation time",
    "34": "Off time",
    "35": "Fill-in time",
    "36": "One-color time",
    "37": "Gradation time",
    "38": "Total time",
}

CHART_GROUPS: dict[Discipline, tuple[ChartGroup, ...]] = {
    Discipline.CARE: (
        ChartGroup("File finish", 1, 3),
        ChartGroup("Shape", 4, 6),
        ChartGroup("Cuticle", 7, 13),
    ),
    Discipline.ONE_COLOR: (
        ChartGroup("Base", 14, 19),
        ChartGroup("Color", 20, 25),
        ChartGroup("Top", 26, 27),
    ),
    Discipline.GRADATION: (
        ChartGroup("Blending", 28, 29),
        ChartGroup("Coating", 30, 31),
        ChartGroup("Finish", 32, 32),
    ),
    Discipline.TIME: (
        ChartGroup("Care", 33, 35),
        ChartGroup("One-color", 36, 36),
        ChartGroup("Gradation", 37, 37),
        ChartGroup("Total", 38, 38),
    ),
}


def items_for(discipline: Discipline | str) -> tuple[ItemDefinition, ...]:
    """Return the canonical table for a discipline; the overall total owns no items."""
    return ITEM_TABLES.get(Discipline.parse(discipline), ())


def all_items() -> tuple[ItemDefinition, ...]:
    return tuple(item for d in SCORED_DISCIPLINES for item in ITEM_TABLES[d])


def item_by_id(item_id: str) -> ItemDefinition | None:
    return _BY_ID.get(item_id)


def item_by_key(key: str) -> ItemDefinition | None:
    return _BY_KEY.get(key)


def item_keys() -> frozenset[str]:
    return frozenset(_BY_KEY)


def group_allocation(discipline: Discipline, group: ChartGroup) -> int:
    return sum(
        item.allocation
        for item in items_for(discipline)
        if group.first_category <= item.category_number <= group.last_category
    )


def validate_item_tables(tables: dict[Discipline, tuple[ItemDefinition, ...]]) -> None:
    """
    Check the static tables are internally consistent.

    Raises:
        ConfigurationError: On duplicate ids or keys, malformed ids,
            allocations outside 10..30, a discipline whose allocations do
            not add up to its maximum, or a time item with a bad timetable.
    """
    everything = [item for items in tables.values() for item in items]

    for attr in ("id", "key"):
        counts = Counter(getattr(item, attr) for item in everything)
        dupes = sorted(value for value, n in counts.items() if n > 1)
        if dupes:
            raise ConfigurationError(
                f"Duplicate item {attr}s: {', '.join(dupes)}", config_key=f"items.{attr}"
            )

    for discipline, items in tables.items():
        for item in items:
            if item.discipline is not discipline:
                raise ConfigurationError(
                    f"Item {item.id} is listed under {discipline.value} "
                    f"but belongs to {item.discipline.value}",
                    config_key="items.discipline",
                )
            if item.id != f"{item.category}-{item.sub_index}":
                raise ConfigurationError(
                    f"Item id {item.id} does not match category/sub-index",
                    config_key="items.id",
                )
            if not MIN_ALLOCATION <= item.allocation <= MAX_ALLOCATION:
                raise ConfigurationError(
                    f"Item {item.id} allocation {item.allocation} outside "
                    f"{MIN_ALLOCATION}..{MAX_ALLOCATION}",
                    config_key="items.allocation",
                )
            if discipline is Discipline.TIME:
                _validate_timetable(item)
            elif item.timetable is not None:
                raise ConfigurationError(
                    f"Score item {item.id} must not carry a timetable",
                    config_key="items.timetable",
                )

        total = sum(item.allocation for item in items)
        expected = DISCIPLINE_MAXIMA[discipline]
        if total != expected:
            raise ConfigurationError(
                f"{discipline.value} allocations sum to {total}, expected {expected}",
                config_key=f"items.{discipline.value}",
                details={"discipline": discipline.value, "total": total, "expected": expected},
            )


def _validate_timetable(item: ItemDefinition) -> None:
    if item.timetable is None or not item.timetable.bands():
        raise ConfigurationError(
            f"Time item {item.id} has no timetable", config_key="items.timetable"
        )
    bounds = [bound for _, bound in item.timetable.bands()]
    if any(b <= 0 for b in bounds) or bounds != sorted(bounds):
        raise ConfigurationError(
            f"Time item {item.id} timetable bounds must be positive and non-decreasing",
            config_key="items.timetable",
        )


validate_item_tables(ITEM_TABLES)

_BY_ID = {item.id: item for item in all_items()}
_BY_KEY = {item.key: item for item in all_items()}
