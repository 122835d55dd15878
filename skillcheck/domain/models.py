from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

NO_RANK = "-"


class Discipline(str, Enum):
    CARE = "care"
    ONE_COLOR = "one_color"
    GRADATION = "gradation"
    TIME = "time"
    TOTAL = "total"  # overall; classification only, owns no items

    @classmethod
    def parse(cls, value: Discipline | str) -> Discipline:
        if isinstance(value, Discipline):
            return value
        name = str(value).strip().lower().replace("-", "_")
        return _DISCIPLINE_ALIASES.get(name) or cls(name)

    @property
    def label(self) -> str:
        return DISCIPLINE_LABELS[self]


_DISCIPLINE_ALIASES = {
    "onecolor": Discipline.ONE_COLOR,
    "color": Discipline.ONE_COLOR,
    "grad": Discipline.GRADATION,
    "overall": Discipline.TOTAL,
    "comprehensive": Discipline.TOTAL,
}

DISCIPLINE_LABELS = {
    Discipline.CARE: "Care",
    Discipline.ONE_COLOR: "One-color",
    Discipline.GRADATION: "Gradation",
    Discipline.TIME: "Time",
    Discipline.TOTAL: "Overall",
}

# Declared maxima. Gradation is stored as raw points but ranked as a percentage.
DISCIPLINE_MAXIMA: dict[Discipline, int] = {
    Discipline.CARE: 410,
    Discipline.ONE_COLOR: 610,
    Discipline.GRADATION: 170,
    Discipline.TIME: 300,
    Discipline.TOTAL: 1320,
}

# Precomputed total column carried by imported records.
TOTAL_FIELDS: dict[Discipline, str] = {
    Discipline.CARE: "care_score",
    Discipline.ONE_COLOR: "color_score",
    Discipline.GRADATION: "art_score",
    Discipline.TIME: "time_score",
    Discipline.TOTAL: "total_score",
}

KEY_PREFIXES: dict[Discipline, str] = {
    Discipline.CARE: "care",
    Discipline.ONE_COLOR: "color",
    Discipline.GRADATION: "grad",
    Discipline.TIME: "time",
}

# Disciplines summed into the overall total.
OVERALL_COMPONENTS = (Discipline.CARE, Discipline.ONE_COLOR, Discipline.TIME)
SCORED_DISCIPLINES = (Discipline.CARE, Discipline.ONE_COLOR, Discipline.GRADATION, Discipline.TIME)


class Rank(str, Enum):
    B = "B"
    A = "A"
    AA = "AA"
    AAA = "AAA"

    @property
    def order(self) -> int:
        return _RANK_ORDER[self]

    @property
    def points(self) -> int:
        """Timetable points: AAA 4, AA 3, A 2, B 1."""
        return _RANK_ORDER[self] + 1

    @classmethod
    def parse(cls, label: object) -> Rank | None:
        """Normalise a stored rank label ("AA", "a.a.", " AAA ") or return None."""
        if isinstance(label, Rank):
            return label
        if not isinstance(label, str):
            return None
        cleaned = label.replace(".", "").replace(" ", "").upper()
        try:
            return cls(cleaned)
        except ValueError:
            return None


_RANK_ORDER = {Rank.B: 0, Rank.A: 1, Rank.AA: 2, Rank.AAA: 3}


class Trend(str, Enum):
    IMPROVED = "improved"
    DECLINED = "declined"
    UNCHANGED = "unchanged"
    INDETERMINATE = "indeterminate"


@dataclass(frozen=True, slots=True)
class Timetable:
    """Inclusive upper bounds in minutes; a band set to None is not awarded."""

    aaa: float | None
    aa: float | None
    a: float | None

    def bands(self) -> list[tuple[Rank, float]]:
        pairs = [(Rank.AAA, self.aaa), (Rank.AA, self.aa), (Rank.A, self.a)]
        return [(rank, bound) for rank, bound in pairs if bound is not None]


@dataclass(frozen=True, slots=True)
class ItemDefinition:
    id: str  # "14-1"
    label: str
    category: str  # "14"
    sub_index: int
    allocation: int
    discipline: Discipline
    required: bool = False
    timetable: Timetable | None = None

    @property
    def key(self) -> str:
        return f"{KEY_PREFIXES[self.discipline]}_{self.category}_{self.sub_index}"

    @property
    def category_number(self) -> int:
        return int(self.category)

    @property
    def target_minutes(self) -> float | None:
        if self.timetable is None:
            return None
        bands = self.timetable.bands()
        return bands[0][1] if bands else None


@dataclass(frozen=True, slots=True)
class ChartGroup:
    label: str
    first_category: int
    last_category: int


@dataclass(slots=True)
class Customer:
    id: int
    customer_number: str
    name: str
    age: int | None = None
    experience: str | None = None
    occupation: str | None = None
    prefecture: str | None = None
    application_date: date | None = None
    status: str = "New"


@dataclass(slots=True)
class SkillCheck:
    id: int
    customer_id: int
    imported_at: datetime
    record: dict[str, object] = field(default_factory=dict)
    counseling_comment: str | None = None
