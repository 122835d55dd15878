"""
Rank classification.

Scores are compared against per-discipline inclusive lower bounds, highest
first, falling through to B. Durations are compared against an item's
timetable of inclusive upper bounds, where faster is better. Missing
input always yields the ``NO_RANK`` sentinel rather than an error.
"""

from __future__ import annotations

import math
import re
import unicodedata

from .models import DISCIPLINE_MAXIMA, NO_RANK, Discipline, Rank, Timetable, Trend
from .values import clamp, numeric_or_none

THRESHOLDS: dict[Discipline, tuple[tuple[float, Rank], ...]] = {
    Discipline.CARE: ((349, Rank.AAA), (298, Rank.AA), (246, Rank.A)),
    Discipline.ONE_COLOR: ((519, Rank.AAA), (443, Rank.AA), (367, Rank.A)),
    # gradation is ranked on its percentage of the 170-point maximum
    Discipline.GRADATION: ((90, Rank.AAA), (80, Rank.AA), (70, Rank.A)),
    Discipline.TIME: ((255, Rank.AAA), (218, Rank.AA), (180, Rank.A)),
    Discipline.TOTAL: ((1123, Rank.AAA), (958, Rank.AA), (793, Rank.A)),
}

_CLOCK = re.compile(r"^(\d+):(\d{1,2})(?::(\d{1,2}))?$")
_BARE = re.compile(r"^\d+(?:\.\d+)?$")
_UNIT = re.compile(
    r"(\d+(?:\.\d+)?)\s*"
    r"(時間|分|秒|hours?|hrs?|h|minutes?|mins?|m|seconds?|secs?|s)(?![a-z])",
    re.IGNORECASE,
)
_UNIT_MINUTES = {"時間": 60.0, "h": 60.0, "分": 1.0, "m": 1.0, "秒": 1 / 60, "s": 1 / 60}


def classify(score: object, discipline: Discipline | str) -> str:
    """
    Map a score to a rank label for the discipline.

    Gradation expects a percentage here; use ``classify_total`` for raw
    gradation points. Returns ``NO_RANK`` when the score is missing.

    Example:
        >>> classify(349, "care")
        'AAA'
        >>> classify(None, "care")
        '-'
    """
    value = numeric_or_none(score)
    if value is None:
        return NO_RANK
    for bound, rank in THRESHOLDS[Discipline.parse(discipline)]:
        if value >= bound:
            return rank.value
    return Rank.B.value


def classify_total(total: object, discipline: Discipline | str) -> str:
    """Classify a discipline total as stored, converting gradation points to a percentage."""
    discipline = Discipline.parse(discipline)
    value = numeric_or_none(total)
    if value is None:
        return NO_RANK
    if discipline is Discipline.GRADATION:
        value = clamp(value / DISCIPLINE_MAXIMA[discipline] * 100, 0.0, 100.0)
    return classify(value, discipline)


def rank_order(label: object) -> int:
    """Ordinal for comparisons; the sentinel and unknown labels sort below B."""
    rank = Rank.parse(label)
    return rank.order if rank is not None else -1


def parse_duration(text: object) -> float:
    """
    Parse a working time into fractional minutes.

    Accepts unit text in English or Japanese ("22 minutes 30 seconds",
    "22分30秒", "1時間44分", "22m 30s"), clock form ("MM:SS" or
    "H:MM:SS"), bare numbers (minutes) and plain numbers. Anything else,
    including negative values, parses as 0.0.

    Example:
        >>> parse_duration("22 minutes 30 seconds")
        22.5
        >>> parse_duration("20:00")
        20.0
    """
    if isinstance(text, bool) or text is None:
        return 0.0
    if not isinstance(text, str):
        value = numeric_or_none(text)
        return value if value is not None and value > 0 else 0.0

    normalised = unicodedata.normalize("NFKC", text).strip()
    if not normalised or normalised.startswith("-"):
        return 0.0
    try:
        minutes = _text_minutes(normalised)
    except (ValueError, OverflowError):
        # digit runs past the int conversion limit or the float range
        return 0.0
    return minutes if math.isfinite(minutes) else 0.0


def _text_minutes(normalised: str) -> float:
    clock = _CLOCK.match(normalised)
    if clock:
        first, second, third = clock.groups()
        if third is None:
            return int(first) + int(second) / 60
        return int(first) * 60 + int(second) + int(third) / 60

    if _BARE.match(normalised):
        return float(normalised)

    minutes = 0.0
    for amount, unit in _UNIT.findall(normalised):
        unit = unit.lower()
        factor = _UNIT_MINUTES.get(unit) or _UNIT_MINUTES[unit[0]]
        minutes += float(amount) * factor
    return minutes


def format_duration(minutes: object) -> str:
    """
    Render minutes as "M minutes S seconds"; "-" when absent.

    Example:
        >>> format_duration(22.5)
        '22 minutes 30 seconds'
    """
    value = parse_duration(minutes)
    seconds_total = value * 60
    if value <= 0 or not math.isfinite(seconds_total):
        return NO_RANK
    whole_minutes, seconds = divmod(round(seconds_total), 60)
    return f"{whole_minutes} minutes {seconds} seconds"


def classify_duration(minutes: object, timetable: Timetable) -> str:
    """
    Rank a working time against a timetable; faster is better.

    Bounds are inclusive upper limits. Bands absent from the timetable are
    never awarded, so a time between the AAA bound and the next present
    bound falls to that band.
    """
    value = parse_duration(minutes)
    if value <= 0:
        return NO_RANK
    for rank, bound in timetable.bands():
        if value <= bound:
            return rank.value
    return Rank.B.value


def trend(current: object, comparison: object, lower_is_better: bool = False) -> Trend:
    """
    Compare a value against a previous result or a national average.

    Either side missing, zero or non-numeric is indeterminate, since a zero
    cannot be told apart from no data.
    """
    now = numeric_or_none(current)
    then = numeric_or_none(comparison)
    if not now or not then:
        return Trend.INDETERMINATE
    if now == then:
        return Trend.UNCHANGED
    better = now < then if lower_is_better else now > then
    return Trend.IMPROVED if better else Trend.DECLINED
