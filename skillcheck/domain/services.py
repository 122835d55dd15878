from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

from .items import CATEGORY_LABELS, CHART_GROUPS, group_allocation, items_for
from .models import (
    DISCIPLINE_MAXIMA,
    NO_RANK,
    SCORED_DISCIPLINES,
    Customer,
    Discipline,
    ItemDefinition,
    Rank,
    SkillCheck,
)
from .ranking import classify, classify_duration, classify_total, format_duration, parse_duration, trend
from .scoring import (
    Record,
    category_sum,
    discipline_percentage,
    discipline_score,
    group_totals,
    item_percentage,
    item_score,
    overall_total,
)
from .values import clamp


@dataclass(slots=True)
class DisciplineSummary:
    discipline: str
    label: str
    maximum: int
    current: float | None
    previous: float | None
    national: float | None
    current_percentage: float
    previous_percentage: float | None
    national_percentage: float | None
    current_rank: str
    previous_rank: str
    national_rank: str
    vs_previous: str
    vs_national: str


@dataclass(slots=True)
class CategoryRow:
    category: str
    label: str
    allocation: int
    current: float
    previous: float | None
    percentage: float


@dataclass(slots=True)
class ItemRow:
    id: str
    key: str
    label: str
    allocation: int
    required: bool
    current: float | str | None
    previous: float | str | None
    percentage: float
    trend: str
    rank: str | None = None  # timetable rank, time items only
    target_minutes: float | None = None


@dataclass(slots=True)
class ChartAxis:
    label: str
    maximum: int
    current: float
    previous: float | None
    national: float | None


@dataclass(slots=True)
class HistoryRow:
    skill_check_id: int
    date: str
    total: float
    rank: str


@dataclass(slots=True)
class DisciplineSection:
    summary: DisciplineSummary
    categories: list[CategoryRow] = field(default_factory=list)
    items: list[ItemRow] = field(default_factory=list)
    axes: list[ChartAxis] = field(default_factory=list)


@dataclass(slots=True)
class CustomerReport:
    customer: Customer
    generated_at: datetime
    overall: DisciplineSummary
    sections: dict[str, DisciplineSection]
    total_time: str
    previous_total_time: str
    national_total_time: str
    counseling_comment: str | None
    history: list[HistoryRow]

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["generated_at"] = self.generated_at.isoformat()
        if self.customer.application_date is not None:
            data["customer"]["application_date"] = self.customer.application_date.isoformat()
        return data


def overall_rank(record: Record | None) -> str:
    """A recognised stored rank wins; otherwise classify the overall total."""
    if not record:
        return NO_RANK
    stored = Rank.parse(record.get("rank"))
    if stored is not None:
        return stored.value
    return classify(overall_total(record), Discipline.TOTAL)


def total_time_minutes(record: Record | None) -> float:
    """Recorded total working time, falling back to the timed grand total item."""
    if not record:
        return 0.0
    minutes = parse_duration(record.get("total_time"))
    if minutes <= 0:
        minutes = parse_duration(record.get("time_38_1"))
    return minutes


class ReportBuilder:
    """
    Assemble a customer's report from their skill checks, newest first.

    Index 0 is the current result and index 1 the previous one. Pure: no
    database access, all inputs are passed in.
    """

    def __init__(
        self,
        national_averages: Mapping[str, float | None] | None = None,
        national_total_time: str | None = None,
        history_limit: int = 10,
        logger: logging.Logger | None = None,
    ):
        self.national = dict(national_averages or {})
        self.national_total_time = national_total_time
        self.history_limit = history_limit
        self.logger = logger or logging.getLogger(__name__)

    def build(self, customer: Customer, checks: Sequence[SkillCheck]) -> CustomerReport:
        current = checks[0].record if checks else None
        previous = checks[1].record if len(checks) > 1 else None

        sections = {
            d.value: self._section(d, current, previous) for d in SCORED_DISCIPLINES
        }
        report = CustomerReport(
            customer=customer,
            generated_at=datetime.now(timezone.utc),
            overall=self.summary(Discipline.TOTAL, current, previous),
            sections=sections,
            total_time=format_duration(total_time_minutes(current)),
            previous_total_time=format_duration(total_time_minutes(previous)),
            national_total_time=self.national_total_time or NO_RANK,
            counseling_comment=checks[0].counseling_comment if checks else None,
            history=self.history(checks),
        )
        self.logger.debug(
            "Built report for customer %s from %d skill checks", customer.id, len(checks)
        )
        return report

    def summary(
        self, discipline: Discipline, current: Record | None, previous: Record | None
    ) -> DisciplineSummary:
        now = discipline_score(current, discipline) if current else None
        then = discipline_score(previous, discipline) if previous else None
        national = self.national.get(discipline.value)

        if discipline is Discipline.TOTAL:
            current_rank = overall_rank(current)
            previous_rank = overall_rank(previous)
        else:
            current_rank = classify_total(now, discipline)
            previous_rank = classify_total(then, discipline)

        return DisciplineSummary(
            discipline=discipline.value,
            label=discipline.label,
            maximum=DISCIPLINE_MAXIMA[discipline],
            current=now,
            previous=then,
            national=national,
            current_percentage=discipline_percentage(now, discipline),
            previous_percentage=(
                discipline_percentage(then, discipline) if then is not None else None
            ),
            national_percentage=(
                discipline_percentage(national, discipline) if national is not None else None
            ),
            current_rank=current_rank,
            previous_rank=previous_rank,
            national_rank=classify_total(national, discipline),
            vs_previous=trend(now, then).value,
            vs_national=trend(now, national).value,
        )

    def _section(
        self, discipline: Discipline, current: Record | None, previous: Record | None
    ) -> DisciplineSection:
        items = items_for(discipline)
        return DisciplineSection(
            summary=self.summary(discipline, current, previous),
            categories=self.category_rows(items, current, previous),
            items=[self.item_row(item, current, previous) for item in items],
            axes=self.chart_axes(discipline, current, previous),
        )

    def category_rows(
        self,
        items: Sequence[ItemDefinition],
        current: Record | None,
        previous: Record | None,
    ) -> list[CategoryRow]:
        rows: list[CategoryRow] = []
        for category in dict.fromkeys(item.category for item in items):
            allocation = sum(i.allocation for i in items if i.category == category)
            now = category_sum(current, items, category)
            rows.append(
                CategoryRow(
                    category=category,
                    label=CATEGORY_LABELS.get(category, category),
                    allocation=allocation,
                    current=now,
                    previous=category_sum(previous, items, category) if previous else None,
                    percentage=clamp(now / allocation * 100, 0.0, 100.0) if allocation else 0.0,
                )
            )
        return rows

    def item_row(
        self, item: ItemDefinition, current: Record | None, previous: Record | None
    ) -> ItemRow:
        if item.timetable is not None:
            now_minutes = parse_duration(current.get(item.key)) if current else 0.0
            then_minutes = parse_duration(previous.get(item.key)) if previous else 0.0
            return ItemRow(
                id=item.id,
                key=item.key,
                label=item.label,
                allocation=item.allocation,
                required=item.required,
                current=format_duration(now_minutes),
                previous=format_duration(then_minutes),
                percentage=item_percentage(current, item),
                trend=trend(now_minutes, then_minutes, lower_is_better=True).value,
                rank=classify_duration(now_minutes, item.timetable),
                target_minutes=item.target_minutes,
            )

        now = _raw_score(current, item)
        then = _raw_score(previous, item)
        return ItemRow(
            id=item.id,
            key=item.key,
            label=item.label,
            allocation=item.allocation,
            required=item.required,
            current=now,
            previous=then,
            percentage=item_percentage(current, item),
            trend=trend(now, then).value,
        )

    def chart_axes(
        self, discipline: Discipline, current: Record | None, previous: Record | None
    ) -> list[ChartAxis]:
        national = self.national.get(discipline.value)
        national_pct = (
            discipline_percentage(national, discipline) if national is not None else None
        )
        now_totals = group_totals(current, discipline)
        then_totals = group_totals(previous, discipline) if previous else {}

        axes: list[ChartAxis] = []
        for group in CHART_GROUPS.get(discipline, ()):
            maximum = group_allocation(discipline, group)
            axes.append(
                ChartAxis(
                    label=group.label,
                    maximum=maximum,
                    current=_percent(now_totals.get(group.label, 0.0), maximum),
                    previous=(
                        _percent(then_totals[group.label], maximum) if previous else None
                    ),
                    national=national_pct,
                )
            )
        return axes

    def history(self, checks: Sequence[SkillCheck]) -> list[HistoryRow]:
        return [
            HistoryRow(
                skill_check_id=check.id,
                date=check.imported_at.date().isoformat(),
                total=overall_total(check.record),
                rank=overall_rank(check.record),
            )
            for check in checks[: self.history_limit]
        ]


def _raw_score(record: Record | None, item: ItemDefinition) -> float | None:
    if not record or record.get(item.key) is None:
        return None
    return item_score(record, item)


def _percent(value: float, maximum: int) -> float:
    return clamp(value / maximum * 100, 0.0, 100.0) if maximum else 0.0
