from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class CustomerListItem(BaseModel):
    id: int
    customer_number: str
    name: str
    status: str
    prefecture: Optional[str] = None
    latest_imported_at: Optional[datetime] = None
    latest_total: Optional[float] = None
    latest_rank: str = "-"


class Customer(BaseModel):
    id: int
    customer_number: str
    name: str
    age: Optional[int] = None
    experience: Optional[str] = None
    occupation: Optional[str] = None
    prefecture: Optional[str] = None
    application_date: Optional[date] = None
    status: str = "New"


class HistoryEntry(BaseModel):
    skill_check_id: int
    date: str
    total: float
    rank: str


class CustomerDetail(Customer):
    history: list[HistoryEntry] = Field(default_factory=list)


class CustomerStatusUpdate(BaseModel):
    status: Literal["New", "In progress", "Completion"]


class DisciplineSummary(BaseModel):
    discipline: str
    label: str
    maximum: int
    current: Optional[float] = None
    previous: Optional[float] = None
    national: Optional[float] = None
    current_percentage: float
    previous_percentage: Optional[float] = None
    national_percentage: Optional[float] = None
    current_rank: str
    previous_rank: str
    national_rank: str
    vs_previous: str
    vs_national: str


class CategoryRow(BaseModel):
    category: str
    label: str
    allocation: int
    current: float
    previous: Optional[float] = None
    percentage: float


class ItemRow(BaseModel):
    id: str
    key: str
    label: str
    allocation: int
    required: bool
    current: Optional[float | str] = None
    previous: Optional[float | str] = None
    percentage: float
    trend: str
    rank: Optional[str] = None
    target_minutes: Optional[float] = None


class ChartAxis(BaseModel):
    label: str
    maximum: int
    current: float
    previous: Optional[float] = None
    national: Optional[float] = None


class DisciplineSection(BaseModel):
    summary: DisciplineSummary
    categories: list[CategoryRow]
    items: list[ItemRow]
    axes: list[ChartAxis]


class CustomerReport(BaseModel):
    customer: Customer
    generated_at: datetime
    overall: DisciplineSummary
    sections: dict[str, DisciplineSection]
    total_time: str
    previous_total_time: str
    national_total_time: str
    counseling_comment: Optional[str] = None
    history: list[HistoryEntry]


class ReportFiguresResponse(BaseModel):
    figures: dict[str, Any]


class Timetable(BaseModel):
    AAA: Optional[float] = None
    AA: Optional[float] = None
    A: Optional[float] = None


class ItemDefinition(BaseModel):
    id: str
    key: str
    label: str
    category: str
    allocation: int
    required: bool
    target_minutes: Optional[float] = None
    timetable: Optional[Timetable] = None


class ImportRowError(BaseModel):
    row: int
    field: str
    message: str


class ImportResponse(BaseModel):
    status: Literal["ok", "error"]
    message: str
    processed: int = 0
    created_customers: int = 0
    updated_customers: int = 0
    skipped: int = 0
    errors: list[ImportRowError] = Field(default_factory=list)
    details: Optional[str] = None


class DatabaseSettings(BaseModel):
    backend: Literal["sqlite", "mysql"]
    sqlite_path: Optional[str] = None
    mysql_host: Optional[str] = None
    mysql_port: Optional[int] = None
    mysql_user: Optional[str] = None
    mysql_database: Optional[str] = None
