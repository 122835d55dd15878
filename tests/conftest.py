from __future__ import annotations

import os

os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime  # noqa: E402
from typing import Any  # noqa: E402

import pandas as pd  # noqa: E402
import pytest  # noqa: E402

from skillcheck.domain.items import items_for  # noqa: E402
from skillcheck.domain.models import SCORED_DISCIPLINES  # noqa: E402
from skillcheck.infrastructure.db import create_memory_engine, create_session_factory  # noqa: E402
from skillcheck.infrastructure.models import Base  # noqa: E402

CSV_COLUMNS = [
    "customer_number",
    "name",
    "age",
    "nail_technician_experience",
    "occupation",
    "prefecture",
    "application_date",
    "total_score",
    "rank",
    "care_score",
    "color_score",
    "art_score",
    "time_score",
    "total_time",
    "counseling_comment",
    "care_1_1",
    "care_1_2",
    "color_14_1",
    "time_33_1",
]


def full_marks() -> dict[str, Any]:
    """Every score item at its allocation and every time item on its AAA bound."""
    record: dict[str, Any] = {}
    for discipline in SCORED_DISCIPLINES:
        for item in items_for(discipline):
            if item.timetable is not None:
                record[item.key] = f"{item.target_minutes:g} minutes"
            else:
                record[item.key] = item.allocation
    return record


def make_csv(rows: list[dict[str, str]]) -> bytes:
    return pd.DataFrame(rows, columns=CSV_COLUMNS).to_csv(index=False).encode("utf-8")


@pytest.fixture
def engine():
    engine = create_memory_engine()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def SessionLocal(engine):
    return create_session_factory(engine)


@pytest.fixture
def session(SessionLocal):
    with SessionLocal() as s:
        yield s


@pytest.fixture
def sample_csv() -> bytes:
    return make_csv(
        [
            {
                "customer_number": "C-001",
                "name": "Hanako Sato",
                "age": "29",
                "nail_technician_experience": "3 years",
                "occupation": "Nailist",
                "prefecture": "Tokyo",
                "application_date": "2024/05/01",
                "total_time": "104分54秒",
                "counseling_comment": "Great progress",
                "care_1_1": "10",
                "care_1_2": "15",
                "color_14_1": "10",
                "time_33_1": "22分30秒",
            },
            {
                "customer_number": "C-002",
                "name": "Yuki Tanaka",
                "age": "35",
                "prefecture": "Osaka",
                "application_date": "2024-05-02",
                "total_score": "1000",
                "rank": "A.A.",
                "care_score": "320",
                "color_score": "450",
                "art_score": "140",
                "time_score": "230",
            },
            {"name": "Missing Number"},
            {"customer_number": "C-003", "name": "Bad Age", "age": "abc"},
        ]
    )


@pytest.fixture
def import_time() -> datetime:
    return datetime(2024, 5, 1, 10, 0, 0)
