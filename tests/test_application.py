import json

import pytest

from skillcheck.application import api as app_api
from skillcheck.application.csv_import import import_skill_checks_csv
from skillcheck.infrastructure.exceptions import (
    CustomerNotFoundError,
    SkillCheckNotFoundError,
    ValidationError,
)
from skillcheck.infrastructure.repositories import CustomerRepo


@pytest.fixture
def seeded(session, sample_csv):
    import_skill_checks_csv(session, sample_csv)
    session.commit()
    return {c.customer_number: c.id for c in CustomerRepo(session).list()}


def test_list_customers(session, seeded):
    rows = app_api.list_customers(session)
    assert [r["customer_number"] for r in rows] == ["C-001", "C-002"]
    first, second = rows
    assert first["latest_total"] == 57.5
    assert first["latest_rank"] == "B"
    assert second["latest_total"] == 1000
    assert second["latest_rank"] == "AA"


def test_build_customer_report(session, seeded):
    report = app_api.build_customer_report(session, seeded["C-001"])
    assert report.customer.name == "Hanako Sato"
    assert report.sections["care"].summary.current == 25
    assert report.total_time == "104 minutes 54 seconds"
    assert report.national_total_time == "104 minutes 54 seconds"
    assert report.overall.national == 692


def test_build_report_for_customer_without_checks(session, seeded):
    customer, _ = CustomerRepo(session).upsert_by_number("C-100", {"name": "New"})
    with pytest.raises(SkillCheckNotFoundError):
        app_api.build_customer_report(session, customer.id)


def test_build_report_for_unknown_customer(session, seeded):
    with pytest.raises(CustomerNotFoundError):
        app_api.build_customer_report(session, 999)


def test_report_figures(session, seeded):
    figures = app_api.build_report_figures(session, seeded["C-001"])
    assert set(figures) == {"overview", "care", "one_color", "gradation", "time"}
    assert set(figures["care"]) == {"radar", "categories"}
    assert figures["overview"]["data"][0]["type"] == "scatterpolar"


def test_render_customer_pdf(session, seeded):
    assert app_api.render_customer_pdf(session, seeded["C-002"]).startswith(b"%PDF")


def test_export_customer_results(session, seeded):
    payload = json.loads(app_api.export_customer_results(session, seeded["C-002"], "json"))
    assert payload["history"][0]["Total"] == 1000
    assert app_api.export_customer_results(session, seeded["C-002"], "xlsx")[:2] == b"PK"
    with pytest.raises(ValidationError):
        app_api.export_customer_results(session, seeded["C-002"], "csv")


def test_update_customer_status(session, seeded):
    customer = app_api.update_customer_status(session, seeded["C-001"], "In progress")
    assert customer.status == "In progress"
    with pytest.raises(ValidationError):
        app_api.update_customer_status(session, seeded["C-001"], "Done")


def test_item_table():
    rows = app_api.item_table("time")
    assert rows[0]["timetable"] == {"AAA": 22, "AA": 23, "A": 24}
    assert rows[0]["target_minutes"] == 22
    assert app_api.item_table("care")[0]["timetable"] is None
    with pytest.raises(ValidationError):
        app_api.item_table("total")
    with pytest.raises(ValidationError):
        app_api.item_table("nails")
