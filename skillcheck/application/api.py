"""
Application API layer.

High-level operations used by the web routes and scripts: customer
listings, report assembly, figures, printable reports and exports. Each
operation takes an explicit SQLAlchemy session and wraps unexpected
failures in application errors with user-facing messages.
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy.orm import Session

from ..domain.items import items_for
from ..domain.models import SCORED_DISCIPLINES, Customer, Discipline, SkillCheck
from ..domain.schemas import CUSTOMER_STATUSES
from ..domain.scoring import overall_total
from ..domain.services import ChartAxis, CustomerReport, ReportBuilder, overall_rank
from ..infrastructure.config import Settings, get_settings
from ..infrastructure.exceptions import (
    ExportError,
    SkillCheckError,
    SkillCheckNotFoundError,
    ValidationError,
    log_error_details,
)
from ..infrastructure.logging import get_logger, log_operation, set_context
from ..infrastructure.repositories import CustomerRepo, SkillCheckRepo
from ..utils.charts import make_radar, section_figures
from ..utils.exports import make_json_export_payload, make_xlsx_export_bytes
from ..utils.pdf import render_report_pdf

logger = get_logger(__name__)


def report_builder(settings: Settings | None = None) -> ReportBuilder:
    settings = settings or get_settings()
    return ReportBuilder(
        national_averages=settings.report.national_averages(),
        national_total_time=settings.report.national_total_time,
        history_limit=settings.report.history_limit,
        logger=get_logger("domain.report_builder"),
    )


@log_operation("list_customers")
def list_customers(session: Session) -> list[dict[str, Any]]:
    """
    Customers with the headline figures of their latest skill check.

    Example:
        >>> rows = list_customers(session)
        >>> rows[0]["latest_rank"]
        'AA'
    """
    rows = []
    for customer, latest in CustomerRepo(session).list_with_latest():
        record = latest.to_record() if latest is not None else None
        rows.append(
            {
                "id": customer.id,
                "customer_number": customer.customer_number,
                "name": customer.name,
                "status": customer.status,
                "prefecture": customer.prefecture,
                "latest_imported_at": latest.imported_at if latest is not None else None,
                "latest_total": overall_total(record) if record is not None else None,
                "latest_rank": overall_rank(record),
            }
        )
    logger.info(f"Listed {len(rows)} customers")
    return rows


@log_operation("load_customer_history")
def load_customer_history(
    session: Session, customer_id: int, limit: int | None = None
) -> tuple[Customer, list[SkillCheck]]:
    """
    Customer plus their skill checks, newest first.

    Raises:
        CustomerNotFoundError: If the customer does not exist
    """
    set_context(customer_id=customer_id)
    customer = CustomerRepo(session).get_required(customer_id)
    checks = SkillCheckRepo(session).list_for_customer(customer_id, limit=limit)
    return customer.to_domain(), [c.to_domain() for c in checks]


@log_operation("build_customer_report")
def build_customer_report(
    session: Session, customer_id: int, settings: Settings | None = None
) -> CustomerReport:
    """
    Assemble the full report for a customer's latest skill check.

    Raises:
        CustomerNotFoundError: If the customer does not exist
        SkillCheckNotFoundError: If nothing has been imported for the customer
    """
    try:
        customer, checks = load_customer_history(session, customer_id)
        if not checks:
            raise SkillCheckNotFoundError(customer_id)
        return report_builder(settings).build(customer, checks)

    except SkillCheckError:
        raise
    except Exception as e:
        error_details = log_error_details(e, {"customer_id": customer_id})
        logger.error("Failed to build customer report", extra=error_details)
        raise SkillCheckError(
            f"Failed to build report for customer {customer_id}: {str(e)}",
            details=error_details,
            user_message="Unable to build the report. Please try again.",
        ) from e


def report_figures(report: CustomerReport) -> dict[str, Any]:
    """Plotly JSON per discipline plus an overview radar of discipline percentages."""
    overview_axes = [
        ChartAxis(
            label=section.summary.label,
            maximum=section.summary.maximum,
            current=section.summary.current_percentage,
            previous=section.summary.previous_percentage,
            national=section.summary.national_percentage,
        )
        for section in report.sections.values()
    ]
    payload: dict[str, Any] = {
        "overview": json.loads(make_radar(overview_axes, title="Overall balance").to_json())
    }
    for name, section in report.sections.items():
        payload[name] = {
            key: json.loads(fig.to_json()) for key, fig in section_figures(section).items()
        }
    return payload


@log_operation("build_report_figures")
def build_report_figures(session: Session, customer_id: int) -> dict[str, Any]:
    return report_figures(build_customer_report(session, customer_id))


@log_operation("render_customer_pdf")
def render_customer_pdf(
    session: Session, customer_id: int, settings: Settings | None = None
) -> bytes:
    settings = settings or get_settings()
    report = build_customer_report(session, customer_id, settings)
    return render_report_pdf(report, organisation=settings.report.organisation)


@log_operation("export_customer_results")
def export_customer_results(session: Session, customer_id: int, export_format: str) -> bytes:
    """
    Export a customer's history as JSON or XLSX bytes.

    Raises:
        ValidationError: If the format is not supported
        ExportError: If serialisation fails
    """
    if export_format not in ("json", "xlsx"):
        raise ValidationError("format", "Use json or xlsx", export_format)

    customer, checks = load_customer_history(session, customer_id)
    try:
        if export_format == "json":
            return make_json_export_payload(customer, checks).encode("utf-8")
        return make_xlsx_export_bytes(customer, checks)
    except Exception as e:
        error_details = log_error_details(e, {"customer_id": customer_id})
        logger.error("Failed to export customer results", extra=error_details)
        raise ExportError(
            f"Failed to export results for customer {customer_id}: {str(e)}",
            export_format=export_format,
            details=error_details,
        ) from e


@log_operation("update_customer_status")
def update_customer_status(session: Session, customer_id: int, status: str) -> Customer:
    if status not in CUSTOMER_STATUSES:
        raise ValidationError(
            "status", f"Status must be one of: {', '.join(CUSTOMER_STATUSES)}", status
        )
    repo = CustomerRepo(session)
    customer = repo.set_status(repo.get_required(customer_id), status)
    return customer.to_domain()


def item_table(discipline: str) -> list[dict[str, Any]]:
    """
    The canonical checkpoint table for a discipline, as plain dicts.

    Raises:
        ValidationError: If the discipline is unknown
    """
    try:
        parsed = Discipline.parse(discipline)
    except ValueError as e:
        raise ValidationError("discipline", f"Unknown discipline {discipline!r}", discipline) from e
    if parsed not in SCORED_DISCIPLINES:
        raise ValidationError("discipline", "The overall total has no items", discipline)

    return [
        {
            "id": item.id,
            "key": item.key,
            "label": item.label,
            "category": item.category,
            "allocation": item.allocation,
            "required": item.required,
            "target_minutes": item.target_minutes,
            "timetable": (
                {"AAA": item.timetable.aaa, "AA": item.timetable.aa, "A": item.timetable.a}
                if item.timetable is not None
                else None
            ),
        }
        for item in items_for(parsed)
    ]
