from __future__ import annotations

import io
import json
import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.orm import Session

from ...application import api as app_api
from ...application.csv_import import import_skill_checks_csv
from ...infrastructure.config import Settings
from ...infrastructure.exceptions import (
    CustomerNotFoundError,
    SkillCheckError,
    SkillCheckNotFoundError,
)
from ..dependencies import get_app_settings, get_db_config, get_db_session
from ..schemas import (
    Customer,
    CustomerDetail,
    CustomerListItem,
    CustomerReport,
    CustomerStatusUpdate,
    DatabaseSettings,
    HistoryEntry,
    ImportResponse,
    ItemDefinition,
    ReportFiguresResponse,
)

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

ALLOWED_CSV_TYPES = {
    "text/csv",
    "text/plain",
    "application/csv",
    "application/vnd.ms-excel",
    "application/octet-stream",
}


def _http_error(exc: SkillCheckError) -> HTTPException:
    if isinstance(exc, (CustomerNotFoundError, SkillCheckNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.user_message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.user_message)


def _require_feature(enabled: bool, name: str) -> None:
    if not enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{name} is disabled")


@router.get("/health")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/settings/database", response_model=DatabaseSettings)
def get_database_settings_endpoint(request: Request) -> DatabaseSettings:
    config = get_db_config(request)
    return DatabaseSettings(
        backend=config.backend,
        sqlite_path=config.sqlite_path,
        mysql_host=config.mysql_host,
        mysql_port=config.mysql_port,
        mysql_user=config.mysql_user,
        mysql_database=config.mysql_database,
    )


@router.get("/customers", response_model=list[CustomerListItem])
def list_customers(db: Session = Depends(get_db_session)) -> list[CustomerListItem]:
    return [CustomerListItem(**row) for row in app_api.list_customers(db)]


@router.get("/customers/{customer_id}", response_model=CustomerDetail)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> CustomerDetail:
    try:
        customer, checks = app_api.load_customer_history(
            db, customer_id, limit=settings.report.history_limit
        )
    except SkillCheckError as exc:
        raise _http_error(exc) from exc

    history = app_api.report_builder(settings).history(checks)
    return CustomerDetail(
        **Customer.model_validate(customer, from_attributes=True).model_dump(),
        history=[HistoryEntry.model_validate(row, from_attributes=True) for row in history],
    )


@router.post("/customers/{customer_id}/status", response_model=Customer)
def update_customer_status(
    customer_id: int,
    payload: CustomerStatusUpdate,
    db: Session = Depends(get_db_session),
) -> Customer:
    try:
        customer = app_api.update_customer_status(db, customer_id, payload.status)
        db.commit()
    except SkillCheckError as exc:
        db.rollback()
        raise _http_error(exc) from exc
    except Exception:
        db.rollback()
        raise
    return Customer.model_validate(customer, from_attributes=True)


@router.get("/customers/{customer_id}/report", response_model=CustomerReport)
def get_customer_report(
    customer_id: int,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> CustomerReport:
    try:
        report = app_api.build_customer_report(db, customer_id, settings)
    except SkillCheckError as exc:
        raise _http_error(exc) from exc
    return CustomerReport.model_validate(report.to_dict())


@router.get("/customers/{customer_id}/report/figures", response_model=ReportFiguresResponse)
def get_report_figures(
    customer_id: int,
    db: Session = Depends(get_db_session),
) -> ReportFiguresResponse:
    try:
        figures = app_api.build_report_figures(db, customer_id)
    except SkillCheckError as exc:
        raise _http_error(exc) from exc
    return ReportFiguresResponse(figures=figures)


@router.get("/customers/{customer_id}/report.pdf")
def get_report_pdf(
    customer_id: int,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> StreamingResponse:
    _require_feature(settings.app.enable_pdf_reports, "PDF reports")
    try:
        pdf_bytes = app_api.render_customer_pdf(db, customer_id, settings)
    except SkillCheckError as exc:
        raise _http_error(exc) from exc

    headers = {"Content-Disposition": f"inline; filename=skill_check_{customer_id}.pdf"}
    return StreamingResponse(io.BytesIO(pdf_bytes), media_type="application/pdf", headers=headers)


@router.get("/customers/{customer_id}/exports/json")
def export_customer_json(
    customer_id: int,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    _require_feature(settings.app.enable_data_export, "Data export")
    try:
        payload = app_api.export_customer_results(db, customer_id, "json")
    except SkillCheckError as exc:
        raise _http_error(exc) from exc
    return JSONResponse(content=json.loads(payload))


@router.get("/customers/{customer_id}/exports/xlsx")
def export_customer_xlsx(
    customer_id: int,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> StreamingResponse:
    _require_feature(settings.app.enable_data_export, "Data export")
    try:
        xlsx_bytes = app_api.export_customer_results(db, customer_id, "xlsx")
    except SkillCheckError as exc:
        raise _http_error(exc) from exc

    stream = io.BytesIO(xlsx_bytes)
    stream.seek(0)
    headers = {"Content-Disposition": f"attachment; filename=skill_check_{customer_id}.xlsx"}
    return StreamingResponse(
        stream,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=headers,
    )


@router.get("/items/{discipline}", response_model=list[ItemDefinition])
def list_items(discipline: str) -> list[ItemDefinition]:
    try:
        rows = app_api.item_table(discipline)
    except SkillCheckError as exc:
        raise _http_error(exc) from exc
    return [ItemDefinition(**row) for row in rows]


@router.post("/imports/csv", response_model=ImportResponse)
async def import_csv(
    file: UploadFile = File(...),
    strict: bool = False,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> ImportResponse:
    _require_feature(settings.app.enable_csv_import, "CSV import")

    if file.content_type not in ALLOWED_CSV_TYPES:
        return ImportResponse(
            status="error",
            message="Unsupported file type. Please upload a .csv file.",
        )

    file_bytes = await file.read()
    if len(file_bytes) > settings.security.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.security.max_upload_size_mb} MB",
        )

    try:
        summary = import_skill_checks_csv(db, file_bytes, strict=strict)
        db.commit()
    except SkillCheckError as exc:
        db.rollback()
        return ImportResponse(
            status="error",
            message=exc.user_message,
            details=json.dumps(exc.details, default=str),
        )
    except Exception as exc:
        db.rollback()
        logger.exception("Unexpected error importing skill checks", exc_info=exc)
        return ImportResponse(
            status="error",
            message="Unexpected error during import.",
            details=str(exc),
        )

    return ImportResponse(
        status="ok",
        message=f"Imported {summary.processed} skill checks.",
        **summary.to_dict(),
    )
