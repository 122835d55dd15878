from __future__ import annotations

import json
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from ...application import api as app_api
from ...infrastructure.config import Settings
from ...infrastructure.exceptions import (
    CustomerNotFoundError,
    SkillCheckError,
    SkillCheckNotFoundError,
)
from ...utils.charts import rank_color
from ..dependencies import get_app_settings, get_db_session

router = APIRouter(tags=["pages"])

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
templates.env.filters["rank_color"] = rank_color


def _base_context(request: Request, settings: Settings) -> dict[str, object]:
    return {
        "request": request,
        "app_title": settings.app.title,
        "organisation": settings.report.organisation,
        "pdf_enabled": settings.app.enable_pdf_reports,
    }


@router.get("/", response_class=HTMLResponse)
def customer_index(
    request: Request,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> HTMLResponse:
    context = _base_context(request, settings)
    context["customers"] = app_api.list_customers(db)
    return templates.TemplateResponse(request, "index.html", context)


@router.get("/reports/{customer_id}", response_class=HTMLResponse)
def customer_report_page(
    customer_id: int,
    request: Request,
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> HTMLResponse:
    try:
        report = app_api.build_customer_report(db, customer_id, settings)
    except (CustomerNotFoundError, SkillCheckNotFoundError) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.user_message) from exc
    except SkillCheckError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.user_message) from exc

    context = _base_context(request, settings)
    context["report"] = report
    context["figures_json"] = json.dumps(app_api.report_figures(report))
    return templates.TemplateResponse(request, "report.html", context)
