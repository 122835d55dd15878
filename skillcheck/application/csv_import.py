"""
Skill-check CSV ingestion.

Reads the scoring sheet export, upserts customers by customer number and
appends one skill check per row. Rows that fail validation are reported
in the summary and never abort the rest of the file.
"""

from __future__ import annotations

import io
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any

import pandas as pd
from sqlalchemy.orm import Session

from ..domain.items import item_by_key
from ..domain.schemas import SkillCheckRowInput, validate_input
from ..domain.values import numeric_or_none
from ..infrastructure.exceptions import ImportError, MultipleValidationError, ValidationError
from ..infrastructure.logging import get_logger, log_operation, set_context
from ..infrastructure.models import RECORD_FIELDS
from ..infrastructure.repositories import CustomerRepo, SkillCheckRepo

logger = get_logger(__name__)

CsvSource = str | Path | bytes | IO[bytes] | IO[str]


@dataclass
class ImportSummary:
    processed: int = 0
    created_customers: int = 0
    updated_customers: int = 0
    skipped: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "created_customers": self.created_customers,
            "updated_customers": self.updated_customers,
            "skipped": self.skipped,
            "errors": self.errors,
        }


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NA:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def read_skill_check_csv(source: CsvSource) -> pd.DataFrame:
    """
    Load a CSV with every column as text and fully blank rows removed.

    Raises:
        ImportError: If the file cannot be read or parsed.
    """
    file_path = str(source) if isinstance(source, (str, Path)) else None
    handle = io.BytesIO(source) if isinstance(source, bytes) else source
    try:
        frame = pd.read_csv(handle, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as e:
        raise ImportError(f"Could not read CSV: {str(e)}", file_path=file_path) from e

    frame.columns = [str(c).strip().lower() for c in frame.columns]
    if "customer_number" not in frame.columns:
        raise ImportError(
            "CSV is missing the customer_number column",
            file_path=file_path,
            details={"columns": list(frame.columns)},
        )
    return frame.replace(r"^\s*$", pd.NA, regex=True).dropna(how="all")


def _record_from_row(row: dict[str, Any], data: dict[str, Any]) -> dict[str, Any]:
    record: dict[str, Any] = {}
    for column, raw in row.items():
        item = item_by_key(column)
        if item is None or _is_missing(raw):
            continue
        if item.timetable is not None:
            record[column] = str(raw).strip()
        else:
            number = numeric_or_none(raw)
            if number is not None:
                record[column] = number
    for name in RECORD_FIELDS:
        if data.get(name) is not None:
            record[name] = data[name]
    return record


def _row_errors(errors: list[dict[str, Any]]) -> MultipleValidationError:
    """Collect per-row import errors into one validation error."""
    return MultipleValidationError(
        [
            ValidationError(
                error["field"], f"row {error['row']}: {error['message']}", details=error
            )
            for error in errors
        ]
    )


@log_operation("import_skill_checks_csv")
def import_skill_checks_csv(
    session: Session, source: CsvSource, strict: bool = False
) -> ImportSummary:
    """
    Import skill-check rows from a CSV file.

    The caller owns the transaction; nothing is committed here. With
    ``strict`` any rejected row fails the whole import so the caller can
    roll back.

    Raises:
        ImportError: If the file cannot be read
        MultipleValidationError: In strict mode, listing every rejected row

    Example:
        >>> with uow.begin() as s:
        ...     summary = import_skill_checks_csv(s, "exports/2024-05.csv")
        >>> summary.processed
        42
    """
    frame = read_skill_check_csv(source)
    set_context(operation="import_skill_checks_csv")

    customers = CustomerRepo(session)
    checks = SkillCheckRepo(session)
    summary = ImportSummary()

    # frame index 0 is line 2 of the file, after the header
    for index, row in zip(frame.index, frame.to_dict(orient="records")):
        line = int(index) + 2
        values = {k: (None if _is_missing(v) else v) for k, v in row.items()}
        if values.get("customer_number") is None:
            summary.skipped += 1
            summary.errors.append({"row": line, "field": "customer_number", "message": "missing"})
            continue

        result = validate_input(SkillCheckRowInput, values)
        if not result.success or result.data is None:
            summary.skipped += 1
            for error in result.errors:
                summary.errors.append(
                    {"row": line, "field": error.field, "message": error.message}
                )
            continue

        data = result.data
        customer, created = customers.upsert_by_number(data["customer_number"], data)
        checks.add(
            customer.id,
            _record_from_row(values, data),
            counseling_comment=data.get("counseling_comment"),
        )

        summary.processed += 1
        if created:
            summary.created_customers += 1
        else:
            summary.updated_customers += 1

    if strict and summary.errors:
        raise _row_errors(summary.errors)

    logger.info(
        f"Imported {summary.processed} skill checks "
        f"({summary.created_customers} new customers, {summary.skipped} rows skipped)"
    )
    return summary
