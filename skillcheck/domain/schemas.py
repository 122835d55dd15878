"""
Pydantic schemas for validating imported and submitted data.

The scoring core never validates records; these schemas sit at the
boundary where CSV rows and API input enter the system.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from html import unescape
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Rank
from .values import numeric_or_none

CUSTOMER_STATUSES = ("New", "In progress", "Completion")
DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%Y.%m.%d", "%Y年%m月%d日")


class BaseValidationSchema(BaseModel):
    """Base schema with common validation utilities."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True, extra="ignore")

    @field_validator("*", mode="before")
    def sanitize_strings(cls, v):
        """Strip markup and control characters from free text."""
        if isinstance(v, str):
            cleaned = unescape(v.strip())
            cleaned = re.sub(
                r"<\s*script[^>]*>.*?<\s*/\s*script\s*>",
                "",
                cleaned,
                flags=re.IGNORECASE | re.DOTALL,
            )
            cleaned = re.sub(r"<[^>]+>", "", cleaned)
            cleaned = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]", "", cleaned)
            return cleaned
        return v


class SkillCheckRowInput(BaseValidationSchema):
    """One row of the skill-check CSV export."""

    customer_number: str = Field(..., min_length=1, max_length=64)
    name: str | None = Field(None, max_length=255)
    age: int | None = Field(None, ge=0, le=120)
    nail_technician_experience: str | None = Field(None, max_length=255)
    occupation: str | None = Field(None, max_length=255)
    prefecture: str | None = Field(None, max_length=64)
    application_date: date | None = None

    total_score: float | None = Field(None, ge=0)
    rank: str | None = None
    counseling_comment: str | None = Field(None, max_length=2000)
    counseling_score: float | None = Field(None, ge=0)
    filing_score: float | None = Field(None, ge=0)
    care_score: float | None = Field(None, ge=0)
    color_score: float | None = Field(None, ge=0)
    art_score: float | None = Field(None, ge=0)
    time_score: float | None = Field(None, ge=0)
    total_time: str | None = Field(None, max_length=64)

    @field_validator(
        "name",
        "nail_technician_experience",
        "occupation",
        "prefecture",
        "counseling_comment",
        "total_time",
        mode="after",
    )
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("age", mode="before")
    def parse_age(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        number = numeric_or_none(v)
        if number is None:
            raise ValueError("Age must be a number")
        return int(number)

    @field_validator(
        "total_score",
        "counseling_score",
        "filing_score",
        "care_score",
        "color_score",
        "art_score",
        "time_score",
        mode="before",
    )
    def parse_score(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        number = numeric_or_none(v)
        if number is None:
            raise ValueError("Score must be a number")
        return number

    @field_validator("application_date", mode="before")
    def parse_application_date(cls, v):
        if not isinstance(v, str):
            return v
        text = v.strip().split(" ")[0]
        if not text:
            return None
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        raise ValueError(f"Unrecognised date {text!r}")

    @field_validator("rank", mode="after")
    def normalise_rank(cls, v):
        """Keep recognised labels only; legacy spellings like "A.A." become "AA"."""
        rank = Rank.parse(v)
        return rank.value if rank is not None else None


class ValidationErrorDetail(BaseModel):
    """Schema for validation error details."""

    field: str
    message: str
    value: Any = None


class ValidationResponse(BaseModel):
    """Schema for validation responses."""

    success: bool
    errors: list[ValidationErrorDetail] = []
    data: dict[str, Any] | None = None


def validate_input(schema_class: type[BaseModel], data: dict[str, Any]) -> ValidationResponse:
    """
    Validate data against a schema and return structured results.

    Example:
        >>> result = validate_input(SkillCheckRowInput, {"customer_number": "C-001"})
        >>> result.success
        True
    """
    try:
        validated = schema_class(**data)
        return ValidationResponse(success=True, data=validated.model_dump())
    except Exception as e:
        errors = []
        if hasattr(e, "errors"):  # Pydantic validation errors
            for error in e.errors():
                errors.append(
                    ValidationErrorDetail(
                        field=".".join(str(x) for x in error["loc"]) or "general",
                        message=error["msg"],
                        value=error.get("input"),
                    )
                )
        else:
            errors.append(ValidationErrorDetail(field="general", message=str(e)))

        return ValidationResponse(success=False, errors=errors)
