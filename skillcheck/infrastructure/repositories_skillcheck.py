from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from ..domain.items import item_keys
from .exceptions import ValidationError
from .logging import log_database_operation as log_op
from .models import RECORD_FIELDS, SkillCheckORM
from .repositories_base import BaseRepository


class SkillCheckRepo(BaseRepository[SkillCheckORM]):
    """Append-only access to a customer's skill-check history."""

    model = SkillCheckORM

    def __init__(self, session: Session):
        super().__init__(session)

    @log_op("skill_check.list_for_customer")
    def list_for_customer(self, customer_id: int, limit: int | None = None) -> list[SkillCheckORM]:
        """Newest first; ties on import time fall back to insertion order."""
        if customer_id <= 0:
            raise ValidationError("customer_id", "Customer ID must be positive", customer_id)
        return self.list(
            SkillCheckORM.customer_id == customer_id,
            order_by=[SkillCheckORM.imported_at.desc(), SkillCheckORM.id.desc()],
            limit=limit,
        )

    @log_op("skill_check.latest_two")
    def latest_two(self, customer_id: int) -> tuple[SkillCheckORM | None, SkillCheckORM | None]:
        """(current, previous) for trend comparison."""
        rows = self.list_for_customer(customer_id, limit=2)
        current = rows[0] if rows else None
        previous = rows[1] if len(rows) > 1 else None
        return current, previous

    @log_op("skill_check.add")
    def add(
        self,
        customer_id: int,
        record: Mapping[str, Any],
        counseling_comment: str | None = None,
        imported_at: datetime | None = None,
    ) -> SkillCheckORM:
        """
        Append a skill check built from a flat record.

        Canonical item keys land in the ``scores`` JSON column, known total
        fields in their own columns; anything else is dropped.
        """
        known = item_keys()
        scores = {k: v for k, v in record.items() if k in known and v is not None}
        columns = {k: record[k] for k in RECORD_FIELDS if record.get(k) is not None}
        fields: dict[str, Any] = {
            "customer_id": customer_id,
            "scores": scores,
            "counseling_comment": counseling_comment,
            **columns,
        }
        if imported_at is not None:
            fields["imported_at"] = imported_at
        return self.create(**fields)
