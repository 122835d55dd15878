from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, aliased

from .exceptions import CustomerNotFoundError
from .logging import log_database_operation as log_op
from .models import CustomerORM, SkillCheckORM
from .repositories_base import BaseRepository

# CSV column -> customer attribute
_PROFILE_FIELDS = {
    "name": "name",
    "age": "age",
    "nail_technician_experience": "experience",
    "occupation": "occupation",
    "prefecture": "prefecture",
    "application_date": "application_date",
}


class CustomerRepo(BaseRepository[CustomerORM]):
    model = CustomerORM

    def __init__(self, session: Session):
        super().__init__(session)

    @log_op("customer.get_required")
    def get_required(self, id_: int) -> CustomerORM:
        obj = self.get(id_)
        if obj is None:
            raise CustomerNotFoundError(id_)
        return obj

    @log_op("customer.get_by_number")
    def get_by_number(self, customer_number: str) -> CustomerORM | None:
        return (
            self.s.query(CustomerORM)
            .filter(CustomerORM.customer_number == customer_number)
            .one_or_none()
        )

    @log_op("customer.upsert_by_number")
    def upsert_by_number(
        self, customer_number: str, profile: Mapping[str, Any] | None = None
    ) -> tuple[CustomerORM, bool]:
        """
        Create or update a customer keyed by customer number.

        Profile values that are None never overwrite stored data. New
        customers start in the "New" status.

        Returns:
            (customer, created)
        """
        profile = profile or {}
        fields = {
            attr: profile[column]
            for column, attr in _PROFILE_FIELDS.items()
            if profile.get(column) is not None
        }
        existing = self.get_by_number(customer_number)
        if existing is not None:
            return self.update(existing, **fields), False

        fields.setdefault("name", "")
        return self.create(customer_number=customer_number, status="New", **fields), True

    @log_op("customer.list_with_latest")
    def list_with_latest(self) -> list[tuple[CustomerORM, SkillCheckORM | None]]:
        """Every customer paired with their newest skill check (or None)."""
        inner = aliased(SkillCheckORM)
        latest_id = (
            select(inner.id)
            .where(inner.customer_id == CustomerORM.id)
            .order_by(inner.imported_at.desc(), inner.id.desc())
            .limit(1)
            .correlate(CustomerORM)
            .scalar_subquery()
        )
        rows = (
            self.s.query(CustomerORM, SkillCheckORM)
            .outerjoin(SkillCheckORM, SkillCheckORM.id == latest_id)
            .order_by(CustomerORM.customer_number)
            .all()
        )
        return [(customer, check) for customer, check in rows]

    @log_op("customer.set_status")
    def set_status(self, customer: CustomerORM, status: str) -> CustomerORM:
        return self.update(customer, status=status)
