from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from ..domain.models import Customer, SkillCheck

# Skill-check columns copied into the flattened assessment record.
RECORD_FIELDS = (
    "total_score",
    "care_score",
    "color_score",
    "art_score",
    "time_score",
    "rank",
    "total_time",
    "counseling_score",
    "filing_score",
)


class Base(DeclarativeBase):
    pass


class CustomerORM(Base):
    __tablename__ = "customers"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    customer_number: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    experience: Mapped[str | None] = mapped_column(String(255), nullable=True)
    occupation: Mapped[str | None] = mapped_column(String(255), nullable=True)
    prefecture: Mapped[str | None] = mapped_column(String(64), nullable=True)
    application_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="New")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=datetime.utcnow, nullable=False
    )

    skill_checks: Mapped[list[SkillCheckORM]] = relationship(
        back_populates="customer", cascade="all, delete-orphan"
    )

    def to_domain(self) -> Customer:
        return Customer(
            id=self.id,
            customer_number=self.customer_number,
            name=self.name,
            age=self.age,
            experience=self.experience,
            occupation=self.occupation,
            prefecture=self.prefecture,
            application_date=self.application_date,
            status=self.status,
        )


class SkillCheckORM(Base):
    __tablename__ = "skill_checks"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    imported_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=datetime.utcnow, nullable=False, index=True
    )

    # Totals as supplied by the scoring sheet; NULL means "derive from items".
    total_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    care_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    color_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    art_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    time_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    rank: Mapped[str | None] = mapped_column(String(8), nullable=True)
    total_time: Mapped[str | None] = mapped_column(String(64), nullable=True)

    counseling_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    counseling_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    filing_score: Mapped[float | None] = mapped_column(Float, nullable=True)

    # item key -> raw value, e.g. {"color_14_1": 10, "time_33_1": "22分30秒"}
    scores: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    customer: Mapped[CustomerORM] = relationship(back_populates="skill_checks")

    def to_record(self) -> dict[str, Any]:
        """Flatten into the assessment-record mapping the scoring functions read."""
        record: dict[str, Any] = dict(self.scores or {})
        for name in RECORD_FIELDS:
            value = getattr(self, name)
            if value is not None:
                record[name] = value
        return record

    def to_domain(self) -> SkillCheck:
        return SkillCheck(
            id=self.id,
            customer_id=self.customer_id,
            imported_at=self.imported_at,
            record=self.to_record(),
            counseling_comment=self.counseling_comment,
        )
