"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("customer_number", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("experience", sa.String(length=255), nullable=True),
        sa.Column("occupation", sa.String(length=255), nullable=True),
        sa.Column("prefecture", sa.String(length=64), nullable=True),
        sa.Column("application_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("customer_number"),
    )
    op.create_table(
        "skill_checks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("imported_at", sa.DateTime(), nullable=False),
        sa.Column("total_score", sa.Float(), nullable=True),
        sa.Column("care_score", sa.Float(), nullable=True),
        sa.Column("color_score", sa.Float(), nullable=True),
        sa.Column("art_score", sa.Float(), nullable=True),
        sa.Column("time_score", sa.Float(), nullable=True),
        sa.Column("rank", sa.String(length=8), nullable=True),
        sa.Column("total_time", sa.String(length=64), nullable=True),
        sa.Column("counseling_comment", sa.Text(), nullable=True),
        sa.Column("counseling_score", sa.Float(), nullable=True),
        sa.Column("filing_score", sa.Float(), nullable=True),
        sa.Column("scores", sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_skill_checks_customer_id", "skill_checks", ["customer_id"])
    op.create_index("ix_skill_checks_imported_at", "skill_checks", ["imported_at"])


def downgrade() -> None:
    op.drop_index("ix_skill_checks_imported_at", table_name="skill_checks")
    op.drop_index("ix_skill_checks_customer_id", table_name="skill_checks")
    op.drop_table("skill_checks")
    op.drop_table("customers")
