from __future__ import annotations

from pathlib import Path

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from ..application.csv_import import ImportSummary, import_skill_checks_csv
from ..infrastructure.db import create_session_factory
from ..infrastructure.models import Base
from ..infrastructure.uow import UnitOfWork


def initialise_database(engine: Engine) -> bool:
    """
    Ensure all ORM tables exist.

    Returns:
        True if every table already existed before this call, False if at least one table
        needed to be created.
    """

    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())
    expected_tables = [table.name for table in Base.metadata.sorted_tables]
    already_exists = all(table in existing_tables for table in expected_tables)
    Base.metadata.create_all(engine)
    return already_exists


def seed_database_from_csv(
    engine: Engine, csv_path: Path, strict: bool = False
) -> ImportSummary:
    """Create missing tables, then import one CSV export in a single transaction."""
    initialise_database(engine)
    uow = UnitOfWork(create_session_factory(engine))
    with uow.begin() as session:
        return import_skill_checks_csv(session, csv_path, strict=strict)
