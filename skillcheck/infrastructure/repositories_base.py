from __future__ import annotations

import builtins
from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .exceptions import handle_database_error
from .logging import get_logger

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Small generic repository with common CRUD and query helpers.

    Subclasses set ``model`` and add logging decorators and
    entity-specific queries.
    """

    model: type[T]  # must be set by subclasses

    def __init__(self, session: Session):
        if not hasattr(self, "model") or self.model is None:
            raise ValueError(f"{self.__class__.__name__}.model must be set to an ORM class.")
        self.s = session
        self.logger = get_logger(self.__class__.__name__)

    def get(self, id_: Any) -> T | None:
        return self.s.get(self.model, id_)

    def list(
        self,
        *filters: Any,
        order_by: Iterable[Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> builtins.list[T]:
        q = self.s.query(self.model)
        for f in filters:
            q = q.filter(f)
        if order_by:
            for ob in order_by:
                q = q.order_by(ob)
        if offset:
            q = q.offset(offset)
        if limit:
            q = q.limit(limit)
        return list(q.all())

    def count(self, *filters: Any) -> int:
        q = self.s.query(self.model)
        for f in filters:
            q = q.filter(f)
        return int(q.count())

    def create(self, **fields: Any) -> T:
        obj = self.model(**fields)
        self.s.add(obj)
        self._flush(f"create_{self.model.__name__}")
        return obj

    def update(self, obj: T, **fields: Any) -> T:
        for k, v in fields.items():
            setattr(obj, k, v)
        self._flush(f"update_{self.model.__name__}")
        return obj

    def _flush(self, operation: str) -> None:
        """Flush to get PKs without committing; map driver errors to app errors."""
        try:
            self.s.flush()
        except SQLAlchemyError as e:
            self.logger.error(f"Database error in {operation}: {str(e)}", exc_info=True)
            raise handle_database_error(e, operation) from e
