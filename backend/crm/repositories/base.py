"""Repository base.

- Repositories are the only layer permitted to query or write the database.
- Reads go through `_execute`, which accepts SELECT statements only.
- Writes go through `_save`, which commits one entity and converts unique
  constraint violations into `Conflict`.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy.engine import Result
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Executable
from sqlalchemy.sql.dml import Delete, Insert, Update
from sqlalchemy.sql.selectable import Select

from crm.core.errors import Conflict


logger = logging.getLogger(__name__)

T = TypeVar("T")


class RepositoryMisuse(RuntimeError):
    """Raised when a repository read path is handed a DML statement."""


class BaseRepository(Generic[T]):
    """Base repository bound to one Session and one mapped class."""

    model: type[T]

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def _assert_select_only(self, stmt: Executable) -> None:
        if isinstance(stmt, (Insert, Update, Delete)):
            raise RepositoryMisuse("Read path accepts SELECT only; DML goes through _save.")
        if not isinstance(stmt, Select):
            raise RepositoryMisuse(f"Read path accepts SELECT only (got {type(stmt)!r}).")

    def _execute(self, stmt: Executable, *, params: Optional[dict[str, Any]] = None) -> Result[Any]:
        self._assert_select_only(stmt)
        return self._session.execute(stmt, params or {})

    def _get(self, entity_id: str) -> Optional[T]:
        return self._session.get(self.model, entity_id)

    def _save(self, entity: T) -> T:
        self._session.add(entity)
        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            logger.warning("Unique constraint violated on %s save", self.model.__name__)
            raise Conflict(f"{self.model.__name__} violates a uniqueness constraint.") from e
        self._session.refresh(entity)
        return entity
