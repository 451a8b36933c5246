# server/inkwell/store.py

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, func, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from inkwell.errors import Conflict, UpstreamError

logger = logging.getLogger(__name__)


class ContentStore:
    """
    Document-style access to the content tables.

    Built once by the application factory and shared by the services. Every
    mutating call commits on success and rolls back on failure, so a failed
    call never leaves partial state in the session.
    """

    def __init__(self, db):
        self.db = db

    @property
    def session(self):
        return self.db.session

    # Filters

    @staticmethod
    def iexact(column, value: str):
        return func.lower(column) == value.lower()

    @staticmethod
    def contains(column, value: str):
        escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        return column.ilike(f"%{escaped}%", escape="\\")

    @staticmethod
    def _select(model, criteria: Iterable, filters: Dict[str, Any]):
        stmt = select(model)
        for criterion in criteria:
            stmt = stmt.where(criterion)
        if filters:
            stmt = stmt.filter_by(**filters)
        return stmt

    @staticmethod
    def _increments(model, increment: Dict[str, int], floor_zero: bool):
        assignments = {}
        guards = []
        for field, delta in increment.items():
            column = getattr(model, field)
            assignments[field] = column + delta
            if floor_zero and delta < 0:
                guards.append(column + delta >= 0)
        return assignments, guards

    # Reads

    def find_by_id(self, model, record_id: str):
        return self.session.get(model, record_id)

    def find_one(self, model, *criteria, **filters):
        stmt = self._select(model, criteria, filters).limit(1)
        return self.session.execute(stmt).scalars().first()

    def find(
        self,
        model,
        *criteria,
        order_by: Optional[List] = None,
        skip: int = 0,
        limit: Optional[int] = None,
        **filters,
    ) -> list:
        stmt = self._select(model, criteria, filters)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars())

    def count(self, model, *criteria, **filters) -> int:
        stmt = self._select(model, criteria, filters)
        count_stmt = select(func.count()).select_from(stmt.subquery())
        return self.session.execute(count_stmt).scalar_one()

    def paginate(self, model, *criteria, order_by: Optional[List] = None, page: int = 1, limit: int = 10, **filters):
        stmt = self._select(model, criteria, filters)
        if order_by:
            stmt = stmt.order_by(*order_by)
        return self.db.paginate(stmt, page=page, per_page=limit, max_per_page=limit, error_out=False)

    # Writes

    def create(self, model, **fields):
        instance = model(**fields)
        self.session.add(instance)
        self.commit(f"create {model.__tablename__}")
        return instance

    def update_by_id(
        self,
        model,
        record_id: str,
        values: Optional[Dict[str, Any]] = None,
        increment: Optional[Dict[str, int]] = None,
        floor_zero: bool = False,
    ):
        """
        Apply plain assignments and atomic increments in one UPDATE.

        With floor_zero the row is only touched when no incremented column
        would drop below zero. Returns the fresh record, or None when the id
        does not resolve.
        """
        assignments, guards = self._increments(model, increment or {}, floor_zero)
        assignments.update(values or {})

        if assignments:
            stmt = update(model).where(model.id == record_id, *guards).values(**assignments)
            self.execute(stmt, f"update {model.__tablename__}")

        return self.find_by_id(model, record_id)

    def update_where(self, model, *criteria, increment: Dict[str, int], floor_zero: bool = False) -> int:
        assignments, guards = self._increments(model, increment, floor_zero)
        stmt = update(model).where(*criteria, *guards).values(**assignments)
        return self.execute(stmt, f"update {model.__tablename__}")

    def delete_by_id(self, model, record_id: str) -> Optional[dict]:
        instance = self.find_by_id(model, record_id)
        if instance is None:
            return None

        snapshot = instance.to_dict()
        self.session.delete(instance)
        self.commit(f"delete {model.__tablename__}")
        return snapshot

    def delete_where(self, model, *criteria) -> int:
        stmt = delete(model).where(*criteria)
        return self.execute(stmt, f"delete {model.__tablename__}")

    def execute(self, stmt, action: str = "write") -> int:
        """Run a bulk statement and commit; returns the matched row count."""
        stmt = stmt.execution_options(synchronize_session=False)
        try:
            rowcount = self.session.execute(stmt).rowcount
        except SQLAlchemyError as e:
            self._fail(e, action)
        self.commit(action)
        return rowcount

    def commit(self, action: str = "write") -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail(e, action)

    def _fail(self, error: SQLAlchemyError, action: str):
        self.session.rollback()

        if isinstance(error, IntegrityError):
            logger.info(f"Constraint violation on {action}: {error.orig}")
            raise Conflict("Record conflicts with an existing one", details={"action": action}) from error

        logger.error(f"Database error on {action}: {error}")
        raise UpstreamError("Database operation failed", details={"action": action}) from error

    def ping(self) -> bool:
        self.session.execute(text("SELECT 1"))
        return True
