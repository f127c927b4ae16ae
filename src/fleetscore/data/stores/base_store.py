# fleetscore/data/stores/base_store.py
from __future__ import annotations

import logging
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Type,
    TypeVar,
)

from sqlalchemy import func
from sqlalchemy.orm import sessionmaker

from .db_scope import retry, session_scope

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

TDTO = TypeVar("TDTO")


class BaseSQLAlchemyStore(Generic[TDTO]):
    """
    Generic SQLAlchemy store with standard CRUD-ish helpers.

    IMPORTANT:
    - This base uses SHORT-LIVED sessions per call, each committed on return.
      A store method that returns has durably written its changes.
    - Pass a sessionmaker only.
    """

    orm_model: Type[Any] = None
    dto_model: Type[Any] = None
    default_order_by: Optional[Any] = None

    def __init__(self, sm: sessionmaker, memory: Optional[Any] = None):
        assert self.orm_model is not None, "Subclasses must set orm_model"
        self.session: sessionmaker = sm
        self.memory = memory
        self.name = self.__class__.__name__

    def _run(self, fn: Callable[[Session], Any], tries: int = 2):
        def op():
            with session_scope(self.session) as s:
                return fn(s)

        return retry(op, tries=tries)

    def _to_dto(self, row: Any) -> TDTO:
        if self.dto_model is None:
            return row
        return self.dto_model.model_validate(row)

    # -------- Standard APIs --------

    def get_by_id(self, obj_id: Any) -> Optional[TDTO]:
        def op(s):
            row = s.get(self.orm_model, obj_id)
            return self._to_dto(row) if row is not None else None

        return self._run(op)

    def count(self, **filters) -> int:
        def op(s):
            q = s.query(func.count("*")).select_from(self.orm_model)
            if filters:
                q = q.filter_by(**filters)
            return int(q.scalar() or 0)

        return self._run(op)

    def exists(self, **filters) -> bool:
        def op(s):
            q = s.query(self.orm_model)
            if filters:
                q = q.filter_by(**filters)
            return s.query(q.exists()).scalar() or False

        return self._run(op)

    def list(
        self,
        *,
        limit: Optional[int] = None,
        order_by: Optional[Any] = None,
        desc: bool = False,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[TDTO]:
        def op(s):
            q = s.query(self.orm_model)
            if filters:
                q = q.filter_by(**filters)

            col = self._resolve_column(order_by or self.default_order_by)
            if col is not None:
                q = q.order_by(col.desc() if desc else col.asc())

            if limit:
                q = q.limit(limit)
            return [self._to_dto(row) for row in q.all()]

        return self._run(op)

    def get_one(
        self,
        *,
        order_by: Optional[Any] = None,
        desc: bool = True,
        filters: Optional[Dict[str, Any]] = None,
    ) -> Optional[TDTO]:
        def op(s):
            q = s.query(self.orm_model)
            if filters:
                q = q.filter_by(**filters)

            col = self._resolve_column(order_by or self.default_order_by)
            if col is not None:
                q = q.order_by(col.desc() if desc else col.asc())

            row = q.first()
            return self._to_dto(row) if row is not None else None

        return self._run(op)

    def update(self, obj_id: Any, updates: Dict[str, Any]) -> Optional[TDTO]:
        """
        Update an object by ID with a dictionary of changes.
        Returns the updated DTO or None if not found.
        """

        def op(s: Session):
            obj = s.get(self.orm_model, obj_id)
            if not obj:
                return None

            for key, value in updates.items():
                if hasattr(obj, key):
                    setattr(obj, key, value)
                else:
                    logger.warning(
                        f"Store {self.name}: Attribute '{key}' not found on {self.orm_model.__name__}"
                    )

            s.flush()
            return self._to_dto(obj)

        return self._run(op)

    def _resolve_column(self, col: Any):
        """Allow passing either a column or a string column name."""
        if isinstance(col, str):
            resolved = getattr(self.orm_model, col, None)
            if resolved is None:
                raise AttributeError(f"{self.orm_model.__name__} has no column '{col}'")
            return resolved
        return col
