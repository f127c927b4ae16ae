# fleetscore/data/stores/run_store.py

from __future__ import annotations

import logging
from typing import Any, List, Optional

from sqlalchemy.orm import sessionmaker

from fleetscore.data.orm.run import RunORM
from fleetscore.data.schemas.run import RunDTO
from fleetscore.data.stores.base_store import BaseSQLAlchemyStore
from fleetscore.errors import RunStateError

logger = logging.getLogger(__name__)


class RunStore(BaseSQLAlchemyStore[RunDTO]):
    """
    Append-only run history. Only the most recent run can be open
    (end_time is null); existing rows only ever get their end_time
    and report location filled in.
    """

    orm_model = RunORM
    dto_model = RunDTO
    default_order_by = "id"

    def __init__(self, sm: sessionmaker, memory: Optional[Any] = None):
        super().__init__(sm, memory)
        self.name = "runs"

    @staticmethod
    def _latest(s) -> Optional[RunORM]:
        return s.query(RunORM).order_by(RunORM.id.desc()).first()

    def latest(self) -> Optional[RunDTO]:
        return self.get_one(order_by="id", desc=True)

    def has_open_run(self) -> bool:
        run = self.latest()
        return run is not None and run.end_time is None

    def get_open_run(self) -> Optional[RunDTO]:
        run = self.latest()
        if run is None or run.end_time is not None:
            return None
        return run

    def last_run_start(self) -> Optional[float]:
        run = self.latest()
        return run.start_time if run else None

    def open_run(self, start_time: float) -> RunDTO:
        def op(s):
            latest = self._latest(s)
            if latest is not None and latest.end_time is None:
                raise RunStateError(f"Run {latest.id} is still open")
            obj = RunORM(start_time=start_time)
            s.add(obj)
            s.flush()
            return self._to_dto(obj)

        return self._run(op)

    def close_run(self, run_id: int, end_time: float) -> RunDTO:
        def op(s):
            obj = s.get(RunORM, run_id)
            if obj is None:
                raise RunStateError(f"Run {run_id} does not exist")
            if obj.end_time is not None:
                logger.warning("Run %s already closed at %s", run_id, obj.end_time)
                return self._to_dto(obj)
            obj.end_time = end_time
            s.flush()
            return self._to_dto(obj)

        return self._run(op)

    def set_report_location(self, run_id: int, location: str) -> Optional[RunDTO]:
        return self.update(run_id, {"report_location": location})

    def report_target(self, run_id: int) -> Optional[str]:
        run = self.get_by_id(run_id)
        return run.report_location if run else None

    def history(self, limit: Optional[int] = None) -> List[RunDTO]:
        return self.list(limit=limit, order_by="id", desc=True)
