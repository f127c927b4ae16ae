# fleetscore/data/stores/lock_store.py
from __future__ import annotations

import logging
import time
from typing import Any, Iterable, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from fleetscore.data.orm.config_lock import ConfigLockORM
from fleetscore.data.schemas.config_lock import ConfigLockDTO
from fleetscore.data.stores.base_store import BaseSQLAlchemyStore
from fleetscore.errors import ConfigurationLockedError

logger = logging.getLogger(__name__)

SIGNALS = "signals"
SETTINGS = "settings"
PROTECTED_RESOURCES = (SIGNALS, SETTINGS)

LOCK_NOTE = (
    "A report is currently being executed, "
    "you can not edit this until it is finished."
)


def assert_unlocked(s: Session, resource: str) -> None:
    """Raise inside an open session if `resource` is currently locked."""
    if s.get(ConfigLockORM, resource) is not None:
        raise ConfigurationLockedError(resource)


class ConfigLockStore(BaseSQLAlchemyStore[ConfigLockDTO]):
    """
    Protects configuration tables for the lifetime of an open run.
    A locked resource is a row in `config_locks`; unlocking deletes it.
    """

    orm_model = ConfigLockORM
    dto_model = ConfigLockDTO
    default_order_by = "resource"

    def __init__(self, sm: sessionmaker, memory: Optional[Any] = None):
        super().__init__(sm, memory)
        self.name = "locks"

    def lock(
        self,
        resources: Iterable[str] = PROTECTED_RESOURCES,
        *,
        note: str = LOCK_NOTE,
        locked_at: Optional[float] = None,
    ) -> List[ConfigLockDTO]:
        ts = time.time() if locked_at is None else locked_at

        def op(s):
            locks = []
            for resource in resources:
                row = s.get(ConfigLockORM, resource)
                if row is None:
                    row = ConfigLockORM(resource=resource, locked_at=ts, note=note)
                    s.add(row)
                locks.append(row)
            s.flush()
            return [self._to_dto(r) for r in locks]

        locks = self._run(op)
        logger.info("Locked configuration: %s", ", ".join(l.resource for l in locks))
        return locks

    def unlock(self, resources: Iterable[str] = PROTECTED_RESOURCES) -> int:
        resources = list(resources)

        def op(s):
            return int(
                s.query(ConfigLockORM)
                .filter(ConfigLockORM.resource.in_(resources))
                .delete(synchronize_session=False)
            )

        n = self._run(op)
        logger.info("Unlocked configuration: %s", ", ".join(resources))
        return n

    def is_locked(self, resource: str) -> bool:
        return self.exists(resource=resource)

    def locked_resources(self) -> List[str]:
        return [lock.resource for lock in self.list()]
