# fleetscore/data/stores/account_store.py

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from sqlalchemy.orm import sessionmaker

from fleetscore.data.orm.account import AccountORM
from fleetscore.data.schemas.account import AccountDTO
from fleetscore.data.stores.base_store import BaseSQLAlchemyStore

logger = logging.getLogger(__name__)


class AccountStore(BaseSQLAlchemyStore[AccountDTO]):
    """
    The fleet snapshot of the current run and its per-account processed markers.
    """

    orm_model = AccountORM
    dto_model = AccountDTO
    default_order_by = "id"

    def __init__(self, sm: sessionmaker, memory: Optional[Any] = None):
        super().__init__(sm, memory)
        self.name = "accounts"

    def snapshot_accounts(self, customer_ids: Iterable[str]) -> int:
        """
        Register accounts as unprocessed, in the given order.
        Duplicate customer ids keep their first position and are dropped.
        """
        seen = set()
        unique = []
        for cid in customer_ids:
            cid = str(cid)
            if cid in seen:
                logger.warning("Duplicate customer id %s in fleet snapshot, skipping", cid)
                continue
            seen.add(cid)
            unique.append(cid)

        def op(s):
            s.add_all([AccountORM(customer_id=cid) for cid in unique])
            s.flush()
            return len(unique)

        return self._run(op)

    def clear_accounts(self) -> int:
        def op(s):
            return int(s.query(AccountORM).delete(synchronize_session=False))

        return self._run(op)

    def list_unprocessed(self, limit: int) -> List[str]:
        if limit is None or limit <= 0:
            return []

        def op(s):
            rows = (
                s.query(AccountORM.customer_id)
                .filter(AccountORM.processed_at.is_(None))
                .order_by(AccountORM.id.asc())
                .limit(limit)
                .all()
            )
            return [r[0] for r in rows]

        return self._run(op)

    def mark_processed(self, customer_id: str, timestamp: float) -> bool:
        def op(s):
            n = (
                s.query(AccountORM)
                .filter(AccountORM.customer_id == str(customer_id))
                .update({AccountORM.processed_at: timestamp}, synchronize_session=False)
            )
            return n > 0

        marked = self._run(op)
        if not marked:
            logger.warning("Customer id %s is not part of the current snapshot", customer_id)
        return marked

    def count_unprocessed(self) -> int:
        return self.count(processed_at=None)

    def count_processed(self) -> int:
        return self.count() - self.count_unprocessed()

    def all_processed(self) -> bool:
        return self.count_unprocessed() == 0
