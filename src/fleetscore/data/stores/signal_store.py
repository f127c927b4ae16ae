# fleetscore/data/stores/signal_store.py

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import sessionmaker

from fleetscore.data.orm.signal_definition import SignalDefinitionORM
from fleetscore.data.schemas.signal_definition import SignalDefinitionDTO
from fleetscore.data.stores.base_store import BaseSQLAlchemyStore
from fleetscore.data.stores.lock_store import SIGNALS, assert_unlocked
from fleetscore.errors import CatalogError


class SignalDefinitionStore(BaseSQLAlchemyStore[SignalDefinitionDTO]):
    orm_model = SignalDefinitionORM
    dto_model = SignalDefinitionDTO
    default_order_by = "position"

    def __init__(self, sm: sessionmaker, memory: Optional[Any] = None):
        super().__init__(sm, memory)
        self.name = "signals"

    def load_definitions(self) -> List[SignalDefinitionDTO]:
        """
        Signal definitions in catalog order.

        Rows with an empty name are skipped before any other field is read.

        Raises:
            CatalogError: a named row holds an unknown type, direction or value.
        """

        def op(s):
            rows = s.query(SignalDefinitionORM).order_by(SignalDefinitionORM.position.asc()).all()
            definitions = []
            for row in rows:
                if not row.name or not row.name.strip():
                    continue
                try:
                    definitions.append(self._to_dto(row))
                except ValidationError as e:
                    errors = "; ".join(err["msg"] for err in e.errors())
                    raise CatalogError(f"Signal '{row.name}': {errors}") from e
            return definitions

        return self._run(op)

    def replace_all(self, definitions: Iterable[SignalDefinitionDTO]) -> int:
        definitions = list(definitions)

        def op(s):
            assert_unlocked(s, SIGNALS)
            s.query(SignalDefinitionORM).delete(synchronize_session=False)
            for position, dto in enumerate(definitions):
                data = dto.model_dump(exclude={"id", "position"}, mode="json")
                s.add(SignalDefinitionORM(position=position, **data))
            s.flush()
            return len(definitions)

        return self._run(op)
