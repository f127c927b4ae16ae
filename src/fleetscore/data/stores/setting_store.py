# fleetscore/data/stores/setting_store.py

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import sessionmaker

from fleetscore.data.orm.setting import SettingORM
from fleetscore.data.schemas.setting import SettingDTO
from fleetscore.data.stores.base_store import BaseSQLAlchemyStore
from fleetscore.data.stores.lock_store import SETTINGS, assert_unlocked


class SettingStore(BaseSQLAlchemyStore[SettingDTO]):
    orm_model = SettingORM
    dto_model = SettingDTO
    default_order_by = "key"

    def __init__(self, sm: sessionmaker, memory: Optional[Any] = None):
        super().__init__(sm, memory)
        self.name = "settings"

    def load_settings(self) -> List[SettingDTO]:
        return self.list()

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {row.key: row.value for row in self.load_settings()}

    def set(self, key: str, value: Any, setting_type: str = "Text") -> SettingDTO:
        def op(s):
            assert_unlocked(s, SETTINGS)
            obj = s.get(SettingORM, key)
            if obj is None:
                obj = SettingORM(key=key)
                s.add(obj)
            obj.setting_type = setting_type
            obj.value = None if value is None else str(value)
            s.flush()
            return self._to_dto(obj)

        return self._run(op)

    def replace_all(self, settings: Iterable[SettingDTO]) -> int:
        settings = list(settings)

        def op(s):
            assert_unlocked(s, SETTINGS)
            s.query(SettingORM).delete(synchronize_session=False)
            s.add_all([SettingORM(**dto.model_dump()) for dto in settings])
            s.flush()
            return len(settings)

        return self._run(op)
