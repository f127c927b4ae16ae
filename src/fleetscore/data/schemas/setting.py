# fleetscore/data/schemas/setting.py

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class SettingDTO(BaseModel):
    model_config = ConfigDict(extra="forbid", from_attributes=True)

    key: str
    setting_type: str = "Text"
    value: Optional[str] = None
