# fleetscore/data/schemas/config_lock.py

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class ConfigLockDTO(BaseModel):
    model_config = ConfigDict(extra="forbid", from_attributes=True)

    resource: str
    locked_at: float
    note: Optional[str] = None
