# fleetscore/data/schemas/run.py

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class RunDTO(BaseModel):
    model_config = ConfigDict(extra="forbid", from_attributes=True)

    id: Optional[int] = None

    start_time: float
    end_time: Optional[float] = None

    report_location: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None
