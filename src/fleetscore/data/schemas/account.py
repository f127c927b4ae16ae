# fleetscore/data/schemas/account.py

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class AccountDTO(BaseModel):
    model_config = ConfigDict(extra="forbid", from_attributes=True)

    id: Optional[int] = None

    customer_id: str
    processed_at: Optional[float] = None
