# fleetscore/data/schemas/signal_definition.py

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class SignalType(str, Enum):
    NUMBER = "Number"
    STRING = "String"


class Direction(str, Enum):
    HIGH = "High"
    LOW = "Low"
    NONE = "None"


class SignalDefinitionDTO(BaseModel):
    """
    One row of the signal catalog.

    `min_value`/`max_value` define the normalization range and only matter for
    Number signals with a High or Low direction.
    """

    model_config = ConfigDict(extra="forbid", from_attributes=True, frozen=True)

    id: Optional[int] = None
    position: int = 0

    name: str
    display_name: Optional[str] = None
    include_in_report: bool = True

    signal_type: SignalType = SignalType.NUMBER
    direction: Direction = Direction.NONE
    display_format: Optional[str] = None

    weight: float = 0.0
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    @field_validator("direction", mode="before")
    @classmethod
    def _blank_direction(cls, v):
        if v is None or (isinstance(v, str) and v.strip() == ""):
            return Direction.NONE
        return v

    @property
    def label(self) -> str:
        return self.display_name or self.name

    @property
    def is_number(self) -> bool:
        return self.signal_type == SignalType.NUMBER

    @property
    def is_scored(self) -> bool:
        """Included Number signal with a direction: contributes to the score."""
        return (
            self.include_in_report
            and self.is_number
            and self.direction in (Direction.HIGH, Direction.LOW)
        )
