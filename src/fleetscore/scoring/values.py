# fleetscore/scoring/values.py
"""
Raw signal values arrive as plain numbers, percent strings ("5.2%") or text.
They are resolved once, at ingestion, into a RawValue.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from fleetscore.errors import ScoringError


class ValueKind(str, Enum):
    NUMERIC = "numeric"
    PERCENT = "percent"
    TEXT = "text"


@dataclass(frozen=True)
class RawValue:
    kind: ValueKind
    number: Optional[float]
    text: str

    def as_number(self) -> float:
        if self.kind is ValueKind.TEXT or self.number is None:
            raise ScoringError(f"Value {self.text!r} is not numeric")
        return self.number

    @property
    def display(self) -> Union[float, str]:
        return self.text if self.kind is ValueKind.TEXT else self.number


def _to_float(text: str) -> Optional[float]:
    try:
        value = float(text.replace(",", "").strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_raw_value(value: Any) -> RawValue:
    if isinstance(value, RawValue):
        return value

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
        if math.isfinite(number):
            return RawValue(ValueKind.NUMERIC, number, str(value))
        return RawValue(ValueKind.TEXT, None, str(value))

    text = "" if value is None else str(value).strip()

    if "%" in text:
        number = _to_float(text.replace("%", ""))
        if number is not None:
            return RawValue(ValueKind.PERCENT, number / 100.0, text)
        return RawValue(ValueKind.TEXT, None, text)

    number = _to_float(text) if text else None
    if number is not None:
        return RawValue(ValueKind.NUMERIC, number, text)

    return RawValue(ValueKind.TEXT, None, text)
