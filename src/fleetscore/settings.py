# fleetscore/settings.py
"""
Typed access to the business settings stored in the settings table.

A setting is "not set" when its row is missing or its value is empty.
Anything else, including 0, is a set value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from fleetscore.data.schemas.setting import SettingDTO
from fleetscore.errors import ConfigurationError

logger = logging.getLogger(__name__)

REPORT_FREQUENCY = "ReportFrequency"
NUM_ACCOUNTS_PROCESS = "NumAccountsProcess"
REPORT_PERIOD = "ReportPeriod"
ACCOUNT_LABEL = "AccountLabel"
RECIPIENT_EMAIL = "RecipientEmail"
STRING_FG_COLOR = "StringFgColor"
STRING_BG_COLOR = "StringBgColor"

DEFAULT_REPORT_PERIOD = "LAST_30_DAYS"
NUM_LEVELS = 5


@dataclass(frozen=True)
class ColorTier:
    level: int
    min_value: float
    fg_color: Optional[str]
    bg_color: Optional[str]


def _parse_number(key: str, raw: str) -> float | int:
    try:
        value = float(raw.strip().replace(",", ""))
    except ValueError as e:
        raise ConfigurationError(f"Setting '{key}' is not a number: {raw!r}") from e
    return int(value) if value.is_integer() else value


class Settings:

    def __init__(self, rows: Iterable[SettingDTO]):
        self._values: Dict[str, Any] = {}
        for row in rows:
            if not row.key or row.value is None or str(row.value).strip() == "":
                continue
            if row.setting_type == "Number":
                self._values[row.key] = _parse_number(row.key, str(row.value))
            else:
                self._values[row.key] = str(row.value).strip()

        logger.debug("Read %d settings", len(self._values))

    @classmethod
    def from_mapping(cls, mapping: Dict[str, Any]) -> "Settings":
        """Build from plain key -> value pairs; numbers keep their type."""
        rows = []
        for key, value in mapping.items():
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                rows.append(SettingDTO(key=key, setting_type="Number", value=str(value)))
            else:
                rows.append(SettingDTO(key=key, value=None if value is None else str(value)))
        return cls(rows)

    def __len__(self) -> int:
        return len(self._values)

    def is_set(self, key: str) -> bool:
        return key in self._values

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def require(self, key: str) -> Any:
        if key not in self._values:
            raise ConfigurationError(f"Setting '{key}' is not set!")
        return self._values[key]

    def _number(self, key: str, value: Any) -> float | int:
        if isinstance(value, str):
            return _parse_number(key, value)
        return value

    def _require_int(self, key: str) -> int:
        value = self._number(key, self.require(key))
        if not isinstance(value, (int, float)) or float(value) != int(value):
            raise ConfigurationError(f"Setting '{key}' must be an integer, got {value!r}")
        return int(value)

    # ---------------------------------------------------------
    # Typed accessors
    # ---------------------------------------------------------

    @property
    def report_frequency(self) -> int:
        """Days between two run starts."""
        days = self._require_int(REPORT_FREQUENCY)
        if days < 0:
            raise ConfigurationError(f"Setting '{REPORT_FREQUENCY}' must not be negative")
        return days

    @property
    def num_accounts_process(self) -> int:
        """Batch size: accounts scored per invocation."""
        n = self._require_int(NUM_ACCOUNTS_PROCESS)
        if n <= 0:
            raise ConfigurationError(f"Setting '{NUM_ACCOUNTS_PROCESS}' must be positive")
        return n

    @property
    def report_period(self) -> str:
        return str(self.get(REPORT_PERIOD, DEFAULT_REPORT_PERIOD))

    @property
    def account_label(self) -> Optional[str]:
        return self.get(ACCOUNT_LABEL)

    @property
    def recipient_email(self) -> Optional[str]:
        return self.get(RECIPIENT_EMAIL)

    def level_thresholds(self) -> List[ColorTier]:
        """Color tiers from the highest level down; tiers without a min value are skipped."""
        tiers = []
        for level in range(NUM_LEVELS, 0, -1):
            min_key = f"Level{level}MinValue"
            if not self.is_set(min_key):
                continue
            min_value = self._number(min_key, self.get(min_key))
            tiers.append(ColorTier(
                level=level,
                min_value=float(min_value),
                fg_color=self.get(f"Level{level}FgColor"),
                bg_color=self.get(f"Level{level}BgColor"),
            ))
        return tiers

    def string_colors(self) -> tuple[Optional[str], Optional[str]]:
        return self.get(STRING_FG_COLOR), self.get(STRING_BG_COLOR)
