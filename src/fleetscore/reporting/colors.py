# fleetscore/reporting/colors.py

from __future__ import annotations

from typing import Optional, Tuple

from fleetscore.settings import Settings

Colors = Tuple[Optional[str], Optional[str]]

NO_COLORS: Colors = (None, None)


def number_colors(value: Optional[float], settings: Settings) -> Colors:
    """
    (font color, background color) of the highest level whose min value the
    value exceeds. No level reached, no coloring.
    """
    if value is None:
        return NO_COLORS
    for tier in settings.level_thresholds():
        if value > tier.min_value:
            return tier.fg_color, tier.bg_color
    return NO_COLORS


def string_colors(settings: Settings) -> Colors:
    return settings.string_colors()
