"""
Load signal definitions and settings from CSV into the FleetScore database.

    python scripts/import_config.py --signals signals.csv --settings settings.csv

signals.csv columns: name, display_name, include_in_report, type, direction,
format, weight, min, max. settings.csv columns: key, type, value.
Refused while a run holds the configuration lock.
"""

import argparse
import sys

import pandas as pd

from fleetscore.config import get_config
from fleetscore.data.memory import Memory
from fleetscore.data.schemas.setting import SettingDTO
from fleetscore.data.schemas.signal_definition import SignalDefinitionDTO
from fleetscore.errors import ConfigurationLockedError


def _blank_to_none(v):
    return None if v is None or (isinstance(v, float) and pd.isna(v)) or str(v).strip() == "" else v


def read_signals(path: str) -> list[SignalDefinitionDTO]:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    rows = []
    for _, r in df.iterrows():
        rows.append(SignalDefinitionDTO(
            name=r["name"].strip(),
            display_name=_blank_to_none(r.get("display_name")),
            include_in_report=r.get("include_in_report", "Yes") or "Yes",
            signal_type=r.get("type", "Number") or "Number",
            direction=r.get("direction", "None"),
            display_format=_blank_to_none(r.get("format")),
            weight=float(r.get("weight") or 0),
            min_value=_blank_to_none(r.get("min")),
            max_value=_blank_to_none(r.get("max")),
        ))
    return rows


def read_settings(path: str) -> list[SettingDTO]:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    return [
        SettingDTO(key=r["key"].strip(), setting_type=r.get("type") or "Text", value=_blank_to_none(r["value"]))
        for _, r in df.iterrows()
        if r["key"].strip()
    ]


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--signals", help="CSV of signal definitions")
    parser.add_argument("--settings", help="CSV of settings")
    args = parser.parse_args()

    memory = Memory(get_config().db_url)
    try:
        if args.signals:
            n = memory.signals.replace_all(read_signals(args.signals))
            print(f"Imported {n} signal definitions")
        if args.settings:
            n = memory.settings.replace_all(read_settings(args.settings))
            print(f"Imported {n} settings")
    except ConfigurationLockedError as e:
        print(e, file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
