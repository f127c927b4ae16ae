# fleetscore/sources/signals.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Protocol, Sequence

import pandas as pd

from fleetscore.errors import SignalSourceError

logger = logging.getLogger(__name__)


class RawSignalSource(Protocol):
    def fetch_signals(
        self, customer_id: str, names: Sequence[str], period: str
    ) -> Dict[str, object]: ...


class CsvSignalSource:
    """
    Per-account performance metrics exported to CSV: one row per
    (customer_id, period), one column per signal name. Cells are read as
    text so that percent markers survive until ingestion.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._df: pd.DataFrame | None = None

    @property
    def frame(self) -> pd.DataFrame:
        if self._df is None:
            df = pd.read_csv(self.path, dtype=str, keep_default_na=False)
            missing = {"customer_id", "period"} - set(df.columns)
            if missing:
                raise SignalSourceError(f"{self.path}: missing columns {sorted(missing)}")
            df["customer_id"] = df["customer_id"].str.strip()
            self._df = df
            logger.debug("Loaded %d metric rows from %s", len(df), self.path)
        return self._df

    def fetch_signals(self, customer_id: str, names: Sequence[str], period: str) -> Dict[str, object]:
        df = self.frame

        missing: List[str] = [n for n in names if n not in df.columns]
        if missing:
            raise SignalSourceError(f"{self.path}: no column for signals {missing}")

        rows = df[(df["customer_id"] == str(customer_id)) & (df["period"] == period)]
        if rows.empty:
            raise SignalSourceError(f"No metrics for account {customer_id} during {period}")

        # last row wins
        row = rows.iloc[-1]
        return {name: row[name] for name in names}
