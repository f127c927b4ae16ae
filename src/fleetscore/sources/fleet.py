# fleetscore/sources/fleet.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Protocol

import pandas as pd

logger = logging.getLogger(__name__)


class FleetEnumerator(Protocol):
    def list_accounts(self, label: Optional[str] = None) -> List[str]: ...


class CsvFleetEnumerator:
    """
    Fleet listing from a CSV file with a `customer_id` column and an optional
    `labels` column holding `;`-separated label names.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> pd.DataFrame:
        df = pd.read_csv(self.path, dtype=str, keep_default_na=False)
        if "customer_id" not in df.columns:
            raise ValueError(f"{self.path}: missing 'customer_id' column")
        if "labels" not in df.columns:
            df["labels"] = ""
        return df

    def list_accounts(self, label: Optional[str] = None) -> List[str]:
        df = self._load()
        df = df[df["customer_id"].str.strip() != ""]

        if label:
            has_label = df["labels"].map(
                lambda cell: label in [l.strip() for l in cell.split(";")]
            )
            df = df[has_label]

        accounts = df["customer_id"].str.strip().tolist()
        logger.debug("Fleet listing from %s: %d accounts (label=%s)", self.path, len(accounts), label)
        return accounts
