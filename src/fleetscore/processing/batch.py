# fleetscore/processing/batch.py

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional

from tqdm.auto import tqdm

from fleetscore.data.stores.account_store import AccountStore
from fleetscore.scoring.engine import ScoringEngine
from fleetscore.scoring.result import ScoreResult
from fleetscore.sources.signals import RawSignalSource

logger = logging.getLogger(__name__)

Flush = Callable[[List[ScoreResult]], object]


class BatchProcessor:
    """
    Scores the next bounded batch of unprocessed accounts.

    Each account is committed on its own: fetch, score, then mark processed.
    An interrupted invocation therefore loses at most the account in flight,
    and the next one resumes with whatever is still unmarked.

    An account whose fetch or scoring fails stays unprocessed and is retried
    by every later invocation; it does not stop the rest of the batch.
    """

    def __init__(
        self,
        accounts: AccountStore,
        source: RawSignalSource,
        engine: ScoringEngine,
        *,
        period: str,
        flush: Optional[Flush] = None,
        clock: Callable[[], float] = time.time,
        show_progress: bool = False,
    ):
        self.accounts = accounts
        self.source = source
        self.engine = engine
        self.period = period
        self.flush = flush
        self.clock = clock
        self.show_progress = show_progress

        self.results: List[ScoreResult] = []
        self.failures: Dict[str, str] = {}

    def process_batch(self, max_count: int) -> int:
        self.results = []
        self.failures = {}

        customer_ids = self.accounts.list_unprocessed(max_count)
        if not customer_ids:
            return 0

        names = self.engine.catalog.names
        try:
            for customer_id in tqdm(customer_ids, desc="Accounts", disable=not self.show_progress):
                logger.debug("- Processing %s", customer_id)
                try:
                    raw = self.source.fetch_signals(customer_id, names, self.period)
                    result = self.engine.score(customer_id, raw)
                except Exception as e:
                    self.failures[customer_id] = str(e)
                    logger.warning("Account %s left unprocessed: %s", customer_id, e, exc_info=True)
                    continue

                self.accounts.mark_processed(customer_id, self.clock())
                self.results.append(result)
        finally:
            self._flush()

        if self.failures:
            logger.warning(
                "%d of %d accounts in this batch failed: %s",
                len(self.failures), len(customer_ids), ", ".join(self.failures),
            )
        return len(self.results)

    def _flush(self) -> None:
        self.results.sort(key=lambda r: r.score, reverse=True)
        if self.flush is not None and self.results:
            self.flush(self.results)
