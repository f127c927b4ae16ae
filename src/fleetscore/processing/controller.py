# fleetscore/processing/controller.py
"""
Decides, per invocation, whether to start a new run, continue the open one,
or do nothing.

    NoRun --(no open run, frequency elapsed)--> InProgress   [lock, snapshot, open run]
    InProgress --(batch)--> InProgress
    InProgress --(batch, nothing left)--> Completed -> NoRun [render, unlock, close, notify]

All state is in the database; invocations are expected to be scheduled
one at a time.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from fleetscore.data.memory import Memory
from fleetscore.data.schemas.run import RunDTO
from fleetscore.notify import REPORT_READY_SUBJECT, Notifier
from fleetscore.processing.batch import BatchProcessor
from fleetscore.reporting.report_writer import ReportWriter
from fleetscore.scoring.catalog import SignalCatalog
from fleetscore.scoring.engine import ScoringEngine
from fleetscore.settings import Settings
from fleetscore.sources.fleet import FleetEnumerator
from fleetscore.sources.signals import RawSignalSource

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 3600


def day_difference(older: float, newer: float) -> int:
    """Number of full days between two epoch timestamps."""
    return int((newer - older) / SECONDS_PER_DAY)


class RunOutcome(str, Enum):
    NOTHING_TO_DO = "nothing_to_do"
    STARTED = "started"
    CONTINUED = "continued"
    COMPLETED = "completed"


@dataclass(frozen=True)
class InvocationReport:
    outcome: RunOutcome
    run_id: Optional[int] = None
    processed: int = 0
    failed: int = 0
    remaining: int = 0
    report_location: Optional[str] = None


class RunController:

    def __init__(
        self,
        memory: Memory,
        fleet: FleetEnumerator,
        source: RawSignalSource,
        report_writer: ReportWriter,
        notifier: Notifier,
        *,
        clock: Callable[[], float] = time.time,
        show_progress: bool = False,
    ):
        self.memory = memory
        self.fleet = fleet
        self.source = source
        self.report_writer = report_writer
        self.notifier = notifier
        self.clock = clock
        self.show_progress = show_progress

    def run_once(self) -> InvocationReport:
        """
        One scheduled invocation.

        Raises:
            ConfigurationError: a mandatory setting is missing or the signal
                catalog cannot produce a score. Nothing is written in that case.
        """
        settings = Settings(self.memory.settings.load_settings())
        catalog = SignalCatalog.load(self.memory.signals)
        report_frequency = settings.report_frequency
        batch_size = settings.num_accounts_process

        open_run = self.memory.runs.get_open_run()
        if open_run is not None:
            return self._continue(open_run, settings, catalog, batch_size)

        last_start = self.memory.runs.last_run_start()
        now = self.clock()
        if last_start is None or day_difference(last_start, now) >= report_frequency:
            return self._start(settings, now)

        logger.info(
            "Nothing to do: last report started %d day(s) ago, frequency is %d day(s)",
            day_difference(last_start, now), report_frequency,
        )
        return InvocationReport(outcome=RunOutcome.NOTHING_TO_DO)

    # ---------------------------------------------------------
    # Transitions
    # ---------------------------------------------------------

    def _start(self, settings: Settings, now: float) -> InvocationReport:
        """Snapshot the fleet and open a run. No account is scored here."""
        logger.info("Creating new report")

        # the fleet is read before anything is written
        label = settings.account_label
        customer_ids = self.fleet.list_accounts(label)
        for cid in customer_ids:
            logger.debug("Adding account: %s", cid)

        self.memory.locks.lock(locked_at=now)
        try:
            self.memory.accounts.clear_accounts()
            added = self.memory.accounts.snapshot_accounts(customer_ids)
            run = self.memory.runs.open_run(start_time=now)
        except Exception:
            self.memory.locks.unlock()
            raise
        location = self._provision(run)

        logger.info("Run %s opened with %d accounts (label=%s)", run.id, added, label)
        return InvocationReport(
            outcome=RunOutcome.STARTED,
            run_id=run.id,
            remaining=added,
            report_location=location,
        )

    def _continue(
        self,
        run: RunDTO,
        settings: Settings,
        catalog: SignalCatalog,
        batch_size: int,
    ) -> InvocationReport:
        location = run.report_location or self._provision(run)
        logger.info("Continuing unfinished report: %s", location)

        batch = BatchProcessor(
            self.memory.accounts,
            self.source,
            ScoringEngine(catalog),
            period=settings.report_period,
            flush=lambda results: self.report_writer.append(location, catalog, results),
            clock=self.clock,
            show_progress=self.show_progress,
        )
        processed = batch.process_batch(batch_size)
        logger.info("Processed %d accounts", processed)

        # an earlier invocation may have marked the last account and died before completing
        accounts = self.memory.accounts
        if accounts.all_processed():
            self._complete(run, location, settings, catalog)
            outcome = RunOutcome.COMPLETED
        else:
            outcome = RunOutcome.CONTINUED

        return InvocationReport(
            outcome=outcome,
            run_id=run.id,
            processed=processed,
            failed=len(batch.failures),
            remaining=accounts.count_unprocessed(),
            report_location=location,
        )

    def _complete(self, run: RunDTO, location: str, settings: Settings, catalog: SignalCatalog) -> None:
        logger.info("All accounts processed, marking report as complete")

        self.report_writer.render_html(location, catalog, settings)
        self.memory.locks.unlock()
        self.memory.runs.close_run(run.id, end_time=self.clock())

        recipient = settings.recipient_email
        if recipient:
            try:
                self.notifier.send(recipient, REPORT_READY_SUBJECT, location)
            except Exception as e:
                logger.warning("Could not notify %s: %s", recipient, e, exc_info=True)

    def _provision(self, run: RunDTO) -> str:
        location = self.report_writer.provision(run)
        self.memory.runs.set_report_location(run.id, location)
        return location
