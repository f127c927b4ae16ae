import logging
import sys

from fleetscore.config import FleetScoreConfig, get_config
from fleetscore.data.memory import Memory
from fleetscore.errors import ConfigurationError, FleetScoreError
from fleetscore.notify import LogNotifier, SmtpNotifier
from fleetscore.processing.controller import InvocationReport, RunController
from fleetscore.reporting.report_writer import ReportWriter
from fleetscore.sources.fleet import CsvFleetEnumerator
from fleetscore.sources.signals import CsvSignalSource

logger = logging.getLogger(__name__)


def build_controller(config: FleetScoreConfig) -> RunController:
    if not config.fleet_csv:
        raise ConfigurationError("No fleet listing configured ([paths] fleet_csv / FLEETSCORE_FLEET_CSV)")
    if not config.signals_csv:
        raise ConfigurationError("No signal source configured ([paths] signals_csv / FLEETSCORE_SIGNALS_CSV)")

    memory = Memory(config.db_url)
    notifier = (
        SmtpNotifier(config.smtp_host, config.smtp_port, config.email_sender)
        if config.smtp_host
        else LogNotifier()
    )

    return RunController(
        memory,
        CsvFleetEnumerator(config.fleet_csv),
        CsvSignalSource(config.signals_csv),
        ReportWriter(config.reports_dir),
        notifier,
        show_progress=config.show_progress,
    )


def run() -> InvocationReport:
    config = get_config()
    controller = build_controller(config)
    return controller.run_once()


def main() -> int:
    try:
        report = run()
    except FleetScoreError as e:
        logger.error("FleetScore invocation failed: %s", e)
        return 1

    logger.info(
        "Invocation finished: %s (run=%s, processed=%d, failed=%d, remaining=%d)",
        report.outcome.value, report.run_id, report.processed, report.failed, report.remaining,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
