from __future__ import annotations

import re
from pathlib import Path

import pandas as pd
import pytest

from fleetscore.data.schemas.setting import SettingDTO
from fleetscore.errors import CatalogError, ConfigurationError, ConfigurationLockedError
from fleetscore.notify import REPORT_READY_SUBJECT
from fleetscore.processing.controller import RunController, RunOutcome, day_difference

from conftest import (
    DAY,
    T0,
    FakeFleet,
    FakeSource,
    default_settings,
    raw_row,
    signal,
)

FLEET = ["111", "222", "333", "444", "555"]


@pytest.fixture
def source() -> FakeSource:
    return FakeSource({cid: raw_row(ctr=f"{i * 2}%", cost=str(i * 10)) for i, cid in enumerate(FLEET, 1)})


@pytest.fixture
def controller(configured_memory, source, report_writer, notifier, clock) -> RunController:
    return RunController(
        configured_memory,
        FakeFleet(FLEET, labels={"111": ["vip"], "333": ["vip", "eu"]}),
        source,
        report_writer,
        notifier,
        clock=clock,
    )


def test_day_difference_counts_full_days() -> None:
    assert day_difference(T0, T0 + 6.99 * DAY) == 6
    assert day_difference(T0, T0 + 7 * DAY) == 7


def test_first_invocation_starts_a_run_without_scoring(controller, configured_memory, source) -> None:
    report = controller.run_once()

    assert report.outcome is RunOutcome.STARTED
    assert report.remaining == 5
    assert report.processed == 0
    assert source.calls == []

    run = configured_memory.runs.get_open_run()
    assert run.id == report.run_id
    assert run.start_time == T0
    assert Path(run.report_location).is_dir()
    assert configured_memory.locks.is_locked("signals")
    assert configured_memory.locks.is_locked("settings")


def test_five_accounts_batch_of_two_completes_in_three_invocations(
    controller, configured_memory, notifier, clock
) -> None:
    assert controller.run_once().outcome is RunOutcome.STARTED

    outcomes = []
    processed = []
    for _ in range(3):
        clock.advance(seconds=600)
        r = controller.run_once()
        outcomes.append(r.outcome)
        processed.append(r.processed)

    assert processed == [2, 2, 1]
    assert outcomes == [RunOutcome.CONTINUED, RunOutcome.CONTINUED, RunOutcome.COMPLETED]

    assert not configured_memory.runs.has_open_run()
    run = configured_memory.runs.latest()
    assert run.end_time == clock.now
    assert configured_memory.locks.locked_resources() == []

    assert notifier.sent == [("ops@example.com", REPORT_READY_SUBJECT, run.report_location)]

    df = pd.read_csv(Path(run.report_location) / "report.csv", dtype={"Customer ID": str})
    assert sorted(df["Customer ID"]) == FLEET
    html = (Path(run.report_location) / "report.html").read_text()
    assert re.findall(r'<tr><td data-sort="(\d+)"', html) == ["555", "444", "333", "222", "111"]


def test_nothing_to_do_until_frequency_elapsed(controller, configured_memory, clock) -> None:
    controller.run_once()
    for _ in range(3):
        controller.run_once()
    assert not configured_memory.runs.has_open_run()

    clock.advance(days=6.5)
    assert controller.run_once().outcome is RunOutcome.NOTHING_TO_DO
    assert len(configured_memory.runs.history()) == 1

    clock.advance(days=0.5)
    report = controller.run_once()
    assert report.outcome is RunOutcome.STARTED
    assert len(configured_memory.runs.history()) == 2
    assert configured_memory.accounts.count_unprocessed() == 5


def test_open_run_blocks_new_run_regardless_of_frequency(controller, configured_memory, clock) -> None:
    started = controller.run_once()
    clock.advance(days=365)

    report = controller.run_once()
    assert report.outcome is RunOutcome.CONTINUED
    assert report.run_id == started.run_id
    assert len(configured_memory.runs.history()) == 1


def test_configuration_is_locked_while_run_is_open(controller, configured_memory) -> None:
    controller.run_once()
    with pytest.raises(ConfigurationLockedError):
        configured_memory.settings.set("NumAccountsProcess", 100, "Number")

    for _ in range(3):
        controller.run_once()
    configured_memory.settings.set("NumAccountsProcess", 100, "Number")


def test_account_label_filters_the_snapshot(configured_memory, source, report_writer, notifier, clock) -> None:
    settings = default_settings(AccountLabel="vip")
    configured_memory.settings.replace_all(settings)
    fleet = FakeFleet(FLEET, labels={"111": ["vip"], "333": ["vip", "eu"]})
    controller = RunController(configured_memory, fleet, source, report_writer, notifier, clock=clock)

    report = controller.run_once()
    assert fleet.calls == ["vip"]
    assert report.remaining == 2
    assert configured_memory.accounts.list_unprocessed(10) == ["111", "333"]


def test_missing_mandatory_setting_aborts_before_any_write(configured_memory, source, report_writer, notifier, clock) -> None:
    configured_memory.settings.replace_all(default_settings(NumAccountsProcess=None))
    controller = RunController(configured_memory, FakeFleet(FLEET), source, report_writer, notifier, clock=clock)

    with pytest.raises(ConfigurationError, match="NumAccountsProcess"):
        controller.run_once()
    assert configured_memory.runs.history() == []
    assert configured_memory.locks.locked_resources() == []


def test_zero_weight_catalog_is_rejected_before_the_run(memory, source, report_writer, notifier, clock) -> None:
    memory.signals.replace_all([signal("Ctr", weight=0)])
    memory.settings.replace_all(default_settings())
    controller = RunController(memory, FakeFleet(FLEET), source, report_writer, notifier, clock=clock)

    with pytest.raises(CatalogError):
        controller.run_once()
    assert memory.accounts.count() == 0


def test_failing_account_keeps_run_open(controller, configured_memory, source) -> None:
    source.failing.add("555")
    controller.run_once()
    results = [controller.run_once() for _ in range(4)]

    assert [r.outcome for r in results] == [RunOutcome.CONTINUED] * 4
    assert results[-1].failed == 1
    assert configured_memory.accounts.list_unprocessed(10) == ["555"]

    source.failing.clear()
    assert controller.run_once().outcome is RunOutcome.COMPLETED


def test_no_email_without_recipient(configured_memory, source, report_writer, notifier, clock) -> None:
    configured_memory.settings.replace_all(default_settings(RecipientEmail=None, NumAccountsProcess=10))
    controller = RunController(configured_memory, FakeFleet(FLEET), source, report_writer, notifier, clock=clock)

    controller.run_once()
    assert controller.run_once().outcome is RunOutcome.COMPLETED
    assert notifier.sent == []


def test_empty_fleet_completes_on_next_invocation(configured_memory, source, report_writer, notifier, clock) -> None:
    controller = RunController(configured_memory, FakeFleet([]), source, report_writer, notifier, clock=clock)

    assert controller.run_once().outcome is RunOutcome.STARTED
    report = controller.run_once()
    assert report.outcome is RunOutcome.COMPLETED
    assert report.processed == 0


def test_run_opened_without_report_location_is_provisioned(controller, configured_memory) -> None:
    run = configured_memory.runs.open_run(start_time=T0)
    configured_memory.locks.lock(locked_at=T0)
    configured_memory.accounts.snapshot_accounts(["111"])

    report = controller.run_once()
    assert report.outcome is RunOutcome.COMPLETED
    assert configured_memory.runs.report_target(run.id) == report.report_location
    assert Path(report.report_location, "report.html").exists()


def test_settings_stored_as_text_still_work(configured_memory, controller) -> None:
    configured_memory.settings.replace_all([
        SettingDTO(key="ReportFrequency", value="1"),
        SettingDTO(key="NumAccountsProcess", value="5"),
    ])
    controller.run_once()
    assert controller.run_once().outcome is RunOutcome.COMPLETED


def test_run_interrupted_before_completion_completes_next_time(controller, configured_memory, notifier) -> None:
    controller.run_once()
    for cid in FLEET:
        configured_memory.accounts.mark_processed(cid, T0)

    report = controller.run_once()
    assert report.outcome is RunOutcome.COMPLETED
    assert report.processed == 0
    assert configured_memory.runs.get_open_run() is None
    assert configured_memory.locks.locked_resources() == []
    assert len(notifier.sent) == 1


class UnreadableFleet(FakeFleet):
    def list_accounts(self, label=None):
        raise FileNotFoundError("fleet.csv")


def test_fleet_failure_on_start_leaves_configuration_editable(
    configured_memory, source, report_writer, notifier, clock
) -> None:
    configured_memory.accounts.snapshot_accounts(["old"])
    controller = RunController(configured_memory, UnreadableFleet([]), source, report_writer, notifier, clock=clock)

    with pytest.raises(FileNotFoundError):
        controller.run_once()

    assert configured_memory.runs.get_open_run() is None
    assert configured_memory.locks.locked_resources() == []
    assert configured_memory.accounts.list_unprocessed(10) == ["old"]
    configured_memory.settings.set("AccountLabel", "vip", "Text")
