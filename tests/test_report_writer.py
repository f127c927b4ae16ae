from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from fleetscore.data.schemas.run import RunDTO
from fleetscore.reporting.report_writer import CSV_NAME, ReportWriter, format_value
from fleetscore.scoring.catalog import SignalCatalog
from fleetscore.scoring.engine import ScoringEngine
from fleetscore.settings import Settings

from conftest import T0, default_settings, default_signals, raw_row


@pytest.mark.parametrize(
    "value, fmt, expected",
    [
        (0.0523, "0.00%", "5.23%"),
        (1234.5, "#,##0", "1,234"),
        (1234.5, "#,##0.00", "1,234.50"),
        (0.4, "0.0", "0.4"),
        (7, None, "7"),
        ("ENABLED", "0.00", "ENABLED"),
        (float("nan"), "0.00", ""),
    ],
)
def test_format_value(value, fmt, expected) -> None:
    assert format_value(value, fmt) == expected


@pytest.fixture
def catalog() -> SignalCatalog:
    return SignalCatalog(default_signals())


def test_provision_creates_dated_directory(report_writer: ReportWriter) -> None:
    location = report_writer.provision(RunDTO(id=4, start_time=T0))
    assert Path(location).is_dir()
    assert Path(location).name.endswith("_run4")
    assert Path(location).name.startswith("report_")


def test_append_writes_header_once_and_sorts_each_batch(report_writer, catalog) -> None:
    location = report_writer.provision(RunDTO(id=1, start_time=T0))
    engine = ScoringEngine(catalog)

    first = [engine.score("a", raw_row(ctr="1%")), engine.score("b", raw_row(ctr="9%"))]
    second = [engine.score("c", raw_row(ctr="5%"))]
    assert report_writer.append(location, catalog, first) == 2
    assert report_writer.append(location, catalog, second) == 1
    assert report_writer.append(location, catalog, []) == 0

    raw = pd.read_csv(Path(location) / CSV_NAME, dtype={"Customer ID": str})
    assert list(raw["Customer ID"]) == ["b", "a", "c"]
    assert "Ctr.normalized" in raw.columns
    assert "Status.normalized" not in raw.columns

    assert list(report_writer.load(location)["Customer ID"]) == ["b", "c", "a"]


def test_render_html_colors_cells(report_writer, catalog) -> None:
    location = report_writer.provision(RunDTO(id=2, start_time=T0))
    engine = ScoringEngine(catalog)
    report_writer.append(location, catalog, [
        engine.score("top", raw_row(ctr="10%", cost="0")),
        engine.score("low", raw_row(ctr="1%", cost="100")),
    ])

    path = report_writer.render_html(location, catalog, Settings(default_settings()))
    html = Path(path).read_text()

    assert "<th" in html and "CTR" in html
    assert "background:#6f6" in html  # level 3 for the top account
    assert "background:#eee" in html  # string column
    assert "100.00%" in html  # top account's score
    assert "0.00%" in html
    assert html.index('data-sort="top"') < html.index('data-sort="low"')


def test_render_html_without_rows(report_writer, catalog) -> None:
    location = report_writer.provision(RunDTO(id=3, start_time=T0))
    html = Path(report_writer.render_html(location, catalog, Settings([]))).read_text()
    assert "0 accounts" in html
