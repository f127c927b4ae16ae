# fleetscore/reporting/report_writer.py
"""
Per-run report output.

Each invocation appends its scored accounts to `report.csv` in the run's
report directory. When the run completes, `report.html` is rendered from the
whole CSV, sorted by descending score and color coded by the level settings.
"""

from __future__ import annotations

import html
import logging
import math
import numbers
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, List, Optional

import pandas as pd

from fleetscore.data.schemas.run import RunDTO
from fleetscore.data.schemas.signal_definition import SignalType
from fleetscore.reporting.colors import number_colors, string_colors
from fleetscore.scoring.catalog import SignalCatalog
from fleetscore.scoring.result import ScoreResult
from fleetscore.settings import Settings

logger = logging.getLogger(__name__)

CSV_NAME = "report.csv"
HTML_NAME = "report.html"
CUSTOMER_COL = "Customer ID"
SCORE_COL = "Score"
SCORE_FORMAT = "0.00%"
NORMALIZED_SUFFIX = ".normalized"

HEADER_STYLE = "font-weight:bold;background:#38c;color:#fff"

_SORT_SCRIPT = """
<script>
document.querySelectorAll("th").forEach(function (th, col) {
  th.addEventListener("click", function () {
    var body = th.closest("table").tBodies[0];
    var asc = th.dataset.order !== "asc";
    th.dataset.order = asc ? "asc" : "desc";
    Array.from(body.rows).sort(function (a, b) {
      var x = a.cells[col].dataset.sort, y = b.cells[col].dataset.sort;
      var nx = parseFloat(x), ny = parseFloat(y);
      var c = (isNaN(nx) || isNaN(ny)) ? x.localeCompare(y) : nx - ny;
      return asc ? c : -c;
    }).forEach(function (r) { body.appendChild(r); });
  });
});
</script>
"""


def format_value(value: Any, fmt: Optional[str]) -> str:
    """Render a number with a spreadsheet-style format such as `0.00%` or `#,##0`."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    if not isinstance(value, numbers.Real) or isinstance(value, bool) or not fmt:
        return str(value)
    value = float(value)

    decimals = 0
    m = re.search(r"\.(0+)", fmt)
    if m:
        decimals = len(m.group(1))
    grouping = "," if "," in fmt else ""

    if fmt.endswith("%"):
        return f"{value * 100:{grouping}.{decimals}f}%"
    return f"{value:{grouping}.{decimals}f}"


def _style(colors) -> str:
    fg, bg = colors
    parts = []
    if fg:
        parts.append(f"color:{fg}")
    if bg:
        parts.append(f"background:{bg}")
    return ";".join(parts)


class ReportWriter:

    def __init__(self, reports_dir: str | Path):
        self.reports_dir = Path(reports_dir)

    def provision(self, run: RunDTO) -> str:
        """Create an empty report directory for a new run and return its location."""
        date = datetime.fromtimestamp(run.start_time).strftime("%Y-%m-%d")
        target = self.reports_dir / f"report_{date}_run{run.id}"
        target.mkdir(parents=True, exist_ok=True)
        logger.info("New report created at %s", target)
        return str(target)

    @staticmethod
    def _columns(catalog: SignalCatalog) -> List[str]:
        cols = [CUSTOMER_COL]
        for d in catalog.included:
            cols.append(d.name)
            if d.signal_type == SignalType.NUMBER:
                cols.append(d.name + NORMALIZED_SUFFIX)
        cols.append(SCORE_COL)
        return cols

    def append(self, location: str, catalog: SignalCatalog, results: Iterable[ScoreResult]) -> int:
        """Append results to the run's CSV, highest score first."""
        results = sorted(results, key=lambda r: r.score, reverse=True)
        if not results:
            return 0

        rows = []
        for result in results:
            row = {CUSTOMER_COL: result.customer_id, SCORE_COL: result.score}
            for name, signal in result.signals.items():
                row[name] = signal.display_value
                if signal.normalized is not None:
                    row[name + NORMALIZED_SUFFIX] = signal.normalized
            rows.append(row)

        path = Path(location) / CSV_NAME
        df = pd.DataFrame(rows, columns=self._columns(catalog))
        df.to_csv(path, mode="a", header=not path.exists(), index=False)
        logger.debug("Wrote %d rows to %s", len(df), path)
        return len(df)

    def load(self, location: str) -> pd.DataFrame:
        path = Path(location) / CSV_NAME
        if not path.exists():
            return pd.DataFrame(columns=[CUSTOMER_COL, SCORE_COL])
        df = pd.read_csv(path, dtype={CUSTOMER_COL: str})
        return df.sort_values(SCORE_COL, ascending=False, kind="stable").reset_index(drop=True)

    def render_html(self, location: str, catalog: SignalCatalog, settings: Settings) -> str:
        df = self.load(location)
        included = catalog.included

        head = [f'<th style="{HEADER_STYLE}">{CUSTOMER_COL}</th>']
        head += [f'<th style="{HEADER_STYLE}">{html.escape(d.label)}</th>' for d in included]
        head.append(f'<th style="{HEADER_STYLE}">{SCORE_COL}</th>')

        body = []
        for _, row in df.iterrows():
            cells = [self._cell(row[CUSTOMER_COL], str(row[CUSTOMER_COL]), "")]
            for d in included:
                value = row.get(d.name)
                if d.signal_type == SignalType.NUMBER:
                    normalized = row.get(d.name + NORMALIZED_SUFFIX)
                    colors = number_colors(None if pd.isna(normalized) else float(normalized), settings)
                    cells.append(self._cell(value, format_value(value, d.display_format), _style(colors)))
                else:
                    text = "" if pd.isna(value) else str(value)
                    cells.append(self._cell(text, text, _style(string_colors(settings))))
            score = float(row[SCORE_COL])
            cells.append(self._cell(score, format_value(score, SCORE_FORMAT), _style(number_colors(score, settings))))
            body.append("<tr>" + "".join(cells) + "</tr>")

        page = (
            "<html><head><meta charset=\"utf-8\"><title>Fleet Health Report</title></head><body>\n"
            f"<h1>Fleet Health Report</h1>\n<p>{len(df)} accounts</p>\n"
            "<table>\n<thead><tr>" + "".join(head) + "</tr></thead>\n<tbody>\n"
            + "\n".join(body)
            + "\n</tbody>\n</table>\n" + _SORT_SCRIPT + "</body></html>\n"
        )

        path = Path(location) / HTML_NAME
        path.write_text(page, encoding="utf-8")
        logger.info("Rendered report %s (%d accounts)", path, len(df))
        return str(path)

    @staticmethod
    def _cell(sort_value: Any, text: str, style: str) -> str:
        sort_attr = html.escape("" if sort_value is None else str(sort_value), quote=True)
        style_attr = f' style="{style}"' if style else ""
        return f'<td data-sort="{sort_attr}"{style_attr}>{html.escape(text)}</td>'
