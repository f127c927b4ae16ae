from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from fleetscore.data.memory import Memory
from fleetscore.data.schemas.setting import SettingDTO
from fleetscore.data.schemas.signal_definition import SignalDefinitionDTO
from fleetscore.errors import SignalSourceError
from fleetscore.reporting.report_writer import ReportWriter

DAY = 24 * 3600.0
T0 = 1_700_000_000.0


class FakeClock:
    def __init__(self, now: float = T0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, days: float = 0.0, seconds: float = 0.0) -> None:
        self.now += days * DAY + seconds


class FakeFleet:
    def __init__(self, accounts: List[str], labels: Optional[Dict[str, List[str]]] = None):
        self.accounts = list(accounts)
        self.labels = labels or {}
        self.calls: List[Optional[str]] = []

    def list_accounts(self, label: Optional[str] = None) -> List[str]:
        self.calls.append(label)
        if label is None:
            return list(self.accounts)
        return [a for a in self.accounts if label in self.labels.get(a, [])]


class FakeSource:
    def __init__(self, values: Dict[str, Dict[str, object]], failing=()):
        self.values = values
        self.failing = set(failing)
        self.calls: List[str] = []

    def fetch_signals(self, customer_id, names, period):
        self.calls.append(customer_id)
        if customer_id in self.failing:
            raise SignalSourceError(f"source down for {customer_id}")
        row = self.values[customer_id]
        return {n: row[n] for n in names if n in row}


class FakeNotifier:
    def __init__(self):
        self.sent = []

    def send(self, recipient, subject, body):
        self.sent.append((recipient, subject, body))


def signal(name, **kw) -> SignalDefinitionDTO:
    defaults = dict(
        display_name=name,
        include_in_report=True,
        signal_type="Number",
        direction="High",
        weight=1.0,
        min_value=0.0,
        max_value=1.0,
    )
    defaults.update(kw)
    return SignalDefinitionDTO(name=name, **defaults)


def default_signals() -> List[SignalDefinitionDTO]:
    return [
        signal("Ctr", display_name="CTR", weight=2, min_value=0.01, max_value=0.10, display_format="0.00%"),
        signal("Cost", direction="Low", weight=3, min_value=0, max_value=100, display_format="#,##0.00"),
        signal("Impressions", direction="None", weight=5, min_value=None, max_value=None),
        signal("Status", signal_type="String", direction="None", weight=0, min_value=None, max_value=None),
    ]


def default_settings(**overrides) -> List[SettingDTO]:
    values = {
        "ReportFrequency": ("Number", "7"),
        "NumAccountsProcess": ("Number", "2"),
        "RecipientEmail": ("Text", "ops@example.com"),
        "Level1MinValue": ("Number", "0"),
        "Level1FgColor": ("Color", "#000"),
        "Level1BgColor": ("Color", "#f66"),
        "Level3MinValue": ("Number", "0.5"),
        "Level3FgColor": ("Color", "#000"),
        "Level3BgColor": ("Color", "#6f6"),
        "StringFgColor": ("Color", "#333"),
        "StringBgColor": ("Color", "#eee"),
    }
    for key, value in overrides.items():
        if value is None:
            values.pop(key, None)
        else:
            values[key] = ("Number", str(value)) if isinstance(value, (int, float)) else ("Text", value)
    return [SettingDTO(key=k, setting_type=t, value=v) for k, (t, v) in values.items()]


def raw_row(ctr="5%", cost="50", impressions="1,200", status="ENABLED"):
    return {"Ctr": ctr, "Cost": cost, "Impressions": impressions, "Status": status}


@pytest.fixture
def memory(tmp_path) -> Memory:
    return Memory(f"sqlite:///{tmp_path / 'fleetscore.db'}")


@pytest.fixture
def configured_memory(memory) -> Memory:
    memory.signals.replace_all(default_signals())
    memory.settings.replace_all(default_settings())
    return memory


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def report_writer(tmp_path) -> ReportWriter:
    return ReportWriter(tmp_path / "reports")
