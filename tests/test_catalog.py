from __future__ import annotations

import pytest

from fleetscore.data.orm.signal_definition import SignalDefinitionORM
from fleetscore.data.stores.db_scope import session_scope
from fleetscore.errors import CatalogError, ConfigurationError
from fleetscore.scoring.catalog import SignalCatalog

from conftest import default_signals, signal


def test_rows_with_empty_name_are_skipped() -> None:
    catalog = SignalCatalog([signal(""), signal("  "), signal("a", weight=2)])
    assert catalog.names == ["a"]
    assert len(catalog) == 1


def test_sum_weights_counts_included_directional_numbers_only() -> None:
    catalog = SignalCatalog(default_signals() + [signal("off", include_in_report=False, weight=100)])
    assert catalog.sum_weights == 5
    assert [d.name for d in catalog.included] == ["Ctr", "Cost", "Impressions", "Status"]
    assert catalog.names[-1] == "off"


def test_order_is_preserved() -> None:
    names = ["z", "a", "m"]
    catalog = SignalCatalog([signal(n) for n in names])
    assert catalog.names == names
    assert catalog.get("a").name == "a"
    assert catalog.get("missing") is None


def test_zero_weight_catalog_is_rejected() -> None:
    with pytest.raises(CatalogError):
        SignalCatalog([signal("a", weight=0), signal("s", signal_type="String", weight=4)])

    # weight on a passthrough metric does not count
    with pytest.raises(CatalogError):
        SignalCatalog([signal("n", direction="None", weight=3, min_value=None, max_value=None)])


def test_catalog_errors_are_configuration_errors() -> None:
    assert issubclass(CatalogError, ConfigurationError)


@pytest.mark.parametrize(
    "bad",
    [
        signal("a", min_value=1, max_value=1),
        signal("a", direction="Low", min_value=2, max_value=1),
        signal("a", min_value=None, max_value=1),
        signal("a", weight=-1),
    ],
)
def test_invalid_definitions(bad) -> None:
    with pytest.raises(CatalogError, match="'a'"):
        SignalCatalog([bad, signal("ok")])


def test_duplicate_names_are_rejected() -> None:
    with pytest.raises(CatalogError, match="twice"):
        SignalCatalog([signal("a"), signal("a")])


def test_load_from_store(configured_memory) -> None:
    catalog = SignalCatalog.load(configured_memory.signals)
    assert catalog.names == ["Ctr", "Cost", "Impressions", "Status"]
    assert catalog.get("Ctr").display_format == "0.00%"
    assert catalog.sum_weights == 5


def _insert_raw_rows(memory, *rows: dict) -> None:
    with session_scope(memory.session_maker) as s:
        for position, row in enumerate(rows):
            s.add(SignalDefinitionORM(position=position, **row))


def test_stored_row_with_unknown_type_is_a_catalog_error(memory) -> None:
    _insert_raw_rows(memory, {"name": "Ctr", "signal_type": "number", "direction": "High",
                              "weight": 1.0, "min_value": 0.0, "max_value": 1.0})

    with pytest.raises(CatalogError, match="Signal 'Ctr'"):
        SignalCatalog.load(memory.signals)


def test_stored_row_with_unknown_direction_is_a_catalog_error(memory) -> None:
    _insert_raw_rows(memory, {"name": "Cost", "signal_type": "Number", "direction": "Sideways", "weight": 1.0})

    with pytest.raises(CatalogError, match="Signal 'Cost'"):
        SignalCatalog.load(memory.signals)


def test_stored_rows_with_empty_name_are_skipped_before_validation(memory) -> None:
    _insert_raw_rows(
        memory,
        {"name": "", "signal_type": "", "direction": ""},
        {"name": "Ctr", "signal_type": "Number", "direction": "High",
         "weight": 2.0, "min_value": 0.01, "max_value": 0.1},
        {"name": "   ", "signal_type": "bogus", "direction": "bogus"},
    )

    catalog = SignalCatalog.load(memory.signals)
    assert catalog.names == ["Ctr"]
    assert catalog.sum_weights == 2
