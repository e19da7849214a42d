from __future__ import annotations

import json
from pathlib import Path

import pytest

from oob_generator.domain.types import Faction, HexType
from oob_generator.rules.modules import ModuleCatalog
from oob_generator.rules.tables import SENTINEL_GROUPS, TableDataError, load_table_set
from tests.helpers.factories import BALTIC, RED_STORM, make_table, shipped_tables, single_nation
from tests.helpers.invariants import assert_exhaustive, iter_range_maps

RED_STORM_IDS = ["A", "B", "C", "D", "E", "F", "G", "H", "I", "J", "K", "L"]
BALTIC_IDS = ["A2", "A2-SE", "B2", "C2", "D2", "D3", "E2", "F2", "G2", "H2", "I2", "J2", "J3", "K2", "L2"]


@pytest.mark.parametrize("module, expected", [(RED_STORM, RED_STORM_IDS), (BALTIC, BALTIC_IDS)])
def test_shipped_modules_load_every_table(module: str, expected: list[str]) -> None:
    tables = shipped_tables(module)
    assert tables.failures == {}
    assert tables.table_ids() == expected
    assert all(tables.nato[t].faction == Faction.NATO for t in tables.nato)
    assert all(tables.wp[t].faction == Faction.WP for t in tables.wp)


@pytest.mark.parametrize("module", [RED_STORM, BALTIC])
def test_every_shipped_range_map_covers_the_die_once(module: str) -> None:
    tables = shipped_tables(module)
    seen = 0
    for table_id in tables.table_ids():
        for where, range_map in iter_range_maps(tables.get(table_id)):
            assert_exhaustive(range_map, where)
            seen += 1
    assert seen > 20


def test_sentinel_names_become_variant_tables() -> None:
    g = shipped_tables(RED_STORM).get("G")
    ussr = next(nation for _, nation in g.nations if nation.name == "USSR")
    mig23 = next(entry for _, entry in ussr.aircraft if entry.name == "MiG-23²")
    assert mig23.has_variants
    assert [variant.name for _, variant in mig23.variants] == ["MiG-23M", "MiG-23MF", "MiG-23ML"]
    assert_exhaustive(mig23.variants)


def test_sentinel_groups_are_exhaustive() -> None:
    for name in SENTINEL_GROUPS:
        table = make_table({"nations": single_nation("USSR", {"1-10": name})})
        entry = table.nations[0][1].aircraft[0][1]
        assert_exhaustive(entry.variants, name)


def test_unknown_sentinel_group_is_rejected() -> None:
    with pytest.raises(TableDataError, match="unknown variant group"):
        make_table({"nations": single_nation("USSR", {"1-10": "Su-25²"})})


def test_gaps_and_overlaps_are_rejected() -> None:
    with pytest.raises(TableDataError, match="not covered"):
        make_table({"nations": {"1-5": {"name": "USSR", "aircraft": {"1-10": "MiG-29A"}}}})
    with pytest.raises(TableDataError, match="more than once"):
        make_table({"nations": single_nation("USSR", {"1-6": "MiG-29A", "5-10": "Su-27S"})})


def test_malformed_range_key_is_rejected() -> None:
    with pytest.raises(TableDataError):
        make_table({"nations": single_nation("USSR", {"1-10x": "MiG-29A"})})


def test_tasking_needs_exactly_one_source() -> None:
    raw = {
        "taskings": {
            "CAP": {
                "nations": single_nation("USSR", {"1-10": "MiG-29A"}),
                "aircraft": {"1-10": "MiG-29A"},
            }
        }
    }
    with pytest.raises(TableDataError, match="exactly one"):
        make_table(raw)


def test_split_needs_two_airframes() -> None:
    aircraft = {"1-10": {"name": "F-4G", "split": ["F-4G"]}}
    with pytest.raises(TableDataError, match="split"):
        make_table({"nations": single_nation("US", aircraft)}, faction=Faction.NATO)


def test_flight_aircraft_shapes() -> None:
    table = make_table(
        {
            "nationalities": {
                "FRG": {
                    "flights": [
                        {"type": "CSAR", "aircraft": {"land": "UH-1D", "sea": "Sea King Mk41"}},
                        {"type": "Rescue Support", "aircraft": {"1-10": "Alpha Jet A"}},
                        {"type": "Recon", "aircraft": {"name": "RF-4E", "aircraft_id": "rf-4e"}},
                    ]
                }
            }
        },
        faction=Faction.NATO,
    )
    csar, support, recon = table.nationalities["FRG"].flights
    assert csar.by_hex[HexType.SEA].name == "Sea King Mk41"
    assert support.aircraft is not None and support.fixed is None
    assert recon.fixed.name == "RF-4E"
    assert recon.fixed.aircraft_id == "rf-4e"


def test_date_ordinals_come_from_the_module() -> None:
    table = make_table(
        {"date_ordinals": "combined_may", "date_ranges": {"15-31 May": single_nation("USSR", {"1-10": "MiG-29A"})}}
    )
    assert table.date_ordinals == {0: "15-31 May", 1: "15-31 May", 2: "1-15 June"}
    with pytest.raises(TableDataError, match="unknown date ordinal map"):
        make_table({"date_ordinals": "lunar", "nations": single_nation("USSR", {"1-10": "MiG-29A"})})


def test_nationality_roll_references_must_exist() -> None:
    with pytest.raises(TableDataError, match="unknown nationality"):
        make_table({"nationality_rolls": {"*": {"1-10": "USSR"}}})


def _write_module(root: Path, wp_tables: dict) -> Path:
    (root / "modules.json").write_text(
        json.dumps(
            {
                "default": "test",
                "modules": {
                    "test": {"nato_tables": "nato.json", "wp_tables": "wp.json", "aircraft": []}
                },
            }
        ),
        encoding="utf-8",
    )
    (root / "nato.json").write_text(json.dumps({"tables": {}}), encoding="utf-8")
    (root / "wp.json").write_text(json.dumps({"tables": wp_tables}), encoding="utf-8")
    return root


def test_broken_table_is_reported_and_the_rest_load(tmp_path: Path, caplog) -> None:
    data_dir = _write_module(
        tmp_path,
        {
            "G": {"nations": single_nation("USSR", {"1-10": "MiG-29A"})},
            "H": {"nations": {"1-4": {"name": "USSR", "aircraft": {"1-10": "MiG-29A"}}}},
        },
    )
    with caplog.at_level("WARNING"):
        tables = load_table_set(data_dir=data_dir)
    assert tables.module_id == "test"
    assert list(tables.wp) == ["G"]
    assert "H" in tables.failures
    assert "not covered" in tables.failures["H"]
    assert any("Skipping table H" in record.getMessage() for record in caplog.records)


def test_missing_and_invalid_files_raise(tmp_path: Path) -> None:
    with pytest.raises(TableDataError, match="not found"):
        ModuleCatalog.load(tmp_path)
    (tmp_path / "modules.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(TableDataError, match="Invalid JSON"):
        ModuleCatalog.load(tmp_path)


def test_unknown_module_is_rejected() -> None:
    with pytest.raises(TableDataError, match="Unknown game module"):
        ModuleCatalog.load().get("central_front")
    assert ModuleCatalog.load().get("baltic-approaches").module_id == BALTIC
