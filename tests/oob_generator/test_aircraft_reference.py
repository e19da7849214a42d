from __future__ import annotations

from oob_generator.rules.aircraft import AircraftRecord, AircraftReference, name_variants, normalize_name, trailing_code
from tests.helpers.factories import BALTIC, shipped_reference


def test_normalize_strips_markup_and_whitespace() -> None:
    assert normalize_name("  <b>F-15C</b>   Eagle ") == "F-15C Eagle"


def test_name_variants_order() -> None:
    variants = name_variants("US F.4G (Wild Weasel)")
    assert variants[0] == "US F.4G (Wild Weasel)"
    assert "US F.4G" in variants
    assert "US F-4G" in variants
    assert variants[-1] == "F.4G"


def test_lookup_tolerates_display_decorations() -> None:
    reference = shipped_reference()
    assert reference.home_nation("F-16A (DK)") == "DK"
    assert reference.home_nation("F-16A") == "NE"
    assert reference.home_nation("<i>F-15C</i>") == "US"
    assert reference.home_nation("F-15C (USAF)") == "US"
    assert reference.home_nation("US F-15C") == "US"
    assert reference.lookup("MiG-29A").aircraft_id == "mig-29a"


def test_unknown_aircraft() -> None:
    reference = shipped_reference(BALTIC)
    assert reference.lookup("Mirage 2000C") is None
    assert reference.home_nation(None) is None
    assert "Mirage 2000C" not in reference
    assert "Tornado IDS" in reference
    assert len(reference) > 50


def test_dotted_names_match_dashed_records() -> None:
    reference = AircraftReference([AircraftRecord("BR-1150", "FRG")])
    assert reference.home_nation("BR.1150") == "FRG"


def test_trailing_code() -> None:
    assert trailing_code("F-16A (DK)") == "DK"
    assert trailing_code("Sea King (Mk41)") is None
    assert trailing_code("Tornado IDS") is None
