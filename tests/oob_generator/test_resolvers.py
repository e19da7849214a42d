from __future__ import annotations

import pytest

from oob_generator.domain.results import TraceEntry
from oob_generator.rules.tables import AircraftEntry, NationEntry
from oob_generator.sim.rng import SequenceRollEngine
from oob_generator.systems.aircraft import resolve_aircraft, sub_roll_label
from oob_generator.systems.nations import normalize_nationality, resolve_nation
from oob_generator.systems.ranges import RollRange, UnresolvedRollError

F4 = AircraftEntry(
    "F-4²",
    aircraft_id="f-4",
    variants=(
        (RollRange(1, 5), AircraftEntry("F-4D", aircraft_id="f-4d")),
        (RollRange(6, 10), AircraftEntry("F-4E")),
    ),
)
US_AIRCRAFT = ((RollRange(1, 6), AircraftEntry("F-15C", aircraft_id="f-15c")), (RollRange(7, 10), F4))


def test_plain_aircraft_roll() -> None:
    rolled = resolve_aircraft(US_AIRCRAFT, SequenceRollEngine([2]))
    assert rolled.aircraft_type == "F-15C"
    assert rolled.aircraft_id == "f-15c"
    assert rolled.trace == (TraceEntry("Aircraft", 2),)


def test_variant_entry_takes_exactly_one_sub_roll() -> None:
    roller = SequenceRollEngine([8, 7, 1])
    rolled = resolve_aircraft(US_AIRCRAFT, roller, "SEAD Aircraft")
    assert rolled.aircraft_type == "F-4E"
    assert rolled.aircraft_id is None
    assert [entry.render() for entry in rolled.trace] == ["SEAD Aircraft: 8", "SEAD Sub-roll: 7"]
    assert roller.remaining == 1


def test_variant_id_replaces_parent_id() -> None:
    rolled = resolve_aircraft(US_AIRCRAFT, SequenceRollEngine([9, 3]))
    assert rolled.aircraft_type == "F-4D"
    assert rolled.aircraft_id == "f-4d"


def test_variant_gap_carries_both_rolls() -> None:
    short = AircraftEntry("F-4²", variants=((RollRange(1, 5), AircraftEntry("F-4D")),))
    with pytest.raises(UnresolvedRollError) as info:
        resolve_aircraft(((RollRange(1, 10), short),), SequenceRollEngine([4, 9]))
    assert [entry.render() for entry in info.value.trace] == ["Aircraft: 4", "Sub-roll: 9"]


def test_sub_roll_labels() -> None:
    assert sub_roll_label("Aircraft") == "Sub-roll"
    assert sub_roll_label("CAP Aircraft") == "CAP Sub-roll"
    assert sub_roll_label("Escort") == "Escort Sub-roll"


def test_nation_roll() -> None:
    nations = (
        (RollRange(1, 4), NationEntry("UK", US_AIRCRAFT)),
        (RollRange(5, 10), NationEntry("US", US_AIRCRAFT)),
    )
    rolled = resolve_nation(nations, SequenceRollEngine([5]), "CAP Nation")
    assert rolled.name == "US"
    assert rolled.trace == (TraceEntry("CAP Nation", 5),)


def test_normalize_nationality() -> None:
    aliases = {"BE": "UK", "NE": "UK", "CAN": "US"}
    assert normalize_nationality(" NE ", aliases) == "UK"
    assert normalize_nationality("CAN", aliases) == "US"
    assert normalize_nationality("FRG", aliases) == "FRG"
