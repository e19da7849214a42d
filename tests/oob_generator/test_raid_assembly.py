from __future__ import annotations

from collections import Counter

from hypothesis import given, settings
from hypothesis import strategies as st

from oob_generator.domain.flights import FlightRecord
from oob_generator.domain.params import ParamBag
from oob_generator.domain.types import Faction
from oob_generator.rules.aircraft import AircraftRecord, AircraftReference
from oob_generator.rules.tables import AircraftEntry, TaskingDefinition
from oob_generator.sim.rng import SequenceRollEngine
from oob_generator.systems.aircraft import AircraftRoll
from oob_generator.systems.common import ResolutionContext, rule_ordnance, split_shares, tasking_flights
from oob_generator.systems.ordnance import NATO_STRIKE
from oob_generator.systems.raid import ChainStep, NationalityChain, group_flights, is_composite
from tests.helpers.factories import BALTIC, partial_nation_table, shipped_reference, shipped_tables
from tests.helpers.strategies import flight_strategy


def _flight(aircraft: str = "F-16C", count: int = 1, ordnance: str | None = None) -> FlightRecord:
    return FlightRecord(
        faction=Faction.NATO,
        nationality="US",
        aircraft_type=aircraft,
        flight_size=2,
        flight_count=count,
        tasking="Bombing",
        ordnance=ordnance,
    )


def test_grouping_sums_counts_in_first_seen_order() -> None:
    grouped = group_flights(
        [_flight("F-16C"), _flight("A-10A"), _flight("F-16C", 2), _flight("F-16C", ordnance="Bombs/CBU/Rockets")]
    )
    assert [(f.aircraft_type, f.flight_count, f.ordnance) for f in grouped] == [
        ("F-16C", 3, None),
        ("A-10A", 1, None),
        ("F-16C", 1, "Bombs/CBU/Rockets"),
    ]


def _totals(flights: list[FlightRecord]) -> Counter:
    totals: Counter = Counter()
    for flight in flights:
        totals[flight.group_key] += flight.flight_count
    return totals


@given(data=st.data(), flights=st.lists(flight_strategy(), max_size=12))
@settings(max_examples=50)
def test_grouping_is_order_independent(data, flights: list[FlightRecord]) -> None:
    shuffled = data.draw(st.permutations(flights))
    grouped = group_flights(flights)
    assert _totals(grouped) == _totals(group_flights(shuffled)) == _totals(flights)
    assert len({f.group_key for f in grouped}) == len(grouped)


def test_grouping_is_associative() -> None:
    a, b, c = [_flight("F-16C")], [_flight("F-16C", 2), _flight("A-10A")], [_flight("A-10A", 3)]
    left = group_flights(group_flights(a + b) + c)
    right = group_flights(a + group_flights(b + c))
    assert _totals(left) == _totals(right)


def test_composite_detection() -> None:
    assert is_composite("NE/CAN")
    assert not is_composite("UK(RAF)")
    assert not is_composite(None)


def test_chain_steps() -> None:
    reference = AircraftReference([AircraftRecord("CF-18A", "CAN"), AircraftRecord("F-16A", "NE")])
    chain = NationalityChain(
        patterns={"FRG/DK": {"FRG": ("TORNADO",), "DK": ("DRAKEN",)}},
        defaults={"FRG/DK": "FRG"},
        aliases={"USMC": "US", "UK(RAF)": "UK"},
        reference=reference,
    )
    assert chain.resolve("F/A-18A", "US", "USMC").step == ChainStep.EXPLICIT
    assert chain.resolve("F/A-18A", "US", "USMC").nationality == "US"
    assert chain.resolve("Tornado IDS", "FRG/DK").nationality == "FRG"
    assert chain.resolve("F-35XD DRAKEN", "FRG/DK").step == ChainStep.PATTERN
    assert chain.resolve("CF-18A", "NE/CAN").nationality == "CAN"
    assert chain.resolve("CF-18A", "NE/CAN").step == ChainStep.REFERENCE
    assert chain.resolve("Alpha Jet (DK)", "FRG/DK").nationality == "DK"
    assert chain.resolve("Alpha Jet (DK)", "FRG/DK").step == ChainStep.NAME_SUFFIX
    assert chain.resolve("Alpha Jet", "FRG/DK").nationality == "FRG"
    assert chain.resolve("Alpha Jet", "NE/CAN").nationality == "NE"
    assert chain.resolve("Buccaneer S2B", "UK(RAF)").nationality == "UK"
    assert chain.resolve("Buccaneer S2B", "UK(RAF)").step == ChainStep.DEFAULT


def test_reference_nation_outside_the_raid_is_ignored() -> None:
    chain = NationalityChain(reference=AircraftReference([AircraftRecord("F-15C", "US")]))
    resolution = chain.resolve("F-15C", "NE/CAN")
    assert resolution.nationality == "NE"
    assert resolution.step == ChainStep.DEFAULT


def test_trace_entry_names_the_step() -> None:
    resolution = NationalityChain().resolve("F-16C", "US")
    assert resolution.trace_entry("F-16C").render() == "F-16C Nationality: US (default)"


def test_chain_settles_every_shipped_package_aircraft() -> None:
    table = shipped_tables(BALTIC).get("D3")
    chain = NationalityChain.for_table(table, shipped_reference(BALTIC))
    seen = 0
    for rolls in table.nationality_rolls.values():
        for _, package in rolls:
            for template in package.flights:
                resolution = chain.resolve(template.fixed.name, package.code, template.nationality)
                assert resolution.nationality
                assert not is_composite(resolution.nationality)
                assert resolution.nationality in chain.members(package.code)
                seen += 1
    assert seen > 0


SPLIT = AircraftRoll("F-4G/F-4E", None, AircraftEntry("F-4G/F-4E", split=("F-4G", "F-4E")), ())


def _split_context(rolls=()) -> ResolutionContext:
    return ResolutionContext(partial_nation_table("D"), ParamBag(), SequenceRollEngine(rolls))


def test_split_shares_keep_every_flight() -> None:
    assert split_shares(4, 2) == [2, 2]
    assert split_shares(3, 2) == [2, 1]
    assert split_shares(1, 2) == [1, 0]
    assert split_shares(5, 3) == [2, 2, 1]


@given(flight_count=st.integers(min_value=1, max_value=12), airframes=st.integers(min_value=2, max_value=4))
@settings(max_examples=50)
def test_split_shares_sum_to_the_count(flight_count: int, airframes: int) -> None:
    shares = split_shares(flight_count, airframes)
    assert sum(shares) == flight_count
    assert max(shares) - min(shares) <= 1


def test_odd_split_gives_the_remainder_to_the_first_airframe() -> None:
    flights = tasking_flights(_split_context(), TaskingDefinition("SEAD", 3, 2), "US", SPLIT)
    assert [(f.aircraft_type, f.flight_count) for f in flights] == [("F-4G", 2), ("F-4E", 1)]


def test_single_flight_split_skips_the_empty_share() -> None:
    flights = tasking_flights(_split_context(), TaskingDefinition("SEAD", 1, 2), "US", SPLIT)
    assert [(f.aircraft_type, f.flight_count) for f in flights] == [("F-4G", 1)]


def test_odd_split_rolls_ordnance_for_every_flight() -> None:
    ctx = _split_context([1, 5, 9])
    ordnance = rule_ordnance(ctx, NATO_STRIKE, "SEAD")
    flights = tasking_flights(ctx, TaskingDefinition("SEAD", 3, 2), "US", SPLIT, ordnance)
    assert [f.aircraft_type for f in flights] == ["F-4G", "F-4G", "F-4E"]
    assert [entry.render() for entry in ctx.log.entries] == [
        "SEAD F-4G Flight 1 Ordnance: 1",
        "SEAD F-4G Flight 2 Ordnance: 5",
        "SEAD F-4E Flight 1 Ordnance: 9",
    ]
    assert flights[-1].ordnance == "Bombs/CBU/Rockets + EOGM + LGB/EOGB + ARM"
