from __future__ import annotations

import pytest
from hypothesis import given, settings

from oob_generator.domain.results import TraceEntry
from oob_generator.sim.rng import SequenceRollEngine
from oob_generator.systems.ranges import (
    RollRange,
    TableDataError,
    UnresolvedRollError,
    build_range_map,
    coverage_gaps,
    overlaps,
    parse_range,
    resolve,
    roll_on,
)
from tests.helpers.strategies import partition_strategy, roll_strategy


def test_parse_range_accepts_spans_and_single_values() -> None:
    assert parse_range("3-5") == RollRange(3, 5)
    assert parse_range(" 7 ") == RollRange(7, 7)
    assert parse_range("1 - 10") == RollRange(1, 10)
    assert parse_range("4-4").key == "4"
    assert parse_range("2-6").key == "2-6"


@pytest.mark.parametrize("key", ["", "a-b", "5-3", "0-2", "-3", "1-2-3", "x"])
def test_parse_range_rejects_malformed_keys(key: str) -> None:
    with pytest.raises(TableDataError):
        parse_range(key)


def test_resolve_returns_first_match() -> None:
    range_map = build_range_map({"1-5": "first", "4-10": "second"})
    assert resolve(range_map, 4) == "first"
    assert resolve(range_map, 6) == "second"
    assert resolve({"1-3": "a", "4-10": "b"}, 3) == "a"


def test_resolve_without_match_raises() -> None:
    with pytest.raises(UnresolvedRollError):
        resolve(build_range_map({"1-5": "a"}), 7)


def test_roll_on_attaches_trace_to_unresolved_roll() -> None:
    roller = SequenceRollEngine([7])
    with pytest.raises(UnresolvedRollError) as info:
        roll_on({"1-5": "a"}, roller, "Nation")
    assert info.value.trace == (TraceEntry("Nation", 7),)
    assert "Nation" in str(info.value)


def test_coverage_helpers_report_gaps_and_overlaps() -> None:
    range_map = build_range_map({"1-3": "a", "3-6": "b", "9-10": "c"})
    assert coverage_gaps(range_map) == [7, 8]
    assert overlaps(range_map) == [3]


@given(partition=partition_strategy(), value=roll_strategy())
@settings(max_examples=50)
def test_resolve_matches_the_covering_range(partition, value: int) -> None:
    entry = resolve(partition, value)
    roll_range = partition[entry][0]
    assert roll_range.contains(value)
    assert coverage_gaps(partition) == []
    assert overlaps(partition) == []
