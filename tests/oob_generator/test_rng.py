from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from oob_generator.sim.rng import (
    FixedRollEngine,
    RandomRollEngine,
    RollExhaustedError,
    SequenceRollEngine,
    derive_seed,
)


def test_derive_seed_is_stable_per_stream() -> None:
    assert derive_seed(7, stream="oob") == derive_seed(7, stream="oob")
    assert derive_seed(7, stream="oob") != derive_seed(7, stream="other")
    assert derive_seed(7, stream="oob") != derive_seed(8, stream="oob")


@given(seed=st.integers(min_value=0, max_value=2**32))
@settings(max_examples=25)
def test_seeded_engine_is_reproducible_and_in_range(seed: int) -> None:
    first = RandomRollEngine.from_seed(seed)
    second = RandomRollEngine.from_seed(seed)
    a = [first.roll(10, "Roll").value for _ in range(20)]
    b = [second.roll(10, "Roll").value for _ in range(20)]
    assert a == b
    assert all(1 <= value <= 10 for value in a)


def test_roll_carries_trace_entry() -> None:
    roll = SequenceRollEngine([4]).roll(10, "Nation")
    assert roll.value == 4
    assert roll.entry.render() == "Nation: 4"


def test_sequence_engine_counts_and_exhausts() -> None:
    roller = SequenceRollEngine([1, 2])
    roller.roll(10, "a")
    assert roller.consumed == 1
    assert roller.remaining == 1
    roller.roll(10, "b")
    with pytest.raises(RollExhaustedError):
        roller.roll(10, "c")


def test_sequence_engine_rejects_out_of_range_values() -> None:
    with pytest.raises(ValueError):
        SequenceRollEngine([11]).roll(10, "Nation")


def test_fixed_engine_clamps_to_die() -> None:
    assert FixedRollEngine(12).roll(10, "x").value == 10
    assert FixedRollEngine(3).roll(6, "x").value == 3
    with pytest.raises(ValueError):
        FixedRollEngine(0).roll(10, "x")
