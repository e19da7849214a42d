"""Inclusive roll ranges and first-match lookup."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence, TypeVar, Union

from oob_generator.domain.results import TraceEntry
from oob_generator.domain.types import DIE_SIDES
from oob_generator.sim.rng import Roll, RollEngine

T = TypeVar("T")


class TableDataError(ValueError):
    """Malformed table data met while loading or parsing."""


class UnresolvedRollError(ValueError):
    """A roll value fell outside every range of a table."""

    def __init__(self, message: str, trace: Iterable[TraceEntry] = ()) -> None:
        super().__init__(message)
        self.trace = tuple(trace)


@dataclass(frozen=True)
class RollRange:
    low: int
    high: int

    def contains(self, value: int) -> bool:
        return self.low <= value <= self.high

    @property
    def key(self) -> str:
        return str(self.low) if self.low == self.high else f"{self.low}-{self.high}"


RangeMap = Sequence[tuple[RollRange, T]]
RangeSource = Union[RangeMap[T], Mapping[str, T]]


def parse_range(key: str) -> RollRange:
    if not isinstance(key, str):
        raise TableDataError(f"Range key must be a string, got {key!r}")
    text = key.strip()
    low_text, sep, high_text = text.partition("-")
    if not sep:
        high_text = low_text
    low_text, high_text = low_text.strip(), high_text.strip()
    if not low_text.isdigit() or not high_text.isdigit():
        raise TableDataError(f"Malformed range key '{key}'")
    low, high = int(low_text), int(high_text)
    if low < 1:
        raise TableDataError(f"Range key '{key}' must start at 1 or above")
    if high < low:
        raise TableDataError(f"Range key '{key}' has reversed bounds")
    return RollRange(low, high)


def build_range_map(raw: Mapping[str, T]) -> tuple[tuple[RollRange, T], ...]:
    return tuple((parse_range(key), value) for key, value in raw.items())


def _as_pairs(range_map: RangeSource[T]) -> RangeMap[T]:
    if isinstance(range_map, Mapping):
        return build_range_map(range_map)
    return range_map


def resolve(range_map: RangeSource[T], value: int) -> T:
    """Return the entry of the first range containing ``value``."""
    for roll_range, entry in _as_pairs(range_map):
        if roll_range.contains(value):
            return entry
    raise UnresolvedRollError(f"No table entry covers roll {value}")


def roll_on(
    range_map: RangeSource[T], roller: RollEngine, label: str, sides: int = DIE_SIDES
) -> tuple[T, Roll]:
    roll = roller.roll(sides, label)
    try:
        entry = resolve(range_map, roll.value)
    except UnresolvedRollError as exc:
        raise UnresolvedRollError(f"{label}: no table entry covers roll {roll.value}", (roll.entry,)) from exc
    return entry, roll


def coverage_gaps(range_map: RangeSource[T], sides: int = DIE_SIDES) -> list[int]:
    pairs = _as_pairs(range_map)
    return [value for value in range(1, sides + 1) if not any(r.contains(value) for r, _ in pairs)]


def overlaps(range_map: RangeSource[T], sides: int = DIE_SIDES) -> list[int]:
    pairs = _as_pairs(range_map)
    return [
        value
        for value in range(1, sides + 1)
        if sum(1 for r, _ in pairs if r.contains(value)) > 1
    ]
