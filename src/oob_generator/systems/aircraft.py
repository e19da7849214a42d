from __future__ import annotations

from dataclasses import dataclass

from oob_generator.domain.results import TraceEntry
from oob_generator.domain.types import DIE_SIDES
from oob_generator.rules.tables import AircraftEntry, AircraftMap
from oob_generator.sim.rng import RollEngine
from oob_generator.systems.ranges import UnresolvedRollError, resolve, roll_on


@dataclass(frozen=True)
class AircraftRoll:
    aircraft_type: str
    aircraft_id: str | None
    entry: AircraftEntry
    trace: tuple[TraceEntry, ...]

    @property
    def split(self) -> tuple[str, ...]:
        return self.entry.split


def sub_roll_label(label: str) -> str:
    prefix = label[: -len("Aircraft")].strip() if label.endswith("Aircraft") else label
    return f"{prefix} Sub-roll" if prefix else "Sub-roll"


def resolve_aircraft(
    aircraft: AircraftMap, roller: RollEngine, label: str = "Aircraft"
) -> AircraftRoll:
    """Roll an aircraft, chaining one variant sub-roll when the entry has variants."""
    entry, roll = roll_on(aircraft, roller, label)
    trace: tuple[TraceEntry, ...] = (roll.entry,)
    if not entry.variants:
        return AircraftRoll(entry.name, entry.aircraft_id, entry, trace)

    sub_label = sub_roll_label(label)
    sub_roll = roller.roll(DIE_SIDES, sub_label)
    trace += (sub_roll.entry,)
    try:
        variant = resolve(entry.variants, sub_roll.value)
    except UnresolvedRollError as exc:
        raise UnresolvedRollError(
            f"{sub_label}: no {entry.name} variant covers roll {sub_roll.value}", trace
        ) from exc
    return AircraftRoll(variant.name, variant.aircraft_id, variant, trace)
