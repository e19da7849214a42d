from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from oob_generator.domain.results import TraceEntry
from oob_generator.rules.tables import NationEntry, NationMap, NationalityDefinition
from oob_generator.sim.rng import Roll, RollEngine
from oob_generator.systems.ranges import RangeSource, roll_on


@dataclass(frozen=True)
class NationRoll:
    name: str
    entry: NationEntry
    roll: Roll

    @property
    def trace(self) -> tuple[TraceEntry, ...]:
        return (self.roll.entry,)


@dataclass(frozen=True)
class NationalityRoll:
    code: str
    definition: NationalityDefinition
    roll: Roll

    @property
    def trace(self) -> tuple[TraceEntry, ...]:
        return (self.roll.entry,)


def resolve_nation(nations: NationMap, roller: RollEngine, label: str = "Nation") -> NationRoll:
    entry, roll = roll_on(nations, roller, label)
    return NationRoll(name=entry.name, entry=entry, roll=roll)


def normalize_nationality(code: str, aliases: Mapping[str, str]) -> str:
    """Fold a synonym nationality code onto its canonical code."""
    code = code.strip()
    return aliases.get(code, code)


def roll_nationality(
    rolls: RangeSource[NationalityDefinition], roller: RollEngine, label: str = "Nationality"
) -> NationalityRoll:
    definition, roll = roll_on(rolls, roller, label)
    return NationalityRoll(code=definition.code, definition=definition, roll=roll)
