"""Raid package assembly: flight grouping and joint-raid nationality resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping

from oob_generator.domain.flights import FlightRecord, GroupKey
from oob_generator.domain.results import TraceEntry
from oob_generator.rules.aircraft import AircraftReference, trailing_code
from oob_generator.rules.tables import TableDefinition

COMPOSITE_SEPARATOR = "/"


def group_flights(flights: Iterable[FlightRecord]) -> list[FlightRecord]:
    """Merge flights with equal group keys, summing their counts.

    Output keeps the order in which each group first appeared.
    """
    grouped: dict[GroupKey, FlightRecord] = {}
    for flight in flights:
        key = flight.group_key
        existing = grouped.get(key)
        if existing is None:
            grouped[key] = flight
        else:
            grouped[key] = existing.with_count(existing.flight_count + flight.flight_count)
    return list(grouped.values())


class ChainStep(str, Enum):
    EXPLICIT = "explicit"
    PATTERN = "pattern"
    REFERENCE = "reference"
    NAME_SUFFIX = "name suffix"
    DEFAULT = "default"


@dataclass(frozen=True)
class NationalityResolution:
    nationality: str
    step: ChainStep

    def trace_entry(self, aircraft_type: str) -> TraceEntry:
        return TraceEntry(f"{aircraft_type} Nationality", f"{self.nationality} ({self.step.value})")


def is_composite(nationality: str | None) -> bool:
    return bool(nationality) and COMPOSITE_SEPARATOR in nationality


@dataclass(frozen=True)
class NationalityChain:
    """Ordered fallback deciding which nation flies an aircraft in a joint raid."""

    patterns: Mapping[str, Mapping[str, tuple[str, ...]]] = field(default_factory=dict)
    defaults: Mapping[str, str] = field(default_factory=dict)
    aliases: Mapping[str, str] = field(default_factory=dict)
    reference: AircraftReference | None = None

    @staticmethod
    def for_table(table: TableDefinition, reference: AircraftReference | None) -> "NationalityChain":
        return NationalityChain(
            patterns=table.nationality_patterns,
            defaults=table.default_nationalities,
            aliases=table.nationality_aliases,
            reference=reference,
        )

    def canonical(self, nationality: str) -> str:
        return self.aliases.get(nationality, nationality)

    def members(self, raid_nationality: str) -> tuple[str, ...]:
        if is_composite(raid_nationality):
            return tuple(
                self.canonical(part.strip())
                for part in raid_nationality.split(COMPOSITE_SEPARATOR)
                if part.strip()
            )
        return (self.canonical(raid_nationality),)

    def resolve(
        self, aircraft_type: str, raid_nationality: str, explicit: str | None = None
    ) -> NationalityResolution:
        if explicit and not is_composite(explicit):
            return NationalityResolution(self.canonical(explicit), ChainStep.EXPLICIT)

        upper = aircraft_type.upper()
        for nation, fragments in self.patterns.get(raid_nationality, {}).items():
            if any(fragment.upper() in upper for fragment in fragments):
                return NationalityResolution(nation, ChainStep.PATTERN)

        eligible = self.members(raid_nationality)
        if self.reference is not None:
            home = self.reference.home_nation(aircraft_type)
            if home is not None and self.canonical(home) in eligible:
                return NationalityResolution(self.canonical(home), ChainStep.REFERENCE)

        code = trailing_code(aircraft_type)
        if code is not None and self.canonical(code) in eligible:
            return NationalityResolution(self.canonical(code), ChainStep.NAME_SUFFIX)

        default = self.defaults.get(raid_nationality) or (eligible[0] if eligible else raid_nationality)
        return NationalityResolution(default, ChainStep.DEFAULT)
