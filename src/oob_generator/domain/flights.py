"""Flight records produced by table resolution."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TypeAlias

from oob_generator.domain.types import Faction

GroupKey: TypeAlias = tuple[str, str, str, int, str, str | None]


@dataclass(frozen=True)
class FlightRecord:
    faction: Faction
    nationality: str
    aircraft_type: str
    flight_size: int
    flight_count: int
    tasking: str
    ordnance: str | None = None
    aircraft_id: str | None = None
    actual_nationality: str | None = None
    source_table: str | None = None

    @property
    def group_key(self) -> GroupKey:
        return (
            self.faction.value,
            self.tasking,
            self.aircraft_type,
            self.flight_size,
            self.nationality,
            self.ordnance,
        )

    @property
    def aircraft_total(self) -> int:
        return self.flight_size * self.flight_count

    def with_count(self, flight_count: int) -> "FlightRecord":
        return replace(self, flight_count=flight_count)
