"""Building blocks shared by the per-table strategies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, TypeVar

from oob_generator.domain.flights import FlightRecord
from oob_generator.domain.params import ParamBag, ParameterError
from oob_generator.domain.results import Result, TraceEntry
from oob_generator.domain.types import Tasking
from oob_generator.rules.aircraft import AircraftReference
from oob_generator.rules.tables import (
    AircraftMap,
    NationEntry,
    NationMap,
    OrdnanceMap,
    TableDefinition,
    TaskingDefinition,
)
from oob_generator.sim.rng import RollEngine
from oob_generator.systems.aircraft import AircraftRoll, resolve_aircraft
from oob_generator.systems.nations import NationRoll, resolve_nation
from oob_generator.systems.ordnance import (
    OrdnanceRestriction,
    OrdnanceRoll,
    OrdnanceRule,
    roll_ordnance,
    roll_ordnance_table,
)
from oob_generator.systems.raid import NationalityChain, is_composite
from oob_generator.view.format import join_lines

T = TypeVar("T")

STRIKE_TASKINGS = frozenset({Tasking.SEAD.value, Tasking.BOMBING.value})

# (airframe, flight number, trace label) -> loadout for that flight
OrdnanceSource = Callable[[str, int, str], OrdnanceRoll]


class TraceLog:
    """Append-only roll trace for one resolution call."""

    def __init__(self) -> None:
        self._entries: list[TraceEntry] = []

    def extend(self, entries: Iterable[TraceEntry]) -> None:
        self._entries.extend(entries)

    def add(self, label: str, value: int | str) -> None:
        self._entries.append(TraceEntry(label, value))

    @property
    def entries(self) -> tuple[TraceEntry, ...]:
        return tuple(self._entries)


@dataclass
class ResolutionContext:
    table: TableDefinition
    params: ParamBag
    roller: RollEngine
    reference: AircraftReference | None = None
    log: TraceLog = field(default_factory=TraceLog)

    @property
    def table_id(self) -> str:
        return self.table.table_id

    def chain(self) -> NationalityChain:
        return NationalityChain.for_table(self.table, self.reference)


def lookup(mapping: Mapping[str, T], key: str, what: str, table_id: str) -> T:
    if key not in mapping:
        known = ", ".join(mapping) or "none"
        raise ParameterError(f"Unknown {what} '{key}' for Table {table_id} (available: {known})")
    return mapping[key]


def scenario_date(ctx: ResolutionContext, available: Mapping[str, object]) -> str:
    """Translate the scenarioDate param to a date key present in ``available``."""
    raw = ctx.params.require("scenario_date", ctx.table_id)
    if isinstance(raw, int):
        if raw not in ctx.table.date_ordinals:
            raise ParameterError(f"Scenario date ordinal {raw} is not defined for Table {ctx.table_id}")
        key = ctx.table.date_ordinals[raw]
    else:
        key = str(raw).strip()
    lookup(available, key, "scenario date", ctx.table_id)
    return key


def roll_nation(ctx: ResolutionContext, nations: NationMap, label: str = "Nation") -> NationRoll:
    nation = resolve_nation(nations, ctx.roller, label)
    ctx.log.extend(nation.trace)
    return nation


def sole_nation(nations: NationMap) -> NationEntry | None:
    """The nation of a single-entry map, which needs no roll."""
    if len(nations) == 1:
        return nations[0][1]
    return None


def roll_aircraft(ctx: ResolutionContext, aircraft: AircraftMap, label: str = "Aircraft") -> AircraftRoll:
    rolled = resolve_aircraft(aircraft, ctx.roller, label)
    ctx.log.extend(rolled.trace)
    return rolled


def settle_nation(ctx: ResolutionContext, nationality: str, aircraft_type: str) -> str:
    """Settle a composite nation (``NE/CAN``) on the member flying ``aircraft_type``."""
    if not is_composite(nationality):
        return nationality
    resolution = ctx.chain().resolve(aircraft_type, nationality)
    ctx.log.extend((resolution.trace_entry(aircraft_type),))
    return resolution.nationality


def flight(
    ctx: ResolutionContext,
    *,
    nationality: str,
    aircraft_type: str,
    tasking: str,
    flight_size: int,
    flight_count: int = 1,
    ordnance: str | None = None,
    aircraft_id: str | None = None,
    actual_nationality: str | None = None,
) -> FlightRecord:
    if aircraft_id is None and ctx.reference is not None:
        record = ctx.reference.lookup(aircraft_type)
        if record is not None:
            aircraft_id = record.aircraft_id
    return FlightRecord(
        faction=ctx.table.faction,
        nationality=nationality,
        aircraft_type=aircraft_type,
        flight_size=flight_size,
        flight_count=flight_count,
        tasking=tasking,
        ordnance=ordnance,
        aircraft_id=aircraft_id,
        actual_nationality=actual_nationality,
        source_table=ctx.table_id,
    )


def split_shares(flight_count: int, airframes: int) -> list[int]:
    """Even shares of ``flight_count``; earlier airframes take the remainder."""
    base, extra = divmod(flight_count, airframes)
    return [base + (1 if index < extra else 0) for index in range(airframes)]


def tasking_flights(
    ctx: ResolutionContext,
    tasking: TaskingDefinition,
    nationality: str,
    aircraft: AircraftRoll,
    ordnance: OrdnanceSource | None = None,
) -> list[FlightRecord]:
    """Flights of one tasking sharing a single nation and aircraft roll.

    A split entry shares the tasking's flights between its airframes.
    With an ordnance source each flight rolls its own loadout.
    """
    if aircraft.split:
        airframes = [(name, None) for name in aircraft.split]
        shares = split_shares(tasking.flight_count, len(airframes))
    else:
        airframes = [(aircraft.aircraft_type, aircraft.aircraft_id)]
        shares = [tasking.flight_count]

    flights: list[FlightRecord] = []
    for (airframe, aircraft_id), per_airframe in zip(airframes, shares):
        if per_airframe == 0:
            continue
        if ordnance is None:
            flights.append(
                flight(
                    ctx,
                    nationality=nationality,
                    aircraft_type=airframe,
                    aircraft_id=aircraft_id,
                    tasking=tasking.name,
                    flight_size=tasking.flight_size,
                    flight_count=per_airframe,
                )
            )
            continue
        prefix = f"{tasking.name} {airframe}" if aircraft.split else tasking.name
        for number in range(1, per_airframe + 1):
            loadout = ordnance(airframe, number, f"{prefix} Flight {number} Ordnance")
            ctx.log.extend(loadout.trace)
            flights.append(
                flight(
                    ctx,
                    nationality=nationality,
                    aircraft_type=airframe,
                    aircraft_id=aircraft_id,
                    tasking=tasking.name,
                    flight_size=tasking.flight_size,
                    ordnance=loadout.descriptor,
                )
            )
    return flights


def build_result(
    ctx: ResolutionContext,
    flights: Iterable[FlightRecord],
    lines: Iterable[str],
    *,
    raid_type: str | None = None,
) -> Result:
    return Result(
        text=join_lines(lines),
        flights=tuple(flights),
        trace=ctx.log.entries,
        table_id=ctx.table_id,
        faction=ctx.table.faction,
        raid_type=raid_type or ctx.table.raid_type,
        notes=tuple(ctx.table.notes.values()),
    )


def rule_ordnance(ctx: ResolutionContext, rule: OrdnanceRule, tasking: str) -> OrdnanceSource:
    def _roll(airframe: str, number: int, label: str) -> OrdnanceRoll:
        return roll_ordnance(rule, ctx.roller, airframe, tasking, label)

    return _roll


def table_ordnance(
    ctx: ResolutionContext,
    table: OrdnanceMap,
    tasking: str,
    restriction: OrdnanceRestriction | None = None,
) -> OrdnanceSource:
    def _roll(airframe: str, number: int, label: str) -> OrdnanceRoll:
        return roll_ordnance_table(
            table, ctx.roller, label, aircraft_type=airframe, tasking=tasking, restriction=restriction
        )

    return _roll
