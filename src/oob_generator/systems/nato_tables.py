"""NATO table strategies (Red Storm A-F, Baltic Approaches A2-F2 and D3)."""

from __future__ import annotations

from oob_generator.domain.flights import FlightRecord
from oob_generator.domain.params import ParameterError
from oob_generator.domain.results import Result
from oob_generator.domain.types import Tasking
from oob_generator.rules.tables import NationMap
from oob_generator.systems.common import (
    STRIKE_TASKINGS,
    ResolutionContext,
    build_result,
    flight,
    lookup,
    roll_aircraft,
    roll_nation,
    rule_ordnance,
    scenario_date,
    settle_nation,
    table_ordnance,
    tasking_flights,
)
from oob_generator.systems.nations import normalize_nationality, roll_nationality
from oob_generator.systems.ordnance import NATO_BALTIC_STRIKE, NATO_STRIKE, OrdnanceRule
from oob_generator.systems.raid import group_flights
from oob_generator.systems.ranges import TableDataError
from oob_generator.view import format as fmt


def _single_flight(
    ctx: ResolutionContext, nations: NationMap, *, flight_size: int, tasking: str
) -> FlightRecord:
    nation = roll_nation(ctx, nations)
    aircraft = roll_aircraft(ctx, nation.entry.aircraft)
    nationality = settle_nation(ctx, nation.name, aircraft.aircraft_type)
    return flight(
        ctx,
        nationality=nationality,
        aircraft_type=aircraft.aircraft_type,
        aircraft_id=aircraft.aircraft_id,
        tasking=tasking,
        flight_size=flight_size,
        actual_nationality=nation.name if nationality != nation.name else None,
    )


def _zoned_nations(ctx: ResolutionContext, zoned: dict[str, dict[str, NationMap]]) -> NationMap:
    zone = str(ctx.params.require("ataf_zone", ctx.table_id))
    dates = lookup(zoned, zone, "ATAF zone", ctx.table_id)
    return dates[scenario_date(ctx, dates)]


def table_a(ctx: ResolutionContext) -> Result:
    """QRA: zone and date pick the nation table; one CAP flight."""
    record = _single_flight(
        ctx, _zoned_nations(ctx, ctx.table.variants), flight_size=ctx.table.flight_size, tasking="CAP"
    )
    return build_result(ctx, [record], [fmt.nation_line(record)])


def table_b(ctx: ResolutionContext) -> Result:
    record = _single_flight(
        ctx, _zoned_nations(ctx, ctx.table.zones), flight_size=ctx.table.flight_size, tasking="CAP"
    )
    return build_result(ctx, [record], [fmt.nation_line(record)])


def _dated_raid(ctx: ResolutionContext, rule: OrdnanceRule) -> Result:
    """Taskings whose nation tables depend on the scenario date."""
    dated = {date: None for tasking in ctx.table.taskings for date in tasking.nations_by_date}
    date = scenario_date(ctx, dated)
    flights = []
    for tasking in ctx.table.taskings:
        nations = lookup(tasking.nations_by_date, date, f"{tasking.name} scenario date", ctx.table_id)
        nation = roll_nation(ctx, nations, f"{tasking.name} Nation")
        aircraft = roll_aircraft(ctx, nation.entry.aircraft, f"{tasking.name} Aircraft")
        ordnance = None
        if tasking.name in STRIKE_TASKINGS:
            ordnance = rule_ordnance(ctx, rule, tasking.name)
        flights.extend(tasking_flights(ctx, tasking, nation.name, aircraft, ordnance))
    grouped = group_flights(flights)
    return build_result(ctx, grouped, [fmt.raid_line(f) for f in grouped])


def table_c(ctx: ResolutionContext) -> Result:
    """Red Storm strike raid: CAP, SEAD and Bombing with rolled ordnance per flight."""
    return _dated_raid(ctx, NATO_STRIKE)


def table_c2(ctx: ResolutionContext) -> Result:
    return _dated_raid(ctx, NATO_BALTIC_STRIKE)


def table_d(ctx: ResolutionContext) -> Result:
    flights = []
    for tasking in ctx.table.taskings:
        if tasking.nations is None:
            raise TableDataError(f"Tasking {tasking.name} of Table {ctx.table_id} has no nations")
        nation = roll_nation(ctx, tasking.nations, f"{tasking.name} Nation")
        aircraft = roll_aircraft(ctx, nation.entry.aircraft, f"{tasking.name} Aircraft")
        flights.extend(tasking_flights(ctx, tasking, nation.name, aircraft))
    grouped = group_flights(flights)
    return build_result(ctx, grouped, [fmt.raid_line(f) for f in grouped])


def table_d2(ctx: ResolutionContext) -> Result:
    """Baltic deep strike: five taskings, strike loadouts from the table's ordnance rolls."""
    flights = []
    for tasking in ctx.table.taskings:
        if tasking.nations is None:
            raise TableDataError(f"Tasking {tasking.name} of Table {ctx.table_id} has no nations")
        nation = roll_nation(ctx, tasking.nations, f"{tasking.name} Nation")
        aircraft = roll_aircraft(ctx, nation.entry.aircraft, f"{tasking.name} Aircraft")
        ordnance = None
        table = ctx.table.ordnance_rolls.get(tasking.name)
        if tasking.name in STRIKE_TASKINGS and table is not None:
            ordnance = table_ordnance(ctx, table, tasking.name)
        flights.extend(tasking_flights(ctx, tasking, nation.name, aircraft, ordnance))
    grouped = group_flights(flights)
    return build_result(ctx, grouped, [fmt.raid_line(f) for f in grouped])


def table_d3(ctx: ResolutionContext) -> Result:
    """Naval strike: the date-keyed nationality roll picks a pre-built raid package."""
    date = scenario_date(ctx, ctx.table.nationality_rolls)
    package = roll_nationality(ctx.table.nationality_rolls[date], ctx.roller, f"Nationality ({date})")
    ctx.log.extend(package.trace)

    chain = ctx.chain()
    raid_nationality = package.code
    flights = []
    for template in package.definition.flights:
        if template.fixed is None:
            raise TableDataError(f"Table {ctx.table_id} packages must name their aircraft")
        aircraft_type = template.fixed.name
        resolution = chain.resolve(aircraft_type, raid_nationality, template.nationality)
        ctx.log.extend((resolution.trace_entry(aircraft_type),))
        flights.append(
            flight(
                ctx,
                nationality=resolution.nationality,
                aircraft_type=aircraft_type,
                aircraft_id=template.fixed.aircraft_id,
                tasking=template.tasking,
                flight_size=template.flight_size,
                flight_count=template.flight_count,
                actual_nationality=raid_nationality,
            )
        )
    grouped = group_flights(flights)
    return build_result(ctx, grouped, [fmt.raid_line(f) for f in grouped])


def _nationality_param(ctx: ResolutionContext):
    code = str(ctx.params.require("nationality", ctx.table_id))
    code = normalize_nationality(code, ctx.table.nationality_aliases)
    return code, lookup(ctx.table.nationalities, code, "nationality", ctx.table_id)


def table_e(ctx: ResolutionContext) -> Result:
    """Combat rescue: the crew's nationality selects predefined flights."""
    code, definition = _nationality_param(ctx)
    flights = []
    for template in definition.flights:
        if template.aircraft is None:
            raise TableDataError(f"Flight {template.tasking} of Table {ctx.table_id} has no aircraft roll")
        aircraft = roll_aircraft(ctx, template.aircraft, f"{template.tasking} Aircraft")
        flights.append(
            flight(
                ctx,
                nationality=code,
                aircraft_type=aircraft.aircraft_type,
                aircraft_id=aircraft.aircraft_id,
                tasking=template.tasking,
                flight_size=template.flight_size,
                flight_count=template.flight_count,
            )
        )
    return build_result(ctx, flights, [fmt.bare_line(f) for f in flights], raid_type=definition.name)


def table_e2(ctx: ResolutionContext) -> Result:
    """Baltic combat rescue; FRG CSAR helicopters depend on the hex type."""
    code, definition = _nationality_param(ctx)
    flights = []
    for template in definition.flights:
        if template.by_hex:
            hex_type = ctx.params.hex_type
            if hex_type is None:
                raise ParameterError(f"hexType (land/sea) is required for {code} {template.tasking} flights")
            entry = lookup(
                {h.value: e for h, e in template.by_hex.items()}, hex_type.value, "hex type", ctx.table_id
            )
            ctx.log.add(f"{template.tasking} Aircraft", f"{hex_type.value} hex -> {entry.name}")
            aircraft_type, aircraft_id = entry.name, entry.aircraft_id
        elif template.aircraft is not None:
            aircraft = roll_aircraft(ctx, template.aircraft, f"{template.tasking} Aircraft")
            aircraft_type, aircraft_id = aircraft.aircraft_type, aircraft.aircraft_id
        elif template.fixed is not None:
            aircraft_type, aircraft_id = template.fixed.name, template.fixed.aircraft_id
        else:
            raise TableDataError(f"Flight {template.tasking} of Table {ctx.table_id} has no aircraft")
        flights.append(
            flight(
                ctx,
                nationality=code,
                aircraft_type=aircraft_type,
                aircraft_id=aircraft_id,
                tasking=template.tasking,
                flight_size=template.flight_size,
                flight_count=template.flight_count,
            )
        )
    return build_result(ctx, flights, [fmt.bare_line(f) for f in flights], raid_type=definition.name)


def table_f(ctx: ResolutionContext) -> Result:
    mission_type = str(ctx.params.require("mission_type", ctx.table_id))
    mission = lookup(ctx.table.mission_types, mission_type, "mission type", ctx.table_id)
    if mission.nations is None:
        raise TableDataError(f"Mission {mission_type} of Table {ctx.table_id} has no nations")
    nation = roll_nation(ctx, mission.nations)
    aircraft = roll_aircraft(ctx, nation.entry.aircraft)
    record = flight(
        ctx,
        nationality=nation.name,
        aircraft_type=aircraft.aircraft_type,
        aircraft_id=aircraft.aircraft_id,
        tasking=mission_type,
        flight_size=mission.flight_size,
        flight_count=mission.flight_count,
    )
    return build_result(ctx, [record], [fmt.raid_line(record)])


def _dated_or_plain_nations(ctx: ResolutionContext) -> NationMap:
    if ctx.table.nations is not None and not ctx.table.date_ranges:
        return ctx.table.nations
    return ctx.table.date_ranges[scenario_date(ctx, ctx.table.date_ranges)]


def table_a2(ctx: ResolutionContext) -> Result:
    """Baltic QRA, also used for the A2-SE Swedish variant."""
    record = _single_flight(
        ctx, _dated_or_plain_nations(ctx), flight_size=ctx.table.flight_size, tasking="CAP"
    )
    return build_result(ctx, [record], [fmt.slot_line(record, "QRA")])


def table_b2(ctx: ResolutionContext) -> Result:
    record = _single_flight(
        ctx, _dated_or_plain_nations(ctx), flight_size=ctx.table.flight_size, tasking="CAP"
    )
    return build_result(ctx, [record], [fmt.slot_line(record, "CAP")])


def table_f2(ctx: ResolutionContext) -> Result:
    if ctx.table.nations is None:
        raise TableDataError(f"Table {ctx.table_id} has no nations")
    mission_type = ctx.params.mission_type or Tasking.MARITIME_PATROL.value
    nation = roll_nation(ctx, ctx.table.nations)
    aircraft = roll_aircraft(ctx, nation.entry.aircraft)
    record = flight(
        ctx,
        nationality=nation.name,
        aircraft_type=aircraft.aircraft_type,
        aircraft_id=aircraft.aircraft_id,
        tasking=mission_type,
        flight_size=ctx.table.flight_size,
        flight_count=ctx.table.flight_count,
    )
    return build_result(ctx, [record], [fmt.mission_line(record)])


NATO_STRATEGIES = {
    "A": table_a,
    "B": table_b,
    "C": table_c,
    "D": table_d,
    "E": table_e,
    "F": table_f,
    "A2": table_a2,
    "A2-SE": table_a2,
    "B2": table_b2,
    "C2": table_c2,
    "D2": table_d2,
    "D3": table_d3,
    "E2": table_e2,
    "F2": table_f2,
}
